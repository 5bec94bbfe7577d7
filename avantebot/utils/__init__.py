"""Utility helpers for AvanteBot."""

from avantebot.utils.formatting import (
    CAPTION_MAX_LENGTH,
    MESSAGE_MAX_LENGTH,
    callback_data_fits,
    truncate_text,
)
from avantebot.utils.http import DEFAULT_TIMEOUT, request_with_ssl_fallback
from avantebot.utils.links import (
    IMAGE_EXTENSIONS,
    is_valid_image_url,
    probe_image_content_type,
    url_serves_image,
)

__all__ = [
    "CAPTION_MAX_LENGTH",
    "MESSAGE_MAX_LENGTH",
    "callback_data_fits",
    "truncate_text",
    "DEFAULT_TIMEOUT",
    "request_with_ssl_fallback",
    "IMAGE_EXTENSIONS",
    "is_valid_image_url",
    "probe_image_content_type",
    "url_serves_image",
]
