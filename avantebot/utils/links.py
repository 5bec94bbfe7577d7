"""Helpers to decide whether a link points to an image."""

from __future__ import annotations

from typing import Any, Optional, Tuple

from requests.exceptions import RequestException

from avantebot.utils.http import request_with_ssl_fallback

IMAGE_EXTENSIONS: Tuple[str, ...] = (".jpg", ".jpeg", ".png", ".gif", ".webp")

__all__ = [
    "IMAGE_EXTENSIONS",
    "is_valid_image_url",
    "probe_image_content_type",
    "url_serves_image",
]


def is_valid_image_url(url: Any) -> bool:
    """Return True when *url* looks like an http(s) link to a static image."""
    if not isinstance(url, str) or not url.strip():
        return False

    lowered = url.lower()
    return lowered.startswith("http") and lowered.endswith(IMAGE_EXTENSIONS)


def probe_image_content_type(url: str) -> Optional[str]:
    """Return the lowercased Content-Type served for *url*, or None when unknown."""
    headers = {"User-Agent": "TelegramBot (like TwitterBot)"}
    try:
        response = request_with_ssl_fallback(
            url, method="head", allow_redirects=True, headers=headers
        )
    except RequestException as exc:
        print(f"[PROBE] {url} request failed: {exc}")
        return None

    if response.status_code >= 400:
        print(f"[PROBE] {url} returned status {response.status_code}")
        return None

    content_type = response.headers.get("Content-Type", "")
    content_type = content_type.split(";", 1)[0].strip().lower()
    return content_type or None


def url_serves_image(url: str) -> bool:
    """Return False only when the host explicitly serves something other than an image.

    Hosts that fail the probe or omit the header get the benefit of the doubt,
    Telegram will fetch the file itself anyway.
    """
    content_type = probe_image_content_type(url)
    if content_type is None:
        return True
    if content_type.startswith("image/"):
        return True
    # some CDNs answer HEAD with a generic binary type
    if content_type == "application/octet-stream":
        return True
    print(f"[PROBE] {url} content-type {content_type} is not an image")
    return False
