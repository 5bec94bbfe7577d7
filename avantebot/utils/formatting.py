"""Formatting helpers for Telegram messages."""

from typing import Optional

__all__ = [
    "CALLBACK_DATA_MAX_BYTES",
    "CAPTION_MAX_LENGTH",
    "MESSAGE_MAX_LENGTH",
    "callback_data_fits",
    "truncate_text",
]


CAPTION_MAX_LENGTH = 1024
MESSAGE_MAX_LENGTH = 4096
CALLBACK_DATA_MAX_BYTES = 64


def truncate_text(text: Optional[str], max_length: int = MESSAGE_MAX_LENGTH) -> str:
    """Truncate text to max_length and add ellipsis if needed"""

    if text is None:
        return ""

    if len(text) <= max_length:
        return text

    if max_length <= 3:
        return text[:max_length]

    return text[: max_length - 3] + "..."


def callback_data_fits(data: str) -> bool:
    """Telegram rejects inline buttons whose callback data exceeds 64 bytes."""
    return len(data.encode("utf-8")) <= CALLBACK_DATA_MAX_BYTES
