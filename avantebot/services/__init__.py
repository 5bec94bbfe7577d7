"""Service layer for external integrations and shared state."""

from avantebot.services.image_search import (
    ProviderError,
    build_providers,
    fetch_image_links,
)
from avantebot.services.rotation import RotationCache, image_rotation
from avantebot.services.wiki import get_wiki_summary

__all__ = [
    "ProviderError",
    "build_providers",
    "fetch_image_links",
    "RotationCache",
    "image_rotation",
    "get_wiki_summary",
]
