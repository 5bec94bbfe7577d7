"""Image search with an ordered chain of providers.

Providers are tried in order and the first one that yields at least one
usable link wins. A provider that is not configured is skipped, and one that
fails is logged and treated as having found nothing.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

import requests
from requests.exceptions import RequestException

from avantebot.utils.http import DEFAULT_TIMEOUT
from avantebot.utils.links import is_valid_image_url

__all__ = [
    "GOOGLE_SEARCH_URL",
    "SERPAPI_SEARCH_URL",
    "GoogleImageProvider",
    "ImageProvider",
    "ProviderError",
    "SerpApiImageProvider",
    "build_providers",
    "extract_links",
    "fetch_image_links",
]


GOOGLE_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"
SERPAPI_SEARCH_URL = "https://serpapi.com/search.json"


class ProviderError(Exception):
    """A search provider could not produce results."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider


def extract_links(payload: Any, results_field: str, link_field: str) -> List[Optional[str]]:
    """Read ``payload[results_field][*][link_field]`` tolerating any missing piece."""
    if not isinstance(payload, Mapping):
        return []
    results = payload.get(results_field)
    if not isinstance(results, list):
        return []

    links: List[Optional[str]] = []
    for item in results:
        link = item.get(link_field) if isinstance(item, Mapping) else None
        links.append(link if isinstance(link, str) else None)
    return links


class ImageProvider:
    """Base class for image search providers."""

    name = "provider"
    url = ""
    results_field = ""
    link_field = ""

    def is_configured(self) -> bool:
        raise NotImplementedError

    def build_params(self, query: str) -> Dict[str, str]:
        raise NotImplementedError

    def request_json(self, query: str) -> Any:
        try:
            response = requests.get(
                self.url, params=self.build_params(query), timeout=DEFAULT_TIMEOUT
            )
            response.raise_for_status()
        except RequestException as exc:
            raise ProviderError(self.name, f"request failed: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError(self.name, f"invalid JSON: {exc}") from exc

    def search(self, query: str) -> List[str]:
        """Return filtered, de-duplicated image links in provider order."""
        payload = self.request_json(query)
        links = extract_links(payload, self.results_field, self.link_field)
        valid = [link for link in links if is_valid_image_url(link)]
        return list(dict.fromkeys(valid))


class GoogleImageProvider(ImageProvider):
    name = "google"
    url = GOOGLE_SEARCH_URL
    results_field = "items"
    link_field = "link"

    def __init__(self, api_key: Optional[str], cx: Optional[str]) -> None:
        self.api_key = api_key
        self.cx = cx

    def is_configured(self) -> bool:
        return bool(self.api_key and self.cx)

    def build_params(self, query: str) -> Dict[str, str]:
        return {
            "q": query,
            "searchType": "image",
            "key": self.api_key or "",
            "cx": self.cx or "",
        }


class SerpApiImageProvider(ImageProvider):
    name = "serpapi"
    url = SERPAPI_SEARCH_URL
    results_field = "images_results"
    link_field = "original"

    def __init__(self, api_key: Optional[str]) -> None:
        self.api_key = api_key

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def build_params(self, query: str) -> Dict[str, str]:
        return {
            "engine": "google_images",
            "q": query,
            "api_key": self.api_key or "",
        }


def build_providers(config: Mapping[str, Any]) -> List[ImageProvider]:
    """Providers in fallback order: Google first, SerpAPI second."""
    return [
        GoogleImageProvider(config.get("google_api_key"), config.get("google_cx")),
        SerpApiImageProvider(config.get("serpapi_key")),
    ]


def fetch_image_links(query: str, providers: Sequence[ImageProvider]) -> List[str]:
    for provider in providers:
        if not provider.is_configured():
            continue
        try:
            links = provider.search(query)
        except ProviderError as exc:
            print(f"[SEARCH] {exc}")
            continue

        if links:
            print(f"[SEARCH] {provider.name} returned {len(links)} images for '{query}'")
            return links
        print(f"[SEARCH] {provider.name} returned no usable images for '{query}'")

    return []
