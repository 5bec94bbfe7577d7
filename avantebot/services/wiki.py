"""Wikipedia page summaries for the /wiki command."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote

import requests
from requests.exceptions import RequestException

from avantebot.config import DEFAULT_WIKI_LANG
from avantebot.services.cache import cache_key, get_cached_json, set_cached_json
from avantebot.utils.http import DEFAULT_TIMEOUT

__all__ = [
    "SHORT_EXTRACT_LENGTH",
    "TTL_WIKI",
    "WIKI_SUMMARY_URL",
    "format_wiki_summary",
    "get_wiki_summary",
    "parse_wiki_summary",
]


WIKI_SUMMARY_URL = "https://{lang}.wikipedia.org/api/rest_v1/page/summary/{title}"
SHORT_EXTRACT_LENGTH = 200
TTL_WIKI = 6 * 60 * 60  # 6 hours

MSG_EMPTY_TOPIC = "Por favor, especifique o que você quer buscar. Ex: /wiki Brasil"
MSG_NOT_FOUND = "Não encontrei nada na Wikipédia sobre '{topic}'."
MSG_NO_DEFINITION = "Não encontrei uma definição clara para '{topic}'."
MSG_LOOKUP_FAILED = "Ocorreu um erro ao consultar a Wikipédia. Tente novamente mais tarde."


def _get_str(data: Any, key: str) -> Optional[str]:
    if not isinstance(data, Mapping):
        return None
    value = data.get(key)
    return value if isinstance(value, str) else None


def parse_wiki_summary(payload: Any) -> Dict[str, Optional[str]]:
    """Pick title, extract and desktop page URL out of a summary response."""
    content_urls = payload.get("content_urls") if isinstance(payload, Mapping) else None
    desktop = content_urls.get("desktop") if isinstance(content_urls, Mapping) else None
    return {
        "title": _get_str(payload, "title"),
        "extract": _get_str(payload, "extract"),
        "page_url": _get_str(desktop, "page"),
    }


def format_wiki_summary(topic: str, summary: Mapping[str, Optional[str]]) -> str:
    extract = (summary.get("extract") or "").strip()
    if not extract:
        return MSG_NO_DEFINITION.format(topic=topic)

    page_url = summary.get("page_url")
    body = extract
    if len(extract) < SHORT_EXTRACT_LENGTH and page_url:
        body += f"\n\nMais informações: {page_url}"

    title = summary.get("title") or topic
    return f"📚 {title}\n\n{body}"


def get_wiki_summary(topic: str, lang: str = DEFAULT_WIKI_LANG) -> str:
    topic = (topic or "").strip()
    if not topic:
        return MSG_EMPTY_TOPIC

    key = cache_key("wiki", lang, topic)
    cached = get_cached_json(key)
    if isinstance(cached, str):
        return cached

    url = WIKI_SUMMARY_URL.format(lang=lang, title=quote(topic, safe=""))
    headers = {"User-Agent": "AvanteBot/1.0 (Telegram bot)", "Accept": "application/json"}
    try:
        response = requests.get(url, headers=headers, timeout=DEFAULT_TIMEOUT)
        if not response.ok:
            print(f"[WIKI] '{topic}' returned status {response.status_code}")
            return MSG_NOT_FOUND.format(topic=topic)
        summary = parse_wiki_summary(response.json())
    except (RequestException, ValueError) as exc:
        print(f"[WIKI] lookup for '{topic}' failed: {exc}")
        return MSG_LOOKUP_FAILED

    text = format_wiki_summary(topic, summary)
    if summary.get("extract"):
        set_cached_json(key, TTL_WIKI, text)
    return text
