"""Application-wide configuration helpers."""

from __future__ import annotations

import os
from typing import Any, Callable, Dict, Optional

import redis


AdminReporter = Callable[[str, Optional[Exception], Optional[Dict[str, Any]]], None]

DEFAULT_WIKI_LANG = "pt"


class ConfigError(ValueError):
    """Raised when a mandatory setting is missing."""


_bot_config: Optional[Dict[str, Any]] = None
_admin_reporter: Optional[AdminReporter] = None


def configure(*, admin_reporter: Optional[AdminReporter] = None) -> None:
    """Register optional admin reporter callbacks."""

    global _admin_reporter
    _admin_reporter = admin_reporter


def _optional_env(name: str) -> Optional[str]:
    value = os.environ.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def load_bot_config() -> Dict[str, Any]:
    """Load bot configuration from environment variables.

    ``TELEGRAM_TOKEN`` and ``WEBHOOK_URL`` are mandatory. Provider keys are
    optional, a missing key only disables that provider.
    """

    global _bot_config

    if _bot_config is not None:
        return _bot_config

    telegram_token = _optional_env("TELEGRAM_TOKEN")
    webhook_url = _optional_env("WEBHOOK_URL")

    if not telegram_token:
        raise ConfigError("TELEGRAM_TOKEN environment variable is required")

    if not webhook_url:
        raise ConfigError("WEBHOOK_URL environment variable is required")

    bot_username = _optional_env("TELEGRAM_USERNAME")
    if bot_username and not bot_username.startswith("@"):
        bot_username = f"@{bot_username}"

    _bot_config = {
        "telegram_token": telegram_token,
        "webhook_url": webhook_url,
        "google_api_key": _optional_env("GOOGLE_API_KEY"),
        "google_cx": _optional_env("GOOGLE_CX"),
        "serpapi_key": _optional_env("SERPAPI_KEY"),
        "admin_chat_id": _optional_env("ADMIN_CHAT_ID"),
        "wiki_lang": (_optional_env("WIKI_LANG") or DEFAULT_WIKI_LANG).lower(),
        "bot_username": bot_username,
    }

    return _bot_config


def _admin_report(message: str, error: Optional[Exception], extra: Optional[Dict[str, Any]]) -> None:
    if _admin_reporter:
        _admin_reporter(message, error, extra)


def config_redis(host=None, port=None, password=None):
    try:
        host = host or os.environ.get("REDIS_HOST", "localhost")
        port = int(port or os.environ.get("REDIS_PORT", 6379))
        password = password or os.environ.get("REDIS_PASSWORD", None)
        redis_client = redis.Redis(
            host=host,
            port=port,
            password=password,
            decode_responses=True,
            socket_connect_timeout=2,
        )
        redis_client.ping()
        return redis_client
    except Exception as exc:
        error_context = {
            "host": host,
            "port": port,
            "password": "***" if password else None,
        }
        error_msg = f"Redis connection error: {exc}"
        print(error_msg)
        _admin_report(error_msg, exc, error_context)
        raise


def reset_cache() -> None:
    """Clear cached configuration (used primarily in tests)."""

    global _bot_config
    _bot_config = None


def set_cache(config: Optional[Dict[str, Any]]) -> None:
    """Override cached configuration (test helper)."""

    global _bot_config
    _bot_config = config


__all__ = [
    "ConfigError",
    "DEFAULT_WIKI_LANG",
    "configure",
    "config_redis",
    "load_bot_config",
    "reset_cache",
    "set_cache",
]
