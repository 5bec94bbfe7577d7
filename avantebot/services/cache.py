"""Best-effort Redis JSON cache for external API responses."""

from __future__ import annotations

import hashlib
import json
import os
from typing import Any, Optional

import redis

from avantebot.config import config_redis

__all__ = ["cache_enabled", "cache_key", "get_cached_json", "set_cached_json"]


def cache_enabled() -> bool:
    """The response cache is only used when a Redis host is configured."""
    return bool(os.environ.get("REDIS_HOST"))


def cache_key(prefix: str, *parts: str) -> str:
    digest = hashlib.md5(json.dumps(parts, ensure_ascii=False).encode()).hexdigest()
    return f"{prefix}:{digest}"


def _client() -> Optional[redis.Redis]:
    if not cache_enabled():
        return None
    try:
        return config_redis()
    except Exception:
        # config_redis already reported the failure
        return None


def get_cached_json(key: str) -> Optional[Any]:
    """Fetch ``key`` and decode JSON, returning None on miss or any failure."""
    redis_client = _client()
    if redis_client is None:
        return None
    try:
        data = redis_client.get(key)
        if not data:
            return None
        return json.loads(str(data))
    except (redis.RedisError, ValueError) as exc:
        print(f"[CACHE] error reading {key}: {exc}")
        return None


def set_cached_json(key: str, ttl: int, value: Any) -> bool:
    """Store JSON under ``key`` with a TTL, returning success boolean."""
    redis_client = _client()
    if redis_client is None:
        return False
    try:
        return bool(redis_client.setex(key, ttl, json.dumps(value)))
    except (redis.RedisError, TypeError, ValueError) as exc:
        print(f"[CACHE] error writing {key}: {exc}")
        return False
