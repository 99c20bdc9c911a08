from __future__ import annotations

import hashlib
import json
import threading
import time
from typing import Any

from .config import DEFAULT_PLACES_CONFIG

_cache: dict[str, dict[str, Any]] = {}
_lock = threading.Lock()
_hits: int = 0
_misses: int = 0


def _make_key(url: str, params: dict) -> str:
    # The API key never takes part in the key.
    cleaned = {k: v for k, v in params.items() if k != "key"}
    normalized = json.dumps({"url": url, "params": cleaned}, sort_keys=True, default=str)
    return hashlib.sha256(normalized.encode()).hexdigest()[:16]


def _evict_expired(now: float, ttl: int) -> None:
    stale = [key for key, entry in _cache.items() if now - entry["created_at"] >= ttl]
    for key in stale:
        _cache.pop(key, None)


def cache_get(url: str, params: dict, ttl: int = DEFAULT_PLACES_CONFIG.cache_ttl) -> Any | None:
    global _hits, _misses
    key = _make_key(url, params)
    with _lock:
        entry = _cache.get(key)
        if entry and time.time() - entry["created_at"] < ttl:
            _hits += 1
            return entry["value"]
        if entry:
            _cache.pop(key, None)
        _misses += 1
        return None


def cache_set(url: str, params: dict, value: Any, ttl: int = DEFAULT_PLACES_CONFIG.cache_ttl) -> None:
    """Store ``value``, dropping every entry that has outlived ``ttl``."""
    key = _make_key(url, params)
    with _lock:
        now = time.time()
        _evict_expired(now, ttl)
        _cache[key] = {"value": value, "created_at": now}


def get_cache_stats() -> dict:
    with _lock:
        total = _hits + _misses
        return {
            "size": len(_cache),
            "hits": _hits,
            "misses": _misses,
            "hit_rate": round(_hits / total * 100, 1) if total > 0 else 0.0,
        }


def clear_cache() -> None:
    global _hits, _misses
    with _lock:
        _cache.clear()
        _hits = 0
        _misses = 0
