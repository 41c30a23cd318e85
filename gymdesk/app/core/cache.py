"""
Process-local query cache for read-heavy service calls.

Entries are keyed by tuples that start with the entity name, e.g.
("members", "list", filters). A successful mutation drops every key under the
affected prefix so the next read goes back to the store.
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

from gymdesk.app.core.settings import get_settings

logger = logging.getLogger(__name__)

CacheKey = Tuple[Hashable, ...]

_MISSING = object()


def _freeze(value: Any) -> Hashable:
    if isinstance(value, dict):
        return tuple(sorted((k, _freeze(v)) for k, v in value.items() if v is not None))
    if isinstance(value, (list, tuple, set)):
        return tuple(_freeze(v) for v in value)
    return value


class QueryKeys:
    """Key factory mirroring the entity/operation/filter layout used by the services."""

    @staticmethod
    def members_list(filters: Optional[dict] = None) -> CacheKey:
        return ("members", "list", _freeze(filters or {}))

    @staticmethod
    def member_detail(member_id: str) -> CacheKey:
        return ("members", "detail", member_id)

    @staticmethod
    def member_stats() -> CacheKey:
        return ("members", "stats")

    @staticmethod
    def trainers_list(filters: Optional[dict] = None) -> CacheKey:
        return ("trainers", "list", _freeze(filters or {}))

    @staticmethod
    def trainer_stats() -> CacheKey:
        return ("trainers", "stats")

    @staticmethod
    def sessions_calendar(start: Any, end: Any, filters: Optional[dict] = None) -> CacheKey:
        return ("sessions", "calendar", str(start), str(end), _freeze(filters or {}))

    @staticmethod
    def session_stats(filters: Optional[dict] = None) -> CacheKey:
        return ("sessions", "stats", _freeze(filters or {}))

    @staticmethod
    def session_comments(session_id: str) -> CacheKey:
        return ("sessions", "comments", session_id)

    @staticmethod
    def subscriptions_list(filters: Optional[dict] = None) -> CacheKey:
        return ("subscriptions", "list", _freeze(filters or {}))

    @staticmethod
    def subscription_stats() -> CacheKey:
        return ("subscriptions", "stats")

    @staticmethod
    def plans_list(filters: Optional[dict] = None) -> CacheKey:
        return ("plans", "list", _freeze(filters or {}))

    @staticmethod
    def plan_stats() -> CacheKey:
        return ("plans", "stats")

    @staticmethod
    def dashboard(name: str) -> CacheKey:
        return ("dashboard", name)


query_keys = QueryKeys()


class QueryCache:
    """Thread-safe TTL cache with prefix invalidation."""

    def __init__(self, ttl_seconds: Optional[int] = None, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else get_settings().QUERY_CACHE_TTL_SECONDS
        self._clock = clock
        self._entries: Dict[CacheKey, Tuple[float, Any]] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: CacheKey, default: Any = None) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return default
            stored_at, value = entry
            if self._clock() - stored_at > self.ttl_seconds:
                del self._entries[key]
                self.misses += 1
                return default
            self.hits += 1
            return value

    def set(self, key: CacheKey, value: Any) -> None:
        with self._lock:
            self._entries[key] = (self._clock(), value)

    def get_or_load(self, key: CacheKey, loader: Callable[[], Any], should_cache: Callable[[Any], bool] = lambda _: True):
        cached = self.get(key, _MISSING)
        if cached is not _MISSING:
            return cached
        value = loader()
        if should_cache(value):
            self.set(key, value)
        return value

    def invalidate(self, *prefixes: CacheKey) -> int:
        removed = 0
        with self._lock:
            for key in list(self._entries):
                if any(key[: len(prefix)] == prefix for prefix in prefixes):
                    del self._entries[key]
                    removed += 1
        logger.debug("Invalidated %s cache entries for %s", removed, prefixes)
        return removed

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            total = self.hits + self.misses
            hit_rate = (self.hits / total * 100) if total > 0 else 0
            return {
                "hits": self.hits,
                "misses": self.misses,
                "hit_rate": f"{hit_rate:.1f}%",
                "keys_cached": len(self._entries),
            }


query_cache = QueryCache()


def get_query_cache() -> QueryCache:
    return query_cache
