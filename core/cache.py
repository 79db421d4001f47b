# core/cache.py

"""
In-process TTL cache used for role and permission lookups.

Keys are namespaced strings such as ``roles:<user_id>:<company_id>`` so that
everything belonging to one user can be dropped with a prefix delete when
their roles change.
"""

from typing import Optional, Any, Iterable
from datetime import datetime, timedelta
from threading import Lock
from core.logging_config import logger


class CacheEntry:
    """A cached value with its expiration time."""

    def __init__(self, value: Any, ttl_seconds: int):
        self.value = value
        self.expires_at = datetime.now() + timedelta(seconds=ttl_seconds)

    def is_expired(self) -> bool:
        return datetime.now() >= self.expires_at


class SimpleCache:
    """
    Thread-safe in-memory cache with TTL support.
    """

    def __init__(self):
        self._cache: dict[str, CacheEntry] = {}
        self._lock = Lock()

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None if missing or expired."""
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None

            if entry.is_expired():
                del self._cache[key]
                return None

            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: int = 300):
        with self._lock:
            self._cache[key] = CacheEntry(value, ttl_seconds)

    def delete_prefix(self, prefix: str) -> int:
        """
        Delete every key starting with ``prefix``.

        Returns:
            Number of entries removed
        """
        with self._lock:
            doomed = [key for key in self._cache if key.startswith(prefix)]
            for key in doomed:
                del self._cache[key]
            return len(doomed)

    def clear(self):
        with self._lock:
            self._cache.clear()


# Global cache instance
_cache = SimpleCache()


def make_key(namespace: str, *parts: Optional[str]) -> str:
    """Build ``namespace:part1:part2`` with ``-`` standing in for missing parts."""
    return ":".join([namespace] + [str(p) if p else "-" for p in parts])


def cache_get(key: str) -> Optional[Any]:
    return _cache.get(key)


def cache_set(key: str, value: Any, ttl_seconds: int = 300):
    _cache.set(key, value, ttl_seconds)


def invalidate_user(user_id: str, namespaces: Iterable[str] = ("roles", "permissions", "modules")) -> int:
    """
    Drop all cached role/permission data for a user across companies.
    """
    removed = 0
    for ns in namespaces:
        removed += _cache.delete_prefix(f"{ns}:{user_id}:")
    logger.info(f"Access cache invalidated for user {user_id} ({removed} entries)")
    return removed


def cache_clear():
    _cache.clear()
