"""TTL cache for product lookups."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol


class Cache(Protocol):
    """Cache interface for lookup results."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store a cached value with a TTL in seconds."""


@dataclass
class _CacheEntry:
    value: object
    expires_at: datetime


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class InMemoryCache(Cache):
    """Process-local cache; entries vanish on restart."""

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._entries: dict[str, _CacheEntry] = {}
        self._clock = clock

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> object | None:
        """Return a cached value if it hasn't expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store a cached value, sweeping expired ones; a non-positive TTL skips it."""
        if ttl_seconds <= 0:
            self._entries.pop(key, None)
            return
        now = self._clock()
        expired = [k for k, entry in self._entries.items() if now >= entry.expires_at]
        for expired_key in expired:
            del self._entries[expired_key]
        expires_at = now + timedelta(seconds=ttl_seconds)
        self._entries[key] = _CacheEntry(value=value, expires_at=expires_at)
