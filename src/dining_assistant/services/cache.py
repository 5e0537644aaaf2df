"""Simple cache abstractions."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol


class Cache(Protocol):
    """Cache interface for scraped pages and parsed results."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: str, value: object, ttl_seconds: int | None = None) -> None:
        """Store a value; ``None`` keeps it for the lifetime of the cache."""


@dataclass
class _CacheEntry:
    value: object
    expires_at: datetime | None


@dataclass
class InMemoryCache(Cache):
    """Process-local cache keyed by string."""

    _entries: dict[str, _CacheEntry]

    def __init__(self) -> None:
        self._entries = {}

    def get(self, key: str) -> object | None:
        """Return a cached value if it hasn't expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at is not None and datetime.now(tz=UTC) >= entry.expires_at:
            self._entries.pop(key, None)
            return None
        return entry.value

    def set(self, key: str, value: object, ttl_seconds: int | None = None) -> None:
        """Store a cached value, optionally expiring after ``ttl_seconds``."""
        expires_at = (
            datetime.now(tz=UTC) + timedelta(seconds=ttl_seconds)
            if ttl_seconds is not None
            else None
        )
        self._entries[key] = _CacheEntry(value=value, expires_at=expires_at)

    def __len__(self) -> int:
        return len(self._entries)
