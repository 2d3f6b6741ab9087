"""Bounded in-process cache with per-entry TTL and LRU eviction.

One instance is shared by the catalog client, the fallback resolver and the
recommendation pipeline; each of them owns a key prefix (see ``CacheKeys``).
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable

import orjson

from fitrec.shared.constants import CacheConfig
from fitrec.shared.errors import ApplicationError, ErrorCode, ErrorContext
from fitrec.shared.logging import log_operation_success

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """A stored value and its bookkeeping."""

    value: Any
    created_at: float
    ttl: float
    last_accessed_at: float
    access_count: int = 0

    def is_expired(self, now: float) -> bool:
        return now - self.created_at > self.ttl


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time cache statistics.

    Attributes:
        entries: Number of stored entries (expired ones included until purged)
        approximate_byte_size: Serialized size of keys and values
        hit_rate: Hits as a fraction of all lookups (0.0 with no lookups)
        miss_rate: Misses as a fraction of all lookups
        hits: Lookup hits since construction or the last clear()
        misses: Lookup misses since construction or the last clear()
        capacity: Maximum number of entries
    """

    entries: int
    approximate_byte_size: int
    hit_rate: float
    miss_rate: float
    hits: int
    misses: int
    capacity: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "entries": self.entries,
            "approximate_byte_size": self.approximate_byte_size,
            "hit_rate": self.hit_rate,
            "miss_rate": self.miss_rate,
            "hits": self.hits,
            "misses": self.misses,
            "capacity": self.capacity,
        }


def _approximate_size(value: Any) -> int:
    try:
        return len(orjson.dumps(value, default=_model_default))
    except TypeError:
        return len(repr(value))


def _model_default(value: Any) -> Any:
    # pydantic models and dataclass-like objects carrying model_dump()
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json")
    raise TypeError


class BoundedCache:
    """Thread-safe TTL + LRU cache.

    Eviction removes the entry with the oldest ``last_accessed_at`` when a
    new key is inserted at capacity. Expired entries are dropped lazily when
    read, or eagerly through ``purge_expired``. Missing keys and expired
    entries are ordinary outcomes; nothing here raises after construction.

    Args:
        max_size: Maximum number of entries
        default_ttl: TTL in seconds for ``set`` calls without an explicit TTL
        clock: Time source returning seconds; ``time.monotonic`` by default
    """

    def __init__(
        self,
        max_size: int = CacheConfig.MAX_SIZE,
        default_ttl: float = CacheConfig.DEFAULT_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        context = ErrorContext(
            operation="cache_init",
            additional_data={"max_size": max_size, "default_ttl": default_ttl},
        )
        if max_size <= 0:
            raise ApplicationError(
                code=ErrorCode.VALIDATION_ERROR,
                message=f"Cache max_size must be positive, got: {max_size}",
                context=context,
            )
        if default_ttl <= 0:
            raise ApplicationError(
                code=ErrorCode.VALIDATION_ERROR,
                message=f"Cache default_ttl must be positive, got: {default_ttl}",
                context=context,
            )

        self.max_size = max_size
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0
        self._lock = threading.Lock()

        log_operation_success(
            logger=logger,
            operation="cache_init",
            duration_ms=0,
            context=context,
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Insert or replace ``key``.

        Inserting a new key into a full cache first evicts the least
        recently accessed entry. A non-positive ``ttl`` falls back to the
        default TTL.
        """
        effective_ttl = ttl if ttl is not None and ttl > 0 else self.default_ttl
        with self._lock:
            now = self._clock()
            if key not in self._entries and len(self._entries) >= self.max_size:
                self._evict_lru()
            self._entries[key] = CacheEntry(
                value=value,
                created_at=now,
                ttl=effective_ttl,
                last_accessed_at=now,
            )

    def get(self, key: str, default: Any = None) -> Any:
        """Return the cached value, or ``default`` when absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return default

            now = self._clock()
            if entry.is_expired(now):
                del self._entries[key]
                self._misses += 1
                return default

            entry.access_count += 1
            entry.last_accessed_at = now
            self._hits += 1
            return entry.value

    def has(self, key: str) -> bool:
        """Whether a live entry exists. Does not touch hit/miss counters."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False
            if entry.is_expired(self._clock()):
                del self._entries[key]
                return False
            return True

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def invalidate_by_prefix(self, prefix: str) -> int:
        """Delete every key starting with ``prefix``; returns the count removed."""
        return self._delete_matching(lambda key: key.startswith(prefix))

    def invalidate_containing(self, fragment: str) -> int:
        """Delete every key containing ``fragment``; returns the count removed."""
        if not fragment:
            return 0
        return self._delete_matching(lambda key: fragment in key)

    def clear(self) -> None:
        """Remove all entries and reset the hit/miss counters."""
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def purge_expired(self) -> int:
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if e.is_expired(now)]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug("Purged %d expired cache entries", len(expired))
        return len(expired)

    def remaining_ttl(self, key: str) -> float | None:
        """Seconds until ``key`` expires, or None if absent or already expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            remaining = entry.ttl - (self._clock() - entry.created_at)
            return remaining if remaining >= 0 else None

    def extend_ttl(self, key: str, seconds: float) -> bool:
        """Add ``seconds`` to a live entry's TTL. Returns False if there is none."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry.is_expired(self._clock()):
                return False
            entry.ttl += seconds
            return True

    def stats(self) -> CacheStats:
        with self._lock:
            total = self._hits + self._misses
            size = sum(
                len(key.encode("utf-8")) + _approximate_size(entry.value)
                for key, entry in self._entries.items()
            )
            return CacheStats(
                entries=len(self._entries),
                approximate_byte_size=size,
                hit_rate=self._hits / total if total else 0.0,
                miss_rate=self._misses / total if total else 0.0,
                hits=self._hits,
                misses=self._misses,
                capacity=self.max_size,
            )

    def _delete_matching(self, predicate: Callable[[str], bool]) -> int:
        with self._lock:
            doomed = [key for key in self._entries if predicate(key)]
            for key in doomed:
                del self._entries[key]
        return len(doomed)

    def _evict_lru(self) -> None:
        # Caller holds the lock
        oldest_key = min(
            self._entries,
            key=lambda k: self._entries[k].last_accessed_at,
        )
        del self._entries[oldest_key]
        logger.debug("Evicted least recently used cache entry '%s'", oldest_key)


__all__ = ["BoundedCache", "CacheEntry", "CacheStats"]
