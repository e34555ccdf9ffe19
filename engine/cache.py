"""
EffectCache — in-memory memo cache with per-entry TTL and LRU eviction.

Used to avoid recomputing scenario effects and baseline projections on every
UI refresh. Keys are plain strings; callers build them from the scenario id
and its last-modified stamp, so editing a scenario simply produces a new key.

Rules:
  - an entry is never returned once (now - inserted_at) > ttl
  - expiry is lazy (checked on get/has); sweep_expired() may be called to
    bound memory
  - at capacity, the least-recently-accessed entry is evicted before insert

Not thread-safe. Hold one instance per thread of control or guard it with an
external lock.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

from core.config import CacheConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    key: str
    value: T
    inserted_at: float
    ttl: float
    last_access: float = 0.0

    def is_expired(self, now: float) -> bool:
        return now - self.inserted_at > self.ttl


class EffectCache(Generic[T]):
    """
    Usage:
        cache = EffectCache(max_entries=100, default_ttl=300)
        cache.set("effect:sc_1:2024-05-01", result)
        cache.get("effect:sc_1:2024-05-01")   # -> result, or None once expired
    """

    def __init__(
        self,
        max_entries: int = 100,
        default_ttl: float = 300.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        if default_ttl < 0:
            raise ValueError("default_ttl must be non-negative")
        self.max_entries = int(max_entries)
        self.default_ttl = float(default_ttl)
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry[T]]" = OrderedDict()
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    @classmethod
    def from_config(cls, config: CacheConfig, **kwargs: Any) -> "EffectCache":
        return cls(config.max_entries, config.default_ttl_seconds, **kwargs)

    def get(self, key: str) -> Optional[T]:
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None
        now = self._clock()
        if entry.is_expired(now):
            del self._entries[key]
            self.misses += 1
            logger.debug("Cache entry %s expired", key)
            return None
        entry.last_access = now
        self._entries.move_to_end(key)
        self.hits += 1
        return entry.value

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        if not isinstance(key, str):
            raise TypeError(f"Cache keys must be strings, got {type(key).__name__}")
        if key in self._entries:
            del self._entries[key]
        if len(self._entries) >= self.max_entries:
            self.sweep_expired()
        while len(self._entries) >= self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            self.evictions += 1
            logger.debug("Cache full, evicted %s", evicted)
        now = self._clock()
        self._entries[key] = CacheEntry(
            key=key,
            value=value,
            inserted_at=now,
            ttl=self.default_ttl if ttl is None else float(ttl),
            last_access=now,
        )

    def has(self, key: str) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        if entry.is_expired(self._clock()):
            del self._entries[key]
            return False
        return True

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def sweep_expired(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        now = self._clock()
        expired = [k for k, e in self._entries.items() if e.is_expired(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Cache sweep removed %d expired entries", len(expired))
        return len(expired)

    def get_or_compute(
        self,
        key: str,
        factory: Callable[[], T],
        ttl: Optional[float] = None,
    ) -> T:
        """Cached value for key, computing and storing it on a miss."""
        value = self.get(key)
        if value is None:
            value = factory()
            self.set(key, value, ttl)
        return value

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    @property
    def stats(self) -> Dict[str, int]:
        return {
            "entries": len(self._entries),
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
        }
