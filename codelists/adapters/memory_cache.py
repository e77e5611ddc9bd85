"""
adapters/memory_cache.py
──────────────────────────────────────────────────────────────────────────────
Process-local implementation of CachePort.

Design notes:
  - Single-flight per key: each key has its own threading.Lock, so concurrent
    callers asking for the same key run the loader once and all receive the
    stored value; different keys load in parallel.
  - A key lock lives only while some caller is loading or waiting on it.
  - A loader that raises leaves nothing behind; the next caller tries again.
  - Optional max_entries bound.  On overflow expired entries go first, then
    the lowest priority, oldest first.  NEVER_REMOVE entries are never evicted.
  - The clock is injectable so expiry is testable without sleeping.
"""
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterator, TypeVar

from codelists.ports.cache_port import CacheEntryOptions, CachePriority, ExpirationPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class _Entry:
    """Internal mutable cache slot."""

    value: Any
    options: CacheEntryOptions

    def expired(self, now: datetime) -> bool:
        return now >= self.options.absolute_expiration


@dataclass
class _KeyLock:
    """Per-key loader lock and the number of callers holding or awaiting it."""

    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class InMemoryCache:
    """Thread-safe get-or-create cache.

    Args:
        max_entries: Upper bound on stored entries; 0 means unbounded.
        clock:       Returns the current local time.
    """

    def __init__(
        self,
        max_entries: int = 0,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._key_locks: dict[str, _KeyLock] = {}
        self._lock = threading.Lock()
        logger.debug("InMemoryCache initialised | max_entries=%d", max_entries)

    # ── CachePort implementation ───────────────────────────────────────────

    def get_or_create(
        self,
        key: str,
        loader: Callable[[], T],
        expiration: ExpirationPolicy,
    ) -> T:
        """Return the value under ``key``, running ``loader`` at most once at a time.

        Raises:
            Whatever ``loader`` raises; nothing is cached in that case.
        """
        hit, value = self._lookup(key)
        if hit:
            return value

        with self._key_lock(key):
            # Another thread may have loaded it while we waited.
            hit, value = self._lookup(key)
            if hit:
                return value

            logger.debug("Cache miss for %r, loading", key)
            value = loader()
            now = self._clock()
            entry = _Entry(value=value, options=expiration(now))
            with self._lock:
                self._entries[key] = entry
                self._evict_overflow(now)
            logger.debug(
                "Cached %r until %s", key, entry.options.absolute_expiration.isoformat()
            )
            return value

    def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        hit, _ = self._lookup(key)
        return hit

    # ── Private helpers ────────────────────────────────────────────────────

    def _lookup(self, key: str) -> tuple[bool, Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False, None
            if entry.expired(self._clock()):
                del self._entries[key]
                logger.debug("Cache entry %r expired", key)
                return False, None
            return True, entry.value

    @contextmanager
    def _key_lock(self, key: str) -> Iterator[None]:
        with self._lock:
            slot = self._key_locks.get(key)
            if slot is None:
                slot = self._key_locks[key] = _KeyLock()
            slot.users += 1
        try:
            with slot.lock:
                yield
        finally:
            with self._lock:
                slot.users -= 1
                if not slot.users:
                    del self._key_locks[key]

    def _evict_overflow(self, now: datetime) -> None:
        """Bring the entry count back to max_entries.  Caller holds self._lock."""
        if not self._max_entries or len(self._entries) <= self._max_entries:
            return

        for key in [k for k, e in self._entries.items() if e.expired(now)]:
            del self._entries[key]

        # dict order is insertion order, so the index ranks entries by age
        candidates = sorted(
            (e.options.priority, index, k)
            for index, (k, e) in enumerate(self._entries.items())
            if e.options.priority is not CachePriority.NEVER_REMOVE
        )
        overflow = len(self._entries) - self._max_entries
        for _, _, key in candidates[: max(overflow, 0)]:
            logger.debug("Evicting %r (cache full)", key)
            del self._entries[key]
