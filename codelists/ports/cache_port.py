"""
ports/cache_port.py
──────────────────────────────────────────────────────────────────────────────
Get-or-create cache contract and its expiration strategy.

The expiration policy is a strategy object injected where the cache is used,
so a decorator can choose how long its entries live without the cache knowing
anything about counties or communes.

Current implementation: InMemoryCache (adapters/memory_cache.py)
Default policy:         MidnightExpiration (below)
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from enum import IntEnum
from typing import Callable, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")


class CachePriority(IntEnum):
    """Eviction order when the cache is full; lower goes first."""
    LOW          = 0
    NORMAL       = 1
    HIGH         = 2
    NEVER_REMOVE = 3


@dataclass(frozen=True)
class CacheEntryOptions:
    """How long one entry lives and how readily it is evicted."""

    absolute_expiration: datetime
    priority: CachePriority = CachePriority.NORMAL


@runtime_checkable
class ExpirationPolicy(Protocol):
    """Strategy computing entry options at the moment an entry is created."""

    def __call__(self, now: datetime) -> CacheEntryOptions:
        ...


class MidnightExpiration:
    """Expire entries at the next local midnight so daily changes are picked up."""

    def __init__(self, priority: CachePriority = CachePriority.NORMAL) -> None:
        self._priority = priority

    def __call__(self, now: datetime) -> CacheEntryOptions:
        next_midnight = datetime.combine(now.date() + timedelta(days=1), time.min)
        return CacheEntryOptions(absolute_expiration=next_midnight, priority=self._priority)


@runtime_checkable
class CachePort(Protocol):
    """Contract for a single-flight get-or-create cache."""

    def get_or_create(
        self,
        key: str,
        loader: Callable[[], T],
        expiration: ExpirationPolicy,
    ) -> T:
        """Return the cached value for ``key``, loading it if absent or expired.

        Concurrent callers for the same key share one ``loader`` execution and
        all receive its value.  If ``loader`` raises, nothing is stored and
        the exception propagates to every waiter that ran it.
        """
        ...
