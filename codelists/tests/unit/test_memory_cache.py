"""
tests/unit/test_memory_cache.py
──────────────────────────────────────────────────────────────────────────────
Unit tests for InMemoryCache and MidnightExpiration.

The cache runs on a FrozenClock (conftest.py), so expiry is tested by moving
the clock instead of sleeping.
"""
from __future__ import annotations

import threading
import time
from datetime import datetime, timedelta

import pytest

from codelists.adapters.memory_cache import InMemoryCache
from codelists.ports.cache_port import (
    CacheEntryOptions,
    CachePort,
    CachePriority,
    ExpirationPolicy,
    MidnightExpiration,
)


class _Counter:
    def __init__(self, value="v"):
        self.calls = 0
        self.value = value

    def __call__(self):
        self.calls += 1
        return self.value


class TestMidnightExpiration:
    def test_expires_at_next_midnight(self):
        opts = MidnightExpiration()(datetime(2024, 3, 15, 10, 30))
        assert opts.absolute_expiration == datetime(2024, 3, 16, 0, 0)
        assert opts.priority is CachePriority.NORMAL

    def test_just_before_midnight(self):
        opts = MidnightExpiration()(datetime(2024, 12, 31, 23, 59, 59))
        assert opts.absolute_expiration == datetime(2025, 1, 1)

    def test_at_midnight_gives_following_midnight(self):
        opts = MidnightExpiration()(datetime(2024, 2, 28, 0, 0))
        assert opts.absolute_expiration == datetime(2024, 2, 29)

    def test_custom_priority(self):
        opts = MidnightExpiration(CachePriority.HIGH)(datetime(2024, 1, 1))
        assert opts.priority is CachePriority.HIGH

    def test_satisfies_protocol(self):
        assert isinstance(MidnightExpiration(), ExpirationPolicy)


class TestGetOrCreate:
    def test_satisfies_protocol(self, cache):
        assert isinstance(cache, CachePort)

    def test_loads_once(self, cache):
        loader = _Counter()
        assert cache.get_or_create("k", loader, MidnightExpiration()) == "v"
        assert cache.get_or_create("k", loader, MidnightExpiration()) == "v"
        assert loader.calls == 1
        assert "k" in cache
        assert len(cache) == 1

    def test_keys_are_independent(self, cache):
        a, b = _Counter("a"), _Counter("b")
        assert cache.get_or_create("a", a, MidnightExpiration()) == "a"
        assert cache.get_or_create("b", b, MidnightExpiration()) == "b"
        assert (a.calls, b.calls) == (1, 1)

    def test_reloads_after_midnight(self, cache, frozen_clock):
        loader = _Counter()
        cache.get_or_create("k", loader, MidnightExpiration())
        frozen_clock.now = datetime(2024, 3, 15, 23, 59, 59)
        cache.get_or_create("k", loader, MidnightExpiration())
        assert loader.calls == 1
        frozen_clock.now = datetime(2024, 3, 16, 0, 0)
        cache.get_or_create("k", loader, MidnightExpiration())
        assert loader.calls == 2

    def test_loader_exception_is_not_cached(self, cache):
        calls = {"n": 0}

        def flaky():
            calls["n"] += 1
            if calls["n"] == 1:
                raise RuntimeError("first call fails")
            return "ok"

        with pytest.raises(RuntimeError):
            cache.get_or_create("k", flaky, MidnightExpiration())
        assert "k" not in cache
        assert cache.get_or_create("k", flaky, MidnightExpiration()) == "ok"

    def test_remove_and_clear(self, cache):
        cache.get_or_create("a", _Counter(), MidnightExpiration())
        cache.get_or_create("b", _Counter(), MidnightExpiration())
        cache.remove("a")
        assert "a" not in cache
        cache.remove("missing")
        cache.clear()
        assert len(cache) == 0

    def test_custom_policy_is_called_with_clock_time(self, cache, frozen_clock):
        seen = []

        def one_hour(now):
            seen.append(now)
            return CacheEntryOptions(absolute_expiration=now + timedelta(hours=1))

        cache.get_or_create("k", _Counter(), one_hour)
        assert seen == [frozen_clock.now]

    def test_key_locks_released_after_load(self, cache):
        cache.get_or_create("a", _Counter(), MidnightExpiration())
        cache.get_or_create("b", _Counter(), MidnightExpiration())
        assert cache._key_locks == {}

    def test_key_lock_released_when_loader_raises(self, cache):
        def boom():
            raise RuntimeError("down")

        with pytest.raises(RuntimeError):
            cache.get_or_create("k", boom, MidnightExpiration())
        assert cache._key_locks == {}


class TestSingleFlight:
    def test_concurrent_callers_share_one_load(self):
        cache = InMemoryCache()
        started = threading.Event()
        release = threading.Event()
        calls = []

        def slow_loader():
            calls.append(1)
            started.set()
            release.wait(timeout=5)
            return object()

        results = []

        def worker():
            results.append(cache.get_or_create("k", slow_loader, MidnightExpiration()))

        first = threading.Thread(target=worker)
        first.start()
        assert started.wait(timeout=5)
        others = [threading.Thread(target=worker) for _ in range(8)]
        for t in others:
            t.start()
        time.sleep(0.05)
        release.set()
        for t in [first, *others]:
            t.join(timeout=5)

        assert len(calls) == 1
        assert len(results) == 9
        assert all(r is results[0] for r in results)
        assert cache._key_locks == {}


class TestBoundedCache:
    def _fixed(self, priority):
        return lambda now: CacheEntryOptions(
            absolute_expiration=now + timedelta(days=1), priority=priority
        )

    def test_oldest_evicted_first(self, frozen_clock):
        cache = InMemoryCache(max_entries=2, clock=frozen_clock)
        for key in ("a", "b", "c"):
            cache.get_or_create(key, _Counter(key), self._fixed(CachePriority.NORMAL))
        assert "a" not in cache
        assert "b" in cache and "c" in cache

    def test_low_priority_evicted_before_normal(self, frozen_clock):
        cache = InMemoryCache(max_entries=2, clock=frozen_clock)
        cache.get_or_create("normal", _Counter(), self._fixed(CachePriority.NORMAL))
        cache.get_or_create("low", _Counter(), self._fixed(CachePriority.LOW))
        cache.get_or_create("new", _Counter(), self._fixed(CachePriority.NORMAL))
        assert "low" not in cache
        assert "normal" in cache and "new" in cache

    def test_never_remove_survives(self, frozen_clock):
        cache = InMemoryCache(max_entries=1, clock=frozen_clock)
        cache.get_or_create("pinned", _Counter(), self._fixed(CachePriority.NEVER_REMOVE))
        cache.get_or_create("other", _Counter(), self._fixed(CachePriority.HIGH))
        assert "pinned" in cache
        assert "other" not in cache

    def test_expired_entries_go_first(self, frozen_clock):
        cache = InMemoryCache(max_entries=2, clock=frozen_clock)
        short = lambda now: CacheEntryOptions(absolute_expiration=now + timedelta(minutes=1))
        cache.get_or_create("short", _Counter(), short)
        cache.get_or_create("long", _Counter(), self._fixed(CachePriority.LOW))
        frozen_clock.now += timedelta(minutes=5)
        cache.get_or_create("new", _Counter(), self._fixed(CachePriority.NORMAL))
        assert "long" in cache and "new" in cache
        assert len(cache) == 2
