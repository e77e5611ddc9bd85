"""
tests/conftest.py
──────────────────────────────────────────────────────────────────────────────
Shared pytest fixtures and mock adapter implementations.

Mock adapters implement the Port Protocols via structural subtyping. They do
NOT inherit from any base class.  pytest uses them to test service logic
without any real SSB or Geonorge connections.

Fixture hierarchy:
  fake_registry      → implements RegistryPort (scripted responses, call log)
  fetcher            → ClassificationFetcher wired with fake_registry
  fake_units         → implements AdministrativeUnitsPort (call counters)
  frozen_clock       → mutable datetime source for cache expiry tests
  cache              → InMemoryCache driven by frozen_clock
  cached_units       → CachedAdministrativeUnitsClient over fake_units + cache
"""
from __future__ import annotations

import threading
from datetime import date, datetime

import pytest

from codelists.adapters.memory_cache import InMemoryCache
from codelists.config.settings import Settings
from codelists.domain.exceptions import RegistryTransportError
from codelists.domain.models import Commune, County
from codelists.ports.registry_port import RegistryResponse
from codelists.services.cached_administrative_units import CachedAdministrativeUnitsClient
from codelists.services.classification_fetcher import ClassificationFetcher

TODAY = date(2024, 3, 15)


# ── Settings fixture ───────────────────────────────────────────────────────

@pytest.fixture(scope="session")
def settings() -> Settings:
    """Return a Settings instance with sane test defaults."""
    return Settings(
        classifications_base_api_url="https://klass.test/api/klass/v1/classifications/",
        administrative_units_base_api_url="https://geo.test/kommuneinfo/v1/",
        fallback_language="nb",
        http_timeout=5.0,
        cache_max_entries=0,
    )


# ── Mock adapters ──────────────────────────────────────────────────────────

class FakeRegistry:
    """Scripted RegistryPort.

    ``responses`` are consumed in order; an Exception instance is raised
    instead of returned.  Every requested URL is recorded in ``calls``.
    """

    def __init__(self, *responses: RegistryResponse | Exception) -> None:
        self._responses = list(responses)
        self.calls: list[str] = []

    def script(self, *responses: RegistryResponse | Exception) -> None:
        self._responses.extend(responses)

    def get(self, relative_url: str) -> RegistryResponse:
        self.calls.append(relative_url)
        if not self._responses:
            raise AssertionError(f"Unexpected registry call: {relative_url}")
        nxt = self._responses.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt


class FakeAdministrativeUnits:
    """In-memory AdministrativeUnitsPort that counts calls."""

    COUNTIES = [
        County(number="03", name="Oslo"),
        County(number="46", name="Vestland"),
    ]
    COMMUNES = {
        "03": [Commune(number="0301", name="Oslo")],
        "46": [Commune(number="4601", name="Bergen"), Commune(number="4602", name="Kinn")],
    }

    def __init__(self) -> None:
        self.calls: dict[str, int] = {"counties": 0, "communes": 0, "county": 0}
        self._lock = threading.Lock()

    def _count(self, what: str) -> None:
        with self._lock:
            self.calls[what] += 1

    def get_counties(self) -> list[County]:
        self._count("counties")
        return list(self.COUNTIES)

    def get_communes(self) -> list[Commune]:
        self._count("communes")
        return [c for communes in self.COMMUNES.values() for c in communes]

    def get_communes_in_county(self, county_number: str) -> list[Commune]:
        self._count("county")
        return list(self.COMMUNES.get(county_number, []))


class FrozenClock:
    """Mutable clock for cache tests."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


# ── pytest fixtures ────────────────────────────────────────────────────────

@pytest.fixture
def fake_registry():
    return FakeRegistry()


@pytest.fixture
def fetcher(fake_registry, settings):
    return ClassificationFetcher(
        registry=fake_registry, settings=settings, clock=lambda: TODAY
    )


@pytest.fixture
def fake_units():
    return FakeAdministrativeUnits()


@pytest.fixture
def frozen_clock():
    return FrozenClock(datetime(2024, 3, 15, 10, 30))


@pytest.fixture
def cache(frozen_clock):
    return InMemoryCache(clock=frozen_clock)


@pytest.fixture
def cached_units(fake_units, cache):
    return CachedAdministrativeUnitsClient(client=fake_units, cache=cache)


@pytest.fixture
def transport_error():
    return RegistryTransportError("connection refused")
