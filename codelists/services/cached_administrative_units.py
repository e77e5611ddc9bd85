"""
services/cached_administrative_units.py
──────────────────────────────────────────────────────────────────────────────
Caching decorator around any AdministrativeUnitsPort.

Counties and communes change rarely and at most daily, so every lookup is
cached until the next local midnight (MidnightExpiration) unless another
ExpirationPolicy is injected.

Cache keys:
  counties                 all counties
  communes                 all communes
  county-{n}-communes      communes of county n
"""
from __future__ import annotations

import logging

from codelists.domain.models import Commune, County
from codelists.ports.administrative_units_port import AdministrativeUnitsPort
from codelists.ports.cache_port import CachePort, ExpirationPolicy, MidnightExpiration

logger = logging.getLogger(__name__)

COUNTIES_CACHE_KEY = "counties"
COMMUNES_CACHE_KEY_BASE = "communes"


class CachedAdministrativeUnitsClient:
    """AdministrativeUnitsPort that serves repeated lookups from a cache.

    Args:
        client:     The wrapped (uncached) provider.
        cache:      Any object satisfying CachePort.
        expiration: Entry lifetime strategy; defaults to next local midnight.
    """

    def __init__(
        self,
        client: AdministrativeUnitsPort,
        cache: CachePort,
        expiration: ExpirationPolicy | None = None,
    ) -> None:
        self._client = client
        self._cache = cache
        self._expiration = expiration or MidnightExpiration()

    def get_counties(self) -> list[County]:
        return self._cache.get_or_create(
            COUNTIES_CACHE_KEY, self._client.get_counties, self._expiration
        )

    def get_communes(self) -> list[Commune]:
        return self._cache.get_or_create(
            COMMUNES_CACHE_KEY_BASE, self._client.get_communes, self._expiration
        )

    def get_communes_in_county(self, county_number: str) -> list[Commune]:
        """Return the communes of a county; [] for an unknown county number.

        The county number is checked against the (cached) county list first,
        so unknown numbers never reach the registry or the cache.
        """
        counties = self.get_counties()
        if not any(c.number == county_number for c in counties):
            logger.info("Unknown county number %r, returning no communes", county_number)
            return []

        return self._cache.get_or_create(
            f"county-{county_number}-{COMMUNES_CACHE_KEY_BASE}",
            lambda: self._client.get_communes_in_county(county_number),
            self._expiration,
        )
