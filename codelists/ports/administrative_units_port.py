"""
ports/administrative_units_port.py
──────────────────────────────────────────────────────────────────────────────
Abstract interface for county / commune lookups.

Implemented by both the plain HTTP adapter (GeonorgeAdministrativeUnitsAdapter)
and the caching decorator (CachedAdministrativeUnitsClient), so either can be
handed to a caller.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from codelists.domain.models import Commune, County


@runtime_checkable
class AdministrativeUnitsPort(Protocol):
    """Contract for an administrative-units provider."""

    def get_counties(self) -> list[County]:
        """Return all counties."""
        ...

    def get_communes(self) -> list[Commune]:
        """Return all communes in the country."""
        ...

    def get_communes_in_county(self, county_number: str) -> list[Commune]:
        """Return the communes of one county.

        Raises:
            RegistryStatusError: If the registry rejects the county number.
        """
        ...
