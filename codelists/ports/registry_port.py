"""
ports/registry_port.py
──────────────────────────────────────────────────────────────────────────────
Abstract interface for the classification registry transport.

The port returns status + body and leaves the status policy (404 fallback,
empty results) to services/classification_fetcher.py, so the whole fallback
protocol is unit-testable against an in-memory fake.

Current implementation: SsbRegistryAdapter (requests → SSB KLASS API)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class RegistryResponse:
    """Raw HTTP answer from the registry."""

    status_code: int
    text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def not_found(self) -> bool:
        return self.status_code == 404


@runtime_checkable
class RegistryPort(Protocol):
    """Contract for issuing GET requests against the classification registry."""

    def get(self, relative_url: str) -> RegistryResponse:
        """GET ``relative_url`` (endpoint + query string) from the registry.

        Args:
            relative_url: e.g. ``"7/codesAt?language=nb&date=2024-01-01"``.

        Returns:
            RegistryResponse for any HTTP status, including non-2xx.

        Raises:
            RegistryTransportError: If no response could be obtained.
        """
        ...
