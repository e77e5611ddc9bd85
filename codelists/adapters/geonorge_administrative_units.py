"""
adapters/geonorge_administrative_units.py
──────────────────────────────────────────────────────────────────────────────
Implements AdministrativeUnitsPort using the Geonorge kommuneinfo API.

  GET fylker                                           → list of counties
  GET kommuner                                         → list of communes
  GET fylker/{n}?filtrer=kommuner,fylkesnavn,fylkesnummer → one county + communes

Unlike the classification client, failures raise: callers are expected to sit
behind CachedAdministrativeUnitsClient, which must not store a failed lookup.
"""
from __future__ import annotations

import logging
from typing import Any

import requests
from pydantic import TypeAdapter, ValidationError

from codelists.config.settings import Settings
from codelists.domain.exceptions import (
    ConfigurationError,
    RegistryStatusError,
    RegistryTransportError,
    ResponseDecodeError,
)
from codelists.domain.models import Commune, County

logger = logging.getLogger(__name__)

_COUNTIES = TypeAdapter(list[County])
_COMMUNES = TypeAdapter(list[Commune])
_COUNTY = TypeAdapter(County)


class GeonorgeAdministrativeUnitsAdapter:
    """Geonorge counties / communes client (uncached)."""

    def __init__(self, settings: Settings) -> None:
        if not settings.administrative_units_base_api_url:
            raise ConfigurationError(
                "ADMINISTRATIVE_UNITS_BASE_API_URL is empty. "
                "Set it in your .env file or environment."
            )
        self._base_url = settings.administrative_units_base_api_url.rstrip("/") + "/"
        self._timeout = settings.http_timeout
        self._headers = {"Accept": "application/json"}
        logger.debug(
            "GeonorgeAdministrativeUnitsAdapter ready | base_url=%s", self._base_url
        )

    # ── AdministrativeUnitsPort implementation ─────────────────────────────

    def get_counties(self) -> list[County]:
        data = self._get_json("fylker")
        return self._validate(_COUNTIES, data, "counties")

    def get_communes(self) -> list[Commune]:
        data = self._get_json("kommuner")
        return self._validate(_COMMUNES, data, "communes")

    def get_communes_in_county(self, county_number: str) -> list[Commune]:
        data = self._get_json(
            f"fylker/{county_number}",
            params={"filtrer": "kommuner,fylkesnavn,fylkesnummer"},
        )
        county = self._validate(_COUNTY, data, f"county {county_number}")
        return county.communes

    # ── Private helpers ────────────────────────────────────────────────────

    def _get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        url = self._base_url + path
        try:
            resp = requests.get(
                url, headers=self._headers, params=params, timeout=self._timeout
            )
        except requests.RequestException as exc:
            raise RegistryTransportError(f"GET {url} failed: {exc}") from exc

        if not resp.ok:
            raise RegistryStatusError(
                resp.status_code,
                f"Geonorge HTTP {resp.status_code} for {url}: {resp.text[:300]}",
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise ResponseDecodeError(f"Geonorge returned non-JSON for {url}") from exc

    @staticmethod
    def _validate(adapter: TypeAdapter, data: Any, what: str) -> Any:
        try:
            return adapter.validate_python(data)
        except ValidationError as exc:
            raise ResponseDecodeError(f"Unexpected {what} shape: {exc}") from exc
