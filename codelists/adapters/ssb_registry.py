"""
adapters/ssb_registry.py
──────────────────────────────────────────────────────────────────────────────
Implements RegistryPort against the SSB KLASS classifications API.

Key behaviour:
  - Plain ``requests.get`` against ``{base}{relative_url}``
  - Always sends ``Accept: application/json;charset=utf-8``
  - Returns every HTTP status as a RegistryResponse; only a failure to get
    a response at all raises (RegistryTransportError)
  - No retries here: the only retry is the language fallback, owned by
    services/classification_fetcher.py

Env vars:
  CLASSIFICATIONS_BASE_API_URL  default https://data.ssb.no/api/klass/v1/classifications/
  HTTP_TIMEOUT                  default 30 seconds
"""
from __future__ import annotations

import logging

import requests

from codelists.config.settings import Settings
from codelists.domain.exceptions import ConfigurationError, RegistryTransportError
from codelists.ports.registry_port import RegistryResponse

logger = logging.getLogger(__name__)

ACCEPT_JSON = "application/json;charset=utf-8"


class SsbRegistryAdapter:
    """SSB KLASS HTTP transport.

    Injected into ClassificationFetcher via services/container.py.
    """

    def __init__(self, settings: Settings) -> None:
        if not settings.classifications_base_api_url:
            raise ConfigurationError(
                "CLASSIFICATIONS_BASE_API_URL is empty. "
                "Set it in your .env file or environment."
            )
        self._base_url = settings.classifications_base_api_url.rstrip("/") + "/"
        self._timeout = settings.http_timeout
        self._headers = {"Accept": ACCEPT_JSON}
        logger.debug("SsbRegistryAdapter ready | base_url=%s", self._base_url)

    @property
    def base_url(self) -> str:
        return self._base_url

    # ── RegistryPort implementation ────────────────────────────────────────

    def get(self, relative_url: str) -> RegistryResponse:
        """GET a classification resource relative to the base URL.

        Args:
            relative_url: Endpoint plus query string, e.g.
                          ``"7/codesAt?language=nb&date=2024-01-01"``.

        Returns:
            RegistryResponse with the status code and body text.

        Raises:
            RegistryTransportError: On connection errors or timeouts.
        """
        url = self._base_url + relative_url.lstrip("/")
        try:
            resp = requests.get(url, headers=self._headers, timeout=self._timeout)
        except requests.RequestException as exc:
            raise RegistryTransportError(f"GET {url} failed: {exc}") from exc

        logger.debug("GET %s → %d", url, resp.status_code)
        return RegistryResponse(status_code=resp.status_code, text=resp.text)
