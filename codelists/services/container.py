"""
services/container.py
──────────────────────────────────────────────────────────────────────────────
Dependency Injection container.

THIS IS THE ONLY FILE THAT NAMES CONCRETE ADAPTER CLASSES.

  get_classifications_client()       → ClassificationFetcher over SsbRegistryAdapter
  get_administrative_units_client()  → CachedAdministrativeUnitsClient over
                                       GeonorgeAdministrativeUnitsAdapter + InMemoryCache

Thread safety:
  @lru_cache(maxsize=1) makes each getter return the same instance across
  calls.  The fetcher is stateless and the cache is lock-protected, so both
  can be shared between threads.
"""
from __future__ import annotations

import logging
from functools import lru_cache

from codelists.adapters.geonorge_administrative_units import GeonorgeAdministrativeUnitsAdapter
from codelists.adapters.memory_cache import InMemoryCache
from codelists.adapters.ssb_registry import SsbRegistryAdapter
from codelists.config.settings import get_settings
from codelists.ports.cache_port import MidnightExpiration
from codelists.services.cached_administrative_units import CachedAdministrativeUnitsClient
from codelists.services.classification_fetcher import ClassificationFetcher

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_classifications_client() -> ClassificationFetcher:
    """Build and return the ClassificationFetcher singleton.

    Raises:
        ConfigurationError: If the classifications base URL is empty.
    """
    settings = get_settings()
    registry = SsbRegistryAdapter(settings)
    logger.info(
        "ClassificationFetcher ready | registry=%s fallback_language=%s",
        registry.base_url,
        settings.fallback_language,
    )
    return ClassificationFetcher(registry=registry, settings=settings)


@lru_cache(maxsize=1)
def get_administrative_units_client() -> CachedAdministrativeUnitsClient:
    """Build and return the cached administrative-units client singleton.

    Raises:
        ConfigurationError: If the administrative-units base URL is empty.
    """
    settings = get_settings()
    client = GeonorgeAdministrativeUnitsAdapter(settings)
    cache = InMemoryCache(max_entries=settings.cache_max_entries)
    logger.info(
        "CachedAdministrativeUnitsClient ready | max_entries=%d",
        settings.cache_max_entries,
    )
    return CachedAdministrativeUnitsClient(
        client=client, cache=cache, expiration=MidnightExpiration()
    )
