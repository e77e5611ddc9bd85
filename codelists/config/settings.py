"""
config/settings.py
──────────────────────────────────────────────────────────────────────────────
Single source of truth for all tuneable parameters.

All values can be overridden via environment variables or a .env file placed
at the project root.  The frozen dataclass ensures settings are never mutated
at runtime.

Pointing the client at another registry is an env change, not a code change:
  CLASSIFICATIONS_BASE_API_URL        → SSB KLASS classifications API
  ADMINISTRATIVE_UNITS_BASE_API_URL   → Geonorge kommuneinfo API
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root (two levels up from this file)
load_dotenv(Path(__file__).parent.parent.parent / ".env")


def _env(key: str, default: str) -> str:
    return os.getenv(key, default)


def _env_int(key: str, default: int) -> int:
    return int(os.getenv(key, str(default)))


def _env_float(key: str, default: float) -> float:
    return float(os.getenv(key, str(default)))


@dataclass(frozen=True)
class Settings:
    """Immutable application settings loaded from environment variables."""

    # ── Registries ─────────────────────────────────────────────────────────
    classifications_base_api_url: str = field(
        default_factory=lambda: _env(
            "CLASSIFICATIONS_BASE_API_URL",
            "https://data.ssb.no/api/klass/v1/classifications/",
        )
    )
    administrative_units_base_api_url: str = field(
        default_factory=lambda: _env(
            "ADMINISTRATIVE_UNITS_BASE_API_URL",
            "https://ws.geonorge.no/kommuneinfo/v1/",
        )
    )

    # ── Language ───────────────────────────────────────────────────────────
    # Labels are retried in this language when the requested one yields 404.
    fallback_language: str = field(
        default_factory=lambda: _env("FALLBACK_LANGUAGE", "nb")
    )

    # ── HTTP ───────────────────────────────────────────────────────────────
    http_timeout: float = field(
        default_factory=lambda: _env_float("HTTP_TIMEOUT", 30.0)
    )

    # ── Cache ──────────────────────────────────────────────────────────────
    # 0 = unbounded; entries still expire at local midnight.
    cache_max_entries: int = field(
        default_factory=lambda: _env_int("CACHE_MAX_ENTRIES", 0)
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Returns a cached singleton Settings instance.

    Use this everywhere instead of instantiating Settings() directly.
    It guarantees a single object is shared across the entire process.
    """
    return Settings()
