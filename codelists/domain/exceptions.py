"""
domain/exceptions.py
──────────────────────────────────────────────────────────────────────────────
Custom exception hierarchy.

All exceptions are rooted at CodelistsError so callers can catch broadly
(except CodelistsError) or narrowly (except RegistryStatusError).

The classification surface never lets these escape: ClassificationFetcher
turns every one of them into an empty result plus a FailureReason.  The
administrative-units adapter lets them propagate so the cache never stores
a failed lookup.
"""
from __future__ import annotations


class CodelistsError(Exception):
    """Base exception for all application errors."""


class ConfigurationError(CodelistsError):
    """Raised when required configuration is missing or invalid."""


class RegistryTransportError(CodelistsError):
    """Raised when a request could not be sent or its response not received."""


class RegistryStatusError(CodelistsError):
    """Raised when a registry answers with a non-2xx status."""

    def __init__(self, status_code: int, message: str = "") -> None:
        self.status_code = status_code
        super().__init__(message or f"Registry returned HTTP {status_code}")


class ResponseDecodeError(CodelistsError):
    """Raised when a response body does not match the expected JSON shape."""
