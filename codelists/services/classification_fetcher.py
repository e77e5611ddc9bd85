"""
services/classification_fetcher.py
──────────────────────────────────────────────────────────────────────────────
Orchestrates one classification lookup:

  build query → GET → [2xx | 404] → decode / shape → ClassificationCodes

Language fallback:
  - A 404 for a language other than the fallback language ("nb") triggers
    exactly one retry with language="nb"; every other parameter, including
    the resolved date, is kept identical.
  - A 404 on "nb", a 404 on the retry, any other non-2xx status, a transport
    failure or an undecodable body all end in an empty result.

The public surface (get_classification_codes) never raises: callers cannot
tell "no codes" from "registry degraded".  fetch() exposes the same result
wrapped in a FetchOutcome carrying the FailureReason, and every failure is
logged here before it is swallowed.
"""
from __future__ import annotations

import dataclasses
import logging
from datetime import date
from typing import Callable

from pydantic import ValidationError

from codelists.config.settings import Settings
from codelists.domain.exceptions import RegistryTransportError, ResponseDecodeError
from codelists.domain.models import (
    ClassificationCodes,
    ClassificationQueryParams,
    FailureReason,
    FetchOutcome,
)
from codelists.ports.registry_port import RegistryPort
from codelists.services.query_builder import build_query
from codelists.services.response_shaper import build_correspondence_codes, decode_codes

logger = logging.getLogger(__name__)


class ClassificationFetcher:
    """Classification code provider with single-retry language fallback.

    Inject via services/container.py. Do not instantiate directly in
    application code.

    Args:
        registry: Any object satisfying RegistryPort.
        settings: Shared application settings.
        clock:    Returns "today"; used when no date is requested.
    """

    def __init__(
        self,
        registry: RegistryPort,
        settings: Settings,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._registry = registry
        self._fallback_language = settings.fallback_language
        self._clock = clock

    # ── Public API ─────────────────────────────────────────────────────────

    def get_classification_codes(
        self,
        classification_id: int,
        language: str = "nb",
        at_date: date | None = None,
        level: str = "",
        variant: str = "",
        select_codes: str = "",
        target_classification_id: str = "",
        concate_children: str = "",
    ) -> ClassificationCodes:
        """Return the codes for a classification; empty on any failure."""
        try:
            params = ClassificationQueryParams(
                classification_id=classification_id,
                language=language,
                at_date=at_date,
                level=level,
                variant=variant,
                select_codes=select_codes,
                target_classification_id=target_classification_id,
                concate_children=concate_children,
            )
        except ValidationError as exc:
            logger.error("Invalid classification query parameters: %s", exc)
            return _empty()
        return self.fetch(params).codes

    def fetch(self, params: ClassificationQueryParams) -> FetchOutcome:
        """Run the primary request and, on 404, the single fallback request.

        Args:
            params: Validated query parameters.

        Returns:
            FetchOutcome whose ``codes`` is always a valid (possibly empty)
            list and whose ``failure`` names why it is empty, if it failed.
        """
        # Resolve "today" once so the fallback asks for the same date.
        if params.at_date is None:
            params = params.model_copy(update={"at_date": self._clock()})

        logger.info(
            "fetch | classification=%d language=%s date=%s correspondence=%s",
            params.classification_id,
            params.language,
            params.at_date,
            params.is_correspondence,
        )

        # ── PRIMARY ────────────────────────────────────────────────────────
        outcome = self._attempt(params, attempts=1)
        if outcome.failure is not FailureReason.NOT_FOUND_PRIMARY_LANGUAGE:
            return outcome

        if params.language == self._fallback_language:
            logger.warning(
                "Classification %d not found (language=%s); no fallback available",
                params.classification_id,
                params.language,
            )
            return dataclasses.replace(outcome, failure=FailureReason.NOT_FOUND_TERMINAL)

        # ── FALLBACK ───────────────────────────────────────────────────────
        logger.warning(
            "Classification %d not found in %r, retrying with %r",
            params.classification_id,
            params.language,
            self._fallback_language,
        )
        fallback = params.model_copy(update={"language": self._fallback_language})
        outcome = self._attempt(fallback, attempts=2)
        if outcome.failure is FailureReason.NOT_FOUND_PRIMARY_LANGUAGE:
            logger.warning(
                "Classification %d not found in fallback language %r either",
                fallback.classification_id,
                fallback.language,
            )
            outcome = dataclasses.replace(outcome, failure=FailureReason.NOT_FOUND_TERMINAL)
        return dataclasses.replace(
            outcome, primary_failure=FailureReason.NOT_FOUND_PRIMARY_LANGUAGE
        )

    # ── Private helpers ────────────────────────────────────────────────────

    def _attempt(self, params: ClassificationQueryParams, attempts: int) -> FetchOutcome:
        """Issue one GET and turn its response into an outcome.

        A 404 is reported as NOT_FOUND_PRIMARY_LANGUAGE; fetch() decides
        whether it is terminal.
        """
        query = build_query(params)
        logger.debug("GET %s", query.url)
        try:
            response = self._registry.get(query.url)
        except RegistryTransportError as exc:
            logger.error("Registry request failed for %s: %s", query.url, exc)
            return self._failed(params, FailureReason.TRANSPORT_FAILURE, attempts)

        if response.ok:
            return self._decode(response.text, params, attempts)
        if response.not_found:
            return self._failed(params, FailureReason.NOT_FOUND_PRIMARY_LANGUAGE, attempts)

        logger.warning(
            "Classification %d: registry returned HTTP %d: %.300s",
            params.classification_id,
            response.status_code,
            response.text,
        )
        return self._failed(params, FailureReason.UNEXPECTED_STATUS, attempts)

    def _decode(
        self,
        body: str,
        params: ClassificationQueryParams,
        attempts: int,
    ) -> FetchOutcome:
        try:
            if params.is_correspondence:
                codes = build_correspondence_codes(body, params.concate_children)
            else:
                codes = decode_codes(body)
        except ResponseDecodeError as exc:
            logger.warning(
                "Could not decode classification %d response: %s",
                params.classification_id,
                exc,
            )
            return self._failed(params, FailureReason.DECODE_FAILURE, attempts)

        logger.info(
            "fetch complete | classification=%d codes=%d attempts=%d",
            params.classification_id,
            len(codes.codes),
            attempts,
        )
        return FetchOutcome(codes, attempts=attempts, language=params.language)

    @staticmethod
    def _failed(
        params: ClassificationQueryParams,
        reason: FailureReason,
        attempts: int,
    ) -> FetchOutcome:
        return FetchOutcome(_empty(), reason, attempts=attempts, language=params.language)


def _empty() -> ClassificationCodes:
    return ClassificationCodes()
