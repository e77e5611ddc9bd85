"""
ports/classifications_port.py
──────────────────────────────────────────────────────────────────────────────
Inbound contract for anything that serves classification codes.

Current implementation: ClassificationFetcher (services/classification_fetcher.py)
"""
from __future__ import annotations

from datetime import date
from typing import Protocol, runtime_checkable

from codelists.domain.models import ClassificationCodes


@runtime_checkable
class ClassificationsPort(Protocol):
    """Contract for a classification code provider."""

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
        """Return the codes of a classification, variant or correspondence table.

        Args:
            classification_id:        Registry id of the classification.
            language:                 Label language (nb, nn, en).
            at_date:                  Validity date; None means today.
            level:                    Hierarchy level; empty means all levels.
            variant:                  Variant name.
            select_codes:             Pattern limiting the returned codes.
            target_classification_id: Target classification for correspondences.
            concate_children:         "" / "1" / "2" aggregation mode.

        Returns:
            ClassificationCodes, possibly empty.  Never raises.
        """
        ...
