"""
domain/models.py
──────────────────────────────────────────────────────────────────────────────
Pure domain objects: Pydantic models with no imports from adapters or ports.

These models are the lingua franca of the entire system:
  • adapters decode registry JSON into them
  • services build queries from them and reshape them
  • interfaces (CLI) serialise them

Wire names are camelCase (SSB) or Norwegian (Geonorge); every model accepts
both the wire alias and the Python field name.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


# ── Enums ──────────────────────────────────────────────────────────────────────

class AggregationMode(str, Enum):
    """How correspondence items sharing a source code are combined."""
    UNGROUPED           = ""   # one record per item, key "source#target"
    GROUPED_WITH_NOTES  = "1"  # one record per source, target names in notes
    GROUPED_MERGED_NAME = "2"  # one record per source, target names in name

    @classmethod
    def parse(cls, value: Any) -> "AggregationMode":
        """Map a loosely typed mode value onto the closed set.

        Unrecognised values fall back to UNGROUPED instead of producing an
        empty result.
        """
        if isinstance(value, cls):
            return value
        raw = "" if value is None else str(value).strip()
        try:
            return cls(raw)
        except ValueError:
            logger.warning(
                "Unrecognised concate_children value %r; using ungrouped", value
            )
            return cls.UNGROUPED


class FailureReason(str, Enum):
    """Why a classification fetch produced an empty result."""
    TRANSPORT_FAILURE          = "transport_failure"
    NOT_FOUND_PRIMARY_LANGUAGE = "not_found_primary_language"
    NOT_FOUND_TERMINAL         = "not_found_terminal"
    DECODE_FAILURE             = "decode_failure"
    UNEXPECTED_STATUS          = "unexpected_status"


# ── Input ──────────────────────────────────────────────────────────────────────

class ClassificationQueryParams(BaseModel):
    """Validated input to the ClassificationFetcher."""

    model_config = ConfigDict(frozen=True)

    classification_id: int = Field(..., description="KLASS classification id")
    language: str = Field("nb", description="Label language: nb, nn or en")
    at_date: Optional[date] = Field(
        None, description="Validity date; None means today"
    )
    level: str = Field("", description="Hierarchy level; empty = all levels")
    variant: str = Field("", description="Variant name to use instead of the base list")
    select_codes: str = Field("", description="Code pattern limiting the result")
    target_classification_id: str = Field(
        "", description="Target classification; switches to correspondence mode"
    )
    concate_children: AggregationMode = AggregationMode.UNGROUPED

    @field_validator(
        "language", "level", "variant", "select_codes", "target_classification_id",
        mode="before",
    )
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("concate_children", mode="before")
    @classmethod
    def parse_mode(cls, v: Any) -> AggregationMode:
        return AggregationMode.parse(v)

    @property
    def is_correspondence(self) -> bool:
        return bool(self.target_classification_id)


# ── Classification codes ───────────────────────────────────────────────────────

class ClassificationCode(BaseModel):
    """A single code in a classification, variant or correspondence table."""

    model_config = ConfigDict(populate_by_name=True)

    code:        str
    name:        str
    level:       str
    parent_code: Optional[str] = Field(None, alias="parentCode")
    short_name:  Optional[str] = Field(None, alias="shortName")
    notes:       Optional[str] = None


class ClassificationCodes(BaseModel):
    """Ordered list of codes; order is the order of first appearance.

    Code is unique within one list, so the list can be read as a mapping.
    """

    codes: list[ClassificationCode] = Field(default_factory=list)

    @field_validator("codes", mode="before")
    @classmethod
    def none_to_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def is_empty(self) -> bool:
        return not self.codes

    def as_mapping(self) -> dict[str, ClassificationCode]:
        """Index the codes by their Code field, keeping list order."""
        return {c.code: c for c in self.codes}

    def to_dict(self) -> dict:
        """Serialise using the registry's camelCase field names."""
        return self.model_dump(mode="json", by_alias=True)


# ── Correspondence wire shapes ─────────────────────────────────────────────────

class CorrespondenceItem(BaseModel):
    """One source→target row of a correspondence table."""

    model_config = ConfigDict(populate_by_name=True)

    source_code:       str = Field(..., alias="sourceCode")
    source_name:       str = Field(..., alias="sourceName")
    source_short_name: str = Field("", alias="sourceShortName")
    target_code:       str = Field("", alias="targetCode")
    target_name:       str = Field("", alias="targetName")
    target_short_name: str = Field("", alias="targetShortName")

    @field_validator(
        "source_short_name", "target_code", "target_name", "target_short_name",
        mode="before",
    )
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class CorrespondenceItemSet(BaseModel):
    """Correspondence items in the order the registry returned them."""

    model_config = ConfigDict(populate_by_name=True)

    items: list[CorrespondenceItem] = Field(
        default_factory=list, alias="correspondenceItems"
    )

    @field_validator("items", mode="before")
    @classmethod
    def none_to_list(cls, v: Any) -> Any:
        return [] if v is None else v


# ── Administrative units ───────────────────────────────────────────────────────

class Commune(BaseModel):
    """A Norwegian municipality (kommune)."""

    model_config = ConfigDict(populate_by_name=True)

    number: str = Field(..., alias="kommunenummer")
    name:   str = Field(..., alias="kommunenavnNorsk")


class County(BaseModel):
    """A Norwegian county (fylke), optionally with its communes."""

    model_config = ConfigDict(populate_by_name=True)

    number:   str = Field(..., alias="fylkesnummer")
    name:     str = Field(..., alias="fylkesnavn")
    communes: list[Commune] = Field(default_factory=list, alias="kommuner")


# ── Fetch outcome ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class FetchOutcome:
    """Result of one ClassificationFetcher.fetch() call.

    ``codes`` is what the public surface returns.  ``failure`` keeps the
    reason an empty result was produced, for logging and diagnostics only.
    ``primary_failure`` is NOT_FOUND_PRIMARY_LANGUAGE whenever the fallback
    language was tried, whatever the fallback's own result.
    """

    codes: ClassificationCodes
    failure: Optional[FailureReason] = None
    attempts: int = 1
    language: str = ""
    primary_failure: Optional[FailureReason] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def used_fallback(self) -> bool:
        return self.primary_failure is FailureReason.NOT_FOUND_PRIMARY_LANGUAGE
