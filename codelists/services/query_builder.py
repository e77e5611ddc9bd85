"""
services/query_builder.py
──────────────────────────────────────────────────────────────────────────────
Endpoint selection and query-string assembly for the KLASS registry.

build_query() is a pure function without I/O or exceptions, so the whole
URL contract can be unit-tested without a registry.

Endpoint (later rules override earlier ones):
  {id}/codesAt         default
  {id}/variantAt       variant is set
  {id}/correspondsAt   target_classification_id is set (wins over variant)

Query string, fixed order, empty fields omitted:
  ?language=..&date=YYYY-MM-DD[&selectLevel=..][&variantName=..]
   [&selectCodes=..][&targetClassificationId=..]
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from codelists.domain.models import ClassificationQueryParams

CODES_AT = "codesAt"
VARIANT_AT = "variantAt"
CORRESPONDS_AT = "correspondsAt"


@dataclass(frozen=True)
class RegistryQuery:
    """Relative registry address for one request."""

    endpoint: str
    query: str

    @property
    def url(self) -> str:
        return f"{self.endpoint}{self.query}"


def select_endpoint(params: ClassificationQueryParams) -> str:
    """Return ``{id}/codesAt``, ``{id}/variantAt`` or ``{id}/correspondsAt``."""
    resource = CODES_AT
    if params.variant:
        resource = VARIANT_AT
    if params.target_classification_id:
        resource = CORRESPONDS_AT
    return f"{params.classification_id}/{resource}"


def build_query_string(params: ClassificationQueryParams, on_date: date) -> str:
    """Assemble the query string, starting with ``?``.

    ``language`` and ``date`` are always present; the remaining fields are
    appended in fixed order only when non-empty.
    """
    optional = (
        ("selectLevel", params.level),
        ("variantName", params.variant),
        ("selectCodes", params.select_codes),
        ("targetClassificationId", params.target_classification_id),
    )
    parts = [
        f"language={params.language}",
        f"date={on_date.strftime('%Y-%m-%d')}",
    ]
    parts.extend(f"{name}={value}" for name, value in optional if value)
    return "?" + "&".join(parts)


def build_query(
    params: ClassificationQueryParams,
    today: date | None = None,
) -> RegistryQuery:
    """Build the registry address for ``params``.

    Args:
        params: Classification query parameters.
        today:  Date used when ``params.at_date`` is None.  Defaults to the
                system date; pass it explicitly for reproducible queries.

    Returns:
        RegistryQuery with endpoint and query string.

    Examples:
        >>> p = ClassificationQueryParams(classification_id=7, language="xx",
        ...                               at_date=date(2024, 1, 1))
        >>> build_query(p).url
        '7/codesAt?language=xx&date=2024-01-01'
    """
    on_date = params.at_date or today or date.today()
    return RegistryQuery(
        endpoint=select_endpoint(params),
        query=build_query_string(params, on_date),
    )
