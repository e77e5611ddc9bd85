"""
services/response_shaper.py
──────────────────────────────────────────────────────────────────────────────
Decodes registry bodies and reshapes correspondence tables into the uniform
ClassificationCodes model.

shape_correspondence() is a pure function: same items + same mode always give
the same list, in the same order.

Aggregation modes:
  UNGROUPED            one record per item
                         code  = "{sourceCode}#{targetCode}"
                         notes = targetName
  GROUPED_WITH_NOTES   one record per distinct sourceCode
                         code  = sourceCode
                         notes = "X, Y, ..." (every targetName of the group)
  GROUPED_MERGED_NAME  one record per distinct sourceCode
                         code  = sourceCode
                         name  = "{sourceName} (X, Y, ...)", notes unset

Correspondence tables are flat: level is always "1" and parent_code is the
source code.  Grouped records take their position, name and short name from
the first item of the group.
"""
from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from codelists.domain.exceptions import ResponseDecodeError
from codelists.domain.models import (
    AggregationMode,
    ClassificationCode,
    ClassificationCodes,
    CorrespondenceItem,
    CorrespondenceItemSet,
)

logger = logging.getLogger(__name__)

CORRESPONDENCE_LEVEL = "1"
TARGET_NAME_SEPARATOR = ", "


# ── Decoding ───────────────────────────────────────────────────────────────

def _load_json(body: str) -> Any:
    try:
        return json.loads(body)
    except (ValueError, TypeError, RecursionError) as exc:
        raise ResponseDecodeError(f"Response is not valid JSON: {exc}") from exc


def decode_codes(body: str) -> ClassificationCodes:
    """Decode a ``{"codes": [...]}`` body.

    A JSON ``null`` body decodes to an empty list.

    Raises:
        ResponseDecodeError: On malformed JSON or a shape mismatch.
    """
    data = _load_json(body)
    if data is None:
        return ClassificationCodes()
    if not isinstance(data, dict):
        raise ResponseDecodeError(
            f"Expected a JSON object, got {type(data).__name__}"
        )
    try:
        return ClassificationCodes.model_validate(data)
    except ValidationError as exc:
        raise ResponseDecodeError(f"Unexpected codes shape: {exc}") from exc


def decode_correspondence(body: str) -> CorrespondenceItemSet:
    """Decode a ``{"correspondenceItems": [...]}`` body.

    Raises:
        ResponseDecodeError: On malformed JSON or a shape mismatch.
    """
    data = _load_json(body)
    if data is None:
        return CorrespondenceItemSet()
    if not isinstance(data, dict):
        raise ResponseDecodeError(
            f"Expected a JSON object, got {type(data).__name__}"
        )
    try:
        return CorrespondenceItemSet.model_validate(data)
    except ValidationError as exc:
        raise ResponseDecodeError(f"Unexpected correspondence shape: {exc}") from exc


# ── Shaping ────────────────────────────────────────────────────────────────

def shape_correspondence(
    items: list[CorrespondenceItem],
    mode: AggregationMode = AggregationMode.UNGROUPED,
) -> ClassificationCodes:
    """Reshape correspondence items into ClassificationCodes.

    Args:
        items: Correspondence items in registry order.
        mode:  Aggregation mode (see module docstring).

    Returns:
        ClassificationCodes; empty when ``items`` is empty.

    Examples:
        >>> a_x = CorrespondenceItem(sourceCode="A", sourceName="a", targetName="X")
        >>> a_y = CorrespondenceItem(sourceCode="A", sourceName="a", targetName="Y")
        >>> shape_correspondence([a_x, a_y], AggregationMode.GROUPED_WITH_NOTES).codes[0].notes
        'X, Y'
    """
    if mode is AggregationMode.UNGROUPED:
        return ClassificationCodes(codes=[_ungrouped(item) for item in items])

    groups = _group_by_source(items)
    if mode is AggregationMode.GROUPED_WITH_NOTES:
        codes = [_grouped_with_notes(group) for group in groups.values()]
    else:
        codes = [_grouped_merged_name(group) for group in groups.values()]
    return ClassificationCodes(codes=codes)


def build_correspondence_codes(
    body: str,
    mode: AggregationMode = AggregationMode.UNGROUPED,
) -> ClassificationCodes:
    """Decode a correspondence body and shape it in one step.

    Raises:
        ResponseDecodeError: If the body cannot be decoded.
    """
    item_set = decode_correspondence(body)
    codes = shape_correspondence(item_set.items, mode)
    logger.debug(
        "Shaped %d correspondence items into %d codes (mode=%r)",
        len(item_set.items),
        len(codes.codes),
        mode.value,
    )
    return codes


# ── Helpers ────────────────────────────────────────────────────────────────

def _group_by_source(
    items: list[CorrespondenceItem],
) -> dict[str, list[CorrespondenceItem]]:
    # dict keeps first-insertion order, which fixes each group's position
    groups: dict[str, list[CorrespondenceItem]] = {}
    for item in items:
        groups.setdefault(item.source_code, []).append(item)
    return groups


def _joined_target_names(group: list[CorrespondenceItem]) -> str:
    return TARGET_NAME_SEPARATOR.join(item.target_name for item in group)


def _ungrouped(item: CorrespondenceItem) -> ClassificationCode:
    return ClassificationCode(
        code=f"{item.source_code}#{item.target_code}",
        name=item.source_name,
        level=CORRESPONDENCE_LEVEL,
        parent_code=item.source_code,
        short_name=item.source_short_name,
        notes=item.target_name,
    )


def _grouped_with_notes(group: list[CorrespondenceItem]) -> ClassificationCode:
    first = group[0]
    return ClassificationCode(
        code=first.source_code,
        name=first.source_name,
        level=CORRESPONDENCE_LEVEL,
        parent_code=first.source_code,
        short_name=first.source_short_name,
        notes=_joined_target_names(group),
    )


def _grouped_merged_name(group: list[CorrespondenceItem]) -> ClassificationCode:
    first = group[0]
    return ClassificationCode(
        code=first.source_code,
        name=f"{first.source_name} ({_joined_target_names(group)})",
        level=CORRESPONDENCE_LEVEL,
        parent_code=first.source_code,
        short_name=first.source_short_name,
    )
