"""Oracle-assisted extraction with local re-validation.

The oracle's answer is treated as untrusted input. The first JSON array found
in its text is parsed, and each element is re-checked with the same noise
classifier, amount normalizer and catalog lookups as the deterministic
parser. Structural problems yield an empty candidate list, never an error.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .amounts import normalize_amount
from .fallback import PLACEHOLDER_DESCRIPTION
from .logging_setup import get_logger
from .matching import CategoryMatch, default_category, find_category_by_id, find_category_by_name
from .models import AI_CONFIDENCE, Catalog, Direction, ParsedTransaction, coerce_direction
from .noise import is_noise
from .oracle import Oracle, OracleError
from .prompting import build_system_instructions, build_user_content

_logger = get_logger("transaction_extraction.ai_extract")

_decoder = json.JSONDecoder()


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------


def find_json_list(text: str) -> list[Any] | None:
    """Return the first decodable JSON array embedded in ``text``.

    Tolerates commentary or code fences around the array, e.g.
    ``'Here you go: [{"description": "Kopi", ...}]'``.
    """

    start = text.find("[")
    while start != -1:
        try:
            value, _end = _decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            value = None
        if isinstance(value, list):
            return value
        start = text.find("[", start + 1)
    return None


class _OracleItem(BaseModel):
    """Typed view of one oracle-produced transaction.

    Every field is optional; unusable values are mapped to ``None`` so the
    resolution rules below decide the fallback instead of rejecting the item.
    """

    model_config = ConfigDict(extra="ignore")

    description: str | None = None
    amount: int | float | str | None = None
    type: str | None = None
    category_id: int | str | None = None
    category_name: str | None = None

    @field_validator("description", mode="before")
    @classmethod
    def _description_text(cls, v: Any) -> str | None:
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, int | float) and not isinstance(v, bool):
            return str(v)
        raise ValueError("description must be text")

    @field_validator("amount", "category_id", mode="before")
    @classmethod
    def _scalar_or_none(cls, v: Any) -> Any:
        if isinstance(v, bool) or not isinstance(v, int | float | str):
            return None
        return v

    @field_validator("type", "category_name", mode="before")
    @classmethod
    def _str_or_none(cls, v: Any) -> str | None:
        return v.strip() if isinstance(v, str) else None


def _resolve_category(item: _OracleItem, direction: Direction, catalog: Catalog) -> CategoryMatch:
    # Ids that are absent, falsy or unknown defer to the name when one is given.
    found = find_category_by_id(item.category_id, direction, catalog) if item.category_id else None
    if found is not None:
        return CategoryMatch(found.id, found.name, 0)
    if item.category_name:
        return find_category_by_name(item.category_name, direction, catalog)
    return default_category(direction, catalog)


def _to_candidate(
    raw: Any, *, default_direction: Direction, catalog: Catalog
) -> ParsedTransaction | None:
    if not isinstance(raw, Mapping):
        return None
    try:
        item = _OracleItem.model_validate(raw)
    except ValidationError:
        return None

    if item.description is None or item.description == "":
        description = PLACEHOLDER_DESCRIPTION
    else:
        # Whitespace-only text stays empty and is dropped by validation.
        description = item.description.strip()
    if is_noise(description):
        _logger.debug("ai_extract:skip_noise description=%r", description[:60])
        return None

    amount = normalize_amount(item.amount)
    if amount <= 0:
        return None

    direction = coerce_direction(item.type, default_direction)
    match = _resolve_category(item, direction, catalog)
    return ParsedTransaction(
        description=description,
        amount=amount,
        category_id=match.category_id,
        category_name=match.category_name,
        direction=direction,
        confidence=AI_CONFIDENCE,
    )


def candidates_from_response(
    text: str, *, default_direction: Direction, catalog: Catalog
) -> list[ParsedTransaction]:
    """Parse and re-validate an oracle response into candidates (input order)."""

    items = find_json_list(text)
    if items is None:
        _logger.info("ai_extract:no_list_found chars=%d", len(text))
        return []

    out: list[ParsedTransaction] = []
    for raw in items:
        candidate = _to_candidate(raw, default_direction=default_direction, catalog=catalog)
        if candidate is not None:
            out.append(candidate)
    _logger.info("ai_extract:parsed items=%d kept=%d", len(items), len(out))
    return out


# ---------------------------------------------------------------------------
# Oracle call
# ---------------------------------------------------------------------------


async def extract_with_oracle(
    oracle: Oracle, text: str, *, default_direction: Direction, catalog: Catalog
) -> list[ParsedTransaction]:
    """Ask ``oracle`` to extract transactions from ``text`` and re-validate them.

    Returns an empty list when the oracle is unavailable (:class:`OracleError`)
    or its answer contains no usable array. Other exceptions propagate.
    """

    instructions = build_system_instructions(catalog)
    user_input = build_user_content(text, default_direction)
    try:
        response = await oracle.complete(instructions=instructions, user_input=user_input)
    except OracleError as e:
        _logger.warning("ai_extract:oracle_unavailable error=%s", e)
        return []
    if not response or not response.strip():
        _logger.info("ai_extract:empty_response")
        return []
    return candidates_from_response(
        response, default_direction=default_direction, catalog=catalog
    )


__all__ = ["candidates_from_response", "extract_with_oracle", "find_json_list"]
