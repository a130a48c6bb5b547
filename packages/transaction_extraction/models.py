"""Data models and type aliases for ``transaction_extraction``.

Output objects are frozen dataclasses so a parse result can be shared freely
between callers; the untrusted oracle payload is validated separately with
Pydantic in :mod:`transaction_extraction.ai_extract`.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

# ---------------------------------------------------------------------------
# Core aliases
# ---------------------------------------------------------------------------

type Direction = Literal["income", "expense"]
"""Whether a transaction brings money in (``income``) or out (``expense``)."""

type CategoryId = int | str
"""Category identifier; unique within its direction."""

type ExtractionSource = Literal["ai", "fallback", "none"]

DIRECTIONS: tuple[Direction, ...] = ("income", "expense")

AI_CONFIDENCE: float = 0.95
FALLBACK_CONFIDENCE: float = 0.7


def coerce_direction(value: object, default: Direction) -> Direction:
    """Return ``value`` when it is exactly a known direction, else ``default``."""

    if value == "income":
        return "income"
    if value == "expense":
        return "expense"
    return default


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Category:
    """A catalog entry used for keyword matching.

    Attributes
    ----------
    id:
        Identifier, unique within ``direction``.
    name:
        Display name in the catalog's language.
    direction:
        ``income`` or ``expense``.
    keywords:
        Lower-case keyword strings, in priority order. Matching compares
        case-insensitively regardless.
    """

    id: CategoryId
    name: str
    direction: Direction
    keywords: tuple[str, ...] = ()


type Catalog = Sequence[Category]
"""A snapshot of categories for one owner at parse time. Never mutated."""


# ---------------------------------------------------------------------------
# Extraction output
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ParsedTransaction:
    """A single extracted transaction.

    Candidates are built with this same type; the validation pass in
    :func:`transaction_extraction.validation.validate_transactions` decides
    which ones reach the caller (``amount > 0`` and a non-empty trimmed
    ``description``).
    """

    description: str
    amount: int
    category_id: CategoryId
    category_name: str
    direction: Direction
    confidence: float

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError("confidence must be within [0,1]")


@dataclass(frozen=True, slots=True)
class ExtractionResult:
    """Outcome of one ``parse`` call. Transactions keep input order."""

    success: bool
    transactions: tuple[ParsedTransaction, ...]
    message: str
    error: str | None = None
    source: ExtractionSource = "none"


# ---------------------------------------------------------------------------
# Downstream record
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TransactionRecord:
    """A persistable transaction derived from a :class:`ParsedTransaction`."""

    id: str
    owner: str | None
    wallet_id: str
    category_id: CategoryId
    amount: int
    description: str
    direction: Direction
    date: str
    created_at: datetime = field(compare=False)


__all__ = [
    "AI_CONFIDENCE",
    "Catalog",
    "Category",
    "CategoryId",
    "DIRECTIONS",
    "Direction",
    "ExtractionResult",
    "ExtractionSource",
    "FALLBACK_CONFIDENCE",
    "ParsedTransaction",
    "TransactionRecord",
    "coerce_direction",
]
