"""Deterministic, network-free line parser.

Used when the oracle returns nothing. Each input line is handled on its own:
noise lines are rejected, the rightmost number on the line is taken as the
amount, and what remains becomes the description. Malformed lines are
dropped silently; the parser never raises for bad input.
"""

from __future__ import annotations

import re

from .amounts import normalize_amount
from .logging_setup import get_logger
from .matching import match_category
from .models import FALLBACK_CONFIDENCE, Catalog, Direction, ParsedTransaction
from .noise import is_noise, reject_line

_logger = get_logger("transaction_extraction.fallback")

PLACEHOLDER_DESCRIPTION = "Transaction"

_MAGNITUDE_SUFFIX = r"(?:\s*(?:ribu|rb|k|juta|jt|thousand|million)(?![a-z]))?"

# Amount tokens, each with an optional magnitude suffix ("50rb", "2 juta").
_AMOUNT_TOKEN_RE = re.compile(r"[\d.]*\d[\d.]*(?:,\d+)?" + _MAGNITUDE_SUFFIX, re.IGNORECASE)

_LEADING_PREPOSITION_RE = re.compile(
    r"^(?:sumber|dari|ke|untuk|from|to|for|source)[\s:]+", re.IGNORECASE
)
_TRAILING_AMOUNT_RE = re.compile(
    r"(?:(?:rp\.?|idr)\s*)?[\d.]+(?:,\d+)?" + _MAGNITUDE_SUFFIX + r"(?:,-)?\s*$", re.IGNORECASE
)
_TRAILING_PUNCT_RE = re.compile(r"[\s\-–—:=]+$")
_WHITESPACE_RE = re.compile(r"\s+")


def split_lines(text: str) -> list[str]:
    """Split on newline boundaries, trimming and dropping blank lines."""

    return [s for s in (line.strip() for line in re.split(r"[\r\n]+", text)) if s]


def last_amount_token(line: str) -> str | None:
    tokens = [m.group(0) for m in _AMOUNT_TOKEN_RE.finditer(line)]
    return tokens[-1] if tokens else None


def extract_description(line: str) -> str:
    """Derive a description by stripping prefixes, the amount and punctuation.

    >>> extract_description("Bude Tun - 100.000")
    'Bude Tun'
    >>> extract_description("dari: 2jt")
    'Transaction'
    """

    desc = _LEADING_PREPOSITION_RE.sub("", line.strip())
    desc = _TRAILING_AMOUNT_RE.sub("", desc)
    desc = _TRAILING_PUNCT_RE.sub("", desc)
    desc = _WHITESPACE_RE.sub(" ", desc).strip()
    return desc or PLACEHOLDER_DESCRIPTION


def parse_line(
    line: str, *, default_direction: Direction, catalog: Catalog
) -> ParsedTransaction | None:
    """Parse one pre-screened line, or return None when it yields no transaction."""

    token = last_amount_token(line)
    if token is None:
        return None
    amount = normalize_amount(token)
    if amount <= 0:
        return None

    description = extract_description(line)
    if is_noise(description):
        return None

    match = match_category(description, default_direction, catalog)
    return ParsedTransaction(
        description=description,
        amount=amount,
        category_id=match.category_id,
        category_name=match.category_name,
        direction=default_direction,
        confidence=FALLBACK_CONFIDENCE,
    )


def parse_lines(
    text: str, *, default_direction: Direction, catalog: Catalog
) -> list[ParsedTransaction]:
    """Parse every line of ``text``; output keeps input line order.

    Parameters
    ----------
    text:
        Raw user input, one transaction per line.
    default_direction:
        Direction applied to every line (decided once for the whole input).
    catalog:
        Category snapshot used for keyword matching.
    """

    out: list[ParsedTransaction] = []
    for line in split_lines(text):
        reason = reject_line(line)
        if reason is not None:
            if reason != "no_digits":
                _logger.debug("fallback:skip_%s line=%r", reason, line[:60])
            continue
        parsed = parse_line(line, default_direction=default_direction, catalog=catalog)
        if parsed is None:
            _logger.debug("fallback:skip_unparsable line=%r", line[:60])
            continue
        out.append(parsed)
    return out


__all__ = [
    "PLACEHOLDER_DESCRIPTION",
    "extract_description",
    "last_amount_token",
    "parse_line",
    "parse_lines",
    "split_lines",
]
