"""Locale-aware amount normalization.

The input locale writes ``.`` as the thousands separator and ``,`` as the
decimal mark (``1.500.000`` is one and a half million, ``12,5`` is twelve and
a half), and commonly abbreviates magnitudes (``50rb``, ``50k``, ``2jt``).
:func:`normalize_amount` turns such tokens into an integer amount in the
smallest currency unit. It never raises; ``0`` means "no amount found".
"""

from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

_MILLION_WORDS: tuple[str, ...] = ("juta", "jt", "million")
_THOUSAND_WORDS: tuple[str, ...] = ("ribu", "rb", "thousand")
# "50k", "50 K"; a bare "k" inside a word does not count.
_THOUSAND_ABBREV_RE = re.compile(r"\d\s*k(?![a-z])")

# Digits with dot separators and an optional comma-decimal tail.
_NUMERIC_CORE_RE = re.compile(r"[\d.]*\d[\d.]*(?:,\d+)?")


def _multiplier(lowered: str) -> int:
    if any(w in lowered for w in _MILLION_WORDS):
        return 1_000_000
    if any(w in lowered for w in _THOUSAND_WORDS) or _THOUSAND_ABBREV_RE.search(lowered):
        return 1_000
    return 1


def _numeric_core(lowered: str) -> str | None:
    runs = _NUMERIC_CORE_RE.findall(lowered)
    if not runs:
        return None
    # Longest run wins; ties keep the first occurrence.
    return max(runs, key=len)


def _canonical_decimal(core: str) -> str:
    """Rewrite a locale numeric core into a ``Decimal``-parsable string."""

    core = core.rstrip(".")
    if "," in core:
        # Dots are thousands separators; the comma is the decimal mark.
        return core.replace(".", "").replace(",", ".")
    if "." in core and len(core.rsplit(".", 1)[-1]) == 3:
        return core.replace(".", "")
    return core


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def normalize_amount(token: str | int | float | Decimal | None) -> int:
    """Convert an amount token into an exact integer amount.

    Parameters
    ----------
    token:
        Either an already-numeric value (rounded half-up and returned) or a
        string such as ``"100.000"``, ``"Rp 1.500.000"``, ``"12,5"``,
        ``"50rb"``, ``"2 juta"``.

    Returns
    -------
    int
        The rounded amount, or ``0`` when nothing usable is found.

    Examples
    --------
    >>> normalize_amount("100.000")
    100000
    >>> normalize_amount("1.500.000")
    1500000
    >>> normalize_amount("12.5")
    13
    >>> normalize_amount("50rb"), normalize_amount("50k"), normalize_amount("2jt")
    (50000, 50000, 2000000)
    """

    if token is None or isinstance(token, bool):
        return 0
    if isinstance(token, int):
        return token
    if isinstance(token, float):
        if not math.isfinite(token):
            return 0
        return _round_half_up(Decimal(str(token)))
    if isinstance(token, Decimal):
        if not token.is_finite():
            return 0
        return _round_half_up(token)
    if not isinstance(token, str):
        return 0

    lowered = token.lower()
    multiplier = _multiplier(lowered)
    core = _numeric_core(lowered)
    if core is None:
        return 0

    try:
        value = Decimal(_canonical_decimal(core))
    except InvalidOperation:
        return 0
    return _round_half_up(value * multiplier)


__all__ = ["normalize_amount"]
