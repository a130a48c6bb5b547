"""Noise classification for statement-like text.

Pasted statements carry lines that look like transactions but are not:
column headers ("Sumber", "Platform", "Saldo (Rp)"), running totals
("Total Cash Masuk: 500.000") and emoji section titles ("💰 Pemasukan").
Both extraction paths consult this module so they agree on what to drop.
"""

from __future__ import annotations

# Matched as plain substrings of the lower-cased fragment.
NOISE_MARKERS: tuple[str, ...] = (
    # totals and summaries
    "total",
    "subtotal",
    "grand total",
    "total cash",
    "total masuk",
    "total keluar",
    "jumlah",
    "sum",
    "amount",
    # tabular headers
    "sumber",
    "source",
    "platform",
    "saldo (rp)",
    "jumlah (rp)",
    "balance (rp)",
)

SECTION_MARKERS: tuple[str, ...] = ("💰", "📱", "📥", "📤", "📊", "💳")


def is_noise(fragment: str) -> bool:
    """Return True when ``fragment`` is a header, subtotal or summary artifact."""

    lowered = fragment.lower()
    return any(marker in lowered for marker in NOISE_MARKERS)


def is_section_marker(line: str) -> bool:
    return line.lstrip().startswith(SECTION_MARKERS)


def has_digit(line: str) -> bool:
    return any(ch.isdigit() for ch in line)


def reject_line(line: str) -> str | None:
    """Return a short reason when a raw line cannot be a transaction, else None.

    Reasons: ``"no_digits"``, ``"section"``, ``"noise"``.
    """

    if not has_digit(line):
        return "no_digits"
    if is_section_marker(line):
        return "section"
    if is_noise(line):
        return "noise"
    return None


__all__ = [
    "NOISE_MARKERS",
    "SECTION_MARKERS",
    "has_digit",
    "is_noise",
    "is_section_marker",
    "reject_line",
]
