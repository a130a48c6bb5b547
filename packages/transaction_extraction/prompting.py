"""Prompt construction for oracle-assisted extraction.

This module builds:
- The system instructions: the category catalog (ids, names, a few keywords),
  the locale number rules, the lines to skip, and the exact output shape.
- The user content embedding the raw input and the default direction.
"""

from __future__ import annotations

from collections.abc import Sequence

from .models import Catalog, Category, Direction

KEYWORDS_PER_CATEGORY = 5


def format_category_list(categories: Sequence[Category]) -> str:
    if not categories:
        return "  (none)"
    lines = []
    for c in categories:
        keywords = ", ".join(c.keywords[:KEYWORDS_PER_CATEGORY])
        lines.append(f'  - ID {c.id}: "{c.name}" (keywords: {keywords})')
    return "\n".join(lines)


def build_system_instructions(catalog: Catalog) -> str:
    """Return the fixed parsing instructions for ``catalog``."""

    expense = [c for c in catalog if c.direction == "expense"]
    income = [c for c in catalog if c.direction == "income"]

    return f"""You are a financial transaction parser. Parse the user's text and extract INDIVIDUAL transactions only.

AVAILABLE CATEGORIES:

EXPENSE CATEGORIES:
{format_category_list(expense)}

INCOME CATEGORIES:
{format_category_list(income)}

CRITICAL RULES:
1. Indonesian number format: DOT is the thousands separator, COMMA is the decimal mark
   - "100.000" = 100000 (one hundred thousand)
   - "1.500.000" = 1500000
   - "rb"/"ribu"/"k" = x1000, "jt"/"juta" = x1000000

2. SKIP these lines (they are NOT transactions):
   - Headers: "Sumber", "Jumlah", "Platform", "Saldo (Rp)", "Jumlah (Rp)"
   - Totals/Summaries: "Total Cash Masuk", "Total", "Subtotal", "Grand Total"
   - Section titles such as "💰 Pemasukan", "📱 Saldo Digital", "Pengeluaran"
   - Any line that summarizes other transactions

3. ONLY extract actual individual transactions like:
   - "Bude Tun - 100.000" -> individual gift from Bude Tun
   - "GoPay - 103.600" -> individual balance/transaction
   - "Makan siang - 25.000" -> individual expense

4. CATEGORY MATCHING - use a category ID from the lists above:
   - Match keywords in the transaction description to find the best category
   - Family names (Bude, Kakak, Ayah, ...): Gift category (income)
   - E-wallets (GoPay, OVO, Dana): Other category

5. OUTPUT FORMAT - return a JSON array of objects with exactly these fields:
   - description: string (item/person name)
   - amount: number (parsed amount as a positive integer)
   - type: "income" or "expense"
   - category_id: the ID from the category lists above
   - category_name: the name of the selected category

Output ONLY the JSON array, no explanation:
[{{"description": "name", "amount": 100000, "type": "expense", "category_id": 2, "category_name": "Dining"}}]"""


def build_user_content(text: str, default_direction: Direction) -> str:
    return (
        f"Parse these transactions (default type: {default_direction}). "
        "Remember to SKIP totals and summaries:\n\n"
        f"{text}\n\n"
        "Return ONLY a JSON array of INDIVIDUAL transactions (no totals):"
    )


__all__ = [
    "KEYWORDS_PER_CATEGORY",
    "build_system_instructions",
    "build_user_content",
    "format_category_list",
]
