"""Interactive category review for parsed transactions.

Each transaction is shown with its suggested category pre-filled; the user
confirms with Enter or picks another category of the same direction. Inputs
are never mutated; reviewed transactions are returned as new objects.
"""

from __future__ import annotations

import builtins
from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace

from .logging_setup import get_logger
from .matching import categories_for
from .models import Catalog, Category, ParsedTransaction
from .term_ui import select_category

_logger = get_logger("transaction_extraction.review")

type CategorySelector = Callable[..., str]
"""Called as ``selector(names, default=...)``; returns the chosen name."""


def _format_amount(amount: int) -> str:
    return f"Rp {amount:,}".replace(",", ".")


def review_parsed_transactions(
    transactions: Iterable[ParsedTransaction],
    catalog: Catalog,
    *,
    selector: CategorySelector | None = None,
) -> list[ParsedTransaction]:
    """Let the user confirm or change the category of each transaction.

    Parameters
    ----------
    transactions:
        Transactions to review, in display order.
    catalog:
        Categories to choose from; only those of the transaction's direction
        are offered.
    selector:
        Prompt function; defaults to :func:`transaction_extraction.term_ui.select_category`.
    """

    choose = selector or select_category
    reviewed: list[ParsedTransaction] = []
    changed = 0
    for pos, tx in enumerate(transactions, start=1):
        options: Sequence[Category] = categories_for(tx.direction, catalog)
        if not options:
            reviewed.append(tx)
            continue
        by_name = {c.name.lower(): c for c in options}
        builtins.print(
            f"\n[{pos}] {tx.description} | {_format_amount(tx.amount)} | {tx.direction}"
        )
        default = tx.category_name if tx.category_name.lower() in by_name else options[0].name
        answer = choose([c.name for c in options], default=default)
        picked = by_name.get((answer or "").strip().lower())
        if picked is None or (picked.id == tx.category_id and picked.name == tx.category_name):
            reviewed.append(tx)
            continue
        reviewed.append(replace(tx, category_id=picked.id, category_name=picked.name))
        changed += 1

    _logger.info("review:done total=%d changed=%d", len(reviewed), changed)
    return reviewed


__all__ = ["CategorySelector", "review_parsed_transactions"]
