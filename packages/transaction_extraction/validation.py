"""Final validation pass shared by both extraction paths."""

from __future__ import annotations

from collections.abc import Iterable

from .models import ParsedTransaction


def is_valid_transaction(tx: ParsedTransaction) -> bool:
    return tx.amount > 0 and len(tx.description.strip()) > 0


def validate_transactions(
    transactions: Iterable[ParsedTransaction],
) -> tuple[list[ParsedTransaction], list[ParsedTransaction]]:
    """Partition candidates into ``(valid, invalid)``, preserving order.

    A candidate is valid when its amount is strictly positive and its
    description is non-empty after trimming.
    """

    valid: list[ParsedTransaction] = []
    invalid: list[ParsedTransaction] = []
    for tx in transactions:
        (valid if is_valid_transaction(tx) else invalid).append(tx)
    return valid, invalid


__all__ = ["is_valid_transaction", "validate_transactions"]
