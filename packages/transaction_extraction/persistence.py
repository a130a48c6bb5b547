# ruff: noqa: I001
"""Persistence integration for transaction_extraction.

Writes converted transactions to the shared database owned by ``libs/db``
through the SQLAlchemy ORM models in ``db.models.finance``. Callers own the
session and its transaction scope (``db.client.session_scope``).
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from sqlalchemy.orm import Session

from db.models.finance import TxTransaction
from .logging_setup import get_logger
from .models import TransactionRecord

_logger = get_logger("transaction_extraction.persistence")


def _category_pk(value: int | str) -> int:
    # Persisted categories use integer keys; string ids from other sources must be numeric.
    if isinstance(value, bool):
        raise ValueError(f"invalid category id: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"category id is not numeric: {value!r}") from None


def _to_row(record: TransactionRecord) -> TxTransaction:
    return TxTransaction(
        id=record.id,
        user_id=record.owner,
        wallet_id=record.wallet_id,
        category_id=_category_pk(record.category_id),
        amount=record.amount,
        description=record.description,
        direction=record.direction,
        date=date.fromisoformat(record.date),
        created_at=record.created_at,
    )


def save_transaction_records(session: Session, records: Iterable[TransactionRecord]) -> int:
    """Insert ``records`` into ``tx_transactions`` and return how many were added.

    Rows are flushed but not committed.
    """

    rows = [_to_row(r) for r in records]
    if not rows:
        return 0
    session.add_all(rows)
    session.flush()
    _logger.info("persistence:saved count=%d", len(rows))
    return len(rows)


__all__ = ["save_transaction_records"]
