"""Turn parsed transactions into persistable records."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from .models import ParsedTransaction, TransactionRecord


def to_transaction_record(
    parsed: ParsedTransaction,
    wallet_id: str,
    *,
    owner: str | None,
    now: datetime | None = None,
) -> TransactionRecord:
    """Build a :class:`TransactionRecord` dated ``now`` (UTC by default).

    A naive ``now`` is taken to be UTC.
    """

    if not wallet_id:
        raise ValueError("wallet_id is required")
    ts = now or datetime.now(UTC)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    ts = ts.astimezone(UTC)
    return TransactionRecord(
        id=str(uuid.uuid4()),
        owner=owner,
        wallet_id=wallet_id,
        category_id=parsed.category_id,
        amount=parsed.amount,
        description=parsed.description.strip(),
        direction=parsed.direction,
        date=ts.date().isoformat(),
        created_at=ts,
    )


__all__ = ["to_transaction_record"]
