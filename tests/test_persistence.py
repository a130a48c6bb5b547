import uuid
from datetime import UTC, date, datetime, timedelta, timezone

import pytest
from db.client import session_scope
from db.models.finance import TxTransaction
from sqlalchemy import select

from tests.helpers.db import bootstrap_sqlite_db
from transaction_extraction.conversion import to_transaction_record
from transaction_extraction.models import ParsedTransaction
from transaction_extraction.persistence import save_transaction_records


def _parsed(description="Makan siang", amount=25_000, category_id=2, direction="expense"):
    return ParsedTransaction(
        description=description,
        amount=amount,
        category_id=category_id,
        category_name="Dining",
        direction=direction,
        confidence=0.95,
    )


def test_conversion_fills_identity_owner_and_timestamp():
    now = datetime(2024, 5, 1, 23, 30, tzinfo=timezone(timedelta(hours=7)))
    rec = to_transaction_record(_parsed(description="  Kopi "), "wallet-1", owner="u1", now=now)

    assert uuid.UUID(rec.id).version == 4
    assert rec.owner == "u1"
    assert rec.wallet_id == "wallet-1"
    assert (rec.category_id, rec.amount, rec.direction) == (2, 25_000, "expense")
    assert rec.description == "Kopi"
    # normalized to UTC before taking the date
    assert rec.created_at == datetime(2024, 5, 1, 16, 30, tzinfo=UTC)
    assert rec.date == "2024-05-01"


def test_conversion_defaults_to_current_utc_time():
    rec = to_transaction_record(_parsed(), "w", owner=None)
    assert rec.created_at.tzinfo is not None
    assert abs(datetime.now(UTC) - rec.created_at) < timedelta(minutes=1)


def test_each_record_gets_a_fresh_id():
    a = to_transaction_record(_parsed(), "w", owner=None)
    b = to_transaction_record(_parsed(), "w", owner=None)
    assert a.id != b.id


def test_wallet_is_required():
    with pytest.raises(ValueError):
        to_transaction_record(_parsed(), "", owner="u1")


def test_save_records_on_sqlite(tmp_path):
    url = bootstrap_sqlite_db(tmp_path / "tx.sqlite3", seed=True)
    now = datetime(2024, 5, 1, 8, 0, tzinfo=UTC)
    records = [
        to_transaction_record(_parsed(), "w1", owner="u1", now=now),
        to_transaction_record(
            _parsed("Bude Tun", 100_000, 16, "income"), "w1", owner="u1", now=now
        ),
    ]

    with session_scope(database_url=url) as session:
        assert save_transaction_records(session, records) == 2

    with session_scope(database_url=url) as session:
        rows = session.scalars(select(TxTransaction).order_by(TxTransaction.amount)).all()
        assert [(r.description, r.amount, r.direction, r.category_id) for r in rows] == [
            ("Makan siang", 25_000, "expense", 2),
            ("Bude Tun", 100_000, "income", 16),
        ]
        assert {r.user_id for r in rows} == {"u1"}
        assert {r.date for r in rows} == {date(2024, 5, 1)}
        assert {r.id for r in rows} == {rec.id for rec in records}


def test_save_nothing_is_a_no_op(tmp_path):
    url = bootstrap_sqlite_db(tmp_path / "tx.sqlite3")
    with session_scope(database_url=url) as session:
        assert save_transaction_records(session, []) == 0


def test_non_numeric_category_id_is_rejected(tmp_path):
    url = bootstrap_sqlite_db(tmp_path / "tx.sqlite3", seed=True)
    rec = to_transaction_record(_parsed(category_id="dining"), "w1", owner=None)
    with pytest.raises(ValueError), session_scope(database_url=url) as session:
        save_transaction_records(session, [rec])
