# ruff: noqa: I001
"""Category and transaction tables with the default category catalog.

Revision ID: 0001_tx_core
Revises: None
Create Date: 2026-10-19
"""

from __future__ import annotations  # ruff: noqa: I001

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_tx_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


# Mirrors transaction_extraction.catalog.DEFAULT_CATEGORY_ROWS; the fallback
# category ids 12 (expense) and 17 (income) must stay stable.
_DEFAULT_CATEGORIES: tuple[tuple[int, str, str, str, str], ...] = (
    (1, "groceries", "Groceries", "Kebutuhan Pokok", "expense"),
    (2, "dining", "Dining", "Makan & Minum", "expense"),
    (3, "transportation", "Transportation", "Transportasi", "expense"),
    (4, "subscription", "Subscription", "Langganan", "expense"),
    (5, "housing", "Housing", "Rumah", "expense"),
    (6, "entertainment", "Entertainment", "Hiburan", "expense"),
    (7, "shopping", "Shopping", "Belanja", "expense"),
    (8, "health", "Health", "Kesehatan", "expense"),
    (9, "education", "Education", "Pendidikan", "expense"),
    (10, "vehicle", "Vehicle", "Kendaraan", "expense"),
    (11, "personal", "Personal Care", "Perawatan Diri", "expense"),
    (12, "other_expense", "Other Expense", "Pengeluaran Lainnya", "expense"),
    (13, "salary", "Salary", "Gaji", "income"),
    (14, "business", "Business", "Bisnis", "income"),
    (15, "investment", "Investment", "Investasi", "income"),
    (16, "gift", "Gift", "Hadiah", "income"),
    (17, "other_income", "Other Income", "Pemasukan Lainnya", "income"),
)


def upgrade() -> None:
    categories = op.create_table(
        "tx_categories",
        sa.Column("category_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("category_key", sa.String(), nullable=True),
        sa.Column("en_name", sa.Text(), nullable=False),
        sa.Column("id_name", sa.Text(), nullable=False),
        sa.Column("direction", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(
            "direction in ('income','expense')", name="ck_tx_categories_direction"
        ),
    )
    op.create_index("ix_tx_categories_user_id", "tx_categories", ["user_id"])

    op.create_table(
        "tx_transactions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(), nullable=True),
        sa.Column("wallet_id", sa.String(), nullable=False),
        sa.Column(
            "category_id",
            sa.Integer(),
            sa.ForeignKey(
                "tx_categories.category_id", deferrable=True, initially="DEFERRED"
            ),
            nullable=False,
        ),
        sa.Column("amount", sa.BigInteger(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("direction", sa.String(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("amount > 0", name="ck_tx_transactions_amount_positive"),
        sa.CheckConstraint(
            "direction in ('income','expense')", name="ck_tx_transactions_direction"
        ),
    )
    op.create_index("ix_tx_transactions_user_date", "tx_transactions", ["user_id", "date"])

    op.bulk_insert(
        categories,
        [
            {
                "category_id": cid,
                "category_key": key,
                "en_name": en,
                "id_name": idn,
                "direction": direction,
                "user_id": None,
            }
            for cid, key, en, idn, direction in _DEFAULT_CATEGORIES
        ],
    )
    if op.get_bind().dialect.name == "postgresql":
        # Explicit ids above do not advance the serial sequence.
        op.execute(
            "SELECT setval(pg_get_serial_sequence('tx_categories', 'category_id'), "
            "(SELECT MAX(category_id) FROM tx_categories))"
        )


def downgrade() -> None:
    op.drop_index("ix_tx_transactions_user_date", table_name="tx_transactions")
    op.drop_table("tx_transactions")
    op.drop_index("ix_tx_categories_user_id", table_name="tx_categories")
    op.drop_table("tx_categories")
