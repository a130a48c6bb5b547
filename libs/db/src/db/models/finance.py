from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Reference: tx_categories
# ---------------------------


class TxCategory(Base):
    __tablename__ = "tx_categories"

    # Shared default rows use the fixed ids 1-17; custom rows take the next id.
    category_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category_key: Mapped[str | None] = mapped_column(String, nullable=True)
    en_name: Mapped[str] = mapped_column(Text, nullable=False)
    id_name: Mapped[str] = mapped_column(Text, nullable=False)
    direction: Mapped[str] = mapped_column(String, nullable=False)
    # NULL for shared rows; set for an owner's custom categories.
    user_id: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("direction in ('income','expense')", name="ck_tx_categories_direction"),
        Index("ix_tx_categories_user_id", "user_id"),
    )


# ---------------------------
# Core: tx_transactions
# ---------------------------


class TxTransaction(Base):
    __tablename__ = "tx_transactions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str | None] = mapped_column(String, nullable=True)
    wallet_id: Mapped[str] = mapped_column(String, nullable=False)
    category_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tx_categories.category_id", deferrable=True, initially="DEFERRED"),
        nullable=False,
    )
    # Whole currency units (no minor units for IDR).
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    direction: Mapped[str] = mapped_column(String, nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_tx_transactions_amount_positive"),
        CheckConstraint("direction in ('income','expense')", name="ck_tx_transactions_direction"),
        Index("ix_tx_transactions_user_date", "user_id", "date"),
    )


__all__ = [
    "Base",
    "TxCategory",
    "TxTransaction",
]
