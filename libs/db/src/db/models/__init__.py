"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the category and transaction tables used by
``transaction_extraction``.
"""

from .finance import Base, TxCategory, TxTransaction

__all__ = [
    "Base",
    "TxCategory",
    "TxTransaction",
]
