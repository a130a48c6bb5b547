"""Database-backed category source.

Reads the ``tx_categories`` reference table owned by ``libs/db``: shared rows
(``user_id IS NULL``) plus the owner's custom rows, ordered by
``category_id``. Pair it with :class:`transaction_extraction.catalog.CategoryCache`
so the table is not queried on every parse.
"""

from __future__ import annotations

from collections.abc import Sequence

from db.client import session_scope
from db.models.finance import TxCategory
from sqlalchemy import func, or_, select, text
from sqlalchemy.orm import Session

from .catalog import DEFAULT_CATEGORY_ROWS, CategoryRow, build_catalog
from .logging_setup import get_logger
from .models import Category, coerce_direction
from .settings import Language

_logger = get_logger("transaction_extraction.categories")


def _row_from_orm(row: TxCategory) -> CategoryRow:
    return CategoryRow(
        category_id=row.category_id,
        category_key=row.category_key,
        en_name=row.en_name,
        id_name=row.id_name,
        direction=coerce_direction(row.direction, "expense"),
    )


def load_category_rows(session: Session, owner: str | None = None) -> list[CategoryRow]:
    """Return shared rows plus ``owner``'s custom rows, ordered by id."""

    visible = TxCategory.user_id.is_(None)
    if owner is not None:
        visible = or_(visible, TxCategory.user_id == owner)
    stmt = select(TxCategory).where(visible).order_by(TxCategory.category_id)
    return [_row_from_orm(r) for r in session.scalars(stmt)]


class DbCategorySource:
    """:class:`~transaction_extraction.catalog.CategorySource` over ``tx_categories``.

    Parameters
    ----------
    database_url:
        Explicit URL; ``None`` defers to ``DATABASE_URL``.
    language:
        Display-name language of the built catalog.
    """

    def __init__(self, database_url: str | None = None, *, language: Language = "id") -> None:
        self.database_url = database_url
        self.language: Language = language

    def list_categories(self, owner: str | None = None) -> Sequence[Category]:
        with session_scope(database_url=self.database_url) as session:
            rows = load_category_rows(session, owner)
        _logger.debug("categories:loaded owner=%s rows=%d", owner, len(rows))
        return build_catalog(rows, language=self.language)


def seed_default_categories(session: Session) -> int:
    """Insert the default shared categories unless shared rows already exist.

    Returns the number of rows inserted (``0`` when already seeded).
    """

    existing = session.scalar(
        select(func.count()).select_from(TxCategory).where(TxCategory.user_id.is_(None))
    )
    if existing:
        return 0
    for row in DEFAULT_CATEGORY_ROWS:
        session.add(
            TxCategory(
                category_id=int(row.category_id),
                category_key=row.category_key,
                en_name=row.en_name,
                id_name=row.id_name,
                direction=row.direction,
                user_id=None,
            )
        )
    session.flush()
    if session.get_bind().dialect.name == "postgresql":
        # Explicit ids do not advance the serial sequence.
        session.execute(
            text(
                "SELECT setval(pg_get_serial_sequence('tx_categories', 'category_id'), "
                "(SELECT MAX(category_id) FROM tx_categories))"
            )
        )
    _logger.info("categories:seeded count=%d", len(DEFAULT_CATEGORY_ROWS))
    return len(DEFAULT_CATEGORY_ROWS)


__all__ = ["DbCategorySource", "load_category_rows", "seed_default_categories"]
