"""Category catalog: keyword hints, catalog building, sources and caching.

Categories are persisted elsewhere as raw rows (identifier, key, English and
Indonesian names, direction). :func:`build_catalog` turns rows into matchable
:class:`~transaction_extraction.models.Category` entries by attaching keyword
lists, either from :data:`KEYWORD_HINTS` or, for custom categories, from the
category's own names.

:class:`CategoryCache` owns catalog snapshots per owner. Snapshots are never
mutated: a refresh builds a new mapping and swaps it in with one assignment,
so concurrent readers always see a complete snapshot.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol

from .logging_setup import get_logger
from .models import Category, CategoryId, Direction
from .settings import Language

_logger = get_logger("transaction_extraction.catalog")

# ---------------------------------------------------------------------------
# Keyword hints
# ---------------------------------------------------------------------------

KEYWORD_HINTS: dict[str, tuple[str, ...]] = {
    # expense
    "groceries": (
        "belanja", "supermarket", "indomaret", "alfamart", "sayur", "buah",
        "daging", "sembako", "grocery", "warung",
    ),
    "dining": (
        "makan", "nasi", "restoran", "cafe", "kopi", "coffee", "restaurant",
        "food", "lunch", "dinner", "breakfast", "sarapan", "minum", "jajan",
        "snack", "bakso", "sate", "padang", "warteg", "gofood", "grabfood",
    ),
    "transportation": (
        "transport", "bensin", "parkir", "ojek", "grab", "gojek", "taxi", "bus",
        "kereta", "train", "toll", "tol", "angkot", "mrt", "lrt",
        "transjakarta", "uber", "maxim",
    ),
    "subscription": (
        "langganan", "subscribe", "netflix", "spotify", "youtube", "disney",
        "hbo", "amazon", "prime", "membership", "icloud", "google one", "canva",
        "figma", "github", "premium",
    ),
    "housing": (
        "rumah", "sewa", "rent", "kontrakan", "kos", "apartemen", "apartment",
        "listrik", "pln", "air", "pdam", "gas", "internet", "wifi", "indihome",
        "biznet",
    ),
    "entertainment": (
        "hiburan", "game", "film", "movie", "bioskop", "cinema", "konser",
        "concert", "karaoke", "steam", "playstation", "xbox", "nintendo",
    ),
    "shopping": (
        "belanja", "baju", "sepatu", "tas", "clothes", "fashion", "shoes", "bag",
        "tokopedia", "shopee", "lazada", "blibli", "zalora", "uniqlo", "h&m",
        "zara",
    ),
    "health": (
        "kesehatan", "dokter", "doctor", "obat", "medicine", "pharmacy",
        "apotek", "rumah sakit", "hospital", "klinik", "clinic", "vitamin",
        "supplement",
    ),
    "education": (
        "pendidikan", "kursus", "course", "buku", "book", "sekolah", "school",
        "kuliah", "university", "udemy", "coursera", "les", "tutor", "training",
    ),
    "vehicle": (
        "kendaraan", "motor", "mobil", "car", "service", "servis", "oli", "ban",
        "tire", "spare part", "bengkel", "cuci mobil", "cuci motor",
    ),
    "personal": (
        "pribadi", "personal", "salon", "barber", "potong rambut", "skincare",
        "makeup", "parfum", "laundry", "dry clean",
    ),
    "other_expense": ("lainnya", "other", "misc", "lain-lain"),
    # income
    "salary": ("gaji", "salary", "pendapatan", "upah", "wage", "payroll", "thr", "bonus kerja"),
    "business": (
        "bisnis", "business", "usaha", "jualan", "penjualan", "sales", "profit",
        "keuntungan", "freelance", "project",
    ),
    "investment": (
        "investasi", "investment", "dividen", "dividend", "saham", "stock",
        "reksadana", "mutual fund", "crypto", "bitcoin", "bunga", "interest",
    ),
    "gift": (
        "hadiah", "gift", "kado", "angpao", "uang", "dari", "transfer dari",
        "kiriman", "bude", "kakak", "ayah", "mama", "ibu", "paman", "tante",
        "nenek", "kakek", "saudara",
    ),
    "other_income": ("lainnya", "other", "pemasukan lain"),
}  # fmt: skip


# ---------------------------------------------------------------------------
# Raw rows and catalog building
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CategoryRow:
    """A category as persisted: bilingual names plus an optional stable key."""

    category_id: CategoryId
    category_key: str | None
    en_name: str
    id_name: str
    direction: Direction


DEFAULT_CATEGORY_ROWS: tuple[CategoryRow, ...] = (
    CategoryRow(1, "groceries", "Groceries", "Kebutuhan Pokok", "expense"),
    CategoryRow(2, "dining", "Dining", "Makan & Minum", "expense"),
    CategoryRow(3, "transportation", "Transportation", "Transportasi", "expense"),
    CategoryRow(4, "subscription", "Subscription", "Langganan", "expense"),
    CategoryRow(5, "housing", "Housing", "Rumah", "expense"),
    CategoryRow(6, "entertainment", "Entertainment", "Hiburan", "expense"),
    CategoryRow(7, "shopping", "Shopping", "Belanja", "expense"),
    CategoryRow(8, "health", "Health", "Kesehatan", "expense"),
    CategoryRow(9, "education", "Education", "Pendidikan", "expense"),
    CategoryRow(10, "vehicle", "Vehicle", "Kendaraan", "expense"),
    CategoryRow(11, "personal", "Personal Care", "Perawatan Diri", "expense"),
    CategoryRow(12, "other_expense", "Other Expense", "Pengeluaran Lainnya", "expense"),
    CategoryRow(13, "salary", "Salary", "Gaji", "income"),
    CategoryRow(14, "business", "Business", "Bisnis", "income"),
    CategoryRow(15, "investment", "Investment", "Investasi", "income"),
    CategoryRow(16, "gift", "Gift", "Hadiah", "income"),
    CategoryRow(17, "other_income", "Other Income", "Pemasukan Lainnya", "income"),
)


def display_name(row: CategoryRow, language: Language) -> str:
    name = row.id_name if language == "id" else row.en_name
    return (name or row.en_name or row.id_name or str(row.category_id)).strip()


def keywords_for(row: CategoryRow, language: Language) -> tuple[str, ...]:
    """Resolve the keyword list for ``row``.

    Order: exact hint key, then the first hint key contained in the row key
    (or containing the row key without underscores), then the row's own names.
    """

    name = display_name(row, language)
    key = (row.category_key or name).strip().lower()
    if key in KEYWORD_HINTS:
        return KEYWORD_HINTS[key]
    compact = key.replace("_", "")
    if compact:
        for hint_key, hints in KEYWORD_HINTS.items():
            if hint_key in key or compact in hint_key:
                return hints
    names = (name.lower(), row.en_name.strip().lower(), row.id_name.strip().lower())
    return tuple(n for n in dict.fromkeys(names) if n)


def build_catalog(rows: Iterable[CategoryRow], *, language: Language = "id") -> list[Category]:
    """Return matchable categories for ``rows`` in input order."""

    return [
        Category(
            id=row.category_id,
            name=display_name(row, language),
            direction=row.direction,
            keywords=keywords_for(row, language),
        )
        for row in rows
        if row.direction in ("income", "expense")
    ]


def default_catalog(language: Language = "id") -> list[Category]:
    return build_catalog(DEFAULT_CATEGORY_ROWS, language=language)


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------


class CategorySource(Protocol):
    """Anything that can list the categories visible to an owner."""

    def list_categories(self, owner: str | None = None) -> Sequence[Category]: ...


class StaticCategorySource:
    """In-memory source returning the same categories for every owner."""

    def __init__(
        self, categories: Iterable[Category] | None = None, *, language: Language = "id"
    ) -> None:
        if categories is None:
            categories = default_catalog(language)
        self._categories: tuple[Category, ...] = tuple(categories)

    def list_categories(self, owner: str | None = None) -> Sequence[Category]:
        return self._categories


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class _Snapshot:
    categories: tuple[Category, ...]
    loaded_at: float


class CategoryCache:
    """Per-owner catalog snapshots with a time-to-live.

    Parameters
    ----------
    source:
        The :class:`CategorySource` consulted on a miss or after expiry.
    ttl_seconds:
        Snapshot lifetime (default five minutes).
    clock:
        Monotonic clock, injectable for tests.
    """

    def __init__(
        self,
        source: CategorySource,
        *,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._source = source
        self._ttl = ttl_seconds
        self._clock = clock
        # Replaced wholesale on refresh/invalidation; never mutated in place.
        self._snapshots: Mapping[str | None, _Snapshot] = {}

    def get(self, owner: str | None = None) -> tuple[Category, ...]:
        """Return the catalog snapshot for ``owner``, refreshing when stale.

        A failing source yields an empty catalog that is not cached.
        """

        now = self._clock()
        snap = self._snapshots.get(owner)
        if snap is not None and now - snap.loaded_at < self._ttl:
            return snap.categories

        try:
            loaded = tuple(self._source.list_categories(owner))
        except Exception as e:  # noqa: BLE001 - catalog errors degrade to defaults
            _logger.warning(
                "catalog:source_failed owner=%s error=%s", owner, e.__class__.__name__
            )
            return ()

        updated = dict(self._snapshots)
        updated[owner] = _Snapshot(categories=loaded, loaded_at=now)
        self._snapshots = updated
        _logger.debug("catalog:refresh owner=%s size=%d", owner, len(loaded))
        return loaded

    def invalidate(self) -> None:
        """Drop every snapshot (e.g. after categories were edited)."""

        self._snapshots = {}

    def invalidate_owner(self, owner: str | None) -> None:
        if owner not in self._snapshots:
            return
        self._snapshots = {k: v for k, v in self._snapshots.items() if k != owner}


__all__ = [
    "CategoryCache",
    "CategoryRow",
    "CategorySource",
    "DEFAULT_CATEGORY_ROWS",
    "KEYWORD_HINTS",
    "StaticCategorySource",
    "build_catalog",
    "default_catalog",
    "display_name",
    "keywords_for",
]
