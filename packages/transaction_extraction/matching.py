"""Keyword-weighted category matching.

One matcher serves both extraction paths. The score of a category is the sum
of the lengths of its keywords found (case-insensitively) as substrings of the
description, so longer, more specific keywords outweigh short generic ones.
The functions here are pure: catalogs are only read.
"""

from __future__ import annotations

from typing import NamedTuple

from .models import Catalog, Category, CategoryId, Direction

# Returned when the catalog has no category at all for a direction.
SENTINEL_CATEGORY_IDS: dict[Direction, CategoryId] = {"expense": 12, "income": 17}
SENTINEL_CATEGORY_NAME = "Other"

_OTHER_NAME_MARKERS: tuple[str, ...] = ("other", "lainnya")


class CategoryMatch(NamedTuple):
    category_id: CategoryId
    category_name: str
    score: int


def categories_for(direction: Direction, catalog: Catalog) -> list[Category]:
    return [c for c in catalog if c.direction == direction]


def keyword_score(description: str, category: Category) -> int:
    lowered = description.lower()
    return sum(len(kw) for kw in category.keywords if kw and kw.lower() in lowered)


def default_category(direction: Direction, catalog: Catalog) -> CategoryMatch:
    """Return the direction's "Other" entry, else its first entry, else a sentinel."""

    candidates = categories_for(direction, catalog)
    for cat in candidates:
        name = cat.name.lower()
        if any(marker in name for marker in _OTHER_NAME_MARKERS):
            return CategoryMatch(cat.id, cat.name, 0)
    if candidates:
        return CategoryMatch(candidates[0].id, candidates[0].name, 0)
    return CategoryMatch(SENTINEL_CATEGORY_IDS[direction], SENTINEL_CATEGORY_NAME, 0)


def match_category(description: str, direction: Direction, catalog: Catalog) -> CategoryMatch:
    """Pick the best-scoring category of ``direction`` for ``description``.

    Ties keep the category that appears first in catalog order. When nothing
    scores above zero the direction's default category is returned.
    """

    best: Category | None = None
    best_score = 0
    for cat in categories_for(direction, catalog):
        score = keyword_score(description, cat)
        if score > best_score:
            best, best_score = cat, score
    if best is None:
        return default_category(direction, catalog)
    return CategoryMatch(best.id, best.name, best_score)


def find_category_by_id(
    category_id: object, direction: Direction, catalog: Catalog
) -> Category | None:
    """Return the category of ``direction`` whose identifier equals ``category_id``.

    Identifiers compare by value across int/str forms (``3 == "3"``).
    """

    if category_id is None or isinstance(category_id, bool):
        return None
    wanted = str(category_id).strip()
    if not wanted:
        return None
    for cat in categories_for(direction, catalog):
        if str(cat.id) == wanted:
            return cat
    return None


def find_category_by_name(name: str, direction: Direction, catalog: Catalog) -> CategoryMatch:
    """Exact (case-insensitive) name match, then partial match, then the default."""

    lowered = name.strip().lower()
    candidates = categories_for(direction, catalog)
    if lowered:
        for cat in candidates:
            if cat.name.lower() == lowered:
                return CategoryMatch(cat.id, cat.name, 0)
        for cat in candidates:
            cat_name = cat.name.lower()
            if lowered in cat_name or cat_name in lowered:
                return CategoryMatch(cat.id, cat.name, 0)
    return default_category(direction, catalog)


__all__ = [
    "CategoryMatch",
    "SENTINEL_CATEGORY_IDS",
    "SENTINEL_CATEGORY_NAME",
    "categories_for",
    "default_category",
    "find_category_by_id",
    "find_category_by_name",
    "keyword_score",
    "match_category",
]
