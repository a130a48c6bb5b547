"""Public interface for the ``transaction_extraction`` package.

This module exposes the package's entry points and public models/types as the
stable import surface. There is no runtime logic here, only symbol re-exports.
"""

from .amounts import normalize_amount
from .catalog import (
    DEFAULT_CATEGORY_ROWS,
    CategoryCache,
    CategoryRow,
    CategorySource,
    StaticCategorySource,
    build_catalog,
    default_catalog,
)
from .conversion import to_transaction_record
from .extract import TransactionExtractor, infer_direction
from .fallback import parse_lines
from .matching import match_category
from .models import (
    Catalog,
    Category,
    CategoryId,
    Direction,
    ExtractionResult,
    ParsedTransaction,
    TransactionRecord,
)
from .noise import is_noise
from .oracle import OpenAIOracle, Oracle, OracleError
from .settings import ExtractionSettings
from .validation import validate_transactions

__all__ = [
    # Orchestration
    "TransactionExtractor",
    "infer_direction",
    "ExtractionSettings",
    # Building blocks
    "normalize_amount",
    "is_noise",
    "match_category",
    "parse_lines",
    "validate_transactions",
    "to_transaction_record",
    # Catalog
    "CategoryCache",
    "CategoryRow",
    "CategorySource",
    "DEFAULT_CATEGORY_ROWS",
    "StaticCategorySource",
    "build_catalog",
    "default_catalog",
    # Oracle
    "OpenAIOracle",
    "Oracle",
    "OracleError",
    # Models
    "Catalog",
    "Category",
    "CategoryId",
    "Direction",
    "ExtractionResult",
    "ParsedTransaction",
    "TransactionRecord",
]
