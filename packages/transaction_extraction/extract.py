"""Extraction orchestrator: oracle first, deterministic parser as fallback.

Flow for :meth:`TransactionExtractor.parse`:

1. Decide the default direction once for the whole input (income keywords
   present and expense keywords absent -> ``income``; otherwise ``expense``).
2. Ask the oracle. Any valid candidate ends the flow; the deterministic
   parser is not consulted.
3. Otherwise run the deterministic parser over the same text and direction.
4. If neither produced anything, return a failure result.
5. If anything in steps 1-3 raised, re-infer the direction with the recovery
   keyword set, run the deterministic parser, and report the error only when
   that also comes up empty.

``parse`` never raises; every outcome is an :class:`ExtractionResult`.
"""

from __future__ import annotations

import asyncio
import time

from .ai_extract import extract_with_oracle
from .catalog import CategoryCache, CategorySource
from .fallback import parse_lines
from .logging_setup import get_logger
from .models import (
    DIRECTIONS,
    Catalog,
    Direction,
    ExtractionResult,
    ExtractionSource,
    ParsedTransaction,
)
from .oracle import OpenAIOracle, Oracle
from .settings import ExtractionSettings, Language
from .validation import validate_transactions

_logger = get_logger("transaction_extraction.extract")

INCOME_KEYWORDS: tuple[str, ...] = (
    "pemasukan", "income", "gaji", "salary", "terima", "dapat", "bonus", "saldo",
)  # fmt: skip
EXPENSE_KEYWORDS: tuple[str, ...] = ("pengeluaran", "expense", "bayar", "beli", "belanja")
# Used only on the recovery path (step 5); expense keywords are not consulted there.
RECOVERY_INCOME_KEYWORDS: tuple[str, ...] = (
    "pemasukan", "income", "gaji", "salary", "terima", "dapat", "dari",
)  # fmt: skip

NO_TRANSACTIONS_ERROR = "Could not parse any transactions from input"

_MESSAGES: dict[Language, dict[str, str]] = {
    "id": {
        "parsed": "Berhasil mem-parse {count} transaksi",
        "parsed_fallback": "Berhasil mem-parse {count} transaksi (fallback)",
        "recovered": "Berhasil mem-parse dengan metode cadangan",
        "not_found": "Tidak ada transaksi yang ditemukan",
        "error": "Gagal mem-parse transaksi",
    },
    "en": {
        "parsed": "Successfully parsed {count} transactions",
        "parsed_fallback": "Successfully parsed {count} transactions (fallback)",
        "recovered": "Parsed using fallback method",
        "not_found": "No transactions found",
        "error": "Error parsing transactions",
    },
}


def _contains_any(lowered: str, keywords: tuple[str, ...]) -> bool:
    return any(k in lowered for k in keywords)


def infer_direction(text: str) -> Direction:
    lowered = text.lower()
    has_income = _contains_any(lowered, INCOME_KEYWORDS)
    has_expense = _contains_any(lowered, EXPENSE_KEYWORDS)
    if has_income and not has_expense:
        return "income"
    return "expense"


def infer_direction_recovery(text: str) -> Direction:
    return "income" if _contains_any(text.lower(), RECOVERY_INCOME_KEYWORDS) else "expense"


class TransactionExtractor:
    """Turn free-form text into validated transactions.

    Parameters
    ----------
    categories:
        Catalog cache consulted once per parse.
    oracle:
        Optional oracle. ``None`` disables the primary attempt, so every parse
        goes straight to the deterministic parser.
    language:
        Language of the user-facing messages.
    """

    def __init__(
        self,
        categories: CategoryCache,
        *,
        oracle: Oracle | None = None,
        language: Language = "id",
    ) -> None:
        if language not in _MESSAGES:
            raise ValueError(f"unsupported language: {language!r}")
        self.categories = categories
        self.oracle = oracle
        self.language: Language = language

    @classmethod
    def from_settings(
        cls,
        settings: ExtractionSettings,
        source: CategorySource,
        *,
        oracle: Oracle | None = None,
    ) -> TransactionExtractor:
        """Build an extractor with a TTL cache over ``source``.

        When ``oracle`` is omitted an :class:`OpenAIOracle` is configured from
        ``settings``, unless AI extraction is disabled there.
        """

        if oracle is None and settings.ai_enabled:
            oracle = OpenAIOracle.from_settings(settings)
        cache = CategoryCache(source, ttl_seconds=settings.category_ttl_seconds)
        return cls(cache, oracle=oracle if settings.ai_enabled else None, language=settings.language)

    # ---- messages ---------------------------------------------------------

    def _msg(self, key: str, **kwargs: object) -> str:
        return _MESSAGES[self.language][key].format(**kwargs)

    def _success(
        self, transactions: list[ParsedTransaction], *, key: str, source: ExtractionSource
    ) -> ExtractionResult:
        return ExtractionResult(
            success=True,
            transactions=tuple(transactions),
            message=self._msg(key, count=len(transactions)),
            source=source,
        )

    def _not_found(self) -> ExtractionResult:
        return ExtractionResult(
            success=False,
            transactions=(),
            message=self._msg("not_found"),
            error=NO_TRANSACTIONS_ERROR,
        )

    # ---- stages -----------------------------------------------------------

    async def _catalog(self, owner: str | None) -> Catalog:
        # The source may do blocking I/O (e.g. a database query).
        return await asyncio.to_thread(self.categories.get, owner)

    async def _primary(
        self, text: str, direction: Direction, catalog: Catalog
    ) -> list[ParsedTransaction]:
        if self.oracle is None:
            return []
        candidates = await extract_with_oracle(
            self.oracle, text, default_direction=direction, catalog=catalog
        )
        valid, invalid = validate_transactions(candidates)
        if invalid:
            _logger.info("extract:dropped_invalid stage=ai count=%d", len(invalid))
        return valid

    @staticmethod
    def _fallback(text: str, direction: Direction, catalog: Catalog) -> list[ParsedTransaction]:
        valid, invalid = validate_transactions(
            parse_lines(text, default_direction=direction, catalog=catalog)
        )
        if invalid:
            _logger.info("extract:dropped_invalid stage=fallback count=%d", len(invalid))
        return valid

    # ---- public API -------------------------------------------------------

    async def parse(
        self,
        raw_text: str,
        owner: str | None = None,
        *,
        default_direction: Direction | None = None,
    ) -> ExtractionResult:
        """Extract transactions from ``raw_text`` for ``owner``'s catalog.

        ``default_direction`` overrides keyword-based direction inference.
        """

        text = raw_text.strip() if isinstance(raw_text, str) else ""
        if not text:
            return self._not_found()
        if default_direction is not None and default_direction not in DIRECTIONS:
            _logger.warning("extract:ignored_direction value=%r", default_direction)
            default_direction = None

        t0 = time.perf_counter()
        try:
            direction = default_direction or infer_direction(text)
            catalog = await self._catalog(owner)

            primary = await self._primary(text, direction, catalog)
            if primary:
                _logger.info(
                    "extract:done source=ai count=%d latency_ms=%.2f",
                    len(primary),
                    (time.perf_counter() - t0) * 1000.0,
                )
                return self._success(primary, key="parsed", source="ai")

            fallback = self._fallback(text, direction, catalog)
            if fallback:
                _logger.info("extract:fallback_used count=%d", len(fallback))
                return self._success(fallback, key="parsed_fallback", source="fallback")

            _logger.info("extract:no_transactions direction=%s", direction)
            return self._not_found()
        except Exception as e:  # noqa: BLE001 - parse must always resolve to a result
            _logger.error("extract:primary_failed error=%s", e.__class__.__name__)
            return await self._recover(text, owner, e, default_direction)

    async def _recover(
        self,
        text: str,
        owner: str | None,
        cause: Exception,
        default_direction: Direction | None,
    ) -> ExtractionResult:
        try:
            direction = default_direction or infer_direction_recovery(text)
            catalog = await self._catalog(owner)
            recovered = self._fallback(text, direction, catalog)
        except Exception as e:  # noqa: BLE001
            _logger.error("extract:recovery_failed error=%s", e.__class__.__name__)
            recovered = []

        if recovered:
            _logger.info("extract:recovered count=%d", len(recovered))
            return self._success(recovered, key="recovered", source="fallback")
        return ExtractionResult(
            success=False,
            transactions=(),
            message=self._msg("error"),
            error=str(cause) or cause.__class__.__name__,
        )

    def parse_sync(
        self,
        raw_text: str,
        owner: str | None = None,
        *,
        default_direction: Direction | None = None,
    ) -> ExtractionResult:
        """Blocking wrapper around :meth:`parse` for scripts and the CLI."""

        return asyncio.run(self.parse(raw_text, owner, default_direction=default_direction))

    def invalidate_categories(self) -> None:
        self.categories.invalidate()


__all__ = [
    "EXPENSE_KEYWORDS",
    "INCOME_KEYWORDS",
    "NO_TRANSACTIONS_ERROR",
    "RECOVERY_INCOME_KEYWORDS",
    "TransactionExtractor",
    "infer_direction",
    "infer_direction_recovery",
]
