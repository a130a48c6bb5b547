import asyncio
import json

import pytest

from tests.helpers.oracle_stub import FailingOracle, OracleStub
from transaction_extraction.catalog import CategoryCache, StaticCategorySource
from transaction_extraction.extract import (
    NO_TRANSACTIONS_ERROR,
    TransactionExtractor,
    infer_direction,
    infer_direction_recovery,
)
from transaction_extraction.oracle import OpenAIOracle
from transaction_extraction.settings import ExtractionSettings


def _extractor(oracle=None, *, language="en", source=None):
    cache = CategoryCache(source or StaticCategorySource(language=language))
    return TransactionExtractor(cache, oracle=oracle, language=language)


def _run(extractor, text, owner=None, **kwargs):
    return asyncio.run(extractor.parse(text, owner, **kwargs))


AI_ITEMS = [
    {"description": "Makan siang", "amount": 25000, "type": "expense", "category_id": 2},
    {"description": "Total", "amount": 25000, "type": "expense", "category_id": 12},
]


# ---- direction inference ---------------------------------------------------


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Gaji bulan ini 5.000.000", "income"),
        ("Pemasukan:\nBude Tun - 100.000", "income"),
        ("Gaji 5jt\nbayar kos 1jt", "expense"),
        ("Kopi 20rb", "expense"),
        ("Bude Tun - 100.000", "expense"),
    ],
)
def test_infer_direction(text, expected):
    assert infer_direction(text) == expected


def test_recovery_inference_uses_narrow_income_set():
    assert infer_direction_recovery("dari Bude 100.000\nbayar kos 1jt") == "income"
    assert infer_direction_recovery("bonus 100.000") == "expense"


# ---- primary attempt -------------------------------------------------------


def test_ai_result_wins_and_fallback_is_not_consulted(monkeypatch):
    import transaction_extraction.extract as extract_mod

    def _boom(*args, **kwargs):
        raise AssertionError("fallback must not run")

    monkeypatch.setattr(extract_mod, "parse_lines", _boom)
    oracle = OracleStub("Sure! " + json.dumps(AI_ITEMS))
    result = _run(_extractor(oracle), "Makan siang 25rb\nTotal 25rb")

    assert result.success is True
    assert result.source == "ai"
    assert result.message == "Successfully parsed 1 transactions"
    assert [(t.description, t.amount, t.confidence) for t in result.transactions] == [
        ("Makan siang", 25_000, 0.95)
    ]
    assert result.error is None


def test_default_direction_is_passed_to_the_oracle():
    oracle = OracleStub("[]")
    _run(_extractor(oracle), "Gaji 5.000.000")
    assert "default type: income" in oracle.calls[0]["user_input"]


def test_invalid_ai_candidates_are_dropped_before_returning():
    oracle = OracleStub([{"description": "  ", "amount": 5000}, {"description": "Teh", "amount": 5000}])
    result = _run(_extractor(oracle), "Teh 5rb")
    assert [t.description for t in result.transactions] == ["Teh"]


# ---- fallback attempt ------------------------------------------------------


@pytest.mark.parametrize(
    "oracle",
    [None, OracleStub("I could not find anything."), OracleStub("[]"), FailingOracle()],
    ids=["disabled", "prose", "empty-list", "oracle-error"],
)
def test_fallback_used_when_primary_yields_nothing(oracle):
    result = _run(
        _extractor(oracle),
        "Bude Tun - 100.000\nGoPay - 103.600",
        default_direction="income",
    )
    assert result.success is True
    assert result.source == "fallback"
    assert result.message == "Successfully parsed 2 transactions (fallback)"
    assert [(t.description, t.amount, t.direction, t.category_id) for t in result.transactions] == [
        ("Bude Tun", 100_000, "income", 16),
        ("GoPay", 103_600, "income", 17),
    ]
    assert all(t.confidence == 0.7 for t in result.transactions)


def test_fallback_excludes_total_lines():
    result = _run(_extractor(), "Kopi - 20.000\nTotal Cash Masuk: 500.000\nTeh - 5.000")
    assert [t.description for t in result.transactions] == ["Kopi", "Teh"]


# ---- total failure ---------------------------------------------------------


def test_total_failure_is_a_result_not_an_exception():
    result = _run(_extractor(OracleStub("[]")), "Total: 100.000\nhalo")
    assert result.success is False
    assert result.transactions == ()
    assert result.message == "No transactions found"
    assert result.error == NO_TRANSACTIONS_ERROR
    assert result.source == "none"


@pytest.mark.parametrize("text", ["", "   \n  ", None])
def test_blank_input_short_circuits_without_calling_the_oracle(text):
    oracle = OracleStub("[]")
    result = _run(_extractor(oracle), text)
    assert result.success is False
    assert oracle.calls == []


def test_messages_are_localized():
    result = _run(_extractor(language="id"), "Kopi - 20.000")
    assert result.message == "Berhasil mem-parse 1 transaksi (fallback)"
    result = _run(_extractor(language="id"), "halo")
    assert result.message == "Tidak ada transaksi yang ditemukan"


# ---- catastrophic path -----------------------------------------------------


def test_unexpected_error_recovers_with_fallback_and_narrow_direction():
    oracle = FailingOracle(RuntimeError("socket closed"))
    # "dari" counts as an income keyword only on the recovery path.
    result = _run(_extractor(oracle), "dari Bude - 100.000")
    assert oracle.calls == 1
    assert result.success is True
    assert result.source == "fallback"
    assert result.message == "Parsed using fallback method"
    assert result.transactions[0].direction == "income"


def test_unexpected_error_with_nothing_to_recover_reports_the_error():
    result = _run(_extractor(FailingOracle(ValueError("bad payload"))), "Total 100.000")
    assert result.success is False
    assert result.message == "Error parsing transactions"
    assert result.error == "bad payload"


def test_category_source_failure_degrades_to_sentinels():
    class _Broken:
        def list_categories(self, owner=None):
            raise ConnectionError("db down")

    result = _run(_extractor(source=_Broken()), "Kopi - 20.000", owner="u1")
    assert result.success is True
    assert result.transactions[0].category_id == 12


# ---- construction ----------------------------------------------------------


def test_from_settings_wires_cache_and_oracle():
    settings = ExtractionSettings(language="en", category_ttl_seconds=60)
    extractor = TransactionExtractor.from_settings(settings, StaticCategorySource())
    assert isinstance(extractor.oracle, OpenAIOracle)
    assert extractor.language == "en"

    offline = TransactionExtractor.from_settings(
        ExtractionSettings(ai_enabled=False), StaticCategorySource(), oracle=OracleStub("[]")
    )
    assert offline.oracle is None


def test_parse_sync_wraps_parse():
    result = _extractor().parse_sync("Kopi - 20.000", default_direction="expense")
    assert result.success and result.transactions[0].amount == 20_000


def test_unknown_explicit_direction_is_ignored():
    result = _run(_extractor(), "Gaji - 5.000.000", default_direction="sideways")
    assert result.transactions[0].direction == "income"
