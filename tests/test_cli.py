import json

import pytest
from db.client import session_scope
from db.models.finance import TxTransaction
from sqlalchemy import select
from typer.testing import CliRunner

import transaction_extraction.cli as cli_mod
from tests.helpers.db import bootstrap_sqlite_db

runner = CliRunner()


@pytest.fixture(autouse=True)
def _quiet_cli(monkeypatch, tmp_path):
    # Keep handlers off the shared package logger and avoid picking up a real .env.
    monkeypatch.setattr(cli_mod, "configure_logging", lambda *a, **k: None)
    monkeypatch.chdir(tmp_path)


def test_parse_offline_json():
    result = runner.invoke(
        cli_mod.app,
        ["parse", "--offline", "--direction", "income", "--json", "Bude Tun - 100.000\nGoPay - 103.600"],
    )
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["success"] is True
    assert payload["source"] == "fallback"
    assert [(t["description"], t["amount"], t["category_id"]) for t in payload["transactions"]] == [
        ("Bude Tun", 100_000, 16),
        ("GoPay", 103_600, 17),
    ]
    assert payload["transactions"][0]["category_name"] == "Hadiah"


def test_parse_reads_file_and_respects_language(tmp_path):
    src = tmp_path / "input.txt"
    src.write_text("Makan siang - 25.000\nTotal: 25.000\n", encoding="utf-8")
    result = runner.invoke(
        cli_mod.app, ["parse", "--offline", "--language", "en", "--json", "--file", str(src)]
    )
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["message"] == "Successfully parsed 1 transactions (fallback)"
    assert payload["transactions"][0]["category_name"] == "Dining"


def test_parse_reads_stdin():
    result = runner.invoke(cli_mod.app, ["parse", "--offline", "--json"], input="Kopi - 20.000\n")
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["transactions"][0]["amount"] == 20_000


def test_parse_prints_a_table():
    result = runner.invoke(cli_mod.app, ["parse", "--offline", "Kopi - 20.000"])
    assert result.exit_code == 0, result.output
    assert "Kopi" in result.stdout
    assert "20.000" in result.stdout


def test_parse_without_credentials_still_falls_back():
    result = runner.invoke(cli_mod.app, ["parse", "Kopi - 20.000"])
    assert result.exit_code == 0, result.output
    assert "Kopi" in result.stdout


def test_parse_failure_exit_code():
    result = runner.invoke(cli_mod.app, ["parse", "--offline", "Total 100.000"])
    assert result.exit_code == 1


def test_parse_rejects_unknown_direction():
    result = runner.invoke(cli_mod.app, ["parse", "--offline", "--direction", "up", "Kopi 1"])
    assert result.exit_code == 1


def test_seed_categories_twice(tmp_path):
    url = bootstrap_sqlite_db(tmp_path / "cli.sqlite3")
    first = runner.invoke(cli_mod.app, ["seed-categories", "--database-url", url])
    second = runner.invoke(cli_mod.app, ["seed-categories", "--database-url", url])
    assert first.exit_code == 0, first.output
    assert "Inserted 17" in first.stdout
    assert second.exit_code == 0
    assert "already present" in second.stdout


def test_seed_requires_a_database():
    assert runner.invoke(cli_mod.app, ["seed-categories"]).exit_code == 1


def test_save_persists_parsed_transactions(tmp_path, monkeypatch):
    url = bootstrap_sqlite_db(tmp_path / "cli.sqlite3", seed=True)
    monkeypatch.setenv("DATABASE_URL", url)
    result = runner.invoke(
        cli_mod.app,
        ["save", "--offline", "--no-review", "--wallet", "w1", "--owner", "u1", "Kopi - 20.000\nTeh - 5.000"],
    )
    assert result.exit_code == 0, result.output
    assert "Saved 2 transactions" in result.stdout

    with session_scope(database_url=url) as session:
        rows = session.scalars(select(TxTransaction).order_by(TxTransaction.amount)).all()
        assert [(r.description, r.amount, r.wallet_id, r.user_id) for r in rows] == [
            ("Teh", 5_000, "w1", "u1"),
            ("Kopi", 20_000, "w1", "u1"),
        ]


def test_save_requires_a_database():
    result = runner.invoke(cli_mod.app, ["save", "--offline", "--no-review", "--wallet", "w1", "Kopi 1"])
    assert result.exit_code == 1
