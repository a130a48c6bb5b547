# ruff: noqa: I001
"""CLI for the ``transaction_extraction`` package.

This module exposes callable command handlers (``cmd_parse``, ``cmd_save``,
``cmd_seed_categories``) and a Typer-based console interface. Environment
variables (``OPENAI_API_KEY``, ``DATABASE_URL``, ``TX_EXTRACT_*``) are loaded
from a local ``.env`` using ``python-dotenv`` before delegating to command
logic. Business logic lives in :mod:`transaction_extraction.extract` and
related modules.
"""

from __future__ import annotations

import dataclasses
import json
import os
import sys
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from .catalog import CategorySource, StaticCategorySource
from .extract import TransactionExtractor
from .logging_setup import configure_logging
from .models import DIRECTIONS, Direction, ExtractionResult
from .settings import ExtractionSettings, normalize_language


console = Console()
err_console = Console(stderr=True)


# ---- Small module-level helpers used by CLI commands -------------------------


def _database_url(override: str | None) -> str | None:
    return override or os.getenv("DATABASE_URL") or None


def _read_input(text: str | None, file: Path | None) -> str:
    """Return the text to parse: the argument, then ``--file``, then stdin."""

    if text is not None:
        return text
    if file is not None:
        return file.read_text(encoding="utf-8")
    if sys.stdin.isatty():
        raise ValueError("no input: pass TEXT, --file, or pipe text on stdin")
    return sys.stdin.read()


def _check_direction(direction: str | None) -> Direction | None:
    if direction is None:
        return None
    d = direction.strip().lower()
    if d not in DIRECTIONS:
        raise ValueError(f"--direction must be one of {', '.join(DIRECTIONS)}")
    return "income" if d == "income" else "expense"


def _build_extractor(
    *, offline: bool, language: str | None, database_url: str | None
) -> TransactionExtractor:
    settings = ExtractionSettings.from_env()
    if language is not None:
        settings = dataclasses.replace(settings, language=normalize_language(language))
    if offline:
        settings = dataclasses.replace(settings, ai_enabled=False)

    source: CategorySource
    url = _database_url(database_url)
    if url:
        # Deferred import keeps the offline path free of database setup.
        from .categories import DbCategorySource

        source = DbCategorySource(url, language=settings.language)
    else:
        source = StaticCategorySource(language=settings.language)
    return TransactionExtractor.from_settings(settings, source)


def _result_to_json(result: ExtractionResult) -> dict[str, Any]:
    return dataclasses.asdict(result)


def _print_result(result: ExtractionResult) -> None:
    if not result.transactions:
        err_console.print(f"[red]{result.message}[/red]" + (f": {result.error}" if result.error else ""))
        return
    table = Table(title=result.message)
    table.add_column("#", justify="right")
    table.add_column("Description")
    table.add_column("Amount", justify="right")
    table.add_column("Type")
    table.add_column("Category")
    table.add_column("Conf.", justify="right")
    for i, tx in enumerate(result.transactions, start=1):
        table.add_row(
            str(i),
            tx.description,
            f"{tx.amount:,}".replace(",", "."),
            tx.direction,
            f"{tx.category_name} ({tx.category_id})",
            f"{tx.confidence:.2f}",
        )
    console.print(table)


# ---- Command handlers ---------------------------------------------------------


def cmd_parse(
    text: str | None,
    *,
    file: Path | None = None,
    owner: str | None = None,
    offline: bool = False,
    direction: str | None = None,
    language: str | None = None,
    as_json: bool = False,
    database_url: str | None = None,
) -> int:
    """Parse text and print the transactions. Returns a process exit code."""

    try:
        raw = _read_input(text, file)
        default_direction = _check_direction(direction)
        extractor = _build_extractor(offline=offline, language=language, database_url=database_url)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result = extractor.parse_sync(raw, owner, default_direction=default_direction)
    if as_json:
        typer.echo(json.dumps(_result_to_json(result), ensure_ascii=False, indent=2))
    else:
        _print_result(result)
    return 0 if result.success else 1


def cmd_save(
    text: str | None,
    *,
    wallet: str,
    file: Path | None = None,
    owner: str | None = None,
    offline: bool = False,
    direction: str | None = None,
    language: str | None = None,
    database_url: str | None = None,
    review: bool = True,
) -> int:
    """Parse text, optionally review categories, and persist the transactions."""

    url = _database_url(database_url)
    if not url:
        print("Error: DATABASE_URL is not set and --database-url was not given.", file=sys.stderr)
        return 1
    try:
        raw = _read_input(text, file)
        default_direction = _check_direction(direction)
        extractor = _build_extractor(offline=offline, language=language, database_url=url)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result = extractor.parse_sync(raw, owner, default_direction=default_direction)
    _print_result(result)
    if not result.success:
        return 1

    transactions = list(result.transactions)
    if review:
        from .review import review_parsed_transactions

        transactions = review_parsed_transactions(transactions, extractor.categories.get(owner))

    try:
        from db.client import session_scope
        from .conversion import to_transaction_record
        from .persistence import save_transaction_records

        records = [to_transaction_record(t, wallet, owner=owner) for t in transactions]
        with session_scope(database_url=url) as session:
            saved = save_transaction_records(session, records)
    except Exception as e:
        print(f"Error: persistence failed: {e}", file=sys.stderr)
        return 1

    typer.echo(f"Saved {saved} transactions to wallet {wallet}")
    return 0


def cmd_seed_categories(*, database_url: str | None = None) -> int:
    url = _database_url(database_url)
    if not url:
        print("Error: DATABASE_URL is not set and --database-url was not given.", file=sys.stderr)
        return 1
    try:
        from db.client import session_scope
        from .categories import seed_default_categories

        with session_scope(database_url=url) as session:
            inserted = seed_default_categories(session)
    except Exception as e:
        print(f"Error: seeding failed: {e}", file=sys.stderr)
        return 1

    if inserted:
        typer.echo(f"Inserted {inserted} default categories")
    else:
        typer.echo("Default categories already present")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Extract income/expense transactions from free-form text. "
        "Loads OPENAI_API_KEY and DATABASE_URL from a local .env before running."
    ),
)

TextArg = Annotated[
    str | None, typer.Argument(help="Text to parse (omit to use --file or stdin).")
]
FileOpt = Annotated[
    Path | None,
    typer.Option("--file", "-f", help="Read the text from a file.", dir_okay=False),
]
OwnerOpt = Annotated[str | None, typer.Option(help="Owner whose custom categories apply.")]
OfflineOpt = Annotated[
    bool, typer.Option("--offline", help="Skip the AI model; use the rule-based parser only.")
]
DirectionOpt = Annotated[
    str | None, typer.Option(help="Force the default direction (income or expense).")
]
LanguageOpt = Annotated[
    str | None, typer.Option(help="Message/category language (id or en).")
]
DatabaseUrlOpt = Annotated[
    str | None, typer.Option(help="Override DATABASE_URL (falls back to env var).")
]


@app.command("parse")
def parse_cmd(
    text: TextArg = None,
    *,
    file: FileOpt = None,
    owner: OwnerOpt = None,
    offline: OfflineOpt = False,
    direction: DirectionOpt = None,
    language: LanguageOpt = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the result as JSON.")] = False,
    database_url: DatabaseUrlOpt = None,
) -> None:
    """Parse transactions and print them."""

    code = cmd_parse(
        text,
        file=file,
        owner=owner,
        offline=offline,
        direction=direction,
        language=language,
        as_json=as_json,
        database_url=database_url,
    )
    raise typer.Exit(code)


@app.command("save")
def save_cmd(
    text: TextArg = None,
    *,
    wallet: Annotated[str, typer.Option(help="Wallet id the transactions belong to.")],
    file: FileOpt = None,
    owner: OwnerOpt = None,
    offline: OfflineOpt = False,
    direction: DirectionOpt = None,
    language: LanguageOpt = None,
    database_url: DatabaseUrlOpt = None,
    review: Annotated[
        bool, typer.Option("--review/--no-review", help="Confirm categories interactively.")
    ] = True,
) -> None:
    """Parse transactions, review their categories, and save them."""

    code = cmd_save(
        text,
        wallet=wallet,
        file=file,
        owner=owner,
        offline=offline,
        direction=direction,
        language=language,
        database_url=database_url,
        review=review,
    )
    raise typer.Exit(code)


@app.command("seed-categories")
def seed_categories_cmd(database_url: DatabaseUrlOpt = None) -> None:
    """Insert the default category catalog."""

    raise typer.Exit(cmd_seed_categories(database_url=database_url))


@app.callback()
def _root() -> None:
    """Load ``.env`` from the working directory and configure logging."""

    # override=False keeps already-set environment variables
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # Central logging setup so child loggers inherit configuration
    configure_logging()


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m transaction_extraction.cli`
    app()
