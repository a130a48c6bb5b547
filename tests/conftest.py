"""Pytest configuration for test isolation.

The package reads its configuration from the environment (``TX_EXTRACT_*``,
``DATABASE_URL``) and the OpenAI SDK reads ``OPENAI_API_KEY``. A developer's
shell or ``.env`` must never leak into a test run, so every test starts from a
clean slate and cached database engines are disposed afterwards.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

# Make sure the workspace `packages/` and `libs/db/src` dirs are importable even
# without an editable install.
_ROOT = Path(__file__).resolve().parents[1]
for _p in (_ROOT / "libs" / "db" / "src", _ROOT / "packages", _ROOT):
    if str(_p) not in sys.path:
        sys.path.insert(0, str(_p))


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("TX_EXTRACT_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_BASE_URL", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)


@pytest.fixture(autouse=True)
def _dispose_db_engines() -> Iterator[None]:
    yield
    from db.client import dispose_engines

    dispose_engines()
