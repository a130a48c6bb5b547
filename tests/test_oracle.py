import asyncio

import openai
import pytest

import transaction_extraction.oracle as oracle_mod
from tests.helpers.oracle_stub import AsyncOpenAIStub
from transaction_extraction.oracle import OpenAIOracle, OracleError
from transaction_extraction.settings import ExtractionSettings


def _complete(oracle: OpenAIOracle) -> str:
    return asyncio.run(oracle.complete(instructions="SYS", user_input="USER"))


def test_complete_sends_system_and_user_messages():
    stub = AsyncOpenAIStub('[{"description": "Kopi", "amount": 20000}]')
    oracle = OpenAIOracle(model="test-model", temperature=0.2, max_tokens=321, client=stub)

    assert _complete(oracle).startswith("[{")
    (call,) = stub.calls
    assert call["model"] == "test-model"
    assert call["messages"] == [
        {"role": "system", "content": "SYS"},
        {"role": "user", "content": "USER"},
    ]
    assert call["temperature"] == 0.2
    assert call["max_tokens"] == 321


def test_missing_choices_yield_empty_text():
    assert _complete(OpenAIOracle(model="m", client=AsyncOpenAIStub(None))) == ""


def test_sdk_errors_become_oracle_errors():
    stub = AsyncOpenAIStub(error=openai.OpenAIError("connection reset"))
    with pytest.raises(OracleError):
        _complete(OpenAIOracle(model="m", client=stub))


def test_client_is_created_lazily_from_settings(monkeypatch):
    created: list[dict] = []
    stub = AsyncOpenAIStub("[]")

    def _factory(**kwargs):
        created.append(kwargs)
        return stub

    monkeypatch.setattr(oracle_mod, "AsyncOpenAI", _factory)
    settings = ExtractionSettings(model="gpt-x", base_url="http://localhost:9999/v1", max_tokens=50)
    oracle = OpenAIOracle.from_settings(settings)
    assert created == []

    assert _complete(oracle) == "[]"
    _complete(oracle)
    assert created == [{"base_url": "http://localhost:9999/v1"}]
    assert stub.calls[0]["model"] == "gpt-x"
    assert stub.calls[0]["max_tokens"] == 50


def test_missing_credentials_surface_as_oracle_error():
    # OPENAI_API_KEY is removed by the autouse fixture.
    with pytest.raises(OracleError):
        _complete(OpenAIOracle(model="m"))
