"""Oracle transport: a thin async client for OpenAI-compatible chat completions.

The oracle is any object with an async ``complete(instructions=..., user_input=...)``
method returning the raw response text. :class:`OpenAIOracle` is the production
implementation; it performs a single attempt with no retries and no internal
timeout (callers that need one wrap the awaitable themselves).

Transport failures, non-success statuses and missing credentials surface as
:class:`OracleError` so callers can treat them as "oracle unavailable".
"""

from __future__ import annotations

from typing import Any, Protocol

import openai
from openai import AsyncOpenAI

from .logging_setup import get_logger
from .settings import ExtractionSettings

_logger = get_logger("transaction_extraction.oracle")


class OracleError(RuntimeError):
    """The oracle could not produce a response."""


class Oracle(Protocol):
    async def complete(self, *, instructions: str, user_input: str) -> str: ...


def _response_text(resp: Any) -> str:
    """Return the first choice's message text, or ``""`` when absent."""

    choices = getattr(resp, "choices", None) or []
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    return content if isinstance(content, str) else ""


class OpenAIOracle:
    """Chat-completions oracle backed by :class:`openai.AsyncOpenAI`.

    Parameters
    ----------
    model:
        Model name sent with every request.
    base_url:
        Optional OpenAI-compatible endpoint; ``None`` uses the SDK default
        (which itself honours ``OPENAI_BASE_URL``).
    temperature, max_tokens:
        Sampling settings forwarded verbatim.
    client:
        Pre-built client, mainly for tests. When omitted a client is created
        lazily on first use so constructing the oracle has no side effects.
    """

    def __init__(
        self,
        *,
        model: str,
        base_url: str | None = None,
        temperature: float = 0.1,
        max_tokens: int = 1000,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self.model = model
        self.base_url = base_url
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = client

    @classmethod
    def from_settings(cls, settings: ExtractionSettings) -> OpenAIOracle:
        return cls(
            model=settings.model,
            base_url=settings.base_url,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
        )

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            try:
                self._client = AsyncOpenAI(base_url=self.base_url)
            except openai.OpenAIError as e:
                # Raised e.g. when OPENAI_API_KEY is not set.
                raise OracleError(f"oracle client unavailable: {e}") from e
        return self._client

    async def complete(self, *, instructions: str, user_input: str) -> str:
        client = self._get_client()
        try:
            resp = await client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": instructions},
                    {"role": "user", "content": user_input},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except openai.APIStatusError as e:
            raise OracleError(f"oracle error: status {e.status_code}") from e
        except openai.OpenAIError as e:
            raise OracleError(f"oracle request failed: {e.__class__.__name__}") from e

        text = _response_text(resp)
        _logger.debug("oracle:response model=%s chars=%d", self.model, len(text))
        return text


__all__ = ["OpenAIOracle", "Oracle", "OracleError"]
