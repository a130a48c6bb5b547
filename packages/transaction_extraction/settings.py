"""Environment-driven settings for the extraction engine.

Settings are read lazily by entrypoints (the CLI or a host application) via
:meth:`ExtractionSettings.from_env`; library modules accept explicit values
and never read the environment at import time. Credentials are not part of
the settings: the OpenAI SDK reads ``OPENAI_API_KEY`` on its own.

Environment variables
---------------------
- ``TX_EXTRACT_MODEL``: chat-completions model name.
- ``TX_EXTRACT_BASE_URL``: optional OpenAI-compatible endpoint.
- ``TX_EXTRACT_TEMPERATURE`` / ``TX_EXTRACT_MAX_TOKENS``: sampling knobs.
- ``TX_EXTRACT_LANGUAGE``: ``id`` or ``en`` (category names and messages).
- ``TX_EXTRACT_CATEGORY_TTL``: catalog cache lifetime in seconds.
- ``TX_EXTRACT_DISABLE_AI``: ``1``/``true``/``yes`` skips the oracle entirely.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

type Language = Literal["id", "en"]

SUPPORTED_LANGUAGES: tuple[Language, ...] = ("id", "en")

_MODEL_DEFAULT = "gpt-4.1-mini"
_TEMPERATURE_DEFAULT = 0.1
_MAX_TOKENS_DEFAULT = 1000
_CATEGORY_TTL_DEFAULT = 300.0


def _env_str(name: str) -> str | None:
    val = os.getenv(name)
    if val is None:
        return None
    val = val.strip()
    return val or None


def _env_float(name: str, default: float) -> float:
    raw = _env_str(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = _env_str(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_flag(name: str) -> bool:
    raw = _env_str(name)
    return raw is not None and raw.lower() in {"1", "true", "yes", "on"}


def normalize_language(value: str | None) -> Language:
    """Map a free-form language tag (``"en-US"``, ``"ID"``) to a supported one."""

    if not value:
        return "id"
    tag = value.strip().lower().replace("_", "-").split("-", 1)[0]
    if tag == "en":
        return "en"
    return "id"


@dataclass(frozen=True, slots=True)
class ExtractionSettings:
    model: str = _MODEL_DEFAULT
    base_url: str | None = None
    temperature: float = _TEMPERATURE_DEFAULT
    max_tokens: int = _MAX_TOKENS_DEFAULT
    language: Language = "id"
    category_ttl_seconds: float = _CATEGORY_TTL_DEFAULT
    ai_enabled: bool = True

    def __post_init__(self) -> None:
        if self.language not in SUPPORTED_LANGUAGES:
            raise ValueError(f"unsupported language: {self.language!r}")
        if self.category_ttl_seconds <= 0:
            raise ValueError("category_ttl_seconds must be positive")
        if self.max_tokens <= 0:
            raise ValueError("max_tokens must be a positive integer")

    @classmethod
    def from_env(cls) -> ExtractionSettings:
        ttl = _env_float("TX_EXTRACT_CATEGORY_TTL", _CATEGORY_TTL_DEFAULT)
        max_tokens = _env_int("TX_EXTRACT_MAX_TOKENS", _MAX_TOKENS_DEFAULT)
        return cls(
            model=_env_str("TX_EXTRACT_MODEL") or _MODEL_DEFAULT,
            base_url=_env_str("TX_EXTRACT_BASE_URL"),
            temperature=_env_float("TX_EXTRACT_TEMPERATURE", _TEMPERATURE_DEFAULT),
            max_tokens=max_tokens if max_tokens > 0 else _MAX_TOKENS_DEFAULT,
            language=normalize_language(_env_str("TX_EXTRACT_LANGUAGE")),
            category_ttl_seconds=ttl if ttl > 0 else _CATEGORY_TTL_DEFAULT,
            ai_enabled=not _env_flag("TX_EXTRACT_DISABLE_AI"),
        )


__all__ = ["ExtractionSettings", "Language", "SUPPORTED_LANGUAGES", "normalize_language"]
