import pytest

from transaction_extraction.settings import ExtractionSettings, normalize_language


def test_defaults():
    s = ExtractionSettings.from_env()
    assert s.language == "id"
    assert s.temperature == 0.1
    assert s.max_tokens == 1000
    assert s.category_ttl_seconds == 300.0
    assert s.ai_enabled is True
    assert s.base_url is None


def test_from_env_reads_overrides(monkeypatch):
    monkeypatch.setenv("TX_EXTRACT_MODEL", "local-model")
    monkeypatch.setenv("TX_EXTRACT_BASE_URL", "http://localhost:8000/v1")
    monkeypatch.setenv("TX_EXTRACT_TEMPERATURE", "0")
    monkeypatch.setenv("TX_EXTRACT_MAX_TOKENS", "2000")
    monkeypatch.setenv("TX_EXTRACT_LANGUAGE", "en-US")
    monkeypatch.setenv("TX_EXTRACT_CATEGORY_TTL", "60")
    monkeypatch.setenv("TX_EXTRACT_DISABLE_AI", "yes")
    s = ExtractionSettings.from_env()
    assert (s.model, s.base_url, s.temperature, s.max_tokens) == (
        "local-model",
        "http://localhost:8000/v1",
        0.0,
        2000,
    )
    assert s.language == "en"
    assert s.category_ttl_seconds == 60.0
    assert s.ai_enabled is False


def test_unparsable_values_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("TX_EXTRACT_TEMPERATURE", "warm")
    monkeypatch.setenv("TX_EXTRACT_MAX_TOKENS", "-5")
    monkeypatch.setenv("TX_EXTRACT_CATEGORY_TTL", "0")
    monkeypatch.setenv("TX_EXTRACT_LANGUAGE", "fr")
    s = ExtractionSettings.from_env()
    assert s.temperature == 0.1
    assert s.max_tokens == 1000
    assert s.category_ttl_seconds == 300.0
    assert s.language == "id"


@pytest.mark.parametrize(("value", "expected"), [(None, "id"), ("EN", "en"), ("en_GB", "en"), ("id-ID", "id")])
def test_normalize_language(value, expected):
    assert normalize_language(value) == expected


def test_invalid_explicit_values_raise():
    with pytest.raises(ValueError):
        ExtractionSettings(language="fr")  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        ExtractionSettings(category_ttl_seconds=0)
    with pytest.raises(ValueError):
        ExtractionSettings(max_tokens=0)
