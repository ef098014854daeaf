"""Unit tests covering the typed application settings implementation."""

from __future__ import annotations

import logging

import pytest

from explorer.main import _combine_origins, _validate_environment
from explorer.settings import (
    DEFAULT_COUNTRIES_API_URL,
    DEFAULT_STORAGE_PATH,
    AppSettings,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "COUNTRIES_API_URL",
        "AUTH_API_URL",
        "STORAGE_BACKEND",
        "STORAGE_PATH",
        "CORS_ALLOW_ORIGINS",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults_point_at_public_countries_api() -> None:
    configured = AppSettings(_env_file=None)

    assert configured.countries_base_url == DEFAULT_COUNTRIES_API_URL
    assert configured.storage_backend == "file"
    assert configured.storage_path == DEFAULT_STORAGE_PATH


def test_base_urls_drop_trailing_slash(monkeypatch: pytest.MonkeyPatch) -> None:
    """Gateways join paths onto the base URL, so trailing slashes are stripped."""

    monkeypatch.setenv("COUNTRIES_API_URL", "https://countries.example/v3.1/")
    monkeypatch.setenv("AUTH_API_URL", " http://auth.example/api/auth/ ")
    configured = AppSettings(_env_file=None)

    assert configured.countries_base_url == "https://countries.example/v3.1"
    assert configured.auth_base_url == "http://auth.example/api/auth"


def test_cors_origins_are_split_and_normalised(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(
        "CORS_ALLOW_ORIGINS", "https://a.example/, ,https://b.example"
    )
    configured = AppSettings(_env_file=None)

    assert configured.cors_allow_origins == ["https://a.example", "https://b.example"]


def test_invalid_storage_backend_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STORAGE_BACKEND", "sqlite")

    with pytest.raises(ValueError):
        AppSettings(_env_file=None)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("debug", logging.DEBUG), ("WARNING", logging.WARNING), ("chatty", logging.INFO)],
)
def test_log_level_numeric(
    monkeypatch: pytest.MonkeyPatch, raw: str, expected: int
) -> None:
    monkeypatch.setenv("LOG_LEVEL", raw)

    assert AppSettings(_env_file=None).log_level_numeric == expected


def test_optional_config_warnings_default() -> None:
    """Default configuration should warn when optional settings remain unset."""

    warnings = AppSettings(_env_file=None).optional_config_warnings()

    assert any("STORAGE_BACKEND" in warning for warning in warnings)
    assert any("CORS_ALLOW_ORIGINS" in warning for warning in warnings)


def test_optional_config_warnings_clear_when_values_provided(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Supplying overrides should suppress optional configuration warnings."""

    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://example.com")

    assert AppSettings(_env_file=None).optional_config_warnings() == []


def test_explicit_keyword_suppresses_storage_warning() -> None:
    configured = AppSettings(_env_file=None, storage_backend="memory")

    assert configured.storage_backend == "memory"
    assert not any(
        "STORAGE_BACKEND" in warning for warning in configured.optional_config_warnings()
    )


def test_validate_environment_logging(caplog: pytest.LogCaptureFixture) -> None:
    """The environment validator should emit warnings when optional inputs are absent."""

    candidate = AppSettings(_env_file=None)

    with caplog.at_level(logging.WARNING):
        _validate_environment(active_settings=candidate)

    assert "STORAGE_BACKEND is not set" in caplog.text
    assert "CORS_ALLOW_ORIGINS is not set" in caplog.text


def test_combine_origins_dedupes_preserving_order() -> None:
    assert _combine_origins(
        ["http://localhost:3000", "http://localhost:5173/"],
        ["http://localhost:5173", "https://app.example"],
    ) == ["http://localhost:3000", "http://localhost:5173", "https://app.example"]
