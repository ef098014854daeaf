"""Centralized configuration management for the Country Explorer service."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables defined in a local .env file before instantiating the
# settings singleton so every consumer importing :mod:`explorer.settings` sees the
# same values regardless of import order.
load_dotenv()

# -- Application-wide constants -------------------------------------------------

DEFAULT_COUNTRIES_API_URL = "https://restcountries.com/v3.1"
DEFAULT_AUTH_API_URL = "http://localhost:5000/api/auth"
DEFAULT_HTTP_TIMEOUT_SECONDS = 15.0
DEFAULT_STORAGE_BACKEND = "file"
DEFAULT_STORAGE_PATH = "./data/local_storage.json"
DEFAULT_REDIS_URL = "redis://localhost:6379/0"
DEFAULT_LOG_LEVEL = "INFO"

StorageBackend = Literal["memory", "file", "redis"]


def _normalize_origin(origin: str) -> str:
    """Return the origin stripped of whitespace and trailing slashes."""

    return origin.strip().rstrip("/")


def _normalize_base_url(url: str) -> str:
    return url.strip().rstrip("/")


class AppSettings(BaseSettings):
    """Typed configuration surface built on top of ``pydantic-settings``.

    Besides the raw environment values the class exposes a few derived helpers
    (normalised base URLs, numeric log level, CORS origins) so downstream modules
    never have to repeat the parsing logic.
    """

    _explicit_storage_backend: bool = PrivateAttr(default=False)
    _explicit_cors_allow_origins: bool = PrivateAttr(default=False)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    def __init__(
        self, **values: object
    ) -> None:  # noqa: D401 - short override explanation
        """Capture explicit overrides prior to delegating to ``BaseSettings``."""

        normalized_keys = {str(key).lower() for key in values}
        super().__init__(**values)
        self._explicit_storage_backend = "storage_backend" in normalized_keys
        self._explicit_cors_allow_origins = (
            "cors_allow_origins_raw" in normalized_keys
            or "cors_allow_origins" in normalized_keys
        )
        backend_env = os.getenv("STORAGE_BACKEND")
        if backend_env is not None and backend_env.strip():
            self._explicit_storage_backend = True
        cors_env = os.getenv("CORS_ALLOW_ORIGINS")
        if cors_env is not None and cors_env.strip():
            self._explicit_cors_allow_origins = True

    countries_api_url: str = Field(
        default=DEFAULT_COUNTRIES_API_URL,
        alias="COUNTRIES_API_URL",
        description="Base URL of the REST Countries service (v3.1 schema).",
    )
    auth_api_url: str = Field(
        default=DEFAULT_AUTH_API_URL,
        alias="AUTH_API_URL",
        description="Base URL of the first-party authentication service.",
    )
    http_timeout_seconds: float = Field(
        default=DEFAULT_HTTP_TIMEOUT_SECONDS,
        alias="HTTP_TIMEOUT_SECONDS",
        gt=0,
        description="Per-request timeout applied to outbound HTTP calls.",
    )
    storage_backend: StorageBackend = Field(
        default=DEFAULT_STORAGE_BACKEND,
        alias="STORAGE_BACKEND",
        description=(
            "Key-value store holding the session identity and favorites."
            " ``file`` persists a JSON document on disk, ``redis`` shares the"
            " data between processes and ``memory`` keeps it for the lifetime of"
            " the process only."
        ),
    )
    storage_path: str = Field(
        default=DEFAULT_STORAGE_PATH,
        alias="STORAGE_PATH",
        description="Location of the JSON document used by the file backend.",
    )
    redis_url: str = Field(
        default=DEFAULT_REDIS_URL,
        alias="REDIS_URL",
        description="Redis connection string consumed by the redis backend.",
    )
    cors_allow_origins_raw: str | None = Field(
        default=None,
        alias="CORS_ALLOW_ORIGINS",
        description="Comma-separated list of additional CORS origins.",
    )
    log_level: str = Field(
        default=DEFAULT_LOG_LEVEL,
        alias="LOG_LEVEL",
        description="Root logging level (e.g. INFO, DEBUG, WARNING).",
    )

    @property
    def countries_base_url(self) -> str:
        """Return the countries API base URL without a trailing slash."""

        return _normalize_base_url(self.countries_api_url)

    @property
    def auth_base_url(self) -> str:
        """Return the auth API base URL without a trailing slash."""

        return _normalize_base_url(self.auth_api_url)

    @property
    def cors_allow_origins(self) -> list[str]:
        """Return normalised CORS origins supplied via environment variables."""

        if not self.cors_allow_origins_raw:
            return []

        origins = [
            _normalize_origin(origin)
            for origin in self.cors_allow_origins_raw.split(",")
            if origin.strip()
        ]
        return [origin for origin in origins if origin]

    @property
    def log_level_numeric(self) -> int:
        """Translate ``log_level`` into the numeric constant expected by logging."""

        candidate = logging.getLevelName(self.log_level.upper())
        if isinstance(candidate, int):
            return candidate
        return logging.INFO

    def optional_config_warnings(self) -> list[str]:
        """Return human-readable warnings for unset optional configuration."""

        warnings: list[str] = []

        if not self._explicit_storage_backend:
            warnings.append(
                "STORAGE_BACKEND is not set - sessions and favorites will be "
                f"stored in {self.storage_path}"
            )

        if not self._explicit_cors_allow_origins and not self.cors_allow_origins:
            warnings.append(
                "CORS_ALLOW_ORIGINS is not set - using default localhost origins only "
                "(may cause CORS issues in production)"
            )

        return warnings


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return a cached instance of :class:`AppSettings`."""

    return AppSettings()


settings = get_settings()

__all__ = [
    "AppSettings",
    "DEFAULT_AUTH_API_URL",
    "DEFAULT_COUNTRIES_API_URL",
    "DEFAULT_HTTP_TIMEOUT_SECONDS",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_REDIS_URL",
    "DEFAULT_STORAGE_BACKEND",
    "DEFAULT_STORAGE_PATH",
    "StorageBackend",
    "get_settings",
    "settings",
]
