"""Shared fixtures for storage, session and catalog scenarios."""

from __future__ import annotations

from typing import Any

import pytest

from explorer.schemas.auth import UserIdentity
from explorer.schemas.country import Country
from explorer.storage import MemoryStorage
from tests.explorer.support.fakes import SAMPLE_COUNTRY_PAYLOADS, sample_countries


@pytest.fixture
def storage() -> MemoryStorage:
    """Fresh in-memory key-value store standing in for browser storage."""
    return MemoryStorage()


@pytest.fixture
def countries() -> list[Country]:
    return sample_countries()


@pytest.fixture
def country_payloads() -> list[dict[str, Any]]:
    return [dict(item) for item in SAMPLE_COUNTRY_PAYLOADS]


@pytest.fixture
def germany(countries: list[Country]) -> Country:
    return next(c for c in countries if c.cca3 == "DEU")


@pytest.fixture
def france(countries: list[Country]) -> Country:
    return next(c for c in countries if c.cca3 == "FRA")


@pytest.fixture
def identity() -> UserIdentity:
    return UserIdentity.model_validate(
        {"_id": "u1", "name": "Ada", "email": "ada@example.com", "token": "token-u1"}
    )
