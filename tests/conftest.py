"""Pytest configuration helpers for the Country Explorer project.

The ``pytest`` plugin system automatically imports ``tests.conftest``. We use
that behavior to ensure the repository root is present on ``sys.path`` before
any test modules import application code.
"""

from __future__ import annotations

import pytest

from explorer.services import dependencies
from explorer.storage import get_storage
from tests import _ensure_repo_on_path


def pytest_configure(config: pytest.Config) -> None:
    """Hook executed by pytest prior to running any tests."""

    _ensure_repo_on_path()


@pytest.fixture(autouse=True)
def _reset_singletons() -> None:
    """Drop process-wide singletons so no test sees another test's state."""

    get_storage.cache_clear()
    dependencies.get_session_state.cache_clear()
    dependencies.get_country_catalog.cache_clear()
