"""FastAPI dependency wiring for the explorer services.

Storage, session, catalog and gateways are process-wide singletons: one
running service plays the role of one browser profile.  Factories live here so
the service modules stay free of web-layer concerns and tests can swap any of
them through ``app.dependency_overrides``.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import Depends

from explorer.clients.auth import AuthGateway
from explorer.clients.countries import CountriesGateway
from explorer.services.country_catalog import CountryCatalog
from explorer.services.favorites_service import FavoritesService, FavoritesStore
from explorer.services.session_service import SessionState
from explorer.settings import get_settings
from explorer.storage import USER_INFO_KEY, KeyValueStore, get_storage, read_json

logger = logging.getLogger(__name__)


def _stored_token(storage: KeyValueStore) -> str | None:
    """Read the bearer token straight from the persisted identity."""

    stored = read_json(storage, USER_INFO_KEY)
    if isinstance(stored, dict):
        token = stored.get("token")
        return token if isinstance(token, str) else None
    return None


@lru_cache(maxsize=1)
def get_session_state() -> SessionState:
    return SessionState(get_storage())


def get_favorites_store(
    storage: KeyValueStore = Depends(get_storage),
) -> FavoritesStore:
    return FavoritesStore(storage)


def get_favorites_service(
    store: FavoritesStore = Depends(get_favorites_store),
    session: SessionState = Depends(get_session_state),
) -> FavoritesService:
    return FavoritesService(store, session)


@lru_cache(maxsize=1)
def get_countries_gateway() -> CountriesGateway:
    return CountriesGateway.from_settings(get_settings())


@lru_cache(maxsize=1)
def get_auth_gateway() -> AuthGateway:
    storage = get_storage()
    return AuthGateway.from_settings(
        get_settings(), token_provider=lambda: _stored_token(storage)
    )


@lru_cache(maxsize=1)
def get_country_catalog() -> CountryCatalog:
    return CountryCatalog()


async def get_loaded_catalog(
    catalog: CountryCatalog = Depends(get_country_catalog),
    gateway: CountriesGateway = Depends(get_countries_gateway),
) -> CountryCatalog:
    """Return the catalog after its one-time fetch has settled."""

    await catalog.load(gateway)
    return catalog


async def close_gateways() -> None:
    """Close any gateway HTTP clients created during the application lifetime."""

    if get_countries_gateway.cache_info().currsize:
        await get_countries_gateway().aclose()
        get_countries_gateway.cache_clear()
    if get_auth_gateway.cache_info().currsize:
        await get_auth_gateway().aclose()
        get_auth_gateway.cache_clear()
    logger.debug("Gateway clients closed")


__all__ = [
    "close_gateways",
    "get_auth_gateway",
    "get_countries_gateway",
    "get_country_catalog",
    "get_favorites_service",
    "get_favorites_store",
    "get_loaded_catalog",
    "get_session_state",
]
