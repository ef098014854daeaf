"""Per-user favorite countries persisted in the key-value store.

All users share one storage blob, a JSON object mapping user id to a list of
country snapshots:

* ``FavoritesStore.list``: fail-soft read; corrupt or missing data yields ``[]``.
* ``FavoritesStore.add``/``remove``: read the whole map, change one user's
  slice, write the whole map back.  Both refuse to run without a user id.
* ``FavoritesStore.clear``: drop one user's slice; never called on logout.

:class:`FavoritesService` binds the store to the current :class:`SessionState`
by passing the session's user id explicitly on every call.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from explorer.errors import NotAuthenticatedError
from explorer.schemas.country import Country
from explorer.services.session_service import SessionState
from explorer.storage import FAVORITES_KEY, KeyValueStore, read_json, write_json

logger = logging.getLogger(__name__)

FavoritesMap = dict[str, list[dict[str, Any]]]


def _entry_code(entry: Any) -> str | None:
    if isinstance(entry, dict):
        code = entry.get("cca3")
        return code if isinstance(code, str) else None
    return None


def _to_countries(entries: list[Any]) -> list[Country]:
    countries: list[Country] = []
    for entry in entries:
        try:
            countries.append(Country.model_validate(entry))
        except ValidationError:
            logger.warning("Skipping unreadable favorite entry: %r", entry)
    return countries


class FavoritesStore:
    def __init__(self, storage: KeyValueStore) -> None:
        self._storage = storage

    def _load_all(self) -> FavoritesMap:
        stored = read_json(self._storage, FAVORITES_KEY)
        if not isinstance(stored, dict):
            if stored is not None:
                logger.warning("Favorites blob is not an object; treating it as empty")
            return {}
        return {
            str(user_id): entries
            for user_id, entries in stored.items()
            if isinstance(entries, list)
        }

    def _save_all(self, favorites: FavoritesMap) -> None:
        write_json(self._storage, FAVORITES_KEY, favorites)

    @staticmethod
    def _require_user(user_id: str | None) -> str:
        if not user_id:
            raise NotAuthenticatedError()
        return user_id

    def list(self, user_id: str | None) -> list[Country]:
        """Return ``user_id``'s favorites, or an empty list when there are none."""

        if not user_id:
            return []
        return _to_countries(self._load_all().get(user_id, []))

    def add(self, user_id: str | None, country: Country) -> list[Country]:
        """Append ``country`` unless an entry with the same code already exists."""

        owner = self._require_user(user_id)
        favorites = self._load_all()
        entries = favorites.setdefault(owner, [])

        if any(_entry_code(entry) == country.cca3 for entry in entries):
            logger.debug("Country %s already in favorites for %s", country.cca3, owner)
        else:
            entries.append(country.to_snapshot())
            logger.info("Added %s to favorites for %s", country.cca3, owner)

        self._save_all(favorites)
        return _to_countries(entries)

    def remove(self, user_id: str | None, code: str) -> list[Country]:
        """Drop every entry whose code equals ``code``; absent codes are a no-op."""

        owner = self._require_user(user_id)
        favorites = self._load_all()

        if owner in favorites:
            favorites[owner] = [
                entry for entry in favorites[owner] if _entry_code(entry) != code
            ]
            self._save_all(favorites)
            logger.info("Removed %s from favorites for %s", code, owner)

        return _to_countries(favorites.get(owner, []))

    def clear(self, user_id: str | None) -> None:
        if not user_id:
            return
        favorites = self._load_all()
        if user_id in favorites:
            del favorites[user_id]
            self._save_all(favorites)
            logger.info("Cleared favorites for %s", user_id)

    def is_favorite(self, user_id: str | None, code: str) -> bool:
        return any(country.cca3 == code for country in self.list(user_id))


class FavoritesService:
    """Favorites of whoever is currently logged in."""

    def __init__(self, store: FavoritesStore, session: SessionState) -> None:
        self._store = store
        self._session = session

    @property
    def user_id(self) -> str | None:
        return self._session.user_id

    def favorites(self) -> list[Country]:
        return self._store.list(self._session.user_id)

    def add(self, country: Country) -> list[Country]:
        return self._store.add(self._session.user_id, country)

    def remove(self, code: str) -> list[Country]:
        return self._store.remove(self._session.user_id, code)

    def toggle(self, country: Country) -> tuple[list[Country], bool]:
        """Add or remove ``country``; the flag tells whether it is now a favorite."""

        user_id = self._session.user_id
        if self._store.is_favorite(user_id, country.cca3):
            return self._store.remove(user_id, country.cca3), False
        return self._store.add(user_id, country), True

    def is_favorite(self, code: str) -> bool:
        return self._store.is_favorite(self._session.user_id, code)


__all__ = ["FavoritesService", "FavoritesStore"]
