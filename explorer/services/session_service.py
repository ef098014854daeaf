"""Current-user session held in memory and mirrored to storage."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from explorer.schemas.auth import PublicUser, SessionStatus, UserIdentity
from explorer.storage import USER_INFO_KEY, KeyValueStore, read_json, write_json

logger = logging.getLogger(__name__)


class SessionState:
    """Authenticated identity restored from storage at construction.

    ``logout`` only forgets the identity.  Favorites live under their own key
    and survive, so logging back in as the same user finds them again.
    """

    def __init__(self, storage: KeyValueStore) -> None:
        self._storage = storage
        self._user: UserIdentity | None = None
        self.loading = True
        self._restore()

    def _restore(self) -> None:
        try:
            stored = read_json(self._storage, USER_INFO_KEY)
            if stored is not None:
                self._user = UserIdentity.model_validate(stored)
        except ValidationError:
            logger.warning("Ignoring persisted session with an unexpected shape")
            self._user = None
        finally:
            self.loading = False

    @property
    def user(self) -> UserIdentity | None:
        return self._user

    @property
    def user_id(self) -> str | None:
        return self._user.id if self._user is not None else None

    @property
    def token(self) -> str | None:
        return self._user.token if self._user is not None else None

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    def login(self, identity: UserIdentity) -> None:
        self._user = identity
        write_json(self._storage, USER_INFO_KEY, identity.to_storage())
        logger.info("User %s logged in", identity.id)

    def logout(self) -> None:
        if self._user is not None:
            logger.info("User %s logged out", self._user.id)
        self._user = None
        self._storage.remove(USER_INFO_KEY)

    def status(self) -> SessionStatus:
        user = PublicUser.from_identity(self._user) if self._user is not None else None
        return SessionStatus(
            authenticated=self.is_authenticated, loading=self.loading, user=user
        )


__all__ = ["SessionState"]
