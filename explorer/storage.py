"""Key-value storage backing the session identity and the favorites map.

Values are always strings, the same contract a browser's ``localStorage``
offers.  Structured payloads go through :func:`read_json`/:func:`write_json`,
which treat undecodable content as absent instead of failing.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from functools import lru_cache
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from redis import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from explorer.settings import AppSettings, get_settings

logger = logging.getLogger(__name__)

USER_INFO_KEY = "userInfo"
FAVORITES_KEY = "userFavorites"


@runtime_checkable
class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None:
        """Return the raw value stored under ``key`` or ``None``."""

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    def remove(self, key: str) -> None:
        """Delete ``key``; missing keys are ignored."""


class MemoryStorage:
    """Process-local store used by tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStorage:
    """Persist every key inside a single JSON document on disk.

    The document is re-read on each access so that several processes pointing at
    the same file observe each other's writes.  Writes replace the file
    atomically; concurrent writers race and the last one wins.  A document that
    cannot be read, decoded or parsed counts as empty.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)

    def _load(self) -> dict[str, str]:
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            return {}
        except OSError as exc:
            logger.warning("Unable to read storage file %s: %s", self._path, exc)
            return {}

        try:
            document = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            logger.warning("Storage file %s is corrupt; treating it as empty", self._path)
            return {}

        if not isinstance(document, dict):
            logger.warning("Storage file %s does not hold an object; ignoring it", self._path)
            return {}
        return {str(key): value for key, value in document.items() if isinstance(value, str)}

    def _dump(self, document: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.", dir=str(self._path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(document, handle, ensure_ascii=False)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        document = self._load()
        document[key] = value
        self._dump(document)

    def remove(self, key: str) -> None:
        document = self._load()
        if key not in document:
            return
        del document[key]
        self._dump(document)


class RedisStorage:
    """Store keys in Redis under a shared namespace.

    Reads degrade to ``None`` when Redis is unreachable or too slow to answer;
    writes propagate the failure so callers never believe a mutation was
    persisted when it was not.
    """

    def __init__(self, redis: Redis, *, namespace: str = "explorer") -> None:
        self._redis = redis
        self._namespace = namespace

    @classmethod
    def from_url(cls, url: str, *, namespace: str = "explorer") -> RedisStorage:
        client = Redis.from_url(url, decode_responses=True, encoding="utf-8")
        return cls(client, namespace=namespace)

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    def get(self, key: str) -> str | None:
        try:
            return self._redis.get(self._key(key))
        except (RedisConnectionError, RedisTimeoutError) as exc:
            logger.warning(f"Redis get failed for key {key}: {exc}")
            return None

    def set(self, key: str, value: str) -> None:
        self._redis.set(self._key(key), value)

    def remove(self, key: str) -> None:
        self._redis.delete(self._key(key))


def read_json(storage: KeyValueStore, key: str) -> Any | None:
    """Decode the JSON payload stored under ``key``.

    Missing keys and unparseable payloads both yield ``None``.
    """

    raw = storage.get(key)
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (TypeError, json.JSONDecodeError):
        logger.warning("Discarding unparseable value stored under %r", key)
        return None


def write_json(storage: KeyValueStore, key: str, value: Any) -> None:
    storage.set(key, json.dumps(value, ensure_ascii=False))


def build_storage(active_settings: AppSettings) -> KeyValueStore:
    """Instantiate the backend selected by ``STORAGE_BACKEND``."""

    backend = active_settings.storage_backend
    if backend == "memory":
        logger.info("Using in-memory storage; data is lost on shutdown")
        return MemoryStorage()
    if backend == "redis":
        logger.info("Using Redis storage")
        return RedisStorage.from_url(active_settings.redis_url)
    logger.info("Using file storage at %s", active_settings.storage_path)
    return JsonFileStorage(active_settings.storage_path)


@lru_cache(maxsize=1)
def get_storage() -> KeyValueStore:
    """Return the process-wide storage backend."""

    return build_storage(get_settings())


__all__ = [
    "FAVORITES_KEY",
    "JsonFileStorage",
    "KeyValueStore",
    "MemoryStorage",
    "RedisStorage",
    "USER_INFO_KEY",
    "build_storage",
    "get_storage",
    "read_json",
    "write_json",
]
