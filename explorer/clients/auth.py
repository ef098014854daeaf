"""Async gateway to the first-party authentication service."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import httpx
from pydantic import ValidationError

from explorer.errors import AuthError
from explorer.schemas.auth import (
    LoginRequest,
    ProfileUpdate,
    RegisterRequest,
    UserIdentity,
)
from explorer.settings import AppSettings

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], str | None]


def _no_token() -> str | None:
    return None


def _first_validation_message(exc: ValidationError) -> str:
    message = exc.errors()[0]["msg"]
    return message.removeprefix("Value error, ")


def _extract_message(exc: httpx.HTTPError, fallback: str) -> str:
    """Prefer the server's ``message`` field, then the transport error text."""

    if isinstance(exc, httpx.HTTPStatusError):
        try:
            body = exc.response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
    return str(exc) or fallback


class AuthGateway:
    """Calls ``/register``, ``/login`` and ``/profile`` on the auth service.

    The bearer token is read through ``token_provider`` right before each
    request, so a login performed after construction is picked up without
    rebuilding the gateway.  Failures are never retried.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 15.0,
        token_provider: TokenProvider = _no_token,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._token_provider = token_provider
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
        )

    @classmethod
    def from_settings(
        cls, active_settings: AppSettings, *, token_provider: TokenProvider = _no_token
    ) -> AuthGateway:
        return cls(
            active_settings.auth_base_url,
            timeout=active_settings.http_timeout_seconds,
            token_provider=token_provider,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _auth_headers(self) -> dict[str, str]:
        token = self._token_provider()
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        fallback: str,
        json: dict[str, Any] | None = None,
    ) -> Any:
        try:
            response = await self._client.request(
                method, path, json=json, headers=self._auth_headers()
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as exc:
            status_code = (
                exc.response.status_code if isinstance(exc, httpx.HTTPStatusError) else None
            )
            message = _extract_message(exc, fallback)
            logger.warning("%s %s failed: %s", method, path, message)
            raise AuthError(message, status_code=status_code) from exc
        except ValueError as exc:
            logger.warning("%s %s returned an unreadable body", method, path)
            raise AuthError(fallback) from exc

    @staticmethod
    def _to_identity(payload: Any, fallback: str) -> UserIdentity:
        try:
            return UserIdentity.model_validate(payload)
        except ValidationError as exc:
            raise AuthError(fallback) from exc

    async def register(self, name: str, email: str, password: str) -> UserIdentity:
        fallback = "Registration failed"
        try:
            payload = RegisterRequest(name=name, email=email, password=password)
        except ValidationError as exc:
            raise AuthError(_first_validation_message(exc)) from exc
        data = await self._request(
            "POST", "/register", fallback=fallback, json=payload.model_dump()
        )
        return self._to_identity(data, fallback)

    async def login(self, email: str, password: str) -> UserIdentity:
        fallback = "Login failed"
        try:
            payload = LoginRequest(email=email, password=password)
        except ValidationError as exc:
            raise AuthError(_first_validation_message(exc)) from exc
        data = await self._request(
            "POST", "/login", fallback=fallback, json=payload.model_dump()
        )
        return self._to_identity(data, fallback)

    async def get_profile(self) -> UserIdentity:
        fallback = "Failed to get profile"
        data = await self._request("GET", "/profile", fallback=fallback)
        return self._to_identity(data, fallback)

    async def update_profile(self, update: ProfileUpdate) -> UserIdentity:
        fallback = "Failed to update profile"
        data = await self._request(
            "PUT",
            "/profile",
            fallback=fallback,
            json=update.model_dump(exclude_none=True),
        )
        return self._to_identity(data, fallback)


__all__ = ["AuthGateway", "TokenProvider"]
