"""Tests for the auth-service gateway: payloads, bearer tokens and error messages."""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from explorer.clients.auth import AuthGateway
from explorer.errors import AuthError
from explorer.schemas.auth import ProfileUpdate

BASE_URL = "http://auth.test/api/auth"
IDENTITY = {"_id": "u1", "name": "Ada", "email": "ada@example.com", "token": "jwt-1"}


def _gateway(
    handler: Callable[[httpx.Request], httpx.Response],
    token: str | None = None,
) -> AuthGateway:
    client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return AuthGateway(BASE_URL, client=client, token_provider=lambda: token)


@pytest.mark.asyncio
async def test_login_posts_credentials_and_returns_identity() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json=IDENTITY)

    identity = await _gateway(handler).login("ada@example.com", "secret1")

    assert identity.id == "u1"
    assert identity.token == "jwt-1"
    assert captured[0].method == "POST"
    assert captured[0].url.path == "/api/auth/login"
    assert json.loads(captured[0].content) == {
        "email": "ada@example.com",
        "password": "secret1",
    }
    assert "authorization" not in captured[0].headers


@pytest.mark.asyncio
async def test_register_posts_name_email_password() -> None:
    captured: list[dict[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(json.loads(request.content))
        return httpx.Response(201, json=IDENTITY)

    await _gateway(handler).register(" Ada ", "ada@example.com", "secret1")

    assert captured == [
        {"name": "Ada", "email": "ada@example.com", "password": "secret1"}
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("name", "email", "password", "message"),
    [
        ("", "ada@example.com", "secret1", "Name is required"),
        ("Ada", "not-an-email", "secret1", "Please include a valid email"),
        ("Ada", "ada@example.com", "12345", "String should have at least 6 characters"),
    ],
)
async def test_register_validates_before_sending(
    name: str, email: str, password: str, message: str
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover
        raise AssertionError("request should not be sent")

    with pytest.raises(AuthError) as excinfo:
        await _gateway(handler).register(name, email, password)

    assert excinfo.value.message == message


@pytest.mark.asyncio
async def test_server_message_is_surfaced() -> None:
    gateway = _gateway(
        lambda request: httpx.Response(401, json={"message": "Invalid email or password"})
    )

    with pytest.raises(AuthError) as excinfo:
        await gateway.login("ada@example.com", "wrong-password")

    assert excinfo.value.message == "Invalid email or password"
    assert excinfo.value.status_code == 401


@pytest.mark.asyncio
async def test_unreadable_success_body_uses_fallback() -> None:
    gateway = _gateway(lambda request: httpx.Response(200, content=b"not json"))

    with pytest.raises(AuthError) as excinfo:
        await gateway.login("ada@example.com", "secret1")

    assert excinfo.value.message == "Login failed"


@pytest.mark.asyncio
async def test_transport_error_without_text_uses_fallback() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("", request=request)

    with pytest.raises(AuthError) as excinfo:
        await _gateway(handler).get_profile()

    assert excinfo.value.message == "Failed to get profile"
    assert excinfo.value.status_code is None


@pytest.mark.asyncio
async def test_profile_requests_carry_bearer_token() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json=IDENTITY)

    gateway = _gateway(handler, token="jwt-1")
    await gateway.get_profile()
    await gateway.update_profile(ProfileUpdate(name="Ada L."))

    assert [r.headers["authorization"] for r in captured] == [
        "Bearer jwt-1",
        "Bearer jwt-1",
    ]
    assert captured[1].method == "PUT"
    assert json.loads(captured[1].content) == {"name": "Ada L."}


@pytest.mark.asyncio
async def test_failed_requests_are_not_retried() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(503)

    with pytest.raises(AuthError):
        await _gateway(handler).login("ada@example.com", "secret1")

    assert calls == 1
