"""FastAPI router forwarding credentials to the auth service and managing the session."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from explorer.clients.auth import AuthGateway
from explorer.errors import NotAuthenticatedError
from explorer.schemas.auth import (
    LoginRequest,
    ProfileUpdate,
    PublicUser,
    RegisterRequest,
    SessionStatus,
)
from explorer.services.dependencies import get_auth_gateway, get_session_state
from explorer.services.session_service import SessionState

router = APIRouter()


@router.post(
    "/register", response_model=SessionStatus, status_code=status.HTTP_201_CREATED
)
async def register(
    payload: RegisterRequest,
    gateway: AuthGateway = Depends(get_auth_gateway),
    session: SessionState = Depends(get_session_state),
) -> SessionStatus:
    """Create an account and log straight into it."""

    identity = await gateway.register(payload.name, payload.email, payload.password)
    session.login(identity)
    return session.status()


@router.post("/login", response_model=SessionStatus)
async def login(
    payload: LoginRequest,
    gateway: AuthGateway = Depends(get_auth_gateway),
    session: SessionState = Depends(get_session_state),
) -> SessionStatus:
    identity = await gateway.login(payload.email, payload.password)
    session.login(identity)
    return session.status()


@router.post("/logout", response_model=SessionStatus)
async def logout(session: SessionState = Depends(get_session_state)) -> SessionStatus:
    """Forget the identity; favorites stay in storage."""

    session.logout()
    return session.status()


@router.get("/session", response_model=SessionStatus)
async def current_session(
    session: SessionState = Depends(get_session_state),
) -> SessionStatus:
    return session.status()


@router.get("/profile", response_model=PublicUser)
async def get_profile(
    gateway: AuthGateway = Depends(get_auth_gateway),
) -> PublicUser:
    return PublicUser.from_identity(await gateway.get_profile())


@router.put("/profile", response_model=PublicUser)
async def update_profile(
    payload: ProfileUpdate,
    gateway: AuthGateway = Depends(get_auth_gateway),
    session: SessionState = Depends(get_session_state),
) -> PublicUser:
    """Save profile changes and refresh the stored identity with the result."""

    if not session.is_authenticated:
        raise NotAuthenticatedError()

    identity = await gateway.update_profile(payload)
    if identity.token is None and session.token is not None:
        identity = identity.model_copy(update={"token": session.token})
    session.login(identity)
    return PublicUser.from_identity(identity)
