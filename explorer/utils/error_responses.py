"""Structured JSON error responses shared by the exception handlers.

Each helper returns a ready ``JSONResponse`` whose body follows
:class:`~explorer.schemas.error.ErrorResponse`; the request id and a
timezone-aware timestamp are stamped automatically.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

from fastapi import status
from fastapi.responses import JSONResponse

from explorer.schemas.error import (
    ErrorResponse,
    ErrorType,
    ValidationErrorDetail,
    ValidationErrorResponse,
)
from explorer.utils.request_context import get_request_id

__all__ = ["error_response", "validation_error_response"]


def _current_timestamp() -> datetime:
    """Return the timestamp stamped on error payloads (patched in tests)."""

    return datetime.now(UTC)


def _render(payload: ErrorResponse) -> JSONResponse:
    headers = None
    if payload.retry_after is not None:
        headers = {"Retry-After": str(payload.retry_after)}
    return JSONResponse(
        status_code=payload.status_code,
        content=payload.model_dump(mode="json"),
        headers=headers,
    )


def error_response(
    *,
    error_type: ErrorType,
    message: str,
    status_code: int,
    path: str,
    detail: str | None = None,
    retry_after: int | None = None,
) -> JSONResponse:
    """Respond with ``status_code``; ``retry_after`` also sets the header."""

    return _render(
        ErrorResponse(
            error_type=error_type,
            message=message,
            detail=detail,
            status_code=status_code,
            timestamp=_current_timestamp(),
            request_id=get_request_id() or None,
            path=path,
            retry_after=retry_after,
        )
    )


def validation_error_response(
    *, errors: Sequence[ValidationErrorDetail], message: str, path: str
) -> JSONResponse:
    """422 listing every failing field."""

    return _render(
        ValidationErrorResponse(
            error_type=ErrorType.VALIDATION_ERROR,
            message=message,
            detail=f"{len(errors)} validation error(s)",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            timestamp=_current_timestamp(),
            request_id=get_request_id() or None,
            path=path,
            errors=list(errors),
        )
    )
