"""Exception hierarchy shared by the gateways, services and HTTP layer."""

from __future__ import annotations

COUNTRIES_UNAVAILABLE_MESSAGE = "Failed to load countries. Please try again later."


class ExplorerError(Exception):
    """Base class for errors raised by the explorer packages."""


class CountriesUnavailableError(ExplorerError):
    """The countries service could not be reached or returned garbage.

    Timeouts, HTTP error statuses and undecodable bodies all collapse into this
    single error so callers only ever surface one user-facing message.
    """

    def __init__(self, message: str = COUNTRIES_UNAVAILABLE_MESSAGE) -> None:
        super().__init__(message)
        self.message = message


class CountryNotFoundError(ExplorerError):
    """No country matches the requested alpha-3 code."""

    def __init__(self, code: str) -> None:
        super().__init__(f"Country '{code}' not found")
        self.code = code


class AuthError(ExplorerError):
    """The auth service rejected a request or could not be reached."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NotAuthenticatedError(ExplorerError):
    """A favorites mutation was attempted without an authenticated user."""

    def __init__(self, message: str = "User not authenticated") -> None:
        super().__init__(message)
        self.message = message


__all__ = [
    "AuthError",
    "COUNTRIES_UNAVAILABLE_MESSAGE",
    "CountriesUnavailableError",
    "CountryNotFoundError",
    "ExplorerError",
    "NotAuthenticatedError",
]
