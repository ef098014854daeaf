import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from .api import auth, countries, favorites
from .errors import (
    AuthError,
    CountriesUnavailableError,
    NotAuthenticatedError,
)
from .schemas.error import ErrorType, ValidationErrorDetail
from .services.dependencies import close_gateways
from .settings import AppSettings, settings
from .utils.error_responses import (
    error_response,
    validation_error_response,
)
from .utils.request_context import get_request_id, set_request_id

# Configure logging
logging.basicConfig(
    level=settings.log_level_numeric,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _validate_environment(active_settings: AppSettings | None = None) -> None:
    """Log warnings for optional configuration left unset."""

    candidate = active_settings or settings
    warnings = candidate.optional_config_warnings()

    if warnings:
        logger.warning("=" * 60)
        logger.warning("Environment Configuration Warnings:")
        for warning in warnings:
            logger.warning(f"  • {warning}")
        logger.warning("=" * 60)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    _validate_environment()

    logger.info("=" * 60)
    logger.info("Country Explorer API - Startup")
    logger.info("=" * 60)
    logger.info(f"Countries API: {settings.countries_base_url}")
    logger.info(f"Auth API: {settings.auth_base_url}")
    logger.info(f"Storage backend: {settings.storage_backend.upper()}")
    logger.info("=" * 60)

    yield

    logger.info("Shutting down Country Explorer API")
    await close_gateways()


app = FastAPI(
    title="Country Explorer API",
    version="0.1.0",
    description=(
        "Browse countries from REST Countries, keep per-user favorites and"
        " manage the session against the auth service."
    ),
    lifespan=lifespan,
    redirect_slashes=False,
)


def _default_origins() -> list[str]:
    ports = list(range(3000, 3011)) + [5173]
    origins = []
    for host in ("localhost", "127.0.0.1"):
        origins.extend([f"http://{host}:{port}" for port in ports])
    return origins


def _combine_origins(*origin_groups: list[str]) -> list[str]:
    """Merge origins preserving order and removing duplicates."""
    seen: set[str] = set()
    combined: list[str] = []
    for group in origin_groups:
        for origin in group:
            normalized = origin.rstrip("/")
            if normalized and normalized not in seen:
                seen.add(normalized)
                combined.append(normalized)
    return combined


allow_origins = _combine_origins(_default_origins(), settings.cors_allow_origins)
logger.info("Configured CORS allow_origins: %s", ", ".join(allow_origins))

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Middleware to add request ID to each request
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add unique request ID to each request for tracking."""
    request_id = str(uuid.uuid4())
    set_request_id(request_id)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


def _validation_details(
    exc: RequestValidationError | ValidationError,
) -> list[ValidationErrorDetail]:
    return [
        ValidationErrorDetail(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            value=error.get("input"),
        )
        for error in exc.errors()
    ]


# Exception handlers
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle FastAPI request validation errors."""
    errors = _validation_details(exc)

    logger.warning(
        "Validation error for request %s to %s: %s errors",
        get_request_id(),
        request.url.path,
        len(errors),
    )

    return validation_error_response(
        errors=errors,
        message="Request validation failed",
        path=str(request.url.path),
    )


@app.exception_handler(ValidationError)
async def pydantic_validation_exception_handler(request: Request, exc: ValidationError):
    """Handle Pydantic validation errors raised outside request parsing."""
    errors = _validation_details(exc)

    logger.warning(
        "Pydantic validation error for request %s to %s: %s errors",
        get_request_id(),
        request.url.path,
        len(errors),
    )

    return validation_error_response(
        errors=errors,
        message="Data validation failed",
        path=str(request.url.path),
    )


@app.exception_handler(CountriesUnavailableError)
async def countries_unavailable_exception_handler(
    request: Request, exc: CountriesUnavailableError
):
    """Surface every countries-service failure with the same message."""
    logger.error(
        "Countries service unavailable for request %s to %s",
        get_request_id(),
        request.url.path,
    )

    return error_response(
        error_type=ErrorType.UPSTREAM_ERROR,
        message=exc.message,
        detail="The countries service could not be reached.",
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        path=str(request.url.path),
        retry_after=5,
    )


@app.exception_handler(NotAuthenticatedError)
async def not_authenticated_exception_handler(
    request: Request, exc: NotAuthenticatedError
):
    logger.info(
        "Unauthenticated request %s to %s", get_request_id(), request.url.path
    )

    return error_response(
        error_type=ErrorType.AUTHENTICATION_ERROR,
        message=exc.message,
        detail="Log in before changing favorites or the profile.",
        status_code=status.HTTP_401_UNAUTHORIZED,
        path=str(request.url.path),
    )


@app.exception_handler(AuthError)
async def auth_exception_handler(request: Request, exc: AuthError):
    """Relay auth-service rejections; transport failures become 502."""
    if exc.status_code is not None and 400 <= exc.status_code < 500:
        status_code = exc.status_code
        error_type = ErrorType.AUTHENTICATION_ERROR
    else:
        status_code = status.HTTP_502_BAD_GATEWAY
        error_type = ErrorType.UPSTREAM_ERROR

    logger.warning(
        "Auth request %s to %s failed: %s",
        get_request_id(),
        request.url.path,
        exc.message,
    )

    return error_response(
        error_type=error_type,
        message=exc.message,
        status_code=status_code,
        path=str(request.url.path),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    error_type = (
        ErrorType.NOT_FOUND
        if exc.status_code == status.HTTP_404_NOT_FOUND
        else ErrorType.INTERNAL_ERROR
    )
    return error_response(
        error_type=error_type,
        message=str(exc.detail),
        status_code=exc.status_code,
        path=str(request.url.path),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Handle all other unhandled exceptions."""
    logger.exception(
        "Unhandled exception for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        type(exc).__name__,
    )

    return error_response(
        error_type=ErrorType.INTERNAL_ERROR,
        message="Internal server error",
        detail=f"An unexpected error occurred: {type(exc).__name__}",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        path=str(request.url.path),
        retry_after=5,
    )


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    """Simple health endpoint for readiness checks."""
    return {"status": "ok"}


app.include_router(countries.router, prefix="/countries", tags=["countries"])
app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(favorites.router, prefix="/favorites", tags=["favorites"])
