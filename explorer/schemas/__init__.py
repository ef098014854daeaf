"""Pydantic schemas for API payloads and remote responses."""

from explorer.schemas.auth import (  # noqa: F401
    LoginRequest,
    ProfileUpdate,
    PublicUser,
    RegisterRequest,
    SessionStatus,
    UserIdentity,
)
from explorer.schemas.country import (  # noqa: F401
    Country,
    CountryFilterState,
    CountryFlags,
    CountryListResponse,
    CountryName,
    Currency,
    LanguageListResponse,
    RegionListResponse,
)
from explorer.schemas.favorites import (  # noqa: F401
    FavoritesResponse,
    FavoriteStatus,
)
