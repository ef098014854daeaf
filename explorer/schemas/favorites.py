"""Pydantic schemas that power the favorites API surface."""

from __future__ import annotations

from pydantic import BaseModel, Field

from explorer.schemas.country import Country


class FavoritesResponse(BaseModel):
    """Container returned by the listing and mutation endpoints."""

    user_id: str | None = Field(
        None, description="Owner of the list; ``None`` when nobody is logged in."
    )
    total: int = Field(..., ge=0)
    favorites: list[Country]


class FavoriteStatus(BaseModel):
    code: str
    is_favorite: bool


__all__ = ["FavoriteStatus", "FavoritesResponse"]
