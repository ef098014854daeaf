"""FastAPI router exposing the logged-in user's favorite countries."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from explorer.schemas.country import Country
from explorer.schemas.favorites import FavoritesResponse, FavoriteStatus
from explorer.services.dependencies import get_favorites_service
from explorer.services.favorites_service import FavoritesService

router = APIRouter()


def _response(service: FavoritesService, favorites: list[Country]) -> FavoritesResponse:
    return FavoritesResponse(
        user_id=service.user_id, total=len(favorites), favorites=favorites
    )


@router.get("/", response_model=FavoritesResponse)
async def list_favorites(
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoritesResponse:
    """Return the favorites of the current user; empty when logged out."""

    return _response(service, service.favorites())


@router.post(
    "/", response_model=FavoritesResponse, status_code=status.HTTP_201_CREATED
)
async def add_favorite(
    country: Country,
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoritesResponse:
    return _response(service, service.add(country))


@router.post("/toggle", response_model=FavoriteStatus)
async def toggle_favorite(
    country: Country,
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoriteStatus:
    _, is_favorite = service.toggle(country)
    return FavoriteStatus(code=country.cca3, is_favorite=is_favorite)


@router.get("/{code}", response_model=FavoriteStatus)
async def favorite_status(
    code: str,
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoriteStatus:
    return FavoriteStatus(code=code, is_favorite=service.is_favorite(code))


@router.delete("/{code}", response_model=FavoritesResponse)
async def remove_favorite(
    code: str,
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoritesResponse:
    """Remove ``code``; removing a code that is not stored is a no-op."""

    return _response(service, service.remove(code))
