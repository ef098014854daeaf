"""FastAPI router exposing the filtered country view and gateway lookups."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from explorer.clients.countries import CountriesGateway
from explorer.errors import (
    COUNTRIES_UNAVAILABLE_MESSAGE,
    CountriesUnavailableError,
    CountryNotFoundError,
)
from explorer.schemas.country import (
    Country,
    CountryListResponse,
    LanguageListResponse,
    RegionListResponse,
)
from explorer.services.country_catalog import REGIONS, CatalogPhase, CountryCatalog
from explorer.services.dependencies import get_countries_gateway, get_loaded_catalog

router = APIRouter()


def _ensure_ready(catalog: CountryCatalog) -> None:
    if catalog.phase is CatalogPhase.ERROR:
        raise CountriesUnavailableError(catalog.error or COUNTRIES_UNAVAILABLE_MESSAGE)


@router.get("/", response_model=CountryListResponse)
async def list_countries(
    q: str = Query("", max_length=100, description="Case-insensitive name fragment"),
    region: str = Query("", description="Exact region name, e.g. Europe"),
    language: str = Query("", description="Exact language name, e.g. German"),
    catalog: CountryCatalog = Depends(get_loaded_catalog),
) -> CountryListResponse:
    """Return the collection narrowed by every non-empty filter."""

    _ensure_ready(catalog)
    countries = catalog.apply_filters(query=q, region=region, language=language)
    return CountryListResponse(
        total=len(countries),
        countries=countries,
        filters=catalog.filters,
        available_languages=catalog.available_languages,
    )


@router.get("/languages", response_model=LanguageListResponse)
async def list_languages(
    catalog: CountryCatalog = Depends(get_loaded_catalog),
) -> LanguageListResponse:
    _ensure_ready(catalog)
    return LanguageListResponse(languages=catalog.available_languages)


@router.get("/regions", response_model=RegionListResponse)
async def list_regions() -> RegionListResponse:
    return RegionListResponse(regions=list(REGIONS))


@router.get("/search/{name}", response_model=list[Country])
async def search_countries(
    name: str = Path(..., min_length=1),
    gateway: CountriesGateway = Depends(get_countries_gateway),
) -> list[Country]:
    """Remote name search; an unavailable service yields an empty list."""

    return await gateway.search_by_name(name)


@router.get("/region/{region}", response_model=list[Country])
async def countries_by_region(
    region: str = Path(..., min_length=1),
    gateway: CountriesGateway = Depends(get_countries_gateway),
) -> list[Country]:
    return await gateway.get_by_region(region)


@router.get("/{code}", response_model=Country)
async def get_country(
    code: str = Path(..., min_length=2, max_length=3),
    gateway: CountriesGateway = Depends(get_countries_gateway),
) -> Country:
    """Fetch a single country by its ISO code."""

    try:
        return await gateway.get_by_code(code)
    except CountryNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
