"""Pydantic models describing REST Countries v3.1 payloads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CountryName(BaseModel):
    model_config = ConfigDict(extra="allow")

    common: str
    official: str | None = None


class CountryFlags(BaseModel):
    model_config = ConfigDict(extra="allow")

    png: str | None = None
    svg: str | None = None
    alt: str | None = None


class Currency(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str | None = None
    symbol: str | None = None


class Country(BaseModel):
    """Immutable snapshot of a country as returned by the remote service.

    Only the fields the explorer reads are declared; everything else the API
    sends (``cca2``, ``maps``, ``timezones``...) is preserved as extra data so a
    stored favorite round-trips verbatim.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    name: CountryName
    cca3: str = Field(..., min_length=1, description="ISO 3166-1 alpha-3 code")
    region: str = ""
    subregion: str | None = None
    capital: list[str] = Field(default_factory=list)
    population: int = Field(0, ge=0)
    flags: CountryFlags | None = None
    currencies: dict[str, Currency] = Field(default_factory=dict)
    languages: dict[str, str] = Field(default_factory=dict)
    borders: list[str] = Field(default_factory=list)

    @property
    def language_names(self) -> list[str]:
        return list(self.languages.values())

    def to_snapshot(self) -> dict[str, Any]:
        """Return the JSON-compatible payload persisted for favorites."""

        return self.model_dump(mode="json", exclude_unset=True)


class CountryFilterState(BaseModel):
    query: str = ""
    region: str = ""
    language: str = ""


class CountryListResponse(BaseModel):
    """Filtered view returned by the listing endpoint."""

    total: int = Field(..., ge=0)
    countries: list[Country]
    filters: CountryFilterState
    available_languages: list[str] = Field(default_factory=list)


class LanguageListResponse(BaseModel):
    languages: list[str]


class RegionListResponse(BaseModel):
    regions: list[str]


__all__ = [
    "Country",
    "CountryFilterState",
    "CountryFlags",
    "CountryListResponse",
    "CountryName",
    "Currency",
    "LanguageListResponse",
    "RegionListResponse",
]
