"""Async gateway to the REST Countries service."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from explorer.errors import CountriesUnavailableError, CountryNotFoundError
from explorer.schemas.country import Country
from explorer.settings import AppSettings

logger = logging.getLogger(__name__)

# ``/all`` refuses requests without an explicit field list (ten fields at most).
ALL_COUNTRIES_FIELDS = (
    "name",
    "cca3",
    "region",
    "subregion",
    "capital",
    "population",
    "flags",
    "currencies",
    "languages",
    "borders",
)


def parse_countries(payload: Any) -> list[Country]:
    """Validate a list payload, skipping entries that do not look like countries."""

    if not isinstance(payload, list):
        raise CountriesUnavailableError()

    countries: list[Country] = []
    for index, item in enumerate(payload):
        try:
            countries.append(Country.model_validate(item))
        except ValidationError as exc:
            logger.warning(
                "Skipping malformed country entry #%s: %s error(s)",
                index,
                exc.error_count(),
            )
    return countries


class CountriesGateway:
    """Thin request/response mapping over the countries API.

    No retries, no caching: each call is a single GET.  ``get_all`` and
    ``get_by_code`` raise :class:`CountriesUnavailableError` on any failure,
    while the search helpers degrade to an empty list.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    @classmethod
    def from_settings(cls, active_settings: AppSettings) -> CountriesGateway:
        return cls(
            active_settings.countries_base_url,
            timeout=active_settings.http_timeout_seconds,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        response = await self._client.get(path, params=params)
        response.raise_for_status()
        return response.json()

    async def get_all(self) -> list[Country]:
        try:
            payload = await self._get_json(
                "/all", params={"fields": ",".join(ALL_COUNTRIES_FIELDS)}
            )
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Error fetching all countries: %s", exc)
            raise CountriesUnavailableError() from exc
        return parse_countries(payload)

    async def get_by_code(self, code: str) -> Country:
        try:
            payload = await self._get_json(f"/alpha/{code}")
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == httpx.codes.NOT_FOUND:
                raise CountryNotFoundError(code) from exc
            logger.error("Error fetching country by code %s: %s", code, exc)
            raise CountriesUnavailableError() from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Error fetching country by code %s: %s", code, exc)
            raise CountriesUnavailableError() from exc

        if isinstance(payload, dict):
            payload = [payload]
        countries = parse_countries(payload)
        if not countries:
            raise CountryNotFoundError(code)
        return countries[0]

    async def search_by_name(self, name: str) -> list[Country]:
        try:
            payload = await self._get_json(f"/name/{name}")
            return parse_countries(payload)
        except (httpx.HTTPError, ValueError, CountriesUnavailableError) as exc:
            logger.error("Error searching countries for %r: %s", name, exc)
            return []

    async def get_by_region(self, region: str) -> list[Country]:
        try:
            payload = await self._get_json(f"/region/{region}")
            return parse_countries(payload)
        except (httpx.HTTPError, ValueError, CountriesUnavailableError) as exc:
            logger.error("Error fetching countries by region %r: %s", region, exc)
            return []


__all__ = ["ALL_COUNTRIES_FIELDS", "CountriesGateway", "parse_countries"]
