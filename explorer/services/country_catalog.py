"""In-memory country collection with a reactively filtered view.

The collection is fetched once.  Every change to the source collection or to a
filter field recomputes :attr:`CountryCatalog.countries` by applying, in order:

1. text query: case-insensitive substring of the common name;
2. region: exact match;
3. language: at least one spoken language equal to the value.

An empty string disables the corresponding filter.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence
from enum import Enum

from explorer.clients.countries import CountriesGateway
from explorer.errors import COUNTRIES_UNAVAILABLE_MESSAGE, CountriesUnavailableError
from explorer.schemas.country import Country, CountryFilterState

logger = logging.getLogger(__name__)

REGIONS: tuple[str, ...] = ("Africa", "Americas", "Asia", "Europe", "Oceania")


class CatalogPhase(str, Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


def filter_countries(
    countries: Sequence[Country],
    *,
    query: str = "",
    region: str = "",
    language: str = "",
) -> list[Country]:
    """Return the subsequence of ``countries`` satisfying every non-empty filter."""

    filtered = list(countries)

    if query:
        needle = query.lower()
        filtered = [c for c in filtered if needle in c.name.common.lower()]

    if region:
        filtered = [c for c in filtered if c.region == region]

    if language:
        filtered = [c for c in filtered if language in c.languages.values()]

    return filtered


def collect_languages(countries: Iterable[Country]) -> list[str]:
    """Sorted distinct language names spoken across ``countries``."""

    languages: set[str] = set()
    for country in countries:
        languages.update(country.languages.values())
    return sorted(languages)


class CountryCatalog:
    """Holds the full collection plus the filter state applied to it.

    ``loading`` moves to ``ready`` when the single fetch succeeds and to
    ``error`` when it fails.  The error phase is terminal: later ``load`` calls
    return immediately without contacting the gateway.
    """

    def __init__(self) -> None:
        self.phase = CatalogPhase.LOADING
        self.error: str | None = None
        self._all: list[Country] = []
        self._view: list[Country] = []
        self._available_languages: list[str] = []
        self._filters = CountryFilterState()
        self._load_lock = asyncio.Lock()

    @property
    def loading(self) -> bool:
        return self.phase is CatalogPhase.LOADING

    @property
    def countries(self) -> list[Country]:
        return list(self._view)

    @property
    def available_languages(self) -> list[str]:
        return list(self._available_languages)

    @property
    def filters(self) -> CountryFilterState:
        return self._filters.model_copy()

    async def load(self, gateway: CountriesGateway) -> None:
        # Concurrent first callers share one fetch.
        async with self._load_lock:
            if self.phase is not CatalogPhase.LOADING:
                return

            try:
                countries = await gateway.get_all()
            except CountriesUnavailableError as exc:
                logger.error("Country catalog failed to load: %s", exc)
                self.error = COUNTRIES_UNAVAILABLE_MESSAGE
                self.phase = CatalogPhase.ERROR
                return

            self.set_collection(countries)

    def set_collection(self, countries: Sequence[Country]) -> None:
        """Install ``countries`` as the source collection and mark the catalog ready."""

        self._all = list(countries)
        self._available_languages = collect_languages(self._all)
        self.phase = CatalogPhase.READY
        self.error = None
        logger.info(
            "Country catalog ready: %s countries, %s languages",
            len(self._all),
            len(self._available_languages),
        )
        self._recompute()

    def _recompute(self) -> None:
        if not self._all:
            return
        self._view = filter_countries(
            self._all,
            query=self._filters.query,
            region=self._filters.region,
            language=self._filters.language,
        )

    def set_query(self, query: str) -> None:
        self._filters.query = query
        self._recompute()

    def set_region(self, region: str) -> None:
        self._filters.region = region
        self._recompute()

    def set_language(self, language: str) -> None:
        self._filters.language = language
        self._recompute()

    def apply_filters(
        self,
        *,
        query: str | None = None,
        region: str | None = None,
        language: str | None = None,
    ) -> list[Country]:
        """Update any supplied filter fields and return the recomputed view."""

        if query is not None:
            self._filters.query = query
        if region is not None:
            self._filters.region = region
        if language is not None:
            self._filters.language = language
        self._recompute()
        return self.countries

    def clear_filters(self) -> None:
        self._filters = CountryFilterState()
        self._recompute()

    def active_filters(self) -> list[tuple[str, str]]:
        """``(kind, value)`` pairs for every filter currently constraining the view."""

        active: list[tuple[str, str]] = []
        if self._filters.query:
            active.append(("search", self._filters.query))
        if self._filters.region:
            active.append(("region", self._filters.region))
        if self._filters.language:
            active.append(("language", self._filters.language))
        return active

    def find(self, code: str) -> Country | None:
        return next((c for c in self._all if c.cca3 == code), None)


__all__ = [
    "CatalogPhase",
    "CountryCatalog",
    "REGIONS",
    "collect_languages",
    "filter_countries",
]
