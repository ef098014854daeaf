"""Tests for the filter/derivation pipeline and the catalog load phases."""

from __future__ import annotations

import pytest

from explorer.errors import COUNTRIES_UNAVAILABLE_MESSAGE
from explorer.schemas.country import Country
from explorer.services.country_catalog import (
    CatalogPhase,
    CountryCatalog,
    collect_languages,
    filter_countries,
)
from tests.explorer.support.fakes import FakeCountriesGateway


def _codes(countries: list[Country]) -> list[str]:
    return [c.cca3 for c in countries]


@pytest.mark.parametrize("query", ["", "a", "GER", "an", "zzz", "ia"])
def test_query_filter_keeps_an_ordered_subsequence(
    countries: list[Country], query: str
) -> None:
    result = filter_countries(countries, query=query)

    assert all(query.lower() in c.name.common.lower() for c in result)
    positions = [countries.index(c) for c in result]
    assert positions == sorted(positions)


def test_query_filter_is_case_insensitive(countries: list[Country]) -> None:
    assert _codes(filter_countries(countries, query="gERMany")) == ["DEU"]


def test_region_filter_requires_exact_match(countries: list[Country]) -> None:
    assert _codes(filter_countries(countries, region="Europe")) == ["DEU", "AUT", "FRA"]
    assert filter_countries(countries, region="europe") == []


def test_language_filter_matches_any_spoken_language(countries: list[Country]) -> None:
    assert _codes(filter_countries(countries, language="German")) == ["DEU", "AUT", "NAM"]


def test_language_filter_excludes_countries_without_languages(
    countries: list[Country],
) -> None:
    result = filter_countries(countries, language="English")

    assert "ATA" not in _codes(result)


def test_filters_compose_conjunctively(countries: list[Country]) -> None:
    result = filter_countries(countries, region="Europe", language="German")

    assert _codes(result) == ["DEU", "AUT"]
    assert all(c.region == "Europe" and "German" in c.language_names for c in result)


def test_all_filters_empty_returns_everything(countries: list[Country]) -> None:
    assert filter_countries(countries) == countries


def test_collect_languages_is_sorted_and_distinct(countries: list[Country]) -> None:
    assert collect_languages(countries) == [
        "Afrikaans",
        "Austro-Bavarian German",
        "English",
        "French",
        "German",
        "Portuguese",
    ]


@pytest.mark.asyncio
async def test_catalog_loads_once_and_becomes_ready() -> None:
    gateway = FakeCountriesGateway()
    catalog = CountryCatalog()
    assert catalog.phase is CatalogPhase.LOADING
    assert catalog.loading is True

    await catalog.load(gateway)  # type: ignore[arg-type]
    await catalog.load(gateway)  # type: ignore[arg-type]

    assert catalog.phase is CatalogPhase.READY
    assert gateway.get_all_calls == 1
    assert len(catalog.countries) == 6
    assert "German" in catalog.available_languages


@pytest.mark.asyncio
async def test_catalog_error_phase_is_terminal() -> None:
    gateway = FakeCountriesGateway(fail=True)
    catalog = CountryCatalog()

    await catalog.load(gateway)  # type: ignore[arg-type]
    gateway.fail = False
    await catalog.load(gateway)  # type: ignore[arg-type]

    assert catalog.phase is CatalogPhase.ERROR
    assert catalog.error == COUNTRIES_UNAVAILABLE_MESSAGE
    assert gateway.get_all_calls == 1
    assert catalog.countries == []


def test_view_recomputes_on_every_filter_change(countries: list[Country]) -> None:
    catalog = CountryCatalog()
    catalog.set_collection(countries)

    catalog.set_region("Europe")
    assert _codes(catalog.countries) == ["DEU", "AUT", "FRA"]

    catalog.set_language("German")
    assert _codes(catalog.countries) == ["DEU", "AUT"]

    catalog.set_query("aus")
    assert _codes(catalog.countries) == ["AUT"]

    catalog.set_region("")
    catalog.set_query("")
    assert _codes(catalog.countries) == ["DEU", "AUT", "NAM"]


def test_available_languages_ignore_filters(countries: list[Country]) -> None:
    catalog = CountryCatalog()
    catalog.set_collection(countries)

    catalog.set_region("Americas")

    assert catalog.available_languages == collect_languages(countries)


def test_active_filters_and_clear(countries: list[Country]) -> None:
    catalog = CountryCatalog()
    catalog.set_collection(countries)
    catalog.apply_filters(query="a", region="Europe")

    assert catalog.active_filters() == [("search", "a"), ("region", "Europe")]

    catalog.clear_filters()

    assert catalog.active_filters() == []
    assert catalog.countries == countries


def test_find_looks_up_by_code(countries: list[Country]) -> None:
    catalog = CountryCatalog()
    catalog.set_collection(countries)

    assert catalog.find("BRA") is not None
    assert catalog.find("XXX") is None
