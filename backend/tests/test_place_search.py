import asyncio
from unittest.mock import MagicMock

import pytest

from domain.errors import ProviderError
from domain.models import Coordinate, SearchResult
from services.google_places import GooglePlacesProvider
from services.nominatim import NominatimProvider
from services.place_search import PlaceSearchAdapter, build_provider
from settings import Settings


def _results(n):
    return [
        SearchResult(name=f"Cafe {i}", address="", coordinate=Coordinate(lat=42.0, lng=-71.0))
        for i in range(n)
    ]


def _provider(**kwargs):
    provider = MagicMock(**kwargs)
    provider.name = "fake"
    return provider


@pytest.mark.parametrize("query", ["", "   ", None])
def test_blank_query_never_reaches_provider(query):
    provider = _provider()
    adapter = PlaceSearchAdapter(provider)
    assert asyncio.run(adapter.search(query)) == []
    provider.search.assert_not_called()


def test_search_trims_query_and_forwards_origin():
    provider = _provider()
    provider.search.return_value = _results(2)
    origin = Coordinate(lat=42.34, lng=-71.06)

    results = asyncio.run(PlaceSearchAdapter(provider).search("  best buy ", origin))

    assert len(results) == 2
    provider.search.assert_called_once_with("best buy", origin, 8)


def test_provider_error_degrades_to_empty():
    provider = _provider()
    provider.search.side_effect = ProviderError("HTTP 500")
    assert asyncio.run(PlaceSearchAdapter(provider).search("best buy")) == []


def test_unexpected_provider_failure_degrades_to_empty():
    provider = _provider()
    provider.search.side_effect = KeyError("displayName")
    assert asyncio.run(PlaceSearchAdapter(provider).search("best buy")) == []


def test_missing_provider_means_no_results():
    assert asyncio.run(PlaceSearchAdapter(None).search("best buy")) == []


def test_results_are_capped():
    provider = _provider()
    provider.search.return_value = _results(12)
    assert len(asyncio.run(PlaceSearchAdapter(provider).search("cafe"))) == 8


def test_build_provider_google_requires_key(monkeypatch):
    monkeypatch.setenv("PLACE_SEARCH_PROVIDER", "google")
    monkeypatch.delenv("GOOGLE_PLACES_API_KEY", raising=False)
    assert build_provider(Settings()) is None

    monkeypatch.setenv("GOOGLE_PLACES_API_KEY", "k")
    assert isinstance(build_provider(Settings()), GooglePlacesProvider)


def test_build_provider_osm_and_unknown(monkeypatch):
    monkeypatch.setenv("PLACE_SEARCH_PROVIDER", "osm")
    monkeypatch.setenv("NOMINATIM_USER_AGENT", "tests/1.0")
    assert isinstance(build_provider(Settings()), NominatimProvider)

    monkeypatch.setenv("PLACE_SEARCH_PROVIDER", "bing")
    assert build_provider(Settings()) is None
