"""
Best-effort place search: query a provider, normalize, cap, never raise.
"""
from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from domain.errors import ProviderError
from domain.models import Coordinate, SearchResult
from services.google_places import GooglePlacesProvider
from services.nominatim import NominatimProvider
from services.places_types import MAX_RESULTS, PlaceSearchProvider
from settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class PlaceSearchAdapter:
    """
    Async facade over a blocking PlaceSearchProvider.

    The provider call runs in a worker thread; cancelling the awaiting task
    abandons the call and its result is dropped. A missing provider means the
    search feature is misconfigured and every query yields no results.
    """

    def __init__(self, provider: Optional[PlaceSearchProvider], max_results: int = MAX_RESULTS):
        self.provider = provider
        self.max_results = max_results

    async def search(self, query: Optional[str], origin: Optional[Coordinate] = None) -> List[SearchResult]:
        text = (query or "").strip()
        if not text:
            return []
        if self.provider is None:
            return []
        try:
            results = await asyncio.to_thread(self.provider.search, text, origin, self.max_results)
        except ProviderError as exc:
            logger.warning("Place search via %s failed for %r: %s", self.provider.name, text, exc)
            return []
        except Exception:
            logger.exception("Place search via %s raised unexpectedly for %r", self.provider.name, text)
            return []
        results = list(results)[: self.max_results]
        logger.debug(
            "PlaceSearchAdapter.search: provider=%s q=%r origin=%s got %d results",
            self.provider.name,
            text,
            origin,
            len(results),
        )
        return results


def build_provider(config: Settings) -> Optional[PlaceSearchProvider]:
    provider = config.PLACE_SEARCH_PROVIDER
    if provider == "google":
        if not config.GOOGLE_PLACES_API_KEY:
            logger.error("GOOGLE_PLACES_API_KEY is not set; place search will return no results")
            return None
        return GooglePlacesProvider(
            api_key=config.GOOGLE_PLACES_API_KEY,
            timeout=config.PLACE_SEARCH_TIMEOUT_SECONDS,
            bias_radius_m=config.PLACE_SEARCH_BIAS_RADIUS_M,
        )
    if provider in ("osm", "nominatim"):
        return NominatimProvider(
            base_url=config.NOMINATIM_BASE_URL,
            user_agent=config.NOMINATIM_USER_AGENT,
            timeout=config.PLACE_SEARCH_TIMEOUT_SECONDS,
            bias_radius_m=config.PLACE_SEARCH_BIAS_RADIUS_M,
        )
    logger.error("Unknown PLACE_SEARCH_PROVIDER %r; place search will return no results", provider)
    return None


_default_adapter: Optional[PlaceSearchAdapter] = None


def get_default_place_search() -> PlaceSearchAdapter:
    global _default_adapter
    if _default_adapter is None:
        _default_adapter = PlaceSearchAdapter(build_provider(default_settings))
    return _default_adapter
