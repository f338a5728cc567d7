"""
Google Places (New) Text Search provider.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from domain.errors import ProviderError
from domain.models import Coordinate, SearchResult
from services.places_types import MAX_RESULTS, clean_text, coerce_coordinate

GOOGLE_TEXT_SEARCH_URL = "https://places.googleapis.com/v1/places:searchText"
FIELD_MASK = "places.id,places.displayName,places.formattedAddress,places.location"

logger = logging.getLogger(__name__)
_session = requests.Session()


def _display_name(place: Dict[str, Any]) -> str:
    display = place.get("displayName")
    if isinstance(display, dict):
        return clean_text(display.get("text"))
    return clean_text(display)


def parse_places(payload: Any, limit: int = MAX_RESULTS) -> List[SearchResult]:
    """Normalize a searchText response body. An empty body (no matches) yields []."""
    if not isinstance(payload, dict):
        raise ProviderError(f"Google Places returned {type(payload).__name__}, expected an object")
    places = payload.get("places") or []
    if not isinstance(places, list):
        raise ProviderError("Google Places 'places' field is not a list")

    results: List[SearchResult] = []
    for place in places:
        if len(results) >= limit:
            break
        if not isinstance(place, dict):
            continue
        name = _display_name(place)
        if not name:
            continue
        location = place.get("location") or {}
        if not isinstance(location, dict):
            continue
        coordinate = coerce_coordinate(location.get("latitude"), location.get("longitude"))
        if coordinate is None:
            continue
        results.append(
            SearchResult(
                provider_place_id=clean_text(place.get("id")) or None,
                name=name,
                address=clean_text(place.get("formattedAddress")),
                coordinate=coordinate,
            )
        )
    return results


class GooglePlacesProvider:
    name = "google"

    def __init__(
        self,
        api_key: str,
        timeout: float = 5.0,
        bias_radius_m: float = 50000.0,
        url: str = GOOGLE_TEXT_SEARCH_URL,
    ):
        self.api_key = api_key
        self.timeout = timeout
        self.bias_radius_m = bias_radius_m
        self.url = url

    def build_request_body(self, query: str, origin: Optional[Coordinate], limit: int) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "textQuery": query,
            "maxResultCount": limit,
            "languageCode": "en",
        }
        if origin is not None:
            body["locationBias"] = {
                "circle": {
                    "center": {"latitude": origin.lat, "longitude": origin.lng},
                    "radius": self.bias_radius_m,
                }
            }
        return body

    def search(self, query: str, origin: Optional[Coordinate], limit: int = MAX_RESULTS) -> List[SearchResult]:
        headers = {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self.api_key,
            "X-Goog-FieldMask": FIELD_MASK,
        }
        try:
            resp = _session.post(
                self.url,
                json=self.build_request_body(query, origin, limit),
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ProviderError(f"Google Places request failed: {exc}") from exc

        if not resp.ok:
            raise ProviderError(f"Google Places returned HTTP {resp.status_code}: {resp.text[:200]}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise ProviderError(f"Google Places returned invalid JSON: {exc}") from exc

        return parse_places(data, limit=limit)
