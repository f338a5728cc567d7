"""Place text search against OpenStreetMap Nominatim.

Shares one requests session and a global rate limit across threads, as the
Nominatim usage policy asks for at most one request per second.
"""

from __future__ import annotations

import logging
import math
import os
import re
import threading
import time
from typing import Any, Dict, List, Optional

import requests

from domain.errors import ProviderError
from domain.models import Coordinate, SearchResult
from services.places_types import MAX_RESULTS, clean_text, coerce_coordinate

logger = logging.getLogger(__name__)
_session = requests.Session()
_last_request_ts: float = 0.0
_lock = threading.Lock()
_MIN_INTERVAL_SEC = float(os.getenv("NOMINATIM_MIN_INTERVAL", "1.1"))
_logged_ua = False

FALLBACK_UA = "restroom-codes/0.1 (contact: example@example.com)"
METERS_PER_DEGREE_LAT = 111_320.0


def _redact_email(ua: str) -> str:
    if "@" not in ua:
        return ua
    return re.sub(r"\S+@\S+", "<redacted>", ua)


def _throttled_get(
    url: str,
    *,
    params: dict[str, Any],
    headers: dict[str, str],
    timeout: float,
) -> requests.Response:
    """Perform a GET request with a simple global rate limit."""
    global _last_request_ts
    with _lock:
        now = time.time()
        delta = now - _last_request_ts
        if delta < _MIN_INTERVAL_SEC:
            time.sleep(_MIN_INTERVAL_SEC - delta)
        _last_request_ts = time.time()
    return _session.get(url, params=params, headers=headers, timeout=timeout)


def bias_viewbox(origin: Coordinate, radius_m: float) -> str:
    """left,top,right,bottom box roughly radius_m around origin."""
    d_lat = radius_m / METERS_PER_DEGREE_LAT
    cos_lat = max(math.cos(math.radians(origin.lat)), 0.01)
    d_lng = min(d_lat / cos_lat, 180.0)
    left = max(origin.lng - d_lng, -180.0)
    right = min(origin.lng + d_lng, 180.0)
    top = min(origin.lat + d_lat, 90.0)
    bottom = max(origin.lat - d_lat, -90.0)
    return f"{left:.6f},{top:.6f},{right:.6f},{bottom:.6f}"


def format_address(address: Optional[Dict[str, Any]]) -> str:
    """
    Build "house_number road, city, state, postcode" from Nominatim addressdetails.

    Missing components are skipped; never yields empty segments.
    """
    if not isinstance(address, dict):
        return ""
    street = " ".join(
        part for part in (clean_text(address.get("house_number")), clean_text(address.get("road"))) if part
    )
    locality = (
        clean_text(address.get("city"))
        or clean_text(address.get("town"))
        or clean_text(address.get("village"))
    )
    parts = [street, locality, clean_text(address.get("state")), clean_text(address.get("postcode"))]
    return ", ".join(p for p in parts if p)


def _osm_place_id(item: Dict[str, Any]) -> Optional[str]:
    osm_type = clean_text(item.get("osm_type"))
    osm_id = clean_text(item.get("osm_id"))
    if not osm_type or not osm_id:
        return None
    return f"{osm_type[0].upper()}{osm_id}"


def parse_search_results(payload: Any, limit: int = MAX_RESULTS) -> List[SearchResult]:
    """Normalize a Nominatim jsonv2 search payload. Raises ProviderError if it is not a list."""
    if not isinstance(payload, list):
        raise ProviderError(f"Nominatim returned {type(payload).__name__}, expected a list")
    results: List[SearchResult] = []
    for item in payload:
        if len(results) >= limit:
            break
        if not isinstance(item, dict):
            continue
        name = clean_text(item.get("name"))
        if not name:
            continue
        coordinate = coerce_coordinate(item.get("lat"), item.get("lon"))
        if coordinate is None:
            continue
        results.append(
            SearchResult(
                provider_place_id=_osm_place_id(item),
                name=name,
                address=format_address(item.get("address")),
                coordinate=coordinate,
            )
        )
    return results


class NominatimProvider:
    name = "osm"

    def __init__(
        self,
        base_url: str = "https://nominatim.openstreetmap.org",
        user_agent: Optional[str] = None,
        timeout: float = 5.0,
        bias_radius_m: float = 50000.0,
    ):
        base = base_url.rstrip("/")
        if base.endswith("/search") or base.endswith("/reverse"):
            base = base.rsplit("/", 1)[0]
        self.base_url = base
        self.timeout = timeout
        self.bias_radius_m = bias_radius_m
        if user_agent is None:
            logger.warning(
                "NOMINATIM_USER_AGENT not set in environment; using fallback UA. "
                "This may violate Nominatim usage policy."
            )
        self.headers = {"User-Agent": user_agent or FALLBACK_UA}

    def search(self, query: str, origin: Optional[Coordinate], limit: int = MAX_RESULTS) -> List[SearchResult]:
        global _logged_ua
        if not _logged_ua:
            logger.debug("Nominatim User-Agent: %s", _redact_email(self.headers["User-Agent"]))
            _logged_ua = True

        params: Dict[str, Any] = {
            "q": query,
            "format": "jsonv2",
            "addressdetails": "1",
            "limit": str(limit),
            "accept-language": "en",
        }
        if origin is not None:
            params["viewbox"] = bias_viewbox(origin, self.bias_radius_m)
            params["bounded"] = "0"

        try:
            resp = _throttled_get(
                f"{self.base_url}/search", params=params, headers=self.headers, timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise ProviderError(f"Nominatim request failed: {exc}") from exc

        if not resp.ok:
            raise ProviderError(f"Nominatim returned HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise ProviderError(f"Nominatim returned invalid JSON: {exc}") from exc

        return parse_search_results(data, limit=limit)
