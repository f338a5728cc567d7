import math
from typing import Any, List, Optional, Protocol

from domain.models import Coordinate, SearchResult

MAX_RESULTS = 8


class PlaceSearchProvider(Protocol):
    """A text-search backend that normalizes its responses into SearchResult."""

    name: str

    def search(self, query: str, origin: Optional[Coordinate], limit: int = MAX_RESULTS) -> List[SearchResult]:
        """Blocking call; raises ProviderError on transport, status or parse failures."""
        ...


def coerce_coordinate(lat: Any, lng: Any) -> Optional[Coordinate]:
    """Build a Coordinate from loosely-typed provider values, or None if unusable."""
    if isinstance(lat, bool) or isinstance(lng, bool):
        return None
    try:
        lat_f = float(lat)
        lng_f = float(lng)
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(lat_f) and math.isfinite(lng_f)):
        return None
    if not (-90.0 <= lat_f <= 90.0 and -180.0 <= lng_f <= 180.0):
        return None
    return Coordinate(lat=lat_f, lng=lng_f)


def clean_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()
