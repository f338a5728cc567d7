"""
Place search API route.
"""
import logging
from typing import List, Optional
from fastapi import APIRouter
from pydantic import BaseModel

from domain.models import Coordinate, SearchResult
from services.geo_ranker import format_distance, rank
from services.place_search import get_default_place_search
from services.places_types import coerce_coordinate

router = APIRouter()
logger = logging.getLogger(__name__)


class SearchResultResponse(BaseModel):
    providerPlaceId: Optional[str] = None
    name: str
    address: str
    lat: float
    lng: float
    distanceMiles: Optional[float] = None
    distanceLabel: Optional[str] = None


def parse_origin(lat: Optional[str], lng: Optional[str]) -> Optional[Coordinate]:
    """Both halves present and valid, or no origin at all."""
    if lat is None or lng is None or not lat.strip() or not lng.strip():
        return None
    return coerce_coordinate(lat, lng)


def result_to_response(result: SearchResult) -> SearchResultResponse:
    distance = result.distance_miles
    return SearchResultResponse(
        providerPlaceId=result.provider_place_id,
        name=result.name,
        address=result.address,
        lat=result.coordinate.lat,
        lng=result.coordinate.lng,
        distanceMiles=distance,
        distanceLabel=format_distance(distance) if distance is not None else None,
    )


@router.get("", response_model=List[SearchResultResponse], response_model_exclude_none=True)
async def search_places(q: Optional[str] = None, lat: Optional[str] = None, lng: Optional[str] = None):
    """Search the place provider; always answers with a list, empty on any failure."""
    query = (q or "").strip()
    if not query:
        return []
    origin = parse_origin(lat, lng)
    results = await get_default_place_search().search(query, origin)
    return [result_to_response(r) for r in rank(results, origin)]
