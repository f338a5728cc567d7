"""
Locations API routes.
"""
import logging
from typing import List, Optional
from urllib.parse import quote
from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError

from api.routes.search import parse_origin
from db import SessionLocal
from domain.errors import PersistenceError, ValidationError
from domain.models import Code, Coordinate, Location
from repositories import LocationsRepository
from services.geo_ranker import format_distance, rank_locations, viewport
from services.location_resolver import LocationResolver

router = APIRouter()
locations_repo = LocationsRepository()
resolver = LocationResolver(repo=locations_repo)
logger = logging.getLogger(__name__)

SAVE_FAILED_MESSAGE = "Could not save. Please try again."
LOAD_FAILED_MESSAGE = "Could not load locations"


class LocationSubmission(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    code: Optional[str] = None
    # strict: JSON true/false must not coerce to 1.0/0.0
    lat: Optional[float] = Field(None, strict=True)
    lng: Optional[float] = Field(None, strict=True)
    notes: Optional[str] = None
    providerPlaceId: Optional[str] = None


class CodeResponse(BaseModel):
    id: int
    locationId: int
    code: str
    notes: Optional[str] = None
    createdAt: Optional[str] = None


class LocationResponse(BaseModel):
    id: int
    providerPlaceId: Optional[str] = None
    name: str
    address: str
    lat: float
    lng: float
    createdAt: Optional[str] = None
    directionsUrl: str
    codes: List[CodeResponse] = []
    latestCode: Optional[CodeResponse] = None
    distanceMiles: Optional[float] = None
    distanceLabel: Optional[str] = None


class ViewportResponse(BaseModel):
    south: float
    west: float
    north: float
    east: float
    center: dict


def directions_url(location: Location) -> str:
    """Google Maps search link for "name, address"."""
    return "https://www.google.com/maps/search/?api=1&query=" + quote(
        f"{location.name}, {location.address}", safe=""
    )


def code_to_response(code: Code) -> CodeResponse:
    """Convert domain Code to API response."""
    return CodeResponse(**code.to_dict())


def location_to_response(location: Location, distance: Optional[float] = None) -> LocationResponse:
    """Convert domain Location to API response; codes newest first."""
    codes = sorted(location.codes, key=lambda c: (c.created_at is not None, c.created_at, c.id), reverse=True)
    latest = location.latest_code
    return LocationResponse(
        id=location.id,
        providerPlaceId=location.provider_place_id,
        name=location.name,
        address=location.address,
        lat=location.coordinate.lat,
        lng=location.coordinate.lng,
        createdAt=location.created_at.isoformat() if location.created_at else None,
        directionsUrl=directions_url(location),
        codes=[code_to_response(c) for c in codes],
        latestCode=code_to_response(latest) if latest else None,
        distanceMiles=distance,
        distanceLabel=format_distance(distance) if distance is not None else None,
    )


def _load_locations(include_codes: bool) -> List[Location]:
    try:
        with SessionLocal() as session:
            return locations_repo.list_locations(session, include_codes=include_codes)
    except SQLAlchemyError as exc:
        logger.error("Failed to load locations: %s", exc)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=LOAD_FAILED_MESSAGE)


@router.get("", response_model=List[LocationResponse])
def list_locations(
    include_codes: bool = Query(True, alias="includeCodes"),
    lat: Optional[str] = None,
    lng: Optional[str] = None,
):
    """List all locations, nearest first when lat/lng are given."""
    locations = _load_locations(include_codes)
    origin = parse_origin(lat, lng)
    return [location_to_response(loc, distance) for loc, distance in rank_locations(locations, origin)]


@router.get("/viewport", response_model=ViewportResponse)
def get_viewport(lat: Optional[str] = None, lng: Optional[str] = None):
    """Initial map bounds: origin plus nearest location, or all locations."""
    locations = _load_locations(include_codes=False)
    return viewport(locations, parse_origin(lat, lng)).to_dict()


@router.post("", response_model=CodeResponse, status_code=status.HTTP_201_CREATED)
def submit_code(data: LocationSubmission):
    """Store a code, creating the location on first sighting of its provider place id."""
    coordinate = None
    if data.lat is not None and data.lng is not None:
        coordinate = Coordinate(lat=data.lat, lng=data.lng)
    try:
        with SessionLocal() as session:
            created = resolver.submit(
                session,
                name=data.name,
                address=data.address,
                coordinate=coordinate,
                code=data.code,
                notes=data.notes,
                provider_place_id=data.providerPlaceId,
            )
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except PersistenceError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=SAVE_FAILED_MESSAGE)
    return code_to_response(created)
