"""
Core domain models for the restroom code directory.
These are framework-agnostic and can be used across all services.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Coordinate:
    """A WGS84 point. Immutable; validation happens at the edges that accept user input."""
    lat: float
    lng: float

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class SearchResult:
    """
    Normalized place candidate produced by a place-search provider.

    distance_miles is a batch-level augmentation: the Geo-Ranker sets it on every
    result of a batch or on none of them.
    """
    name: str
    address: str
    coordinate: Coordinate
    provider_place_id: Optional[str] = None
    distance_miles: Optional[float] = None


@dataclass
class Code:
    """A restroom access code reported for a location. Never mutated once stored."""
    id: int
    location_id: int
    code: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "locationId": self.location_id,
            "code": self.code,
            "notes": self.notes,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass
class Location:
    """A physical place. At most one row exists per provider_place_id."""
    id: int
    name: str
    address: str
    coordinate: Coordinate
    provider_place_id: Optional[str] = None
    created_at: Optional[datetime] = None
    codes: List[Code] = field(default_factory=list)

    @property
    def latest_code(self) -> Optional[Code]:
        """Most recent code by creation time (ties broken by id)."""
        if not self.codes:
            return None
        return max(self.codes, key=lambda c: (c.created_at or datetime.min, c.id))


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned lat/lng box used to size a map viewport."""
    south: float
    west: float
    north: float
    east: float

    @property
    def center(self) -> Coordinate:
        return Coordinate(lat=(self.south + self.north) / 2, lng=(self.west + self.east) / 2)

    @property
    def is_empty(self) -> bool:
        return self.south == self.north and self.west == self.east

    def to_dict(self) -> Dict[str, Any]:
        return {
            "south": self.south,
            "west": self.west,
            "north": self.north,
            "east": self.east,
            "center": self.center.to_dict(),
        }
