"""
Distance ranking and viewport fitting for search results and stored locations.

Everything here is pure: no I/O, no mutation of inputs.
"""
from __future__ import annotations

import math
from dataclasses import replace
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, TypeVar

from domain.models import Bounds, Coordinate, Location, SearchResult

EARTH_RADIUS_MILES = 3958.8

# Used when there is nothing to fit and no origin to fall back on.
FALLBACK_CENTER = Coordinate(lat=42.65, lng=-71.25)

T = TypeVar("T")


def haversine_miles(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates in miles."""
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    d_lat = math.radians(b.lat - a.lat)
    d_lng = math.radians(b.lng - a.lng)
    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    return EARTH_RADIUS_MILES * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def rank(results: Sequence[SearchResult], origin: Optional[Coordinate] = None) -> List[SearchResult]:
    """
    Attach distance_miles to every result and sort ascending by it.

    Without an origin the results come back in the order received, with no
    distance attached. sorted() is stable, so ties keep their relative order.
    """
    if origin is None:
        return [replace(r, distance_miles=None) if r.distance_miles is not None else r for r in results]
    measured = [replace(r, distance_miles=haversine_miles(origin, r.coordinate)) for r in results]
    return sorted(measured, key=lambda r: r.distance_miles)


def rank_locations(
    locations: Sequence[Location], origin: Optional[Coordinate] = None
) -> List[Tuple[Location, Optional[float]]]:
    """Pair each location with its distance from origin, nearest first."""
    if origin is None:
        return [(loc, None) for loc in locations]
    pairs = [(loc, haversine_miles(origin, loc.coordinate)) for loc in locations]
    return sorted(pairs, key=lambda pair: pair[1])


def format_distance(miles: float) -> str:
    if miles < 0.1:
        return f"{miles:.2f} mi"
    if miles < 10:
        return f"{miles:.1f} mi"
    # half-up, not banker's rounding
    return f"{int(math.floor(miles + 0.5))} mi"


def nearest(
    origin: Coordinate,
    items: Iterable[T],
    key: Callable[[T], Coordinate] = lambda item: item.coordinate,  # type: ignore[attr-defined]
) -> Optional[T]:
    """Return the item closest to origin, or None for an empty iterable."""
    best: Optional[T] = None
    best_distance = math.inf
    for item in items:
        distance = haversine_miles(origin, key(item))
        if distance < best_distance:
            best = item
            best_distance = distance
    return best


def bounds_of(points: Iterable[Coordinate]) -> Optional[Bounds]:
    """Min/max of each axis independently, or None when there are no points."""
    pts = list(points)
    if not pts:
        return None
    return Bounds(
        south=min(p.lat for p in pts),
        west=min(p.lng for p in pts),
        north=max(p.lat for p in pts),
        east=max(p.lng for p in pts),
    )


def _point_bounds(point: Coordinate) -> Bounds:
    return Bounds(south=point.lat, west=point.lng, north=point.lat, east=point.lng)


def viewport(locations: Sequence[Location], origin: Optional[Coordinate] = None) -> Bounds:
    """
    Bounds for the initial map view.

    With an origin: the box spanning the origin and the single nearest location.
    Without one: the box spanning every location. An empty set yields a zero-area
    box at the origin, or at FALLBACK_CENTER when there is no origin.
    """
    if origin is not None:
        closest = nearest(origin, locations)
        if closest is None:
            return _point_bounds(origin)
        return bounds_of([origin, closest.coordinate])  # type: ignore[return-value]
    fitted = bounds_of(loc.coordinate for loc in locations)
    return fitted if fitted is not None else _point_bounds(FALLBACK_CENTER)
