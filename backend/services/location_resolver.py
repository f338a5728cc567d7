"""
Find-or-create a location for a submitted code, then append the code.

Uniqueness of provider_place_id is enforced by the database; a lost insert race
is resolved by re-reading the winning row rather than by any in-process lock.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from domain.errors import PersistenceConflict, PersistenceError, ValidationError
from domain.models import Code, Coordinate, Location
from repositories import LocationsRepository
from settings import settings

logger = logging.getLogger(__name__)


def _require_text(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def _optional_text(value: Any, field_name: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    return value.strip() or None


def _require_number(value: Any, field_name: str, low: float, high: float) -> float:
    # bool is an int subclass; reject it explicitly
    if value is None or isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field_name} must be a number")
    number = float(value)
    if not math.isfinite(number):
        raise ValidationError(f"{field_name} must be a finite number")
    if not low <= number <= high:
        raise ValidationError(f"{field_name} must be between {low:g} and {high:g}")
    return number


def validate_coordinate(coordinate: Optional[Coordinate]) -> Coordinate:
    if coordinate is None:
        raise ValidationError("lat and lng are required")
    lat = _require_number(coordinate.lat, "lat", -90.0, 90.0)
    lng = _require_number(coordinate.lng, "lng", -180.0, 180.0)
    return Coordinate(lat=lat, lng=lng)


class LocationResolver:
    def __init__(self, repo: Optional[LocationsRepository] = None, max_attempts: Optional[int] = None):
        self.repo = repo or LocationsRepository()
        self.max_attempts = max_attempts or settings.RESOLVER_MAX_ATTEMPTS

    def _find_or_create(
        self,
        session: Session,
        name: str,
        address: str,
        coordinate: Coordinate,
        provider_place_id: str,
    ) -> Location:
        for attempt in range(1, self.max_attempts + 1):
            existing = self.repo.find_by_provider_place_id(session, provider_place_id)
            if existing is not None:
                return existing
            try:
                return self.repo.insert_location(
                    session, name, address, coordinate, provider_place_id=provider_place_id
                )
            except PersistenceConflict:
                logger.info(
                    "Lost location insert race for %s (attempt %d/%d); re-reading",
                    provider_place_id,
                    attempt,
                    self.max_attempts,
                )
        raise PersistenceError(f"Could not resolve location for provider place id {provider_place_id!r}")

    def submit(
        self,
        session: Session,
        name: Any,
        address: Any,
        coordinate: Optional[Coordinate],
        code: Any,
        notes: Any = None,
        provider_place_id: Any = None,
    ) -> Code:
        """
        Validate a contribution, resolve its location and store a new code.

        Raises ValidationError before touching the store, PersistenceError if the
        store fails. Existing locations are never modified.
        """
        clean_name = _require_text(name, "name")
        clean_address = _require_text(address, "address")
        clean_code = _require_text(code, "code")
        clean_coordinate = validate_coordinate(coordinate)
        clean_notes = _optional_text(notes, "notes")
        clean_place_id = _optional_text(provider_place_id, "providerPlaceId")

        try:
            if clean_place_id is None:
                location = self.repo.insert_location(session, clean_name, clean_address, clean_coordinate)
            else:
                location = self._find_or_create(
                    session, clean_name, clean_address, clean_coordinate, clean_place_id
                )
            created = self.repo.insert_code(session, location.id, clean_code, clean_notes)
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Failed to save code for %r: %s", clean_name, exc)
            raise PersistenceError("Could not save") from exc

        logger.info("Stored code %s for location %s", created.id, location.id)
        return created
