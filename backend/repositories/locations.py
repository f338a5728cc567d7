"""
Location/code repository backed by SQLAlchemy.
"""
import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from domain.errors import PersistenceConflict
from domain.models import Code, Coordinate, Location
from repositories.models import CodeORM, LocationORM

logger = logging.getLogger(__name__)


def _code_from_orm(orm: CodeORM) -> Code:
    return Code(
        id=orm.id,
        location_id=orm.location_id,
        code=orm.code,
        notes=orm.notes,
        created_at=orm.created_at,
    )


def _location_from_orm(orm: LocationORM, include_codes: bool = False) -> Location:
    return Location(
        id=orm.id,
        provider_place_id=orm.provider_place_id,
        name=orm.name,
        address=orm.address,
        coordinate=Coordinate(lat=orm.lat, lng=orm.lng),
        created_at=orm.created_at,
        codes=[_code_from_orm(c) for c in orm.codes] if include_codes else [],
    )


class LocationsRepository:
    """Lookup and append-only inserts for locations and their codes."""

    def find_by_provider_place_id(self, session: Session, provider_place_id: str) -> Optional[Location]:
        orm = (
            session.query(LocationORM)
            .filter(LocationORM.provider_place_id == provider_place_id)
            .first()
        )
        return _location_from_orm(orm) if orm else None

    def insert_location(
        self,
        session: Session,
        name: str,
        address: str,
        coordinate: Coordinate,
        provider_place_id: Optional[str] = None,
    ) -> Location:
        """
        Insert a location row and commit it.

        Raises PersistenceConflict (after rolling back) when another writer already
        committed a row for the same provider_place_id.
        """
        orm = LocationORM(
            provider_place_id=provider_place_id,
            name=name,
            address=address,
            lat=coordinate.lat,
            lng=coordinate.lng,
            created_at=datetime.utcnow(),
        )
        session.add(orm)
        try:
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            if provider_place_id is None:
                raise
            logger.info("Location insert conflicted on provider_place_id=%s", provider_place_id)
            raise PersistenceConflict(provider_place_id) from exc
        session.refresh(orm)
        return _location_from_orm(orm)

    def insert_code(
        self,
        session: Session,
        location_id: int,
        code: str,
        notes: Optional[str] = None,
    ) -> Code:
        orm = CodeORM(
            location_id=location_id,
            code=code,
            notes=notes,
            created_at=datetime.utcnow(),
        )
        session.add(orm)
        session.commit()
        session.refresh(orm)
        return _code_from_orm(orm)

    def list_locations(self, session: Session, include_codes: bool = False) -> List[Location]:
        query = session.query(LocationORM)
        if include_codes:
            query = query.options(selectinload(LocationORM.codes))
        rows = query.order_by(LocationORM.id).all()
        return [_location_from_orm(r, include_codes=include_codes) for r in rows]

    def count_codes(self, session: Session, location_id: Optional[int] = None) -> int:
        query = session.query(CodeORM)
        if location_id is not None:
            query = query.filter(CodeORM.location_id == location_id)
        return query.count()

    def delete_all(self, session: Session) -> None:
        """Truncate both tables; used by the seed script only."""
        session.query(CodeORM).delete()
        session.query(LocationORM).delete()
        session.commit()
