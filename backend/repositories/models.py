"""
SQLAlchemy ORM models for persistence.
"""
from datetime import datetime
from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from db import Base


class LocationORM(Base):
    __tablename__ = "locations"
    # Arbitrates concurrent find-or-create; NULLs are distinct so manual entries never collide.
    __table_args__ = (UniqueConstraint("provider_place_id", name="uq_locations_provider_place_id"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    provider_place_id = Column(String, nullable=True)
    name = Column(String, nullable=False)
    address = Column(String, nullable=False)
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    codes = relationship(
        "CodeORM",
        back_populates="location",
        order_by="CodeORM.id",
    )


class CodeORM(Base):
    __tablename__ = "codes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    location_id = Column(Integer, ForeignKey("locations.id"), nullable=False, index=True)
    code = Column(String, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    location = relationship("LocationORM", back_populates="codes")
