"""Seed the database with a handful of sample locations and codes.

Usage (from backend/):
    python -m scripts.seed_locations [--truncate]

Entries go through the resolver, so they are validated like any submission.
They carry no provider place id, which makes them manual entries: running the
script twice without --truncate stores each of them twice.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parents[1] / ".env")

from db import SessionLocal, init_db
from domain.errors import PersistenceError, ValidationError
from domain.models import Coordinate
from repositories import LocationsRepository
from services.location_resolver import LocationResolver

logger = logging.getLogger("seed_locations")

SEED_DATA = [
    {"name": "Best Buy", "address": "14 Allstate Rd, Dorchester, MA 02125", "code": "13579#", "lat": 42.3468, "lng": -71.0545},
    {"name": "Tatte Bakery & Cafe", "address": "60 Old Colony Ave, Boston, MA 02127", "code": "12345", "lat": 42.3375, "lng": -71.0503},
    {"name": "Panera Bread", "address": "8 Allstate Rd Suite 3, Dorchester, MA 02125", "code": "4589", "lat": 42.3465, "lng": -71.054},
    {"name": "Raising Cane's", "address": "782 S Willow St, Manchester, NH 03103", "code": "2060", "lat": 42.9634, "lng": -71.4618},
]


def seed(truncate: bool = False) -> int:
    """Insert SEED_DATA; returns the number of codes stored."""
    repo = LocationsRepository()
    resolver = LocationResolver(repo=repo)
    stored = 0
    with SessionLocal() as session:
        if truncate:
            logger.info("Truncating locations and codes tables...")
            repo.delete_all(session)
        logger.info("Inserting seed data...")
        for entry in SEED_DATA:
            resolver.submit(
                session,
                name=entry["name"],
                address=entry["address"],
                coordinate=Coordinate(lat=entry["lat"], lng=entry["lng"]),
                code=entry["code"],
            )
            stored += 1
    return stored


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    parser = argparse.ArgumentParser(description="Seed sample restroom locations and codes.")
    parser.add_argument("--truncate", action="store_true", help="Delete existing locations and codes first.")
    args = parser.parse_args()

    init_db()
    try:
        count = seed(truncate=args.truncate)
    except (ValidationError, PersistenceError) as exc:
        logger.error("Seed failed: %s", exc)
        return 1
    logger.info("Seed complete: %d codes stored.", count)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
