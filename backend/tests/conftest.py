import os
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Ensure the backend package root is on sys.path for direct pytest runs
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

# Keep the module-level engine away from backend/app.db during tests
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PLACE_SEARCH_PROVIDER", "osm")

from db import init_db  # noqa: E402


@pytest.fixture
def session_factory(tmp_path):
    """Sessionmaker bound to a fresh file-backed SQLite database with the real schema."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False}
    )
    init_db(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    yield factory
    engine.dispose()
