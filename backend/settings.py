import os
from pathlib import Path

# Basic settings helper to read environment configuration.

BACKEND_ROOT = Path(__file__).resolve().parent


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


def _as_float(val: str | None, default: float) -> float:
    if val is None or not val.strip():
        return default
    try:
        return float(val)
    except ValueError:
        return default


def _as_int(val: str | None, default: int) -> int:
    if val is None or not val.strip():
        return default
    try:
        return int(val)
    except ValueError:
        return default


def _as_list(val: str | None, default: list[str]) -> list[str]:
    if val is None or not val.strip():
        return default
    return [part.strip() for part in val.split(",") if part.strip()]


class Settings:
    def __init__(self) -> None:
        self.DATABASE_URL: str = os.getenv("DATABASE_URL") or f"sqlite:///{BACKEND_ROOT / 'app.db'}"
        self.PLACE_SEARCH_PROVIDER: str = (os.getenv("PLACE_SEARCH_PROVIDER") or "google").lower()
        self.GOOGLE_PLACES_API_KEY: str | None = os.getenv("GOOGLE_PLACES_API_KEY") or None
        self.NOMINATIM_BASE_URL: str = os.getenv("NOMINATIM_BASE_URL") or "https://nominatim.openstreetmap.org"
        self.NOMINATIM_USER_AGENT: str | None = os.getenv("NOMINATIM_USER_AGENT") or None
        self.PLACE_SEARCH_TIMEOUT_SECONDS: float = _as_float(os.getenv("PLACE_SEARCH_TIMEOUT_SECONDS"), 5.0)
        self.PLACE_SEARCH_BIAS_RADIUS_M: float = _as_float(os.getenv("PLACE_SEARCH_BIAS_RADIUS_M"), 50000.0)
        self.RESOLVER_MAX_ATTEMPTS: int = max(1, _as_int(os.getenv("RESOLVER_MAX_ATTEMPTS"), 3))
        self.LOG_LEVEL: str = (os.getenv("LOG_LEVEL") or "INFO").upper()
        self.LOG_SQL: bool = _as_bool(os.getenv("LOG_SQL"), False)
        self.CORS_ALLOW_ORIGINS: list[str] = _as_list(os.getenv("CORS_ALLOW_ORIGINS"), ["*"])


settings = Settings()
