from .locations import LocationsRepository
from . import models

__all__ = ["LocationsRepository", "models"]
