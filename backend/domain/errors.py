"""
Error taxonomy shared by services and API routes.
"""


class ValidationError(ValueError):
    """A submission is malformed or missing fields. Raised before any write."""


class ProviderError(RuntimeError):
    """The place-search provider failed, rejected the request, or returned unparseable data."""


class PersistenceConflict(Exception):
    """A location insert lost a race on the provider_place_id uniqueness constraint."""

    def __init__(self, provider_place_id: str):
        super().__init__(f"Location already exists for provider place id {provider_place_id!r}")
        self.provider_place_id = provider_place_id


class PersistenceError(RuntimeError):
    """The store is unreachable or rejected a write."""
