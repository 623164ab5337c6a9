"""
StoreFinder Exceptions.

None of these are fatal: controllers catch them at capability boundaries and
degrade to a visible placeholder or status message.
"""

from typing import Optional


class StoreFinderError(Exception):
    """Base class for all StoreFinder errors."""


class LookupFailure(StoreFinderError):
    """
    A geocoding, routing or remote feed lookup did not succeed.

    Attributes:
        status: Status code reported by the external service (e.g. "ZERO_RESULTS").
        query: The request that failed, for display.
    """

    def __init__(self, message: str, status: str = "ERROR", query: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.query = query


class IngestionError(StoreFinderError):
    """A single raw record could not be converted into a Location."""

    def __init__(self, message: str, record_id: Optional[str] = None):
        super().__init__(message)
        self.record_id = record_id
