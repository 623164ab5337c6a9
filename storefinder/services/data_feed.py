"""
Data Feed Module.

Defines the DataFeed contract used by the ViewController to fetch locations
for a viewport, and StaticDataFeed, a feed over an in-memory list.

Classes:
    DataFeed: Abstract contract.
    PendingRequest: A get_stores call waiting for data to arrive.
    StaticDataFeed: Filters and ranks a fixed list of locations.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from storefinder.core.attributes import AttributeSet
from storefinder.core.geo import LatLng, LatLngBounds
from storefinder.core.location import Location

logger = logging.getLogger(__name__)

StoresCallback = Callable[[List[Location]], None]


def filter_locations(
    locations: Iterable[Location], features: Optional[AttributeSet]
) -> List[Location]:
    """
    Keeps the locations that have every required attribute.

    Args:
        locations: Candidates.
        features: Required attributes. Empty or None keeps everything.

    Returns:
        List[Location]: Matching locations in input order.
    """
    return [location for location in locations if location.has_all_features(features)]


def sort_by_distance(locations: Iterable[Location], point: LatLng) -> List[Location]:
    """
    Ranks locations by ascending distance to a point.

    ``sorted`` is stable, so locations at equal distance keep their input
    order.

    Args:
        locations: Locations to rank.
        point: Reference point, usually the viewport center.

    Returns:
        List[Location]: A new, ranked list.
    """
    return sorted(locations, key=lambda location: location.distance_to(point))


class DataFeed(ABC):
    """
    Source of locations for a viewport.

    Implementations deliver exactly one callback per get_stores call, either
    before returning or later from the event loop.
    """

    @abstractmethod
    def get_stores(
        self,
        bounds: LatLngBounds,
        features: Optional[AttributeSet],
        callback: StoresCallback,
    ) -> None:
        """
        Fetches locations for a viewport.

        Args:
            bounds: Current viewport. Ranking is relative to its center.
            features: Attributes every returned location must have.
            callback: Receives the ranked list of locations.
        """
        pass


@dataclass
class PendingRequest:
    """A get_stores call deferred until the feed has data."""

    bounds: LatLngBounds
    features: Optional[AttributeSet]
    callback: StoresCallback


class StaticDataFeed(DataFeed):
    """
    DataFeed over an in-memory list of locations.

    Until set_stores is first called with a non-empty list, get_stores calls
    are parked in a single pending slot. A newer call replaces the parked
    one, so only the most recent request is answered when data arrives.
    After that first population every call is answered synchronously.
    """

    def __init__(self, stores: Optional[Iterable[Location]] = None) -> None:
        """
        Initializes the feed.

        Args:
            stores: Optional initial locations.
        """
        self._stores: List[Location] = []
        self._pending: Optional[PendingRequest] = None
        self._populated = False
        if stores is not None:
            self.set_stores(stores)

    @property
    def stores(self) -> List[Location]:
        return list(self._stores)

    @property
    def pending(self) -> Optional[PendingRequest]:
        return self._pending

    @property
    def is_populated(self) -> bool:
        return self._populated

    def set_pending(self, request: Optional[PendingRequest]) -> None:
        """
        Parks a request in the pending slot, replacing any earlier one.

        Args:
            request: The request to park, or None to clear the slot.
        """
        if self._pending is not None and request is not None:
            logger.debug("Replacing pending get_stores request")
        self._pending = request

    def set_stores(self, stores: Iterable[Location]) -> None:
        """
        Replaces the backing list of locations.

        The first call with a non-empty list answers the pending request,
        if any.

        Args:
            stores: The new locations.
        """
        self._stores = list(stores)
        if not self._stores:
            return
        if not self._populated:
            self._populated = True
            logger.info(f"Static feed populated with {len(self._stores)} locations")
        pending = self._pending
        self._pending = None
        if pending is not None:
            self.get_stores(pending.bounds, pending.features, pending.callback)

    def get_stores(
        self,
        bounds: LatLngBounds,
        features: Optional[AttributeSet],
        callback: StoresCallback,
    ) -> None:
        if not self._populated:
            self.set_pending(PendingRequest(bounds, features, callback))
            return

        matches = filter_locations(self._stores, features)
        ranked = sort_by_distance(matches, bounds.center)
        logger.debug(
            f"Static feed matched {len(ranked)} of {len(self._stores)} locations"
        )
        callback(ranked)
