"""
Protocol Interfaces for External Capabilities.

Geocoding, routing and geolocation are supplied by the hosting platform.
These Protocols (PEP 544) describe the narrow contract the controllers
depend on, so any provider that implements the methods can be plugged in.

Every call is fire-and-forget: the callback is invoked exactly once, either
immediately or later from the event loop.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Protocol, runtime_checkable

from storefinder.core.geo import LatLng, LatLngBounds


class GeocoderStatus(str, Enum):
    """Outcome of a geocoding request."""

    OK = "OK"
    ZERO_RESULTS = "ZERO_RESULTS"
    ERROR = "ERROR"


class DirectionsStatus(str, Enum):
    """Outcome of a routing request."""

    OK = "OK"
    NOT_FOUND = "NOT_FOUND"
    ZERO_RESULTS = "ZERO_RESULTS"
    ERROR = "ERROR"


class TravelMode(str, Enum):
    DRIVING = "driving"
    WALKING = "walking"
    BICYCLING = "bicycling"


@dataclass
class GeocodeResult:
    """
    A resolved place.

    Attributes:
        name: Display name of the place (the query text when unresolved).
        location: Resolved coordinates. None when the place carries no geometry.
        viewport: Recommended viewport, if the service supplies one.
    """

    name: str
    location: Optional[LatLng] = None
    viewport: Optional[LatLngBounds] = None

    @property
    def has_geometry(self) -> bool:
        return self.location is not None


@dataclass
class RouteStep:
    instruction: str
    distance_m: float = 0.0
    duration_s: float = 0.0


@dataclass
class Route:
    """
    A renderable route between two points.

    Attributes:
        origin: Start of the route.
        destination: End of the route.
        path: Polyline of the route geometry.
        steps: Turn-by-turn instructions.
        distance_m: Total length in meters.
        duration_s: Estimated travel time in seconds.
    """

    origin: LatLng
    destination: LatLng
    path: List[LatLng] = field(default_factory=list)
    steps: List[RouteStep] = field(default_factory=list)
    distance_m: float = 0.0
    duration_s: float = 0.0
    travel_mode: TravelMode = TravelMode.DRIVING


GeocodeCallback = Callable[[GeocoderStatus, List[GeocodeResult]], None]
RouteCallback = Callable[[DirectionsStatus, Optional[Route]], None]


@runtime_checkable
class Geocoder(Protocol):
    """Resolves free text to places."""

    def geocode(
        self,
        query: str,
        bounds: Optional[LatLngBounds],
        callback: GeocodeCallback,
    ) -> None:
        """
        Resolves a free-text query.

        Args:
            query: Text entered by the user.
            bounds: Viewport used to bias the results.
            callback: Receives (status, results). Results are best match first.
        """
        ...


@runtime_checkable
class DirectionsService(Protocol):
    """Computes routes between two points."""

    def route(
        self,
        origin: LatLng,
        destination: LatLng,
        travel_mode: TravelMode,
        callback: RouteCallback,
    ) -> None:
        """
        Computes a route.

        Args:
            origin: Start point.
            destination: End point.
            travel_mode: Mode of transport.
            callback: Receives (status, route). Route is None unless status is OK.
        """
        ...


@runtime_checkable
class Geolocator(Protocol):
    """Reports the user's current position."""

    def get_current_position(
        self,
        on_success: Callable[[LatLng], None],
        on_error: Optional[Callable[[Any], None]] = None,
        maximum_age_ms: int = 60_000,
        timeout_ms: int = 10_000,
    ) -> None:
        """
        Requests the current position.

        Args:
            on_success: Receives the position.
            on_error: Receives a provider specific error.
            maximum_age_ms: Accept a cached position at most this old.
            timeout_ms: Give up after this long.
        """
        ...
