"""
Geographic Math Utilities.

Provides the value types and calculations used for ranking and viewport
checks:
- LatLng points and LatLngBounds viewport rectangles
- Great-circle (haversine) distance in kilometers
- Bounding box containment and extension

Longitudes are not wrapped across the antimeridian: bounds are treated as
plain rectangles.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Tuple

EARTH_RADIUS_KM = 6371.0  # mean radius of earth


def to_rad(degrees: float) -> float:
    """
    Converts degrees to radians.

    Args:
        degrees: Angle in degrees.

    Returns:
        float: Angle in radians.
    """
    return degrees * math.pi / 180


@dataclass(frozen=True)
class LatLng:
    """
    A geographic point.

    Attributes:
        lat: Latitude in degrees.
        lng: Longitude in degrees.
    """

    lat: float
    lng: float

    def to_tuple(self) -> Tuple[float, float]:
        return (self.lat, self.lng)


def haversine_km(origin: LatLng, destination: LatLng) -> float:
    """
    Calculates the great-circle distance between two points.

    Args:
        origin: First point.
        destination: Second point.

    Returns:
        float: Distance in kilometers on a sphere of radius EARTH_RADIUS_KM.
    """
    lat1 = to_rad(origin.lat)
    lon1 = to_rad(origin.lng)
    lat2 = to_rad(destination.lat)
    lon2 = to_rad(destination.lng)

    d_lat = lat2 - lat1
    d_lon = lon2 - lon1

    a = (
        math.sin(d_lat / 2) * math.sin(d_lat / 2)
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) * math.sin(d_lon / 2)
    )
    # rounding can push a just past 1 for antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


@dataclass(frozen=True)
class LatLngBounds:
    """
    A rectangular viewport defined by its south-west and north-east corners.

    Attributes:
        south_west: Lower-left corner.
        north_east: Upper-right corner.
    """

    south_west: LatLng
    north_east: LatLng

    def __post_init__(self) -> None:
        if self.south_west.lat > self.north_east.lat:
            raise ValueError(
                f"South latitude {self.south_west.lat} is north of "
                f"{self.north_east.lat}"
            )
        if self.south_west.lng > self.north_east.lng:
            raise ValueError(
                f"West longitude {self.south_west.lng} is east of "
                f"{self.north_east.lng}"
            )

    @property
    def center(self) -> LatLng:
        """The midpoint of the rectangle."""
        return LatLng(
            (self.south_west.lat + self.north_east.lat) / 2,
            (self.south_west.lng + self.north_east.lng) / 2,
        )

    @property
    def west(self) -> float:
        return self.south_west.lng

    @property
    def south(self) -> float:
        return self.south_west.lat

    @property
    def east(self) -> float:
        return self.north_east.lng

    @property
    def north(self) -> float:
        return self.north_east.lat

    def contains(self, point: LatLng) -> bool:
        """
        Checks whether a point lies inside the bounds (edges inclusive).

        Args:
            point: The point to test.

        Returns:
            bool: True if the point is inside.
        """
        return (
            self.south <= point.lat <= self.north
            and self.west <= point.lng <= self.east
        )

    def extend(self, point: LatLng) -> "LatLngBounds":
        """
        Returns new bounds grown to include the given point.

        Args:
            point: The point to include.

        Returns:
            LatLngBounds: The extended bounds.
        """
        return LatLngBounds(
            LatLng(min(self.south, point.lat), min(self.west, point.lng)),
            LatLng(max(self.north, point.lat), max(self.east, point.lng)),
        )

    def to_bbox(self) -> Tuple[float, float, float, float]:
        """Returns (west, south, east, north), the GeoJSON bbox order."""
        return (self.west, self.south, self.east, self.north)

    @classmethod
    def from_points(cls, points: Iterable[LatLng]) -> "LatLngBounds":
        """
        Builds the smallest bounds containing every point.

        Raises:
            ValueError: If no points are given.
        """
        points = list(points)
        if not points:
            raise ValueError("Need at least one point to build bounds")
        bounds = cls(points[0], points[0])
        for point in points[1:]:
            bounds = bounds.extend(point)
        return bounds

    @classmethod
    def around(cls, center: LatLng, half_span_deg: float) -> "LatLngBounds":
        """
        Builds square bounds centered on a point.

        Args:
            center: Center of the bounds.
            half_span_deg: Half of the side length, in degrees.
        """
        return cls(
            LatLng(center.lat - half_span_deg, center.lng - half_span_deg),
            LatLng(center.lat + half_span_deg, center.lng + half_span_deg),
        )
