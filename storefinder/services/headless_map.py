"""
Headless Map Platform.

An in-memory MapPlatform with no rendering. It keeps a center, a zoom level
and a pixel viewport, derives geographic bounds from them, and records
attached markers and the displayed route. Used by the CLI and the tests, and
as a reference for real platform adapters.
"""

import logging
from typing import List, Optional, Set, Tuple

from storefinder.core.geo import LatLng, LatLngBounds
from storefinder.core.map_platform import MapPlatform, MarkerHandle
from storefinder.core.protocols import Route

logger = logging.getLogger(__name__)

TILE_SIZE = 256
MIN_ZOOM = 0
MAX_ZOOM = 21


class HeadlessMap(MapPlatform):
    """
    MapPlatform kept entirely in memory.

    Bounds use a plain equirectangular projection: at zoom z one tile of
    TILE_SIZE pixels spans 360 / 2**z degrees in both directions.
    Every navigation call emits ``idle`` afterwards unless ``auto_idle`` is
    False, in which case the caller emits it with settle().
    """

    def __init__(
        self,
        center: LatLng = LatLng(0.0, 0.0),
        zoom: int = 7,
        viewport_px: Tuple[int, int] = (800, 600),
        auto_idle: bool = True,
    ) -> None:
        """
        Initializes the map.

        Args:
            center: Initial center.
            zoom: Initial zoom level.
            viewport_px: (width, height) of the viewport in pixels.
            auto_idle: Emit ``idle`` after every navigation call.
        """
        super().__init__()
        self._center = center
        self._zoom = self._clamp_zoom(zoom)
        self.viewport_px = viewport_px
        self.auto_idle = auto_idle
        self.markers: Set[MarkerHandle] = set()
        self.route: Optional[Route] = None
        self.history: List[str] = []

    @staticmethod
    def _clamp_zoom(zoom: int) -> int:
        return max(MIN_ZOOM, min(MAX_ZOOM, int(zoom)))

    def _span_deg(self) -> Tuple[float, float]:
        degrees_per_px = 360.0 / (TILE_SIZE * 2**self._zoom)
        width, height = self.viewport_px
        return (width * degrees_per_px, height * degrees_per_px)

    def get_bounds(self) -> LatLngBounds:
        lng_span, lat_span = self._span_deg()
        south = max(-90.0, self._center.lat - lat_span / 2)
        north = min(90.0, self._center.lat + lat_span / 2)
        return LatLngBounds(
            LatLng(south, self._center.lng - lng_span / 2),
            LatLng(north, self._center.lng + lng_span / 2),
        )

    def get_center(self) -> LatLng:
        return self._center

    def get_zoom(self) -> int:
        return self._zoom

    def set_center(self, center: LatLng) -> None:
        self.history.append("set_center")
        if center != self._center:
            self._center = center
            self.center_changed.emit(center)
        self._after_navigation()

    def pan_to(self, center: LatLng) -> None:
        self.history.append("pan_to")
        if center != self._center:
            self._center = center
            self.center_changed.emit(center)
        self._after_navigation()

    def set_zoom(self, zoom: int) -> None:
        self.history.append("set_zoom")
        zoom = self._clamp_zoom(zoom)
        if zoom != self._zoom:
            self._zoom = zoom
            self.zoom_changed.emit(zoom)
        self._after_navigation()

    def set_view(self, center: LatLng, zoom: int) -> None:
        auto_idle = self.auto_idle
        self.auto_idle = False
        try:
            self.set_center(center)
            self.set_zoom(zoom)
        finally:
            self.auto_idle = auto_idle
        self._after_navigation()

    def fit_bounds(self, bounds: LatLngBounds) -> None:
        """
        Centers on the bounds and picks the highest zoom that shows all of it.

        Args:
            bounds: Region to show.
        """
        self.history.append("fit_bounds")
        lng_extent = max(bounds.east - bounds.west, 1e-9)
        lat_extent = max(bounds.north - bounds.south, 1e-9)
        width, height = self.viewport_px
        zoom = MAX_ZOOM
        while zoom > MIN_ZOOM:
            degrees_per_px = 360.0 / (TILE_SIZE * 2**zoom)
            if width * degrees_per_px >= lng_extent and height * degrees_per_px >= lat_extent:
                break
            zoom -= 1
        self.set_view(bounds.center, zoom)

    def settle(self) -> None:
        """Emits ``idle`` as the map does once it stops moving."""
        self.idle.emit()

    def click(self, point: Optional[LatLng] = None) -> None:
        """Simulates a click on the map background."""
        self.clicked.emit(point or self._center)

    def _after_navigation(self) -> None:
        if self.auto_idle:
            self.idle.emit()

    def display_route(self, route: Route) -> None:
        self.route = route

    def clear_route(self) -> None:
        self.route = None

    def on_marker_attached(self, marker: MarkerHandle) -> None:
        self.markers.add(marker)

    def on_marker_detached(self, marker: MarkerHandle) -> None:
        self.markers.discard(marker)
