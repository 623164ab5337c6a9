"""
Map Platform Capability.

Defines the objects the controllers expect from the hosting map: a map with
viewport queries and navigation, markers that can be attached and clicked,
and an anchored detail surface (info window).

A concrete platform subclasses MapPlatform and overrides the methods that
raise NotImplementedError. MarkerHandle and DetailSurface keep their own
state, so subclasses only add rendering.
"""

import logging
from typing import TYPE_CHECKING, Optional

from PySide6.QtCore import QObject, Signal

from storefinder.core.geo import LatLng, LatLngBounds

if TYPE_CHECKING:
    from storefinder.core.protocols import Route

logger = logging.getLogger(__name__)


class MarkerHandle(QObject):
    """
    A marker drawn on the map.

    Signals:
        clicked: Emitted when the user clicks the marker.
    """

    clicked = Signal()

    def __init__(
        self,
        position: LatLng,
        icon: Optional[str] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        """
        Initializes a MarkerHandle.

        Args:
            position: Where the marker is drawn.
            icon: Optional icon path or URL.
            parent: Optional parent QObject.
        """
        super().__init__(parent)
        self.position = position
        self.icon = icon
        self._map: Optional["MapPlatform"] = None

    def get_map(self) -> Optional["MapPlatform"]:
        """The map the marker is attached to, or None when hidden."""
        return self._map

    def set_map(self, map_platform: Optional["MapPlatform"]) -> None:
        """
        Attaches the marker to a map, or detaches it when None.

        Args:
            map_platform: Target map or None.
        """
        if map_platform is self._map:
            return
        if self._map is not None:
            self._map.on_marker_detached(self)
        self._map = map_platform
        if map_platform is not None:
            map_platform.on_marker_attached(self)


class DetailSurface(QObject):
    """
    An overlay showing one location's rendered content (info window).

    Signals:
        closed: Emitted when the user closes the surface.
    """

    closed = Signal()

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self.content: str = ""
        self.anchor: Optional[MarkerHandle] = None
        self.position: Optional[LatLng] = None
        self.is_open = False
        self._map: Optional["MapPlatform"] = None

    def set_content(self, content: str) -> None:
        self.content = content

    def set_position(self, position: LatLng) -> None:
        self.position = position

    def open(
        self, map_platform: "MapPlatform", anchor: Optional[MarkerHandle] = None
    ) -> None:
        """
        Shows the surface on a map.

        Args:
            map_platform: Map to show on.
            anchor: Marker to anchor to. When None the surface is shown at
                ``position``.
        """
        self._map = map_platform
        self.anchor = anchor
        if anchor is not None:
            self.position = anchor.position
        self.is_open = True

    def close(self) -> None:
        """Hides the surface. Does not emit ``closed``."""
        self.is_open = False
        self.anchor = None

    def user_close(self) -> None:
        """Closes the surface as if the user clicked its close button."""
        self.close()
        self.closed.emit()


class MapPlatform(QObject):
    """
    Base class for a hosting map.

    Signals:
        idle: Emitted after the map settles following a pan or zoom.
        zoom_changed: Emitted when the zoom level changes. Args: (zoom: int)
        center_changed: Emitted when the center moves. Args: (center: LatLng)
        clicked: Emitted on a click on the map background. Args: (point: LatLng)
    """

    idle = Signal()
    zoom_changed = Signal(int)
    center_changed = Signal(object)
    clicked = Signal(object)

    def get_bounds(self) -> LatLngBounds:
        raise NotImplementedError

    def get_center(self) -> LatLng:
        raise NotImplementedError

    def set_center(self, center: LatLng) -> None:
        raise NotImplementedError

    def get_zoom(self) -> int:
        raise NotImplementedError

    def set_zoom(self, zoom: int) -> None:
        raise NotImplementedError

    def pan_to(self, center: LatLng) -> None:
        """Moves the center. Platforms may animate; the default does not."""
        self.set_center(center)

    def set_view(self, center: LatLng, zoom: int) -> None:
        """Sets center and zoom in one step."""
        self.set_center(center)
        self.set_zoom(zoom)

    def fit_bounds(self, bounds: LatLngBounds) -> None:
        raise NotImplementedError

    def create_marker(self, position: LatLng, icon: Optional[str] = None) -> MarkerHandle:
        """Creates a detached marker."""
        return MarkerHandle(position, icon)

    def create_detail_surface(self) -> DetailSurface:
        return DetailSurface()

    def display_route(self, route: "Route") -> None:
        raise NotImplementedError

    def clear_route(self) -> None:
        raise NotImplementedError

    def on_marker_attached(self, marker: MarkerHandle) -> None:
        """Hook called when a marker is attached to this map."""

    def on_marker_detached(self, marker: MarkerHandle) -> None:
        """Hook called when a marker is detached from this map."""
