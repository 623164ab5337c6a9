"""
ViewController - Keeps the map in sync with the location set.

Owns the map-facing ObservableStore: the current ranked ``locations``, the
``featureFilter``, the ``selectedLocation`` and the ``updateOnPan`` switch.
Each refresh queries the DataFeed for the current viewport and reconciles
the result against the markers on the map.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from PySide6.QtCore import QObject, Signal, Slot

from storefinder.app.constants import (
    GEOLOCATION_MAX_AGE_MS,
    GEOLOCATION_TIMEOUT_MS,
    GEOLOCATION_ZOOM,
    PROP_FEATURE_FILTER,
    PROP_LOCATIONS,
    PROP_SELECTED_LOCATION,
    PROP_UPDATE_ON_PAN,
)
from storefinder.core.attributes import Attribute, AttributeSet
from storefinder.core.config import ViewOptions
from storefinder.core.geo import LatLng
from storefinder.core.location import Location
from storefinder.core.map_platform import DetailSurface, MapPlatform, MarkerHandle
from storefinder.core.observable import ObservableStore
from storefinder.core.protocols import Geolocator
from storefinder.services.data_feed import DataFeed

logger = logging.getLogger(__name__)


class ViewState(Enum):
    UNINITIALIZED = "uninitialized"
    LOADED = "loaded"
    REFRESHING = "refreshing"


class ViewController(QObject):
    """
    Drives refresh, marker lifecycle and selection for a map.

    Markers are created once per location id and reused for the lifetime of
    the controller. A location's click listener is attached while it is in
    the current result set and detached as soon as a newer result replaces
    it.

    Signals:
        load: Emitted once after construction and again when geolocation
              recenters the map.
        locations_changed: Emitted when the ranked location list changes.
                           Args: (locations: list)
        selected_location_changed: Emitted on every selection, including
                                   reselecting the same location.
                                   Args: (location: object)
        feature_filter_changed: Emitted when the required attributes change.
                                Args: (features: object)
    """

    load = Signal()
    locations_changed = Signal(list)
    selected_location_changed = Signal(object)
    feature_filter_changed = Signal(object)

    def __init__(
        self,
        map_platform: MapPlatform,
        data_feed: DataFeed,
        options: Optional[ViewOptions] = None,
        geolocator: Optional[Geolocator] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        """
        Initializes the ViewController.

        Args:
            map_platform: The map to draw on.
            data_feed: Source of locations.
            options: View options. Defaults to ViewOptions().
            geolocator: Optional provider of the user's position.
            parent: Optional parent QObject.
        """
        super().__init__(parent)
        self.state = ViewState.UNINITIALIZED
        self._map = map_platform
        self.data = data_feed
        self.options = options or ViewOptions()
        self.geolocator = geolocator

        self.store = ObservableStore(
            {
                PROP_LOCATIONS: self._on_locations_changed,
                PROP_SELECTED_LOCATION: self._on_selected_location_changed,
                PROP_FEATURE_FILTER: self._on_feature_filter_changed,
                PROP_UPDATE_ON_PAN: self._on_update_on_pan_changed,
            },
            parent=self,
        )
        self.store.setObjectName("view")

        self._marker_cache: Dict[str, MarkerHandle] = {}
        # location id -> (marker, slot) for the currently attached click listeners
        self._click_slots: Dict[str, Tuple[MarkerHandle, Callable[[], None]]] = {}
        self._feature_by_id: Optional[Dict[str, Attribute]] = None
        self._idle_connected = False

        self._info_window = self._map.create_detail_surface()
        self._info_window.closed.connect(self._on_info_window_closed)
        self._map.clicked.connect(self._on_map_clicked)

        self.store.set(PROP_UPDATE_ON_PAN, self.options.update_on_pan)
        self.state = ViewState.LOADED
        self.load.emit()
        self.store.set(PROP_FEATURE_FILTER, AttributeSet())

        if self.options.geolocation:
            self._geolocate()

    # ------------------------------------------------------------------ access

    def get_map(self) -> MapPlatform:
        return self._map

    def get_features(self) -> AttributeSet:
        """The universe of attributes shown in the filter."""
        return self.options.features

    def get_feature_by_id(self, feature_id: str) -> Optional[Attribute]:
        if self._feature_by_id is None:
            self._feature_by_id = {
                feature.id: feature for feature in self.options.features.as_list()
            }
        return self._feature_by_id.get(feature_id)

    def get_locations(self) -> Optional[List[Location]]:
        return self.store.get(PROP_LOCATIONS)

    def get_selected_location(self) -> Optional[Location]:
        return self.store.get(PROP_SELECTED_LOCATION)

    def get_feature_filter(self) -> AttributeSet:
        return self.store.get(PROP_FEATURE_FILTER) or AttributeSet.NONE

    def click_listener_count(self) -> int:
        """Number of markers currently listening for clicks."""
        return len(self._click_slots)

    # ---------------------------------------------------------------- mutation

    def set_feature_filter(self, features: AttributeSet) -> None:
        """
        Replaces the required attributes. Does not refresh.

        Args:
            features: The new filter. Stored as given; callers pass a copy
                when they keep mutating their own set.
        """
        self.store.set(PROP_FEATURE_FILTER, features)

    def toggle_feature(self, feature: Attribute) -> None:
        """Toggles one required attribute on a copy of the current filter."""
        features = self.get_feature_filter().copy()
        features.toggle(feature)
        self.set_feature_filter(features)

    def set_update_on_pan(self, enabled: bool) -> None:
        """Enables or disables refreshing whenever the map goes idle."""
        self.store.set(PROP_UPDATE_ON_PAN, bool(enabled))

    # -------------------------------------------------------------- geolocation

    def _geolocate(self) -> None:
        if self.geolocator is None:
            logger.debug("Geolocation enabled but no geolocator supplied")
            return
        self.geolocator.get_current_position(
            self._on_position,
            self._on_position_error,
            maximum_age_ms=GEOLOCATION_MAX_AGE_MS,
            timeout_ms=GEOLOCATION_TIMEOUT_MS,
        )

    def _on_position(self, position: LatLng) -> None:
        logger.info(f"Centering on user position {position.lat:.4f}, {position.lng:.4f}")
        self._map.set_view(position, GEOLOCATION_ZOOM)
        self.load.emit()

    def _on_position_error(self, error: Any) -> None:
        logger.info(f"Geolocation unavailable: {error}")

    # ------------------------------------------------------------------ markers

    def create_marker(self, location: Location) -> MarkerHandle:
        """
        Creates the marker for a location. Override to customise markers.

        Args:
            location: The location to mark.

        Returns:
            MarkerHandle: A detached marker.
        """
        return self._map.create_marker(location.coordinates, self.options.marker_icon)

    def get_marker(self, location: Location) -> MarkerHandle:
        """
        Gets the marker for a location, creating it on first use.

        Args:
            location: The location.

        Returns:
            MarkerHandle: The cached marker for the location id.
        """
        marker = self._marker_cache.get(location.id)
        if marker is None:
            marker = self.create_marker(location)
            self._marker_cache[location.id] = marker
            logger.debug(f"Created marker for location {location.id}")
        return marker

    def add_store_to_map(self, location: Location) -> None:
        """
        Shows a location's marker and makes it selectable.

        Args:
            location: The location to show.
        """
        marker = self.get_marker(location)
        location.marker = marker
        self._attach_click(location, marker)
        if marker.get_map() is not self._map:
            marker.set_map(self._map)

    def _attach_click(self, location: Location, marker: MarkerHandle) -> None:
        self._detach_click(location.id)

        def on_click() -> None:
            self.highlight(location, False)

        marker.clicked.connect(on_click)
        self._click_slots[location.id] = (marker, on_click)

    def _detach_click(self, location_id: str) -> None:
        entry = self._click_slots.pop(location_id, None)
        if entry is None:
            return
        marker, slot = entry
        marker.clicked.disconnect(slot)

    def clear_markers(self) -> None:
        """Hides every marker and detaches every click listener."""
        for location_id, marker in self._marker_cache.items():
            marker.set_map(None)
            self._detach_click(location_id)

    # ------------------------------------------------------------------ refresh

    @Slot()
    def refresh_view(self) -> None:
        """Queries the feed for the current viewport and filter."""
        self.state = ViewState.REFRESHING
        bounds = self._map.get_bounds()
        logger.debug(f"Refreshing view for bounds {bounds.to_bbox()}")
        self.data.get_stores(bounds, self.get_feature_filter(), self._on_stores_received)

    def _on_stores_received(self, stores: List[Location]) -> None:
        stores = list(stores)
        new_ids = {location.id for location in stores}
        for old in self.get_locations() or []:
            self._detach_click(old.id)
            if old.id not in new_ids:
                marker = self._marker_cache.get(old.id)
                if marker is not None:
                    marker.set_map(None)
                old.marker = None

        for location in stores:
            self.add_store_to_map(location)

        self.state = ViewState.LOADED
        self.store.set(PROP_LOCATIONS, stores)

    # ---------------------------------------------------------------- selection

    def get_info_window(self, location: Optional[Location] = None) -> DetailSurface:
        """
        Gets the detail surface, loaded with a location's content if given.

        Args:
            location: Location whose content to show.
        """
        if location is not None:
            self._info_window.set_content(location.get_info_content())
        return self._info_window

    def highlight(self, location: Optional[Location], pan: bool = False) -> None:
        """
        Selects a location and shows its details, or clears the selection.

        Reselecting the current location still notifies, so pan and detail
        side effects run again.

        Args:
            location: Location to select, or None to clear.
            pan: Also center the map on the location.
        """
        info_window = self.get_info_window(location)
        if location is not None:
            if location.marker is not None:
                info_window.open(self._map, location.marker)
            else:
                info_window.set_position(location.coordinates)
                info_window.open(self._map)
            if pan:
                self._map.pan_to(location.coordinates)
        else:
            info_window.close()

        if not self.store.set(PROP_SELECTED_LOCATION, location) and location is not None:
            self.store.notify(PROP_SELECTED_LOCATION)

    @Slot()
    def _on_info_window_closed(self) -> None:
        self.highlight(None)

    @Slot(object)
    def _on_map_clicked(self, point: Any) -> None:
        self.highlight(None)

    # --------------------------------------------------------- store handlers

    def _on_locations_changed(self, locations: Optional[List[Location]]) -> None:
        self.locations_changed.emit(list(locations or []))

    def _on_selected_location_changed(self, location: Optional[Location]) -> None:
        self.selected_location_changed.emit(location)

    def _on_feature_filter_changed(self, features: Optional[AttributeSet]) -> None:
        if self.get_locations():
            self.clear_markers()
        self.feature_filter_changed.emit(features)

    def _on_update_on_pan_changed(self, enabled: bool) -> None:
        if self._idle_connected:
            self._map.idle.disconnect(self.refresh_view)
            self._idle_connected = False
        if enabled:
            self._map.idle.connect(self.refresh_view)
            self._idle_connected = True
