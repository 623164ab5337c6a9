"""
PanelController - Drives the side panel of the store finder.

The panel shows the ranked location list, the attribute filter, a location
search and a directions form. It mirrors ``featureFilter`` and
``selectedLocation`` from the ViewController's store and writes back only
through the ViewController's mutation methods, so state flows one way.
"""

import logging
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple

from PySide6.QtCore import QObject, Signal, Slot

from storefinder.app.constants import (
    GEOCODE_ZOOM,
    MAX_LIST_ITEMS,
    NO_STORES_HTML,
    NO_STORES_IN_VIEW_HTML,
    PROP_FEATURE_FILTER,
    PROP_LOCATIONS,
    PROP_SELECTED_LOCATION,
    PROP_STATUS_MESSAGE,
    STATUS_DIRECTIONS_FAILED,
    STATUS_LOOKUP_FAILED,
    ZOOM_HERE_ZOOM,
)
from storefinder.app.view_controller import ViewController
from storefinder.core.attributes import Attribute, AttributeSet
from storefinder.core.config import PanelOptions
from storefinder.core.exceptions import LookupFailure
from storefinder.core.geo import LatLng
from storefinder.core.location import ListItem, Location
from storefinder.core.observable import ListenerHandle, ObservableStore
from storefinder.core.protocols import (
    DirectionsService,
    DirectionsStatus,
    GeocodeResult,
    Geocoder,
    GeocoderStatus,
    Route,
    TravelMode,
)

logger = logging.getLogger(__name__)

ACTION_DIRECTIONS = "directions"
ACTION_ZOOM_HERE = "zoomhere"

DETAIL_ACTIONS_HTML = (
    '<a href="#" class="action directions">Directions</a>'
    '<a href="#" class="action zoomhere">Zoom here</a>'
)


class DirectionsState(Enum):
    HIDDEN = "hidden"
    VISIBLE = "visible"


class PanelController(QObject):
    """
    Manages the list, filter, search and directions of the side panel.

    Signals:
        geocode: Emitted with the place a search resolved to.
                 Args: (place: GeocodeResult)
        stores_updated: Emitted after the list was re-rendered.
                        Args: (items: list of ListItem)
        lookup_failed: Emitted when geocoding or routing fails.
                       Args: (message: str)
        directions_rendered: Emitted when a route is shown. Args: (route: Route)
    """

    geocode = Signal(object)
    stores_updated = Signal(list)
    lookup_failed = Signal(str)
    directions_rendered = Signal(object)

    def __init__(
        self,
        view: Optional[ViewController] = None,
        options: Optional[PanelOptions] = None,
        geocoder: Optional[Geocoder] = None,
        directions_service: Optional[DirectionsService] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        """
        Initializes the PanelController.

        Args:
            view: The ViewController to follow. Can be set later with set_view().
            options: Panel options. Defaults to PanelOptions().
            geocoder: Resolves location searches.
            directions_service: Computes routes for the directions panel.
            parent: Optional parent QObject.
        """
        super().__init__(parent)
        self.options = options or PanelOptions()
        self.geocoder = geocoder
        self.directions_service = directions_service
        self.view: Optional[ViewController] = None

        self.store = ObservableStore(
            {
                PROP_LOCATIONS: self._on_locations_changed,
                PROP_SELECTED_LOCATION: self._on_selected_location_changed,
                PROP_FEATURE_FILTER: self._on_feature_filter_changed,
            },
            parent=self,
        )
        self.store.setObjectName("panel")

        self.items: List[ListItem] = []
        self.placeholders: List[str] = []
        self.detail_actions: List[str] = []

        self.directions_state = DirectionsState.HIDDEN
        self.directions_from: Optional[LatLng] = None
        self.directions_to: Optional[Location] = None
        self.directions_to_text = ""
        self.rendered_directions: Optional[Route] = None
        self.last_failure: Optional[LookupFailure] = None

        self._stores_listener: Optional[ListenerHandle] = None
        self._connections: List[Tuple[Any, Callable]] = []
        self._center: Optional[LatLng] = None
        self._name_retry_allowed = True

        self.geocode.connect(self._on_geocode)

        if view is not None:
            self.set_view(view)

    # --------------------------------------------------------------- view wiring

    def set_view(self, view: ViewController) -> None:
        """
        Follows a ViewController, dropping any previously followed one.

        Args:
            view: The view to mirror.
        """
        self._disconnect_view()
        self.view = view
        self._center = None

        self.store.bind(PROP_SELECTED_LOCATION, view.store)

        map_platform = view.get_map()
        self._connect(view.selected_location_changed, self._on_view_selection)
        self._connect(view.load, self._update_list)
        self._connect(map_platform.zoom_changed, self._on_zoom_changed)
        self._connect(map_platform.idle, self._on_idle)
        self._update_list()

        self.store.bind(PROP_FEATURE_FILTER, view.store)

    def _connect(self, signal: Any, slot: Callable) -> None:
        signal.connect(slot)
        self._connections.append((signal, slot))

    def _disconnect_view(self) -> None:
        for signal, slot in self._connections:
            signal.disconnect(slot)
        self._connections = []
        self.store.unbind_all()
        if self.view is not None:
            self.view.store.remove_listener(self._stores_listener)
        self._stores_listener = None

    def _require_view(self) -> ViewController:
        if self.view is None:
            raise RuntimeError("PanelController has no view")
        return self.view

    @Slot()
    def _update_list(self) -> None:
        self._require_view().clear_markers()
        self.listen_for_stores_update()

    @Slot(int)
    def _on_zoom_changed(self, zoom: int) -> None:
        self._update_list()

    @Slot()
    def _on_idle(self) -> None:
        map_platform = self._require_view().get_map()
        if self._center is None:
            self._center = map_platform.get_center()
        elif not map_platform.get_bounds().contains(self._center):
            self._center = map_platform.get_center()
            self.listen_for_stores_update()

    def listen_for_stores_update(self) -> None:
        """
        Copies the view's next location list into the panel, once.

        Replaces any earlier pending registration.
        """
        view = self._require_view()
        view.store.remove_listener(self._stores_listener)
        self._stores_listener = view.store.add_listener_once(PROP_LOCATIONS, self._receive_stores)

    def _receive_stores(self, stores: List[Location]) -> None:
        # The viewport may have moved even when the list did not.
        if not self.store.set(PROP_LOCATIONS, stores):
            self.store.notify(PROP_LOCATIONS)

    # -------------------------------------------------------------------- list

    def get_locations(self) -> Optional[List[Location]]:
        return self.store.get(PROP_LOCATIONS)

    def _on_locations_changed(self, stores: Optional[List[Location]]) -> None:
        if stores is None:
            return
        view = self.view
        bounds = view.get_map().get_bounds() if view is not None else None
        selected = self.store.get(PROP_SELECTED_LOCATION)

        placeholders = []
        if not stores:
            placeholders.append(NO_STORES_HTML)
        elif bounds is not None and not bounds.contains(stores[0].coordinates):
            placeholders.append(NO_STORES_IN_VIEW_HTML)

        items = []
        for location in stores[:MAX_LIST_ITEMS]:
            item = location.get_list_item()
            item.highlighted = selected is not None and location.id == selected.id
            items.append(item)

        self.placeholders = placeholders
        self.items = items
        logger.debug(f"Panel rendered {len(items)} of {len(stores)} locations")
        self.stores_updated.emit(items)

    def render_html(self) -> str:
        """Renders the list, placeholders first, as markup."""
        body = "".join(self.placeholders) + "".join(item.to_html() for item in self.items)
        return f'<ul class="store-list">{body}</ul>'

    def select(self, location: Location) -> None:
        """Selects a location from the list and pans the map to it."""
        self._require_view().highlight(location, True)

    def select_item(self, element_id: str) -> None:
        """
        Selects the location rendered as the given list element.

        Args:
            element_id: ``store-<location id>`` of a rendered item.
        """
        for location in (self.get_locations() or [])[:MAX_LIST_ITEMS]:
            if location.get_list_item().element_id == element_id:
                self.select(location)
                return
        logger.debug(f"No rendered item {element_id}")

    # ------------------------------------------------------------------ filter

    def filter_options(self) -> List[Tuple[Attribute, bool]]:
        """The attribute universe with the checked state of each attribute."""
        if not self.options.feature_filter or self.view is None:
            return []
        current = self.store.get(PROP_FEATURE_FILTER) or AttributeSet.NONE
        return [
            (feature, current.contains(feature))
            for feature in self.view.get_features().as_list()
        ]

    def toggle_feature_filter(self, feature: Attribute) -> None:
        """
        Toggles a required attribute and refreshes the view.

        Args:
            feature: The attribute to toggle.
        """
        view = self._require_view()
        view.toggle_feature(feature)
        view.refresh_view()

    def _on_feature_filter_changed(self, features: Optional[AttributeSet]) -> None:
        if self.view is not None:
            self.listen_for_stores_update()

    # --------------------------------------------------------------- selection

    def _on_selected_location_changed(self, location: Optional[Location]) -> None:
        for item in self.items:
            item.highlighted = False
        self.detail_actions = []
        if location is None:
            return

        self.directions_to = location
        for item in self.items:
            if item.location_id == location.id:
                item.highlighted = True
        if self.options.directions:
            self.directions_to_text = location.title

        self.detail_actions = [ACTION_DIRECTIONS, ACTION_ZOOM_HERE]
        if self.view is not None:
            info_window = self.view.get_info_window()
            info_window.set_content(location.get_info_content() + DETAIL_ACTIONS_HTML)

    @Slot(object)
    def _on_view_selection(self, location: Optional[Location]) -> None:
        # The view re-renders the detail surface on reselection, while the
        # binding drops the unchanged value.
        if location is not None and self.store.get(PROP_SELECTED_LOCATION) is location:
            self.store.notify(PROP_SELECTED_LOCATION)

    def perform_action(self, action: str) -> None:
        """
        Runs an action link of the detail surface.

        Args:
            action: ACTION_DIRECTIONS or ACTION_ZOOM_HERE.
        """
        if action == ACTION_DIRECTIONS:
            self.show_directions()
        elif action == ACTION_ZOOM_HERE:
            self.zoom_here()
        else:
            raise ValueError(f"Unknown detail action: {action}")

    def zoom_here(self) -> None:
        """Centers the map closely on the selected location."""
        location = self.store.get(PROP_SELECTED_LOCATION)
        if location is None:
            return
        self._require_view().get_map().set_view(location.coordinates, ZOOM_HERE_ZOOM)

    # ------------------------------------------------------------------ search

    def search_position(self, search_text: str, retry_by_name: bool = True) -> None:
        """
        Resolves free text and moves the map there.

        Args:
            search_text: Text entered by the user.
            retry_by_name: Search again by name when the place found has no
                coordinates. The follow-up search does not retry again.
        """
        view = self._require_view()
        if self.geocoder is None:
            self._report_failure(
                LookupFailure(STATUS_LOOKUP_FAILED.format(query=search_text), query=search_text)
            )
            return

        def on_geocoded(status: GeocoderStatus, results: List[GeocodeResult]) -> None:
            if status != GeocoderStatus.OK or not results:
                logger.warning(f"Geocoding '{search_text}' failed with status {status}")
                self._report_failure(
                    LookupFailure(
                        STATUS_LOOKUP_FAILED.format(query=search_text),
                        status=status.value,
                        query=search_text,
                    )
                )
                return
            self.last_failure = None
            self.store.set(PROP_STATUS_MESSAGE, None)
            self._name_retry_allowed = retry_by_name
            try:
                self.geocode.emit(results[0])
            finally:
                self._name_retry_allowed = True

        self.geocoder.geocode(search_text, view.get_map().get_bounds(), on_geocoded)

    @Slot(object)
    def _on_geocode(self, place: GeocodeResult) -> None:
        if not place.has_geometry:
            if not self._name_retry_allowed:
                logger.warning(f"Place '{place.name}' still has no coordinates")
                self._report_failure(
                    LookupFailure(
                        STATUS_LOOKUP_FAILED.format(query=place.name),
                        status=GeocoderStatus.ZERO_RESULTS.value,
                        query=place.name,
                    )
                )
                return
            self.search_position(place.name, retry_by_name=False)
            return

        self.directions_from = place.location
        if self.directions_state is DirectionsState.VISIBLE:
            self.render_directions()

        view = self._require_view()
        view.highlight(None)
        # Navigation can refresh the view synchronously, so listen first.
        self.listen_for_stores_update()
        map_platform = view.get_map()
        if place.viewport is not None:
            map_platform.fit_bounds(place.viewport)
        else:
            map_platform.set_view(place.location, GEOCODE_ZOOM)
        view.refresh_view()

    def _report_failure(self, failure: LookupFailure) -> None:
        self.last_failure = failure
        self.store.set(PROP_STATUS_MESSAGE, str(failure))
        self.lookup_failed.emit(str(failure))

    @property
    def status_message(self) -> Optional[str]:
        return self.store.get(PROP_STATUS_MESSAGE)

    # -------------------------------------------------------------- directions

    def show_directions(self) -> None:
        """Opens the directions panel for the selected location."""
        location = self.store.get(PROP_SELECTED_LOCATION)
        if location is None:
            return
        self.directions_to_text = location.title
        self.directions_state = DirectionsState.VISIBLE
        self.render_directions()

    def hide_directions(self) -> None:
        """Closes the directions panel and removes the route from the map."""
        self.directions_state = DirectionsState.HIDDEN
        self.rendered_directions = None
        if self.view is not None:
            self.view.get_map().clear_route()

    def render_directions(self) -> None:
        """
        Requests a route from the last searched position to the selected
        location. Does nothing unless both are known.
        """
        origin = self.directions_from
        destination = self.directions_to
        if origin is None or destination is None:
            return
        if self.directions_service is None:
            logger.debug("No directions service configured")
            return

        def on_route(status: DirectionsStatus, route: Optional[Route]) -> None:
            if status != DirectionsStatus.OK or route is None:
                logger.warning(f"Routing to {destination.id} failed with status {status}")
                self._report_failure(
                    LookupFailure(
                        STATUS_DIRECTIONS_FAILED.format(title=destination.title),
                        status=status.value,
                        query=destination.id,
                    )
                )
                return
            self.rendered_directions = route
            if self.view is not None:
                self.view.get_map().display_route(route)
            self.directions_rendered.emit(route)

        self.directions_service.route(
            origin, destination.coordinates, TravelMode.DRIVING, on_route
        )
