"""
Configuration Module.

Defines the option sets for the view and panel controllers and the
endpoints of the remote services, plus QSettings persistence for the user
facing options.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from storefinder.core.attributes import AttributeSet

SETTINGS_ORG = "StoreFinder"
SETTINGS_APP = "StoreFinder"
SETTINGS_VIEW_KEY = "view_options"
SETTINGS_PANEL_KEY = "panel_options"


@dataclass
class ViewOptions:
    """
    Options for the ViewController.

    Attributes:
        update_on_pan: Refresh locations every time the map goes idle.
        geolocation: Center on the user's position at startup.
        features: Universe of attributes known to the system.
        marker_icon: Optional icon for created markers.
    """

    update_on_pan: bool = True
    geolocation: bool = True
    features: AttributeSet = field(default_factory=AttributeSet)
    marker_icon: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Converts the options to a dictionary. The attribute universe is data,
        not configuration, and is not included.

        Returns:
            Dict[str, Any]: Dictionary representation of the options.
        """
        return {
            "update_on_pan": self.update_on_pan,
            "geolocation": self.geolocation,
            "marker_icon": self.marker_icon,
        }

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], features: Optional[AttributeSet] = None
    ) -> "ViewOptions":
        """
        Creates ViewOptions from a dictionary.

        Args:
            data: Dictionary containing option values.
            features: Attribute universe to attach.

        Returns:
            ViewOptions: A new instance.
        """
        return cls(
            update_on_pan=bool(data.get("update_on_pan", True)),
            geolocation=bool(data.get("geolocation", True)),
            features=features if features is not None else AttributeSet(),
            marker_icon=data.get("marker_icon"),
        )


@dataclass
class PanelOptions:
    """
    Options for the PanelController.

    Attributes:
        location_search: Enable the free-text location search.
        location_search_label: Label shown above the search box.
        feature_filter: Enable the attribute filter.
        directions: Enable the directions panel.
    """

    location_search: bool = True
    location_search_label: str = "Where are you?"
    feature_filter: bool = True
    directions: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "location_search": self.location_search,
            "location_search_label": self.location_search_label,
            "feature_filter": self.feature_filter,
            "directions": self.directions,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PanelOptions":
        return cls(
            location_search=bool(data.get("location_search", True)),
            location_search_label=data.get("location_search_label", "Where are you?"),
            feature_filter=bool(data.get("feature_filter", True)),
            directions=bool(data.get("directions", True)),
        )


@dataclass
class FeedConfig:
    """
    Endpoint of a remote GeoJSON location feed.

    Attributes:
        url: Feed URL returning a GeoJSON FeatureCollection.
        api_key: Optional key sent as the ``key`` query parameter.
        max_results: Upper bound on features requested.
        timeout: Request timeout in seconds.
    """

    url: str
    api_key: Optional[str] = None
    max_results: int = 300
    timeout: float = 10.0


@dataclass
class ServiceConfig:
    """Endpoints of the geocoding and routing services."""

    geocoder_url: str = "https://nominatim.openstreetmap.org/search"
    directions_url: str = "https://router.project-osrm.org/route/v1"
    user_agent: str = "storefinder/0.1"
    timeout: float = 10.0


def load_options(settings: Any) -> tuple:
    """
    Reads view and panel options from a QSettings-like object.

    Args:
        settings: Object with ``value(key, default)``.

    Returns:
        tuple: (ViewOptions, PanelOptions). Missing keys fall back to defaults.
    """
    view_data = settings.value(SETTINGS_VIEW_KEY, {}) or {}
    panel_data = settings.value(SETTINGS_PANEL_KEY, {}) or {}
    return ViewOptions.from_dict(view_data), PanelOptions.from_dict(panel_data)


def save_options(settings: Any, view: ViewOptions, panel: PanelOptions) -> None:
    """
    Writes view and panel options to a QSettings-like object.

    Args:
        settings: Object with ``setValue(key, value)``.
        view: View options to store.
        panel: Panel options to store.
    """
    settings.setValue(SETTINGS_VIEW_KEY, view.to_dict())
    settings.setValue(SETTINGS_PANEL_KEY, panel.to_dict())
