"""Unit tests for option sets and their QSettings persistence."""

import pytest

from storefinder.core.attributes import Attribute, AttributeSet
from storefinder.core.config import (
    SETTINGS_APP,
    SETTINGS_ORG,
    FeedConfig,
    PanelOptions,
    ServiceConfig,
    ViewOptions,
    load_options,
    save_options,
)


@pytest.fixture
def settings():
    from PySide6.QtCore import QSettings

    settings = QSettings(SETTINGS_ORG, SETTINGS_APP)
    settings.remove("view_options")
    settings.remove("panel_options")
    return settings


def test_defaults():
    view = ViewOptions()
    panel = PanelOptions()
    assert view.update_on_pan and view.geolocation
    assert view.features == AttributeSet()
    assert panel.location_search_label == "Where are you?"
    assert panel.directions


def test_view_options_dict_excludes_universe():
    view = ViewOptions(features=AttributeSet(Attribute("a", "A")), marker_icon="pin.png")
    assert view.to_dict() == {
        "update_on_pan": True,
        "geolocation": True,
        "marker_icon": "pin.png",
    }


def test_view_options_from_dict_attaches_universe():
    universe = AttributeSet(Attribute("a", "A"))
    view = ViewOptions.from_dict({"update_on_pan": False}, universe)
    assert view.update_on_pan is False
    assert view.geolocation is True
    assert view.features is universe


def test_panel_options_round_trip():
    panel = PanelOptions(location_search=False, location_search_label="Postcode", directions=False)
    assert PanelOptions.from_dict(panel.to_dict()) == panel


def test_load_without_saved_options(settings):
    view, panel = load_options(settings)
    assert view == ViewOptions()
    assert panel == PanelOptions()


def test_save_and_load(settings):
    save_options(
        settings,
        ViewOptions(update_on_pan=False, geolocation=False),
        PanelOptions(feature_filter=False),
    )

    view, panel = load_options(settings)

    assert view.update_on_pan is False
    assert view.geolocation is False
    assert panel.feature_filter is False
    assert panel.location_search is True


def test_service_defaults():
    feed = FeedConfig("https://feed.test")
    assert feed.max_results == 300
    assert feed.api_key is None
    services = ServiceConfig()
    assert services.geocoder_url.startswith("https://")
    assert services.directions_url.endswith("/route/v1")
