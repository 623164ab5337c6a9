"""Unit tests for the HeadlessMap platform and map capability objects."""

from unittest.mock import MagicMock

import pytest

from storefinder.core.geo import LatLng, LatLngBounds
from storefinder.core.map_platform import DetailSurface, MapPlatform, MarkerHandle
from storefinder.core.protocols import Route
from storefinder.services.headless_map import HeadlessMap


@pytest.fixture
def map_platform(qapp):
    return HeadlessMap(center=LatLng(-27.47, 153.02), zoom=11)


def test_bounds_centered_on_center(map_platform):
    bounds = map_platform.get_bounds()
    assert bounds.center.lat == pytest.approx(-27.47)
    assert bounds.center.lng == pytest.approx(153.02)
    assert bounds.contains(LatLng(-27.60, 153.20))
    assert not bounds.contains(LatLng(-26.65, 153.07))


def test_zoom_in_shrinks_bounds(map_platform):
    wide = map_platform.get_bounds()
    map_platform.set_zoom(12)
    narrow = map_platform.get_bounds()
    assert (narrow.east - narrow.west) == pytest.approx((wide.east - wide.west) / 2)


def test_navigation_emits_signals(map_platform, qtbot):
    idle = MagicMock()
    zoom = MagicMock()
    map_platform.idle.connect(idle)
    map_platform.zoom_changed.connect(zoom)

    map_platform.set_zoom(13)
    map_platform.set_zoom(13)

    zoom.assert_called_once_with(13)
    assert idle.call_count == 2


def test_set_view_emits_single_idle(map_platform):
    idle = MagicMock()
    map_platform.idle.connect(idle)

    map_platform.set_view(LatLng(0, 0), 5)

    idle.assert_called_once()
    assert map_platform.get_zoom() == 5
    assert map_platform.history == ["set_center", "set_zoom"]


def test_manual_idle(qapp):
    map_platform = HeadlessMap(auto_idle=False)
    idle = MagicMock()
    map_platform.idle.connect(idle)

    map_platform.pan_to(LatLng(1, 1))
    idle.assert_not_called()

    map_platform.settle()
    idle.assert_called_once()


def test_zoom_is_clamped(map_platform):
    map_platform.set_zoom(40)
    assert map_platform.get_zoom() == 21
    map_platform.set_zoom(-3)
    assert map_platform.get_zoom() == 0


def test_fit_bounds_shows_whole_region(map_platform):
    region = LatLngBounds(LatLng(-28.0, 152.5), LatLng(-27.0, 153.5))
    map_platform.fit_bounds(region)
    shown = map_platform.get_bounds()
    assert shown.contains(region.south_west)
    assert shown.contains(region.north_east)
    assert map_platform.get_center() == region.center


def test_markers_attach_and_detach(map_platform):
    marker = map_platform.create_marker(LatLng(0, 0), "pin.png")
    assert marker.get_map() is None

    marker.set_map(map_platform)
    assert marker in map_platform.markers
    assert marker.get_map() is map_platform

    marker.set_map(None)
    assert marker not in map_platform.markers


def test_click_emits_point(map_platform):
    clicked = MagicMock()
    map_platform.clicked.connect(clicked)
    map_platform.click(LatLng(1, 2))
    clicked.assert_called_once_with(LatLng(1, 2))


def test_route_display(map_platform):
    route = Route(LatLng(0, 0), LatLng(1, 1))
    map_platform.display_route(route)
    assert map_platform.route is route
    map_platform.clear_route()
    assert map_platform.route is None


class TestDetailSurface:
    def test_open_at_marker(self, qapp):
        surface = DetailSurface()
        marker = MarkerHandle(LatLng(3, 4))
        surface.open(MagicMock(), marker)
        assert surface.is_open
        assert surface.position == LatLng(3, 4)
        assert surface.anchor is marker

    def test_close_is_silent_user_close_emits(self, qapp):
        surface = DetailSurface()
        closed = MagicMock()
        surface.closed.connect(closed)

        surface.close()
        closed.assert_not_called()

        surface.user_close()
        closed.assert_called_once()
        assert not surface.is_open


def test_base_platform_requires_overrides(qapp):
    with pytest.raises(NotImplementedError):
        MapPlatform().get_bounds()
