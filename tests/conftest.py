import os
import pathlib
import sys

import pytest

# Ensure project root is in sys.path
repo_root = pathlib.Path(__file__).parent.parent
sys.path.insert(0, str(repo_root))

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtWidgets import QApplication  # noqa: E402

from storefinder.core.attributes import Attribute, AttributeSet  # noqa: E402
from storefinder.core.geo import LatLng  # noqa: E402
from storefinder.core.location import Location, clear_list_item_cache  # noqa: E402


@pytest.fixture(scope="session")
def qapp():
    """
    Ensure QApplication is instantiated only once.
    """
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


@pytest.fixture(autouse=True)
def fresh_list_item_cache():
    """
    List items are cached per location id for the whole process; tests reuse
    ids, so every test starts from an empty cache.
    """
    clear_list_item_cache()
    yield
    clear_list_item_cache()


class MockQSettings:
    """
    In-memory mock for QSettings to prevent tests from overwriting real config.
    """

    _storage = {}  # Class-level storage to persist across instances if needed

    def __init__(self, *args, **kwargs):
        self.organization = args[0] if len(args) > 0 else "MockOrg"
        self.application = args[1] if len(args) > 1 else "MockApp"

    def setValue(self, key, value):
        full_key = f"{self.organization}/{self.application}/{key}"
        self._storage[full_key] = value

    def value(self, key, default=None, type=None):
        full_key = f"{self.organization}/{self.application}/{key}"
        val = self._storage.get(full_key, default)
        if type is not None and val is not None:
            try:
                if type == bool and isinstance(val, str):
                    return val.lower() == "true"
                return type(val)
            except (ValueError, TypeError):
                return default
        return val

    def remove(self, key):
        full_key = f"{self.organization}/{self.application}/{key}"
        if full_key in self._storage:
            del self._storage[full_key]

    def contains(self, key):
        full_key = f"{self.organization}/{self.application}/{key}"
        return full_key in self._storage

    def sync(self):
        pass


@pytest.fixture(autouse=True, scope="session")
def mock_qsettings_global():
    """
    Globally patches QSettings for the entire test session.
    Protects user's real settings from being overwritten by tests.
    """
    from unittest.mock import patch

    # Modules import QSettings inside functions so they pick up the patch.
    patcher = patch("PySide6.QtCore.QSettings", MockQSettings)
    mock_class = patcher.start()

    yield mock_class

    patcher.stop()


@pytest.fixture
def features():
    """Attribute universe shared by the store fixtures."""
    return {
        "wheelchair": Attribute("wheelchair", "Wheelchair access"),
        "24hr": Attribute("24hr", "Open 24 Hours"),
        "wifi": Attribute("wifi", "Free Wi-Fi"),
    }


@pytest.fixture
def stores(features):
    """
    Four locations around Brisbane. Only store 3 is open 24 hours; store 4
    lies well outside a zoom 11 viewport centered on the city.
    """
    return [
        Location(
            "1",
            LatLng(-27.47, 153.02),
            AttributeSet(features["wheelchair"]),
            {"title": "Queen Street", "address": "1 Queen St"},
        ),
        Location(
            "2",
            LatLng(-27.60, 153.20),
            AttributeSet(features["wifi"]),
            {"title": "Logan", "address": "2 Logan Rd"},
        ),
        Location(
            "3",
            LatLng(-27.48, 153.03),
            AttributeSet(features["wheelchair"], features["24hr"]),
            {"title": "South Bank", "address": "3 Grey St"},
        ),
        Location(
            "4",
            LatLng(-26.65, 153.07),
            AttributeSet(features["wifi"]),
            {"title": "Sunshine Coast", "address": "4 Beach Rd"},
        ),
    ]


@pytest.fixture
def brisbane():
    return LatLng(-27.47, 153.02)
