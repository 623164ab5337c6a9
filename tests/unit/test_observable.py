"""Unit tests for ObservableStore."""

from unittest.mock import MagicMock, call

import pytest

from storefinder.core.attributes import Attribute, AttributeSet
from storefinder.core.observable import ObservableStore


@pytest.fixture
def store(qapp):
    return ObservableStore()


class TestSetAndNotify:
    def test_set_notifies_listeners(self, store):
        listener = MagicMock()
        store.add_listener("zoom", listener)

        assert store.set("zoom", 5) is True

        listener.assert_called_once_with(5)
        assert store.get("zoom") == 5

    def test_equal_value_never_notifies(self, store):
        listener = MagicMock()
        store.set("zoom", 5)
        store.add_listener("zoom", listener)

        assert store.set("zoom", 5) is False
        listener.assert_not_called()

    def test_equal_attribute_sets_do_not_notify(self, store):
        listener = MagicMock()
        hours = Attribute("24hr", "Open 24 Hours")
        store.set("featureFilter", AttributeSet(hours))
        store.add_listener("featureFilter", listener)

        store.set("featureFilter", AttributeSet(hours))

        listener.assert_not_called()

    def test_setting_none_first_time_notifies(self, store):
        listener = MagicMock()
        store.add_listener("selectedLocation", listener)
        assert store.set("selectedLocation", None) is True
        listener.assert_called_once_with(None)

    def test_get_default(self, store):
        assert store.get("missing") is None
        assert store.get("missing", 3) == 3
        assert not store.has("missing")

    def test_handler_runs_before_listeners(self, qapp):
        order = []
        store = ObservableStore({"zoom": lambda value: order.append(("handler", value))})
        store.add_listener("zoom", lambda value: order.append(("first", value)))
        store.add_listener("zoom", lambda value: order.append(("second", value)))

        store.set("zoom", 3)

        assert order == [("handler", 3), ("first", 3), ("second", 3)]

    def test_register_handler_replaces(self, store):
        old, new = MagicMock(), MagicMock()
        store.register_handler("zoom", old)
        store.register_handler("zoom", new)
        store.set("zoom", 1)
        old.assert_not_called()
        new.assert_called_once_with(1)

    def test_notify_forces_dispatch(self, store):
        listener = MagicMock()
        store.set("selectedLocation", "a")
        store.add_listener("selectedLocation", listener)

        store.notify("selectedLocation")

        listener.assert_called_once_with("a")

    def test_property_changed_signal(self, store, qtbot):
        with qtbot.waitSignal(store.property_changed, timeout=1000) as blocker:
            store.set("zoom", 7)
        assert blocker.args == ["zoom", 7]


class TestListeners:
    def test_once_listener_fires_once(self, store):
        listener = MagicMock()
        store.add_listener_once("locations", listener)

        store.set("locations", [1])
        store.set("locations", [2])

        listener.assert_called_once_with([1])
        assert store.listener_count("locations") == 0

    def test_remove_listener_is_idempotent(self, store):
        listener = MagicMock()
        handle = store.add_listener("zoom", listener)
        store.remove_listener(handle)
        store.remove_listener(handle)
        store.remove_listener(None)

        store.set("zoom", 1)

        listener.assert_not_called()
        assert not handle.active

    def test_listener_removed_during_dispatch_is_skipped(self, store):
        second = MagicMock()
        handles = {}

        def first(value):
            store.remove_listener(handles["second"])

        store.add_listener("zoom", first)
        handles["second"] = store.add_listener("zoom", second)

        store.set("zoom", 1)

        second.assert_not_called()


class TestBinding:
    def test_bind_mirrors_later_changes(self, qapp):
        source, target = ObservableStore(), ObservableStore()
        listener = MagicMock()
        target.add_listener("featureFilter", listener)

        target.bind("featureFilter", source)
        assert not target.has("featureFilter")

        source.set("featureFilter", "a")
        source.set("featureFilter", "b")

        assert target.get("featureFilter") == "b"
        assert listener.call_args_list == [call("a"), call("b")]

    def test_bind_copies_current_value(self, qapp):
        source, target = ObservableStore(), ObservableStore()
        source.set("selectedLocation", "x")
        target.bind("selectedLocation", source)
        assert target.get("selectedLocation") == "x"

    def test_bind_with_other_key(self, qapp):
        source, target = ObservableStore(), ObservableStore()
        target.bind("mirror", source, "original")
        source.set("original", 9)
        assert target.get("mirror") == 9

    def test_unbind_stops_forwarding(self, qapp):
        source, target = ObservableStore(), ObservableStore()
        target.bind("zoom", source)
        source.set("zoom", 1)

        target.unbind("zoom")
        source.set("zoom", 2)

        assert target.get("zoom") == 1
        assert not target.is_bound("zoom")
        assert source.listener_count("zoom") == 0

    def test_rebind_replaces_previous_binding(self, qapp):
        first, second, target = ObservableStore(), ObservableStore(), ObservableStore()
        target.bind("zoom", first)
        target.bind("zoom", second)

        first.set("zoom", 1)
        assert not target.has("zoom")
        second.set("zoom", 2)
        assert target.get("zoom") == 2
        assert first.listener_count("zoom") == 0

    def test_unbind_all(self, qapp):
        source, target = ObservableStore(), ObservableStore()
        target.bind("a", source)
        target.bind("b", source)
        target.unbind_all()
        assert source.listener_count("a") == 0
        assert source.listener_count("b") == 0
