"""Unit tests for Attribute and AttributeSet."""

import pytest

from storefinder.core.attributes import Attribute, AttributeSet


@pytest.fixture
def hours():
    return Attribute("24hour", "Open 24 Hours")


@pytest.fixture
def wifi():
    return Attribute("wifi", "Free Wi-Fi")


@pytest.fixture
def parking():
    return Attribute("parking", "Parking")


class TestAttribute:
    def test_equality_by_id(self):
        assert Attribute("a", "First") == Attribute("a", "Renamed")
        assert Attribute("a", "Same") != Attribute("b", "Same")

    def test_is_immutable(self, hours):
        with pytest.raises(AttributeError):
            hours.id = "other"

    def test_str_is_display_name(self, hours):
        assert str(hours) == "Open 24 Hours"


class TestAttributeSet:
    def test_insertion_order(self, hours, wifi, parking):
        attrs = AttributeSet(wifi, hours, parking)
        assert attrs.ids() == ["wifi", "24hour", "parking"]

    def test_add_none_is_noop(self, hours):
        attrs = AttributeSet(hours)
        attrs.add(None)
        assert len(attrs) == 1

    def test_readd_replaces_in_original_slot(self, hours, wifi):
        attrs = AttributeSet(hours, wifi)
        renamed = Attribute("24hour", "Always open")

        attrs.add(renamed)

        assert attrs.ids() == ["24hour", "wifi"]
        assert attrs.get_by_id("24hour").display_name == "Always open"
        assert len(attrs) == 2

    def test_remove_absent_is_noop(self, hours, wifi):
        attrs = AttributeSet(hours)
        attrs.remove(wifi)
        attrs.remove(None)
        assert attrs.ids() == ["24hour"]

    def test_remove_skips_slot_in_list(self, hours, wifi, parking):
        attrs = AttributeSet(hours, wifi, parking)
        attrs.remove(wifi)

        assert attrs.as_list() == [hours, parking]
        assert None not in attrs.as_list()
        assert not attrs.contains(wifi)
        assert attrs.get_by_id("wifi") is None

    def test_removed_then_readded_goes_to_end(self, hours, wifi):
        attrs = AttributeSet(hours, wifi)
        attrs.remove(hours)
        attrs.add(hours)
        assert attrs.ids() == ["wifi", "24hour"]

    def test_toggle(self, hours):
        attrs = AttributeSet()
        attrs.toggle(hours)
        assert attrs.contains(hours)
        attrs.toggle(hours)
        assert not attrs.contains(hours)

    def test_contains_tracks_add_remove_sequence(self, hours, wifi, parking):
        attrs = AttributeSet()
        expected = set()
        operations = [
            ("add", hours),
            ("add", wifi),
            ("toggle", hours),
            ("remove", parking),
            ("toggle", parking),
            ("add", hours),
            ("remove", wifi),
            ("toggle", parking),
        ]
        for op, attribute in operations:
            getattr(attrs, op)(attribute)
            if op == "add":
                expected.add(attribute.id)
            elif op == "remove":
                expected.discard(attribute.id)
            else:
                expected ^= {attribute.id}
            for candidate in (hours, wifi, parking):
                assert attrs.contains(candidate) == (candidate.id in expected)
            assert None not in attrs.as_list()

    def test_as_list_is_snapshot(self, hours, wifi):
        attrs = AttributeSet(hours)
        snapshot = attrs.as_list()
        attrs.add(wifi)
        assert snapshot == [hours]

    def test_iteration_survives_mutation(self, hours, wifi, parking):
        attrs = AttributeSet(hours, wifi, parking)
        seen = []
        for attribute in attrs:
            attrs.remove(attribute)
            seen.append(attribute.id)
        assert seen == ["24hour", "wifi", "parking"]
        assert len(attrs) == 0

    def test_copy_is_independent(self, hours, wifi):
        attrs = AttributeSet(hours)
        clone = attrs.copy()
        clone.add(wifi)
        assert attrs.ids() == ["24hour"]
        assert clone.ids() == ["24hour", "wifi"]

    def test_equality_by_ordered_ids(self, hours, wifi):
        assert AttributeSet(hours, wifi) == AttributeSet(hours, wifi)
        assert AttributeSet(hours, wifi) != AttributeSet(wifi, hours)
        assert AttributeSet() == AttributeSet.NONE

    def test_dunder_membership(self, hours, wifi):
        attrs = AttributeSet(hours)
        assert hours in attrs
        assert wifi not in attrs
        assert "24hour" not in attrs
        assert bool(attrs)
        assert not AttributeSet()

    def test_none_is_immutable(self, hours):
        with pytest.raises(TypeError):
            AttributeSet.NONE.add(hours)
        assert len(AttributeSet.NONE) == 0

    def test_from_iterable(self, hours, wifi):
        assert AttributeSet.from_iterable(iter([hours, wifi])).ids() == ["24hour", "wifi"]
