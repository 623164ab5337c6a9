"""
Location Data Model.

Represents a single physical location (a store, club, venue) that can be
shown on the map and in the side panel.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from storefinder.core.attributes import Attribute, AttributeSet
from storefinder.core.geo import LatLng, haversine_km

if TYPE_CHECKING:
    from storefinder.core.map_platform import MarkerHandle

logger = logging.getLogger(__name__)

# Detail fields rendered into the info content, in display order.
INFO_FIELDS = ("title", "address", "phone", "misc", "web")


@dataclass
class ListItem:
    """
    A rendered entry of the side panel list.

    Attributes:
        element_id: Stable element id, ``store-<location id>``.
        location_id: Id of the Location the item renders.
        content: Rendered markup, shared with the Location's info content.
        highlighted: Whether the item is the current selection.
    """

    element_id: str
    location_id: str
    content: str
    highlighted: bool = False

    def to_html(self) -> str:
        css = "store highlighted" if self.highlighted else "store"
        return f'<li class="{css}" id="{self.element_id}">{self.content}</li>'


# List items are cached per Location id for the lifetime of the process so a
# location that reappears after a refresh reuses its item.
_list_item_cache: Dict[str, ListItem] = {}


def clear_list_item_cache() -> None:
    """Drops every cached list item."""
    _list_item_cache.clear()


@dataclass(eq=False)
class Location:
    """
    A location with coordinates, attributes and display details.

    Identity and coordinates never change after creation. The marker
    back-reference is assigned and cleared by the ViewController; the
    Location does not own the marker.

    Attributes:
        id: Globally unique, stable identifier.
        coordinates: Position of the location.
        attributes: Attributes for filtering. Defaults to AttributeSet.NONE.
        details: Display properties such as title, address, phone.
    """

    id: str
    coordinates: LatLng
    attributes: AttributeSet = field(default_factory=lambda: AttributeSet.NONE)
    details: Dict[str, Any] = field(default_factory=dict)
    marker: Optional["MarkerHandle"] = field(default=None, repr=False)
    _content: Optional[str] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.attributes is None:
            self.attributes = AttributeSet.NONE
        if self.details is None:
            self.details = {}

    def has_feature(self, attribute: Attribute) -> bool:
        """
        Checks whether this location has the given attribute.

        Args:
            attribute: The attribute to check for.

        Returns:
            bool: True if the location has the attribute.
        """
        return self.attributes.contains(attribute)

    def has_all_features(self, attributes: Optional[AttributeSet]) -> bool:
        """
        Checks whether this location has every attribute of a set.

        An empty or missing set always matches.

        Args:
            attributes: The required attributes.

        Returns:
            bool: True if every required attribute is present.
        """
        if not attributes:
            return True
        return all(self.has_feature(attribute) for attribute in attributes.as_list())

    def distance_to(self, point: LatLng) -> float:
        """
        Gets the great-circle distance to a point.

        Args:
            point: The point to measure to.

        Returns:
            float: Distance in kilometers.
        """
        return haversine_km(self.coordinates, point)

    def _fields_html(self, fields: List[str]) -> str:
        html = []
        for prop in fields:
            value = self.details.get(prop)
            if value:
                html.append(f'<div class="{prop}">{value}</div>')
        return "".join(html)

    def _features_html(self) -> str:
        html = ['<ul class="features">']
        for attribute in self.attributes.as_list():
            html.append(f"<li>{attribute.display_name}</li>")
        html.append("</ul>")
        return "".join(html)

    def get_info_content(self) -> str:
        """
        Gets the markup shown in the detail surface for this location.

        Rendered once from ``details`` and ``attributes`` and cached.
        Detail values are inserted as markup, unescaped.

        Returns:
            str: The rendered markup.
        """
        if self._content is None:
            self._content = (
                '<div class="store">'
                + self._fields_html(list(INFO_FIELDS))
                + self._features_html()
                + "</div>"
            )
        return self._content

    def get_list_item_content(self) -> str:
        """Gets the markup shown in the side panel for this location."""
        return self.get_info_content()

    def get_list_item(self) -> ListItem:
        """
        Gets the side panel item for this location.

        Items are cached by location id across refreshes.

        Returns:
            ListItem: The cached or newly rendered item.
        """
        item = _list_item_cache.get(self.id)
        if item is None:
            item = ListItem(
                element_id=f"store-{self.id}",
                location_id=self.id,
                content=self.get_list_item_content(),
            )
            _list_item_cache[self.id] = item
        return item

    @property
    def title(self) -> str:
        return str(self.details.get("title", ""))

    def __repr__(self) -> str:
        return f"Location(id={self.id!r}, coordinates={self.coordinates!r})"
