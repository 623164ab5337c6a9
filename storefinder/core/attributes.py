"""
Attribute Models.

An Attribute is a filterable characteristic a location may have
(e.g. "Open 24 Hours"). AttributeSet is a mutable, ordered collection of
Attributes, unique by id.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional


@dataclass(frozen=True)
class Attribute:
    """
    Representation of an attribute of a location.

    Attributes:
        id: Unique identifier for this attribute.
        display_name: Human readable name. May contain markup.
    """

    id: str
    display_name: str = field(compare=False)

    def __str__(self) -> str:
        return self.display_name


class AttributeSet:
    """
    A mutable, ordered set of Attributes.

    Membership and lookup by id are O(1) through an id -> slot index.
    Removing an attribute leaves an empty slot behind instead of compacting
    the backing list, so slot positions held by the index stay valid.
    Replacing an existing id keeps its original slot.

    Example:
        >>> hours = Attribute("24hour", "Open 24 Hours")
        >>> wifi = Attribute("wifi", "Free Wi-Fi")
        >>> attrs = AttributeSet(hours, wifi)
        >>> attrs.contains(hours)
        True
    """

    NONE: "AttributeSet"

    def __init__(self, *attributes: Attribute) -> None:
        """
        Initializes the set.

        Args:
            *attributes: The initial attributes to add to the set.
        """
        self._slots: List[Optional[Attribute]] = []
        self._index: Dict[str, int] = {}
        self._frozen = False
        for attribute in attributes:
            self.add(attribute)

    @classmethod
    def from_iterable(cls, attributes: Iterable[Attribute]) -> "AttributeSet":
        """Builds a set from any iterable of attributes."""
        return cls(*attributes)

    def _check_mutable(self) -> None:
        if self._frozen:
            raise TypeError("AttributeSet.NONE is immutable")

    def add(self, attribute: Optional[Attribute]) -> None:
        """
        Adds the given attribute to the set.

        An attribute whose id is already present replaces the old instance
        in place. Passing None is a no-op.

        Args:
            attribute: The attribute to add.
        """
        if attribute is None:
            return
        self._check_mutable()
        slot = self._index.get(attribute.id)
        if slot is not None:
            self._slots[slot] = attribute
            return
        self._slots.append(attribute)
        self._index[attribute.id] = len(self._slots) - 1

    def remove(self, attribute: Optional[Attribute]) -> None:
        """
        Removes the given attribute from the set. No-op if absent.

        Args:
            attribute: The attribute to remove.
        """
        if attribute is None or not self.contains(attribute):
            return
        self._check_mutable()
        slot = self._index.pop(attribute.id)
        self._slots[slot] = None

    def toggle(self, attribute: Attribute) -> None:
        """
        Adds the attribute if absent, removes it if present.

        Args:
            attribute: The attribute to toggle.
        """
        if self.contains(attribute):
            self.remove(attribute)
        else:
            self.add(attribute)

    def contains(self, attribute: Attribute) -> bool:
        """
        Checks if the set contains an attribute with the same id.

        Args:
            attribute: The attribute to check.

        Returns:
            bool: True if the set contains the given attribute.
        """
        return attribute.id in self._index

    def get_by_id(self, attribute_id: str) -> Optional[Attribute]:
        """
        Gets an attribute by its id.

        Args:
            attribute_id: The id of the attribute.

        Returns:
            Optional[Attribute]: The attribute, or None if not in the set.
        """
        slot = self._index.get(attribute_id)
        if slot is None:
            return None
        return self._slots[slot]

    def as_list(self) -> List[Attribute]:
        """
        Gets a snapshot of the attributes in insertion order.

        Returns:
            List[Attribute]: The live attributes, removed slots skipped.
        """
        return [attribute for attribute in self._slots if attribute is not None]

    def ids(self) -> List[str]:
        """Gets the ids of the attributes in insertion order."""
        return [attribute.id for attribute in self.as_list()]

    def copy(self) -> "AttributeSet":
        """Returns an independent, mutable copy of this set."""
        return AttributeSet(*self.as_list())

    def __contains__(self, attribute: object) -> bool:
        return isinstance(attribute, Attribute) and self.contains(attribute)

    def __iter__(self) -> Iterator[Attribute]:
        return iter(self.as_list())

    def __len__(self) -> int:
        return len(self._index)

    def __bool__(self) -> bool:
        return bool(self._index)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AttributeSet):
            return NotImplemented
        return self.ids() == other.ids()

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        return f"AttributeSet({', '.join(self.ids())})"


AttributeSet.NONE = AttributeSet()
AttributeSet.NONE._frozen = True
