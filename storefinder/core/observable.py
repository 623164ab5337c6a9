"""
Observable Property Store.

A key/value property container with change notification and one-way
binding between stores. Controllers keep their shared state in stores so
the map view and the side panel stay consistent without referencing each
other's internals.

Notification for a key is dispatched, in order, to:
1. the owner's handler registered for that key,
2. external listeners, in registration order,
3. the Qt ``property_changed`` signal.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

from PySide6.QtCore import QObject, Signal

logger = logging.getLogger(__name__)

Listener = Callable[[Any], None]

_MISSING = object()


@dataclass(eq=False)
class ListenerHandle:
    """
    Registration token returned by ObservableStore.add_listener.

    Attributes:
        key: The property the listener watches.
        callback: Called with the new value.
        once: Remove the listener after its first notification.
        active: False once removed.
    """

    key: str
    callback: Listener
    once: bool = False
    active: bool = True


class ObservableStore(QObject):
    """
    Property container that notifies on change.

    Setting a key to a value equal to its current value does nothing, which
    keeps redundant refresh calls from cascading into notification storms.

    Signals:
        property_changed: Emitted after listeners ran.
                          Args: (key: str, value: object)
    """

    property_changed = Signal(str, object)

    def __init__(
        self,
        handlers: Optional[Mapping[str, Listener]] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        """
        Initializes the store.

        Args:
            handlers: Owner handlers by property name. Each is called with the
                new value before any external listener.
            parent: Optional parent QObject.
        """
        super().__init__(parent)
        self._values: Dict[str, Any] = {}
        self._handlers: Dict[str, Listener] = dict(handlers or {})
        self._listeners: Dict[str, List[ListenerHandle]] = {}
        self._bindings: Dict[str, ListenerHandle] = {}
        self._binding_sources: Dict[str, "ObservableStore"] = {}

    def register_handler(self, key: str, handler: Listener) -> None:
        """
        Sets the owner handler for a property, replacing any earlier one.

        Args:
            key: Property name.
            handler: Called with the new value.
        """
        self._handlers[key] = handler

    def get(self, key: str, default: Any = None) -> Any:
        """
        Gets the current value of a property.

        Args:
            key: Property name.
            default: Returned when the property was never set.
        """
        return self._values.get(key, default)

    def has(self, key: str) -> bool:
        return key in self._values

    def set(self, key: str, value: Any) -> bool:
        """
        Assigns a property and notifies if the value changed.

        Args:
            key: Property name.
            value: New value.

        Returns:
            bool: True if listeners were notified.
        """
        current = self._values.get(key, _MISSING)
        if current is not _MISSING and (current is value or current == value):
            return False
        self._values[key] = value
        self.notify(key)
        return True

    def notify(self, key: str) -> None:
        """
        Dispatches a change notification for a key with its current value.

        Used directly when a caller must re-trigger side effects for an
        unchanged value, such as reselecting the same location.

        Args:
            key: Property name.
        """
        value = self._values.get(key)
        handler = self._handlers.get(key)
        if handler is not None:
            handler(value)

        for handle in list(self._listeners.get(key, ())):
            if not handle.active:
                continue
            if handle.once:
                self.remove_listener(handle)
            handle.callback(value)

        self.property_changed.emit(key, value)

    def add_listener(self, key: str, callback: Listener) -> ListenerHandle:
        """
        Registers an external listener for a property.

        Args:
            key: Property name.
            callback: Called with the new value on every change.

        Returns:
            ListenerHandle: Token for remove_listener.
        """
        handle = ListenerHandle(key=key, callback=callback)
        self._listeners.setdefault(key, []).append(handle)
        return handle

    def add_listener_once(self, key: str, callback: Listener) -> ListenerHandle:
        """
        Registers a listener that is removed after its first notification.

        Args:
            key: Property name.
            callback: Called with the new value on the next change only.

        Returns:
            ListenerHandle: Token for remove_listener.
        """
        handle = ListenerHandle(key=key, callback=callback, once=True)
        self._listeners.setdefault(key, []).append(handle)
        return handle

    def remove_listener(self, handle: Optional[ListenerHandle]) -> None:
        """
        Removes a listener. Removing twice or removing None is a no-op.

        Args:
            handle: Token returned by add_listener or add_listener_once.
        """
        if handle is None or not handle.active:
            return
        handle.active = False
        listeners = self._listeners.get(handle.key)
        if listeners and handle in listeners:
            listeners.remove(handle)

    def listener_count(self, key: str) -> int:
        """Number of active external listeners for a property."""
        return len(self._listeners.get(key, ()))

    def bind(
        self, key: str, source: "ObservableStore", source_key: Optional[str] = None
    ) -> ListenerHandle:
        """
        Makes a property of this store mirror a property of another store.

        The current source value is copied immediately when the source has
        one; every later change of the source is forwarded with set().
        Binding an already bound key replaces the earlier binding.

        Args:
            key: Property name in this store.
            source: Store to mirror.
            source_key: Property name in the source. Defaults to key.

        Returns:
            ListenerHandle: The forwarding listener registered on the source.
        """
        source_key = source_key or key
        self.unbind(key)

        def forward(value: Any) -> None:
            self.set(key, value)

        handle = source.add_listener(source_key, forward)
        self._bindings[key] = handle
        self._binding_sources[key] = source
        if source.has(source_key):
            self.set(key, source.get(source_key))
        logger.debug(f"Bound '{key}' to '{source_key}' of {source.objectName() or source}")
        return handle

    def unbind(self, key: str) -> None:
        """
        Removes the binding of a property. The last mirrored value is kept.

        Args:
            key: Property name in this store.
        """
        handle = self._bindings.pop(key, None)
        source = self._binding_sources.pop(key, None)
        if handle is not None and source is not None:
            source.remove_listener(handle)

    def unbind_all(self) -> None:
        """Removes every binding of this store."""
        for key in list(self._bindings):
            self.unbind(key)

    def is_bound(self, key: str) -> bool:
        return key in self._bindings
