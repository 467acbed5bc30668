"""Event names and the synchronous event manager.

Listeners are plain callables registered per event name and invoked in
registration order. There is no global registry: every factory is wired
with its own EventManager.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from row_meta.mapping.context import ClassMetadataBuildingContext
    from row_meta.mapping.metadata import ClassMetadata


class Events:
    """Event names dispatched by the metadata layer and entity lifecycle."""

    LOAD_CLASS_METADATA = "loadClassMetadata"
    ON_CLASS_METADATA_NOT_FOUND = "onClassMetadataNotFound"

    PRE_PERSIST = "pre_persist"
    POST_PERSIST = "post_persist"
    PRE_UPDATE = "pre_update"
    POST_UPDATE = "post_update"
    PRE_REMOVE = "pre_remove"
    POST_REMOVE = "post_remove"
    POST_LOAD = "post_load"
    PRE_FLUSH = "pre_flush"

    LIFECYCLE = frozenset(
        {
            PRE_PERSIST,
            POST_PERSIST,
            PRE_UPDATE,
            POST_UPDATE,
            PRE_REMOVE,
            POST_REMOVE,
            POST_LOAD,
            PRE_FLUSH,
        }
    )


@dataclass
class LoadClassMetadataEventArgs:
    """Payload of ``loadClassMetadata``; the metadata is still mutable."""

    class_metadata: ClassMetadata
    entity_manager: Any = None


@dataclass
class OnClassMetadataNotFoundEventArgs:
    """Payload of ``onClassMetadataNotFound``.

    A listener may assign ``found_metadata`` to supply replacement metadata.
    """

    class_name: str
    building_context: ClassMetadataBuildingContext
    entity_manager: Any = None
    found_metadata: ClassMetadata | None = field(default=None)


Listener = Callable[[Any], None]


class EventManager:
    """Ordered, synchronous event dispatcher."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def add_listener(self, events: str | Iterable[str], listener: Listener) -> None:
        """Register ``listener`` for one or more event names."""
        names = [events] if isinstance(events, str) else list(events)
        for name in names:
            self._listeners.setdefault(name, []).append(listener)

    def remove_listener(self, events: str | Iterable[str], listener: Listener) -> None:
        names = [events] if isinstance(events, str) else list(events)
        for name in names:
            registered = self._listeners.get(name, [])
            if listener in registered:
                registered.remove(listener)

    def has_listeners(self, event: str) -> bool:
        return bool(self._listeners.get(event))

    def get_listeners(self, event: str) -> list[Listener]:
        return list(self._listeners.get(event, []))

    def dispatch(self, event: str, args: Any) -> None:
        """Invoke every listener of ``event`` with ``args``, in order."""
        for listener in self.get_listeners(event):
            listener(args)
