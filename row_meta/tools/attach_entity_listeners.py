"""Attach entity listeners to classes at metadata load time."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from row_meta.core.events import EventManager, Events

if TYPE_CHECKING:
    from row_meta.core.events import LoadClassMetadataEventArgs

log = logging.getLogger(__name__)


class AttachEntityListenersListener:
    """Registers entity listeners on classes that do not declare them.

    Configure entries with ``add_entity_listener()`` and subscribe the
    instance to ``loadClassMetadata`` with ``subscribe()``. Entries are
    unique per entity, event, listener class and method.

    Example:
        listener = AttachEntityListenersListener()
        listener.add_entity_listener("app.User", "app.Audit", Events.POST_LOAD, "on_load")
        listener.subscribe(event_manager)
    """

    def __init__(self) -> None:
        self._entity_listeners: dict[str, list[tuple[str, str, str]]] = {}

    def add_entity_listener(
        self,
        entity_class: str,
        listener_class: str,
        event_name: str,
        listener_callback: str | None = None,
    ) -> None:
        """Configure a listener; the method defaults to the event name."""
        entry = (event_name, listener_class, listener_callback or event_name)
        entries = self._entity_listeners.setdefault(entity_class, [])
        if entry not in entries:
            entries.append(entry)

    def subscribe(self, event_manager: EventManager) -> None:
        event_manager.add_listener(Events.LOAD_CLASS_METADATA, self.load_class_metadata)

    def load_class_metadata(self, event_args: LoadClassMetadataEventArgs) -> None:
        metadata = event_args.class_metadata
        entries = self._entity_listeners.get(metadata.class_name)
        if not entries:
            return

        for event_name, listener_class, method in entries:
            if metadata.has_entity_listener(event_name, listener_class, method):
                continue
            log.debug(
                "Attaching %s.%s to %s on %s",
                listener_class,
                method,
                metadata.class_name,
                event_name,
            )
            metadata.add_entity_listener(event_name, listener_class, method)
