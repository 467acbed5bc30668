"""Tools built on top of the metadata layer."""

from __future__ import annotations

from row_meta.tools.attach_entity_listeners import AttachEntityListenersListener

__all__ = ["AttachEntityListenersListener"]
