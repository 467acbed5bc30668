"""Mapping driver protocol.

Drivers read annotations, files or a database schema and turn them into an
unvalidated ClassMetadata draft. The factory completes and validates it.

A driver may also expose ``is_transient(class_name) -> bool``; when it does
not, an ancestor counts as mapped when it appears in ``get_all_class_names()``.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from row_meta.mapping.context import ClassMetadataBuildingContext
    from row_meta.mapping.metadata import ClassMetadata


@runtime_checkable
class MappingDriver(Protocol):
    """Raw mapping driver protocol."""

    def load_metadata_for_class(
        self,
        class_name: str,
        parent: ClassMetadata | None,
        building_context: ClassMetadataBuildingContext,
    ) -> ClassMetadata:
        """Build a metadata draft.

        Raises:
            ClassNotFoundError: If the driver cannot describe ``class_name``.
        """
        ...

    def get_all_class_names(self) -> Sequence[str]:
        """Every class name this driver can describe."""
        ...
