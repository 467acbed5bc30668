"""Value generation executors - one per generated property."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from row_meta.sequencing.generators import Generator


@runtime_checkable
class ValueGenerationExecutor(Protocol):
    """Produces ``{property_name: value}`` for one property."""

    def execute(self, connection: Any, entity: Any) -> dict[str, Any]: ...

    def is_deferred(self) -> bool: ...


@dataclass(frozen=True)
class ColumnValueGeneratorExecutor:
    """Runs a generator for a column-backed field."""

    property_name: str
    generator: Generator

    def execute(self, connection: Any, entity: Any) -> dict[str, Any]:
        return {self.property_name: self.generator.generate(connection, entity)}

    def is_deferred(self) -> bool:
        return self.generator.is_post_insert_generator()


@dataclass(frozen=True)
class AssociationValueGeneratorExecutor:
    """Placeholder for a primary-key to-one association.

    The value is the associated entity's own identifier, so nothing is
    generated locally.
    """

    property_name: str

    def execute(self, connection: Any, entity: Any) -> dict[str, Any]:
        return {}

    def is_deferred(self) -> bool:
        return False
