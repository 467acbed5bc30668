"""Value generation plans.

Frozen dataclasses compiled once per class by the plan builder. A plan is
the only entry point consumers use to obtain generated identifier values:
``execute_immediate`` before the INSERT, ``execute_deferred`` after it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from row_meta.sequencing.executor import ValueGenerationExecutor

if TYPE_CHECKING:
    from row_meta.mapping.metadata import ClassMetadata


def _assign(entity: Any, values: dict[str, Any]) -> None:
    for property_name, value in values.items():
        setattr(entity, property_name, value)


@dataclass(frozen=True)
class NoopValueGenerationPlan:
    """No generated values; the INSERT needs no pre or post processing."""

    def execute_immediate(self, connection: Any, entity: Any) -> None:
        return None

    def execute_deferred(self, connection: Any, entity: Any) -> None:
        return None

    def contains_deferred(self) -> bool:
        return False

    @property
    def executors(self) -> list[ValueGenerationExecutor]:
        return []


@dataclass(frozen=True)
class SingleValueGenerationPlan:
    """Exactly one generated value."""

    class_metadata: ClassMetadata = field(repr=False)
    executor: ValueGenerationExecutor

    def execute_immediate(self, connection: Any, entity: Any) -> None:
        if not self.executor.is_deferred():
            _assign(entity, self.executor.execute(connection, entity))

    def execute_deferred(self, connection: Any, entity: Any) -> None:
        if self.executor.is_deferred():
            _assign(entity, self.executor.execute(connection, entity))

    def contains_deferred(self) -> bool:
        return self.executor.is_deferred()

    @property
    def executors(self) -> list[ValueGenerationExecutor]:
        return [self.executor]


@dataclass(frozen=True)
class CompositeValueGenerationPlan:
    """Several generated values, executed in discovery order."""

    class_metadata: ClassMetadata = field(repr=False)
    executors: list[ValueGenerationExecutor] = field(default_factory=list)

    def execute_immediate(self, connection: Any, entity: Any) -> None:
        for executor in self.executors:
            if not executor.is_deferred():
                _assign(entity, executor.execute(connection, entity))

    def execute_deferred(self, connection: Any, entity: Any) -> None:
        for executor in self.executors:
            if executor.is_deferred():
                _assign(entity, executor.execute(connection, entity))

    def contains_deferred(self) -> bool:
        return any(executor.is_deferred() for executor in self.executors)


ValueGenerationPlan = (
    NoopValueGenerationPlan | SingleValueGenerationPlan | CompositeValueGenerationPlan
)
