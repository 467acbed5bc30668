"""Per-load building context and deferred (second pass) steps."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from row_meta.core.exceptions import SecondPassError
from row_meta.core.naming import DefaultNamingStrategy, NamingStrategy

if TYPE_CHECKING:
    from row_meta.core.reflection import ReflectionService
    from row_meta.mapping.base import AbstractClassMetadataFactory


@runtime_checkable
class SecondPass(Protocol):
    """A deferred step run once every class of the load has its metadata."""

    def process(self, context: ClassMetadataBuildingContext) -> None: ...


class ClassMetadataBuildingContext:
    """Scope object of one top-level ``get_metadata_for`` call tree.

    Carries the factory, the reflection service and the naming strategy,
    and queues second pass steps. ``validate()`` runs the queue exactly once;
    while it runs no further steps may be added.

    Args:
        factory: The factory driving the load.
        reflection_service: Reflection capability for live classes.
        naming_strategy: Naming strategy; defaults to DefaultNamingStrategy.
    """

    def __init__(
        self,
        factory: AbstractClassMetadataFactory,
        reflection_service: ReflectionService,
        naming_strategy: NamingStrategy | None = None,
    ) -> None:
        self.factory = factory
        self.reflection_service = reflection_service
        self.naming_strategy: NamingStrategy = naming_strategy or DefaultNamingStrategy()
        self._second_passes: list[SecondPass | Callable[[ClassMetadataBuildingContext], None]] = []
        self._in_second_pass = False
        self._validated = False

    def add_second_pass(
        self, second_pass: SecondPass | Callable[[ClassMetadataBuildingContext], None]
    ) -> None:
        """Queue a deferred step; rejected once validation has started."""
        if self._in_second_pass or self._validated:
            raise SecondPassError(
                "Cannot register a second pass step once the second pass has started"
            )
        self._second_passes.append(second_pass)

    def is_in_second_pass(self) -> bool:
        return self._in_second_pass

    @property
    def pending_second_passes(self) -> int:
        return len(self._second_passes)

    def validate(self) -> None:
        """Run every queued step once, in registration order."""
        if self._in_second_pass:
            raise SecondPassError("Re-entrant validation of a building context is not allowed")
        if self._validated:
            raise SecondPassError("Building context has already been validated")

        self._in_second_pass = True
        try:
            for second_pass in self._second_passes:
                if isinstance(second_pass, SecondPass):
                    second_pass.process(self)
                else:
                    second_pass(self)
        finally:
            self._in_second_pass = False
            self._validated = True
