"""Identifier value generators used at insert time.

Generators pull values through a narrow connection protocol; statement
rendering and execution stay with the caller.
"""

from __future__ import annotations

import uuid
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class GeneratorConnection(Protocol):
    """Connection capabilities generators rely on."""

    def next_sequence_value(self, sequence_name: str) -> int:
        """Fetch the next value of a database sequence."""
        ...

    def last_insert_id(self, sequence_name: str | None = None) -> Any:
        """Identifier produced by the last INSERT."""
        ...


@runtime_checkable
class Generator(Protocol):
    """Value generator protocol."""

    def generate(self, connection: Any, entity: Any) -> Any: ...

    def is_post_insert_generator(self) -> bool: ...


class SequenceGenerator:
    """Pre-insert generator drawing blocks of ``allocation_size`` values.

    Args:
        sequence_name: Database sequence to draw from.
        allocation_size: Values reserved per sequence fetch.
    """

    def __init__(self, sequence_name: str, allocation_size: int = 1) -> None:
        self.sequence_name = sequence_name
        self.allocation_size = allocation_size
        self._next_value = 0
        self._max_value: int | None = None

    def generate(self, connection: GeneratorConnection, entity: Any) -> int:
        if self._max_value is None or self._next_value == self._max_value:
            self._next_value = int(connection.next_sequence_value(self.sequence_name))
            self._max_value = self._next_value + self.allocation_size
        value = self._next_value
        self._next_value += 1
        return value

    def is_post_insert_generator(self) -> bool:
        return False


class IdentityGenerator:
    """Post-insert generator reading the database-assigned identity."""

    def __init__(self, sequence_name: str | None = None) -> None:
        self.sequence_name = sequence_name

    def generate(self, connection: GeneratorConnection, entity: Any) -> Any:
        return connection.last_insert_id(self.sequence_name)

    def is_post_insert_generator(self) -> bool:
        return True


class UuidGenerator:
    """Pre-insert generator producing random UUID strings."""

    def generate(self, connection: Any, entity: Any) -> str:
        return str(uuid.uuid4())

    def is_post_insert_generator(self) -> bool:
        return False
