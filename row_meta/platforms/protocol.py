"""Database platform capability protocol.

Every platform module MUST implement this protocol. The metadata factory
only consumes these capability flags and name helpers; it never generates
SQL through a platform.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Platform(Protocol):
    """Identifier-generation capabilities of a database engine."""

    @property
    def name(self) -> str:
        """Backend name, matching a DatabaseBackend value."""
        ...

    def prefers_sequences(self) -> bool:
        """Whether sequences are the native way to generate identifiers."""
        ...

    def prefers_identity_columns(self) -> bool:
        """Whether auto-increment/identity columns are the native way."""
        ...

    def uses_sequence_emulated_identity_columns(self) -> bool:
        """Whether identity columns are backed by an implicit sequence."""
        ...

    def get_sequence_prefix(self, table_name: str, schema_name: str | None = None) -> str:
        """Prefix used when synthesizing a sequence name for a table."""
        ...

    def get_identity_sequence_name(self, table_name: str, column_name: str) -> str:
        """Name of the sequence backing an emulated identity column."""
        ...

    def fix_schema_element_name(self, name: str) -> str:
        """Adjust an identifier to the engine's naming limits."""
        ...
