"""SQLite platform - AUTOINCREMENT identity columns, emulated schemas."""

from __future__ import annotations


class SqlitePlatform:
    """SQLite identifier-generation capabilities."""

    @property
    def name(self) -> str:
        return "sqlite"

    def prefers_sequences(self) -> bool:
        return False

    def prefers_identity_columns(self) -> bool:
        return True

    def uses_sequence_emulated_identity_columns(self) -> bool:
        return False

    def get_sequence_prefix(self, table_name: str, schema_name: str | None = None) -> str:
        """SQLite has no schemas; they are emulated with a double underscore."""
        if not schema_name:
            return table_name
        return f"{schema_name}__{table_name}"

    def get_identity_sequence_name(self, table_name: str, column_name: str) -> str:
        return f"{table_name}_{column_name}_seq"

    def fix_schema_element_name(self, name: str) -> str:
        return name
