"""PostgreSQL platform - sequences, SERIAL columns emulated with sequences."""

from __future__ import annotations


class PostgresqlPlatform:
    """PostgreSQL identifier-generation capabilities."""

    @property
    def name(self) -> str:
        return "postgresql"

    def prefers_sequences(self) -> bool:
        return True

    def prefers_identity_columns(self) -> bool:
        return False

    def uses_sequence_emulated_identity_columns(self) -> bool:
        return True

    def get_sequence_prefix(self, table_name: str, schema_name: str | None = None) -> str:
        if not schema_name:
            return table_name
        return f"{schema_name}.{table_name}"

    def get_identity_sequence_name(self, table_name: str, column_name: str) -> str:
        table = table_name.strip('"')
        column = column_name.strip('"')
        return f"{table}_{column}_seq"

    def fix_schema_element_name(self, name: str) -> str:
        return name
