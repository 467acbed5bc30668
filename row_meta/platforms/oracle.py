"""Oracle platform - sequences with a 30 character identifier limit."""

from __future__ import annotations

MAX_IDENTIFIER_LENGTH = 30


class OraclePlatform:
    """Oracle identifier-generation capabilities."""

    @property
    def name(self) -> str:
        return "oracle"

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
        """Oracle names the identity sequence after the table only."""
        return f"{table_name}_SEQ"

    def fix_schema_element_name(self, name: str) -> str:
        """Truncate identifiers longer than the Oracle limit."""
        if len(name) > MAX_IDENTIFIER_LENGTH:
            return name[:MAX_IDENTIFIER_LENGTH]
        return name
