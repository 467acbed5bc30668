"""Naming strategies - turn class and property names into table/column names."""

from __future__ import annotations

import re
from typing import Protocol, runtime_checkable

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def short_name(class_name: str) -> str:
    """Return the last segment of a dotted class name."""
    return class_name.rsplit(".", 1)[-1]


@runtime_checkable
class NamingStrategy(Protocol):
    """Naming strategy protocol used by drivers and association completion."""

    def class_to_table_name(self, class_name: str) -> str: ...

    def property_to_column_name(self, property_name: str, class_name: str | None = None) -> str: ...

    def reference_column_name(self) -> str: ...

    def join_column_name(self, property_name: str, class_name: str | None = None) -> str: ...

    def join_table_name(
        self, source_entity: str, target_entity: str, property_name: str | None = None
    ) -> str: ...

    def join_key_column_name(
        self, entity_name: str, referenced_column_name: str | None = None
    ) -> str: ...


class DefaultNamingStrategy:
    """Uses short class names and property names verbatim."""

    def class_to_table_name(self, class_name: str) -> str:
        return short_name(class_name)

    def property_to_column_name(self, property_name: str, class_name: str | None = None) -> str:
        return property_name

    def reference_column_name(self) -> str:
        return "id"

    def join_column_name(self, property_name: str, class_name: str | None = None) -> str:
        return f"{property_name}_{self.reference_column_name()}"

    def join_table_name(
        self, source_entity: str, target_entity: str, property_name: str | None = None
    ) -> str:
        source = self.class_to_table_name(source_entity)
        target = self.class_to_table_name(target_entity)
        return f"{source}_{target}".lower()

    def join_key_column_name(
        self, entity_name: str, referenced_column_name: str | None = None
    ) -> str:
        referenced = referenced_column_name or self.reference_column_name()
        return f"{self.class_to_table_name(entity_name)}_{referenced}".lower()


class UnderscoreNamingStrategy:
    """Splits camel case with underscores, in lower or upper case.

    Args:
        upper: Produce upper-case names (``CMS_USER``) instead of lower case.
    """

    def __init__(self, upper: bool = False) -> None:
        self._upper = upper

    def _underscore(self, name: str) -> str:
        converted = _CAMEL_BOUNDARY.sub(r"_\1", name)
        return converted.upper() if self._upper else converted.lower()

    def class_to_table_name(self, class_name: str) -> str:
        return self._underscore(short_name(class_name))

    def property_to_column_name(self, property_name: str, class_name: str | None = None) -> str:
        return self._underscore(property_name)

    def reference_column_name(self) -> str:
        return "ID" if self._upper else "id"

    def join_column_name(self, property_name: str, class_name: str | None = None) -> str:
        return f"{self._underscore(property_name)}_{self.reference_column_name()}"

    def join_table_name(
        self, source_entity: str, target_entity: str, property_name: str | None = None
    ) -> str:
        source = self.class_to_table_name(source_entity)
        target = self.class_to_table_name(target_entity)
        return f"{source}_{target}"

    def join_key_column_name(
        self, entity_name: str, referenced_column_name: str | None = None
    ) -> str:
        referenced = referenced_column_name or self.reference_column_name()
        return f"{self.class_to_table_name(entity_name)}_{referenced}"
