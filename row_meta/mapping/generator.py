"""Identifier generator resolution.

Turns a field's declared generator intent into a concrete, validated
strategy for the target platform. Runs during the primary load pass, once
per declared field that carries a generator.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from row_meta.core.enums import GeneratorType
from row_meta.core.exceptions import (
    CustomGeneratorClassNotFoundError,
    GeneratorNotImplementedError,
    MissingCustomGeneratorClassError,
    UnknownGeneratorTypeError,
)
from row_meta.mapping.property import FieldMetadata, ValueGeneratorMetadata

if TYPE_CHECKING:
    from row_meta.core.reflection import ReflectionService
    from row_meta.platforms.protocol import Platform

log = logging.getLogger(__name__)


def resolve_platform_generator_type(platform: Platform) -> GeneratorType:
    """Concrete strategy that AUTO and IDENTITY stand for on ``platform``."""
    if platform.prefers_sequences() or platform.uses_sequence_emulated_identity_columns():
        return GeneratorType.SEQUENCE
    if platform.prefers_identity_columns():
        return GeneratorType.IDENTITY
    return GeneratorType.TABLE


def default_sequence_name(platform: Platform, table_name: str | None, column_name: str) -> str:
    """``fix(prefix(table) + "_" + column + "_seq")``."""
    prefix = platform.get_sequence_prefix(table_name or "")
    return platform.fix_schema_element_name(f"{prefix}_{column_name}_seq")


class IdentifierGeneratorResolver:
    """Completes the generator mapping of fields for one platform.

    Args:
        platform: Capabilities of the target database.
        reflection_service: Used to check that CUSTOM generator classes exist.
    """

    def __init__(self, platform: Platform, reflection_service: ReflectionService) -> None:
        self._platform = platform
        self._reflection_service = reflection_service

    def complete(
        self,
        prop: FieldMetadata,
        table_name: str | None = None,
        class_name: str | None = None,
    ) -> None:
        """Resolve and validate the generator of ``prop`` in place.

        The generator as declared is kept on ``prop.declared_value_generator``
        so classes inheriting the field can resolve it against their own table.

        Args:
            prop: Field carrying the declared generator.
            table_name: Table used for sequence name synthesis when the field
                has no table of its own.
            class_name: Class the field is completed for, used in errors.
                Defaults to the field's declaring class.

        Raises:
            GeneratorNotImplementedError: TABLE strategy.
            MissingCustomGeneratorClassError: CUSTOM without a ``class`` entry.
            CustomGeneratorClassNotFoundError: CUSTOM class cannot be loaded.
            UnknownGeneratorTypeError: Any other strategy value.
        """
        generator = prop.value_generator
        if generator is None:
            return
        if prop.declared_value_generator is None:
            prop.declared_value_generator = generator
        if class_name is None and prop.declaring_class is not None:
            class_name = prop.declaring_class.class_name

        if generator.type in (GeneratorType.AUTO, GeneratorType.IDENTITY):
            resolved = resolve_platform_generator_type(self._platform)
            generator = ValueGeneratorMetadata(resolved, dict(generator.definition))
            prop.value_generator = generator

        match generator.type:
            case GeneratorType.SEQUENCE:
                if generator.definition.get("sequenceName"):
                    return
                sequence_name = default_sequence_name(
                    self._platform,
                    prop.table_name or table_name,
                    prop.column_name or prop.name,
                )
                # keys declared next to a missing name (allocationSize) are kept
                prop.value_generator = ValueGeneratorMetadata(
                    GeneratorType.SEQUENCE,
                    {
                        "sequenceName": sequence_name,
                        "allocationSize": 1,
                        **{k: v for k, v in generator.definition.items() if k != "sequenceName"},
                    },
                )
                log.debug("Synthesized sequence %s for field %s", sequence_name, prop.name)
            case GeneratorType.TABLE:
                raise GeneratorNotImplementedError(generator.type.value, class_name)
            case GeneratorType.CUSTOM:
                custom_class = generator.definition.get("class")
                if not custom_class:
                    raise MissingCustomGeneratorClassError(prop.name, class_name)
                if not self._custom_class_exists(custom_class):
                    raise CustomGeneratorClassNotFoundError(
                        prop.name, generator.definition, class_name
                    )
            case GeneratorType.IDENTITY | GeneratorType.NONE | GeneratorType.UUID:
                pass
            case _:
                raise UnknownGeneratorTypeError(generator.type, class_name)

    def _custom_class_exists(self, custom_class: str | type) -> bool:
        if isinstance(custom_class, type):
            return True
        return self._reflection_service.get_class(custom_class) is not None
