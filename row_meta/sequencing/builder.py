"""Value generation plan builder.

Collects one executor per generated property declared on a class and
compiles them into a plan:

    0 executors  -> NoopValueGenerationPlan
    1 executor   -> SingleValueGenerationPlan
    2+ executors -> CompositeValueGenerationPlan
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from row_meta.core.enums import GeneratorType
from row_meta.core.exceptions import (
    CustomGeneratorClassNotFoundError,
    MissingSequenceNameError,
    UnknownGeneratorTypeError,
)
from row_meta.mapping.property import FieldMetadata, Property, PropertyKind
from row_meta.sequencing.executor import (
    AssociationValueGeneratorExecutor,
    ColumnValueGeneratorExecutor,
    ValueGenerationExecutor,
)
from row_meta.sequencing.generators import (
    Generator,
    IdentityGenerator,
    SequenceGenerator,
    UuidGenerator,
)
from row_meta.sequencing.plan import (
    CompositeValueGenerationPlan,
    NoopValueGenerationPlan,
    SingleValueGenerationPlan,
    ValueGenerationPlan,
)

if TYPE_CHECKING:
    from row_meta.core.reflection import ReflectionService
    from row_meta.mapping.metadata import ClassMetadata
    from row_meta.platforms.protocol import Platform

log = logging.getLogger(__name__)


def build_generator(
    prop: FieldMetadata,
    platform: Platform,
    reflection_service: ReflectionService,
    table_name: str | None = None,
) -> Generator | None:
    """Instantiate the generator for a field's resolved strategy.

    Inside the factory IDENTITY only arrives here on platforms with native
    identity columns. The sequence-emulated IDENTITY branch serves callers
    building plans for metadata that skipped generator resolution.
    """
    value_generator = prop.value_generator
    if value_generator is None:
        return None

    definition = value_generator.definition
    column_name = prop.column_name or prop.name
    class_name = prop.declaring_class.class_name if prop.declaring_class else None

    match value_generator.type:
        case GeneratorType.NONE:
            return None
        case GeneratorType.IDENTITY:
            sequence_name = None
            if platform.uses_sequence_emulated_identity_columns():
                prefix = platform.get_sequence_prefix(prop.table_name or table_name or "")
                sequence_name = platform.fix_schema_element_name(
                    platform.get_identity_sequence_name(prefix, column_name)
                )
            return IdentityGenerator(sequence_name)
        case GeneratorType.SEQUENCE:
            configured_name = definition.get("sequenceName")
            if not configured_name:
                raise MissingSequenceNameError(prop.name, class_name)
            return SequenceGenerator(configured_name, int(definition.get("allocationSize", 1)))
        case GeneratorType.UUID:
            return UuidGenerator()
        case GeneratorType.CUSTOM:
            custom_class: Any = definition.get("class")
            if isinstance(custom_class, str):
                custom_class = reflection_service.get_class(custom_class)
            if custom_class is None:
                raise CustomGeneratorClassNotFoundError(prop.name, definition, class_name)
            generator: Generator = custom_class(*definition.get("arguments", []))
            return generator
        case _:
            raise UnknownGeneratorTypeError(value_generator.type, class_name)


class ValueGenerationPlanBuilder:
    """Collects executors for one class and compiles them into a plan."""

    def __init__(
        self,
        class_metadata: ClassMetadata,
        platform: Platform,
        reflection_service: ReflectionService,
    ) -> None:
        self._class_metadata = class_metadata
        self._platform = platform
        self._reflection_service = reflection_service
        self._executors: list[ValueGenerationExecutor] = []

    def executor_for(self, prop: Property) -> ValueGenerationExecutor | None:
        match prop.kind:
            case PropertyKind.FIELD | PropertyKind.VERSION:
                generator = build_generator(
                    prop,  # type: ignore[arg-type]
                    self._platform,
                    self._reflection_service,
                    self._class_metadata.get_table_name(),
                )
                if generator is None:
                    return None
                return ColumnValueGeneratorExecutor(prop.name, generator)
            case PropertyKind.TO_ONE:
                if prop.primary_key:
                    return AssociationValueGeneratorExecutor(prop.name)
                return None
            case PropertyKind.TO_MANY:
                return None

    def add_property(self, prop: Property) -> ValueGenerationPlanBuilder:
        executor = self.executor_for(prop)
        if executor is not None:
            self._executors.append(executor)
        return self

    def add_declared_properties(self) -> ValueGenerationPlanBuilder:
        for prop in self._class_metadata.declared_properties():
            self.add_property(prop)
        return self

    def build(self) -> ValueGenerationPlan:
        """Compile the collected executors."""
        plan: ValueGenerationPlan
        if not self._executors:
            plan = NoopValueGenerationPlan()
        elif len(self._executors) == 1:
            plan = SingleValueGenerationPlan(self._class_metadata, self._executors[0])
        else:
            plan = CompositeValueGenerationPlan(self._class_metadata, list(self._executors))

        log.debug(
            "Value generation plan for %s: %s with %d executor(s)",
            self._class_metadata.class_name,
            type(plan).__name__,
            len(self._executors),
        )
        return plan


def build_value_generation_plan(
    class_metadata: ClassMetadata,
    platform: Platform,
    reflection_service: ReflectionService,
) -> ValueGenerationPlan:
    """Build the plan for a class and attach it to the metadata."""
    plan = (
        ValueGenerationPlanBuilder(class_metadata, platform, reflection_service)
        .add_declared_properties()
        .build()
    )
    class_metadata.value_generation_plan = plan
    return plan
