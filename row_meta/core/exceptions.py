"""RowMeta exception hierarchy.

All errors raised while loading class metadata derive from RowMetaError.
None of them are recoverable for the current ``get_metadata_for`` call.
"""

from __future__ import annotations

from typing import Any


class RowMetaError(Exception):
    """Base exception for all RowMeta errors."""


# --- Configuration ---


class ConfigurationError(RowMetaError):
    """Base for configuration errors."""


class FactoryNotConfiguredError(ConfigurationError):
    """Raised when a metadata factory is used before being wired."""

    def __init__(self) -> None:
        super().__init__(
            "ClassMetadataFactory has no entity manager; call set_entity_manager() first"
        )


class PlatformError(ConfigurationError):
    """Raised when a database platform cannot be resolved."""


def _in_class(class_name: str | None) -> str:
    return f" in '{class_name}'" if class_name else ""


class GeneratorNotImplementedError(ConfigurationError):
    """Raised for generator strategies that have no implementation."""

    def __init__(self, generator_type: str, class_name: str | None = None) -> None:
        self.generator_type = generator_type
        self.class_name = class_name
        super().__init__(
            f"{generator_type.title()}Generator not yet implemented{_in_class(class_name)}."
        )


class UnknownGeneratorTypeError(ConfigurationError):
    """Raised when a generator type is not one of the known strategies."""

    def __init__(self, generator_type: Any, class_name: str | None = None) -> None:
        self.generator_type = generator_type
        self.class_name = class_name
        super().__init__(f"Unknown generator type: {generator_type}{_in_class(class_name)}")


class MissingCustomGeneratorClassError(ConfigurationError):
    """Raised when a CUSTOM generator has no ``class`` entry."""

    def __init__(self, field_name: str, class_name: str | None = None) -> None:
        self.field_name = field_name
        self.class_name = class_name
        super().__init__(
            f"Cannot instantiate custom generator for '{field_name}'{_in_class(class_name)}, "
            "no class has been defined"
        )


class CustomGeneratorClassNotFoundError(ConfigurationError):
    """Raised when the class named by a CUSTOM generator cannot be loaded."""

    def __init__(
        self, field_name: str, definition: dict[str, Any], class_name: str | None = None
    ) -> None:
        self.field_name = field_name
        self.definition = definition
        self.class_name = class_name
        super().__init__(
            f"Cannot instantiate custom generator for '{field_name}'{_in_class(class_name)}: "
            f"{definition!r}"
        )


class MissingSequenceNameError(ConfigurationError):
    """Raised when a SEQUENCE generator reaches plan building without a name."""

    def __init__(self, field_name: str, class_name: str | None = None) -> None:
        self.field_name = field_name
        self.class_name = class_name
        super().__init__(
            f"Sequence generator for '{field_name}'{_in_class(class_name)} has no sequenceName"
        )


# --- Mapping ---


class MappingError(RowMetaError):
    """Base for mapping validation errors."""


class MissingFieldNameError(MappingError):
    def __init__(self, class_name: str) -> None:
        self.class_name = class_name
        super().__init__(
            "The field or association mapping misses the 'fieldName' attribute "
            f"in entity '{class_name}'."
        )


class DuplicatePropertyError(MappingError):
    def __init__(self, class_name: str, property_name: str) -> None:
        self.class_name = class_name
        self.property_name = property_name
        super().__init__(
            f"Property '{property_name}' in '{class_name}' was already declared, "
            "but it must be declared only once"
        )


class DuplicateColumnNameError(MappingError):
    def __init__(self, class_name: str, column_name: str) -> None:
        self.class_name = class_name
        self.column_name = column_name
        super().__init__(
            f"Duplicate definition of column '{column_name}' on entity '{class_name}' "
            "in a field or discriminator column mapping."
        )


class UnknownPropertyError(MappingError):
    def __init__(self, class_name: str, property_name: str) -> None:
        self.class_name = class_name
        self.property_name = property_name
        super().__init__(
            f"No mapping found for property '{property_name}' on class '{class_name}'."
        )


class InvalidPropertyOverrideError(MappingError):
    def __init__(self, class_name: str, property_name: str) -> None:
        self.class_name = class_name
        self.property_name = property_name
        super().__init__(
            f"Invalid field override named '{property_name}' for class '{class_name}'."
        )


class InvalidVersionFieldTypeError(MappingError):
    def __init__(self, class_name: str, property_name: str, type_name: str) -> None:
        self.class_name = class_name
        self.property_name = property_name
        super().__init__(
            f"Version field '{property_name}' in '{class_name}' has type '{type_name}'; "
            "only integer and datetime types can be used as version field."
        )


class InvalidCascadeOptionError(MappingError):
    def __init__(self, class_name: str, property_name: str, options: list[str]) -> None:
        self.class_name = class_name
        self.property_name = property_name
        self.options = options
        invalid = ", ".join(f"'{option}'" for option in options)
        super().__init__(
            f"You have specified invalid cascade options for {class_name}::${property_name}: "
            f"{invalid}; available options: 'remove', 'persist', and 'refresh'"
        )


class TargetEntityNotFoundError(MappingError):
    def __init__(self, class_name: str, property_name: str, target_entity: str) -> None:
        self.class_name = class_name
        self.property_name = property_name
        self.target_entity = target_entity
        super().__init__(
            f"The target-entity '{target_entity}' cannot be found in "
            f"'{class_name}#{property_name}'."
        )


class IdentifierAssociationError(MappingError):
    """Raised when an association is misused as (part of) the identifier."""

    def __init__(self, class_name: str, property_name: str, detail: str) -> None:
        self.class_name = class_name
        self.property_name = property_name
        super().__init__(f"{detail} '{class_name}#{property_name}'.")

    @classmethod
    def orphan_removal(cls, class_name: str, property_name: str) -> IdentifierAssociationError:
        return cls(
            class_name,
            property_name,
            "The orphan removal option is not allowed on an association that "
            "is part of the identifier in",
        )

    @classmethod
    def inverse_side(cls, class_name: str, property_name: str) -> IdentifierAssociationError:
        return cls(
            class_name,
            property_name,
            "An inverse association is not allowed to be identifier in",
        )

    @classmethod
    def to_many(cls, class_name: str, property_name: str) -> IdentifierAssociationError:
        return cls(
            class_name,
            property_name,
            "Many-to-many or one-to-many associations are not allowed to be identifier in",
        )


class MissingIdentifierError(MappingError):
    def __init__(self, class_name: str) -> None:
        self.class_name = class_name
        super().__init__(
            f"No identifier/primary key specified for Entity '{class_name}'. "
            "Every Entity must have an identifier/primary key."
        )


class NonUniqueIdentifierError(MappingError):
    def __init__(self, class_name: str, detail: str) -> None:
        self.class_name = class_name
        super().__init__(f"Class '{class_name}' {detail}")


class LifecycleCallbackNotFoundError(MappingError):
    def __init__(self, class_name: str, method: str) -> None:
        self.class_name = class_name
        self.method = method
        super().__init__(
            f"Entity '{class_name}' has no method '{method}' to be registered "
            "as lifecycle callback."
        )


class EntityListenerNotFoundError(MappingError):
    def __init__(self, listener_class: str, class_name: str) -> None:
        self.listener_class = listener_class
        self.class_name = class_name
        super().__init__(
            f'Entity Listener "{listener_class}" declared on "{class_name}" not found.'
        )


class EntityListenerMethodNotFoundError(MappingError):
    def __init__(self, listener_class: str, method: str, class_name: str) -> None:
        self.listener_class = listener_class
        self.method = method
        self.class_name = class_name
        super().__init__(
            f'Entity Listener "{listener_class}" declared on "{class_name}" '
            f'has no method "{method}".'
        )


class DuplicateEntityListenerError(MappingError):
    def __init__(self, listener_class: str, method: str, class_name: str) -> None:
        self.listener_class = listener_class
        self.method = method
        self.class_name = class_name
        super().__init__(
            f'Entity Listener "{listener_class}#{method}()" in "{class_name}" '
            "was already declared, but it must be declared only once."
        )


# --- Inheritance / discriminator ---


class MissingDiscriminatorMapError(MappingError):
    def __init__(self, class_name: str) -> None:
        self.class_name = class_name
        super().__init__(
            f"Entity class '{class_name}' is using inheritance but no discriminator map "
            "was defined."
        )


class MissingDiscriminatorColumnError(MappingError):
    def __init__(self, class_name: str) -> None:
        self.class_name = class_name
        super().__init__(
            f"Entity class '{class_name}' is using inheritance but no discriminator column "
            "was defined."
        )


class NoInheritanceOnMappedSuperclassError(MappingError):
    def __init__(self, class_name: str) -> None:
        self.class_name = class_name
        super().__init__(
            "It is not supported to define inheritance information on a mapped superclass "
            f"'{class_name}'."
        )


class DuplicateDiscriminatorEntryError(MappingError):
    """Raised when two classes share a generated discriminator key.

    ``conflicts`` maps each duplicated key to every class competing for it.
    """

    def __init__(
        self,
        class_name: str,
        duplicates: list[str],
        discriminator_map: dict[str, str],
        conflicts: dict[str, list[str]] | None = None,
    ) -> None:
        self.class_name = class_name
        self.duplicates = duplicates
        self.discriminator_map = discriminator_map
        self.conflicts = conflicts or {}
        detail = "; ".join(
            f"'{key}': {', '.join(classes)}" for key, classes in self.conflicts.items()
        )
        super().__init__(
            f"The entries {', '.join(duplicates)} in discriminator map of class '{class_name}' "
            f"are duplicated ({detail}). If the discriminator map is automatically generated "
            "you have to convert it to an explicit discriminator map now. The entries of the "
            f"current map are: {discriminator_map!r}"
        )


class ClassNotInDiscriminatorMapError(MappingError):
    def __init__(self, class_name: str, root_class_name: str) -> None:
        self.class_name = class_name
        self.root_class_name = root_class_name
        super().__init__(
            f"Entity '{class_name}' has to be part of the discriminator map of '{root_class_name}' "
            f"to be properly mapped in the inheritance hierarchy. Alternatively you can make "
            f"'{class_name}' an abstract class to avoid this exception from occurring."
        )


# --- Lookup ---


class MetadataLookupError(RowMetaError):
    """Base for metadata lookup errors."""


class ClassNotFoundError(MetadataLookupError):
    """Raised when no metadata can be produced for a class name."""

    def __init__(self, class_name: str, detail: str | None = None) -> None:
        self.class_name = class_name
        message = f"Class '{class_name}' does not exist"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


# --- Building context ---


class BuildingContextError(RowMetaError):
    """Base for metadata building context errors."""


class SecondPassError(BuildingContextError):
    """Raised on invalid second pass registration or re-validation."""


class CircularLoadError(BuildingContextError):
    """Raised when a class is requested while its own load is in progress."""

    def __init__(self, class_name: str, detail: str = "is already being loaded") -> None:
        self.class_name = class_name
        super().__init__(f"Metadata for '{class_name}' {detail}")
