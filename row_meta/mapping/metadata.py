"""Class metadata - the runtime description of how a class persists.

A ClassMetadata is builder-mutable while the factory pipeline runs (driver,
generator completion, listeners) and is treated as read-only once the
factory has cached it.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from row_meta.core.enums import InheritanceType
from row_meta.core.exceptions import (
    DuplicateColumnNameError,
    DuplicateEntityListenerError,
    DuplicatePropertyError,
    EntityListenerMethodNotFoundError,
    EntityListenerNotFoundError,
    IdentifierAssociationError,
    InvalidCascadeOptionError,
    InvalidPropertyOverrideError,
    InvalidVersionFieldTypeError,
    LifecycleCallbackNotFoundError,
    MappingError,
    MissingFieldNameError,
    MissingIdentifierError,
    NonUniqueIdentifierError,
    TargetEntityNotFoundError,
    UnknownPropertyError,
)
from row_meta.core.naming import DefaultNamingStrategy, NamingStrategy
from row_meta.mapping.property import (
    AssociationMetadata,
    CacheMetadata,
    DiscriminatorColumnMetadata,
    EntityListener,
    FieldMetadata,
    JoinColumnMetadata,
    JoinTableMetadata,
    ManyToManyAssociationMetadata,
    Property,
    PropertyKind,
    TableMetadata,
    ToOneAssociationMetadata,
)

if TYPE_CHECKING:
    from row_meta.core.reflection import ReflectionService
    from row_meta.mapping.context import ClassMetadataBuildingContext
    from row_meta.sequencing.plan import ValueGenerationPlan

CASCADE_OPTIONS = ("remove", "persist", "refresh")
VERSION_FIELD_TYPES = frozenset({"integer", "bigint", "smallint", "datetime", "datetime_immutable"})


class ClassMetadata:
    """Mapping metadata of a single class.

    Args:
        class_name: Dotted name of the mapped class.
        parent: Metadata of the nearest mapped ancestor, if any.
        building_context: Context of the load that creates this metadata.
            Supplies the naming strategy and the reflection handle; without
            one the metadata is "static" and has no reflection class.
    """

    def __init__(
        self,
        class_name: str,
        parent: ClassMetadata | None = None,
        building_context: ClassMetadataBuildingContext | None = None,
    ) -> None:
        self.class_name = class_name
        self.parent = parent
        self.table: TableMetadata | None = None
        self.is_mapped_superclass = False
        self.is_read_only = False

        self.inheritance_type = InheritanceType.NONE
        self.discriminator_column: DiscriminatorColumnMetadata | None = None
        self.discriminator_map: dict[str, str] | None = None
        self._discriminator_value: str | None = None
        self.subclasses: list[str] = []

        self.identifier: list[str] = []
        self._properties: dict[str, Property] = {}
        self._column_names: dict[str, str] = {}

        self.cache: CacheMetadata | None = None
        self.entity_listeners: dict[str, list[EntityListener]] = {}
        self.lifecycle_callbacks: dict[str, list[str]] = {}
        self.value_generation_plan: ValueGenerationPlan | None = None

        self._reflection_service: ReflectionService | None = None
        self._naming_strategy: NamingStrategy = DefaultNamingStrategy()
        self.reflection_class: type | None = None
        if building_context is not None:
            self._naming_strategy = building_context.naming_strategy
            self.wakeup_reflection(building_context.reflection_service)

    def __repr__(self) -> str:
        return f"<ClassMetadata {self.class_name}>"

    # --- Identity ---

    @property
    def root_class_name(self) -> str:
        """Topmost entity of the hierarchy; mapped superclasses end the walk."""
        if self.parent is not None and not self.parent.is_mapped_superclass:
            return self.parent.root_class_name
        return self.class_name

    def is_root_entity(self) -> bool:
        return self.class_name == self.root_class_name

    def ancestors(self) -> list[ClassMetadata]:
        """Mapped ancestors, root first."""
        chain: list[ClassMetadata] = []
        current = self.parent
        while current is not None:
            chain.append(current)
            current = current.parent
        return list(reversed(chain))

    def set_subclasses(self, subclasses: list[str]) -> None:
        for subclass in subclasses:
            if subclass not in self.subclasses:
                self.subclasses.append(subclass)

    def as_read_only(self) -> None:
        self.is_read_only = True

    def wakeup_reflection(self, reflection_service: ReflectionService) -> None:
        """Bind (or re-bind) the live class handle through a reflection service."""
        self._reflection_service = reflection_service
        self.reflection_class = reflection_service.get_class(self.class_name)

    # --- Table ---

    def set_table(self, table: TableMetadata) -> None:
        self.table = table

    def get_table_name(self) -> str | None:
        return self.table.name if self.table is not None else None

    def get_temporary_id_table_name(self) -> str:
        qualified = (self.table.qualified_name if self.table else None) or self.class_name
        return qualified.replace(".", "_") + "_id_tmp"

    # --- Properties ---

    def add_property(self, prop: Property) -> None:
        """Declare a property on this class, completing and validating it."""
        if not prop.name:
            raise MissingFieldNameError(self.class_name)
        if prop.name in self._properties:
            raise DuplicatePropertyError(self.class_name, prop.name)

        prop.declaring_class = self

        match prop.kind:
            case PropertyKind.FIELD | PropertyKind.VERSION:
                self._complete_field(prop)  # type: ignore[arg-type]
            case PropertyKind.TO_ONE:
                self._complete_to_one(prop)  # type: ignore[arg-type]
            case PropertyKind.TO_MANY:
                self._complete_to_many(prop)  # type: ignore[arg-type]

        self._properties[prop.name] = prop
        if prop.primary_key and prop.name not in self.identifier:
            self.identifier.append(prop.name)

    def add_inherited_property(self, prop: Property) -> None:
        """Register a property declared on an ancestor.

        The property is copied so per-class completion (table names) never
        leaks into the ancestor's metadata. Properties of a mapped superclass
        become declared on this class and get their generator back as
        declared, to be resolved for this class.
        """
        if prop.name in self._properties:
            raise DuplicatePropertyError(self.class_name, prop.name)

        inherited = prop.copy()
        declaring_class = prop.declaring_class
        if declaring_class is None or declaring_class.is_mapped_superclass:
            inherited.declaring_class = self
            if isinstance(inherited, FieldMetadata) and inherited.declared_value_generator:
                inherited.value_generator = inherited.declared_value_generator
        if isinstance(inherited, FieldMetadata) and inherited.column_name:
            self._register_column(inherited.column_name, inherited.name)

        self._properties[inherited.name] = inherited
        if inherited.primary_key and inherited.name not in self.identifier:
            self.identifier.append(inherited.name)

    def set_property_override(self, prop: Property) -> None:
        """Replace an already mapped property, keeping its declaring class."""
        original = self._properties.get(prop.name)
        if original is None:
            raise InvalidPropertyOverrideError(self.class_name, prop.name)

        if isinstance(original, FieldMetadata) and original.column_name:
            self._column_names.pop(original.column_name, None)

        declaring_class = original.declaring_class
        del self._properties[prop.name]
        self.add_property(prop)
        prop.declaring_class = declaring_class

    def get_property(self, name: str) -> Property:
        try:
            return self._properties[name]
        except KeyError:
            raise UnknownPropertyError(self.class_name, name) from None

    def has_property(self, name: str) -> bool:
        return name in self._properties

    def properties(self) -> Iterator[Property]:
        """All properties, inherited ones included, in insertion order."""
        return iter(list(self._properties.values()))

    def declared_properties(self) -> Iterator[Property]:
        """Properties declared directly on this class."""
        return (prop for prop in self.properties() if prop.declaring_class is self)

    def get_column_property_name(self, column_name: str) -> str | None:
        return self._column_names.get(column_name)

    def _register_column(self, column_name: str, property_name: str) -> None:
        discriminator = self.discriminator_column
        if column_name in self._column_names or (
            discriminator is not None and discriminator.column_name == column_name
        ):
            raise DuplicateColumnNameError(self.class_name, column_name)
        self._column_names[column_name] = property_name

    def _complete_field(self, prop: FieldMetadata) -> None:
        if not prop.column_name:
            prop.column_name = self._naming_strategy.property_to_column_name(
                prop.name, self.class_name
            )
        if prop.kind is PropertyKind.VERSION and prop.type_name not in VERSION_FIELD_TYPES:
            raise InvalidVersionFieldTypeError(self.class_name, prop.name, prop.type_name)
        self._register_column(prop.column_name, prop.name)

    def _complete_association(self, prop: AssociationMetadata) -> None:
        if prop.source_entity is None:
            prop.source_entity = self.class_name
        if prop.mapped_by:
            prop.owning_side = False
        prop.cascade = self._validate_cascade(prop.name, prop.cascade)

    def _complete_to_one(self, prop: ToOneAssociationMetadata) -> None:
        self._complete_association(prop)

        if prop.primary_key:
            if prop.orphan_removal:
                raise IdentifierAssociationError.orphan_removal(self.class_name, prop.name)
            if not prop.owning_side:
                raise IdentifierAssociationError.inverse_side(self.class_name, prop.name)

        if not prop.owning_side:
            return

        naming = self._naming_strategy
        if not prop.join_columns:
            prop.join_columns.append(JoinColumnMetadata())
        for join_column in prop.join_columns:
            if not join_column.referenced_column_name:
                join_column.referenced_column_name = naming.reference_column_name()
            if not join_column.column_name:
                join_column.column_name = naming.join_column_name(prop.name, self.class_name)
            if prop.primary_key:
                join_column.primary_key = True

    def _complete_to_many(self, prop: AssociationMetadata) -> None:
        self._complete_association(prop)

        if prop.primary_key:
            raise IdentifierAssociationError.to_many(self.class_name, prop.name)

        if isinstance(prop, ManyToManyAssociationMetadata) and prop.owning_side:
            self._complete_join_table(prop)

    def _complete_join_table(self, prop: ManyToManyAssociationMetadata) -> None:
        naming = self._naming_strategy
        source = prop.source_entity or self.class_name
        target = prop.target_entity or ""
        join_table = prop.join_table or JoinTableMetadata()
        self_referencing = source == target and not join_table.has_columns()

        if not join_table.name:
            join_table.name = naming.join_table_name(source, target, prop.name)

        if not join_table.join_columns:
            join_table.join_columns.append(JoinColumnMetadata())
        if not join_table.inverse_join_columns:
            join_table.inverse_join_columns.append(JoinColumnMetadata())

        for join_column in join_table.join_columns:
            self._complete_join_table_column(
                join_column, source, "source" if self_referencing else None
            )
        for join_column in join_table.inverse_join_columns:
            self._complete_join_table_column(
                join_column, target, "target" if self_referencing else None
            )

        prop.join_table = join_table

    def _complete_join_table_column(
        self, join_column: JoinColumnMetadata, entity: str, suffix: str | None
    ) -> None:
        naming = self._naming_strategy
        if not join_column.referenced_column_name:
            join_column.referenced_column_name = naming.reference_column_name()
        if not join_column.column_name:
            join_column.column_name = naming.join_key_column_name(
                entity, suffix or join_column.referenced_column_name
            )
        if not join_column.on_delete:
            join_column.on_delete = "CASCADE"

    def _validate_cascade(self, property_name: str, cascade: list[str]) -> list[str]:
        options = [option.lower() for option in cascade]
        invalid = [option for option in options if option not in (*CASCADE_OPTIONS, "all")]
        if invalid:
            raise InvalidCascadeOptionError(self.class_name, property_name, invalid)
        if "all" in options:
            return list(CASCADE_OPTIONS)
        return options

    # --- Identifier ---

    def set_identifier(self, identifier: list[str]) -> None:
        self.identifier = list(identifier)

    def is_identifier(self, name: str) -> bool:
        return name in self.identifier

    def is_identifier_composite(self) -> bool:
        return len(self.identifier) > 1

    def get_single_identifier_field_name(self) -> str:
        if self.is_identifier_composite():
            raise NonUniqueIdentifierError(
                self.class_name, "has a composite identifier; a single field was requested"
            )
        if not self.identifier:
            raise MissingIdentifierError(self.class_name)
        return self.identifier[0]

    # --- Inheritance ---

    def set_inheritance_type(self, inheritance_type: InheritanceType) -> None:
        self.inheritance_type = inheritance_type

    def set_discriminator_column(self, column: DiscriminatorColumnMetadata) -> None:
        if column.column_name in self._column_names:
            raise DuplicateColumnNameError(self.class_name, column.column_name)
        if column.table_name is None:
            column.table_name = self.get_table_name()
        self.discriminator_column = column

    def set_discriminator_map(self, discriminator_map: dict[str, str]) -> None:
        """Assign the value → class map and record mapped subclasses."""
        self.discriminator_map = dict(discriminator_map)
        if self._reflection_service is None:
            return
        for mapped_class in self.discriminator_map.values():
            if self._reflection_service.is_subclass_of(mapped_class, self.class_name):
                self.set_subclasses([mapped_class])

    @property
    def discriminator_value(self) -> str | None:
        return self._discriminator_value

    def set_discriminator_value(self, value: str) -> None:
        if self._discriminator_value is not None:
            raise MappingError(
                f"Discriminator value of '{self.class_name}' is already set "
                f"to '{self._discriminator_value}'"
            )
        self._discriminator_value = value

    # --- Behavior ---

    def set_cache(self, cache: CacheMetadata | None) -> None:
        self.cache = cache

    def add_lifecycle_callback(self, method: str, event: str) -> None:
        callbacks = self.lifecycle_callbacks.setdefault(event, [])
        if method not in callbacks:
            callbacks.append(method)

    def add_entity_listener(self, event: str, class_name: str, method: str) -> None:
        """Register ``class_name.method`` as listener of a lifecycle event."""
        reflection = self._reflection_service
        if reflection is not None:
            if not reflection.class_exists(class_name):
                raise EntityListenerNotFoundError(class_name, self.class_name)
            if not reflection.has_public_method(class_name, method):
                raise EntityListenerMethodNotFoundError(class_name, method, self.class_name)

        listener = EntityListener(class_name=class_name, method=method)
        listeners = self.entity_listeners.setdefault(event, [])
        if listener in listeners:
            raise DuplicateEntityListenerError(class_name, method, self.class_name)
        listeners.append(listener)

    def has_entity_listener(self, event: str, class_name: str, method: str) -> bool:
        return EntityListener(class_name, method) in self.entity_listeners.get(event, [])

    # --- Validation ---

    def validate_identifier(self) -> None:
        if self.is_mapped_superclass:
            return
        if not self.identifier:
            raise MissingIdentifierError(self.class_name)
        for name in self.identifier:
            if name not in self._properties:
                raise NonUniqueIdentifierError(
                    self.class_name, f"declares unknown identifier property '{name}'"
                )

    def validate_associations(self) -> None:
        for prop in self.properties():
            if not isinstance(prop, AssociationMetadata):
                continue
            self._validate_cascade(prop.name, prop.cascade)
            reflection = self._reflection_service
            target = prop.target_entity
            if not target or (reflection is not None and not reflection.class_exists(target)):
                raise TargetEntityNotFoundError(self.class_name, prop.name, target or "")

    def validate_lifecycle_callbacks(self, reflection_service: ReflectionService) -> None:
        for callbacks in self.lifecycle_callbacks.values():
            for method in callbacks:
                if not reflection_service.has_public_method(self.class_name, method):
                    raise LifecycleCallbackNotFoundError(self.class_name, method)

    def __getstate__(self) -> dict[str, Any]:
        state = self.__dict__.copy()
        state["_reflection_service"] = None
        state["reflection_class"] = None
        return state
