"""The class metadata factory.

Per class, ``_do_load_metadata`` runs these steps in order:

1. the driver produces the raw metadata, parent properties are copied in
2. declared identifier generators are resolved for the platform
3. inheritable state is taken over from the parent
4. a root entity using inheritance without a map gets one generated
5. fields inherited through a mapped superclass get their table
6. ``loadClassMetadata`` listeners run
7. the value generation plan is built
8. runtime metadata is validated

Once a batch of ancestors is loaded the discriminator value of every class
in it is resolved, which may itself load the other map entries.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Protocol

from row_meta.core.configuration import Configuration, ConfiguredEntityManager
from row_meta.core.enums import InheritanceType
from row_meta.core.events import (
    EventManager,
    Events,
    LoadClassMetadataEventArgs,
    OnClassMetadataNotFoundEventArgs,
)
from row_meta.core.exceptions import (
    ClassNotFoundError,
    ClassNotInDiscriminatorMapError,
    ConfigurationError,
    DuplicateDiscriminatorEntryError,
    FactoryNotConfiguredError,
    MissingDiscriminatorColumnError,
    MissingDiscriminatorMapError,
    NoInheritanceOnMappedSuperclassError,
)
from row_meta.core.naming import short_name
from row_meta.core.reflection import RuntimeReflectionService
from row_meta.mapping.base import AbstractClassMetadataFactory
from row_meta.mapping.context import ClassMetadataBuildingContext
from row_meta.mapping.generator import IdentifierGeneratorResolver
from row_meta.mapping.metadata import ClassMetadata
from row_meta.mapping.property import FieldMetadata, PropertyKind, ToOneAssociationMetadata
from row_meta.sequencing.builder import build_value_generation_plan

log = logging.getLogger(__name__)


class EntityManagerInterface(Protocol):
    """What the factory reads from its entity manager."""

    configuration: Configuration
    event_manager: EventManager

    def get_database_platform(self) -> Any: ...


class ClassMetadataFactory(AbstractClassMetadataFactory):
    """Loads complete, validated metadata for entity classes.

    Wire it with ``set_entity_manager()`` or build it with ``from_config()``
    before the first lookup.
    """

    def __init__(self) -> None:
        super().__init__()
        self._em: EntityManagerInterface | None = None
        self._driver: Any = None
        self._evm: EventManager | None = None
        self._naming_strategy: Any = None
        self._target_platform: Any = None

    @classmethod
    def from_config(
        cls, configuration: Configuration, event_manager: EventManager | None = None
    ) -> ClassMetadataFactory:
        factory = cls()
        factory.set_entity_manager(ConfiguredEntityManager(configuration, event_manager))
        return factory

    def set_entity_manager(self, entity_manager: EntityManagerInterface) -> None:
        self._em = entity_manager

    def _initialize(self) -> None:
        if self._em is None:
            raise FactoryNotConfiguredError()

        configuration = self._em.configuration
        if configuration.metadata_driver is None:
            raise ConfigurationError("No metadata driver configured")

        self._driver = configuration.metadata_driver
        self._evm = self._em.event_manager
        self._naming_strategy = configuration.naming_strategy
        if self._reflection_service is None:
            self._reflection_service = (
                configuration.reflection_service or RuntimeReflectionService()
            )
        if self._cache_driver is None and configuration.metadata_cache is not None:
            self.set_cache_driver(configuration.metadata_cache, configuration.cache_salt)
        self._initialized = True

    def _get_driver(self) -> Any:
        return self._driver

    def get_target_platform(self) -> Any:
        """Platform of the entity manager, resolved once."""
        if self._target_platform is None:
            if self._em is None:
                raise FactoryNotConfiguredError()
            self._target_platform = self._em.get_database_platform()
        return self._target_platform

    def _new_class_metadata_building_context(self) -> ClassMetadataBuildingContext:
        return ClassMetadataBuildingContext(
            self, self.get_reflection_service(), self._naming_strategy
        )

    def _is_entity(self, class_metadata: ClassMetadata) -> bool:
        return not class_metadata.is_mapped_superclass

    # --- Primary pass ---

    def _do_load_metadata(
        self,
        class_name: str,
        parent: ClassMetadata | None,
        building_context: ClassMetadataBuildingContext,
    ) -> ClassMetadata:
        log.debug("Loading metadata for %s", class_name)

        class_metadata = self._driver.load_metadata_for_class(class_name, parent, building_context)
        if class_metadata is None:
            raise ClassNotFoundError(class_name, "the mapping driver cannot describe it")
        if class_metadata.parent is None and parent is not None:
            class_metadata.parent = parent
        if parent is not None:
            self._add_inherited_properties(class_metadata, parent)

        self._complete_identifier_generator_mappings(class_metadata)

        if parent is not None:
            self._inherit_from_parent(class_metadata, parent)

        if (
            not class_metadata.discriminator_map
            and class_metadata.inheritance_type is not InheritanceType.NONE
            and class_metadata.is_root_entity()
        ):
            self._add_default_discriminator_map(class_metadata)

        self._complete_runtime_metadata(class_metadata, parent)

        assert self._evm is not None
        if self._evm.has_listeners(Events.LOAD_CLASS_METADATA):
            self._evm.dispatch(
                Events.LOAD_CLASS_METADATA, LoadClassMetadataEventArgs(class_metadata, self._em)
            )

        build_value_generation_plan(
            class_metadata, self.get_target_platform(), self.get_reflection_service()
        )

        self._validate_runtime_metadata(class_metadata, parent)
        return class_metadata

    def _complete_identifier_generator_mappings(self, class_metadata: ClassMetadata) -> None:
        resolver = IdentifierGeneratorResolver(
            self.get_target_platform(), self.get_reflection_service()
        )
        table_name = class_metadata.get_table_name()
        for prop in class_metadata.declared_properties():
            if isinstance(prop, FieldMetadata) and prop.value_generator is not None:
                resolver.complete(prop, table_name, class_metadata.class_name)

    def _add_inherited_properties(
        self, class_metadata: ClassMetadata, parent: ClassMetadata
    ) -> None:
        for prop in parent.properties():
            if not class_metadata.has_property(prop.name):
                class_metadata.add_inherited_property(prop)

    def _inherit_from_parent(self, class_metadata: ClassMetadata, parent: ClassMetadata) -> None:
        if not self._is_entity(class_metadata):
            return

        if parent.cache is not None and class_metadata.cache is None:
            class_metadata.set_cache(copy.copy(parent.cache))

        if parent.entity_listeners and not class_metadata.entity_listeners:
            class_metadata.entity_listeners = {
                event: list(listeners) for event, listeners in parent.entity_listeners.items()
            }

        if parent.is_mapped_superclass:
            return

        if class_metadata.inheritance_type is InheritanceType.NONE:
            class_metadata.set_inheritance_type(parent.inheritance_type)
        if class_metadata.discriminator_column is None and parent.discriminator_column:
            class_metadata.discriminator_column = copy.copy(parent.discriminator_column)
        if not class_metadata.discriminator_map and parent.discriminator_map:
            class_metadata.set_discriminator_map(parent.discriminator_map)
        single_table = parent.inheritance_type is InheritanceType.SINGLE_TABLE
        if class_metadata.table is None and parent.table is not None and single_table:
            class_metadata.set_table(parent.table)

    def _add_default_discriminator_map(self, class_metadata: ClassMetadata) -> None:
        """Map every known subclass of the root under its lowercased short name."""
        fqcn = class_metadata.class_name
        reflection = self.get_reflection_service()

        discriminator_map = {short_name(fqcn).lower(): fqcn}
        conflicts: dict[str, list[str]] = {}
        for candidate in self._driver.get_all_class_names():
            if not reflection.is_subclass_of(candidate, fqcn):
                continue
            key = short_name(candidate).lower()
            if key in discriminator_map:
                conflicts.setdefault(key, [discriminator_map[key]]).append(candidate)
            discriminator_map[key] = candidate

        if conflicts:
            raise DuplicateDiscriminatorEntryError(
                fqcn, list(conflicts), discriminator_map, conflicts
            )

        log.debug("Generated discriminator map for %s: %s", fqcn, discriminator_map)
        class_metadata.set_discriminator_map(discriminator_map)

    def _complete_runtime_metadata(
        self, class_metadata: ClassMetadata, parent: ClassMetadata | None
    ) -> None:
        """Give fields reached through a mapped superclass a table."""
        if parent is None or not parent.is_mapped_superclass or not self._is_entity(class_metadata):
            return

        own_table = class_metadata.get_table_name()
        for prop in class_metadata.declared_properties():
            table_name = own_table
            if parent.has_property(prop.name):
                origin = parent.get_property(prop.name).declaring_class or parent
                table_name = origin.get_table_name() or own_table

            match prop.kind:
                case PropertyKind.FIELD | PropertyKind.VERSION:
                    assert isinstance(prop, FieldMetadata)
                    if prop.table_name is None:
                        prop.table_name = table_name
                case PropertyKind.TO_ONE:
                    assert isinstance(prop, ToOneAssociationMetadata)
                    for join_column in prop.join_columns:
                        if join_column.table_name is None:
                            join_column.table_name = table_name
                case PropertyKind.TO_MANY:
                    pass

    def _validate_runtime_metadata(
        self, class_metadata: ClassMetadata, parent: ClassMetadata | None
    ) -> None:
        if class_metadata.reflection_class is None:
            return

        class_metadata.validate_identifier()
        class_metadata.validate_associations()
        class_metadata.validate_lifecycle_callbacks(self.get_reflection_service())

        if (
            not class_metadata.is_mapped_superclass
            and class_metadata.inheritance_type is not InheritanceType.NONE
        ):
            if parent is None:
                if not class_metadata.discriminator_map:
                    raise MissingDiscriminatorMapError(class_metadata.class_name)
                if class_metadata.discriminator_column is None:
                    raise MissingDiscriminatorColumnError(class_metadata.class_name)
        elif (
            class_metadata.is_mapped_superclass
            and class_metadata.is_root_entity()
            and (class_metadata.discriminator_map or class_metadata.discriminator_column)
        ):
            raise NoInheritanceOnMappedSuperclassError(class_metadata.class_name)

    # --- Discriminator values ---

    def _load_metadata(
        self, name: str, building_context: ClassMetadataBuildingContext
    ) -> list[ClassMetadata]:
        loaded = super()._load_metadata(name, building_context)
        for index, class_metadata in enumerate(loaded):
            try:
                self.resolve_discriminator_value(class_metadata)
            except BaseException:
                for failed in loaded[index:]:
                    self._evict(failed.class_name)
                raise
        return loaded

    def resolve_discriminator_value(self, class_metadata: ClassMetadata) -> None:
        """Find the discriminator map key that denotes this class.

        A no-op when the value is already set or when the class is a mapped
        superclass, abstract, static, or outside any discriminator map.

        Raises:
            ClassNotInDiscriminatorMapError: No map entry resolves to the class.
        """
        class_name = class_metadata.class_name
        discriminator_map = class_metadata.discriminator_map
        if (
            class_metadata.discriminator_value is not None
            or not discriminator_map
            or class_metadata.is_mapped_superclass
            or class_metadata.reflection_class is None
            or self.get_reflection_service().is_abstract(class_name)
        ):
            return

        for value, mapped_class in discriminator_map.items():
            if mapped_class == class_name:
                class_metadata.set_discriminator_value(value)
                return

        # entries may be aliases; compare what they resolve to
        for value, mapped_class in discriminator_map.items():
            if self.get_metadata_for(mapped_class).class_name == class_name:
                class_metadata.set_discriminator_value(value)
                return

        raise ClassNotInDiscriminatorMapError(class_name, class_metadata.root_class_name)

    # --- Not found ---

    def _on_not_found_metadata(
        self, class_name: str, building_context: ClassMetadataBuildingContext
    ) -> ClassMetadata | None:
        assert self._evm is not None
        if not self._evm.has_listeners(Events.ON_CLASS_METADATA_NOT_FOUND):
            return None

        args = OnClassMetadataNotFoundEventArgs(class_name, building_context, self._em)
        self._evm.dispatch(Events.ON_CLASS_METADATA_NOT_FOUND, args)
        return args.found_metadata
