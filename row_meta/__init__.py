"""RowMeta - class metadata loading and identifier generation planning."""

from __future__ import annotations

from row_meta.core.configuration import Configuration, ConfiguredEntityManager, load_platform
from row_meta.core.enums import (
    CacheUsage,
    DatabaseBackend,
    FetchMode,
    GeneratorType,
    InheritanceType,
)
from row_meta.core.events import (
    EventManager,
    Events,
    LoadClassMetadataEventArgs,
    OnClassMetadataNotFoundEventArgs,
)
from row_meta.core.exceptions import (
    BuildingContextError,
    CircularLoadError,
    ClassNotFoundError,
    ClassNotInDiscriminatorMapError,
    ConfigurationError,
    CustomGeneratorClassNotFoundError,
    DuplicateDiscriminatorEntryError,
    FactoryNotConfiguredError,
    GeneratorNotImplementedError,
    MappingError,
    MetadataLookupError,
    MissingCustomGeneratorClassError,
    MissingSequenceNameError,
    MissingDiscriminatorColumnError,
    MissingDiscriminatorMapError,
    NoInheritanceOnMappedSuperclassError,
    PlatformError,
    RowMetaError,
    SecondPassError,
    UnknownGeneratorTypeError,
)
from row_meta.core.naming import DefaultNamingStrategy, NamingStrategy, UnderscoreNamingStrategy
from row_meta.core.reflection import (
    ReflectionService,
    RuntimeReflectionService,
    StaticReflectionService,
    class_name_of,
)
from row_meta.mapping.context import ClassMetadataBuildingContext
from row_meta.mapping.factory import ClassMetadataFactory
from row_meta.mapping.generator import IdentifierGeneratorResolver
from row_meta.mapping.metadata import ClassMetadata
from row_meta.sequencing.builder import ValueGenerationPlanBuilder
from row_meta.tools.attach_entity_listeners import AttachEntityListenersListener

__all__ = [
    # Configuration
    "Configuration",
    "ConfiguredEntityManager",
    "load_platform",
    # Factory
    "ClassMetadataFactory",
    "ClassMetadataBuildingContext",
    "ClassMetadata",
    # Identifier generation
    "IdentifierGeneratorResolver",
    "ValueGenerationPlanBuilder",
    # Events
    "EventManager",
    "Events",
    "LoadClassMetadataEventArgs",
    "OnClassMetadataNotFoundEventArgs",
    "AttachEntityListenersListener",
    # Naming / reflection
    "NamingStrategy",
    "DefaultNamingStrategy",
    "UnderscoreNamingStrategy",
    "ReflectionService",
    "RuntimeReflectionService",
    "StaticReflectionService",
    "class_name_of",
    # Enums
    "DatabaseBackend",
    "GeneratorType",
    "InheritanceType",
    "FetchMode",
    "CacheUsage",
    # Exceptions
    "RowMetaError",
    "ConfigurationError",
    "FactoryNotConfiguredError",
    "PlatformError",
    "GeneratorNotImplementedError",
    "UnknownGeneratorTypeError",
    "MissingCustomGeneratorClassError",
    "MissingSequenceNameError",
    "CustomGeneratorClassNotFoundError",
    "MappingError",
    "MissingDiscriminatorMapError",
    "MissingDiscriminatorColumnError",
    "NoInheritanceOnMappedSuperclassError",
    "DuplicateDiscriminatorEntryError",
    "ClassNotInDiscriminatorMapError",
    "MetadataLookupError",
    "ClassNotFoundError",
    "BuildingContextError",
    "SecondPassError",
    "CircularLoadError",
]
