"""Mapping layer - class metadata, its building context and the factory."""

from __future__ import annotations

from row_meta.mapping.base import AbstractClassMetadataFactory
from row_meta.mapping.context import ClassMetadataBuildingContext, SecondPass
from row_meta.mapping.driver import MappingDriver
from row_meta.mapping.factory import ClassMetadataFactory, EntityManagerInterface
from row_meta.mapping.generator import IdentifierGeneratorResolver
from row_meta.mapping.metadata import ClassMetadata
from row_meta.mapping.property import (
    CacheMetadata,
    DiscriminatorColumnMetadata,
    EntityListener,
    FieldMetadata,
    JoinColumnMetadata,
    JoinTableMetadata,
    ManyToManyAssociationMetadata,
    ManyToOneAssociationMetadata,
    OneToManyAssociationMetadata,
    OneToOneAssociationMetadata,
    Property,
    PropertyKind,
    TableMetadata,
    ValueGeneratorMetadata,
    VersionFieldMetadata,
)

__all__ = [
    "ClassMetadataFactory",
    "AbstractClassMetadataFactory",
    "EntityManagerInterface",
    "ClassMetadataBuildingContext",
    "SecondPass",
    "MappingDriver",
    "IdentifierGeneratorResolver",
    "ClassMetadata",
    "Property",
    "PropertyKind",
    "FieldMetadata",
    "VersionFieldMetadata",
    "OneToOneAssociationMetadata",
    "ManyToOneAssociationMetadata",
    "OneToManyAssociationMetadata",
    "ManyToManyAssociationMetadata",
    "ValueGeneratorMetadata",
    "TableMetadata",
    "JoinColumnMetadata",
    "JoinTableMetadata",
    "DiscriminatorColumnMetadata",
    "CacheMetadata",
    "EntityListener",
]
