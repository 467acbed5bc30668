"""Property metadata variants.

Every mapped property shares a common header (name, declaring class,
primary key flag) and carries a ``kind`` tag. Consumers dispatch on the
tag with ``match`` rather than on concrete types:

    FIELD    -> FieldMetadata
    VERSION  -> VersionFieldMetadata
    TO_ONE   -> OneToOneAssociationMetadata, ManyToOneAssociationMetadata
    TO_MANY  -> OneToManyAssociationMetadata, ManyToManyAssociationMetadata
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

from row_meta.core.enums import CacheUsage, FetchMode, GeneratorType

if TYPE_CHECKING:
    from row_meta.mapping.metadata import ClassMetadata


class PropertyKind(Enum):
    """Closed set of property variants."""

    FIELD = "field"
    VERSION = "version"
    TO_ONE = "to_one"
    TO_MANY = "to_many"


@dataclass(frozen=True)
class ValueGeneratorMetadata:
    """Declared generator of a field: strategy tag plus free-form definition."""

    type: GeneratorType
    definition: dict[str, Any] = field(default_factory=dict)


@dataclass
class TableMetadata:
    name: str | None = None
    schema: str | None = None

    @property
    def qualified_name(self) -> str | None:
        if self.name is None:
            return None
        return f"{self.schema}.{self.name}" if self.schema else self.name


@dataclass
class JoinColumnMetadata:
    column_name: str | None = None
    referenced_column_name: str | None = None
    table_name: str | None = None
    on_delete: str | None = None
    nullable: bool = True
    unique: bool = False
    primary_key: bool = False


@dataclass
class JoinTableMetadata:
    name: str | None = None
    schema: str | None = None
    join_columns: list[JoinColumnMetadata] = field(default_factory=list)
    inverse_join_columns: list[JoinColumnMetadata] = field(default_factory=list)

    def has_columns(self) -> bool:
        return bool(self.join_columns or self.inverse_join_columns)


@dataclass
class DiscriminatorColumnMetadata:
    column_name: str = "dtype"
    type_name: str = "string"
    length: int | None = 255
    table_name: str | None = None


@dataclass
class CacheMetadata:
    """Second level cache settings of an entity or association."""

    usage: CacheUsage = CacheUsage.READ_ONLY
    region: str | None = None


@dataclass(frozen=True)
class EntityListener:
    class_name: str
    method: str


@dataclass(eq=False)
class Property:
    """Common header of every property variant."""

    kind: ClassVar[PropertyKind]

    name: str
    primary_key: bool = False
    declaring_class: ClassMetadata | None = field(default=None, repr=False)

    def copy(self) -> Property:
        """Shallow copy with private copies of nested column descriptors."""
        return copy.copy(self)


@dataclass(eq=False)
class FieldMetadata(Property):
    """A column-backed scalar property."""

    kind: ClassVar[PropertyKind] = PropertyKind.FIELD

    column_name: str | None = None
    type_name: str = "string"
    table_name: str | None = None
    nullable: bool = False
    length: int | None = None
    unique: bool = False
    value_generator: ValueGeneratorMetadata | None = None
    # generator before platform resolution
    declared_value_generator: ValueGeneratorMetadata | None = field(default=None, repr=False)

    def has_value_generator(self) -> bool:
        return self.value_generator is not None


@dataclass(eq=False)
class VersionFieldMetadata(FieldMetadata):
    """Optimistic locking column."""

    kind: ClassVar[PropertyKind] = PropertyKind.VERSION

    type_name: str = "integer"


@dataclass(eq=False)
class AssociationMetadata(Property):
    """Header shared by to-one and to-many associations."""

    target_entity: str | None = None
    source_entity: str | None = None
    cascade: list[str] = field(default_factory=list)
    fetch_mode: FetchMode = FetchMode.LAZY
    owning_side: bool = True
    mapped_by: str | None = None
    inversed_by: str | None = None
    orphan_removal: bool = False
    cache: CacheMetadata | None = None


@dataclass(eq=False)
class ToOneAssociationMetadata(AssociationMetadata):
    kind: ClassVar[PropertyKind] = PropertyKind.TO_ONE

    join_columns: list[JoinColumnMetadata] = field(default_factory=list)

    def copy(self) -> ToOneAssociationMetadata:
        duplicate = copy.copy(self)
        duplicate.join_columns = [copy.copy(column) for column in self.join_columns]
        return duplicate


@dataclass(eq=False)
class OneToOneAssociationMetadata(ToOneAssociationMetadata):
    pass


@dataclass(eq=False)
class ManyToOneAssociationMetadata(ToOneAssociationMetadata):
    pass


@dataclass(eq=False)
class ToManyAssociationMetadata(AssociationMetadata):
    kind: ClassVar[PropertyKind] = PropertyKind.TO_MANY

    order_by: dict[str, str] = field(default_factory=dict)
    index_by: str | None = None


@dataclass(eq=False)
class OneToManyAssociationMetadata(ToManyAssociationMetadata):
    pass


@dataclass(eq=False)
class ManyToManyAssociationMetadata(ToManyAssociationMetadata):
    join_table: JoinTableMetadata | None = None

    def copy(self) -> ManyToManyAssociationMetadata:
        duplicate = copy.copy(self)
        if self.join_table is not None:
            duplicate.join_table = copy.deepcopy(self.join_table)
        return duplicate
