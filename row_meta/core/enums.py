"""Enumerations shared across the metadata layer."""

from __future__ import annotations

from enum import Enum


class DatabaseBackend(Enum):
    """Supported database backends."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    ORACLE = "oracle"


class GeneratorType(Enum):
    """Declared identifier generation strategies."""

    AUTO = "AUTO"
    SEQUENCE = "SEQUENCE"
    TABLE = "TABLE"
    IDENTITY = "IDENTITY"
    NONE = "NONE"
    UUID = "UUID"
    CUSTOM = "CUSTOM"


class InheritanceType(Enum):
    """Inheritance mapping strategies."""

    NONE = "NONE"
    SINGLE_TABLE = "SINGLE_TABLE"
    JOINED = "JOINED"


class FetchMode(Enum):
    """Association fetch modes."""

    LAZY = "LAZY"
    EAGER = "EAGER"
    EXTRA_LAZY = "EXTRA_LAZY"


class CacheUsage(Enum):
    """Second level cache concurrency strategies."""

    READ_ONLY = "READ_ONLY"
    NONSTRICT_READ_WRITE = "NONSTRICT_READ_WRITE"
    READ_WRITE = "READ_WRITE"
