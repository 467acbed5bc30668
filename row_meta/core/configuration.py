"""Metadata configuration and platform loading.

Configuration is a Pydantic model carrying the collaborators a
ClassMetadataFactory needs. Platforms are resolved by backend name through
a module map, the same way drivers are looked up.
"""

from __future__ import annotations

import importlib
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from row_meta.core.enums import DatabaseBackend
from row_meta.core.events import EventManager
from row_meta.core.exceptions import PlatformError

# Platform module mapping: backend name → (module_path, class_name)
_PLATFORM_MAP: dict[str, tuple[str, str]] = {
    "sqlite": ("row_meta.platforms.sqlite", "SqlitePlatform"),
    "postgresql": ("row_meta.platforms.postgresql", "PostgresqlPlatform"),
    "mysql": ("row_meta.platforms.mysql", "MysqlPlatform"),
    "oracle": ("row_meta.platforms.oracle", "OraclePlatform"),
}


def load_platform(name: str | DatabaseBackend) -> Any:
    """Instantiate the platform registered for a backend name."""
    key = name.value if isinstance(name, DatabaseBackend) else name.lower()
    if key not in _PLATFORM_MAP:
        raise PlatformError(f"Unsupported database platform: {name}")

    module_path, cls_name = _PLATFORM_MAP[key]
    try:
        module = importlib.import_module(module_path)
        return getattr(module, cls_name)()
    except (ImportError, AttributeError) as e:
        raise PlatformError(f"Failed to load platform '{name}': {e}") from e


class Configuration(BaseModel):
    """Configuration for class metadata loading."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    platform: str = DatabaseBackend.SQLITE.value
    metadata_driver: Any = None
    naming_strategy: Any = None
    reflection_service: Any = None
    metadata_cache: Any = None
    cache_salt: str = "$CLASSMETADATA"

    @field_validator("platform")
    @classmethod
    def _known_platform(cls, value: str) -> str:
        value = value.lower()
        if value not in _PLATFORM_MAP:
            raise ValueError(f"Unsupported database platform: {value}")
        return value


class ConfiguredEntityManager:
    """Minimal entity manager wiring built from a Configuration.

    Exposes what a ClassMetadataFactory reads from its entity manager:
    ``configuration``, ``event_manager`` and ``get_database_platform()``.
    """

    def __init__(self, configuration: Configuration, event_manager: EventManager | None = None):
        self.configuration = configuration
        self.event_manager = event_manager or EventManager()
        self._platform: Any = None

    def get_database_platform(self) -> Any:
        if self._platform is None:
            self._platform = load_platform(self.configuration.platform)
        return self._platform
