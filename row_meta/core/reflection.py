"""Reflection services.

Class names are dotted paths (``package.module.Outer.Inner``). The runtime
service imports the longest importable module prefix and walks the rest as
attributes; the static service never touches live classes.
"""

from __future__ import annotations

import importlib
import inspect
from typing import Any, Protocol, runtime_checkable


def class_name_of(cls: type) -> str:
    """Dotted name used as metadata key for a live class."""
    return f"{cls.__module__}.{cls.__qualname__}"


@runtime_checkable
class ReflectionService(Protocol):
    """Reflection capability consumed by the metadata factory."""

    def get_class(self, class_name: str) -> type | None: ...

    def class_exists(self, class_name: str) -> bool: ...

    def get_parent_classes(self, class_name: str) -> list[str]: ...

    def is_subclass_of(self, class_name: str, parent_name: str) -> bool: ...

    def is_abstract(self, class_name: str) -> bool: ...

    def has_public_method(self, class_name: str, method: str) -> bool: ...


class RuntimeReflectionService:
    """Reflection backed by live, importable Python classes."""

    def __init__(self) -> None:
        self._classes: dict[str, type | None] = {}

    def get_class(self, class_name: str) -> type | None:
        """Resolve a dotted class name, or None if it cannot be imported."""
        if class_name not in self._classes:
            self._classes[class_name] = self._resolve(class_name)
        return self._classes[class_name]

    @staticmethod
    def _resolve(class_name: str) -> type | None:
        parts = class_name.split(".")
        for split in range(len(parts) - 1, 0, -1):
            module_path = ".".join(parts[:split])
            try:
                target: Any = importlib.import_module(module_path)
            except ImportError:
                continue
            try:
                for attr in parts[split:]:
                    target = getattr(target, attr)
            except AttributeError:
                return None
            return target if inspect.isclass(target) else None
        return None

    def class_exists(self, class_name: str) -> bool:
        return self.get_class(class_name) is not None

    def get_parent_classes(self, class_name: str) -> list[str]:
        """Ancestors of a class, nearest first, excluding ``object``."""
        cls = self.get_class(class_name)
        if cls is None:
            return []
        return [class_name_of(base) for base in cls.__mro__[1:] if base is not object]

    def is_subclass_of(self, class_name: str, parent_name: str) -> bool:
        cls = self.get_class(class_name)
        parent = self.get_class(parent_name)
        if cls is None or parent is None or cls is parent:
            return False
        return issubclass(cls, parent)

    def is_abstract(self, class_name: str) -> bool:
        cls = self.get_class(class_name)
        return cls is not None and inspect.isabstract(cls)

    def has_public_method(self, class_name: str, method: str) -> bool:
        cls = self.get_class(class_name)
        if cls is None or method.startswith("_"):
            return False
        return callable(getattr(cls, method, None))


class StaticReflectionService:
    """Reflection for pre-validated metadata built without live classes."""

    def get_class(self, class_name: str) -> type | None:
        return None

    def class_exists(self, class_name: str) -> bool:
        return True

    def get_parent_classes(self, class_name: str) -> list[str]:
        return []

    def is_subclass_of(self, class_name: str, parent_name: str) -> bool:
        return False

    def is_abstract(self, class_name: str) -> bool:
        return False

    def has_public_method(self, class_name: str, method: str) -> bool:
        return True
