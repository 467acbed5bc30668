"""Two-phase, caching base of the class metadata factory.

Phase one walks the mapped ancestors of a class top-down and loads every
one that is not loaded yet (``_load_metadata``). Phase two runs the
building context's deferred steps (``ClassMetadataBuildingContext.validate``)
once the whole call tree has its primary metadata.

Every class name owns a load cell: absent (not started), IN_PROGRESS while
its own pipeline runs, READY once cached. Requesting an IN_PROGRESS class
is a cycle and fails instead of recursing.

Classes loaded by a top-level call stay uncommitted until its second pass
succeeds: only then are they written to the cache driver. If anything in
the call fails they are evicted again.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from row_meta.core.exceptions import CircularLoadError, ClassNotFoundError
from row_meta.core.reflection import ReflectionService, RuntimeReflectionService, class_name_of
from row_meta.mapping.context import ClassMetadataBuildingContext
from row_meta.mapping.metadata import ClassMetadata

log = logging.getLogger(__name__)


class LoadState(Enum):
    IN_PROGRESS = "in_progress"
    READY = "ready"


class AbstractClassMetadataFactory(ABC):
    """Loads, caches and hands out ClassMetadata by class name."""

    def __init__(self) -> None:
        self._loaded_metadata: dict[str, ClassMetadata] = {}
        self._states: dict[str, LoadState] = {}
        self._initialized = False
        self._reflection_service: ReflectionService | None = None
        self._cache_driver: Any = None
        self._cache_salt = "$CLASSMETADATA"
        self._active_context: ClassMetadataBuildingContext | None = None
        self._uncommitted: list[str] = []
        self._cache_queue: list[ClassMetadata] = []

    # --- Hooks ---

    @abstractmethod
    def _initialize(self) -> None:
        """Resolve collaborators; must set ``self._initialized``."""

    @abstractmethod
    def _get_driver(self) -> Any: ...

    @abstractmethod
    def _new_class_metadata_building_context(self) -> ClassMetadataBuildingContext: ...

    @abstractmethod
    def _do_load_metadata(
        self,
        class_name: str,
        parent: ClassMetadata | None,
        building_context: ClassMetadataBuildingContext,
    ) -> ClassMetadata:
        """Produce the complete metadata of one class."""

    @abstractmethod
    def _is_entity(self, class_metadata: ClassMetadata) -> bool: ...

    def _on_not_found_metadata(
        self, class_name: str, building_context: ClassMetadataBuildingContext
    ) -> ClassMetadata | None:
        """Last chance to supply metadata for a class the driver cannot describe."""
        return None

    # --- Collaborators ---

    def get_reflection_service(self) -> ReflectionService:
        if self._reflection_service is None:
            self._reflection_service = RuntimeReflectionService()
        return self._reflection_service

    def set_reflection_service(self, reflection_service: ReflectionService) -> None:
        self._reflection_service = reflection_service

    def set_cache_driver(self, cache_driver: Any, cache_salt: str | None = None) -> None:
        """Use an object with ``get(key)``/``set(key, value)`` as metadata cache."""
        self._cache_driver = cache_driver
        if cache_salt is not None:
            self._cache_salt = cache_salt

    def get_cache_driver(self) -> Any:
        return self._cache_driver

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            self._initialize()

    # --- Public API ---

    def get_metadata_for(self, class_name: str | type) -> ClassMetadata:
        """Return the metadata of a class, loading and caching it on first use.

        Raises:
            ClassNotFoundError: If no metadata can be produced for the class.
            CircularLoadError: If the class is requested while being loaded.
        """
        name = self._normalize_class_name(class_name)
        state = self._states.get(name)
        if state is LoadState.READY:
            return self._loaded_metadata[name]
        if state is LoadState.IN_PROGRESS:
            raise CircularLoadError(name)

        self._ensure_initialized()

        outer = self._active_context
        nested = outer is not None and not outer.is_in_second_pass()
        context = outer if nested else self._new_class_metadata_building_context()
        assert context is not None
        if nested:
            self._active_context = context
            try:
                self._load_or_fallback(name, context)
            finally:
                self._active_context = outer
            return self._loaded_metadata[name]

        outer_uncommitted, outer_cache_queue = self._uncommitted, self._cache_queue
        self._uncommitted, self._cache_queue = [], []
        self._active_context = context
        try:
            self._load_or_fallback(name, context)
            context.validate()
        except BaseException:
            for loaded_name in self._uncommitted:
                self._evict(loaded_name)
            raise
        else:
            self._commit()
        finally:
            self._active_context = outer
            self._uncommitted, self._cache_queue = outer_uncommitted, outer_cache_queue

        return self._loaded_metadata[name]

    def has_metadata_for(self, class_name: str | type) -> bool:
        name = self._normalize_class_name(class_name)
        return self._states.get(name) is LoadState.READY

    def set_metadata_for(self, class_name: str | type, class_metadata: ClassMetadata) -> None:
        """Register externally built metadata for a class."""
        self._register_loaded(self._normalize_class_name(class_name), class_metadata)

    def get_loaded_metadata(self) -> dict[str, ClassMetadata]:
        return dict(self._loaded_metadata)

    def get_all_metadata(self) -> list[ClassMetadata]:
        """Load the metadata of every class the driver knows about."""
        self._ensure_initialized()
        return [self.get_metadata_for(name) for name in self._get_driver().get_all_class_names()]

    def is_transient(self, class_name: str | type) -> bool:
        """Whether a class is not mapped."""
        self._ensure_initialized()
        name = self._normalize_class_name(class_name)
        driver = self._get_driver()
        is_transient = getattr(driver, "is_transient", None)
        if is_transient is not None:
            return bool(is_transient(name))
        return name not in driver.get_all_class_names()

    # --- Loading ---

    def _normalize_class_name(self, class_name: str | type) -> str:
        if isinstance(class_name, type):
            return class_name_of(class_name)
        return class_name

    def _register_loaded(self, class_name: str, class_metadata: ClassMetadata) -> None:
        self._loaded_metadata[class_name] = class_metadata
        self._states[class_name] = LoadState.READY

    def _commit(self) -> None:
        if self._cache_driver is not None:
            for class_metadata in self._cache_queue:
                self._cache_driver.set(class_metadata.class_name + self._cache_salt, class_metadata)
        log.debug("Committed metadata for %s", ", ".join(self._uncommitted) or "no classes")

    def _evict(self, class_name: str) -> None:
        self._loaded_metadata.pop(class_name, None)
        self._states.pop(class_name, None)

    def _load_or_fallback(self, name: str, context: ClassMetadataBuildingContext) -> None:
        cache = self._cache_driver
        try:
            if cache is not None:
                cached = cache.get(name + self._cache_salt)
                if isinstance(cached, ClassMetadata):
                    log.debug("Metadata cache hit for %s", name)
                    cached.wakeup_reflection(context.reflection_service)
                    self._register_loaded(name, cached)
                    return

            self._cache_queue.extend(self._load_metadata(name, context))
        except ClassNotFoundError as e:
            if e.class_name != name:
                raise
            fallback = self._on_not_found_metadata(name, context)
            if fallback is None:
                raise
            log.warning("Metadata for %s supplied by a not-found listener", name)
            self._register_loaded(name, fallback)
            self._uncommitted.append(name)

    def _load_metadata(
        self, name: str, building_context: ClassMetadataBuildingContext
    ) -> list[ClassMetadata]:
        """Load ``name`` and its not yet loaded mapped ancestors, root first.

        Returns:
            The metadata loaded by this call, in load order.
        """
        loaded: list[ClassMetadata] = []
        parent: ClassMetadata | None = None

        for class_name in [*self._get_parent_classes(name), name]:
            state = self._states.get(class_name)
            if state is LoadState.READY:
                parent = self._loaded_metadata[class_name]
                continue
            if state is LoadState.IN_PROGRESS:
                raise CircularLoadError(class_name)

            self._states[class_name] = LoadState.IN_PROGRESS
            try:
                class_metadata = self._do_load_metadata(class_name, parent, building_context)
            except BaseException:
                self._evict(class_name)
                raise

            self._register_loaded(class_name, class_metadata)
            self._uncommitted.append(class_name)
            parent = class_metadata
            loaded.append(class_metadata)

        return loaded

    def _get_parent_classes(self, name: str) -> list[str]:
        """Mapped ancestors of ``name``, topmost first."""
        ancestors = self.get_reflection_service().get_parent_classes(name)
        if name in ancestors or len(set(ancestors)) != len(ancestors):
            raise CircularLoadError(name, "has a cyclic parent chain")
        return [parent for parent in reversed(ancestors) if not self.is_transient(parent)]
