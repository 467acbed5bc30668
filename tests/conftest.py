"""Shared test fixtures."""

from __future__ import annotations

import pytest
from fakes import InMemoryDriver

from row_meta.core.configuration import Configuration
from row_meta.core.events import EventManager
from row_meta.mapping.factory import ClassMetadataFactory


@pytest.fixture
def driver() -> InMemoryDriver:
    return InMemoryDriver()


@pytest.fixture
def event_manager() -> EventManager:
    return EventManager()


@pytest.fixture
def make_factory(driver: InMemoryDriver, event_manager: EventManager):
    """Build a ClassMetadataFactory over the in-memory driver.

    Usage:
        factory = make_factory(platform="postgresql")
    """

    def _make(platform: str = "sqlite", **options: object) -> ClassMetadataFactory:
        configuration = Configuration(platform=platform, metadata_driver=driver, **options)
        return ClassMetadataFactory.from_config(configuration, event_manager)

    return _make


@pytest.fixture
def factory(make_factory) -> ClassMetadataFactory:
    """Factory targeting SQLite."""
    return make_factory()
