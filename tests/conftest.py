"""
Shared pytest fixtures and configuration for Infiniscroll tests.

This module provides common fixtures used across unit and integration tests,
including the in-memory paginated backend and ready-made configurations for
both pagination modes.
"""

import pytest
from helpers.fake_backend import FakeCollection

from infiniscroll import CursorBasedConfig, PageBasedConfig


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")
    config.addinivalue_line("markers", "integration: End-to-end scroll scenarios")


@pytest.fixture
def collection() -> FakeCollection:
    """A 45-item backend: two full pages of 20 and a short page of 5."""
    return FakeCollection([f"item-{i}" for i in range(45)])


@pytest.fixture
def page_config(collection: FakeCollection) -> PageBasedConfig:
    """Page-based config over the shared backend, page size 20."""
    return PageBasedConfig(fetch_data=collection.fetch_page)


@pytest.fixture
def cursor_config(collection: FakeCollection) -> CursorBasedConfig:
    """Cursor-based config over the shared backend, page size 20."""
    return CursorBasedConfig(fetch_cursor=collection.fetch_cursor)
