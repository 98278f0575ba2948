"""
Shared pytest fixtures and configuration for docspine tests.

This module provides:
- Identity registry / settings cache cleanup for test isolation
- Reference timestamps used across the index-selection tests
- A mock-transport store client factory

Usage:
    Fixtures are auto-discovered by pytest; request them as test arguments.
"""

import os
import sys
from collections.abc import Callable, Generator
from pathlib import Path

import httpx
import pytest
import structlog

# Ensure docspine package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from docspine.core.settings import DocSpineSettings, clear_settings_cache
from docspine.identity.resolver import get_identity_registry
from docspine.store.client import DocumentStoreClient, StoreHostOptions


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark every test without an explicit marker as a unit test."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if "unit" not in markers:
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def clean_identity_registry() -> Generator[None, None, None]:
    """Forget resolved entity types before and after each test."""
    get_identity_registry().clear()
    yield
    get_identity_registry().clear()


@pytest.fixture(autouse=True)
def clean_settings_cache(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Start each test from default settings, unaffected by the host environment."""
    for name in list(os.environ):
        if name.startswith("DOCSPINE_"):
            monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Undo any configure_logging() call made during the test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def settings() -> DocSpineSettings:
    return DocSpineSettings(_env_file=None)


# =============================================================================
# Reference instants (all +09:00)
# =============================================================================


@pytest.fixture
def jun22_0900() -> int:
    """2019-06-22 09:00:00 +09:00"""
    return 1561161600


@pytest.fixture
def jun23_2359() -> int:
    """2019-06-23 23:59:59 +09:00"""
    return 1561301999


# =============================================================================
# Store
# =============================================================================


@pytest.fixture
def store_options() -> StoreHostOptions:
    return StoreHostOptions(nodes=["http://store.test:9200"], request_timeout=5)


@pytest.fixture
def make_client(store_options: StoreHostOptions) -> Generator[Callable[..., DocumentStoreClient], None, None]:
    """Build clients whose requests are answered by ``handler(request) -> httpx.Response``."""
    clients: list[DocumentStoreClient] = []

    def factory(handler: Callable[[httpx.Request], httpx.Response], options: StoreHostOptions | None = None):
        client = DocumentStoreClient(options or store_options, transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield factory
    for client in clients:
        client.close()
