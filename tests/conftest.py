"""
Shared pytest fixtures for the hologram server test suite.

This module provides fixtures that are automatically available to all test files:
- An in-memory world with the "world" and "nether" worlds loaded
- YAML storage in a per-test temporary directory
- A HologramStore wired to both, with predictable ids
- A default MarkupRenderer
- A FastAPI TestClient serving that store
"""

import itertools
from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from holo_server.api.server import create_app
from holo_server.config import use_test_storage
from holo_server.core.memory_world import InMemoryWorldAdapter
from holo_server.core.persistence import YamlHologramPersistence
from holo_server.core.store import HologramStore
from holo_server.core.types import Location
from holo_server.markup.renderer import MarkupRenderer

# ============================================================================
# RENDERER FIXTURES
# ============================================================================


@pytest.fixture
def renderer() -> MarkupRenderer:
    """Renderer with tracing disabled."""
    return MarkupRenderer()


# ============================================================================
# WORLD AND STORAGE FIXTURES
# ============================================================================


@pytest.fixture
def world() -> InMemoryWorldAdapter:
    """In-memory world with two loaded worlds and no bridge clients."""
    return InMemoryWorldAdapter(["world", "nether"])


@pytest.fixture
def spawn() -> Location:
    """A location in the default world."""
    return Location(world="world", x=10.5, y=64.0, z=-3.25)


@pytest.fixture
def storage_path(tmp_path: Path) -> Generator[Path, None, None]:
    """
    Point configured storage at a temporary file.

    Yields:
        Path to the (not yet created) storage file
    """
    with use_test_storage(tmp_path / "holograms.yml") as path:
        yield path


@pytest.fixture
def persistence(storage_path: Path) -> YamlHologramPersistence:
    return YamlHologramPersistence(storage_path)


@pytest.fixture
def store(persistence: YamlHologramPersistence, world: InMemoryWorldAdapter) -> HologramStore:
    """
    Loaded store with sequential ids ("holo-1", "holo-2", ...).
    """
    counter = itertools.count(1)
    hologram_store = HologramStore(
        persistence,
        world,
        id_factory=lambda: f"holo-{next(counter)}",
    )
    hologram_store.load()
    return hologram_store


# ============================================================================
# API FIXTURES
# ============================================================================


@pytest.fixture
def test_client(store: HologramStore) -> Generator[TestClient, None, None]:
    """
    FastAPI TestClient around the ``store`` fixture.

    The store is already loaded, so the app skips its startup load. The
    client is entered as a context manager so the shutdown hook runs.

    Example:
        def test_list(test_client):
            response = test_client.get("/holograms")
            assert response.status_code == 200
    """
    app = create_app(store, load_on_startup=False)
    with TestClient(app) as client:
        yield client
