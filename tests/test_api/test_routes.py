"""
Tests for the hologram admin API (holo_server/api).

Tests cover:
- Identity and health endpoints
- Hologram CRUD endpoints
- Reload endpoint
- The /command endpoint running player commands
- Storage failures mapped to HTTP 500
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from holo_server import __version__
from holo_server.api.server import create_app
from holo_server.commands import PERMISSION_CREATE, PERMISSION_DELETE
from holo_server.core.persistence import YamlHologramPersistence
from holo_server.core.store import HologramStore
from holo_server.errors import (
    PersistenceOperationContext,
    PersistenceReadError,
    PersistenceWriteError,
)

NEW_HOLOGRAM = {"message": "&aHello", "world": "world", "x": 1.0, "y": 64.0, "z": 2.5}


def _command(line: str, permissions=(PERMISSION_CREATE, PERMISSION_DELETE)) -> dict:
    return {
        "sender": "alex",
        "command": line,
        "world": "world",
        "x": 0.0,
        "y": 64.0,
        "z": 0.0,
        "permissions": list(permissions),
    }


# ============================================================================
# IDENTITY AND HEALTH
# ============================================================================


@pytest.mark.api
def test_root_reports_version(test_client):
    response = test_client.get("/")

    assert response.status_code == 200
    assert response.json() == {"message": "Hologram Server API", "version": __version__}


@pytest.mark.api
def test_health_counts(test_client):
    test_client.post("/holograms", json=NEW_HOLOGRAM)

    response = test_client.get("/health")

    assert response.json() == {"status": "ok", "holograms": 1, "live_objects": 1}


# ============================================================================
# CRUD
# ============================================================================


@pytest.mark.api
def test_create_and_get(test_client):
    created = test_client.post("/holograms", json=NEW_HOLOGRAM)

    assert created.status_code == 201
    body = created.json()
    assert body == {"id": "holo-1", "rendered_message": "§aHello"}

    fetched = test_client.get("/holograms/holo-1").json()
    assert fetched == {
        "id": "holo-1",
        "world": "world",
        "x": 1.0,
        "y": 64.0,
        "z": 2.5,
        "raw_message": "&aHello",
        "rendered_message": "§aHello",
        "plain_text": "Hello",
    }


@pytest.mark.api
def test_list_ids(test_client):
    test_client.post("/holograms", json=NEW_HOLOGRAM)
    test_client.post("/holograms", json=NEW_HOLOGRAM)

    assert test_client.get("/holograms").json() == {"ids": ["holo-1", "holo-2"]}


@pytest.mark.api
def test_get_unknown_is_404(test_client):
    response = test_client.get("/holograms/missing")

    assert response.status_code == 404
    assert response.json()["detail"] == "No hologram found with that ID."


@pytest.mark.api
@pytest.mark.parametrize("field", ["message", "world"])
def test_create_rejects_empty_fields(test_client, field):
    response = test_client.post("/holograms", json={**NEW_HOLOGRAM, field: ""})
    assert response.status_code == 422


@pytest.mark.api
def test_delete(test_client, world):
    test_client.post("/holograms", json=NEW_HOLOGRAM)

    response = test_client.delete("/holograms/holo-1")

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Hologram deleted!"}
    assert test_client.get("/holograms").json() == {"ids": []}
    assert world.objects == []


@pytest.mark.api
def test_delete_unknown_is_404(test_client):
    assert test_client.delete("/holograms/missing").status_code == 404


@pytest.mark.api
def test_create_storage_failure_is_500(test_client):
    error = PersistenceWriteError(context=PersistenceOperationContext("holograms.flush"))
    with patch.object(YamlHologramPersistence, "flush", side_effect=error):
        response = test_client.post("/holograms", json=NEW_HOLOGRAM)

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to save holograms: holograms.flush"
    assert test_client.get("/holograms").json() == {"ids": []}


# ============================================================================
# RELOAD
# ============================================================================


@pytest.mark.api
def test_reload(test_client, world):
    test_client.post("/holograms", json=NEW_HOLOGRAM)

    response = test_client.post("/holograms/reload")

    assert response.json() == {"success": True, "message": "Holograms reloaded!"}
    assert len(world.objects) == 1


@pytest.mark.api
def test_reload_storage_failure_is_500(test_client):
    error = PersistenceReadError(context=PersistenceOperationContext("holograms.load_all"))
    with patch.object(YamlHologramPersistence, "load_all", side_effect=error):
        response = test_client.post("/holograms/reload")

    assert response.status_code == 500
    assert response.json()["detail"].startswith("Failed to load holograms:")


# ============================================================================
# COMMANDS
# ============================================================================


@pytest.mark.api
def test_command_create_and_delete(test_client):
    created = test_client.post("/command", json=_command("/holocreate <bold>Hi</bold>")).json()

    assert created["success"] is True
    assert created["hologram_id"] == "holo-1"
    assert created["message"] == "§aHologram created! (holo-1)"

    deleted = test_client.post("/command", json=_command("holodelete holo-1")).json()
    assert deleted == {"success": True, "message": "§aHologram deleted!", "hologram_id": None}


@pytest.mark.api
def test_command_without_permission(test_client):
    response = test_client.post("/command", json=_command("/holoreload")).json()

    assert response["success"] is False
    assert response["message"] == "§cYou do not have permission to use this command."


@pytest.mark.api
def test_unknown_command(test_client):
    response = test_client.post("/command", json=_command("/fly")).json()
    assert response == {"success": False, "message": "Unknown command: fly", "hologram_id": None}


@pytest.mark.api
@pytest.mark.parametrize("line", ["", "   ", "/"])
def test_empty_command(test_client, line):
    response = test_client.post("/command", json=_command(line)).json()
    assert response["message"] == "Enter a command."


# ============================================================================
# LIFESPAN
# ============================================================================


@pytest.mark.api
def test_lifespan_loads_and_shuts_down(persistence, world, spawn):
    persistence.save("seeded", "&eFrom disk", spawn)
    persistence.flush()
    store = HologramStore(YamlHologramPersistence(persistence.path), world)

    with TestClient(create_app(store)) as client:
        assert client.get("/holograms").json() == {"ids": ["seeded"]}
        assert len(world.objects) == 1

    assert world.objects == []
    assert store.list_ids() == ["seeded"]
