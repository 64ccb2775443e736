"""Hologram admin endpoints.

Direct CRUD over the store plus a ``/command`` endpoint that runs player
commands through ``HologramCommands`` exactly as the game would.
"""

import logging

from fastapi import APIRouter, HTTPException

from holo_server.api.models import (
    CommandRequest,
    CommandResponse,
    CreateHologramRequest,
    CreateHologramResponse,
    HologramListResponse,
    HologramResponse,
    StatusResponse,
)
from holo_server.commands import HologramCommands, SimpleSender
from holo_server.core.store import HologramStore
from holo_server.core.types import Location
from holo_server.errors import PersistenceError
from holo_server.markup.codes import strip_markers

logger = logging.getLogger(__name__)


def _storage_failure(action: str, exc: PersistenceError) -> HTTPException:
    return HTTPException(status_code=500, detail=f"Failed to {action} holograms: {exc}")


def router(store: HologramStore) -> APIRouter:
    """Build the hologram router with access to the store."""
    api = APIRouter()
    commands = HologramCommands(store)

    @api.get("/holograms", response_model=HologramListResponse)
    def list_holograms():
        """List the ids of every stored hologram."""
        return HologramListResponse(ids=store.list_ids())

    @api.get("/holograms/{hologram_id}", response_model=HologramResponse)
    def get_hologram(hologram_id: str):
        """Return one hologram, 404 if unknown."""
        record = store.get(hologram_id)
        if record is None:
            raise HTTPException(status_code=404, detail="No hologram found with that ID.")
        return HologramResponse(
            id=record.id,
            world=record.location.world,
            x=record.location.x,
            y=record.location.y,
            z=record.location.z,
            raw_message=record.raw_message,
            rendered_message=record.rendered_message,
            plain_text=strip_markers(record.rendered_message),
        )

    @api.post("/holograms", response_model=CreateHologramResponse, status_code=201)
    def create_hologram(request: CreateHologramRequest):
        """Create a hologram at the given location."""
        location = Location(world=request.world, x=request.x, y=request.y, z=request.z)
        try:
            hologram_id = store.create(request.message, location)
        except PersistenceError as exc:
            logger.error("Create via API failed: %s", exc)
            raise _storage_failure("save", exc) from exc

        return CreateHologramResponse(
            id=hologram_id, rendered_message=store.renderer.render(request.message)
        )

    @api.delete("/holograms/{hologram_id}", response_model=StatusResponse)
    def delete_hologram(hologram_id: str):
        """Delete a hologram, 404 if unknown."""
        try:
            deleted = store.delete(hologram_id)
        except PersistenceError as exc:
            logger.error("Delete via API failed: %s", exc)
            raise _storage_failure("save", exc) from exc
        if not deleted:
            raise HTTPException(status_code=404, detail="No hologram found with that ID.")
        return StatusResponse(success=True, message="Hologram deleted!")

    @api.post("/holograms/reload", response_model=StatusResponse)
    def reload_holograms():
        """Reload every hologram from storage."""
        try:
            store.reload()
        except PersistenceError as exc:
            logger.error("Reload via API failed: %s", exc)
            raise _storage_failure("load", exc) from exc
        return StatusResponse(success=True, message="Holograms reloaded!")

    @api.post("/command", response_model=CommandResponse)
    def execute_command(request: CommandRequest):
        """
        Execute a player command.

        The leading slash is optional and the verb is case-insensitive.
        Arguments keep their case.
        """
        line = request.command.strip()
        if line.startswith("/"):
            line = line[1:]
        parts = line.split()
        if not parts:
            return CommandResponse(success=False, message="Enter a command.")

        sender = SimpleSender(
            name=request.sender,
            location=Location(world=request.world, x=request.x, y=request.y, z=request.z),
            permissions=frozenset(request.permissions),
        )
        result = commands.dispatch(sender, parts[0], parts[1:])
        if result is None:
            return CommandResponse(success=False, message=f"Unknown command: {parts[0]}")
        return CommandResponse(
            success=result.success, message=result.message, hologram_id=result.hologram_id
        )

    return api
