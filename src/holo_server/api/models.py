"""
Pydantic models for API requests and responses.

Models are organized into two categories:
1. Request models: Data sent FROM the client TO the server
2. Response models: Data sent FROM the server TO the client
"""

from pydantic import BaseModel, Field

# ============================================================================
# REQUEST MODELS (Client → Server)
# ============================================================================


class CreateHologramRequest(BaseModel):
    """
    Request to place a new hologram.

    Attributes:
        message: Raw markup text (hex, gradient, bold and legacy codes allowed)
        world: Name of the world to place it in
        x, y, z: Coordinates within that world
    """

    message: str = Field(min_length=1)
    world: str = Field(min_length=1)
    x: float
    y: float
    z: float


class CommandRequest(BaseModel):
    """
    A player command, as typed in game.

    Attributes:
        sender: Name of the issuing player
        command: Full command line, with or without the leading slash
        world, x, y, z: The player's current location
        permissions: Permission nodes held by the player
    """

    sender: str
    command: str
    world: str
    x: float
    y: float
    z: float
    permissions: list[str] = Field(default_factory=list)


# ============================================================================
# RESPONSE MODELS (Server → Client)
# ============================================================================


class HologramResponse(BaseModel):
    """A stored hologram."""

    id: str
    world: str
    x: float
    y: float
    z: float
    raw_message: str
    rendered_message: str
    plain_text: str


class HologramListResponse(BaseModel):
    """Ids of every stored hologram."""

    ids: list[str]


class CreateHologramResponse(BaseModel):
    """Id of a freshly created hologram."""

    id: str
    rendered_message: str


class StatusResponse(BaseModel):
    """Generic success/message reply."""

    success: bool
    message: str


class CommandResponse(BaseModel):
    """
    Result of a player command.

    Attributes:
        success: Whether the command took effect
        message: Rendered reply shown to the player
        hologram_id: Id of the created hologram, for /holocreate
    """

    success: bool
    message: str
    hologram_id: str | None = None
