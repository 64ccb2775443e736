"""Shared data structures and the world-facing protocol.

``Location`` and ``HologramRecord`` are plain frozen dataclasses. The
``WorldAdapter`` protocol is everything the store needs from the runtime
that actually shows holograms to players; the store never talks to that
runtime any other way.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

# Half-extents of the search box around a hologram, in blocks.
Radius = tuple[float, float, float]

# Opaque values owned by the world adapter.
WorldHandle = Any
ObjectHandle = Any


@dataclass(frozen=True)
class Location:
    """A point in a named world.

    The world is referenced by name only and is resolved through the
    ``WorldAdapter`` each time it is needed.
    """

    world: str
    x: float
    y: float
    z: float


@dataclass(frozen=True)
class HologramRecord:
    """One stored hologram.

    Attributes:
        id:               Unique, never-reused identifier.
        location:         Where the hologram is placed.
        raw_message:      Text exactly as supplied by its creator.
        rendered_message: ``raw_message`` after rendering. Kept alongside so
                          removal matching never has to re-render.
    """

    id: str
    location: Location
    raw_message: str
    rendered_message: str


class WorldAdapter(Protocol):
    """Runtime capabilities consumed by ``HologramStore``."""

    def resolve_world(self, name: str) -> WorldHandle | None:
        """Return a handle for the named world, or ``None`` if not loaded."""
        ...

    def spawn(
        self,
        world: WorldHandle,
        location: Location,
        text: str,
        bold_capable_display: bool,
    ) -> ObjectHandle:
        """Create a visible text object and return its handle."""
        ...

    def find_near(self, location: Location, radius: Radius) -> Sequence[ObjectHandle]:
        """Return every text-bearing object inside the box around ``location``."""
        ...

    def displayed_text(self, handle: ObjectHandle) -> str | None:
        """Return the text currently shown by ``handle``."""
        ...

    def destroy(self, handle: ObjectHandle) -> None:
        """Remove ``handle`` from the world. Destroying twice is a no-op."""
        ...

    def has_bridge_client_online(self) -> bool:
        """Return True if any connected client needs the legacy display."""
        ...
