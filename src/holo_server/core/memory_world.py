"""In-memory ``WorldAdapter``.

Stands in for a real game runtime when running the server locally and in
tests. Worlds are plain names; live objects are ``SimObject`` instances
kept in spawn order.

Two display kinds mirror what real runtimes offer:

- ``text_display``: rich text entity, shows ``text``
- ``armor_stand``: legacy fallback, shows its ``custom_name``

The legacy kind is used whenever the store asks for a display that is not
bold-capable (a bridge client is online).
"""

from __future__ import annotations

import itertools
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Literal

from holo_server.core.types import Location, Radius

DisplayKind = Literal["text_display", "armor_stand"]

_object_ids = itertools.count(1)


@dataclass(eq=False)
class SimObject:
    """A live object in the simulated world.

    Attributes:
        kind:        Display kind.
        location:    Where the object stands.
        text:        Text shown by a ``text_display``.
        custom_name: Name shown above an ``armor_stand``.
        alive:       False once destroyed.
        object_id:   Sequence number, for logs and reprs.
    """

    kind: DisplayKind
    location: Location
    text: str | None = None
    custom_name: str | None = None
    alive: bool = True
    object_id: int = field(default_factory=lambda: next(_object_ids))

    @property
    def shown(self) -> str | None:
        return self.text if self.kind == "text_display" else self.custom_name


class InMemoryWorldAdapter:
    """``WorldAdapter`` backed by Python lists."""

    def __init__(
        self,
        worlds: Iterable[str] = ("world",),
        *,
        bridge_client_online: bool = False,
    ) -> None:
        self._worlds: set[str] = set(worlds)
        self._objects: list[SimObject] = []
        self.bridge_client_online = bridge_client_online

    # ── World management (test and local-run helpers) ─────────────────────────

    def load_world(self, name: str) -> None:
        self._worlds.add(name)

    def unload_world(self, name: str) -> None:
        self._worlds.discard(name)

    @property
    def objects(self) -> list[SimObject]:
        """Live objects, in spawn order."""
        return list(self._objects)

    def place(self, obj: SimObject) -> SimObject:
        """Put an object into the world without going through ``spawn``."""
        self._objects.append(obj)
        return obj

    # ── WorldAdapter ──────────────────────────────────────────────────────────

    def resolve_world(self, name: str) -> str | None:
        return name if name in self._worlds else None

    def spawn(
        self,
        world: str,
        location: Location,
        text: str,
        bold_capable_display: bool,
    ) -> SimObject:
        placed = Location(world=world, x=location.x, y=location.y, z=location.z)
        if bold_capable_display:
            obj = SimObject(kind="text_display", location=placed, text=text)
        else:
            obj = SimObject(kind="armor_stand", location=placed, custom_name=text)
        return self.place(obj)

    def find_near(self, location: Location, radius: Radius) -> list[SimObject]:
        rx, ry, rz = radius
        return [
            obj
            for obj in self._objects
            if obj.location.world == location.world
            and abs(obj.location.x - location.x) <= rx
            and abs(obj.location.y - location.y) <= ry
            and abs(obj.location.z - location.z) <= rz
        ]

    def displayed_text(self, handle: SimObject) -> str | None:
        return handle.shown

    def destroy(self, handle: SimObject) -> None:
        if not handle.alive:
            return
        handle.alive = False
        self._objects = [obj for obj in self._objects if obj is not handle]

    def has_bridge_client_online(self) -> bool:
        return self.bridge_client_online
