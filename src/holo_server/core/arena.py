"""Tracking of live hologram objects spawned by the store.

The arena is the only writer of the "what currently exists in the world"
list. It has no persisted identity: it starts empty and is rebuilt on
every reload.
"""

from __future__ import annotations

import logging

from holo_server.core.types import Location, ObjectHandle, WorldAdapter, WorldHandle

logger = logging.getLogger(__name__)


class LiveObjectArena:
    """Handles of every live object spawned through ``materialize``."""

    def __init__(self, world: WorldAdapter) -> None:
        self._world = world
        self._handles: list[ObjectHandle] = []

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, handle: object) -> bool:
        return any(tracked is handle for tracked in self._handles)

    @property
    def handles(self) -> list[ObjectHandle]:
        return list(self._handles)

    def materialize(self, world_handle: WorldHandle, location: Location, text: str) -> ObjectHandle:
        """Spawn a live object for ``text`` and start tracking it.

        Clients connected through the bridge cannot show the rich text
        display, so its presence selects the legacy display.
        """
        bold_capable = not self._world.has_bridge_client_online()
        handle = self._world.spawn(world_handle, location, text, bold_capable)
        self._handles.append(handle)
        return handle

    def forget(self, handle: ObjectHandle) -> bool:
        """Stop tracking ``handle`` without destroying it."""
        for index, tracked in enumerate(self._handles):
            if tracked is handle:
                del self._handles[index]
                return True
        return False

    def destroy_all(self) -> int:
        """Destroy every tracked object and clear the list.

        Returns:
            Number of handles that were tracked.
        """
        count = len(self._handles)
        for handle in self._handles:
            self._world.destroy(handle)
        self._handles.clear()
        logger.info("All holograms have been removed (%d live objects)", count)
        return count
