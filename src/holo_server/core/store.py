"""Hologram store: records, persistence and live objects.

``HologramStore`` owns three things and is the only code that mutates
them:

- the in-memory index of ``HologramRecord`` objects, keyed by id
- the persisted copy, reached through ``HologramPersistence``
- the ``LiveObjectArena`` of objects spawned in the world

Consistency rules
-----------------
Every successful ``create`` and ``delete`` ends with a synchronous
``flush``. If the flush fails the in-memory change is undone and the
``PersistenceError`` is raised, so the caller always knows whether the
operation took effect.

A record whose world is not loaded is kept but not materialized. Deleting
such a record still removes it from storage; its live object, if any,
stays behind.

Deleting a record whose live object cannot be found is not an error
either: storage consistency wins over what is visible in the world.

The store is not thread-safe. Callers serialise access.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable

from holo_server import config as config_module
from holo_server.core.arena import LiveObjectArena
from holo_server.core.matching import RemovalMatcher, StrippedTextMatcher
from holo_server.core.persistence import HologramPersistence, YamlHologramPersistence
from holo_server.core.types import HologramRecord, Location, ObjectHandle, Radius, WorldAdapter
from holo_server.errors import PersistenceError
from holo_server.markup.renderer import MarkupRenderer, RendererConfig

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_RADIUS: Radius = (2.0, 3.0, 2.0)


def _uuid4_id() -> str:
    return str(uuid.uuid4())


class HologramStore:
    """Keyed collection of holograms backed by persistent storage."""

    def __init__(
        self,
        persistence: HologramPersistence,
        world: WorldAdapter,
        *,
        renderer: MarkupRenderer | None = None,
        matcher: RemovalMatcher | None = None,
        search_radius: Radius = DEFAULT_SEARCH_RADIUS,
        id_factory: Callable[[], str] = _uuid4_id,
    ) -> None:
        self._persistence = persistence
        self._world = world
        self._renderer = renderer or MarkupRenderer()
        self._matcher = matcher or StrippedTextMatcher()
        self._search_radius = search_radius
        self._id_factory = id_factory

        self._records: dict[str, HologramRecord] = {}
        # Every id ever seen by this store, deleted ones included.
        self._issued_ids: set[str] = set()
        self._arena = LiveObjectArena(world)

    # ── Queries ───────────────────────────────────────────────────────────────

    @property
    def renderer(self) -> MarkupRenderer:
        return self._renderer

    @property
    def live_count(self) -> int:
        return len(self._arena)

    @property
    def live_handles(self) -> list[ObjectHandle]:
        return self._arena.handles

    def list_ids(self) -> list[str]:
        return list(self._records)

    def get(self, hologram_id: str) -> HologramRecord | None:
        return self._records.get(hologram_id)

    def __contains__(self, hologram_id: object) -> bool:
        return hologram_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def create(self, raw_message: str, location: Location) -> str:
        """Render, store and materialize a new hologram.

        The same message at the same location may be created any number
        of times; each call gets its own id.

        Returns:
            The new hologram id.

        Raises:
            PersistenceError: If the record could not be saved. Nothing is
                              kept in memory or spawned in that case.
        """
        hologram_id = self._new_id()
        record = HologramRecord(
            id=hologram_id,
            location=location,
            raw_message=raw_message,
            rendered_message=self._renderer.render(raw_message),
        )

        self._records[hologram_id] = record
        try:
            self._persistence.save(hologram_id, raw_message, location)
            try:
                self._persistence.flush()
            except PersistenceError:
                self._persistence.remove(hologram_id)
                raise
        except PersistenceError:
            del self._records[hologram_id]
            logger.error("Failed to persist new hologram %s", hologram_id)
            raise
        self._issued_ids.add(hologram_id)

        self._materialize(record)
        logger.info("Hologram %s created in %s", hologram_id, location.world)
        return hologram_id

    def delete(self, hologram_id: str) -> bool:
        """Remove a hologram from the world and from storage.

        Returns:
            False if no hologram has this id, True once storage no longer
            holds it.

        Raises:
            PersistenceError: If the removal could not be saved. The record
                              stays in the store and its live object is
                              spawned again in that case.
        """
        record = self._records.get(hologram_id)
        if record is None:
            logger.warning("Tried to remove a hologram that does not exist: %s", hologram_id)
            return False

        destroyed = False
        world_handle = self._world.resolve_world(record.location.world)
        if world_handle is None:
            logger.warning(
                "Could not remove hologram %s from the world because the world %s is not loaded",
                hologram_id,
                record.location.world,
            )
        else:
            outcome = self._matcher.remove_match(self._world, record, self._search_radius)
            if outcome.handle is not None:
                self._arena.forget(outcome.handle)
                destroyed = True

        try:
            self._persistence.remove(hologram_id)
            try:
                self._persistence.flush()
            except PersistenceError:
                self._persistence.save(hologram_id, record.raw_message, record.location)
                raise
        except PersistenceError:
            if destroyed:
                self._materialize(record)
            logger.error("Failed to persist removal of hologram %s", hologram_id)
            raise

        del self._records[hologram_id]
        logger.info("Hologram %s deleted", hologram_id)
        return True

    def reload(self) -> None:
        """Tear down live objects, re-read storage and materialize again.

        Raises:
            PersistenceError: If storage cannot be read. Live objects are
                              already gone at that point and the index is
                              left as it was.
        """
        self._arena.destroy_all()

        records: dict[str, HologramRecord] = {}
        for hologram_id, raw_message, location in self._persistence.load_all():
            records[hologram_id] = HologramRecord(
                id=hologram_id,
                location=location,
                raw_message=raw_message,
                rendered_message=self._renderer.render(raw_message),
            )
        self._records = records
        self._issued_ids.update(records)

        materialized = sum(1 for record in records.values() if self._materialize(record))
        logger.info("Loaded %d holograms (%d materialized)", len(records), materialized)

    load = reload

    def shutdown(self) -> None:
        """Destroy every live object this store spawned."""
        self._arena.destroy_all()

    # ── Internal helpers ──────────────────────────────────────────────────────

    def _materialize(self, record: HologramRecord) -> ObjectHandle | None:
        world_handle = self._world.resolve_world(record.location.world)
        if world_handle is None:
            logger.warning(
                "Could not load hologram %s because the world %s is not loaded",
                record.id,
                record.location.world,
            )
            return None
        return self._arena.materialize(world_handle, record.location, record.rendered_message)

    def _new_id(self) -> str:
        hologram_id = self._id_factory()
        while hologram_id in self._issued_ids or hologram_id in self._records:
            hologram_id = self._id_factory()
        return hologram_id


def create_store(world: WorldAdapter, *, storage_path: str | None = None) -> HologramStore:
    """Build a store from the loaded configuration.

    Args:
        world:        Runtime adapter used to spawn and find holograms.
        storage_path: Overrides ``config.storage.path`` when given.
    """
    cfg = config_module.config
    path = storage_path or cfg.storage.absolute_path
    return HologramStore(
        YamlHologramPersistence(path),
        world,
        renderer=MarkupRenderer(RendererConfig(trace_enabled=cfg.renderer.chat_debug)),
        search_radius=cfg.matching.radius,
    )
