"""Hologram storage.

The store depends only on the ``HologramPersistence`` protocol. The
shipped implementation, ``YamlHologramPersistence``, keeps one YAML
mapping per hologram id::

    3f0c2a9e-...:
      world: world
      x: 10.5
      y: 64.0
      z: -3.25
      message: "&aHello"

``message`` is the raw, unrendered text. Mutations are staged in memory
by ``save``/``remove`` and only reach disk on ``flush``, which replaces
the file atomically. Whatever is on disk is authoritative on the next
``load_all``.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

import yaml

from holo_server.core.types import Location
from holo_server.errors import (
    PersistenceOperationContext,
    PersistenceReadError,
    PersistenceWriteError,
)

logger = logging.getLogger(__name__)

StoredHologram = tuple[str, str, Location]


class HologramPersistence(Protocol):
    """Storage capabilities consumed by ``HologramStore``."""

    def load_all(self) -> list[StoredHologram]:
        """Return every stored ``(id, raw_message, location)``."""
        ...

    def save(self, hologram_id: str, raw_message: str, location: Location) -> None: ...

    def remove(self, hologram_id: str) -> None: ...

    def flush(self) -> None:
        """Durably commit staged changes."""
        ...


class YamlHologramPersistence:
    """YAML-file implementation of ``HologramPersistence``."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._entries: dict[str, dict[str, Any]] = {}
        self._loaded = False

    @property
    def path(self) -> Path:
        return self._path

    def load_all(self) -> list[StoredHologram]:
        """Re-read the file from disk, replacing any staged changes.

        A missing file is an empty store. Entries that lack a world or a
        message, or whose coordinates are not numbers, are skipped with a
        warning.

        Raises:
            PersistenceReadError: If the file cannot be read or parsed.
        """
        self._entries = self._read()
        self._loaded = True

        stored: list[StoredHologram] = []
        for hologram_id, entry in self._entries.items():
            parsed = self._parse_entry(hologram_id, entry)
            if parsed is not None:
                stored.append(parsed)
        return stored

    def save(self, hologram_id: str, raw_message: str, location: Location) -> None:
        self._ensure_loaded()
        self._entries[hologram_id] = {
            "world": location.world,
            "x": float(location.x),
            "y": float(location.y),
            "z": float(location.z),
            "message": raw_message,
        }

    def remove(self, hologram_id: str) -> None:
        self._ensure_loaded()
        self._entries.pop(hologram_id, None)

    def flush(self) -> None:
        """Write staged entries to disk via a temp file and ``os.replace``.

        Raises:
            PersistenceWriteError: If the file cannot be written.
        """
        self._ensure_loaded()
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    yaml.safe_dump(
                        self._entries,
                        handle,
                        sort_keys=False,
                        allow_unicode=True,
                        default_flow_style=False,
                    )
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, yaml.YAMLError) as exc:
            raise PersistenceWriteError(
                context=PersistenceOperationContext(
                    operation="holograms.flush", details=f"{self._path}: {exc}"
                ),
                cause=exc,
            ) from exc

    # ── Internal helpers ──────────────────────────────────────────────────────

    def _ensure_loaded(self) -> None:
        # Staged changes always start from the file contents.
        if not self._loaded:
            self._entries = self._read()
            self._loaded = True

    def _read(self) -> dict[str, dict[str, Any]]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                raw = yaml.safe_load(handle) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise PersistenceReadError(
                context=PersistenceOperationContext(
                    operation="holograms.load_all", details=f"{self._path}: {exc}"
                ),
                cause=exc,
            ) from exc

        if not isinstance(raw, dict):
            raise PersistenceReadError(
                context=PersistenceOperationContext(
                    operation="holograms.load_all",
                    details=f"{self._path}: top level must be a mapping",
                )
            )
        entries: dict[str, dict[str, Any]] = {}
        for key, value in raw.items():
            # YAML may parse ids such as 123 as ints; keys are always strings here.
            if isinstance(value, dict):
                entries[str(key)] = value
            else:
                logger.warning("Dropping hologram %s: entry is not a mapping", key)
        return entries

    def _parse_entry(self, hologram_id: str, entry: dict[str, Any]) -> StoredHologram | None:
        world = entry.get("world")
        message = entry.get("message")
        if not world or message is None:
            logger.warning("Skipping hologram %s: missing world or message", hologram_id)
            return None
        try:
            location = Location(
                world=str(world),
                x=float(entry.get("x", 0.0)),
                y=float(entry.get("y", 0.0)),
                z=float(entry.get("z", 0.0)),
            )
        except (TypeError, ValueError):
            logger.warning("Skipping hologram %s: coordinates are not numbers", hologram_id)
            return None
        return hologram_id, str(message), location
