"""Command-facing surface of the hologram store.

Translates the three player commands into store calls and user-facing
messages:

    /holocreate <message...>   create a hologram at the sender's location
    /holodelete <id>           delete a hologram by id
    /holoreload                reload every hologram from storage

Command names are case-insensitive. Each command requires its own
permission node and may only be run by a player (a sender with a
location). Replies are already rendered: red for failures, green for
success.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from holo_server.core.store import HologramStore
from holo_server.core.types import Location
from holo_server.errors import PersistenceError
from holo_server.markup.codes import legacy_marker

logger = logging.getLogger(__name__)

CREATE_COMMAND = "holocreate"
DELETE_COMMAND = "holodelete"
RELOAD_COMMAND = "holoreload"

PERMISSION_CREATE = "holocreator.create"
PERMISSION_DELETE = "holocreator.delete"
PERMISSION_RELOAD = "holocreator.reload"

MSG_PLAYERS_ONLY = "Only players can use this command."
MSG_NO_PERMISSION = "You do not have permission to use this command."
MSG_CREATE_USAGE = "Usage: /holocreate <message>"
MSG_DELETE_USAGE = "Usage: /holodelete <id>"
MSG_NOT_FOUND = "No hologram found with that ID."
MSG_CREATED = "Hologram created!"
MSG_DELETED = "Hologram deleted!"
MSG_RELOADED = "Holograms reloaded!"


class CommandSender(Protocol):
    """Whoever issued a command."""

    name: str

    @property
    def is_player(self) -> bool: ...

    @property
    def location(self) -> Location | None: ...

    def has_permission(self, node: str) -> bool: ...


@dataclass
class SimpleSender:
    """Plain ``CommandSender`` used by the HTTP and CLI surfaces.

    A sender without a location is treated as the console.
    """

    name: str
    location: Location | None = None
    permissions: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_player(self) -> bool:
        return self.location is not None

    def has_permission(self, node: str) -> bool:
        return node in self.permissions


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one command.

    Attributes:
        success:     Whether the command did what was asked.
        message:     Rendered reply for the sender.
        hologram_id: Id of the created hologram, for ``holocreate``.
    """

    success: bool
    message: str
    hologram_id: str | None = None


def _fail(text: str) -> CommandResult:
    return CommandResult(success=False, message=legacy_marker("red") + text)


def _ok(text: str, hologram_id: str | None = None) -> CommandResult:
    return CommandResult(
        success=True, message=legacy_marker("green") + text, hologram_id=hologram_id
    )


class HologramCommands:
    """Routes command invocations to a ``HologramStore``."""

    def __init__(self, store: HologramStore) -> None:
        self._store = store
        self._handlers: dict[str, tuple[str, Callable[..., CommandResult]]] = {
            CREATE_COMMAND: (PERMISSION_CREATE, self._create),
            DELETE_COMMAND: (PERMISSION_DELETE, self._delete),
            RELOAD_COMMAND: (PERMISSION_RELOAD, self._reload),
        }

    def dispatch(
        self, sender: CommandSender, command: str, args: Sequence[str]
    ) -> CommandResult | None:
        """Run ``command`` for ``sender``.

        Returns:
            The command result, or ``None`` if the command is not ours.
        """
        entry = self._handlers.get(command.lower())
        if entry is None:
            return None
        permission, handler = entry

        if not sender.is_player:
            return _fail(MSG_PLAYERS_ONLY)
        if not sender.has_permission(permission):
            logger.info("%s lacks %s", sender.name, permission)
            return _fail(MSG_NO_PERMISSION)
        return handler(sender, list(args))

    def complete(self, command: str, args: Sequence[str]) -> list[str]:
        """Suggest hologram ids for the first argument of ``holodelete``."""
        if command.lower() != DELETE_COMMAND or len(args) != 1:
            return []
        prefix = args[0]
        return [hid for hid in self._store.list_ids() if hid.startswith(prefix)]

    # ── Handlers ──────────────────────────────────────────────────────────────

    def _create(self, sender: CommandSender, args: list[str]) -> CommandResult:
        if not args:
            return _fail(MSG_CREATE_USAGE)
        location = sender.location
        if location is None:
            return _fail(MSG_PLAYERS_ONLY)

        try:
            hologram_id = self._store.create(" ".join(args), location)
        except PersistenceError as exc:
            logger.error("holocreate by %s failed: %s", sender.name, exc)
            return _fail(f"Failed to save holograms: {exc}")
        return _ok(f"{MSG_CREATED} ({hologram_id})", hologram_id=hologram_id)

    def _delete(self, sender: CommandSender, args: list[str]) -> CommandResult:
        if len(args) != 1:
            return _fail(MSG_DELETE_USAGE)
        hologram_id = args[0]
        if hologram_id not in self._store:
            return _fail(MSG_NOT_FOUND)

        try:
            self._store.delete(hologram_id)
        except PersistenceError as exc:
            logger.error("holodelete %s by %s failed: %s", hologram_id, sender.name, exc)
            return _fail(f"Failed to save holograms: {exc}")
        return _ok(MSG_DELETED)

    def _reload(self, sender: CommandSender, args: list[str]) -> CommandResult:
        try:
            self._store.reload()
        except PersistenceError as exc:
            logger.error("holoreload by %s failed: %s", sender.name, exc)
            return _fail(f"Failed to load holograms: {exc}")
        return _ok(MSG_RELOADED)
