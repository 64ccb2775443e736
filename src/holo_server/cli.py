"""
Command-line interface for the hologram server.

Provides CLI commands for managing holograms offline and running the
admin API:
- render: Render markup and print the result
- list: List stored hologram ids
- create: Store a new hologram
- delete: Delete a hologram by id
- reload: Load storage and report what would be materialized
- run: Start the admin API server

Usage:
    holo-server render "<gradient:#FF0000:#0000FF>Hello</gradient>"
    holo-server create --world world --at 10 64 -3 "&aWelcome"
    holo-server delete <id>
    holo-server run [--host HOST] [--port PORT]

Offline commands run against an in-memory world containing the worlds
named with --world (default: "world"), so holograms in other worlds are
kept in storage but not materialized.

Environment Variables:
    HOLO_STORAGE_PATH: Storage file (default: data/holograms.yml)
    HOLO_HOST / HOLO_PORT: Admin API bind address
    HOLO_LOG_LEVEL: Log level
"""

import argparse
import json
import logging
import sys

from holo_server import config as config_module
from holo_server.config import LoggingSettings
from holo_server.core.memory_world import InMemoryWorldAdapter
from holo_server.core.store import HologramStore, create_store
from holo_server.core.types import Location
from holo_server.errors import PersistenceError
from holo_server.markup.codes import strip_markers
from holo_server.markup.renderer import MarkupRenderer, RendererConfig

logger = logging.getLogger(__name__)

_FORMATS = {
    "simple": "%(levelname)s: %(message)s",
    "detailed": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
}


class _JsonFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def configure_logging(settings: LoggingSettings) -> None:
    """Apply the configured level and format to the root logger."""
    handler = logging.StreamHandler()
    if settings.format == "json":
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_FORMATS[settings.format]))
    logging.basicConfig(level=settings.level, handlers=[handler], force=True)


def _build_store(args: argparse.Namespace) -> HologramStore:
    world = InMemoryWorldAdapter(getattr(args, "world", None) or ["world"])
    store = create_store(world, storage_path=getattr(args, "storage", None))
    store.load()
    return store


def cmd_render(args: argparse.Namespace) -> int:
    """
    Render markup and print it.

    Returns:
        0 always
    """
    if args.trace:
        logging.getLogger("holo_server.markup").setLevel(logging.INFO)
    renderer = MarkupRenderer(RendererConfig(trace_enabled=args.trace))
    rendered = renderer.render(" ".join(args.message))
    print(strip_markers(rendered) if args.plain else rendered)
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    """
    Print stored hologram ids with their plain text.

    Returns:
        0 on success, 1 on storage error
    """
    try:
        store = _build_store(args)
    except PersistenceError as e:
        print(f"Error loading holograms: {e}", file=sys.stderr)
        return 1

    ids = store.list_ids()
    if not ids:
        print("No holograms stored.")
        return 0
    for hologram_id in ids:
        record = store.get(hologram_id)
        if record is None:
            continue
        loc = record.location
        print(
            f"{hologram_id}  {loc.world} ({loc.x:g}, {loc.y:g}, {loc.z:g})  "
            f"{strip_markers(record.rendered_message)}"
        )
    return 0


def cmd_create(args: argparse.Namespace) -> int:
    """
    Store a new hologram.

    Returns:
        0 on success, 1 on storage error
    """
    x, y, z = args.at
    try:
        store = _build_store(args)
        hologram_id = store.create(" ".join(args.message), Location(args.in_world, x, y, z))
    except PersistenceError as e:
        print(f"Error saving hologram: {e}", file=sys.stderr)
        return 1
    print(hologram_id)
    return 0


def cmd_delete(args: argparse.Namespace) -> int:
    """
    Delete a hologram by id.

    Returns:
        0 on success, 1 if the id is unknown or storage fails
    """
    try:
        store = _build_store(args)
        deleted = store.delete(args.id)
    except PersistenceError as e:
        print(f"Error deleting hologram: {e}", file=sys.stderr)
        return 1
    if not deleted:
        print(f"Error: No hologram found with ID '{args.id}'.", file=sys.stderr)
        return 1
    print("Hologram deleted.")
    return 0


def cmd_reload(args: argparse.Namespace) -> int:
    """
    Load storage and report how many holograms were materialized.

    Returns:
        0 on success, 1 on storage error
    """
    try:
        store = _build_store(args)
    except PersistenceError as e:
        print(f"Error loading holograms: {e}", file=sys.stderr)
        return 1
    print(f"Loaded {len(store)} holograms ({store.live_count} materialized).")
    store.shutdown()
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    """
    Run the admin API server against an in-memory world.

    Returns:
        0 on clean shutdown (Ctrl+C), 1 on startup error
    """
    from holo_server.api.server import start_server

    host = args.host or config_module.config.server.host
    port = args.port or config_module.config.server.port
    world = InMemoryWorldAdapter(args.world or ["world"])
    store = create_store(world, storage_path=args.storage)

    try:
        start_server(store, host=host, port=port)
        return 0
    except KeyboardInterrupt:
        print("\nServer stopped.")
        return 0
    except Exception as e:
        print(f"Error starting server: {e}", file=sys.stderr)
        return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="holo-server",
        description="Hologram Server - markup rendering and hologram storage",
    )
    parser.add_argument(
        "--storage",
        type=str,
        help="Storage file (default: HOLO_STORAGE_PATH or data/holograms.yml)",
    )
    parser.add_argument(
        "--world",
        action="append",
        help="World name to treat as loaded (repeatable, default: world)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    render_parser = subparsers.add_parser("render", help="Render markup and print it")
    render_parser.add_argument("message", nargs="+", help="Markup text")
    render_parser.add_argument("--trace", action="store_true", help="Log every render pass")
    render_parser.add_argument("--plain", action="store_true", help="Print with markers stripped")
    render_parser.set_defaults(func=cmd_render)

    list_parser = subparsers.add_parser("list", help="List stored holograms")
    list_parser.set_defaults(func=cmd_list)

    create_parser = subparsers.add_parser("create", help="Store a new hologram")
    create_parser.add_argument("message", nargs="+", help="Markup text")
    create_parser.add_argument(
        "--in-world", default="world", help="World to place the hologram in (default: world)"
    )
    create_parser.add_argument(
        "--at",
        nargs=3,
        type=float,
        metavar=("X", "Y", "Z"),
        default=(0.0, 0.0, 0.0),
        help="Coordinates (default: 0 0 0)",
    )
    create_parser.set_defaults(func=cmd_create)

    delete_parser = subparsers.add_parser("delete", help="Delete a hologram by id")
    delete_parser.add_argument("id", help="Hologram id")
    delete_parser.set_defaults(func=cmd_delete)

    reload_parser = subparsers.add_parser("reload", help="Load storage and report")
    reload_parser.set_defaults(func=cmd_reload)

    run_parser = subparsers.add_parser("run", help="Run the admin API server")
    run_parser.add_argument("--host", type=str, help="Host to bind (default: HOLO_HOST)")
    run_parser.add_argument("--port", "-p", type=int, help="Port to bind (default: HOLO_PORT)")
    run_parser.set_defaults(func=cmd_run)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    configure_logging(config_module.config.logging)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
