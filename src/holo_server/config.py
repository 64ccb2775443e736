"""
Server configuration management.

This module handles loading and accessing configuration from multiple sources
with a clear priority order:

    1. Environment variables (highest priority) - for containerized deployments
    2. Config file (config/server.ini) - for static deployments
    3. Built-in defaults (lowest priority) - sensible fallbacks

Configuration is loaded once at module import time and cached. The HoloConfig
dataclass provides typed access to all settings.

Usage:
    from holo_server.config import config

    print(config.storage.absolute_path)
    print(config.renderer.chat_debug)

Environment Variable Mapping:
    HOLO_HOST           -> server.host
    HOLO_PORT           -> server.port
    HOLO_STORAGE_PATH   -> storage.path
    HOLO_CHAT_DEBUG     -> renderer.chat_debug
    HOLO_LOG_LEVEL      -> logging.level
"""

import configparser
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

# =============================================================================
# PATH CONFIGURATION
# =============================================================================

# Project root directory (contains src/, config/, data/)
PROJECT_ROOT = Path(__file__).parent.parent.parent

CONFIG_DIR = PROJECT_ROOT / "config"
CONFIG_FILE = CONFIG_DIR / "server.ini"
CONFIG_EXAMPLE = CONFIG_DIR / "server.example.ini"


# =============================================================================
# CONFIGURATION DATACLASSES
# =============================================================================


@dataclass
class ServerSettings:
    """HTTP admin server configuration."""

    host: str = "127.0.0.1"
    port: int = 8000


@dataclass
class StorageSettings:
    """Hologram storage configuration."""

    path: str = "data/holograms.yml"

    @property
    def absolute_path(self) -> Path:
        """Get absolute path to the storage file."""
        p = Path(self.path)
        if p.is_absolute():
            return p
        return PROJECT_ROOT / p


@dataclass
class RendererSettings:
    """Markup renderer configuration."""

    chat_debug: bool = False  # trace every render pass


@dataclass
class MatchingSettings:
    """Search box used when locating a hologram's live object."""

    radius_x: float = 2.0
    radius_y: float = 3.0
    radius_z: float = 2.0

    @property
    def radius(self) -> tuple[float, float, float]:
        return (self.radius_x, self.radius_y, self.radius_z)


@dataclass
class LoggingSettings:
    """Logging configuration."""

    level: str = "INFO"
    format: Literal["simple", "detailed", "json"] = "detailed"


@dataclass
class HoloConfig:
    """
    Complete server configuration.

    Aggregates all settings sections. Access via the module-level `config`
    singleton.
    """

    server: ServerSettings = field(default_factory=ServerSettings)
    storage: StorageSettings = field(default_factory=StorageSettings)
    renderer: RendererSettings = field(default_factory=RendererSettings)
    matching: MatchingSettings = field(default_factory=MatchingSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)


# =============================================================================
# CONFIGURATION LOADING
# =============================================================================


def _parse_bool(value: str) -> bool:
    """Parse a string value to boolean."""
    return value.lower() in ("true", "yes", "1", "on", "enabled")


def _load_from_ini(parser: configparser.ConfigParser, cfg: HoloConfig) -> None:
    """Load configuration from parsed INI file into HoloConfig."""
    if parser.has_section("server"):
        if parser.has_option("server", "host"):
            cfg.server.host = parser.get("server", "host")
        if parser.has_option("server", "port"):
            cfg.server.port = parser.getint("server", "port")

    if parser.has_section("storage"):
        if parser.has_option("storage", "path"):
            cfg.storage.path = parser.get("storage", "path")

    if parser.has_section("renderer"):
        if parser.has_option("renderer", "chat_debug"):
            cfg.renderer.chat_debug = _parse_bool(parser.get("renderer", "chat_debug"))

    if parser.has_section("matching"):
        for axis in ("x", "y", "z"):
            option = f"radius_{axis}"
            if parser.has_option("matching", option):
                setattr(cfg.matching, option, parser.getfloat("matching", option))

    if parser.has_section("logging"):
        if parser.has_option("logging", "level"):
            cfg.logging.level = parser.get("logging", "level").upper()
        if parser.has_option("logging", "format"):
            val = parser.get("logging", "format").lower()
            if val in ("simple", "detailed", "json"):
                cfg.logging.format = val  # type: ignore[assignment]


def _apply_env_overrides(cfg: HoloConfig) -> None:
    """Apply environment variable overrides to configuration."""
    if env_host := os.getenv("HOLO_HOST"):
        cfg.server.host = env_host
    if env_port := os.getenv("HOLO_PORT"):
        cfg.server.port = int(env_port)

    if env_storage := os.getenv("HOLO_STORAGE_PATH"):
        cfg.storage.path = env_storage

    if env_debug := os.getenv("HOLO_CHAT_DEBUG"):
        cfg.renderer.chat_debug = _parse_bool(env_debug)

    if env_log := os.getenv("HOLO_LOG_LEVEL"):
        cfg.logging.level = env_log.upper()


def load_config() -> HoloConfig:
    """
    Load configuration from all sources with proper priority.

    Priority (highest wins):
        1. Environment variables
        2. config/server.ini
        3. config/server.example.ini (fallback for development)
        4. Built-in defaults

    Returns:
        HoloConfig: Fully populated configuration object.
    """
    cfg = HoloConfig()

    config_file = None
    if CONFIG_FILE.exists():
        config_file = CONFIG_FILE
    elif CONFIG_EXAMPLE.exists():
        config_file = CONFIG_EXAMPLE

    if config_file:
        parser = configparser.ConfigParser()
        parser.read(config_file)
        _load_from_ini(parser, cfg)

    _apply_env_overrides(cfg)

    return cfg


def reload_config() -> "HoloConfig":
    """
    Reload configuration from disk and environment.

    Rebinds the module-level `config` singleton. Readers that go through
    the module (`holo_server.config.config`) see the new settings; a
    reference bound with `from holo_server.config import config` keeps the
    old object.

    Returns:
        HoloConfig: The newly loaded configuration.
    """
    global config
    config = load_config()
    return config


# =============================================================================
# MODULE-LEVEL SINGLETON
# =============================================================================

config = load_config()


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def get_config_status() -> dict:
    """
    Get configuration status for diagnostics.

    Returns a dictionary with configuration source information.
    """
    return {
        "config_file_exists": CONFIG_FILE.exists(),
        "config_file_path": str(CONFIG_FILE),
        "using_example": not CONFIG_FILE.exists() and CONFIG_EXAMPLE.exists(),
        "storage_path": str(config.storage.absolute_path),
        "chat_debug": config.renderer.chat_debug,
        "search_radius": config.matching.radius,
    }


# =============================================================================
# TEST HELPERS
# =============================================================================


class use_test_storage:
    """
    Context manager for pointing storage at a temporary file.

    Usage:
        from holo_server.config import use_test_storage

        def test_something(tmp_path):
            with use_test_storage(tmp_path / "holograms.yml"):
                store = create_store(world)

    Args:
        storage_path: Path to the temporary storage file
    """

    def __init__(self, storage_path: Path | str):
        self.storage_path = Path(storage_path)
        self.original_path: str | None = None

    def __enter__(self) -> Path:
        """Set up test storage path."""
        self.original_path = config.storage.path
        config.storage.path = str(self.storage_path)
        return self.storage_path

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Restore original storage path."""
        if self.original_path is not None:
            config.storage.path = self.original_path
        return None
