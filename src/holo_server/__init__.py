"""Hologram Server.

Renders marked-up text (legacy colour codes, hex colours, gradients and
bold spans) and manages a persistent collection of placed text holograms.

Version Management
------------------
``__version__`` is read from the installed package metadata at import time.
The single source of truth is the ``version`` field in ``pyproject.toml``.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__: str = version("holo_server")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
