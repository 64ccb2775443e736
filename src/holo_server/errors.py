"""Typed exceptions for the hologram server.

Only two kinds of failure are modelled as exceptions:

    - ``MalformedMarkupError`` for direct misuse of the colour conversion
      helpers. The render pipeline never lets it escape.
    - ``PersistenceError`` and its subclasses for storage read/write
      failures. These propagate to the caller of the store operation.

Ordinary outcomes such as "unknown id", "world not loaded" or "no live
object matched" are return values (``None``/``False``) plus a log line,
never exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass


class HoloError(RuntimeError):
    """Base exception for hologram server failures."""


class MalformedMarkupError(ValueError):
    """A colour literal did not match ``#`` followed by six hex digits."""


@dataclass(slots=True)
class PersistenceOperationContext:
    """Structured operation metadata carried by persistence exceptions.

    Attributes:
        operation: Stable operation identifier (for example
            ``"holograms.flush"``).
        details: Optional human-readable context for logs and debugging.
    """

    operation: str
    details: str | None = None


class PersistenceError(HoloError):
    """Base exception for storage failures.

    Args:
        context: Structured operation metadata.
        cause: Optional underlying exception.
    """

    def __init__(
        self,
        *,
        context: PersistenceOperationContext,
        cause: Exception | None = None,
    ) -> None:
        message = context.operation
        if context.details:
            message = f"{message}: {context.details}"
        super().__init__(message)
        self.context = context
        self.cause = cause


class PersistenceReadError(PersistenceError):
    """Storage could not be read or parsed."""


class PersistenceWriteError(PersistenceError):
    """Storage could not be written."""
