"""Markup renderer for hologram text.

``MarkupRenderer`` turns author-facing markup into the marker
representation understood by the display layer (see ``codes``). It is a
pure ``str -> str`` function: the same input always yields the same
output, and malformed input degrades to literal text instead of raising.

Supported markup
----------------
``&#RRGGBB`` / ``<#RRGGBB>``
    Foreground hex colour. Hex digits are case-insensitive.
``<gradient:#RRGGBB:#RRGGBB>TEXT</gradient>``
    Two-stop linear gradient across TEXT, one colour per character.
    A ``<bold>`` anywhere inside the span makes the whole span bold.
``<bold>`` / ``</bold>``
    Bold on. The closing tag is dropped; bold lasts until the next colour.
``&0`` .. ``&f``, ``&k`` .. ``&o``, ``&r``
    Legacy palette and formatting codes.

Pass order
----------
The passes in ``RENDER_PASSES`` run in a fixed order because later passes
consume the output of earlier ones:

1. ``hex_colors``   hex tags become RGB markers
2. ``gradients``    gradient spans are expanded per character
3. ``bold_tags``    remaining bold tags become bold markers
4. ``legacy_codes`` ``&`` codes become ``§`` markers
5. ``cleanup``      stray gradient tags are removed

Tracing
-------
When ``RendererConfig.trace_enabled`` is set, the input and the output of
every pass are logged at INFO. The flag is per renderer instance.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import NamedTuple

from holo_server.errors import MalformedMarkupError
from holo_server.markup.codes import BOLD, rgb_marker, translate_alternate_codes

logger = logging.getLogger(__name__)

RGB = tuple[int, int, int]

_HEX_LITERAL = re.compile(r"#[0-9A-Fa-f]{6}")
_HEX_TAG = re.compile(r"&#([0-9A-Fa-f]{6})|<#([0-9A-Fa-f]{6})>")
_GRADIENT_SPAN = re.compile(r"<gradient:#([0-9A-Fa-f]{6}):#([0-9A-Fa-f]{6})>(.*?)</gradient>")
_GRADIENT_OPEN_ANY = re.compile(r"<gradient:[^>]*>")

BOLD_OPEN = "<bold>"
BOLD_CLOSE = "</bold>"
GRADIENT_CLOSE = "</gradient>"


@dataclass(frozen=True)
class RendererConfig:
    """Per-instance renderer settings.

    Attributes:
        trace_enabled: Log every intermediate pass result at INFO.
    """

    trace_enabled: bool = False

    def with_trace(self, enabled: bool) -> RendererConfig:
        return replace(self, trace_enabled=enabled)


@dataclass(frozen=True)
class ColorStop:
    """Colour assigned to one position of a gradient span.

    Attributes:
        offset: Position within the span, 0.0 at the first character and
                1.0 at the last.
        rgb:    Interpolated colour for that position.
    """

    offset: float
    rgb: RGB


# ── Colour helpers ────────────────────────────────────────────────────────────


def ensure_hash_prefix(hex_code: str) -> str:
    return hex_code if hex_code.startswith("#") else f"#{hex_code}"


def hex_to_rgb(hex_code: str) -> RGB:
    """Convert ``#RRGGBB`` into an RGB triple.

    Raises:
        MalformedMarkupError: If ``hex_code`` is not ``#`` plus six hex digits.
    """
    if not isinstance(hex_code, str) or not _HEX_LITERAL.fullmatch(hex_code):
        raise MalformedMarkupError(f"Invalid hex color code: {hex_code!r}")
    return int(hex_code[1:3], 16), int(hex_code[3:5], 16), int(hex_code[5:7], 16)


def interpolate_color(start: RGB, end: RGB, ratio: float) -> RGB:
    """Blend two colours channel by channel, flooring each channel."""
    return (
        int(start[0] + ratio * (end[0] - start[0])),
        int(start[1] + ratio * (end[1] - start[1])),
        int(start[2] + ratio * (end[2] - start[2])),
    )


def gradient_stops(length: int, start: RGB, end: RGB) -> list[ColorStop]:
    """Return one ``ColorStop`` per character of a span of ``length``.

    A single-character span takes the start colour.
    """
    stops = []
    for index in range(length):
        ratio = 0.0 if length == 1 else index / (length - 1)
        stops.append(ColorStop(offset=ratio, rgb=interpolate_color(start, end, ratio)))
    return stops


def apply_gradient(text: str, start_hex: str, end_hex: str, bold: bool = False) -> str:
    """Colour every character of ``text`` along a linear gradient.

    Whitespace is coloured like any other character.
    """
    if not text:
        return ""
    start = hex_to_rgb(ensure_hash_prefix(start_hex))
    end = hex_to_rgb(ensure_hash_prefix(end_hex))

    parts = []
    for char, stop in zip(text, gradient_stops(len(text), start, end), strict=True):
        parts.append(rgb_marker(*stop.rgb))
        if bold:
            parts.append(BOLD)
        parts.append(char)
    return "".join(parts)


# ── Render passes ─────────────────────────────────────────────────────────────


def render_hex_colors(message: str) -> str:
    def _replace(match: re.Match[str]) -> str:
        digits = match.group(1) or match.group(2)
        return rgb_marker(*hex_to_rgb(f"#{digits}"))

    return _HEX_TAG.sub(_replace, message)


def render_gradients(message: str) -> str:
    def _replace(match: re.Match[str]) -> str:
        start_hex, end_hex, body = match.groups()
        bold = BOLD_OPEN in body
        body = body.replace(BOLD_OPEN, "").replace(BOLD_CLOSE, "")
        return apply_gradient(body, start_hex, end_hex, bold)

    return _GRADIENT_SPAN.sub(_replace, message)


def render_bold_tags(message: str) -> str:
    return message.replace(BOLD_OPEN, BOLD).replace(BOLD_CLOSE, "")


def render_legacy_codes(message: str) -> str:
    return translate_alternate_codes(message)


def remove_leftover_tags(message: str) -> str:
    return _GRADIENT_OPEN_ANY.sub("", message).replace(GRADIENT_CLOSE, "")


class RenderPass(NamedTuple):
    name: str
    apply: Callable[[str], str]


RENDER_PASSES: tuple[RenderPass, ...] = (
    RenderPass("hex_colors", render_hex_colors),
    RenderPass("gradients", render_gradients),
    RenderPass("bold_tags", render_bold_tags),
    RenderPass("legacy_codes", render_legacy_codes),
    RenderPass("cleanup", remove_leftover_tags),
)


class MarkupRenderer:
    """Render markup into marker text by running ``RENDER_PASSES`` in order.

    Instances hold no state besides their config, so one renderer can be
    shared by every caller.
    """

    def __init__(
        self,
        config: RendererConfig | None = None,
        *,
        passes: tuple[RenderPass, ...] = RENDER_PASSES,
    ) -> None:
        self._config = config or RendererConfig()
        self._passes = passes

    @property
    def config(self) -> RendererConfig:
        return self._config

    def set_trace(self, enabled: bool) -> None:
        """Toggle pass tracing for this instance only."""
        self._config = self._config.with_trace(enabled)

    def render(self, message: str | None) -> str:
        """Render ``message``; ``None`` and ``""`` render to ``""``."""
        if not message:
            return ""

        self._trace("original", message)
        for render_pass in self._passes:
            message = render_pass.apply(message)
            self._trace(render_pass.name, message)
        return message

    def _trace(self, stage: str, message: str) -> None:
        if self._config.trace_enabled:
            logger.info("[render] %s: %r", stage, message)
