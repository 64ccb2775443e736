"""Marker alphabet of the rendered text representation.

Rendered text interleaves literal characters with two-character markers:
the section sign followed by one code character. This module owns that
alphabet so the renderer, the stripping helper and the removal matcher
all agree on it.

Marker forms:

    ``§0`` .. ``§f``    legacy palette colours
    ``§k`` .. ``§o``    formatting (obfuscated, bold, strike, underline, italic)
    ``§r``              reset
    ``§x§R§R§G§G§B§B``  foreground RGB colour (lowercase hex digits)
"""

from __future__ import annotations

import re

MARKER_CHAR = "§"

# Escape character accepted in raw input for legacy codes (``&c``).
ALT_MARKER_CHAR = "&"

BOLD = f"{MARKER_CHAR}l"

# Named palette, handy for composing user-facing messages.
PALETTE = {
    "black": "0",
    "dark_blue": "1",
    "dark_green": "2",
    "dark_aqua": "3",
    "dark_red": "4",
    "dark_purple": "5",
    "gold": "6",
    "gray": "7",
    "dark_gray": "8",
    "blue": "9",
    "green": "a",
    "aqua": "b",
    "red": "c",
    "light_purple": "d",
    "yellow": "e",
    "white": "f",
}

_STRIP_PATTERN = re.compile(f"{MARKER_CHAR}[0-9a-fk-orx]", re.IGNORECASE)
_LEGACY_PATTERN = re.compile(f"{re.escape(ALT_MARKER_CHAR)}([0-9a-fk-orx])", re.IGNORECASE)


def rgb_marker(r: int, g: int, b: int) -> str:
    """Return the foreground-colour marker for an RGB triple."""
    digits = f"{r:02x}{g:02x}{b:02x}"
    return MARKER_CHAR + "x" + "".join(MARKER_CHAR + digit for digit in digits)


def legacy_marker(name: str) -> str:
    """Return the marker for a named palette colour (``"red"`` -> ``§c``)."""
    return MARKER_CHAR + PALETTE[name]


def translate_alternate_codes(text: str) -> str:
    """Translate ``&`` + code character into ``§`` + lowercase code character.

    Unknown code characters are left untouched, so ``&z`` and a trailing
    ``&`` survive as literal text.
    """
    return _LEGACY_PATTERN.sub(lambda m: MARKER_CHAR + m.group(1).lower(), text)


def strip_markers(text: str | None) -> str:
    """Remove every marker from ``text``, leaving only literal characters."""
    if not text:
        return ""
    return _STRIP_PATTERN.sub("", text)
