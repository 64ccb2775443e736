"""Text markup rendering.

codes.py     Marker alphabet, legacy code translation and ``strip_markers``.
renderer.py  ``MarkupRenderer`` and the ordered render passes.
"""

from holo_server.markup.codes import strip_markers
from holo_server.markup.renderer import MarkupRenderer, RendererConfig

__all__ = ["MarkupRenderer", "RendererConfig", "strip_markers"]
