"""textual widgets for canvas chat."""

from .canvas_view import CanvasView, NodeClicked, rasterize
from .minimap import Minimap, MinimapClicked, draw_minimap

__all__ = [
    "CanvasView",
    "NodeClicked",
    "rasterize",
    "Minimap",
    "MinimapClicked",
    "draw_minimap",
]
