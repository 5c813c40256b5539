"""Keyword constellation engine: co-occurrence graph, layout and styling."""

from .builder import MAX_NODES, KeywordCooccurrenceAccumulator, KeywordGraphBuilder, build_keyword_graph, coerce_records
from .errors import ConstellationError, InvalidCanvasError, InvalidGraphLimitError
from .layout import (
    ConstellationLayoutEngine,
    LayoutEdge,
    LayoutNode,
    LayoutResult,
    compute_constellation_layout,
    node_radius,
    spiral_positions,
)
from .render import ConstellationRenderer, SvgConstellationRenderer
from .service import EMPTY_MESSAGE, ConstellationService, ConstellationView
from .style import CanvasSize, ConstellationScene, EdgeStyle, NodeStyle, canvas_size, style_layout

__all__ = [
    "CanvasSize",
    "ConstellationError",
    "ConstellationLayoutEngine",
    "ConstellationRenderer",
    "ConstellationScene",
    "ConstellationService",
    "ConstellationView",
    "EMPTY_MESSAGE",
    "EdgeStyle",
    "InvalidCanvasError",
    "InvalidGraphLimitError",
    "KeywordCooccurrenceAccumulator",
    "KeywordGraphBuilder",
    "LayoutEdge",
    "LayoutNode",
    "LayoutResult",
    "MAX_NODES",
    "NodeStyle",
    "SvgConstellationRenderer",
    "build_keyword_graph",
    "canvas_size",
    "coerce_records",
    "compute_constellation_layout",
    "node_radius",
    "spiral_positions",
    "style_layout",
]
