"""Visual-weight parameters derived from a settled constellation layout."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from backend.app.config import CanvasConfig, StyleConfig
from backend.app.constellation.layout import LayoutResult

LABEL_OFFSET = 14.0
BADGE_OFFSET = 2.0


@dataclass(frozen=True)
class CanvasSize:
    """Canvas dimensions chosen for a graph of a given size."""

    width: int
    height: int


@dataclass(frozen=True)
class EdgeStyle:
    """Stroke parameters for a single co-occurrence edge."""

    x1: float
    y1: float
    x2: float
    y2: float
    weight: int
    alpha: float
    line_width: float


@dataclass(frozen=True)
class NodeStyle:
    """Glow, fill and label parameters for a single keyword node."""

    label: str
    count: int
    x: float
    y: float
    radius: float
    emphasis: float
    glow_radius: float
    glow_alpha: float
    font_size: float
    label_alpha: float
    label_x: float
    label_y: float
    badge: Optional[str]
    badge_x: float
    badge_y: float


@dataclass(frozen=True)
class ConstellationScene:
    """Everything a renderer needs, with nodes already in draw order."""

    width: float
    height: float
    edges: Tuple[EdgeStyle, ...]
    nodes: Tuple[NodeStyle, ...]
    palette: StyleConfig

    @property
    def is_empty(self) -> bool:
        return not self.nodes


def canvas_size(
    node_count: int,
    container_width: Optional[int] = None,
    config: Optional[CanvasConfig] = None,
) -> CanvasSize:
    """Pick canvas dimensions for ``node_count`` keywords.

    Height grows with the node count between the configured bounds; width
    follows the container when one is known.
    """

    settings = config or CanvasConfig()
    width = container_width if container_width and container_width > 0 else settings.default_width
    grown = settings.base_height + max(node_count, 0) * settings.height_per_node
    height = max(settings.min_height, min(settings.max_height, grown))
    return CanvasSize(width=int(width), height=int(height))


def edge_alpha(weight: int) -> float:
    return min(0.12 + weight * 0.12, 0.55)


def edge_line_width(weight: int) -> float:
    return 0.5 + weight * 0.6


def font_size(emphasis: float) -> float:
    return max(9.0, min(13.0, 9.0 + emphasis * 4.0))


def style_layout(result: LayoutResult, config: Optional[StyleConfig] = None) -> ConstellationScene:
    """Derive stroke, glow and label parameters for every element of ``result``.

    Args:
        result: Settled layout.
        config: Palette and badge threshold; defaults apply when omitted.

    Returns:
        ConstellationScene: Edges in layout order followed by nodes sorted by
        ascending count, so the most frequent keywords are drawn last.
    """

    palette = config or StyleConfig()
    edges = []
    for edge in result.edges:
        source, target = result.endpoints(edge)
        edges.append(
            EdgeStyle(
                x1=source.x,
                y1=source.y,
                x2=target.x,
                y2=target.y,
                weight=edge.weight,
                alpha=edge_alpha(edge.weight),
                line_width=edge_line_width(edge.weight),
            )
        )

    max_count = result.max_count
    nodes = []
    for node in sorted(result.nodes, key=lambda item: item.count):
        emphasis = node.count / max_count if max_count > 0 else 0.0
        show_badge = node.count >= palette.badge_min_count
        nodes.append(
            NodeStyle(
                label=node.label,
                count=node.count,
                x=node.x,
                y=node.y,
                radius=node.radius,
                emphasis=emphasis,
                glow_radius=node.radius * (2.5 + emphasis),
                glow_alpha=0.15 + emphasis * 0.15,
                font_size=font_size(emphasis),
                label_alpha=0.7 + emphasis * 0.3,
                label_x=node.x,
                label_y=node.y + node.radius + LABEL_OFFSET,
                badge=f"×{node.count}" if show_badge else None,
                badge_x=node.x + node.radius + BADGE_OFFSET,
                badge_y=node.y - node.radius - BADGE_OFFSET,
            )
        )
    return ConstellationScene(
        width=result.width,
        height=result.height,
        edges=tuple(edges),
        nodes=tuple(nodes),
        palette=palette,
    )
