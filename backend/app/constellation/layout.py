"""Deterministic force-directed layout for keyword constellations."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from backend.app.config import LayoutConfig
from backend.app.contracts import Graph
from backend.app.constellation.errors import InvalidCanvasError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutNode:
    """Final placement of one keyword on the canvas."""

    label: str
    count: int
    x: float
    y: float
    vx: float
    vy: float
    radius: float


@dataclass(frozen=True)
class LayoutEdge:
    """Co-occurrence edge referencing layout nodes by index."""

    source: int
    target: int
    weight: int


@dataclass(frozen=True)
class LayoutResult:
    """Container for settled node placements and the edges between them."""

    nodes: Tuple[LayoutNode, ...]
    edges: Tuple[LayoutEdge, ...]
    width: float
    height: float
    iterations: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    @property
    def max_count(self) -> int:
        return max((node.count for node in self.nodes), default=0)

    def endpoints(self, edge: LayoutEdge) -> Tuple[LayoutNode, LayoutNode]:
        return self.nodes[edge.source], self.nodes[edge.target]

    def positions(self) -> Dict[str, Tuple[float, float]]:
        return {node.label: (node.x, node.y) for node in self.nodes}


@dataclass
class _Body:
    """Mutable simulation state for a single node."""

    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0


def _validate_canvas(width: float, height: float, padding: float) -> Tuple[float, float]:
    for name, value in (("width", width), ("height", height)):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidCanvasError(f"canvas {name} must be a number, got {value!r}")
        if not math.isfinite(value) or value <= 0:
            raise InvalidCanvasError(f"canvas {name} must be positive and finite, got {value}")
        if value < 2 * padding:
            raise InvalidCanvasError(
                f"canvas {name} {value} is smaller than twice the layout padding ({padding})"
            )
    return float(width), float(height)


def node_radius(count: int, max_count: int, config: Optional[LayoutConfig] = None) -> float:
    """Return the visual radius for a keyword seen ``count`` times.

    The count is normalised against ``max_count`` and mapped linearly onto
    ``[radius_min, radius_max]``.
    """

    settings = config or LayoutConfig()
    normalised = count / max_count if max_count > 0 else 0.0
    radius = settings.radius_min + normalised * settings.radius_scale
    return max(settings.radius_min, min(radius, settings.radius_max))


def spiral_positions(
    node_count: int,
    width: float,
    height: float,
    config: Optional[LayoutConfig] = None,
) -> List[Tuple[float, float]]:
    """Seed positions along a spiral centred on the canvas."""

    settings = config or LayoutConfig()
    centre_x = width / 2
    centre_y = height / 2
    spread = min(width, height) * settings.spiral_spread
    positions: List[Tuple[float, float]] = []
    for index in range(node_count):
        fraction = index / node_count
        angle = fraction * math.pi * 2 * settings.spiral_turns
        spiral_radius = settings.spiral_base_radius + fraction * spread
        positions.append(
            (
                centre_x + math.cos(angle) * spiral_radius,
                centre_y + math.sin(angle) * spiral_radius,
            )
        )
    return positions


class ConstellationLayoutEngine:
    """Place graph nodes with a cooled spring/repulsion simulation.

    Each iteration first accumulates every force into node velocities using
    the positions left by the previous iteration, then integrates all nodes,
    so results do not depend on the order in which pairs are visited. No
    randomness is involved: identical input always yields identical output.
    """

    def __init__(self, config: Optional[LayoutConfig] = None) -> None:
        self._config = config or LayoutConfig()

    @property
    def config(self) -> LayoutConfig:
        return self._config

    def layout(
        self,
        graph: Graph,
        width: float,
        height: float,
        config: Optional[LayoutConfig] = None,
    ) -> LayoutResult:
        """Compute settled positions for ``graph`` on a ``width`` x ``height`` canvas.

        Args:
            graph: Keyword graph produced by the builder.
            width: Canvas width in layout units.
            height: Canvas height in layout units.
            config: Optional parameters for this call only, replacing the
                engine's configuration.

        Returns:
            LayoutResult: Frozen node placements, radii and index-based edges.

        Raises:
            InvalidCanvasError: If either dimension is non-positive or too small
                to keep nodes inside the padding.
        """

        config = config or self._config
        width, height = _validate_canvas(width, height, config.padding)
        node_count = len(graph.nodes)
        if node_count == 0:
            return LayoutResult(nodes=(), edges=(), width=width, height=height, iterations=0)

        index = graph.node_index()
        edges = tuple(
            LayoutEdge(source=index[edge.source], target=index[edge.target], weight=edge.weight)
            for edge in graph.edges
        )
        bodies = [_Body(x=x, y=y) for x, y in spiral_positions(node_count, width, height, config)]
        iterations = config.iterations_for(node_count)
        self._simulate(bodies, edges, width, height, iterations, config)

        max_count = graph.max_count
        nodes = tuple(
            LayoutNode(
                label=stat.keyword,
                count=stat.count,
                x=body.x,
                y=body.y,
                vx=body.vx,
                vy=body.vy,
                radius=node_radius(stat.count, max_count, config),
            )
            for stat, body in zip(graph.nodes, bodies)
        )
        LOGGER.debug(
            "Computed constellation layout (nodes=%d, edges=%d, iterations=%d, canvas=%sx%s)",
            node_count,
            len(edges),
            iterations,
            width,
            height,
        )
        return LayoutResult(nodes=nodes, edges=edges, width=width, height=height, iterations=iterations)

    def _simulate(
        self,
        bodies: List[_Body],
        edges: Sequence[LayoutEdge],
        width: float,
        height: float,
        iterations: int,
        config: LayoutConfig,
    ) -> None:
        node_count = len(bodies)
        repulsion = config.repulsion_for(node_count)
        ideal_distance = config.ideal_distance_for(node_count)
        min_distance = config.min_distance
        centre_x = width / 2
        centre_y = height / 2
        padding = config.padding

        for iteration in range(iterations):
            decay = 1 - (iteration / iterations) * config.cooling

            for i in range(node_count):
                first = bodies[i]
                for j in range(i + 1, node_count):
                    second = bodies[j]
                    dx = second.x - first.x
                    dy = second.y - first.y
                    distance = max(math.sqrt(dx * dx + dy * dy), min_distance)
                    force = repulsion / (distance * distance)
                    fx = (dx / distance) * force * decay
                    fy = (dy / distance) * force * decay
                    first.vx -= fx
                    first.vy -= fy
                    second.vx += fx
                    second.vy += fy

            for edge in edges:
                source = bodies[edge.source]
                target = bodies[edge.target]
                dx = target.x - source.x
                dy = target.y - source.y
                distance = max(math.sqrt(dx * dx + dy * dy), min_distance)
                force = (distance - ideal_distance) * config.spring_constant * edge.weight * decay
                fx = (dx / distance) * force
                fy = (dy / distance) * force
                source.vx += fx
                source.vy += fy
                target.vx -= fx
                target.vy -= fy

            for body in bodies:
                body.vx += (centre_x - body.x) * config.centering_strength
                body.vy += (centre_y - body.y) * config.centering_strength
                body.x += body.vx * config.integration_step
                body.y += body.vy * config.integration_step
                body.vx *= config.friction
                body.vy *= config.friction
                body.x = max(padding, min(width - padding, body.x))
                body.y = max(padding, min(height - padding, body.y))


def compute_constellation_layout(
    graph: Graph,
    width: float,
    height: float,
    config: Optional[LayoutConfig] = None,
) -> LayoutResult:
    """Lay out ``graph`` using a one-off :class:`ConstellationLayoutEngine`."""

    return ConstellationLayoutEngine(config).layout(graph, width, height)
