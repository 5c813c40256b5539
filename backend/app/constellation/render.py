"""Renderer capability and a standalone SVG renderer for constellation scenes."""

from __future__ import annotations

import html
from typing import Final, List, Tuple, TypeVar

from typing_extensions import Protocol

from backend.app.constellation.style import ConstellationScene, EdgeStyle, NodeStyle

RenderOutput = TypeVar("RenderOutput", covariant=True)

BADGE_FONT_SIZE: Final[int] = 8


class ConstellationRenderer(Protocol[RenderOutput]):
    """Protocol describing collaborators that draw a styled scene."""

    def render(self, scene: ConstellationScene) -> RenderOutput:
        """Draw ``scene`` and return the renderer's artefact."""


def _rgba(rgb: Tuple[int, int, int], alpha: float) -> str:
    red, green, blue = rgb
    return f"rgba({red}, {green}, {blue}, {alpha:.3f})"


def _num(value: float) -> str:
    return f"{value:.2f}"


class SvgConstellationRenderer(ConstellationRenderer[str]):
    """Render a scene as a self-contained SVG document string."""

    def __init__(self, *, scale: float = 1.0) -> None:
        if scale <= 0:
            raise ValueError(f"scale must be positive, got {scale}")
        self._scale = scale

    def render(self, scene: ConstellationScene) -> str:
        width = scene.width * self._scale
        height = scene.height * self._scale
        defs: List[str] = []
        body: List[str] = []
        for edge in scene.edges:
            body.append(self._edge_markup(scene, edge))
        for index, node in enumerate(scene.nodes):
            defs.append(self._gradient_markup(scene, index, node))
            body.append(self._node_markup(scene, index, node))

        defs_markup = "\n    ".join(defs)
        body_markup = "\n    ".join(body)
        return (
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{_num(width)}" height="{_num(height)}" '
            f'viewBox="0 0 {_num(scene.width)} {_num(scene.height)}">\n'
            f"  <defs>\n    {defs_markup}\n  </defs>\n"
            f'  <g class="constellation">\n    {body_markup}\n  </g>\n'
            "</svg>\n"
        )

    @staticmethod
    def _edge_markup(scene: ConstellationScene, edge: EdgeStyle) -> str:
        return (
            f'<line x1="{_num(edge.x1)}" y1="{_num(edge.y1)}" x2="{_num(edge.x2)}" y2="{_num(edge.y2)}" '
            f'stroke="{_rgba(scene.palette.accent_rgb, edge.alpha)}" stroke-width="{_num(edge.line_width)}" />'
        )

    @staticmethod
    def _gradient_markup(scene: ConstellationScene, index: int, node: NodeStyle) -> str:
        palette = scene.palette
        highlight_x = node.x - node.radius * 0.3
        highlight_y = node.y - node.radius * 0.3
        return (
            f'<radialGradient id="glow-{index}" gradientUnits="userSpaceOnUse" '
            f'cx="{_num(node.x)}" cy="{_num(node.y)}" r="{_num(node.glow_radius)}">'
            f'<stop offset="0" stop-color="{_rgba(palette.accent_rgb, node.glow_alpha)}" />'
            f'<stop offset="1" stop-color="{_rgba(palette.accent_rgb, 0.0)}" />'
            "</radialGradient>"
            f'<radialGradient id="fill-{index}" gradientUnits="userSpaceOnUse" '
            f'cx="{_num(node.x)}" cy="{_num(node.y)}" r="{_num(node.radius)}" '
            f'fx="{_num(highlight_x)}" fy="{_num(highlight_y)}">'
            f'<stop offset="0" stop-color="{html.escape(palette.node_fill_inner, quote=True)}" />'
            f'<stop offset="1" stop-color="{html.escape(palette.node_fill_outer, quote=True)}" />'
            "</radialGradient>"
        )

    @staticmethod
    def _node_markup(scene: ConstellationScene, index: int, node: NodeStyle) -> str:
        palette = scene.palette
        font_family = html.escape(palette.font_family, quote=True)
        parts = [
            f'<circle cx="{_num(node.x)}" cy="{_num(node.y)}" r="{_num(node.glow_radius)}" fill="url(#glow-{index})" />',
            f'<circle cx="{_num(node.x)}" cy="{_num(node.y)}" r="{_num(node.radius)}" fill="url(#fill-{index})" '
            f'stroke="{html.escape(palette.node_stroke, quote=True)}" stroke-width="1" />',
            f'<text x="{_num(node.label_x)}" y="{_num(node.label_y)}" text-anchor="middle" '
            f'font-family="{font_family}" font-weight="500" font-size="{_num(node.font_size)}" '
            f'fill="{_rgba(palette.label_rgb, node.label_alpha)}">{html.escape(node.label)}</text>',
        ]
        if node.badge is not None:
            parts.append(
                f'<text class="badge" x="{_num(node.badge_x)}" y="{_num(node.badge_y)}" '
                f'font-family="{font_family}" font-weight="600" font-size="{BADGE_FONT_SIZE}" '
                f'fill="{html.escape(palette.badge_fill, quote=True)}">{html.escape(node.badge)}</text>'
            )
        return f'<g class="node" data-count="{node.count}">' + "".join(parts) + "</g>"
