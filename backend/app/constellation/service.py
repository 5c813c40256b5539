"""Service composing keyword aggregation, layout and styling."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Final, Iterable, Optional, TypeVar

from backend.app.config import AppConfig, load_config
from backend.app.contracts import Graph
from backend.app.constellation.builder import KeywordGraphBuilder
from backend.app.constellation.layout import ConstellationLayoutEngine, LayoutResult
from backend.app.constellation.render import ConstellationRenderer
from backend.app.constellation.style import ConstellationScene, canvas_size, style_layout

LOGGER = logging.getLogger(__name__)

EMPTY_MESSAGE: Final[str] = "Record some dreams to see your constellation form"

RenderOutput = TypeVar("RenderOutput")


@dataclass(frozen=True)
class ConstellationView:
    """Graph, layout and styled scene for one set of records."""

    graph: Graph
    layout: LayoutResult
    scene: ConstellationScene

    @property
    def is_empty(self) -> bool:
        return self.graph.is_empty

    @property
    def summary_label(self) -> Optional[str]:
        return self.graph.summary_label()

    @property
    def empty_message(self) -> Optional[str]:
        return EMPTY_MESSAGE if self.is_empty else None


class ConstellationService:
    """Turn journal records into a styled keyword constellation."""

    def __init__(self, config: Optional[AppConfig] = None) -> None:
        self._config = config or load_config()
        self._builder = KeywordGraphBuilder(self._config.graph)
        self._engine = ConstellationLayoutEngine(self._config.layout)

    def build_view(self, records: Iterable[Any], *, container_width: Optional[int] = None) -> ConstellationView:
        """Build, lay out and style the constellation for ``records``.

        Args:
            records: Records or record-like payloads from the record source.
            container_width: Width available to the renderer, if known.

        Returns:
            ConstellationView: Empty layout and scene when no keywords exist.
        """

        graph = self._builder.build(records)
        size = canvas_size(len(graph.nodes), container_width, self._config.canvas)
        layout = self._engine.layout(graph, size.width, size.height)
        scene = style_layout(layout, self._config.style)
        if graph.is_empty:
            LOGGER.debug("No keywords recorded; returning empty constellation")
        return ConstellationView(graph=graph, layout=layout, scene=scene)

    def render(
        self,
        records: Iterable[Any],
        renderer: ConstellationRenderer[RenderOutput],
        *,
        container_width: Optional[int] = None,
    ) -> RenderOutput:
        """Build the constellation for ``records`` and hand it to ``renderer``."""

        view = self.build_view(records, container_width=container_width)
        return renderer.render(view.scene)
