"""Tests for the constellation service composing build, layout and style."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List

import pytest

from backend.app.config import AppConfig, GraphBuilderConfig, load_config
from backend.app.constellation.service import EMPTY_MESSAGE, ConstellationService
from backend.app.constellation.style import ConstellationScene


@pytest.fixture(autouse=True)
def _default_config(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for key in ("DREAMNETS_MAX_NODES", "DREAMNETS_CANVAS_WIDTH", "DREAMNETS_ENV_FILE"):
        monkeypatch.delenv(key, raising=False)
    load_config.cache_clear()
    yield
    load_config.cache_clear()


@dataclass
class _RecordingRenderer:
    scenes: List[ConstellationScene] = field(default_factory=list)

    def render(self, scene: ConstellationScene) -> int:
        self.scenes.append(scene)
        return len(scene.nodes)


def _journal(count: int) -> List[dict]:
    return [{"id": f"d{index}", "keywords": [f"symbol{index}"]} for index in range(count)]


def test_empty_journal_yields_empty_view() -> None:
    view = ConstellationService().build_view([{"id": "d1", "keywords": []}, None])

    assert view.is_empty
    assert view.empty_message == EMPTY_MESSAGE
    assert view.summary_label is None
    assert view.layout.is_empty
    assert view.scene.is_empty


def test_large_journal_is_truncated_and_sized() -> None:
    view = ConstellationService().build_view(_journal(35))

    assert len(view.graph.nodes) == 30
    assert view.summary_label == "Showing top 30 of 35 keywords"
    assert view.empty_message is None
    assert (view.scene.width, view.scene.height) == (440.0, 500.0)


def test_container_width_is_respected() -> None:
    view = ConstellationService().build_view(_journal(3), container_width=600)

    assert view.layout.width == 600.0
    assert view.layout.height == 320.0
    for node in view.layout.nodes:
        assert 55.0 <= node.x <= 545.0


def test_configured_limit_flows_into_builder() -> None:
    service = ConstellationService(AppConfig(graph=GraphBuilderConfig(max_nodes=5)))

    view = service.build_view(_journal(8))

    assert len(view.graph.nodes) == 5
    assert view.summary_label == "Showing top 5 of 8 keywords"


def test_default_service_reads_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DREAMNETS_MAX_NODES", "5")
    monkeypatch.setenv("DREAMNETS_CANVAS_WIDTH", "500")
    load_config.cache_clear()

    view = ConstellationService().build_view(_journal(8))

    assert len(view.graph.nodes) == 5
    assert view.graph.max_nodes == 5
    assert view.summary_label == "Showing top 5 of 8 keywords"
    assert view.layout.width == 500.0


def test_render_hands_scene_to_renderer() -> None:
    renderer = _RecordingRenderer()

    drawn = ConstellationService().render(
        [{"id": "d1", "keywords": ["water", "flying"]}, {"id": "d2", "keywords": ["water"]}],
        renderer,
    )

    assert drawn == 2
    assert len(renderer.scenes) == 1
    assert [node.label for node in renderer.scenes[0].nodes] == ["flying", "water"]


def test_views_are_reproducible() -> None:
    service = ConstellationService()
    records = [{"id": str(i), "keywords": ["a", f"k{i % 4}", f"k{(i + 1) % 4}"]} for i in range(12)]

    assert service.build_view(records) == service.build_view(records)
