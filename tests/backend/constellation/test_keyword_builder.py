"""Tests for keyword frequency and co-occurrence aggregation."""

from __future__ import annotations

import json
import random
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

import pytest

from backend.app.config import GraphBuilderConfig
from backend.app.constellation.builder import (
    KeywordCooccurrenceAccumulator,
    KeywordGraphBuilder,
    build_keyword_graph,
    coerce_records,
)
from backend.app.constellation.errors import InvalidGraphLimitError
from backend.app.contracts import Graph, Record

FIXTURE_PATH = Path(__file__).resolve().parents[2] / "fixtures" / "golden" / "sample_records.json"


def _records(*keyword_lists: Optional[Sequence[str]]) -> List[dict]:
    return [{"id": f"r{index}", "keywords": keywords} for index, keywords in enumerate(keyword_lists)]


def _counts(graph: Graph) -> dict:
    return {node.keyword: node.count for node in graph.nodes}


def _weights(graph: Graph) -> dict:
    return {edge.pair: edge.weight for edge in graph.edges}


@dataclass
class _JournalEntry:
    id: str
    keywords: Optional[List[str]]


def test_counts_and_weights_for_shared_keywords() -> None:
    graph = build_keyword_graph(_records(["water", "flying"], ["water", "flying"], ["water"]))

    assert [node.keyword for node in graph.nodes] == ["water", "flying"]
    assert _counts(graph) == {"water": 3, "flying": 2}
    assert _weights(graph) == {("flying", "water"): 2}
    assert not graph.truncated


def test_distinct_single_keyword_records_truncate_to_limit() -> None:
    records = _records(*[[f"kw{index:02d}"] for index in range(35)])

    graph = build_keyword_graph(records)

    assert len(graph.nodes) == 30
    assert graph.edges == ()
    assert [node.keyword for node in graph.nodes] == [f"kw{index:02d}" for index in range(30)]
    assert graph.total_keywords == 35
    assert graph.summary_label() == "Showing top 30 of 35 keywords"


def test_ties_keep_first_seen_order_not_alphabetical() -> None:
    graph = build_keyword_graph(_records(["zeta", "mist"], ["alpha"], ["mist"], ["alpha"]))

    assert [node.keyword for node in graph.nodes] == ["mist", "alpha", "zeta"]


def test_empty_and_missing_keyword_lists_contribute_nothing() -> None:
    records = [
        {"id": "a", "keywords": []},
        {"id": "b", "keywords": None},
        {"id": "c"},
        None,
        Record(record_id="d"),
    ]

    graph = build_keyword_graph(records)

    assert graph.is_empty
    assert graph.edges == ()
    assert graph.total_keywords == 0


def test_empty_input_returns_empty_graph() -> None:
    assert build_keyword_graph([]).is_empty


def test_duplicate_keywords_in_one_record_count_once() -> None:
    graph = build_keyword_graph(_records(["owl", "owl", "moon"]))

    assert _counts(graph) == {"owl": 1, "moon": 1}
    assert _weights(graph) == {("moon", "owl"): 1}


def test_record_contributes_every_pair_once() -> None:
    graph = build_keyword_graph(_records(["a", "b", "c", "d"]))

    assert len(graph.edges) == 6
    assert all(edge.weight == 1 for edge in graph.edges)


def test_edges_to_truncated_keywords_are_dropped() -> None:
    graph = build_keyword_graph(_records(["a", "b", "c"], ["a", "b"], ["a"]), max_nodes=2)

    assert [node.keyword for node in graph.nodes] == ["a", "b"]
    assert _weights(graph) == {("a", "b"): 2}


@pytest.mark.parametrize("limit", [0, -3, 2.5, True])
def test_invalid_limits_fail_fast(limit: object) -> None:
    with pytest.raises(InvalidGraphLimitError):
        build_keyword_graph(_records(["a"]), max_nodes=limit)  # type: ignore[arg-type]


def test_accumulator_tracks_records_seen() -> None:
    accumulator = KeywordCooccurrenceAccumulator()
    accumulator.record(Record(record_id="r1", keywords=["rain"]))
    accumulator.record(Record(record_id="r2"))

    assert accumulator.records_seen == 2
    assert [node.keyword for node in accumulator.finalize().nodes] == ["rain"]


def test_invalid_limit_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        KeywordCooccurrenceAccumulator().finalize(0)


def test_builder_uses_configured_limit_and_allows_override() -> None:
    records = _records(*[[f"kw{index}"] for index in range(10)])
    builder = KeywordGraphBuilder(GraphBuilderConfig(max_nodes=4))
    assert builder.max_nodes == 4

    assert len(builder.build(records).nodes) == 4
    assert len(builder.build(records, max_nodes=7).nodes) == 7


def test_coerce_records_accepts_objects_and_mappings() -> None:
    items = [
        _JournalEntry(id="obj", keywords=["river"]),
        {"keywords": ["river", "boat"], "mood": "😴"},
        "not a record",
        None,
    ]

    records = coerce_records(items)

    assert [record.record_id for record in records] == ["obj", "1"]
    assert records[1].keywords == ("river", "boat")


def test_golden_records_build_expected_graph() -> None:
    with FIXTURE_PATH.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)

    graph = build_keyword_graph(payload["records"])

    assert [node.keyword for node in graph.nodes] == ["water", "flying", "city", "falling", "tower"]
    assert _counts(graph)["water"] == 3
    assert _weights(graph)[("flying", "water")] == 2
    assert len(graph.edges) == 6


def test_build_is_pure_and_repeatable() -> None:
    records = _records(["a", "b"], ["b", "c"], ["c", "a", "d"])

    assert build_keyword_graph(records) == build_keyword_graph(records)


@pytest.mark.parametrize("seed", [3, 17, 42])
def test_random_journals_respect_graph_invariants(seed: int) -> None:
    rng = random.Random(seed)
    vocabulary = [f"symbol{index}" for index in range(60)]
    records = _records(
        *[rng.sample(vocabulary, rng.randint(0, 6)) for _ in range(80)]
    )

    graph = build_keyword_graph(records, max_nodes=25)

    labels = {node.keyword for node in graph.nodes}
    assert len(graph.nodes) <= 25
    assert all(edge.source in labels and edge.target in labels for edge in graph.edges)
    counts = [node.count for node in graph.nodes]
    assert counts == sorted(counts, reverse=True)
    assert len({edge.pair for edge in graph.edges}) == len(graph.edges)
