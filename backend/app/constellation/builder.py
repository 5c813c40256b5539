"""Keyword frequency and co-occurrence aggregation for the constellation graph."""
from __future__ import annotations

import logging
from typing import Any, Dict, Final, Iterable, List, Mapping, Optional, Sequence, Tuple

from backend.app.config import GraphBuilderConfig
from backend.app.contracts import CoOccurrence, Graph, KeywordStat, Record
from backend.app.constellation.errors import InvalidGraphLimitError

LOGGER = logging.getLogger(__name__)

MAX_NODES: Final[int] = 30


def coerce_records(items: Iterable[Any]) -> List[Record]:
    """Convert records from a record source into :class:`Record` contracts.

    Accepted items are ``Record`` instances, mappings shaped like stored journal
    entries (``{"id": ..., "keywords": [...]}``) and objects exposing a
    ``keywords`` attribute. ``None`` items are skipped and a missing identifier
    falls back to the item's position.

    Args:
        items: Records supplied by the record source.

    Returns:
        List[Record]: Normalised records in input order.
    """

    records: List[Record] = []
    for index, item in enumerate(items or ()):
        if item is None:
            continue
        if isinstance(item, Record):
            records.append(item)
            continue
        if isinstance(item, Mapping):
            raw_id = item.get("id", item.get("record_id"))
            keywords = item.get("keywords")
        elif hasattr(item, "keywords"):
            raw_id = getattr(item, "id", getattr(item, "record_id", None))
            keywords = getattr(item, "keywords")
        else:
            LOGGER.warning("Skipping record of unexpected type at position %d: %s", index, type(item).__name__)
            continue
        record_id = str(raw_id) if raw_id not in (None, "") else str(index)
        records.append(Record(record_id=record_id, keywords=keywords))
    return records


def _unique_in_order(keywords: Sequence[str]) -> List[str]:
    seen: set[str] = set()
    unique: List[str] = []
    for keyword in keywords:
        if keyword in seen:
            continue
        seen.add(keyword)
        unique.append(keyword)
    return unique


def _validate_max_nodes(max_nodes: Any) -> int:
    if isinstance(max_nodes, bool) or not isinstance(max_nodes, int):
        raise InvalidGraphLimitError(f"max_nodes must be an integer, got {max_nodes!r}")
    if max_nodes <= 0:
        raise InvalidGraphLimitError(f"max_nodes must be positive, got {max_nodes}")
    return max_nodes


class KeywordCooccurrenceAccumulator:
    """Aggregate keyword counts and pairwise co-occurrences across records.

    Both tallies are insertion ordered, so keywords with equal counts keep the
    order in which they were first seen. Ranking relies on that.
    """

    def __init__(self) -> None:
        self._counts: Dict[str, int] = {}
        self._pairs: Dict[Tuple[str, str], int] = {}
        self._records_seen = 0

    @property
    def records_seen(self) -> int:
        return self._records_seen

    def record(self, record: Record) -> None:
        """Register one record's keywords."""

        self._records_seen += 1
        keywords = _unique_in_order(record.keywords)
        if len(keywords) != len(record.keywords):
            LOGGER.debug("Record %s carries duplicate keywords; counting each once", record.record_id)
        for keyword in keywords:
            self._counts[keyword] = self._counts.get(keyword, 0) + 1
        for idx, first in enumerate(keywords):
            for second in keywords[idx + 1 :]:
                pair = (first, second) if first < second else (second, first)
                self._pairs[pair] = self._pairs.get(pair, 0) + 1

    def finalize(self, max_nodes: int = MAX_NODES) -> Graph:
        """Return the graph of the ``max_nodes`` most frequent keywords."""

        limit = _validate_max_nodes(max_nodes)
        ranked = sorted(self._counts.items(), key=lambda item: -item[1])
        top = ranked[:limit]
        kept = {keyword for keyword, _ in top}
        nodes = tuple(KeywordStat(keyword=keyword, count=count) for keyword, count in top)
        edges = tuple(
            CoOccurrence(source=first, target=second, weight=weight)
            for (first, second), weight in self._pairs.items()
            if first in kept and second in kept
        )
        graph = Graph(nodes=nodes, edges=edges, total_keywords=len(self._counts), max_nodes=limit)
        if graph.truncated:
            LOGGER.info("Showing top %d of %d keywords", len(nodes), graph.total_keywords)
        LOGGER.debug(
            "Built keyword graph from %d records (nodes=%d, edges=%d, dropped_pairs=%d)",
            self._records_seen,
            len(nodes),
            len(edges),
            len(self._pairs) - len(edges),
        )
        return graph


class KeywordGraphBuilder:
    """Build bounded keyword co-occurrence graphs from journal records."""

    def __init__(self, config: Optional[GraphBuilderConfig] = None) -> None:
        self._config = config or GraphBuilderConfig()

    @property
    def max_nodes(self) -> int:
        return self._config.max_nodes

    def build(self, records: Iterable[Any], max_nodes: Optional[int] = None) -> Graph:
        """Build the keyword graph for ``records``.

        Args:
            records: Records or record-like payloads from the record source.
            max_nodes: Optional override for the configured node limit.

        Returns:
            Graph: Top keywords by count (ties in first-seen order) and the
            co-occurrence edges between them. Empty when no record carries
            keywords.

        Raises:
            InvalidGraphLimitError: If ``max_nodes`` is not a positive integer.
        """

        limit = _validate_max_nodes(self._config.max_nodes if max_nodes is None else max_nodes)
        accumulator = KeywordCooccurrenceAccumulator()
        for record in coerce_records(records):
            accumulator.record(record)
        return accumulator.finalize(limit)


def build_keyword_graph(records: Iterable[Any], max_nodes: int = MAX_NODES) -> Graph:
    """Build a keyword graph with an explicit node limit."""

    return KeywordGraphBuilder().build(records, max_nodes=max_nodes)
