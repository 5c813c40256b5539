"""Immutable data contracts for the DreamNets constellation engine."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

LOGGER = logging.getLogger(__name__)


class _FrozenBaseModel(BaseModel):
    """Base model enforcing immutability after creation."""

    model_config = ConfigDict(frozen=True)


class Record(_FrozenBaseModel):
    """Journal entry as seen by the graph builder: an id and its keyword tags."""

    record_id: str = Field(..., min_length=1)
    keywords: Tuple[str, ...] = Field(default_factory=tuple)

    @field_validator("record_id", mode="before")
    @classmethod
    def _coerce_record_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("keywords", mode="before")
    @classmethod
    def _coerce_keywords(cls, value: Any) -> Tuple[str, ...]:
        """Normalise loosely shaped keyword payloads into a tuple of strings.

        Args:
            value: Raw keyword payload, possibly ``None`` or a bare string.

        Returns:
            Tuple[str, ...]: Keywords in their original order, with non-string
            and blank entries removed.
        """
        if value is None:
            return ()
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            LOGGER.warning("Ignoring keyword payload of unexpected type: %s", type(value).__name__)
            return ()
        cleaned: List[str] = []
        for item in value:
            if not isinstance(item, str) or not item.strip():
                LOGGER.warning("Dropping malformed keyword entry: %r", item)
                continue
            cleaned.append(item)
        return tuple(cleaned)


class KeywordStat(_FrozenBaseModel):
    """Keyword and the number of records carrying it."""

    keyword: str = Field(..., min_length=1)
    count: int = Field(..., ge=0)


class CoOccurrence(_FrozenBaseModel):
    """Unordered keyword pair weighted by the records they share.

    Endpoints are stored in lexicographic order so ``(a, b)`` and ``(b, a)``
    compare equal.
    """

    source: str = Field(..., min_length=1)
    target: str = Field(..., min_length=1)
    weight: int = Field(..., ge=1)

    @model_validator(mode="before")
    @classmethod
    def _order_endpoints(cls, data: Any) -> Any:
        if isinstance(data, dict):
            source = data.get("source")
            target = data.get("target")
            if isinstance(source, str) and isinstance(target, str) and target < source:
                data = {**data, "source": target, "target": source}
        return data

    @model_validator(mode="after")
    def _ensure_distinct(self) -> "CoOccurrence":
        if self.source == self.target:
            raise ValueError("co-occurrence endpoints must be distinct keywords")
        return self

    @property
    def pair(self) -> Tuple[str, str]:
        return (self.source, self.target)


class Graph(_FrozenBaseModel):
    """Bounded keyword co-occurrence graph produced by the builder.

    ``nodes`` are ordered by descending count with ties kept in first-seen
    order. Every edge references two keywords present in ``nodes``.
    """

    nodes: Tuple[KeywordStat, ...] = Field(default_factory=tuple)
    edges: Tuple[CoOccurrence, ...] = Field(default_factory=tuple)
    total_keywords: int = Field(0, ge=0)
    max_nodes: int = Field(30, ge=1)

    @model_validator(mode="after")
    def _validate_structure(self) -> "Graph":
        if len(self.nodes) > self.max_nodes:
            raise ValueError(
                f"graph holds {len(self.nodes)} nodes but max_nodes is {self.max_nodes}"
            )
        labels = [node.keyword for node in self.nodes]
        label_set = set(labels)
        if len(label_set) != len(labels):
            raise ValueError("graph nodes must be unique keywords")
        if self.total_keywords < len(self.nodes):
            raise ValueError("total_keywords cannot be smaller than the node count")
        seen_pairs = set()
        for edge in self.edges:
            if edge.source not in label_set or edge.target not in label_set:
                raise ValueError(f"edge {edge.pair} references a keyword outside the graph nodes")
            if edge.pair in seen_pairs:
                raise ValueError(f"duplicate edge {edge.pair}")
            seen_pairs.add(edge.pair)
        return self

    @classmethod
    def empty(cls, max_nodes: int = 30) -> "Graph":
        return cls(nodes=(), edges=(), total_keywords=0, max_nodes=max_nodes)

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    @property
    def truncated(self) -> bool:
        """Whether keywords were dropped to respect ``max_nodes``."""

        return self.total_keywords > len(self.nodes)

    @property
    def max_count(self) -> int:
        return max((node.count for node in self.nodes), default=0)

    def node_index(self) -> Dict[str, int]:
        """Map each keyword to its position in ``nodes``."""

        return {node.keyword: index for index, node in enumerate(self.nodes)}

    def summary_label(self) -> Optional[str]:
        """Return the truncation notice shown above the constellation, if any."""

        if not self.truncated:
            return None
        return f"Showing top {len(self.nodes)} of {self.total_keywords} keywords"
