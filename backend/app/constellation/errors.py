"""Errors raised when callers break the constellation engine's contract."""
from __future__ import annotations


class ConstellationError(RuntimeError):
    """Base class for constellation engine contract violations."""


class InvalidGraphLimitError(ConstellationError, ValueError):
    """Raised when the node limit is not a positive integer."""


class InvalidCanvasError(ConstellationError, ValueError):
    """Raised when the canvas cannot hold a bounded layout."""
