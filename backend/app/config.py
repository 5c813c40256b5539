"""Configuration loader for the DreamNets constellation engine."""
from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

LOGGER = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_ENV_FILE = REPO_ROOT / ".env"

MAX_NODES_ENV_VAR = "DREAMNETS_MAX_NODES"
CANVAS_WIDTH_ENV_VAR = "DREAMNETS_CANVAS_WIDTH"
ENV_FILE_ENV_VAR = "DREAMNETS_ENV_FILE"


class ConfigError(RuntimeError):
    """Raised when configuration cannot be loaded."""


class _FrozenModel(BaseModel):
    """Base model enforcing immutability for config sections."""

    model_config = ConfigDict(frozen=True)


class PipelineConfig(_FrozenModel):
    """Pipeline-level configuration."""

    version: str = Field("1.0.0", min_length=1)


class GraphBuilderConfig(_FrozenModel):
    """Keyword aggregation limits applied when building the graph."""

    max_nodes: int = Field(30, ge=1)


class LayoutConfig(_FrozenModel):
    """Force simulation parameters.

    The defaults were tuned by eye for graphs of at most thirty keywords. They
    are exposed so callers can reshape the simulation for other graph sizes.
    """

    iteration_baseline: int = Field(60, ge=0)
    iteration_per_node: int = Field(2, ge=0)
    iteration_cap: int = Field(120, ge=1)
    cooling: float = Field(0.5, ge=0.0, le=1.0)
    dense_threshold: int = Field(20, ge=0)
    repulsion_strength_low: float = Field(600.0, ge=0.0)
    repulsion_strength_high: float = Field(800.0, ge=0.0)
    ideal_distance_low: float = Field(80.0, gt=0.0)
    ideal_distance_high: float = Field(100.0, gt=0.0)
    spring_constant: float = Field(0.015, ge=0.0)
    centering_strength: float = Field(0.004, ge=0.0)
    friction: float = Field(0.75, gt=0.0, lt=1.0)
    integration_step: float = Field(0.25, gt=0.0)
    padding: float = Field(55.0, ge=0.0)
    min_distance: float = Field(1.0, gt=0.0)
    spiral_turns: float = Field(2.5, gt=0.0)
    spiral_base_radius: float = Field(60.0, ge=0.0)
    spiral_spread: float = Field(0.3, ge=0.0)
    radius_min: float = Field(4.0, gt=0.0)
    radius_scale: float = Field(10.0, ge=0.0)
    radius_max: float = Field(14.0, gt=0.0)

    @model_validator(mode="after")
    def _validate_ranges(self) -> "LayoutConfig":
        if self.radius_min > self.radius_max:
            msg = "layout.radius_min cannot exceed layout.radius_max"
            raise ValueError(msg)
        if self.repulsion_strength_low > self.repulsion_strength_high:
            msg = "layout.repulsion_strength_low cannot exceed layout.repulsion_strength_high"
            raise ValueError(msg)
        return self

    def is_dense(self, node_count: int) -> bool:
        """Return whether ``node_count`` uses the dense-graph constants."""

        return node_count > self.dense_threshold

    def iterations_for(self, node_count: int) -> int:
        return min(self.iteration_cap, self.iteration_baseline + node_count * self.iteration_per_node)

    def repulsion_for(self, node_count: int) -> float:
        if self.is_dense(node_count):
            return self.repulsion_strength_high
        return self.repulsion_strength_low

    def ideal_distance_for(self, node_count: int) -> float:
        if self.is_dense(node_count):
            return self.ideal_distance_high
        return self.ideal_distance_low


class CanvasConfig(_FrozenModel):
    """Canvas sizing used when the caller does not fix the dimensions."""

    default_width: int = Field(440, ge=1)
    min_height: int = Field(320, ge=1)
    max_height: int = Field(520, ge=1)
    base_height: int = Field(200, ge=0)
    height_per_node: int = Field(10, ge=0)

    @model_validator(mode="after")
    def _validate_heights(self) -> "CanvasConfig":
        if self.min_height > self.max_height:
            msg = "canvas.min_height cannot exceed canvas.max_height"
            raise ValueError(msg)
        return self


class StyleConfig(_FrozenModel):
    """Palette and thresholds handed to renderers."""

    badge_min_count: int = Field(3, ge=1)
    accent_rgb: Tuple[int, int, int] = (167, 139, 250)
    node_fill_inner: str = Field("#c4b5fd", min_length=1)
    node_fill_outer: str = Field("#7c3aed", min_length=1)
    node_stroke: str = Field("rgba(196, 181, 253, 0.4)", min_length=1)
    label_rgb: Tuple[int, int, int] = (232, 232, 240)
    badge_fill: str = Field("rgba(251, 191, 36, 0.8)", min_length=1)
    font_family: str = Field("Inter, sans-serif", min_length=1)


class AppConfig(_FrozenModel):
    """Top-level application configuration composed from config.yaml."""

    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    graph: GraphBuilderConfig = Field(default_factory=GraphBuilderConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    canvas: CanvasConfig = Field(default_factory=CanvasConfig)
    style: StyleConfig = Field(default_factory=StyleConfig)

    @staticmethod
    def default_path() -> Path:
        """Return the default location of the configuration file.

        Returns:
            Path: Absolute path to config.yaml at the repository root.
        """
        return Path(__file__).resolve().parents[2] / "config.yaml"


def _determine_env_file_path() -> Optional[Path]:
    """Return the path to the environment file if one should be loaded."""

    override = os.getenv(ENV_FILE_ENV_VAR)
    if override:
        candidate = Path(override).expanduser()
        if candidate.exists():
            return candidate
        LOGGER.warning("Configured environment file override does not exist: %s", candidate)
        return None
    if DEFAULT_ENV_FILE.exists():
        return DEFAULT_ENV_FILE
    return None


def _load_env_file(path: Path) -> None:
    """Copy ``DREAMNETS_*`` assignments from a ``.env`` file into ``os.environ``.

    Variables already set in the process environment win over the file.
    """

    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError:
        LOGGER.warning("Unable to read environment file at %s", path)
        return
    for line in lines:
        key, separator, value = line.partition("=")
        key = key.strip()
        if not separator or not key.startswith("DREAMNETS_") or os.environ.get(key, "").strip():
            continue
        os.environ[key] = value.split("#", 1)[0].strip().strip("\"'")


def _read_int_override(key: str) -> Optional[int]:
    """Read an integer override from the environment.

    Args:
        key: Environment variable name.

    Returns:
        Optional[int]: Parsed value, or ``None`` when the variable is unset or blank.

    Raises:
        ConfigError: If the variable is set to something other than an integer.
    """

    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw.strip())
    except ValueError as exc:
        LOGGER.error("Environment override %s must be an integer, got %r", key, raw)
        raise ConfigError(f"Invalid integer override for {key}") from exc


def _apply_environment_overrides(raw_content: Dict[str, Any]) -> Dict[str, Any]:
    """Merge environment-based overrides into the raw configuration mapping.

    Args:
        raw_content: Parsed YAML configuration prior to Pydantic validation.

    Returns:
        Dict[str, Any]: Configuration mapping with environment overrides applied.
    """

    env_file_path = _determine_env_file_path()
    if env_file_path is not None:
        _load_env_file(env_file_path)

    max_nodes = _read_int_override(MAX_NODES_ENV_VAR)
    if max_nodes is not None:
        graph_section = raw_content.setdefault("graph", {})
        graph_section["max_nodes"] = max_nodes
        LOGGER.info("Graph max_nodes overridden from environment (value=%d)", max_nodes)

    canvas_width = _read_int_override(CANVAS_WIDTH_ENV_VAR)
    if canvas_width is not None:
        canvas_section = raw_content.setdefault("canvas", {})
        canvas_section["default_width"] = canvas_width
        LOGGER.info("Canvas default_width overridden from environment (value=%d)", canvas_width)
    return raw_content


def _read_yaml(path: Path) -> Dict[str, Any]:
    """Read YAML content from disk.

    Args:
        path: Location of the YAML file.

    Returns:
        Dict[str, Any]: Parsed YAML content.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except FileNotFoundError as exc:
        LOGGER.error("Configuration file missing at %s", path)
        raise ConfigError("Configuration file not found") from exc
    except yaml.YAMLError as exc:
        LOGGER.error("Invalid YAML syntax in %s", path)
        raise ConfigError("Invalid YAML syntax") from exc
    if not isinstance(data, dict):
        LOGGER.error("Configuration root must be a mapping: %s", path)
        raise ConfigError("Configuration root must be a mapping")
    return data


@lru_cache(maxsize=1)
def load_config(path: Optional[Path] = None) -> AppConfig:
    """Load application configuration from YAML.

    Args:
        path: Optional override path to the YAML file.

    Returns:
        AppConfig: Parsed configuration object.

    Raises:
        ConfigError: If the configuration cannot be loaded or validated.
    """
    config_path = path or AppConfig.default_path()
    raw_content = _read_yaml(config_path)
    raw_content = _apply_environment_overrides(raw_content)
    try:
        return AppConfig(**raw_content)
    except ValidationError as exc:
        LOGGER.error("Invalid configuration values: %s", exc)
        raise ConfigError("Configuration validation failed") from exc
