"""Engine configuration — YAML-backed dataclasses.

Example config.yml:

    gestures:
      pinch_threshold: 0.05
    poses:
      lean_tilt: 0.3
    strokes:
      color: "#8b5cf6"
      hold_on_missing_hand: true
    reticle:
      anchor_type: notes
      label: "Buy milk"
    tracking:
      enabled: true
    source:
      camera: 0
      hands: true
      pose: false

Every section and key is optional; unknown keys are rejected.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from landmark_engine.errors import ConfigError
from landmark_engine.gestures import DEFAULT_PINCH_THRESHOLD
from landmark_engine.poses import PoseThresholds
from landmark_engine.reticle import ANCHOR_COLORS, ANCHOR_TYPES, PLACEMENT_TYPES
from landmark_engine.strokes import DEFAULT_COLORS


@dataclass
class GestureConfig:
    pinch_threshold: float = DEFAULT_PINCH_THRESHOLD


@dataclass
class StrokeConfig:
    color: str = DEFAULT_COLORS[0]
    hold_on_missing_hand: bool = True
    enabled: bool = True
    canvas_width: int = 1280
    canvas_height: int = 720


@dataclass
class ReticleConfig:
    anchor_type: str = ANCHOR_TYPES[0]
    color: str = ANCHOR_COLORS[4]
    label: str = "Hello!"


@dataclass
class TrackingConfig:
    enabled: bool = False
    max_distance: float = 0.3
    timeout: float = 0.5


@dataclass
class SourceConfig:
    camera: int = 0
    hands: bool = True
    pose: bool = False
    max_hands: int = 2
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5
    mirror: bool = True


def _build(cls: type, section: str, data: Any):
    if data is None:
        return cls()
    if not isinstance(data, dict):
        raise ConfigError(f"section '{section}' must be a mapping, got {type(data).__name__}")

    known = {f.name: f for f in fields(cls)}
    unknown = sorted(set(data) - set(known))
    if unknown:
        raise ConfigError(f"unknown key(s) in '{section}': {', '.join(unknown)}")

    kwargs = {}
    for key, value in data.items():
        default = getattr(cls(), key)
        if isinstance(default, bool) and not isinstance(value, bool):
            raise ConfigError(f"{section}.{key} must be true or false")
        if isinstance(default, (int, float)) and not isinstance(default, bool):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigError(f"{section}.{key} must be a number")
            if isinstance(default, int) and not float(value).is_integer():
                raise ConfigError(f"{section}.{key} must be a whole number")
            value = type(default)(value)
        if isinstance(default, str) and not isinstance(value, str):
            raise ConfigError(f"{section}.{key} must be a string")
        kwargs[key] = value
    return cls(**kwargs)


@dataclass
class EngineConfig:
    """Top-level configuration for a tracking session."""
    gestures: GestureConfig = field(default_factory=GestureConfig)
    poses: PoseThresholds = field(default_factory=PoseThresholds)
    strokes: StrokeConfig = field(default_factory=StrokeConfig)
    reticle: ReticleConfig = field(default_factory=ReticleConfig)
    tracking: TrackingConfig = field(default_factory=TrackingConfig)
    source: SourceConfig = field(default_factory=SourceConfig)

    @classmethod
    def from_dict(cls, data: dict | None) -> EngineConfig:
        data = data or {}
        sections = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(sections))
        if unknown:
            raise ConfigError(f"unknown config section(s): {', '.join(unknown)}")

        config = cls(
            gestures=_build(GestureConfig, "gestures", data.get("gestures")),
            poses=_build(PoseThresholds, "poses", data.get("poses")),
            strokes=_build(StrokeConfig, "strokes", data.get("strokes")),
            reticle=_build(ReticleConfig, "reticle", data.get("reticle")),
            tracking=_build(TrackingConfig, "tracking", data.get("tracking")),
            source=_build(SourceConfig, "source", data.get("source")),
        )
        if config.reticle.anchor_type not in PLACEMENT_TYPES:
            raise ConfigError(
                f"reticle.anchor_type must be one of {', '.join(PLACEMENT_TYPES)}"
            )
        if config.gestures.pinch_threshold <= 0:
            raise ConfigError("gestures.pinch_threshold must be positive")
        return config

    @classmethod
    def from_yaml(cls, path: str | Path) -> EngineConfig:
        """Load configuration from a YAML file."""
        path = Path(path)
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"invalid YAML in {path}: {e}") from e

        if data is not None and not isinstance(data, dict):
            raise ConfigError(f"{path} must contain a mapping at top level")
        return cls.from_dict(data)

    def to_dict(self) -> dict:
        return asdict(self)

    def to_yaml(self, path: str | Path):
        """Save configuration to YAML."""
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
