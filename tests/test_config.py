"""Tests for YAML engine configuration."""

import pytest

from landmark_engine.config import EngineConfig
from landmark_engine.errors import ConfigError


class TestEngineConfig:
    def test_defaults(self):
        cfg = EngineConfig()
        assert cfg.gestures.pinch_threshold == 0.05
        assert cfg.strokes.hold_on_missing_hand is True
        assert cfg.tracking.enabled is False
        assert cfg.reticle.anchor_type == "markers"
        assert cfg.poses.t_pose_shoulder_min == 70.0

    def test_from_dict_partial(self):
        cfg = EngineConfig.from_dict({
            "gestures": {"pinch_threshold": 0.08},
            "poses": {"lean_tilt": 0.4},
            "tracking": {"enabled": True},
        })
        assert cfg.gestures.pinch_threshold == 0.08
        assert cfg.poses.lean_tilt == 0.4
        assert cfg.poses.upright_tilt == 0.2
        assert cfg.tracking.enabled is True

    def test_int_promoted_to_float(self):
        cfg = EngineConfig.from_dict({"poses": {"bent_knee_angle": 100}})
        assert cfg.poses.bent_knee_angle == 100.0
        assert isinstance(cfg.poses.bent_knee_angle, float)

    def test_empty(self):
        assert EngineConfig.from_dict(None) == EngineConfig()

    @pytest.mark.parametrize("data", [
        {"gesture": {}},
        {"strokes": {"colour": "#fff"}},
        {"strokes": {"enabled": "yes"}},
        {"poses": {"lean_tilt": "high"}},
        {"source": {"camera": True}},
        {"reticle": {"anchor_type": "balloons"}},
        {"source": {"camera": 1.9}},
        {"strokes": {"color": 5}},
        {"reticle": {"label": ["a"]}},
        {"gestures": {"pinch_threshold": 0}},
        {"tracking": [1, 2]},
    ])
    def test_invalid(self, data):
        with pytest.raises(ConfigError):
            EngineConfig.from_dict(data)

    def test_yaml_round_trip(self, tmp_path):
        cfg = EngineConfig.from_dict({
            "strokes": {"color": "#8b5cf6", "hold_on_missing_hand": False},
            "reticle": {"anchor_type": "notes", "label": "Buy milk"},
        })
        path = tmp_path / "config.yml"
        cfg.to_yaml(path)
        assert EngineConfig.from_yaml(path) == cfg

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text(
            "gestures:\n"
            "  pinch_threshold: 0.04\n"
            "source:\n"
            "  pose: true\n"
            "  max_hands: 1\n"
        )
        cfg = EngineConfig.from_yaml(path)
        assert cfg.gestures.pinch_threshold == 0.04
        assert cfg.source.pose is True
        assert cfg.source.max_hands == 1

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("")
        assert EngineConfig.from_yaml(path) == EngineConfig()

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "bad.yml"
        path.write_text("gestures: [unclosed\n")
        with pytest.raises(ConfigError):
            EngineConfig.from_yaml(path)

    def test_non_mapping_yaml(self, tmp_path):
        path = tmp_path / "list.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            EngineConfig.from_yaml(path)

    def test_surface_object_types_accepted(self):
        cfg = EngineConfig.from_dict({"reticle": {"anchor_type": "cube"}})
        assert cfg.reticle.anchor_type == "cube"

    def test_whole_float_accepted_for_int(self):
        cfg = EngineConfig.from_dict({"source": {"camera": 2.0}})
        assert cfg.source.camera == 2
        assert isinstance(cfg.source.camera, int)
