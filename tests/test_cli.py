"""Tests for the landmark-engine command line."""

import json

from typer.testing import CliRunner

from landmark_engine.cli import app
from landmark_engine.recorder import SessionRecorder
from landmark_engine.sources import Frame, HandDetection

from helpers import make_body_array, make_hand, make_hand_array, t_pose_body

runner = CliRunner()


def write_json(path, data):
    path.write_text(json.dumps(data))
    return str(path)


class TestClassify:
    def test_hand_points(self, tmp_path):
        points = make_hand_array(index=True, pinch=True).tolist()
        result = runner.invoke(app, ["classify", write_json(tmp_path / "hand.json", points)])
        assert result.exit_code == 0
        assert "hand 0 (right): pinch" in result.output

    def test_multiple_sets_with_handedness(self, tmp_path):
        data = {"sets": [
            {"landmarks": make_hand_array(thumb=True).tolist(), "handedness": "Right"},
            {"landmarks": make_hand_array(thumb=True, mirror=True).tolist(), "handedness": "Left"},
        ]}
        result = runner.invoke(app, ["classify", write_json(tmp_path / "hands.json", data)])
        assert result.exit_code == 0
        assert "hand 0 (right): thumbs_up" in result.output
        assert "hand 1 (left): thumbs_up" in result.output

    def test_body_with_angles(self, tmp_path):
        points = t_pose_body().to_list()
        path = write_json(tmp_path / "body.json", points)
        result = runner.invoke(app, ["classify", path, "--kind", "body", "--angles"])
        assert result.exit_code == 0
        assert "body 0: t_pose" in result.output
        assert "left_elbow" in result.output

    def test_wrong_point_count(self, tmp_path):
        points = make_body_array()[:, :3].tolist()
        result = runner.invoke(app, ["classify", write_json(tmp_path / "body.json", points)])
        assert result.exit_code == 1

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["classify", str(tmp_path / "nope.json")])
        assert result.exit_code == 1

    def test_set_without_landmarks_key(self, tmp_path):
        path = write_json(tmp_path / "hand.json", {"handedness": "left"})
        result = runner.invoke(app, ["classify", path])
        assert result.exit_code == 1
        assert "landmarks" in result.output
        assert result.exception is None or isinstance(result.exception, SystemExit)

    def test_point_without_x(self, tmp_path):
        points = [{"x": 0.5, "y": 0.5} for _ in range(21)]
        points[5] = {"y": 0.5}
        result = runner.invoke(app, ["classify", write_json(tmp_path / "hand.json", points)])
        assert result.exit_code == 1
        assert "Set 0" in result.output

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "hand.json"
        path.write_text("[[0.1, 0.2,")
        result = runner.invoke(app, ["classify", str(path)])
        assert result.exit_code == 1
        assert "Invalid JSON" in result.output

    def test_bad_kind(self, tmp_path):
        path = write_json(tmp_path / "hand.json", make_hand_array().tolist())
        result = runner.invoke(app, ["classify", path, "--kind", "paw"])
        assert result.exit_code == 1


class TestReplay:
    def _recording(self, path):
        rec = SessionRecorder()
        rec.start()
        for i, pinch in enumerate([True, True, True, False]):
            hand = make_hand(index=True, pinch=pinch)
            rec.add_frame(Frame(timestamp=i / 30, hands=[HandDetection(hand)]))
        rec.save(path)
        return str(path)

    def test_replay(self, tmp_path):
        result = runner.invoke(app, ["replay", self._recording(tmp_path / "rec.json")])
        assert result.exit_code == 0
        assert "4 frames, 1 stroke(s) committed" in result.output
        assert "stroke 0: 3 points" in result.output

    def test_replay_with_config(self, tmp_path):
        cfg = tmp_path / "cfg.yml"
        cfg.write_text("strokes:\n  enabled: false\n")
        rec = self._recording(tmp_path / "rec.json")
        result = runner.invoke(app, ["replay", rec, "--config", str(cfg)])
        assert result.exit_code == 0
        assert "0 stroke(s) committed" in result.output

    def test_bad_config(self, tmp_path):
        cfg = tmp_path / "cfg.yml"
        cfg.write_text("strokes:\n  thickness: 3\n")
        rec = self._recording(tmp_path / "rec.json")
        result = runner.invoke(app, ["replay", rec, "--config", str(cfg)])
        assert result.exit_code == 1

    def test_missing_recording(self, tmp_path):
        result = runner.invoke(app, ["replay", str(tmp_path / "missing.json")])
        assert result.exit_code == 1
