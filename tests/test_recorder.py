"""Tests for session recording and replay sources."""

import json

import pytest

from landmark_engine.landmarks import Handedness
from landmark_engine.recorder import (
    SessionRecorder,
    frame_from_dict,
    frame_to_dict,
    load_recording,
)
from landmark_engine.reticle import Transform
from landmark_engine.sources import Frame, HandDetection, ReplaySource

from helpers import make_body, make_hand


def sample_frame(t=10.0):
    return Frame(
        timestamp=t,
        hands=[HandDetection(make_hand(index=True), Handedness.LEFT)],
        bodies=[make_body()],
        hits=[Transform((1.0, 0.0, -2.0), (0.0, 0.5, 0.0))],
        size=(640, 480),
    )


class TestFrameSerialization:
    def test_round_trip(self):
        frame = sample_frame()
        restored = frame_from_dict(json.loads(json.dumps(frame_to_dict(frame))))
        assert restored.timestamp == frame.timestamp
        assert restored.hands == frame.hands
        assert restored.bodies == frame.bodies
        assert restored.hits == frame.hits
        assert restored.size == (640, 480)

    def test_optional_fields(self):
        frame = frame_from_dict({"timestamp": 1})
        assert frame.hands == []
        assert frame.hits == []
        assert frame.size is None


class TestSessionRecorder:
    def test_ignores_frames_until_started(self):
        rec = SessionRecorder()
        rec.add_frame(sample_frame())
        assert rec.frame_count == 0

    def test_relative_timestamps(self):
        rec = SessionRecorder()
        rec.start()
        rec.add_frame(sample_frame(10.0))
        rec.add_frame(sample_frame(10.5))
        assert rec.stop() == 2
        assert not rec.is_recording
        assert rec.duration == pytest.approx(0.5)

    def test_save_and_load(self, tmp_path):
        rec = SessionRecorder()
        rec.start()
        for i in range(3):
            rec.add_frame(sample_frame(100.0 + i * 0.1))
        rec.stop()

        path = tmp_path / "nested" / "session.json"
        rec.save(path)
        data = json.loads(path.read_text())
        assert data["version"] == 1
        assert data["frame_count"] == 3

        frames = load_recording(path)
        assert [f.timestamp for f in frames] == pytest.approx([0.0, 0.1, 0.2])
        assert frames[0].hands[0].handedness is Handedness.LEFT

    def test_unsupported_version(self, tmp_path):
        path = tmp_path / "future.json"
        path.write_text(json.dumps({"version": 99, "frames": []}))
        with pytest.raises(ValueError):
            load_recording(path)


class TestReplaySource:
    def test_serves_frames_then_ends(self):
        source = ReplaySource([sample_frame(0.0), sample_frame(1.0)])
        assert source.capability().available
        source.open()
        assert source.read().timestamp == 0.0
        assert source.read().timestamp == 1.0
        assert source.read() is None

    def test_closed_source_reads_nothing(self):
        source = ReplaySource([sample_frame()])
        assert source.read() is None
        source.open()
        source.close()
        assert not source.is_open
        assert source.read() is None

    def test_reopen_rewinds(self):
        source = ReplaySource([sample_frame()])
        source.open()
        source.read()
        source.open()
        assert source.read() is not None

    def test_from_file(self, tmp_path):
        rec = SessionRecorder()
        rec.start()
        rec.add_frame(sample_frame())
        rec.save(tmp_path / "s.json")
        assert ReplaySource.from_file(tmp_path / "s.json").frame_count == 1
