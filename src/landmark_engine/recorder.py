"""Session recording and replay — capture landmark frames to disk.

Record real tracking sessions for:
- Reproducible testing without a camera
- Replaying drawing/pose sessions through a different configuration
"""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Optional

from landmark_engine.landmarks import Handedness, LandmarkSet
from landmark_engine.reticle import Transform
from landmark_engine.sources import Frame, HandDetection

FORMAT_VERSION = 1


def frame_to_dict(frame: Frame, timestamp: Optional[float] = None) -> dict:
    """Serialize a Frame. Visibility is omitted when the detector didn't set it."""
    d = {
        "timestamp": frame.timestamp if timestamp is None else timestamp,
        "hands": [
            {"handedness": h.handedness.value, "landmarks": h.landmarks.to_list()}
            for h in frame.hands
        ],
        "bodies": [b.to_list() for b in frame.bodies],
        "hits": [t.to_dict() for t in frame.hits],
    }
    if frame.size is not None:
        d["size"] = list(frame.size)
    return d


def frame_from_dict(data: dict) -> Frame:
    size = data.get("size")
    return Frame(
        timestamp=float(data["timestamp"]),
        hands=[
            HandDetection(
                landmarks=LandmarkSet.hand(h["landmarks"]),
                handedness=Handedness.parse(h.get("handedness")),
            )
            for h in data.get("hands", [])
        ],
        bodies=[LandmarkSet.body(b) for b in data.get("bodies", [])],
        hits=[
            Transform(position=tuple(t["position"]), rotation=tuple(t["rotation"]))
            for t in data.get("hits", [])
        ],
        size=tuple(size) if size else None,
    )


class SessionRecorder:
    """Records frames to a JSON file.

    Usage:
        recorder = SessionRecorder()
        recorder.start()
        # In your frame loop:
        recorder.add_frame(frame)
        # When done:
        recorder.save("session.json")
    """

    def __init__(self):
        self._frames: list[dict] = []
        self._start_time: Optional[float] = None
        self._recording = False

    def start(self):
        """Begin a new recording session."""
        self._frames = []
        self._start_time = None
        self._recording = True

    def stop(self) -> int:
        """Stop recording. Returns number of frames captured."""
        self._recording = False
        return len(self._frames)

    def add_frame(self, frame: Frame):
        """Add a frame; timestamps are stored relative to the first frame."""
        if not self._recording:
            return
        if self._start_time is None:
            self._start_time = frame.timestamp
        self._frames.append(frame_to_dict(frame, frame.timestamp - self._start_time))

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def duration(self) -> float:
        """Duration of recording in seconds."""
        if not self._frames:
            return 0.0
        return self._frames[-1]["timestamp"]

    def save(self, path: str | Path):
        """Save recording to JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "version": FORMAT_VERSION,
            "recorded_at": time.time(),
            "frame_count": len(self._frames),
            "duration": self.duration,
            "frames": self._frames,
        }
        with open(path, "w") as f:
            json.dump(data, f)


def load_recording(path: str | Path) -> list[Frame]:
    """Load frames saved by SessionRecorder."""
    with open(path) as f:
        data = json.load(f)

    version = data.get("version", FORMAT_VERSION)
    if version != FORMAT_VERSION:
        raise ValueError(f"unsupported recording version {version}")
    return [frame_from_dict(fr) for fr in data.get("frames", [])]
