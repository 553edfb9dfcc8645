"""Perception sources — where per-frame landmarks come from.

A source reports whether it can run at all through `capability()`, is
opened once per session, then polled with `read()` for the latest Frame.
The core never probes a detector object's shape to guess what it can do;
each source states its availability explicitly.

Two implementations ship here:
- MediaPipeSource: camera frames through MediaPipe Hands / Pose
- ReplaySource: frames from a recording or an in-memory list
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Iterable, Optional, Protocol

import numpy as np

from landmark_engine.errors import SourceUnavailableError
from landmark_engine.landmarks import Handedness, LandmarkSet
from landmark_engine.reticle import Transform

try:
    import cv2
except ImportError:
    cv2 = None

try:
    import mediapipe as mp
except ImportError:
    mp = None

logger = logging.getLogger("landmark_engine.sources")


@dataclass(frozen=True)
class HandDetection:
    """One detected hand: 21 landmarks plus which hand it is."""
    landmarks: LandmarkSet
    handedness: Handedness = Handedness.UNKNOWN


@dataclass
class Frame:
    """Everything the perception engine produced for one source frame.

    `timestamp` must be monotonic per source and comparable for equality;
    two reads of the same underlying frame carry the same timestamp.
    """
    timestamp: float
    hands: list[HandDetection] = field(default_factory=list)
    bodies: list[LandmarkSet] = field(default_factory=list)
    hits: list[Transform] = field(default_factory=list)
    size: Optional[tuple[int, int]] = None  # (width, height) in pixels


@dataclass(frozen=True)
class SourceCapability:
    available: bool
    reason: str = ""

    @classmethod
    def ok(cls) -> SourceCapability:
        return cls(True)

    @classmethod
    def unavailable(cls, reason: str) -> SourceCapability:
        return cls(False, reason)


class PerceptionSource(Protocol):
    def capability(self) -> SourceCapability: ...

    def open(self) -> None: ...

    def read(self) -> Optional[Frame]: ...

    def close(self) -> None: ...


class ReplaySource:
    """Serves a fixed sequence of frames, then ends (read() returns None).

    Usage:
        source = ReplaySource.from_file("session.json")
        with TrackingSession(source) as session:
            session.run()
    """

    def __init__(self, frames: Iterable[Frame]):
        self._frames = list(frames)
        self._cursor = 0
        self._open = False

    @classmethod
    def from_file(cls, path) -> ReplaySource:
        from landmark_engine.recorder import load_recording

        return cls(load_recording(path))

    def capability(self) -> SourceCapability:
        return SourceCapability.ok()

    def open(self):
        self._cursor = 0
        self._open = True

    def read(self) -> Optional[Frame]:
        if not self._open or self._cursor >= len(self._frames):
            return None
        frame = self._frames[self._cursor]
        self._cursor += 1
        return frame

    def close(self):
        self._open = False

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def is_open(self) -> bool:
        return self._open


class MediaPipeSource:
    """Camera frames run through MediaPipe Hands and/or Pose.

    Hand landmarks carry no visibility; pose landmarks do. Coordinates are
    normalized to [0, 1] relative to the image. With `mirror=True` the
    image is flipped horizontally first (selfie view), which is also the
    view MediaPipe's handedness labels assume.
    """

    def __init__(
        self,
        camera: int = 0,
        hands: bool = True,
        pose: bool = False,
        max_hands: int = 2,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
        mirror: bool = True,
    ):
        self.camera = camera
        self.enable_hands = hands
        self.enable_pose = pose
        self.max_hands = max_hands
        self.min_detection_confidence = min_detection_confidence
        self.min_tracking_confidence = min_tracking_confidence
        self.mirror = mirror

        self._cap = None
        self._hands = None
        self._pose = None
        self.last_image: Optional[np.ndarray] = None  # BGR, after mirroring

    @classmethod
    def from_config(cls, config) -> MediaPipeSource:
        """Build from a `SourceConfig`."""
        return cls(
            camera=config.camera,
            hands=config.hands,
            pose=config.pose,
            max_hands=config.max_hands,
            min_detection_confidence=config.min_detection_confidence,
            min_tracking_confidence=config.min_tracking_confidence,
            mirror=config.mirror,
        )

    def capability(self) -> SourceCapability:
        if mp is None:
            return SourceCapability.unavailable(
                "mediapipe is required. Install with: pip install mediapipe"
            )
        if cv2 is None:
            return SourceCapability.unavailable(
                "opencv is required. Install with: pip install opencv-python"
            )
        if not (self.enable_hands or self.enable_pose):
            return SourceCapability.unavailable("neither hands nor pose tracking enabled")
        return SourceCapability.ok()

    def open(self):
        cap = self.capability()
        if not cap.available:
            raise SourceUnavailableError(cap.reason)

        self._cap = cv2.VideoCapture(self.camera)
        if not self._cap.isOpened():
            self.close()
            raise SourceUnavailableError(f"could not open camera {self.camera}")

        try:
            if self.enable_hands:
                self._hands = mp.solutions.hands.Hands(
                    static_image_mode=False,
                    max_num_hands=self.max_hands,
                    min_detection_confidence=self.min_detection_confidence,
                    min_tracking_confidence=self.min_tracking_confidence,
                )
            if self.enable_pose:
                self._pose = mp.solutions.pose.Pose(
                    static_image_mode=False,
                    min_detection_confidence=self.min_detection_confidence,
                    min_tracking_confidence=self.min_tracking_confidence,
                )
        except Exception as e:
            self.close()
            raise SourceUnavailableError(f"failed to load MediaPipe models: {e}") from e

        logger.info("Opened camera %d (hands=%s, pose=%s)",
                    self.camera, self.enable_hands, self.enable_pose)

    def read(self) -> Optional[Frame]:
        if self._cap is None:
            return None

        ret, image = self._cap.read()
        if not ret:
            return None
        timestamp = time.monotonic()

        if self.mirror:
            image = cv2.flip(image, 1)
        self.last_image = image
        rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        height, width = rgb.shape[:2]

        frame = Frame(timestamp=timestamp, size=(width, height))
        if self._hands is not None:
            frame.hands = self._detect_hands(rgb)
        if self._pose is not None:
            frame.bodies = self._detect_pose(rgb)
        return frame

    def _detect_hands(self, rgb: np.ndarray) -> list[HandDetection]:
        results = self._hands.process(rgb)
        if not results.multi_hand_landmarks:
            return []

        handedness = results.multi_handedness or []
        hands = []
        for i, hand_landmarks in enumerate(results.multi_hand_landmarks):
            points = np.array(
                [[lm.x, lm.y, lm.z] for lm in hand_landmarks.landmark],
                dtype=np.float64,
            )
            label = None
            if i < len(handedness) and handedness[i].classification:
                label = handedness[i].classification[0].label
            hands.append(HandDetection(LandmarkSet.hand(points), Handedness.parse(label)))
        return hands

    def _detect_pose(self, rgb: np.ndarray) -> list[LandmarkSet]:
        results = self._pose.process(rgb)
        if not results.pose_landmarks:
            return []

        points = np.array(
            [[lm.x, lm.y, lm.z, lm.visibility] for lm in results.pose_landmarks.landmark],
            dtype=np.float64,
        )
        return [LandmarkSet.body(points)]

    def close(self):
        """Release MediaPipe models and the camera."""
        for name in ("_hands", "_pose"):
            model = getattr(self, name)
            if model is not None:
                try:
                    model.close()
                except Exception as e:
                    logger.warning("Error closing MediaPipe %s: %s", name.strip("_"), e)
                setattr(self, name, None)

        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.info("Released camera %d", self.camera)

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, *args):
        self.close()
