"""Landmark data model — fixed anatomical layouts for hands and bodies.

A LandmarkSet is an ordered, fixed-length array of normalized points:
21 for a hand, 33 for a body. Coordinates are in [0, 1] frame space with
the origin at the top-left; z is relative depth; visibility is an optional
confidence in [0, 1] (stored as NaN when the detector doesn't report it).

Index order matches MediaPipe and is a public contract: the classifiers and
the connection tables below read landmarks by position.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Iterable, Iterator, Optional, Sequence, Union

import numpy as np

from landmark_engine.errors import LandmarkCountError


class HandLandmark(IntEnum):
    """MediaPipe hand landmark indices."""
    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_MCP = 5
    INDEX_PIP = 6
    INDEX_DIP = 7
    INDEX_TIP = 8
    MIDDLE_MCP = 9
    MIDDLE_PIP = 10
    MIDDLE_DIP = 11
    MIDDLE_TIP = 12
    RING_MCP = 13
    RING_PIP = 14
    RING_DIP = 15
    RING_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


class PoseLandmark(IntEnum):
    """MediaPipe pose landmark indices (33 points)."""
    NOSE = 0
    LEFT_EYE_INNER = 1
    LEFT_EYE = 2
    LEFT_EYE_OUTER = 3
    RIGHT_EYE_INNER = 4
    RIGHT_EYE = 5
    RIGHT_EYE_OUTER = 6
    LEFT_EAR = 7
    RIGHT_EAR = 8
    MOUTH_LEFT = 9
    MOUTH_RIGHT = 10
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_THUMB = 21
    RIGHT_THUMB = 22
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32


class LandmarkKind(Enum):
    HAND = "hand"
    BODY = "body"

    @property
    def size(self) -> int:
        return len(HandLandmark) if self is LandmarkKind.HAND else len(PoseLandmark)


H = HandLandmark
P = PoseLandmark

# Skeleton edges for renderers
HAND_CONNECTIONS: list[tuple[int, int]] = [
    # Thumb
    (H.WRIST, H.THUMB_CMC), (H.THUMB_CMC, H.THUMB_MCP),
    (H.THUMB_MCP, H.THUMB_IP), (H.THUMB_IP, H.THUMB_TIP),
    # Index
    (H.WRIST, H.INDEX_MCP), (H.INDEX_MCP, H.INDEX_PIP),
    (H.INDEX_PIP, H.INDEX_DIP), (H.INDEX_DIP, H.INDEX_TIP),
    # Middle
    (H.WRIST, H.MIDDLE_MCP), (H.MIDDLE_MCP, H.MIDDLE_PIP),
    (H.MIDDLE_PIP, H.MIDDLE_DIP), (H.MIDDLE_DIP, H.MIDDLE_TIP),
    # Ring
    (H.WRIST, H.RING_MCP), (H.RING_MCP, H.RING_PIP),
    (H.RING_PIP, H.RING_DIP), (H.RING_DIP, H.RING_TIP),
    # Pinky
    (H.WRIST, H.PINKY_MCP), (H.PINKY_MCP, H.PINKY_PIP),
    (H.PINKY_PIP, H.PINKY_DIP), (H.PINKY_DIP, H.PINKY_TIP),
    # Palm
    (H.INDEX_MCP, H.MIDDLE_MCP), (H.MIDDLE_MCP, H.RING_MCP),
    (H.RING_MCP, H.PINKY_MCP),
]

POSE_CONNECTIONS: list[tuple[int, int]] = [
    # Face
    (P.LEFT_EAR, P.LEFT_EYE_OUTER), (P.LEFT_EYE_OUTER, P.LEFT_EYE),
    (P.LEFT_EYE, P.LEFT_EYE_INNER), (P.LEFT_EYE_INNER, P.NOSE),
    (P.NOSE, P.RIGHT_EYE_INNER), (P.RIGHT_EYE_INNER, P.RIGHT_EYE),
    (P.RIGHT_EYE, P.RIGHT_EYE_OUTER), (P.RIGHT_EYE_OUTER, P.RIGHT_EAR),
    (P.MOUTH_LEFT, P.MOUTH_RIGHT),
    # Torso
    (P.LEFT_SHOULDER, P.RIGHT_SHOULDER), (P.LEFT_SHOULDER, P.LEFT_HIP),
    (P.RIGHT_SHOULDER, P.RIGHT_HIP), (P.LEFT_HIP, P.RIGHT_HIP),
    # Left arm
    (P.LEFT_SHOULDER, P.LEFT_ELBOW), (P.LEFT_ELBOW, P.LEFT_WRIST),
    (P.LEFT_WRIST, P.LEFT_PINKY), (P.LEFT_WRIST, P.LEFT_INDEX),
    (P.LEFT_WRIST, P.LEFT_THUMB), (P.LEFT_PINKY, P.LEFT_INDEX),
    # Right arm
    (P.RIGHT_SHOULDER, P.RIGHT_ELBOW), (P.RIGHT_ELBOW, P.RIGHT_WRIST),
    (P.RIGHT_WRIST, P.RIGHT_PINKY), (P.RIGHT_WRIST, P.RIGHT_INDEX),
    (P.RIGHT_WRIST, P.RIGHT_THUMB), (P.RIGHT_PINKY, P.RIGHT_INDEX),
    # Left leg
    (P.LEFT_HIP, P.LEFT_KNEE), (P.LEFT_KNEE, P.LEFT_ANKLE),
    (P.LEFT_ANKLE, P.LEFT_HEEL), (P.LEFT_ANKLE, P.LEFT_FOOT_INDEX),
    (P.LEFT_HEEL, P.LEFT_FOOT_INDEX),
    # Right leg
    (P.RIGHT_HIP, P.RIGHT_KNEE), (P.RIGHT_KNEE, P.RIGHT_ANKLE),
    (P.RIGHT_ANKLE, P.RIGHT_HEEL), (P.RIGHT_ANKLE, P.RIGHT_FOOT_INDEX),
    (P.RIGHT_HEEL, P.RIGHT_FOOT_INDEX),
]

FINGERTIPS = (H.THUMB_TIP, H.INDEX_TIP, H.MIDDLE_TIP, H.RING_TIP, H.PINKY_TIP)


@dataclass(frozen=True)
class Landmark:
    """A single normalized point with optional depth and confidence."""
    x: float
    y: float
    z: float = 0.0
    visibility: Optional[float] = None

    @classmethod
    def from_row(cls, row: Sequence[float]) -> Landmark:
        vis = float(row[3]) if len(row) > 3 else math.nan
        return cls(
            x=float(row[0]),
            y=float(row[1]),
            z=float(row[2]) if len(row) > 2 else 0.0,
            visibility=None if math.isnan(vis) else vis,
        )

    def to_dict(self) -> dict:
        d = {"x": self.x, "y": self.y, "z": self.z}
        if self.visibility is not None:
            d["visibility"] = self.visibility
        return d


PointLike = Union[Landmark, dict, Sequence[float]]


def _point_row(point: PointLike) -> list[float]:
    """Convert a Landmark, dict, or (x, y[, z[, visibility]]) sequence to a row."""
    if isinstance(point, Landmark):
        vis = point.visibility
        return [point.x, point.y, point.z, math.nan if vis is None else vis]
    if isinstance(point, dict):
        vis = point.get("visibility")
        return [
            float(point["x"]),
            float(point["y"]),
            float(point.get("z", 0.0)),
            math.nan if vis is None else float(vis),
        ]
    values = [float(v) for v in point]
    if len(values) < 2:
        raise ValueError(f"landmark needs at least x and y, got {values!r}")
    while len(values) < 3:
        values.append(0.0)
    if len(values) < 4:
        values.append(math.nan)
    return values[:4]


class LandmarkSet:
    """Immutable fixed-length set of landmarks for one hand or one body.

    Backed by a read-only float64 array of shape (N, 4): x, y, z, visibility.
    Index with an int or a HandLandmark/PoseLandmark member to get a Landmark.
    """

    __slots__ = ("_kind", "_data")

    def __init__(self, kind: LandmarkKind, data: np.ndarray):
        if data.ndim != 2:
            raise ValueError(f"expected an (N, 2-4) array, got shape {data.shape}")
        if data.shape[0] != kind.size:
            raise LandmarkCountError(kind.value, kind.size, data.shape[0])
        if data.shape[1] == 2:
            data = np.column_stack([data, np.zeros(len(data)), np.full(len(data), np.nan)])
        elif data.shape[1] == 3:
            data = np.column_stack([data, np.full(len(data), np.nan)])
        elif data.shape[1] != 4:
            raise ValueError(f"landmark rows need 2-4 columns, got {data.shape[1]}")

        data = np.array(data, dtype=np.float64)
        data.setflags(write=False)
        self._kind = kind
        self._data = data

    @classmethod
    def from_points(cls, kind: LandmarkKind, points: Iterable[PointLike]) -> LandmarkSet:
        rows = [_point_row(p) for p in points]
        if len(rows) != kind.size:
            raise LandmarkCountError(kind.value, kind.size, len(rows))
        return cls(kind, np.array(rows, dtype=np.float64))

    @classmethod
    def from_array(cls, kind: LandmarkKind, array: np.ndarray) -> LandmarkSet:
        return cls(kind, np.asarray(array, dtype=np.float64))

    @classmethod
    def hand(cls, points: Iterable[PointLike] | np.ndarray) -> LandmarkSet:
        if isinstance(points, np.ndarray):
            return cls.from_array(LandmarkKind.HAND, points)
        return cls.from_points(LandmarkKind.HAND, points)

    @classmethod
    def body(cls, points: Iterable[PointLike] | np.ndarray) -> LandmarkSet:
        if isinstance(points, np.ndarray):
            return cls.from_array(LandmarkKind.BODY, points)
        return cls.from_points(LandmarkKind.BODY, points)

    @property
    def kind(self) -> LandmarkKind:
        return self._kind

    @property
    def array(self) -> np.ndarray:
        """Read-only (N, 4) array view."""
        return self._data

    @property
    def xy(self) -> np.ndarray:
        return self._data[:, :2]

    def centroid(self) -> np.ndarray:
        """Mean (x, y) of all points."""
        return self._data[:, :2].mean(axis=0)

    def __getitem__(self, index: int) -> Landmark:
        return Landmark.from_row(self._data[int(index)])

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[Landmark]:
        for row in self._data:
            yield Landmark.from_row(row)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LandmarkSet):
            return NotImplemented
        return self._kind is other._kind and np.array_equal(
            self._data, other._data, equal_nan=True
        )

    def __hash__(self):
        return hash((self._kind, self._data.tobytes()))

    def __repr__(self) -> str:
        return f"LandmarkSet(kind={self._kind.value}, points={len(self._data)})"

    def to_list(self) -> list[dict]:
        return [lm.to_dict() for lm in self]


def require_kind(landmarks: LandmarkSet, kind: LandmarkKind) -> None:
    """Raise LandmarkCountError unless `landmarks` is a `kind` set."""
    if landmarks.kind is not kind or len(landmarks) != kind.size:
        raise LandmarkCountError(kind.value, kind.size, len(landmarks))


class Handedness(str, Enum):
    """Which hand a detection is. UNKNOWN is treated as LEFT by the thumb test."""
    LEFT = "left"
    RIGHT = "right"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, label: Optional[str]) -> Handedness:
        """Parse a detector category name such as "Right" or "left"."""
        if not label:
            return cls.UNKNOWN
        try:
            return cls(label.strip().lower())
        except ValueError:
            return cls.UNKNOWN
