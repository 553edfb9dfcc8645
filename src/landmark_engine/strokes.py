"""Air drawing — turn a per-frame pinch signal into discrete ink strokes.

The recorder is a two-state machine (IDLE, DRAWING) driven once per
processed frame:

- IDLE → DRAWING when the pinch starts: a new stroke is seeded with the
  current point and the selected color
- DRAWING → DRAWING while the pinch holds: every frame appends a point
- DRAWING → IDLE when the pinch ends: the stroke is committed if it has at
  least two points, otherwise dropped as single-frame noise

Points are in canvas pixel space. Committed strokes are streamable to
clients as plain dicts.

Usage:
    recorder = StrokeRecorder()
    # In frame loop:
    point = pinch_point(landmarks, width, height)
    recorder.update(gesture is GestureLabel.PINCH, point)
    # Renderer draws recorder.all_strokes()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from landmark_engine.geometry import midpoint
from landmark_engine.landmarks import HandLandmark, LandmarkSet

logger = logging.getLogger("landmark_engine.strokes")

# Drawing palette
DEFAULT_COLORS = ("#06b6d4", "#8b5cf6", "#f43f5e", "#22c55e", "#f59e0b", "#ec4899")

Point = tuple[float, float]


class StrokeState(Enum):
    IDLE = "idle"
    DRAWING = "drawing"


@dataclass
class Stroke:
    """An ordered run of canvas points drawn in one color."""
    color: str
    points: list[Point] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "color": self.color,
            "points": [[round(x, 1), round(y, 1)] for x, y in self.points],
        }

    def __len__(self) -> int:
        return len(self.points)


def pinch_point(landmarks: LandmarkSet, width: float, height: float) -> Point:
    """Midpoint of thumb tip and index tip, scaled to canvas pixels."""
    x, y = midpoint(landmarks[HandLandmark.THUMB_TIP], landmarks[HandLandmark.INDEX_TIP])
    return x * width, y * height


class StrokeRecorder:
    """Hysteresis state machine from pinch signal to committed strokes.

    Only one stroke is open at a time. When no hand is detected the caller
    passes `point=None`; by default the recorder then holds its state, so a
    stroke interrupted by a tracking dropout resumes when the hand returns.
    With `hold_on_missing_hand=False` a missing hand ends the stroke.
    """

    MIN_POINTS = 2

    def __init__(
        self,
        color: str = DEFAULT_COLORS[0],
        hold_on_missing_hand: bool = True,
        enabled: bool = True,
    ):
        self.color = color
        self.hold_on_missing_hand = hold_on_missing_hand
        self.enabled = enabled

        self._strokes: list[Stroke] = []
        self._current: Optional[Stroke] = None
        self._state = StrokeState.IDLE

    def update(self, pinching: bool, point: Optional[Point]) -> Optional[Stroke]:
        """Advance one processed frame.

        Args:
            pinching: Whether the pinch gesture is active this frame.
            point: Pinch position in canvas pixels, or None if no hand was seen.

        Returns:
            The stroke committed on this frame, if any.
        """
        if not self.enabled:
            return None

        if point is None:
            if self.hold_on_missing_hand:
                return None
            pinching = False

        if pinching and point is not None:
            if self._state is StrokeState.IDLE:
                self._current = Stroke(color=self.color, points=[point])
                self._state = StrokeState.DRAWING
            else:
                self._current.points.append(point)
            return None

        if self._state is StrokeState.DRAWING:
            return self._end_stroke()
        return None

    def _end_stroke(self) -> Optional[Stroke]:
        stroke = self._current
        self._current = None
        self._state = StrokeState.IDLE

        if stroke is None or len(stroke.points) < self.MIN_POINTS:
            logger.debug("Discarded stroke with %d point(s)", len(stroke) if stroke else 0)
            return None

        self._strokes.append(stroke)
        logger.debug("Committed stroke #%d (%d points, %s)",
                     len(self._strokes), len(stroke), stroke.color)
        return stroke

    def all_strokes(self) -> list[Stroke]:
        """Committed history plus the open stroke, for renderers."""
        strokes = list(self._strokes)
        if self._current is not None:
            strokes.append(self._current)
        return strokes

    def get_full_state(self) -> list[dict]:
        """Complete drawing state for new client sync."""
        return [s.to_dict() for s in self.all_strokes()]

    def undo(self) -> Optional[Stroke]:
        """Remove and return the most recent committed stroke."""
        if not self._strokes:
            return None
        return self._strokes.pop()

    def clear(self):
        """Programmatically clear the canvas."""
        self._strokes = []
        self._current = None
        self._state = StrokeState.IDLE

    def reset(self):
        """Clear strokes and per-frame state for a new session."""
        self.clear()

    @property
    def strokes(self) -> list[Stroke]:
        return list(self._strokes)

    @property
    def current_stroke(self) -> Optional[Stroke]:
        return self._current

    @property
    def state(self) -> StrokeState:
        return self._state

    @property
    def is_drawing(self) -> bool:
        return self._state is StrokeState.DRAWING
