"""Hand gesture classification — ordered finger-state rules over 21 landmarks.

Each finger is reduced to a binary state (extended or curled) using the
screen-space tests in `landmark_engine.geometry`. Gestures are then matched
against an ordered rule table; the first rule that matches wins. Pinch is a
distance test, not a finger pattern, and is always checked first: a pinch
can co-occur with finger patterns that would otherwise match another label,
and drawing depends on pinch taking priority.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from landmark_engine.geometry import distance, is_finger_extended, is_thumb_extended
from landmark_engine.landmarks import (
    HandLandmark,
    Handedness,
    LandmarkKind,
    LandmarkSet,
    require_kind,
)

# Thumb-tip to index-tip distance below which the hand counts as pinching.
# Normalized frame units, not pixels; only scale-invariant while the hand
# stays at a roughly fixed distance from the camera.
DEFAULT_PINCH_THRESHOLD = 0.05


class GestureLabel(str, Enum):
    OPEN_PALM = "open_palm"
    FIST = "fist"
    POINTING = "pointing"
    THUMBS_UP = "thumbs_up"
    PINCH = "pinch"
    PEACE = "peace"
    UNKNOWN = "unknown"

    @property
    def display_name(self) -> str:
        return _GESTURE_INFO[self][0]

    @property
    def emoji(self) -> str:
        return _GESTURE_INFO[self][1]

    @property
    def description(self) -> str:
        return _GESTURE_INFO[self][2]


_GESTURE_INFO = {
    GestureLabel.OPEN_PALM: ("Open Palm", "🖐️", "All fingers extended"),
    GestureLabel.FIST: ("Fist", "✊", "All fingers closed"),
    GestureLabel.POINTING: ("Pointing", "👆", "Index finger up"),
    GestureLabel.THUMBS_UP: ("Thumbs Up", "👍", "Thumb extended up"),
    GestureLabel.PINCH: ("Pinch", "🤏", "Thumb + index touching"),
    GestureLabel.PEACE: ("Peace", "✌️", "Index + middle up"),
    GestureLabel.UNKNOWN: ("Unknown", "❓", "Gesture not recognized"),
}


class FingerState(Enum):
    """Binary finger state based on landmark positions."""
    EXTENDED = "extended"
    CURLED = "curled"
    ANY = "any"  # don't care


@dataclass(frozen=True)
class FingerStates:
    """Extension flags for the five digits of one hand."""
    thumb: bool
    index: bool
    middle: bool
    ring: bool
    pinky: bool

    def as_tuple(self) -> tuple[bool, bool, bool, bool, bool]:
        return (self.thumb, self.index, self.middle, self.ring, self.pinky)


@dataclass(frozen=True)
class GestureRule:
    """A gesture defined by the required state of each finger."""

    label: GestureLabel
    thumb: FingerState = FingerState.ANY
    index: FingerState = FingerState.ANY
    middle: FingerState = FingerState.ANY
    ring: FingerState = FingerState.ANY
    pinky: FingerState = FingerState.ANY

    def matches(self, states: FingerStates) -> bool:
        expected = (self.thumb, self.index, self.middle, self.ring, self.pinky)
        for actual, wanted in zip(states.as_tuple(), expected):
            if wanted is FingerState.ANY:
                continue
            if actual != (wanted is FingerState.EXTENDED):
                return False
        return True

    def to_dict(self) -> dict:
        return {
            "label": self.label.value,
            "fingers": {
                "thumb": self.thumb.value,
                "index": self.index.value,
                "middle": self.middle.value,
                "ring": self.ring.value,
                "pinky": self.pinky.value,
            },
        }


_E = FingerState.EXTENDED
_C = FingerState.CURLED

# Evaluated in order after the pinch test; first match wins.
DEFAULT_RULES: tuple[GestureRule, ...] = (
    GestureRule(GestureLabel.THUMBS_UP, thumb=_E, index=_C, middle=_C, ring=_C, pinky=_C),
    GestureRule(GestureLabel.OPEN_PALM, thumb=_E, index=_E, middle=_E, ring=_E, pinky=_E),
    GestureRule(GestureLabel.FIST, thumb=_C, index=_C, middle=_C, ring=_C, pinky=_C),
    GestureRule(GestureLabel.POINTING, thumb=_C, index=_E, middle=_C, ring=_C, pinky=_C),
    GestureRule(GestureLabel.PEACE, thumb=_C, index=_E, middle=_E, ring=_C, pinky=_C),
)


def finger_states(landmarks: LandmarkSet, handedness: Handedness) -> FingerStates:
    """Determine extension state of each finger."""
    H = HandLandmark

    def finger(tip: HandLandmark, pip: HandLandmark, mcp: HandLandmark) -> bool:
        return is_finger_extended(landmarks[tip], landmarks[pip], landmarks[mcp])

    return FingerStates(
        thumb=is_thumb_extended(landmarks, handedness),
        index=finger(H.INDEX_TIP, H.INDEX_PIP, H.INDEX_MCP),
        middle=finger(H.MIDDLE_TIP, H.MIDDLE_PIP, H.MIDDLE_MCP),
        ring=finger(H.RING_TIP, H.RING_PIP, H.RING_MCP),
        pinky=finger(H.PINKY_TIP, H.PINKY_PIP, H.PINKY_MCP),
    )


def pinch_distance(landmarks: LandmarkSet) -> float:
    return distance(landmarks[HandLandmark.THUMB_TIP], landmarks[HandLandmark.INDEX_TIP])


class HandGestureClassifier:
    """Classifies one hand's 21 landmarks into a GestureLabel.

    Total and deterministic: any well-formed hand yields a label, falling
    back to UNKNOWN. A landmark set of the wrong kind or length raises
    LandmarkCountError.
    """

    def __init__(
        self,
        pinch_threshold: float = DEFAULT_PINCH_THRESHOLD,
        rules: Optional[tuple[GestureRule, ...]] = None,
    ):
        self.pinch_threshold = pinch_threshold
        self._rules = tuple(rules) if rules is not None else DEFAULT_RULES

    @property
    def rules(self) -> tuple[GestureRule, ...]:
        return self._rules

    def is_pinching(self, landmarks: LandmarkSet) -> bool:
        return pinch_distance(landmarks) < self.pinch_threshold

    def classify(
        self,
        landmarks: LandmarkSet,
        handedness: Handedness = Handedness.RIGHT,
    ) -> GestureLabel:
        require_kind(landmarks, LandmarkKind.HAND)

        if self.is_pinching(landmarks):
            return GestureLabel.PINCH

        states = finger_states(landmarks, handedness)
        for rule in self._rules:
            if rule.matches(states):
                return rule.label

        return GestureLabel.UNKNOWN
