"""Geometry kernel — pure functions over normalized landmarks.

Everything here works in the landmark's own frame space (x right, y down).
None of these functions raise for numeric input.
"""

from __future__ import annotations

import math
from landmark_engine.landmarks import HandLandmark, Handedness, Landmark, LandmarkSet


def distance(p: Landmark, q: Landmark) -> float:
    """Euclidean distance in the (x, y) plane."""
    return math.hypot(p.x - q.x, p.y - q.y)


def distance3d(p: Landmark, q: Landmark) -> float:
    return math.sqrt((p.x - q.x) ** 2 + (p.y - q.y) ** 2 + (p.z - q.z) ** 2)


def midpoint(p: Landmark, q: Landmark) -> tuple[float, float]:
    return (p.x + q.x) / 2.0, (p.y + q.y) / 2.0


def angle(a: Landmark, vertex: Landmark, c: Landmark) -> float:
    """Unsigned angle at `vertex` between rays to `a` and `c`, in degrees.

    Computed as the difference of two atan2 results and folded into
    [0, 180]. Coincident points give 0.0 (atan2(0, 0) == 0); non-finite
    coordinates also give 0.0.
    """
    radians = math.atan2(c.y - vertex.y, c.x - vertex.x) - math.atan2(
        a.y - vertex.y, a.x - vertex.x
    )
    degrees = abs(math.degrees(radians))
    if not math.isfinite(degrees):
        return 0.0
    if degrees > 180.0:
        degrees = 360.0 - degrees
    return degrees


def is_visible(landmark: Landmark, threshold: float = 0.5, default: bool = True) -> bool:
    """True if the landmark's confidence exceeds `threshold`.

    Landmarks with no confidence value return `default`. Hand detectors
    don't report visibility (use True); pose detectors do (use False).
    """
    if landmark.visibility is None or math.isnan(landmark.visibility):
        return default
    return landmark.visibility > threshold


def is_finger_extended(tip: Landmark, pip: Landmark, mcp: Landmark) -> bool:
    """Screen-space extension test: tip above pip above mcp.

    Only meaningful for an upright hand; a rotated hand breaks the
    correlation between image "up" and finger extension.
    """
    return tip.y < pip.y < mcp.y


def is_thumb_extended(landmarks: LandmarkSet, handedness: Handedness) -> bool:
    """Horizontal thumb test, mirrored by handedness."""
    tip = landmarks[HandLandmark.THUMB_TIP]
    ip = landmarks[HandLandmark.THUMB_IP]
    mcp = landmarks[HandLandmark.THUMB_MCP]

    if handedness is Handedness.RIGHT:
        return tip.x < ip.x < mcp.x
    return tip.x > ip.x > mcp.x
