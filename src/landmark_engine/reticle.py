"""Placement reticle — hit-test smoothing and tap-to-place world anchors.

Each frame the reticle follows the first hit-test result. When a trigger
(tap / XR "select") arrives while the reticle is visible, a PlacementEvent
is emitted carrying a *copy* of the reticle's transform at that instant.
The reticle keeps moving every frame afterwards; placed objects must not.

Usage:
    reticle = PlacementReticle(anchor_type="markers", color="#3b82f6")
    registry = AnchorRegistry()
    reticle.on_place(registry.add)
    # In frame loop:
    reticle.update(hit_transforms)
    # On tap:
    reticle.trigger()
"""

from __future__ import annotations

import logging
import math
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional, Sequence

import numpy as np

logger = logging.getLogger("landmark_engine.reticle")

Vector3 = tuple[float, float, float]

ANCHOR_TYPES = ("markers", "portals", "notes", "lights")
# Surface-placed primitives
OBJECT_TYPES = ("cube", "sphere", "cylinder", "cone", "torus", "tree")
PLACEMENT_TYPES = ANCHOR_TYPES + OBJECT_TYPES
ANCHOR_COLORS = ("#ef4444", "#f59e0b", "#22c55e", "#06b6d4", "#3b82f6", "#8b5cf6", "#ec4899")
NOTE_MAX_LENGTH = 30


def _euler_xyz(rot: np.ndarray) -> Vector3:
    """XYZ-order Euler angles (radians) from a pure 3x3 rotation matrix."""
    m13 = float(np.clip(rot[0, 2], -1.0, 1.0))
    y = math.asin(m13)
    if abs(m13) < 0.9999999:
        x = math.atan2(-rot[1, 2], rot[2, 2])
        z = math.atan2(-rot[0, 1], rot[0, 0])
    else:
        # Gimbal lock: fold all roll into x
        x = math.atan2(rot[2, 1], rot[1, 1])
        z = 0.0
    return (float(x), float(y), float(z))


@dataclass(frozen=True)
class Transform:
    """A world position plus XYZ Euler rotation in radians."""
    position: Vector3 = (0.0, 0.0, 0.0)
    rotation: Vector3 = (0.0, 0.0, 0.0)

    @classmethod
    def from_matrix(cls, matrix: Sequence[float] | np.ndarray) -> Transform:
        """Decompose a 4x4 rigid transform (scale is divided out).

        A flat 16-element sequence is read column-major, the layout XR
        runtimes hand out; a 4x4 array is read as m[row, col].
        """
        m = np.asarray(matrix, dtype=np.float64)
        if m.shape == (16,):
            m = m.reshape(4, 4).T
        if m.shape != (4, 4):
            raise ValueError(f"expected a 4x4 matrix, got shape {m.shape}")

        position = (float(m[0, 3]), float(m[1, 3]), float(m[2, 3]))
        basis = m[:3, :3].copy()
        scale = np.linalg.norm(basis, axis=0)
        if np.linalg.det(basis) < 0:
            scale[0] = -scale[0]
        scale[scale == 0] = 1.0
        return cls(position=position, rotation=_euler_xyz(basis / scale))

    def to_dict(self) -> dict:
        return {"position": list(self.position), "rotation": list(self.rotation)}


@dataclass(frozen=True)
class PlacementEvent:
    """Emitted once per trigger while the reticle is visible."""
    position: Vector3
    rotation: Vector3
    anchor_type: str
    color: str
    label: Optional[str] = None
    timestamp: float = 0.0


@dataclass(frozen=True)
class WorldAnchor:
    """A placed, immutable point in 3D space."""
    id: str
    position: Vector3
    rotation: Vector3
    type: str
    color: str
    label: Optional[str] = None
    created_at: float = field(default_factory=time.time)

    @classmethod
    def from_event(cls, event: PlacementEvent) -> WorldAnchor:
        return cls(
            id=f"anchor-{uuid.uuid4().hex[:12]}",
            position=event.position,
            rotation=event.rotation,
            type=event.anchor_type,
            color=event.color,
            label=event.label,
        )

    def to_dict(self) -> dict:
        d = {
            "id": self.id,
            "position": list(self.position),
            "rotation": list(self.rotation),
            "type": self.type,
            "color": self.color,
            "createdAt": self.created_at,
        }
        if self.label is not None:
            d["label"] = self.label
        return d


class PlacementReticle:
    """Tracks the latest hit-test transform and converts triggers to placements.

    `visible` is False whenever the most recent update had zero hits; the
    last transform is retained but never used for placement while hidden.
    """

    def __init__(
        self,
        anchor_type: str = ANCHOR_TYPES[0],
        color: str = ANCHOR_COLORS[4],
        label: str = "Hello!",
    ):
        self.anchor_type = anchor_type
        self.color = color
        self.label = label

        self._transform = Transform()
        self._visible = False
        self._listeners: list[Callable[[PlacementEvent], None]] = []

    def on_place(self, callback: Callable[[PlacementEvent], None]):
        """Register a callback for placement events."""
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[PlacementEvent], None]):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def update(self, hits: Sequence[Transform]) -> bool:
        """Follow the first hit this frame. Returns the new visibility."""
        if not hits:
            self._visible = False
            return False

        self._transform = hits[0]
        self._visible = True
        return True

    def trigger(self, timestamp: Optional[float] = None) -> Optional[PlacementEvent]:
        """Place at the current transform if visible; otherwise a no-op."""
        if not self._visible:
            return None

        # Snapshot; later update() calls must not move a placed anchor
        pos = tuple(float(v) for v in self._transform.position)
        rot = tuple(float(v) for v in self._transform.rotation)
        label = self.label[:NOTE_MAX_LENGTH] if self.anchor_type == "notes" else None
        event = PlacementEvent(
            position=pos,
            rotation=rot,
            anchor_type=self.anchor_type,
            color=self.color,
            label=label,
            timestamp=timestamp if timestamp is not None else time.monotonic(),
        )
        logger.debug("Placed %s at %s", event.anchor_type, pos)

        for cb in self._listeners:
            cb(event)
        return event

    @staticmethod
    def pulse_scale(t: float, base: float = 0.12, amplitude: float = 0.01, speed: float = 4.0) -> float:
        """Cosmetic breathing scale for drawing the reticle at time `t`."""
        return base + math.sin(t * speed) * amplitude

    def reset(self):
        self._transform = Transform()
        self._visible = False

    @property
    def visible(self) -> bool:
        return self._visible

    @property
    def transform(self) -> Transform:
        return self._transform


class AnchorRegistry:
    """In-memory list of placed anchors with undo and clear."""

    def __init__(self):
        self._anchors: list[WorldAnchor] = []

    def add(self, event: PlacementEvent) -> WorldAnchor:
        anchor = WorldAnchor.from_event(event)
        self._anchors.append(anchor)
        return anchor

    def undo(self) -> Optional[WorldAnchor]:
        """Remove the most recently placed anchor."""
        if not self._anchors:
            return None
        return self._anchors.pop()

    def clear(self):
        self._anchors = []

    @property
    def anchors(self) -> list[WorldAnchor]:
        return list(self._anchors)

    def __len__(self) -> int:
        return len(self._anchors)

    def __iter__(self) -> Iterator[WorldAnchor]:
        return iter(list(self._anchors))
