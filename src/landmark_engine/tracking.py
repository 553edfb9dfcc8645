"""Stable identities for hands and people across frames.

Detectors report entities only as positions in the current frame's result
list, and that order can change between frames. EntityTracker matches each
detection to last frame's entities by centroid distance and hands out small
slot IDs. A slot is freed after `timeout` seconds without a match and the
lowest free slot is reused for the next new entity.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from landmark_engine.landmarks import LandmarkSet


@dataclass
class TrackedEntity:
    """An entity being tracked across frames."""
    slot: int
    centroid: np.ndarray
    last_seen: float
    frames_tracked: int = 0


class EntityTracker:
    """Greedy nearest-centroid matcher with arena-style slot reuse.

    Simple but effective for the handful of hands or people a single camera
    sees; matching is O(detections x tracks).
    """

    def __init__(self, max_distance: float = 0.3, timeout: float = 0.5):
        self._tracked: dict[int, TrackedEntity] = {}
        self._max_distance = max_distance
        self._timeout = timeout

    def update(self, detections: Sequence[LandmarkSet], now: float) -> list[int]:
        """Match detections to tracked entities.

        Returns one slot ID per detection, in detection order.
        """
        stale = [s for s, t in self._tracked.items() if now - t.last_seen > self._timeout]
        for slot in stale:
            del self._tracked[slot]

        centroids = [d.centroid() for d in detections]
        slots: list[Optional[int]] = [None] * len(detections)

        # All detection/track pairs, closest first
        pairs = sorted(
            (float(np.linalg.norm(c - t.centroid)), det_idx, slot)
            for det_idx, c in enumerate(centroids)
            for slot, t in self._tracked.items()
        )
        used_tracks: set[int] = set()
        for dist, det_idx, slot in pairs:
            if dist >= self._max_distance:
                break
            if slots[det_idx] is not None or slot in used_tracks:
                continue
            track = self._tracked[slot]
            track.centroid = centroids[det_idx]
            track.last_seen = now
            track.frames_tracked += 1
            slots[det_idx] = slot
            used_tracks.add(slot)

        for det_idx, centroid in enumerate(centroids):
            if slots[det_idx] is None:
                slot = self._free_slot()
                self._tracked[slot] = TrackedEntity(
                    slot=slot, centroid=centroid, last_seen=now,
                )
                slots[det_idx] = slot

        return [int(s) for s in slots]

    def _free_slot(self) -> int:
        slot = 0
        while slot in self._tracked:
            slot += 1
        return slot

    def reset(self):
        self._tracked.clear()

    @property
    def active_count(self) -> int:
        return len(self._tracked)

    def get_track(self, slot: int) -> Optional[TrackedEntity]:
        return self._tracked.get(slot)
