"""Frame deduplication and the cooperative frame loop.

The display loop can tick faster than the perception engine produces
samples. Each classifier pass must run at most once per distinct source
frame, otherwise one logical frame rendered twice would, for example,
double-count a pinch transition.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, Optional, Protocol, TypeVar

logger = logging.getLogger("landmark_engine.scheduler")


class Timestamped(Protocol):
    timestamp: float


F = TypeVar("F", bound=Timestamped)


class FrameDeduplicator:
    """Remembers the timestamp of the last consumed source frame."""

    def __init__(self):
        self._last: Optional[float] = None
        self.skipped = 0

    def should_process(self, timestamp: float) -> bool:
        """True (and consume it) unless `timestamp` equals the last one seen."""
        if self._last is not None and timestamp == self._last:
            self.skipped += 1
            return False
        self._last = timestamp
        return True

    def reset(self):
        self._last = None
        self.skipped = 0

    @property
    def last_timestamp(self) -> Optional[float]:
        return self._last


class FrameScheduler(Generic[F]):
    """Explicit frame loop with an injected "get next frame" suspension point.

    `next_frame()` blocks (or returns immediately) with the latest source
    frame, or returns None to end the loop. `step(frame)` runs only for
    frames with a new timestamp; duplicates are skipped but the loop keeps
    polling.

    Usage:
        scheduler = FrameScheduler(source.read, session.step)
        scheduler.run()          # until source ends or stop() is called
    """

    def __init__(
        self,
        next_frame: Callable[[], Optional[F]],
        step: Callable[[F], object],
        dedup: Optional[FrameDeduplicator] = None,
    ):
        self._next_frame = next_frame
        self._step = step
        self.dedup = dedup or FrameDeduplicator()
        self._running = False
        self.frames_processed = 0

    def start(self):
        self._running = True

    def stop(self):
        """Halt the loop; no step runs after this returns."""
        self._running = False

    def run_once(self) -> bool:
        """Poll one frame. Returns False when the loop should end."""
        if not self._running:
            return False

        frame = self._next_frame()
        if frame is None:
            self._running = False
            return False

        # stop() may have been called while next_frame() was suspended
        if not self._running:
            return False

        if not self.dedup.should_process(frame.timestamp):
            logger.debug("Skipping duplicate frame at t=%s", frame.timestamp)
            return True

        self._step(frame)
        self.frames_processed += 1
        return True

    def run(self, max_frames: Optional[int] = None) -> int:
        """Run until the source ends, stop() is called, or `max_frames` polls."""
        self.start()
        polls = 0
        while self.run_once():
            polls += 1
            if max_frames is not None and polls >= max_frames:
                break
        self._running = False
        return self.frames_processed

    def reset(self):
        self.dedup.reset()
        self.frames_processed = 0

    @property
    def is_running(self) -> bool:
        return self._running
