"""Tracking session — session-scoped state and the per-frame step.

All state that survives from one frame to the next (pinch hysteresis,
the last consumed source timestamp, the reticle pose, identity slots)
lives on the TrackingSession, not in module globals. start() resets it,
so a new session never inherits a previous session's stroke or timestamp.

Per processed frame the session:
1. skips the frame if its source timestamp was already consumed
2. classifies every hand (gesture) and every body (pose)
3. feeds the first pinching hand to the stroke recorder
4. moves the placement reticle to the frame's first hit-test result
5. notifies `on_result` callbacks with a FrameResult

Usage:
    session = TrackingSession(MediaPipeSource(), EngineConfig())
    session.on_result(lambda r: print(r.gestures))
    with session:
        session.run()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from landmark_engine.config import EngineConfig
from landmark_engine.errors import SessionStateError, SourceUnavailableError
from landmark_engine.gestures import GestureLabel, HandGestureClassifier
from landmark_engine.landmarks import Handedness
from landmark_engine.poses import BodyPoseClassifier, PoseLabel
from landmark_engine.reticle import AnchorRegistry, PlacementEvent, PlacementReticle
from landmark_engine.scheduler import FrameDeduplicator, FrameScheduler
from landmark_engine.sources import Frame, PerceptionSource
from landmark_engine.strokes import Stroke, StrokeRecorder, pinch_point
from landmark_engine.tracking import EntityTracker

logger = logging.getLogger("landmark_engine.session")


@dataclass
class HandResult:
    """Gesture for one detected hand in one frame."""
    index: int  # position in this frame's detections
    id: int  # tracker slot when tracking is enabled, else == index
    handedness: Handedness
    gesture: GestureLabel


@dataclass
class BodyResult:
    """Pose for one detected person in one frame."""
    index: int
    id: int
    pose: PoseLabel


@dataclass
class FrameResult:
    timestamp: float
    hands: list[HandResult] = field(default_factory=list)
    bodies: list[BodyResult] = field(default_factory=list)
    committed_stroke: Optional[Stroke] = None
    active_stroke: Optional[Stroke] = None
    reticle_visible: bool = False
    frame: Optional[Frame] = field(default=None, repr=False)

    @property
    def gestures(self) -> list[GestureLabel]:
        return [h.gesture for h in self.hands]

    @property
    def poses(self) -> list[PoseLabel]:
        return [b.pose for b in self.bodies]


class TrackingSession:
    """One start/stop lifetime of a perception source plus all derived state."""

    def __init__(
        self,
        source: PerceptionSource,
        config: Optional[EngineConfig] = None,
        hand_classifier: Optional[HandGestureClassifier] = None,
        pose_classifier: Optional[BodyPoseClassifier] = None,
        anchors: Optional[AnchorRegistry] = None,
    ):
        self.source = source
        self.config = config or EngineConfig()
        cfg = self.config

        self.hand_classifier = hand_classifier or HandGestureClassifier(
            pinch_threshold=cfg.gestures.pinch_threshold,
        )
        self.pose_classifier = pose_classifier or BodyPoseClassifier(cfg.poses)
        self.strokes = StrokeRecorder(
            color=cfg.strokes.color,
            hold_on_missing_hand=cfg.strokes.hold_on_missing_hand,
            enabled=cfg.strokes.enabled,
        )
        self.reticle = PlacementReticle(
            anchor_type=cfg.reticle.anchor_type,
            color=cfg.reticle.color,
            label=cfg.reticle.label,
        )
        self.anchors = anchors if anchors is not None else AnchorRegistry()

        self._dedup = FrameDeduplicator()
        self._hand_tracker: Optional[EntityTracker] = None
        self._body_tracker: Optional[EntityTracker] = None
        if cfg.tracking.enabled:
            self._hand_tracker = EntityTracker(cfg.tracking.max_distance, cfg.tracking.timeout)
            self._body_tracker = EntityTracker(cfg.tracking.max_distance, cfg.tracking.timeout)

        self._scheduler: Optional[FrameScheduler[Frame]] = None
        self._callbacks: list[Callable[[FrameResult], None]] = []
        self._running = False
        self.last_result: Optional[FrameResult] = None

    def on_result(self, callback: Callable[[FrameResult], None]):
        """Register a callback for each processed frame."""
        self._callbacks.append(callback)

    def start(self):
        """Acquire the source and reset per-frame state.

        Raises:
            SourceUnavailableError: the source can't run (terminal for
                this session; nothing is retried).
        """
        if self._running:
            return

        capability = self.source.capability()
        if not capability.available:
            raise SourceUnavailableError(capability.reason)

        self._reset_state()
        try:
            self.source.open()
        except SourceUnavailableError:
            self._close_source()
            raise
        except Exception as e:
            self._close_source()
            raise SourceUnavailableError(str(e)) from e

        self.reticle.on_place(self._place_anchor)
        self._running = True
        logger.info("Tracking session started")

    def stop(self):
        """Halt the frame loop, then release the source. Idempotent."""
        if self._scheduler is not None:
            self._scheduler.stop()
        if not self._running:
            return

        self._running = False
        self.reticle.remove_listener(self._place_anchor)
        self._close_source()
        logger.info("Tracking session stopped (%d strokes, %d anchors)",
                    len(self.strokes.strokes), len(self.anchors))

    def _close_source(self):
        try:
            self.source.close()
        except Exception as e:
            logger.warning("Error closing perception source: %s", e)

    def _reset_state(self):
        self._dedup.reset()
        self.strokes.reset()
        self.reticle.reset()
        if self._hand_tracker:
            self._hand_tracker.reset()
        if self._body_tracker:
            self._body_tracker.reset()
        self.last_result = None

    def step(self, frame: Frame) -> Optional[FrameResult]:
        """Process one source frame. Returns None if it was already processed."""
        if not self._running:
            raise SessionStateError("session is not running; call start() first")
        if not self._dedup.should_process(frame.timestamp):
            logger.debug("Skipping duplicate frame at t=%s", frame.timestamp)
            return None
        return self._process(frame)

    def _process(self, frame: Frame) -> FrameResult:
        result = FrameResult(timestamp=frame.timestamp, frame=frame)

        hand_ids = self._ids(self._hand_tracker, [h.landmarks for h in frame.hands], frame.timestamp)
        for i, hand in enumerate(frame.hands):
            gesture = self.hand_classifier.classify(hand.landmarks, hand.handedness)
            result.hands.append(HandResult(i, hand_ids[i], hand.handedness, gesture))

        body_ids = self._ids(self._body_tracker, frame.bodies, frame.timestamp)
        for i, body in enumerate(frame.bodies):
            result.bodies.append(BodyResult(i, body_ids[i], self.pose_classifier.classify(body)))

        result.committed_stroke = self._update_stroke(frame, result.hands)
        result.active_stroke = self.strokes.current_stroke
        result.reticle_visible = self.reticle.update(frame.hits)

        self.last_result = result
        for cb in self._callbacks:
            cb(result)
        return result

    @staticmethod
    def _ids(tracker: Optional[EntityTracker], detections, now: float) -> list[int]:
        if tracker is None:
            return list(range(len(detections)))
        return tracker.update(detections, now)

    def _update_stroke(self, frame: Frame, hands: list[HandResult]) -> Optional[Stroke]:
        if not frame.hands:
            return self.strokes.update(False, None)

        width, height = frame.size or (
            self.config.strokes.canvas_width,
            self.config.strokes.canvas_height,
        )
        # First pinching hand in detection order draws
        drawing = next((h for h in hands if h.gesture is GestureLabel.PINCH), None)
        source_hand = frame.hands[drawing.index if drawing else 0]
        point = pinch_point(source_hand.landmarks, width, height)
        return self.strokes.update(drawing is not None, point)

    def trigger(self) -> Optional[PlacementEvent]:
        """Forward a select/tap to the reticle. None if nothing was placed."""
        if not self._running:
            raise SessionStateError("session is not running; call start() first")
        return self.reticle.trigger()

    def _place_anchor(self, event: PlacementEvent):
        anchor = self.anchors.add(event)
        logger.debug("Registered anchor %s (%s)", anchor.id, anchor.type)

    def run(self, max_frames: Optional[int] = None) -> int:
        """Drive the frame loop from `source.read()` until it ends or stop().

        The session is stopped when the loop exits, including on error.
        Returns the number of frames processed.
        """
        if not self._running:
            self.start()

        self._scheduler = FrameScheduler(self.source.read, self._process, dedup=self._dedup)
        try:
            return self._scheduler.run(max_frames=max_frames)
        finally:
            self.stop()
            self._scheduler = None

    @property
    def is_running(self) -> bool:
        return self._running

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *args):
        self.stop()
