"""landmark_engine - Gesture, pose, air-drawing and placement events from landmark streams."""

__version__ = "0.1.0"

from landmark_engine.errors import (
    LandmarkEngineError,
    LandmarkCountError,
    SourceUnavailableError,
    SessionStateError,
    ConfigError,
)
from landmark_engine.landmarks import (
    Landmark,
    LandmarkSet,
    LandmarkKind,
    HandLandmark,
    PoseLandmark,
    Handedness,
    HAND_CONNECTIONS,
    POSE_CONNECTIONS,
)
from landmark_engine.gestures import GestureLabel, HandGestureClassifier, FingerState, GestureRule
from landmark_engine.poses import PoseLabel, BodyPoseClassifier, PoseThresholds, joint_angles
from landmark_engine.strokes import Stroke, StrokeRecorder, StrokeState, pinch_point
from landmark_engine.reticle import (
    Transform,
    PlacementReticle,
    PlacementEvent,
    WorldAnchor,
    AnchorRegistry,
)
from landmark_engine.scheduler import FrameDeduplicator, FrameScheduler
from landmark_engine.tracking import EntityTracker
from landmark_engine.sources import Frame, HandDetection, SourceCapability, ReplaySource, MediaPipeSource
from landmark_engine.session import TrackingSession, FrameResult
from landmark_engine.config import EngineConfig
from landmark_engine.recorder import SessionRecorder, load_recording
