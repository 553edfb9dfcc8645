"""Body pose classification from 33 pose landmarks.

Joint angles and a torso tilt ratio are extracted once per person, then
evaluated against an ordered list of pose rules. The first rule that fires
wins. Without both shoulders and both hips visible the classifier returns
UNKNOWN rather than guessing.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Iterable

from landmark_engine.geometry import angle, distance, is_visible, midpoint
from landmark_engine.landmarks import LandmarkKind, LandmarkSet, PoseLandmark, require_kind


class PoseLabel(str, Enum):
    STANDING = "standing"
    T_POSE = "t_pose"
    ARMS_UP = "arms_up"
    HANDS_ON_HIPS = "hands_on_hips"
    SITTING = "sitting"
    LEANING = "leaning"
    UNKNOWN = "unknown"

    @property
    def display_name(self) -> str:
        return _POSE_INFO[self][0]

    @property
    def emoji(self) -> str:
        return _POSE_INFO[self][1]

    @property
    def description(self) -> str:
        return _POSE_INFO[self][2]


_POSE_INFO = {
    PoseLabel.STANDING: ("Standing", "🧍", "Upright neutral position"),
    PoseLabel.T_POSE: ("T-Pose", "✝️", "Arms extended horizontally"),
    PoseLabel.ARMS_UP: ("Arms Up", "🙌", "Both arms raised overhead"),
    PoseLabel.HANDS_ON_HIPS: ("Hands on Hips", "💁", "Arms bent, hands at waist"),
    PoseLabel.SITTING: ("Sitting", "🪑", "Seated or crouching position"),
    PoseLabel.LEANING: ("Leaning", "↗️", "Body tilted to one side"),
    PoseLabel.UNKNOWN: ("Unknown", "❓", "Pose not recognized"),
}


@dataclass(frozen=True)
class PoseThresholds:
    """Tunable pose rule constants. Distances are normalized frame units."""
    visibility: float = 0.5
    arms_up_margin: float = 0.1
    arms_up_shoulder_angle: float = 150.0
    t_pose_shoulder_min: float = 70.0
    t_pose_shoulder_max: float = 110.0
    straight_elbow_angle: float = 150.0
    t_pose_wrist_level: float = 0.15
    hip_reach: float = 0.15
    bent_elbow_angle: float = 120.0
    bent_knee_angle: float = 120.0
    straight_knee_angle: float = 150.0
    lean_tilt: float = 0.3
    upright_tilt: float = 0.2


@dataclass(frozen=True)
class PoseFeatures:
    """Per-person geometric features used by the pose rules (degrees)."""
    left_elbow: float
    right_elbow: float
    left_shoulder: float
    right_shoulder: float
    left_knee: float
    right_knee: float
    torso_tilt: float

    def to_dict(self) -> dict:
        return asdict(self)


def extract_features(landmarks: LandmarkSet, visibility: float = 0.5) -> PoseFeatures:
    """Compute joint angles and torso tilt for one person.

    A knee that isn't visible counts as straight (180°) so a cropped frame
    doesn't read as sitting. Tilt is the horizontal shoulder-midpoint to
    hip-midpoint offset divided by shoulder width (0 when width is 0).
    """
    P = PoseLandmark
    lm = landmarks

    left_knee = (
        angle(lm[P.LEFT_HIP], lm[P.LEFT_KNEE], lm[P.LEFT_ANKLE])
        if is_visible(lm[P.LEFT_KNEE], visibility, default=False) else 180.0
    )
    right_knee = (
        angle(lm[P.RIGHT_HIP], lm[P.RIGHT_KNEE], lm[P.RIGHT_ANKLE])
        if is_visible(lm[P.RIGHT_KNEE], visibility, default=False) else 180.0
    )

    shoulder_mid = midpoint(lm[P.LEFT_SHOULDER], lm[P.RIGHT_SHOULDER])
    hip_mid = midpoint(lm[P.LEFT_HIP], lm[P.RIGHT_HIP])
    shoulder_width = distance(lm[P.LEFT_SHOULDER], lm[P.RIGHT_SHOULDER])
    tilt = abs(shoulder_mid[0] - hip_mid[0]) / shoulder_width if shoulder_width > 0 else 0.0

    return PoseFeatures(
        left_elbow=angle(lm[P.LEFT_SHOULDER], lm[P.LEFT_ELBOW], lm[P.LEFT_WRIST]),
        right_elbow=angle(lm[P.RIGHT_SHOULDER], lm[P.RIGHT_ELBOW], lm[P.RIGHT_WRIST]),
        left_shoulder=angle(lm[P.LEFT_HIP], lm[P.LEFT_SHOULDER], lm[P.LEFT_ELBOW]),
        right_shoulder=angle(lm[P.RIGHT_HIP], lm[P.RIGHT_SHOULDER], lm[P.RIGHT_ELBOW]),
        left_knee=left_knee,
        right_knee=right_knee,
        torso_tilt=tilt,
    )


def joint_angles(landmarks: LandmarkSet) -> dict[str, int]:
    """Six major joint angles rounded to whole degrees, for display."""
    require_kind(landmarks, LandmarkKind.BODY)
    P = PoseLandmark
    lm = landmarks
    return {
        "left_elbow": round(angle(lm[P.LEFT_SHOULDER], lm[P.LEFT_ELBOW], lm[P.LEFT_WRIST])),
        "right_elbow": round(angle(lm[P.RIGHT_SHOULDER], lm[P.RIGHT_ELBOW], lm[P.RIGHT_WRIST])),
        "left_knee": round(angle(lm[P.LEFT_HIP], lm[P.LEFT_KNEE], lm[P.LEFT_ANKLE])),
        "right_knee": round(angle(lm[P.RIGHT_HIP], lm[P.RIGHT_KNEE], lm[P.RIGHT_ANKLE])),
        "left_shoulder": round(angle(lm[P.LEFT_HIP], lm[P.LEFT_SHOULDER], lm[P.LEFT_ELBOW])),
        "right_shoulder": round(angle(lm[P.RIGHT_HIP], lm[P.RIGHT_SHOULDER], lm[P.RIGHT_ELBOW])),
    }


class BodyPoseClassifier:
    """Classifies one person's 33 landmarks into a PoseLabel.

    Rules, in priority order:
    1. arms_up — both wrists well above their shoulders, arms raised
    2. t_pose — arms horizontal and straight
    3. hands_on_hips — wrists at hips with bent elbows
    4. sitting — both knees bent
    5. leaning — torso tilted sideways
    6. standing — straight legs, upright torso
    """

    def __init__(self, thresholds: PoseThresholds | None = None):
        self.thresholds = thresholds or PoseThresholds()

    def upper_body_visible(self, landmarks: LandmarkSet) -> bool:
        P = PoseLandmark
        return all(
            is_visible(landmarks[i], self.thresholds.visibility, default=False)
            for i in (P.LEFT_SHOULDER, P.RIGHT_SHOULDER, P.LEFT_HIP, P.RIGHT_HIP)
        )

    def classify(self, landmarks: LandmarkSet) -> PoseLabel:
        require_kind(landmarks, LandmarkKind.BODY)

        if not self.upper_body_visible(landmarks):
            return PoseLabel.UNKNOWN

        t = self.thresholds
        f = extract_features(landmarks, t.visibility)
        P = PoseLandmark
        lm = landmarks
        l_sh, r_sh = lm[P.LEFT_SHOULDER], lm[P.RIGHT_SHOULDER]
        l_wr, r_wr = lm[P.LEFT_WRIST], lm[P.RIGHT_WRIST]

        if (
            l_wr.y < l_sh.y - t.arms_up_margin
            and r_wr.y < r_sh.y - t.arms_up_margin
            and f.left_shoulder > t.arms_up_shoulder_angle
            and f.right_shoulder > t.arms_up_shoulder_angle
        ):
            return PoseLabel.ARMS_UP

        if (
            t.t_pose_shoulder_min <= f.left_shoulder <= t.t_pose_shoulder_max
            and t.t_pose_shoulder_min <= f.right_shoulder <= t.t_pose_shoulder_max
            and f.left_elbow > t.straight_elbow_angle
            and f.right_elbow > t.straight_elbow_angle
            and abs(l_wr.y - l_sh.y) < t.t_pose_wrist_level
            and abs(r_wr.y - r_sh.y) < t.t_pose_wrist_level
        ):
            return PoseLabel.T_POSE

        if (
            distance(l_wr, lm[P.LEFT_HIP]) < t.hip_reach
            and distance(r_wr, lm[P.RIGHT_HIP]) < t.hip_reach
            and f.left_elbow < t.bent_elbow_angle
            and f.right_elbow < t.bent_elbow_angle
        ):
            return PoseLabel.HANDS_ON_HIPS

        if f.left_knee < t.bent_knee_angle and f.right_knee < t.bent_knee_angle:
            return PoseLabel.SITTING

        if f.torso_tilt > t.lean_tilt:
            return PoseLabel.LEANING

        if (
            f.left_knee > t.straight_knee_angle
            and f.right_knee > t.straight_knee_angle
            and f.torso_tilt < t.upright_tilt
        ):
            return PoseLabel.STANDING

        return PoseLabel.UNKNOWN

    def classify_all(self, people: Iterable[LandmarkSet]) -> list[PoseLabel]:
        """Classify each person independently, in detection order."""
        return [self.classify(person) for person in people]
