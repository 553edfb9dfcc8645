"""Synthetic landmark builders shared by the test modules."""

import numpy as np

from landmark_engine.landmarks import HandLandmark as H, LandmarkSet, PoseLandmark as P

# Finger columns: (mcp, pip, dip, tip) indices and x position
_FINGERS = {
    "index": ((H.INDEX_MCP, H.INDEX_PIP, H.INDEX_DIP, H.INDEX_TIP), 0.45),
    "middle": ((H.MIDDLE_MCP, H.MIDDLE_PIP, H.MIDDLE_DIP, H.MIDDLE_TIP), 0.50),
    "ring": ((H.RING_MCP, H.RING_PIP, H.RING_DIP, H.RING_TIP), 0.55),
    "pinky": ((H.PINKY_MCP, H.PINKY_PIP, H.PINKY_DIP, H.PINKY_TIP), 0.60),
}


def make_hand_array(
    thumb: bool = False,
    index: bool = False,
    middle: bool = False,
    ring: bool = False,
    pinky: bool = False,
    pinch: bool = False,
    mirror: bool = False,
) -> np.ndarray:
    """21x3 upright right hand (as seen in a mirrored camera).

    Extended fingers have tip above pip above mcp. The extended right thumb
    points left (tip.x < ip.x < mcp.x). `mirror=True` flips x, producing
    the same pose for a left hand. `pinch=True` puts the thumb tip next to
    the index tip.
    """
    lm = np.zeros((21, 3), dtype=np.float64)
    lm[H.WRIST] = [0.5, 0.9, 0.0]

    extended = {"index": index, "middle": middle, "ring": ring, "pinky": pinky}
    for name, ((mcp, pip, dip, tip), x) in _FINGERS.items():
        lm[mcp] = [x, 0.60, 0.0]
        lm[pip] = [x, 0.50, 0.0]
        if extended[name]:
            lm[dip] = [x, 0.45, 0.0]
            lm[tip] = [x, 0.40, 0.0]
        else:
            lm[dip] = [x, 0.58, 0.0]
            lm[tip] = [x, 0.65, 0.0]

    lm[H.THUMB_CMC] = [0.45, 0.85, 0.0]
    lm[H.THUMB_MCP] = [0.40, 0.78, 0.0]
    lm[H.THUMB_IP] = [0.35, 0.78, 0.0]
    lm[H.THUMB_TIP] = [0.30, 0.78, 0.0] if thumb else [0.42, 0.78, 0.0]

    if pinch:
        ix, iy, _ = lm[H.INDEX_TIP]
        lm[H.THUMB_TIP] = [ix - 0.01, iy, 0.0]

    if mirror:
        lm[:, 0] = 1.0 - lm[:, 0]
    return lm


def make_hand(**kwargs) -> LandmarkSet:
    return LandmarkSet.hand(make_hand_array(**kwargs))


def make_hand_at(x: float, y: float) -> LandmarkSet:
    """Open hand translated so its centroid sits near (x, y)."""
    lm = make_hand_array(thumb=True, index=True, middle=True, ring=True, pinky=True)
    lm[:, 0] += x - lm[:, 0].mean()
    lm[:, 1] += y - lm[:, 1].mean()
    return LandmarkSet.hand(lm)


# Standing person, arms hanging, facing the camera
_BODY = {
    P.NOSE: (0.50, 0.15),
    P.LEFT_SHOULDER: (0.60, 0.30),
    P.RIGHT_SHOULDER: (0.40, 0.30),
    P.LEFT_ELBOW: (0.62, 0.45),
    P.RIGHT_ELBOW: (0.38, 0.45),
    P.LEFT_WRIST: (0.63, 0.58),
    P.RIGHT_WRIST: (0.37, 0.58),
    P.LEFT_HIP: (0.58, 0.60),
    P.RIGHT_HIP: (0.42, 0.60),
    P.LEFT_KNEE: (0.58, 0.75),
    P.RIGHT_KNEE: (0.42, 0.75),
    P.LEFT_ANKLE: (0.58, 0.90),
    P.RIGHT_ANKLE: (0.42, 0.90),
}


def make_body_array(visibility: float = 0.99, **joints) -> np.ndarray:
    """33x4 body landmarks. Override joints by lowercase PoseLandmark name.

    Each override is (x, y) or (x, y, visibility).
    """
    lm = np.zeros((33, 4), dtype=np.float64)
    lm[:, 0] = 0.5
    lm[:, 1] = 0.2
    lm[:, 3] = visibility
    for idx, (x, y) in _BODY.items():
        lm[idx, :2] = [x, y]

    for name, value in joints.items():
        idx = P[name.upper()]
        lm[idx, 0] = value[0]
        lm[idx, 1] = value[1]
        if len(value) > 2:
            lm[idx, 3] = value[2]
    return lm


def make_body(**kwargs) -> LandmarkSet:
    return LandmarkSet.body(make_body_array(**kwargs))


def t_pose_body() -> LandmarkSet:
    return make_body(
        left_elbow=(0.75, 0.30), right_elbow=(0.25, 0.30),
        left_wrist=(0.90, 0.30), right_wrist=(0.10, 0.30),
    )


def arms_up_body() -> LandmarkSet:
    """Shoulders at y=0.5, wrists at y=0.2, both shoulder angles 160°."""
    return make_body(
        left_shoulder=(0.60, 0.50), right_shoulder=(0.40, 0.50),
        left_hip=(0.60, 0.80), right_hip=(0.40, 0.80),
        left_knee=(0.60, 0.90), right_knee=(0.40, 0.90),
        left_ankle=(0.60, 0.98), right_ankle=(0.40, 0.98),
        left_elbow=(0.6513, 0.3590), right_elbow=(0.3487, 0.3590),
        left_wrist=(0.709, 0.20), right_wrist=(0.291, 0.20),
    )


def hands_on_hips_body() -> LandmarkSet:
    return make_body(
        left_elbow=(0.75, 0.45), right_elbow=(0.25, 0.45),
        left_wrist=(0.60, 0.60), right_wrist=(0.40, 0.60),
    )


def sitting_body() -> LandmarkSet:
    return make_body(
        left_knee=(0.70, 0.62), right_knee=(0.30, 0.62),
        left_ankle=(0.70, 0.85), right_ankle=(0.30, 0.85),
    )


def leaning_body() -> LandmarkSet:
    return make_body(
        left_shoulder=(0.70, 0.30), right_shoulder=(0.50, 0.30),
        left_elbow=(0.72, 0.45), right_elbow=(0.48, 0.45),
        left_wrist=(0.73, 0.58), right_wrist=(0.47, 0.58),
    )
