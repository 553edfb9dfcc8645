#!/usr/bin/env python3
"""Live air-drawing demo: pinch to draw, keys to change color.

Usage:
    python examples/demo_air_draw.py [--camera 0] [--pose]

Keys: q quit, c clear, u undo, 1-6 pick color
"""

import argparse
import sys

import cv2

from landmark_engine import (
    EngineConfig,
    HAND_CONNECTIONS,
    MediaPipeSource,
    SourceUnavailableError,
    TrackingSession,
)
from landmark_engine.strokes import DEFAULT_COLORS


def hex_to_bgr(color: str) -> tuple[int, int, int]:
    color = color.lstrip("#")
    r, g, b = (int(color[i:i + 2], 16) for i in (0, 2, 4))
    return b, g, r


def draw_overlay(image, session, result):
    h, w = image.shape[:2]

    for hand, detection in zip(result.hands, result.frame.hands):
        pts = [(int(lm.x * w), int(lm.y * h)) for lm in detection.landmarks]
        for a, b in HAND_CONNECTIONS:
            cv2.line(image, pts[a], pts[b], (212, 182, 6), 2)
        wrist = pts[0]
        cv2.putText(image, f"{hand.handedness.value}: {hand.gesture.value}",
                    (wrist[0], wrist[1] + 30), cv2.FONT_HERSHEY_SIMPLEX, 0.8, (0, 255, 255), 2)

    for body in result.bodies:
        cv2.putText(image, f"pose: {body.pose.value}", (10, 60 + 30 * body.index),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.8, (0, 255, 0), 2)

    for stroke in session.strokes.all_strokes():
        for p, q in zip(stroke.points, stroke.points[1:]):
            cv2.line(image, (int(p[0]), int(p[1])), (int(q[0]), int(q[1])),
                     hex_to_bgr(stroke.color), 4, cv2.LINE_AA)

    cv2.putText(image, f"strokes: {len(session.strokes.strokes)}", (10, 30),
                cv2.FONT_HERSHEY_SIMPLEX, 0.7, hex_to_bgr(session.strokes.color), 2)
    return image


def main():
    parser = argparse.ArgumentParser(description="landmark_engine air drawing demo")
    parser.add_argument("--camera", type=int, default=0, help="Camera index")
    parser.add_argument("--pose", action="store_true", help="Also classify body pose")
    args = parser.parse_args()

    config = EngineConfig()
    config.source.camera = args.camera
    config.source.pose = args.pose
    source = MediaPipeSource.from_config(config.source)
    session = TrackingSession(source, config)

    def on_result(result):
        image = draw_overlay(source.last_image.copy(), session, result)
        cv2.imshow("landmark_engine", image)
        key = cv2.waitKey(1) & 0xFF
        if key == ord("q"):
            session.stop()
        elif key == ord("c"):
            session.strokes.clear()
        elif key == ord("u"):
            session.strokes.undo()
        elif ord("1") <= key <= ord(str(len(DEFAULT_COLORS))):
            session.strokes.color = DEFAULT_COLORS[key - ord("1")]

    session.on_result(on_result)

    print("Pinch 🤏 to draw. Press 'q' to quit\n")
    try:
        frames = session.run()
    except SourceUnavailableError as e:
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        cv2.destroyAllWindows()

    print(f"\nProcessed {frames} frames, {len(session.strokes.strokes)} strokes")


if __name__ == "__main__":
    main()
