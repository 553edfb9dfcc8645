"""landmark-engine CLI.

Usage:
    landmark-engine classify   — Classify landmarks from a JSON file
    landmark-engine replay     — Replay a recorded session through the engine
    landmark-engine live       — Run a live camera session (needs mediapipe)
    landmark-engine record     — Record a live camera session to JSON
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="landmark-engine",
    help="🖐️ Gestures, poses, air drawing and placement from landmark streams.",
    add_completion=False,
)


def _setup_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_config(path: Optional[str]):
    from landmark_engine.config import EngineConfig
    from landmark_engine.errors import ConfigError

    if not path:
        return EngineConfig()
    if not Path(path).exists():
        typer.echo(f"❌ Config not found: {path}", err=True)
        raise typer.Exit(1)
    try:
        return EngineConfig.from_yaml(path)
    except ConfigError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)


def _is_point(obj) -> bool:
    if isinstance(obj, dict):
        return "x" in obj
    return isinstance(obj, list) and bool(obj) and isinstance(obj[0], (int, float))


def _landmark_sets(data) -> list[tuple[list, Optional[str]]]:
    """Accept one set, a list of sets, or {"landmarks": ..., "handedness": ...}."""
    if isinstance(data, dict):
        if "sets" in data:
            return [s for entry in data["sets"] for s in _landmark_sets(entry)]
        return [(data["landmarks"], data.get("handedness"))]
    if data and not _is_point(data[0]):
        return [s for entry in data for s in _landmark_sets(entry)]
    return [(data, None)]


@app.command()
def classify(
    file: str = typer.Argument(..., help="JSON file with landmark points"),
    kind: str = typer.Option("hand", help="Landmark layout: hand or body"),
    handedness: str = typer.Option("right", help="Default handedness for hands"),
    angles: bool = typer.Option(False, "--angles", help="Also print body joint angles"),
):
    """Classify one or more landmark sets from a JSON file."""
    from landmark_engine.gestures import HandGestureClassifier
    from landmark_engine.landmarks import Handedness, LandmarkSet
    from landmark_engine.poses import BodyPoseClassifier, joint_angles

    path = Path(file)
    if not path.exists():
        typer.echo(f"❌ File not found: {file}", err=True)
        raise typer.Exit(1)
    if kind not in ("hand", "body"):
        typer.echo(f"❌ --kind must be 'hand' or 'body', got {kind!r}", err=True)
        raise typer.Exit(1)

    try:
        with open(path) as f:
            sets = _landmark_sets(json.load(f))
    except KeyError as e:
        typer.echo(f"❌ Missing key {e} in {file}", err=True)
        raise typer.Exit(1)
    except ValueError as e:
        typer.echo(f"❌ Invalid JSON in {file}: {e}", err=True)
        raise typer.Exit(1)

    hand_classifier = HandGestureClassifier()
    pose_classifier = BodyPoseClassifier()

    for i, (points, label) in enumerate(sets):
        try:
            if kind == "hand":
                lm = LandmarkSet.hand(points)
                side = Handedness.parse(label or handedness)
                gesture = hand_classifier.classify(lm, side)
                typer.echo(f"hand {i} ({side.value}): {gesture.value} {gesture.emoji}")
            else:
                lm = LandmarkSet.body(points)
                pose = pose_classifier.classify(lm)
                typer.echo(f"body {i}: {pose.value} {pose.emoji}")
                if angles:
                    for joint, deg in joint_angles(lm).items():
                        typer.echo(f"   {joint:15s} {deg}°")
        except KeyError as e:
            typer.echo(f"❌ Set {i}: point is missing key {e}", err=True)
            raise typer.Exit(1)
        except ValueError as e:
            typer.echo(f"❌ Set {i}: {e}", err=True)
            raise typer.Exit(1)


@app.command()
def replay(
    recording: str = typer.Argument(..., help="Path to recording file"),
    config: Optional[str] = typer.Option(None, "--config", help="Path to config YAML"),
    log_level: str = typer.Option("warning", help="Log level"),
):
    """Replay a recorded session and print label changes and strokes."""
    from landmark_engine.session import TrackingSession
    from landmark_engine.sources import ReplaySource

    _setup_logging(log_level)
    path = Path(recording)
    if not path.exists():
        typer.echo(f"❌ Recording not found: {recording}", err=True)
        raise typer.Exit(1)

    cfg = _load_config(config)
    source = ReplaySource.from_file(path)
    typer.echo(f"▶️  Replaying {path.name} ({source.frame_count} frames)")

    session = TrackingSession(source, cfg)
    _print_changes(session)
    processed = session.run()

    strokes = session.strokes.strokes
    typer.echo(f"\n✅ Replay complete. {processed} frames, {len(strokes)} stroke(s) committed.")
    for i, stroke in enumerate(strokes):
        typer.echo(f"   stroke {i}: {len(stroke)} points, {stroke.color}")


def _print_changes(session):
    last: dict[str, str] = {}

    def on_result(result):
        for h in result.hands:
            key = f"hand {h.id}"
            if last.get(key) != h.gesture.value:
                last[key] = h.gesture.value
                typer.echo(f"   [{result.timestamp:7.2f}] {key}: {h.gesture.value} {h.gesture.emoji}")
        for b in result.bodies:
            key = f"body {b.id}"
            if last.get(key) != b.pose.value:
                last[key] = b.pose.value
                typer.echo(f"   [{result.timestamp:7.2f}] {key}: {b.pose.value} {b.pose.emoji}")
        if result.committed_stroke is not None:
            typer.echo(f"   [{result.timestamp:7.2f}] ✏️  stroke committed "
                       f"({len(result.committed_stroke)} points)")

    session.on_result(on_result)


@app.command()
def live(
    camera: int = typer.Option(0, help="Camera device index"),
    hands: bool = typer.Option(True, "--hands/--no-hands", help="Track hands"),
    pose: bool = typer.Option(False, "--pose/--no-pose", help="Track body pose"),
    config: Optional[str] = typer.Option(None, "--config", help="Path to config YAML"),
    log_level: str = typer.Option("info", help="Log level"),
):
    """Run a live camera session and print gesture/pose changes."""
    from landmark_engine.errors import SourceUnavailableError
    from landmark_engine.session import TrackingSession
    from landmark_engine.sources import MediaPipeSource

    _setup_logging(log_level)
    cfg = _load_config(config)
    cfg.source.camera = camera
    cfg.source.hands = hands
    cfg.source.pose = pose

    session = TrackingSession(MediaPipeSource.from_config(cfg.source), cfg)
    _print_changes(session)

    typer.echo(f"🎥 Tracking camera {camera}... Press Ctrl+C to stop")
    try:
        session.run()
    except SourceUnavailableError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)
    except KeyboardInterrupt:
        pass
    finally:
        session.stop()

    typer.echo(f"\n🖊️  {len(session.strokes.strokes)} stroke(s) drawn")


@app.command()
def record(
    output: str = typer.Option("recording.json", "-o", help="Output file path"),
    duration: float = typer.Option(0, help="Recording duration in seconds (0 = until Ctrl+C)"),
    camera: int = typer.Option(0, help="Camera device index"),
    pose: bool = typer.Option(False, "--pose/--no-pose", help="Also record body pose"),
):
    """Record landmark frames from the camera."""
    from landmark_engine.errors import SourceUnavailableError
    from landmark_engine.recorder import SessionRecorder
    from landmark_engine.sources import MediaPipeSource

    source = MediaPipeSource(camera=camera, hands=True, pose=pose)
    recorder = SessionRecorder()

    try:
        source.open()
    except SourceUnavailableError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"🎥 Recording from camera {camera}...")
    typer.echo("   Press Ctrl+C to stop")
    recorder.start()
    start = time.monotonic()

    try:
        while True:
            frame = source.read()
            if frame is None:
                break
            recorder.add_frame(frame)

            if recorder.frame_count % 30 == 0:
                elapsed = time.monotonic() - start
                typer.echo(f"\r   Frames: {recorder.frame_count} | Duration: {elapsed:.1f}s "
                           f"| Hands: {len(frame.hands)}", nl=False)

            if duration > 0 and (time.monotonic() - start) >= duration:
                break
    except KeyboardInterrupt:
        pass
    finally:
        recorder.stop()
        source.close()

    typer.echo(f"\n\n📼 Recorded {recorder.frame_count} frames ({recorder.duration:.1f}s)")
    recorder.save(output)
    typer.echo(f"💾 Saved to: {output}")


def main():
    app()


if __name__ == "__main__":
    main()
