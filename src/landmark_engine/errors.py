"""Exception types raised by landmark_engine."""

from __future__ import annotations


class LandmarkEngineError(Exception):
    """Base class for all landmark_engine errors."""


class LandmarkCountError(LandmarkEngineError, ValueError):
    """A landmark set does not have the point count its layout requires."""

    def __init__(self, kind: str, expected: int, actual: int):
        self.kind = kind
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{kind} landmark set needs {expected} points, got {actual}"
        )


class SourceUnavailableError(LandmarkEngineError):
    """The perception source could not be set up for this session."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"perception source unavailable: {reason}")


class SessionStateError(LandmarkEngineError):
    """Operation called on a session that is not running."""


class ConfigError(LandmarkEngineError):
    """Invalid configuration file or value."""
