"""
Events produced by the tracker. They are returned as data; the caller decides
how to dispatch them (UI, voice, logging, storage).
"""
from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class Feedback:
    message: str
    is_critical: bool = False


@dataclass(frozen=True)
class StateChanged:
    """Position flag and repetition count after a transition, with optional feedback."""
    in_position: bool
    rep_count: int
    feedback: Optional[Feedback] = None


@dataclass(frozen=True)
class HoldProgressUpdated:
    elapsed_seconds: int


@dataclass(frozen=True)
class SessionReset:
    reason: str  # "presence_timeout", "exercise_changed" or "reset"


@dataclass(frozen=True)
class DataQualityIssue:
    """A frame that could not be processed; tracker state was left untouched."""
    message: str
    landmark_count: int = 0


Event = Union[StateChanged, HoldProgressUpdated, SessionReset, DataQualityIssue]
