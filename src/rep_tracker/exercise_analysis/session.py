from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import numpy as np


class ExerciseType(Enum):
    """Exercises the tracker knows how to count."""
    SQUAT = "squat"
    PUSHUP = "pushup"
    LUNGE = "lunge"
    PLANK = "plank"
    JUMPING_JACK = "jumping_jack"
    CUSTOM = "custom"


# Written forms such as "push-up" and "jumping-jack"
_EXERCISE_ALIASES = {
    "push_up": "pushup",
}


def parse_exercise_type(value: str) -> Tuple[ExerciseType, Optional[str]]:
    """
    Parse an exercise selection such as "squat", "push-up" or "custom:burpee".

    Returns:
        Tuple of (exercise type, custom name or None)
    """
    key, _, custom_name = value.partition(":")
    try:
        key = key.strip().lower().replace("-", "_")
        exercise_type = ExerciseType(_EXERCISE_ALIASES.get(key, key))
    except ValueError:
        raise ValueError(f"Unsupported exercise type: {value}")
    if exercise_type is ExerciseType.CUSTOM:
        return exercise_type, custom_name.strip() or None
    return exercise_type, None


@dataclass
class ExerciseSession:
    """Counters and timers for one exercise selection. Mutated only by analyzers and the tracker."""
    exercise_type: ExerciseType
    exercise_name: str
    target_rep_count: int = 0
    in_position: bool = False
    rep_count: int = 0
    position_start_time: Optional[float] = None
    last_rep_duration: float = 0.0
    rep_durations: List[float] = field(default_factory=list)
    frames_without_subject: int = 0
    # Coordinate fallback memory
    previous_hip_y: Optional[float] = None
    previous_knee_y: Optional[float] = None
    # Hold exercises
    last_progress_bucket: Optional[int] = None
    hold_completed: bool = False
    # Workout clock
    started_at: Optional[float] = None
    last_timestamp: Optional[float] = None

    def enter_position(self, now: float) -> None:
        self.in_position = True
        self.position_start_time = now

    def complete_repetition(self, now: float) -> Optional[float]:
        """Leave the position, count one repetition and return its duration if the start is known."""
        self.in_position = False
        self.rep_count += 1
        self.last_progress_bucket = None
        return self._record_duration(now)

    def leave_hold(self, now: float) -> Optional[float]:
        self.in_position = False
        self.last_progress_bucket = None
        return self._record_duration(now)

    def _record_duration(self, now: float) -> Optional[float]:
        if self.position_start_time is None:
            return None
        self.last_rep_duration = now - self.position_start_time
        self.rep_durations.append(self.last_rep_duration)
        self.position_start_time = None
        return self.last_rep_duration

    def mark_timestamp(self, now: float) -> None:
        if self.started_at is None:
            self.started_at = now
        self.last_timestamp = now

    def reset(self) -> None:
        """Return to the initial state, keeping the exercise selection."""
        self.in_position = False
        self.rep_count = 0
        self.position_start_time = None
        self.last_rep_duration = 0.0
        self.rep_durations = []
        self.frames_without_subject = 0
        self.previous_hip_y = None
        self.previous_knee_y = None
        self.last_progress_bucket = None
        self.hold_completed = False
        self.started_at = None
        self.last_timestamp = None

    def summary(self) -> "WorkoutSummary":
        total = 0.0
        if self.started_at is not None and self.last_timestamp is not None:
            total = self.last_timestamp - self.started_at
        average = float(np.mean(self.rep_durations)) if self.rep_durations else None
        return WorkoutSummary(
            exercise_type=self.exercise_type,
            exercise_name=self.exercise_name,
            rep_count=self.rep_count,
            target_rep_count=self.target_rep_count,
            total_duration=total,
            rep_durations=tuple(self.rep_durations),
            average_rep_duration=average,
        )


@dataclass(frozen=True)
class WorkoutSummary:
    """Completion record read out of a session when the workout ends."""
    exercise_type: ExerciseType
    exercise_name: str
    rep_count: int
    target_rep_count: int
    total_duration: float
    rep_durations: Tuple[float, ...]
    average_rep_duration: Optional[float]
    quality_score: Optional[int] = None  # No scoring model defined yet

    @property
    def target_reached(self) -> bool:
        return self.target_rep_count > 0 and self.rep_count >= self.target_rep_count

    @property
    def formatted_duration(self) -> str:
        minutes, seconds = divmod(int(self.total_duration), 60)
        return f"{minutes}:{seconds:02d}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exercise_type": self.exercise_type.value,
            "exercise_name": self.exercise_name,
            "rep_count": self.rep_count,
            "target_rep_count": self.target_rep_count,
            "target_reached": self.target_reached,
            "total_duration": self.total_duration,
            "formatted_duration": self.formatted_duration,
            "rep_durations": list(self.rep_durations),
            "average_rep_duration": self.average_rep_duration,
            "quality_score": self.quality_score,
        }
