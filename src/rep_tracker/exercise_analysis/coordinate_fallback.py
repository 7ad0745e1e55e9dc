import logging
from typing import List, Tuple

from .pose_utils import mean_y
from .session import ExerciseSession
from ..feedback.events import Event, StateChanged
from ..pose_detection.landmarks import PoseFrame, PoseLandmark

logger = logging.getLogger("ExerciseAnalyzer")


class CoordinateFallback:
    """
    Counts repetitions from the vertical offset between hips and knees.

    Used when no angle rule applies or the angles an exercise needs are missing.
    Image y grows downwards, so hips below the knees means hip_y > knee_y.
    """

    def __init__(self, margin: float = 0.05, counts_repetitions: bool = True):
        self.margin = margin
        # Hold exercises only keep the height memory; the hold itself is left untouched
        self.counts_repetitions = counts_repetitions

    def analyze(self, session: ExerciseSession, frame: PoseFrame, now: float) -> Tuple[ExerciseSession, List[Event]]:
        events: List[Event] = []
        hip_y = mean_y([frame[PoseLandmark.LEFT_HIP], frame[PoseLandmark.RIGHT_HIP]])
        knee_y = mean_y([frame[PoseLandmark.LEFT_KNEE], frame[PoseLandmark.RIGHT_KNEE]])

        if (
            self.counts_repetitions
            and session.previous_hip_y is not None
            and session.previous_knee_y is not None
        ):
            if hip_y > knee_y + self.margin and not session.in_position:
                session.enter_position(now)
                events.append(StateChanged(True, session.rep_count))
                logger.debug(f"Position entered (coordinates) - hip_y: {hip_y:.3f}, knee_y: {knee_y:.3f}")
            elif hip_y < knee_y - self.margin and session.in_position:
                session.complete_repetition(now)
                events.append(StateChanged(False, session.rep_count))
                logger.debug(f"Repetition completed (coordinates), rep_count: {session.rep_count}")

        session.previous_hip_y = hip_y
        session.previous_knee_y = knee_y
        return session, events
