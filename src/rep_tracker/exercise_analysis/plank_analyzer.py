import logging
from typing import List, Optional

from .base_analyzer import AngleMap, AnalysisResult, BaseExerciseAnalyzer, Metrics, pick_angle, register_analyzer
from .session import ExerciseSession, ExerciseType
from ..feedback.events import Event, HoldProgressUpdated, StateChanged
from ..feedback.messages import FeedbackGenerator
from ..pose_detection.landmarks import PoseFrame

logger = logging.getLogger("ExerciseAnalyzer")


@register_analyzer(ExerciseType.PLANK)
class PlankAnalyzer(BaseExerciseAnalyzer):
    """
    Hold-duration analysis. Time accumulates while the back stays straight and the
    elbows stay near the target angle; reaching min_duration credits one repetition
    once per session.
    """

    holds_position = True

    def get_required_angles(self) -> List[str]:
        return ["back", "left_elbow", "right_elbow"]

    def measure(self, angles: AngleMap, frame: PoseFrame) -> Optional[Metrics]:
        back = pick_angle(angles, "back")
        elbow = pick_angle(angles, "left_elbow", "right_elbow")
        if back is None or elbow is None:
            return None
        return {"back": back, "elbow": elbow}

    def is_back_straight(self, metrics: Metrics) -> bool:
        return metrics["back"] >= self.thresholds["back_angle"]

    def is_elbow_angle_correct(self, metrics: Metrics) -> bool:
        return abs(metrics["elbow"] - self.thresholds["elbow_angle"]) < self.thresholds["elbow_tolerance"]

    def update(self, session: ExerciseSession, metrics: Metrics, frame: PoseFrame, now: float) -> AnalysisResult:
        events: List[Event] = []
        back_ok = self.is_back_straight(metrics)
        elbow_ok = self.is_elbow_angle_correct(metrics)

        if back_ok and elbow_ok:
            if not session.in_position:
                session.enter_position(now)
                events.append(StateChanged(True, session.rep_count))
                logger.debug("Plank started")
            else:
                events.extend(self._track_hold(session, now))
        elif session.in_position:
            duration = session.leave_hold(now)
            if duration is not None:
                logger.debug(f"Plank ended after {duration:.1f} seconds")
            if not back_ok:
                events.append(StateChanged(False, session.rep_count, FeedbackGenerator.plank_back()))
            if not elbow_ok:
                events.append(StateChanged(
                    False, session.rep_count, FeedbackGenerator.plank_elbows(self.thresholds["elbow_angle"])
                ))
            events.append(StateChanged(False, session.rep_count))
        return session, events

    def _track_hold(self, session: ExerciseSession, now: float) -> List[Event]:
        events: List[Event] = []
        if session.position_start_time is None:
            return events
        elapsed = now - session.position_start_time
        bucket = int(elapsed)
        interval = self.tracker_config.hold_progress_interval
        if bucket > 0 and bucket % interval == 0 and bucket != session.last_progress_bucket:
            session.last_progress_bucket = bucket
            events.append(HoldProgressUpdated(bucket))
            logger.debug(f"Plank held for {elapsed:.1f} seconds")

        if not session.hold_completed and elapsed >= self.thresholds["min_duration"]:
            session.hold_completed = True
            session.rep_count += 1
            events.append(StateChanged(True, session.rep_count, FeedbackGenerator.hold_target_reached()))
        return events
