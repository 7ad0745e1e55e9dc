from typing import List, Optional

from .base_analyzer import AngleMap, Metrics, ThresholdCrossingAnalyzer, pick_angle, register_analyzer
from .session import ExerciseType
from ..feedback.events import Feedback
from ..feedback.messages import FeedbackGenerator
from ..pose_detection.landmarks import PoseFrame


@register_analyzer(ExerciseType.PUSHUP)
class PushupAnalyzer(ThresholdCrossingAnalyzer):
    """Push-up: the bottom position is entered below elbow_angle_start and left above elbow_angle_end."""

    rep_label = "Push-up"

    def get_required_angles(self) -> List[str]:
        return ["left_elbow", "right_elbow", "back"]

    def measure(self, angles: AngleMap, frame: PoseFrame) -> Optional[Metrics]:
        elbow = pick_angle(angles, "left_elbow", "right_elbow")
        back = pick_angle(angles, "back")
        if elbow is None or back is None:
            return None
        return {"elbow": elbow, "back": back}

    def _is_rep_start_condition(self, metrics: Metrics) -> bool:
        return metrics["elbow"] < self.thresholds["elbow_angle_start"]

    def _is_rep_end_condition(self, metrics: Metrics) -> bool:
        return metrics["elbow"] > self.thresholds["elbow_angle_end"]

    def entry_feedback(self, metrics: Metrics, frame: PoseFrame) -> List[Feedback]:
        if metrics["back"] < self.thresholds["back_angle"]:
            return [FeedbackGenerator.sagging_back()]
        return []
