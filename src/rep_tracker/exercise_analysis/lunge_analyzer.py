from typing import List, Optional

from .base_analyzer import AngleMap, Metrics, ThresholdCrossingAnalyzer, pick_angle, register_analyzer
from .session import ExerciseType
from ..feedback.events import Feedback
from ..feedback.messages import FeedbackGenerator
from ..pose_detection.landmarks import PoseFrame


@register_analyzer(ExerciseType.LUNGE)
class LungeAnalyzer(ThresholdCrossingAnalyzer):
    """
    Lunge analysis on both knees. The more bent knee is taken as the front one.
    Both knees must bend past their start thresholds to enter and straighten past
    their end thresholds to count a repetition.
    """

    rep_label = "Lunge"

    def get_required_angles(self) -> List[str]:
        return ["left_knee", "right_knee"]

    def measure(self, angles: AngleMap, frame: PoseFrame) -> Optional[Metrics]:
        left = pick_angle(angles, "left_knee")
        right = pick_angle(angles, "right_knee")
        if left is None or right is None:
            return None
        return {"front_knee": min(left, right), "back_knee": max(left, right)}

    def _is_rep_start_condition(self, metrics: Metrics) -> bool:
        return (metrics["front_knee"] < self.thresholds["front_knee_angle"]
                and metrics["back_knee"] < self.thresholds["back_knee_angle"])

    def _is_rep_end_condition(self, metrics: Metrics) -> bool:
        return (metrics["front_knee"] > self.thresholds["front_knee_angle_end"]
                and metrics["back_knee"] > self.thresholds["back_knee_angle_end"])

    def entry_feedback(self, metrics: Metrics, frame: PoseFrame) -> List[Feedback]:
        target = self.thresholds["front_knee_target"]
        if metrics["front_knee"] > target:
            return [FeedbackGenerator.bend_front_knee(target)]
        return []
