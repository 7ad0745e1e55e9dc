from typing import List, Optional

from .base_analyzer import AngleMap, Metrics, ThresholdCrossingAnalyzer, pick_angle, register_analyzer
from .pose_utils import calculate_angle, midpoint
from .session import ExerciseType
from ..feedback.events import Feedback
from ..feedback.messages import FeedbackGenerator
from ..pose_detection.landmarks import PoseFrame, PoseLandmark


def calculate_leg_spread(frame: PoseFrame) -> Optional[float]:
    """Angle in degrees at the hip midpoint between the two ankles, None if degenerate."""
    hip_center = midpoint(frame[PoseLandmark.LEFT_HIP], frame[PoseLandmark.RIGHT_HIP])
    angle, is_valid = calculate_angle(frame[PoseLandmark.LEFT_ANKLE], hip_center, frame[PoseLandmark.RIGHT_ANKLE])
    return angle if is_valid else None


@register_analyzer(ExerciseType.JUMPING_JACK)
class JumpingJackAnalyzer(ThresholdCrossingAnalyzer):
    """
    Jumping jacks: arms down with legs together enters the position, arms up
    with legs apart completes the repetition.
    """

    rep_label = "Jumping jack"

    def get_required_angles(self) -> List[str]:
        return ["left_shoulder", "right_shoulder"]

    def measure(self, angles: AngleMap, frame: PoseFrame) -> Optional[Metrics]:
        shoulder = pick_angle(angles, "left_shoulder", "right_shoulder")
        legs = calculate_leg_spread(frame)
        if shoulder is None or legs is None:
            return None
        return {"shoulder": shoulder, "legs": legs}

    def _is_rep_start_condition(self, metrics: Metrics) -> bool:
        arms_down = metrics["shoulder"] < self.thresholds["arm_angle_start"]
        legs_together = metrics["legs"] < self.thresholds["leg_angle_start"]
        return arms_down and legs_together

    def _is_rep_end_condition(self, metrics: Metrics) -> bool:
        arms_up = metrics["shoulder"] > self.thresholds["arm_angle_end"]
        legs_apart = metrics["legs"] > self.thresholds["leg_angle_end"]
        return arms_up and legs_apart

    def fast_feedback(self) -> Feedback:
        return FeedbackGenerator.good_pace()

    def slow_feedback(self) -> Feedback:
        return FeedbackGenerator.move_faster()
