from typing import List, Optional

from .base_analyzer import AngleMap, Metrics, ThresholdCrossingAnalyzer, pick_angle, register_analyzer
from .pose_utils import horizontal_distance
from .session import ExerciseType
from ..feedback.events import Feedback
from ..feedback.messages import FeedbackGenerator
from ..pose_detection.landmarks import PoseFrame, PoseLandmark


@register_analyzer(ExerciseType.SQUAT)
class SquatAnalyzer(ThresholdCrossingAnalyzer):
    """Counts squats from the knee angle; hip angle and knee spacing give form warnings."""

    rep_label = "Squat"

    def get_required_angles(self) -> List[str]:
        return ["left_knee", "right_knee", "left_hip", "right_hip"]

    def measure(self, angles: AngleMap, frame: PoseFrame) -> Optional[Metrics]:
        knee = pick_angle(angles, "left_knee", "right_knee")
        hip = pick_angle(angles, "left_hip", "right_hip")
        if knee is None or hip is None:
            return None
        return {"knee": knee, "hip": hip}

    def _is_rep_start_condition(self, metrics: Metrics) -> bool:
        return metrics["knee"] < self.thresholds["knee_angle_start"]

    def _is_rep_end_condition(self, metrics: Metrics) -> bool:
        return metrics["knee"] > self.thresholds["knee_angle_end"]

    def entry_feedback(self, metrics: Metrics, frame: PoseFrame) -> List[Feedback]:
        warnings = []
        knee_distance = horizontal_distance(frame[PoseLandmark.LEFT_KNEE], frame[PoseLandmark.RIGHT_KNEE])
        if knee_distance < self.thresholds["knee_distance"]:
            warnings.append(FeedbackGenerator.knees_too_close())
        if metrics["hip"] < self.thresholds["hip_angle"]:
            warnings.append(FeedbackGenerator.leaning_forward())
        return warnings
