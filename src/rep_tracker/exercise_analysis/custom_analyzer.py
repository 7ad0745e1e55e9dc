from typing import List, Optional

from .base_analyzer import AngleMap, AnalysisResult, BaseExerciseAnalyzer, Metrics, register_analyzer
from .session import ExerciseSession, ExerciseType
from ..pose_detection.landmarks import PoseFrame


@register_analyzer(ExerciseType.CUSTOM)
class CustomExerciseAnalyzer(BaseExerciseAnalyzer):
    """User-defined exercises have no angle rules; every frame goes through the coordinate fallback."""

    def get_required_angles(self) -> List[str]:
        return []

    def measure(self, angles: AngleMap, frame: PoseFrame) -> Optional[Metrics]:
        return None

    def update(self, session: ExerciseSession, metrics: Metrics, frame: PoseFrame, now: float) -> AnalysisResult:
        return self.fallback.analyze(session, frame, now)
