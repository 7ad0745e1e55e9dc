import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from .config_utils import TrackerConfig, get_threshold_table, get_tracker_config, load_exercise_config
from .coordinate_fallback import CoordinateFallback
from .session import ExerciseSession, ExerciseType
from ..feedback.events import Event, Feedback, StateChanged
from ..feedback.messages import FeedbackGenerator
from ..pose_detection.landmarks import PoseFrame

if TYPE_CHECKING:
    from ..pose_detection.joint_angles import JointAngle

_EXERCISE_CONFIG = load_exercise_config()

# --- Logger Setup ---
logger = logging.getLogger("ExerciseAnalyzer")

AngleMap = Dict[str, "JointAngle"]
Metrics = Dict[str, float]
AnalysisResult = Tuple[ExerciseSession, List[Event]]

# --- Analyzer Registry ---
ANALYZER_REGISTRY: Dict[ExerciseType, type] = {}


def register_analyzer(exercise_type: ExerciseType):
    def decorator(cls):
        cls.exercise_type = exercise_type
        ANALYZER_REGISTRY[exercise_type] = cls
        return cls
    return decorator


def default_config() -> Dict[str, Any]:
    return _EXERCISE_CONFIG


def create_analyzer(
    exercise_type: ExerciseType,
    thresholds: Optional[Dict[str, float]] = None,
    config: Optional[Dict[str, Any]] = None
) -> "BaseExerciseAnalyzer":
    """
    Build the analyzer registered for an exercise type.

    Args:
        exercise_type: Exercise to analyze
        thresholds: Optional overrides for the exercise's threshold table
        config: Parsed exercise configuration; the packaged one when omitted

    Raises:
        ValueError: If no analyzer is registered or a threshold override is unknown
    """
    config = config or _EXERCISE_CONFIG
    if exercise_type not in ANALYZER_REGISTRY:
        raise ValueError(f"Unsupported exercise type: {exercise_type}")
    table = get_threshold_table(config, exercise_type.value, thresholds)
    return ANALYZER_REGISTRY[exercise_type](table, get_tracker_config(config))


def pick_angle(angles: AngleMap, *names: str) -> Optional[float]:
    """Return the first present and valid angle among the given joint names."""
    for name in names:
        joint = angles.get(name)
        if joint is not None and joint.is_valid:
            return joint.angle
    return None


class BaseExerciseAnalyzer(ABC):
    """Base class for per-exercise repetition state machines."""

    exercise_type: ExerciseType = None
    holds_position = False  # Hold exercises time a position instead of counting crossings

    def __init__(self, thresholds: Dict[str, float], tracker_config: Optional[TrackerConfig] = None):
        """
        Args:
            thresholds: Threshold table for this exercise
            tracker_config: Tracker-wide settings (fallback margin, hold cadence)
        """
        self.thresholds = dict(thresholds)
        self.tracker_config = tracker_config or TrackerConfig()
        self.fallback = CoordinateFallback(
            self.tracker_config.coordinate_margin, counts_repetitions=not self.holds_position
        )

    def analyze(
        self,
        session: ExerciseSession,
        angles: AngleMap,
        frame: PoseFrame,
        now: float
    ) -> AnalysisResult:
        """
        Advance the session by one frame.

        Args:
            session: Session owned by the caller; updated and returned
            angles: Joint angles selected for analysis (filtered or raw)
            frame: Raw frame, used for coordinate-based secondary checks
            now: Frame timestamp in seconds

        Returns:
            Tuple of (session, events produced by this frame)
        """
        metrics = self.measure(angles, frame)
        if metrics is None:
            return self.fallback.analyze(session, frame, now)
        return self.update(session, metrics, frame, now)

    @abstractmethod
    def get_required_angles(self) -> List[str]:
        """Get the joint names the primary criteria depend on."""
        pass

    @abstractmethod
    def measure(self, angles: AngleMap, frame: PoseFrame) -> Optional[Metrics]:
        """
        Extract the values this exercise's rules use.

        Returns:
            Named measurements, or None when required angles are missing
        """
        pass

    @abstractmethod
    def update(self, session: ExerciseSession, metrics: Metrics, frame: PoseFrame, now: float) -> AnalysisResult:
        pass


class ThresholdCrossingAnalyzer(BaseExerciseAnalyzer):
    """
    Two-state machine with a hysteresis band: the position is entered when the
    start condition holds and left, counting one repetition, when the end
    condition holds.
    """

    rep_label = "Repetition"

    def update(self, session: ExerciseSession, metrics: Metrics, frame: PoseFrame, now: float) -> AnalysisResult:
        events: List[Event] = []
        if not session.in_position and self._is_rep_start_condition(metrics):
            session.enter_position(now)
            events.append(StateChanged(True, session.rep_count))
            for feedback in self.entry_feedback(metrics, frame):
                events.append(StateChanged(True, session.rep_count, feedback))
            logger.debug(f"{self.rep_label} started: {self._format_metrics(metrics)}")
        elif session.in_position and self._is_rep_end_condition(metrics):
            duration = session.complete_repetition(now)
            if duration is not None:
                feedback = self.tempo_feedback(duration)
                if feedback is not None:
                    events.append(StateChanged(False, session.rep_count, feedback))
                logger.debug(f"{self.rep_label} duration: {duration:.2f} seconds")
            events.append(StateChanged(False, session.rep_count))
            logger.debug(f"{self.rep_label} completed: {self._format_metrics(metrics)}, reps: {session.rep_count}")
        return session, events

    def entry_feedback(self, metrics: Metrics, frame: PoseFrame) -> List[Feedback]:
        """Secondary-criteria warnings checked when the position is entered."""
        return []

    def tempo_feedback(self, duration: float) -> Optional[Feedback]:
        fast = self.thresholds.get("fast_rep_duration")
        slow = self.thresholds.get("slow_rep_duration")
        if fast is not None and duration < fast:
            return self.fast_feedback()
        if slow is not None and duration > slow:
            return self.slow_feedback()
        return None

    def fast_feedback(self) -> Feedback:
        return FeedbackGenerator.rep_too_fast(self.rep_label)

    def slow_feedback(self) -> Feedback:
        return FeedbackGenerator.rep_too_slow(self.rep_label)

    @staticmethod
    def _format_metrics(metrics: Metrics) -> str:
        return ", ".join(f"{k}: {v:.1f}" for k, v in metrics.items())

    @abstractmethod
    def _is_rep_start_condition(self, metrics: Metrics) -> bool:
        """
        Determine if the current frame enters the exercise position.

        Args:
            metrics: Output of measure()

        Returns:
            True if the frame marks the start of a repetition
        """
        pass

    @abstractmethod
    def _is_rep_end_condition(self, metrics: Metrics) -> bool:
        """
        Determine if the current frame leaves the exercise position.

        Args:
            metrics: Output of measure()

        Returns:
            True if the frame marks the end of a repetition
        """
        pass
