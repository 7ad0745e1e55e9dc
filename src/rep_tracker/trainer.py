import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional, Union

from .exercise_analysis import ExerciseSession, ExerciseType, WorkoutSummary, create_analyzer, default_config, parse_exercise_type
from .exercise_analysis.config_utils import get_anomaly_limits, get_exercise_entry, get_filter_params, get_tracker_config
from .feedback.events import DataQualityIssue, Event, SessionReset, StateChanged
from .feedback.messages import FeedbackGenerator
from .pose_detection.joint_angles import JointAngle, JointAngleEngine, detect_anomalies
from .pose_detection.landmarks import PoseFrame, validate_frame
from .pose_detection.smoothing import LandmarkFilter

logger = logging.getLogger("ExerciseTracker")


class ExerciseTracker:
    """Turns a stream of pose frames into repetition, hold and feedback events."""

    def __init__(
        self,
        exercise_type: Union[ExerciseType, str] = ExerciseType.SQUAT,
        custom_name: Optional[str] = None,
        thresholds: Optional[Dict[str, float]] = None,
        config: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize the tracker.

        Args:
            exercise_type: Exercise to count, as an ExerciseType or a string such as "custom:burpee"
            custom_name: Display name for a custom exercise
            thresholds: Optional overrides for the exercise's threshold table
            config: Parsed exercise configuration; the packaged one when omitted
        """
        self.config = config or default_config()
        self.tracker_config = get_tracker_config(self.config)
        self.anomaly_limits = get_anomaly_limits(self.config)

        # Separate engines so raw and filtered velocities do not share history
        self.raw_engine = JointAngleEngine(self.tracker_config.min_landmark_score)
        self.filtered_engine = JointAngleEngine(self.tracker_config.min_landmark_score)
        self.raw_angles: Dict[str, JointAngle] = {}
        self.filtered_angles: Dict[str, JointAngle] = {}

        self._frame_counter = 0
        self._last_timestamp: Optional[float] = None
        self._install_exercise(exercise_type, custom_name, thresholds)

    @property
    def session(self) -> ExerciseSession:
        return self._session

    @property
    def exercise_type(self) -> ExerciseType:
        return self._session.exercise_type

    def _install_exercise(
        self,
        exercise_type: Union[ExerciseType, str],
        custom_name: Optional[str],
        thresholds: Optional[Dict[str, float]]
    ) -> None:
        if isinstance(exercise_type, str):
            exercise_type, parsed_name = parse_exercise_type(exercise_type)
            custom_name = custom_name or parsed_name

        # Build everything first so a bad selection leaves the current exercise in place
        analyzer = create_analyzer(exercise_type, thresholds, self.config)
        entry = get_exercise_entry(self.config, exercise_type.value)
        process_noise, measurement_noise = get_filter_params(self.config, exercise_type.value)
        if exercise_type is ExerciseType.CUSTOM and custom_name:
            name = custom_name
        else:
            name = entry.get("display_name", exercise_type.value)

        self.analyzer = analyzer
        self.landmark_filter = LandmarkFilter(process_noise, measurement_noise)
        self._session = ExerciseSession(
            exercise_type=exercise_type,
            exercise_name=name,
            target_rep_count=int(entry.get("target_rep_count", 0)),
        )
        self._clear_angle_state()
        logger.info(
            f"Tracking '{name}' (filter process={process_noise:.4f}, measurement={measurement_noise:.4f})"
        )

    def _clear_angle_state(self) -> None:
        self.raw_engine.reset()
        self.filtered_engine.reset()
        self.raw_angles = {}
        self.filtered_angles = {}

    def set_exercise_type(
        self,
        exercise_type: Union[ExerciseType, str],
        custom_name: Optional[str] = None,
        thresholds: Optional[Dict[str, float]] = None
    ) -> List[Event]:
        """Replace the active exercise, discarding the session, thresholds and filter state."""
        self._install_exercise(exercise_type, custom_name, thresholds)
        return [SessionReset("exercise_changed"), StateChanged(False, 0)]

    def reset(self) -> List[Event]:
        """Abort the current workout; must not be called while process() is running."""
        return self._reset_session("reset")

    def finish(self) -> WorkoutSummary:
        return self._session.summary()

    def _reset_session(self, reason: str) -> List[Event]:
        self._session.reset()
        self.landmark_filter.reset()
        self._clear_angle_state()
        logger.info(f"Session reset ({reason})")
        return [SessionReset(reason), StateChanged(self._session.in_position, self._session.rep_count)]

    def _clamp_timestamp(self, timestamp: float) -> float:
        if self._last_timestamp is not None and timestamp <= self._last_timestamp:
            timestamp = self._last_timestamp + self.tracker_config.timestamp_epsilon
        self._last_timestamp = timestamp
        return timestamp

    def process(self, frame: Optional[PoseFrame]) -> List[Event]:
        """
        Process a single frame.

        Args:
            frame: Pose frame, or None / an empty frame when no subject was detected

        Returns:
            Events produced by this frame, in order
        """
        self._frame_counter += 1
        should_log = self._frame_counter % self.tracker_config.log_every_n_frames == 0

        if frame is None or not frame.has_subject:
            return self._handle_missing_subject(should_log)

        problem = validate_frame(frame)
        if problem is not None:
            logger.warning(f"Rejected frame: {problem}")
            return [DataQualityIssue(problem, len(frame))]

        session = self._session
        session.frames_without_subject = 0

        now = self._clamp_timestamp(frame.timestamp)
        if now != frame.timestamp:
            frame = replace(frame, timestamp=now)
        session.mark_timestamp(now)

        self.raw_angles = self.raw_engine.calculate(frame)
        if self.tracker_config.use_filter:
            filtered_frame = replace(frame, landmarks=self.landmark_filter.process(frame.landmarks))
            self.filtered_angles = self.filtered_engine.calculate(filtered_frame)
            angles = self.filtered_angles
        else:
            angles = self.raw_angles

        if should_log:
            missing = [name for name in self.analyzer.get_required_angles() if name not in angles]
            logger.debug(
                f"Frame {self._frame_counter}: "
                + ", ".join(f"{name}={joint.angle:.1f}" for name, joint in angles.items())
                + (f" (missing: {', '.join(missing)})" if missing else "")
            )

        session, events = self.analyzer.analyze(session, angles, frame, now)
        self._session = session

        anomalies = detect_anomalies(angles, **self.anomaly_limits)
        if anomalies:
            events.append(StateChanged(session.in_position, session.rep_count, FeedbackGenerator.anomalies(anomalies)))
        return events

    def _handle_missing_subject(self, should_log: bool) -> List[Event]:
        session = self._session
        session.frames_without_subject += 1
        if should_log:
            logger.debug(f"No subject detected ({session.frames_without_subject} frames)")
        if session.frames_without_subject >= self.tracker_config.reset_delay_frames:
            return self._reset_session("presence_timeout")
        return []
