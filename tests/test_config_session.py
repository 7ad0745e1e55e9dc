"""Tests for configuration loading, session bookkeeping and frame parsing."""

import json
import logging
from types import SimpleNamespace

import pytest

from rep_tracker.exercise_analysis import ExerciseSession, ExerciseType, default_config, parse_exercise_type
from rep_tracker.exercise_analysis.config_utils import (
    DEFAULT_FILTER_PARAMS,
    TrackerConfig,
    get_anomaly_limits,
    get_filter_params,
    get_threshold_table,
    load_exercise_config,
)
from rep_tracker.pose_detection.frame_source import JsonLinesFrameSource
from rep_tracker.pose_detection.landmarks import (
    Landmark,
    PoseFrame,
    frame_from_landmarker_result,
    validate_frame,
)

from pose_factory import frame_to_dict, make_frame


# ============================================================================
# Test: Configuration
# ============================================================================

class TestConfiguration:

    def test_tracker_defaults(self):
        config = TrackerConfig.from_dict(None)
        assert config.reset_delay_frames == 10
        assert config.use_filter is True
        assert config.timestamp_epsilon == pytest.approx(0.001)

    def test_unknown_tracker_setting_is_ignored(self, caplog):
        with caplog.at_level(logging.WARNING, logger="ExerciseConfig"):
            config = TrackerConfig.from_dict({"reset_delay_frames": 5, "bogus": 1})
        assert config.reset_delay_frames == 5
        assert "bogus" in caplog.text

    @pytest.mark.parametrize("settings", [
        {"log_every_n_frames": 0},
        {"hold_progress_interval": 0},
        {"reset_delay_frames": 0},
        {"timestamp_epsilon": -0.001},
        {"coordinate_margin": -0.05},
        {"min_landmark_score": 1.5},
    ])
    def test_invalid_tracker_settings(self, settings):
        with pytest.raises(ValueError, match=next(iter(settings))):
            TrackerConfig.from_dict(settings)

    def test_threshold_overrides(self):
        table = get_threshold_table(default_config(), "squat", {"knee_angle_start": 100})
        assert table["knee_angle_start"] == 100.0
        assert table["knee_angle_end"] == 130.0

    def test_unknown_threshold_override(self):
        with pytest.raises(ValueError, match="knee_depth"):
            get_threshold_table(default_config(), "squat", {"knee_depth": 1})

    def test_unknown_exercise(self):
        with pytest.raises(ValueError, match="Unsupported exercise type"):
            get_threshold_table(default_config(), "cartwheel")

    def test_filter_parameters(self):
        config = default_config()
        assert get_filter_params(config, "plank") == (0.0005, 0.01)
        assert get_filter_params(config, "jumping_jack") == (0.003, 0.05)
        assert get_filter_params(config, "custom") == (0.001, 0.03)
        assert get_filter_params({}, "squat") == DEFAULT_FILTER_PARAMS

    def test_anomaly_pairs_are_tuples(self):
        limits = get_anomaly_limits(default_config())
        assert limits["pairs"] == [("left_knee", "right_knee")]
        assert limits["max_asymmetry"] == 15.0

    def test_load_alternative_file(self, tmp_path):
        path = tmp_path / "exercises.json"
        path.write_text(json.dumps({"tracker": {"reset_delay_frames": 4}, "exercises": {}}))
        config = load_exercise_config(str(path))
        assert config["tracker"]["reset_delay_frames"] == 4


# ============================================================================
# Test: Exercise Selection
# ============================================================================

class TestParseExerciseType:

    @pytest.mark.parametrize("value,expected", [
        ("squat", (ExerciseType.SQUAT, None)),
        ("Jumping_Jack", (ExerciseType.JUMPING_JACK, None)),
        ("custom:burpee", (ExerciseType.CUSTOM, "burpee")),
        ("custom", (ExerciseType.CUSTOM, None)),
        ("squat:ignored", (ExerciseType.SQUAT, None)),
        ("push-up", (ExerciseType.PUSHUP, None)),
        ("Push_Up", (ExerciseType.PUSHUP, None)),
        ("jumping-jack", (ExerciseType.JUMPING_JACK, None)),
    ])
    def test_valid(self, value, expected):
        assert parse_exercise_type(value) == expected

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_exercise_type("cartwheel")


# ============================================================================
# Test: Session Bookkeeping
# ============================================================================

class TestExerciseSession:

    def _session(self):
        return ExerciseSession(exercise_type=ExerciseType.SQUAT, exercise_name="Squat", target_rep_count=2)

    def test_repetition_without_start_has_no_duration(self):
        session = self._session()
        assert session.complete_repetition(3.0) is None
        assert session.rep_count == 1
        assert session.rep_durations == []

    def test_repetition_clears_progress_bucket(self):
        session = self._session()
        session.enter_position(0.0)
        session.last_progress_bucket = 10
        session.complete_repetition(12.0)
        assert session.last_progress_bucket is None

    def test_summary(self):
        session = self._session()
        session.mark_timestamp(10.0)
        session.enter_position(10.0)
        session.complete_repetition(11.0)
        session.enter_position(12.0)
        assert session.complete_repetition(14.0) == pytest.approx(2.0)
        session.mark_timestamp(135.0)

        summary = session.summary()
        assert summary.rep_count == 2
        assert summary.target_reached
        assert summary.average_rep_duration == pytest.approx(1.5)
        assert summary.total_duration == pytest.approx(125.0)
        assert summary.formatted_duration == "2:05"

        data = summary.to_dict()
        assert data["exercise_type"] == "squat"
        assert data["rep_durations"] == [1.0, 2.0]
        assert data["quality_score"] is None

    def test_reset_keeps_selection(self):
        session = self._session()
        session.enter_position(1.0)
        session.complete_repetition(2.0)
        session.hold_completed = True
        session.reset()
        assert session.exercise_type is ExerciseType.SQUAT
        assert session.rep_count == 0
        assert session.rep_durations == []
        assert not session.hold_completed
        assert session.started_at is None


# ============================================================================
# Test: Frame Parsing and Validation
# ============================================================================

class TestFrames:

    def test_landmark_from_dict(self):
        lm = Landmark.from_value({"x": 0.1, "y": 0.2, "visibility": 0.9})
        assert lm.z == 0.0
        assert lm.visibility_score == pytest.approx(0.9)
        assert lm.presence is None
        assert lm.presence_score == 0.0

    def test_landmark_from_list(self):
        lm = Landmark.from_value([0.1, 0.2, 0.3, 0.8, 0.7])
        assert (lm.x, lm.y, lm.z, lm.visibility, lm.presence) == (0.1, 0.2, 0.3, 0.8, 0.7)
        with pytest.raises(ValueError):
            Landmark.from_value([0.1])

    def test_frame_without_landmarks_has_no_subject(self):
        frame = PoseFrame.from_dict({"timestamp": 1.0, "landmarks": None})
        assert not frame.has_subject

    def test_validate_frame(self):
        assert validate_frame(make_frame()) is None
        assert "landmarks" in validate_frame(make_frame(count=12))
        assert validate_frame(make_frame(timestamp=float("inf"))) is not None

    def test_landmarker_result(self):
        point = SimpleNamespace(x=0.5, y=0.4, z=-0.1, visibility=0.9, presence=0.95)
        result = SimpleNamespace(pose_landmarks=[[point] * 33])
        frame = frame_from_landmarker_result(result, timestamp=2.5)
        assert len(frame) == 33
        assert frame.timestamp == 2.5
        assert frame[0].presence == pytest.approx(0.95)

        empty = frame_from_landmarker_result(SimpleNamespace(pose_landmarks=[]), timestamp=3.0)
        assert not empty.has_subject

    def test_json_lines_source(self, tmp_path):
        path = tmp_path / "frames.jsonl"
        path.write_text(
            json.dumps(frame_to_dict(make_frame(timestamp=0.5))) + "\n"
            + "\n"
            + "{not json\n"
            + json.dumps({"timestamp": 1.0, "landmarks": []}) + "\n"
        )
        records = list(JsonLinesFrameSource(str(path)).frames())
        assert len(records) == 3

        frame, error = records[0]
        assert error is None
        assert len(frame) == 33
        assert frame.timestamp == 0.5

        frame, error = records[1]
        assert frame is None
        assert error.startswith("Line 3")

        frame, error = records[2]
        assert not frame.has_subject
