"""Tests for joint-angle geometry, confidence, velocity and anomaly detection."""

import pytest

from rep_tracker.exercise_analysis.pose_utils import calculate_angle, calculate_landmark_confidence
from rep_tracker.pose_detection.joint_angles import JointAngle, JointAngleEngine, detect_anomalies
from rep_tracker.pose_detection.landmarks import Landmark, PoseFrame, PoseLandmark

from pose_factory import make_frame, squat_frame

L = PoseLandmark


def _joint(name, angle, velocity=None, valid=True):
    return JointAngle(name=name, angle=angle, is_valid=valid, confidence=1.0, velocity=velocity)


# ============================================================================
# Test: Angle Geometry
# ============================================================================

class TestCalculateAngle:

    def test_collinear_is_180(self):
        angle, valid = calculate_angle(Landmark(0.0, 0.0), Landmark(0.5, 0.0), Landmark(1.0, 0.0))
        assert valid
        assert angle == pytest.approx(180.0)

    def test_coincident_rays_is_zero(self):
        angle, valid = calculate_angle(Landmark(1.0, 0.0), Landmark(0.0, 0.0), Landmark(2.0, 0.0))
        assert valid
        assert angle == pytest.approx(0.0)

    def test_right_angle(self):
        angle, _ = calculate_angle(Landmark(0.0, 1.0), Landmark(0.0, 0.0), Landmark(1.0, 0.0))
        assert angle == pytest.approx(90.0)

    def test_depth_is_ignored(self):
        angle, _ = calculate_angle(Landmark(0.0, 1.0, z=5.0), Landmark(0.0, 0.0), Landmark(1.0, 0.0, z=-3.0))
        assert angle == pytest.approx(90.0)

    def test_zero_length_vector(self):
        angle, valid = calculate_angle(Landmark(0.3, 0.3), Landmark(0.3, 0.3), Landmark(1.0, 0.0))
        assert angle == 0.0
        assert valid is False

    def test_confidence_is_mean_of_scores(self):
        landmarks = [
            Landmark(0, 0, visibility=1.0, presence=0.5),
            Landmark(0, 0, visibility=0.6, presence=0.6),
            Landmark(0, 0, visibility=0.8, presence=1.0),
        ]
        assert calculate_landmark_confidence(landmarks) == pytest.approx((0.75 + 0.6 + 0.9) / 3)


# ============================================================================
# Test: Joint Angle Engine
# ============================================================================

class TestJointAngleEngine:

    def test_knee_angles_from_frame(self):
        engine = JointAngleEngine()
        angles = engine.calculate(squat_frame(100.0))
        assert angles["left_knee"].angle == pytest.approx(100.0, abs=1e-6)
        assert angles["right_knee"].angle == pytest.approx(100.0, abs=1e-6)
        assert angles["left_knee"].is_valid
        assert angles["left_knee"].confidence == pytest.approx(1.0)

    def test_all_joints_present_on_clear_frame(self):
        angles = JointAngleEngine().calculate(make_frame())
        for name in ("left_knee", "right_knee", "left_hip", "right_hip",
                     "left_elbow", "right_elbow", "left_shoulder", "right_shoulder", "back"):
            assert name in angles

    def test_low_visibility_joint_is_omitted(self):
        frame = make_frame(visibility=0.4)
        assert JointAngleEngine().calculate(frame) == {}

    def test_missing_presence_is_omitted(self):
        frame = make_frame()
        landmarks = list(frame.landmarks)
        landmarks[L.LEFT_ANKLE] = Landmark(0.42, 0.95, visibility=1.0, presence=None)
        frame = PoseFrame(landmarks=tuple(landmarks), timestamp=0.0)
        angles = JointAngleEngine().calculate(frame)
        assert "left_knee" not in angles
        assert "right_knee" in angles

    def test_back_uses_right_side_when_left_unreliable(self):
        frame = make_frame()
        landmarks = list(frame.landmarks)
        landmarks[L.LEFT_HIP] = Landmark(0.42, 0.55, visibility=0.1, presence=0.1)
        frame = PoseFrame(landmarks=tuple(landmarks), timestamp=0.0)
        angles = JointAngleEngine().calculate(frame)
        assert "back" in angles
        assert "left_knee" not in angles

    def test_degenerate_geometry_is_flagged(self):
        frame = make_frame(overrides={L.LEFT_ANKLE: (0.42, 0.75)})
        angles = JointAngleEngine().calculate(frame)
        assert angles["left_knee"].angle == 0.0
        assert angles["left_knee"].is_valid is False

    def test_velocity_from_previous_call(self):
        engine = JointAngleEngine()
        first = engine.calculate(squat_frame(160.0, timestamp=0.0))
        assert first["left_knee"].velocity is None
        assert first["left_knee"].previous_angle is None

        second = engine.calculate(squat_frame(150.0, timestamp=0.5))
        assert second["left_knee"].previous_angle == pytest.approx(160.0, abs=1e-6)
        assert second["left_knee"].velocity == pytest.approx(-20.0, abs=1e-4)

    def test_no_velocity_without_elapsed_time(self):
        engine = JointAngleEngine()
        engine.calculate(squat_frame(160.0, timestamp=1.0))
        angles = engine.calculate(squat_frame(150.0, timestamp=1.0))
        assert angles["left_knee"].velocity is None

    def test_degenerate_reading_is_not_remembered(self):
        engine = JointAngleEngine()
        engine.calculate(squat_frame(160.0, timestamp=0.0))
        degenerate = engine.calculate(make_frame(timestamp=1 / 30, overrides={L.LEFT_ANKLE: (0.42, 0.75)}))
        assert degenerate["left_knee"].is_valid is False
        assert degenerate["left_knee"].velocity is None

        angles = engine.calculate(squat_frame(150.0, timestamp=2 / 30))
        assert angles["left_knee"].previous_angle == pytest.approx(160.0, abs=1e-6)
        assert angles["left_knee"].velocity == pytest.approx(-150.0, abs=1e-3)
        assert not any("left_knee" in a for a in detect_anomalies(angles))

    def test_reset_forgets_history(self):
        engine = JointAngleEngine()
        engine.calculate(squat_frame(160.0, timestamp=0.0))
        engine.reset()
        angles = engine.calculate(squat_frame(150.0, timestamp=0.5))
        assert angles["left_knee"].previous_angle is None


# ============================================================================
# Test: Anomaly Detection
# ============================================================================

class TestDetectAnomalies:

    def test_asymmetry_boundary_does_not_fire(self):
        angles = {"left_knee": _joint("left_knee", 100.0), "right_knee": _joint("right_knee", 115.0)}
        assert detect_anomalies(angles) == []

    def test_asymmetry_above_boundary_fires(self):
        angles = {"left_knee": _joint("left_knee", 100.0), "right_knee": _joint("right_knee", 115.1)}
        anomalies = detect_anomalies(angles)
        assert len(anomalies) == 1
        assert "Asymmetry" in anomalies[0]

    def test_implausible_angles(self):
        angles = {"left_knee": _joint("left_knee", 59.0), "right_knee": _joint("right_knee", 65.0)}
        anomalies = detect_anomalies(angles)
        assert any("left_knee" in a for a in anomalies)

        angles = {"left_knee": _joint("left_knee", 176.0), "right_knee": _joint("right_knee", 176.0)}
        assert len(detect_anomalies(angles)) == 2

    def test_fast_motion(self):
        angles = {
            "left_knee": _joint("left_knee", 120.0, velocity=-350.0),
            "right_knee": _joint("right_knee", 120.0, velocity=300.0),
        }
        anomalies = detect_anomalies(angles)
        assert len(anomalies) == 1
        assert "too fast" in anomalies[0]

    def test_requires_both_sides_valid(self):
        angles = {"left_knee": _joint("left_knee", 30.0)}
        assert detect_anomalies(angles) == []
        angles["right_knee"] = _joint("right_knee", 0.0, valid=False)
        assert detect_anomalies(angles) == []

    def test_other_pairs(self):
        angles = {"left_elbow": _joint("left_elbow", 90.0), "right_elbow": _joint("right_elbow", 130.0)}
        assert detect_anomalies(angles) == []
        assert detect_anomalies(angles, pairs=[("left_elbow", "right_elbow")])
