import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .landmarks import PoseFrame, PoseLandmark
from ..exercise_analysis.pose_utils import (
    calculate_angle,
    calculate_landmark_confidence,
    check_landmark_reliability,
)

logger = logging.getLogger("JointAngleEngine")

L = PoseLandmark

# Joint name -> candidate (proximal, central, distal) triples; the first reliable one is used.
# The angle is calculated at the central point between vectors to the other two.
JOINT_DEFINITIONS: Dict[str, Tuple[Tuple[int, int, int], ...]] = {
    "left_knee": ((L.LEFT_HIP, L.LEFT_KNEE, L.LEFT_ANKLE),),
    "right_knee": ((L.RIGHT_HIP, L.RIGHT_KNEE, L.RIGHT_ANKLE),),
    "left_hip": ((L.LEFT_SHOULDER, L.LEFT_HIP, L.LEFT_KNEE),),
    "right_hip": ((L.RIGHT_SHOULDER, L.RIGHT_HIP, L.RIGHT_KNEE),),
    "left_elbow": ((L.LEFT_SHOULDER, L.LEFT_ELBOW, L.LEFT_WRIST),),
    "right_elbow": ((L.RIGHT_SHOULDER, L.RIGHT_ELBOW, L.RIGHT_WRIST),),
    "left_shoulder": ((L.LEFT_HIP, L.LEFT_SHOULDER, L.LEFT_ELBOW),),
    "right_shoulder": ((L.RIGHT_HIP, L.RIGHT_SHOULDER, L.RIGHT_ELBOW),),
    "back": (
        (L.LEFT_SHOULDER, L.LEFT_HIP, L.LEFT_ANKLE),
        (L.RIGHT_SHOULDER, L.RIGHT_HIP, L.RIGHT_ANKLE),
    ),
}


@dataclass(frozen=True)
class JointAngle:
    """Angle at one joint for a single frame."""
    name: str
    angle: float  # Degrees, 0-180
    is_valid: bool  # False when the joint geometry was degenerate
    confidence: float  # Mean detector confidence of the three landmarks, 0-1
    previous_angle: Optional[float] = None
    velocity: Optional[float] = None  # Degrees per second


class JointAngleEngine:
    """
    Computes named joint angles with confidence and angular velocity.

    Previous angles are remembered per joint name, so raw and filtered streams
    each need their own engine.
    """

    def __init__(self, min_landmark_score: float = 0.5, joint_definitions=None):
        self.min_landmark_score = min_landmark_score
        self.joint_definitions = joint_definitions or JOINT_DEFINITIONS
        self._previous: Dict[str, Tuple[float, float]] = {}

    def reset(self) -> None:
        self._previous.clear()

    def calculate(self, frame: PoseFrame) -> Dict[str, JointAngle]:
        """
        Calculate every defined joint angle from a frame.

        Args:
            frame: Validated pose frame

        Returns:
            Mapping of joint name to JointAngle. Joints whose landmarks are not
            reliable are left out entirely.
        """
        angles: Dict[str, JointAngle] = {}
        now = frame.timestamp
        for name, candidates in self.joint_definitions.items():
            triple = self._select_triple(frame, candidates)
            if triple is None:
                continue
            angle, is_valid = calculate_angle(*triple)
            previous = self._previous.get(name)
            velocity = None
            if previous is not None and is_valid:
                elapsed = now - previous[1]
                if elapsed > 0:
                    velocity = (angle - previous[0]) / elapsed
            angles[name] = JointAngle(
                name=name,
                angle=angle,
                is_valid=is_valid,
                confidence=calculate_landmark_confidence(triple),
                previous_angle=previous[0] if previous is not None else None,
                velocity=velocity,
            )

        # Only valid readings become the previous sample
        for name, joint in angles.items():
            if joint.is_valid:
                self._previous[name] = (joint.angle, now)
        return angles

    def _select_triple(self, frame: PoseFrame, candidates):
        for indices in candidates:
            if max(indices) >= len(frame):
                continue
            triple = [frame[i] for i in indices]
            if check_landmark_reliability(triple, self.min_landmark_score):
                return triple
        return None


def detect_anomalies(
    angles: Dict[str, JointAngle],
    pairs: Sequence[Tuple[str, str]] = (("left_knee", "right_knee"),),
    max_asymmetry: float = 15.0,
    min_angle: float = 60.0,
    max_angle: float = 175.0,
    max_velocity: float = 300.0
) -> List[str]:
    """
    Flag implausible readings on bilateral joint pairs.

    Both sides of a pair must be present and valid for the pair to be checked.
    The result is advisory text only.

    Args:
        angles: Output of JointAngleEngine.calculate
        pairs: (left, right) joint names to compare
        max_asymmetry: Largest allowed left/right difference; equal is allowed
        min_angle: Smallest plausible angle
        max_angle: Largest plausible angle
        max_velocity: Largest plausible absolute angular velocity in deg/s

    Returns:
        List of anomaly descriptions, empty when nothing looks wrong
    """
    anomalies = []
    for left_name, right_name in pairs:
        left, right = angles.get(left_name), angles.get(right_name)
        if left is None or right is None or not (left.is_valid and right.is_valid):
            continue

        difference = abs(left.angle - right.angle)
        if difference > max_asymmetry:
            anomalies.append(f"Asymmetry between {left_name} and {right_name}: {int(difference)}°")

        for joint in (left, right):
            if joint.angle < min_angle or joint.angle > max_angle:
                anomalies.append(f"Unusual {joint.name} angle: {int(joint.angle)}°")

        for joint in (left, right):
            if joint.velocity is not None and abs(joint.velocity) > max_velocity:
                anomalies.append(f"Movement too fast at {joint.name}: {int(joint.velocity)}°/s")

    if anomalies:
        logger.info(f"Anomalies detected: {', '.join(anomalies)}")
    return anomalies
