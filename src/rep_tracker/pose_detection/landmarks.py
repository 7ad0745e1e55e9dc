"""
landmarks.py - Pose frame data model and input validation.
"""
import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, List, Optional, Sequence, Tuple

POSE_LANDMARK_COUNT = 33

LANDMARK_NAMES = [
    "nose", "left_eye_inner", "left_eye", "left_eye_outer",
    "right_eye_inner", "right_eye", "right_eye_outer", "left_ear",
    "right_ear", "mouth_left", "mouth_right", "left_shoulder",
    "right_shoulder", "left_elbow", "right_elbow", "left_wrist",
    "right_wrist", "left_pinky", "right_pinky", "left_index",
    "right_index", "left_thumb", "right_thumb", "left_hip",
    "right_hip", "left_knee", "right_knee", "left_ankle",
    "right_ankle", "left_heel", "right_heel", "left_foot_index",
    "right_foot_index"
]

PoseLandmark = IntEnum("PoseLandmark", [(name.upper(), idx) for idx, name in enumerate(LANDMARK_NAMES)])


@dataclass(frozen=True)
class Landmark:
    """A single normalized body point with optional detector scores."""
    x: float
    y: float
    z: float = 0.0
    visibility: Optional[float] = None
    presence: Optional[float] = None

    @property
    def visibility_score(self) -> float:
        return self.visibility if self.visibility is not None else 0.0

    @property
    def presence_score(self) -> float:
        return self.presence if self.presence is not None else 0.0

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.x, self.y, self.z))

    @classmethod
    def from_value(cls, value: Any) -> "Landmark":
        """
        Build a landmark from a dict ({"x": .., "y": .., ...}) or a
        sequence [x, y, z, visibility, presence] (trailing items optional).
        """
        if isinstance(value, dict):
            return cls(
                x=float(value["x"]),
                y=float(value["y"]),
                z=float(value.get("z", 0.0)),
                visibility=_optional_float(value.get("visibility")),
                presence=_optional_float(value.get("presence")),
            )
        items = list(value)
        if len(items) < 2:
            raise ValueError(f"Landmark needs at least x and y, got {items}")
        padded = items + [None] * (5 - len(items))
        return cls(
            x=float(padded[0]),
            y=float(padded[1]),
            z=float(padded[2]) if padded[2] is not None else 0.0,
            visibility=_optional_float(padded[3]),
            presence=_optional_float(padded[4]),
        )


@dataclass(frozen=True)
class PoseFrame:
    """One detection cycle: the landmarks of a single subject and the capture time in seconds.

    An empty landmark tuple means no subject was detected.
    """
    landmarks: Tuple[Landmark, ...]
    timestamp: float

    @property
    def has_subject(self) -> bool:
        return len(self.landmarks) > 0

    def __getitem__(self, index: int) -> Landmark:
        return self.landmarks[index]

    def __len__(self) -> int:
        return len(self.landmarks)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PoseFrame":
        raw = data.get("landmarks") or []
        return cls(
            landmarks=tuple(Landmark.from_value(v) for v in raw),
            timestamp=float(data["timestamp"]),
        )


def validate_frame(frame: PoseFrame, expected_count: int = POSE_LANDMARK_COUNT) -> Optional[str]:
    """
    Check a frame with a detected subject before it reaches the filter.

    Args:
        frame: Frame to check
        expected_count: Required number of landmarks

    Returns:
        None if the frame is usable, otherwise a description of the problem
    """
    if len(frame.landmarks) != expected_count:
        return f"Expected {expected_count} landmarks, got {len(frame.landmarks)}"
    if not all(lm.is_finite() for lm in frame.landmarks):
        return "Frame contains non-finite landmark coordinates"
    if not math.isfinite(frame.timestamp):
        return "Frame timestamp is not finite"
    return None


def frame_from_landmarker_result(result: Any, timestamp: float) -> PoseFrame:
    """
    Convert a MediaPipe Tasks pose landmarker result into a PoseFrame.

    Only the first detected pose is used. The result is read by attribute so the
    detector package is not needed here.
    """
    poses: Sequence[Sequence[Any]] = getattr(result, "pose_landmarks", None) or []
    if not poses:
        return PoseFrame(landmarks=(), timestamp=timestamp)
    landmarks: List[Landmark] = []
    for lm in poses[0]:
        landmarks.append(Landmark(
            x=float(lm.x),
            y=float(lm.y),
            z=float(getattr(lm, "z", 0.0) or 0.0),
            visibility=_optional_float(getattr(lm, "visibility", None)),
            presence=_optional_float(getattr(lm, "presence", None)),
        ))
    return PoseFrame(landmarks=tuple(landmarks), timestamp=timestamp)


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)
