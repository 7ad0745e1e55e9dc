"""
pose_utils.py - Shared geometry and landmark-quality helpers.
"""
import numpy as np
from typing import Sequence, Tuple

from ..pose_detection.landmarks import Landmark


# --- Math & Geometry Utilities ---
def calculate_angle(a: Landmark, b: Landmark, c: Landmark) -> Tuple[float, bool]:
    """
    Calculate the angle at point 'b' between vectors 'ba' and 'bc' in the image plane.

    Point ordering convention:
    - a: Proximal point (e.g., hip for knee angle)
    - b: Central point (e.g., knee) - angle is calculated here
    - c: Distal point (e.g., ankle)

    Only x and y are used; depth from a monocular detector is too noisy.

    Args:
        a: Proximal landmark
        b: Central landmark
        c: Distal landmark

    Returns:
        Tuple of (angle in degrees within [0, 180], is_valid). A zero-length
        vector yields (0.0, False).
    """
    ba = np.array([a.x - b.x, a.y - b.y], dtype=float)
    bc = np.array([c.x - b.x, c.y - b.y], dtype=float)
    norm_ba = np.linalg.norm(ba)
    norm_bc = np.linalg.norm(bc)
    if norm_ba == 0 or norm_bc == 0:
        return 0.0, False
    cosine_angle = np.clip(np.dot(ba, bc) / (norm_ba * norm_bc), -1.0, 1.0)
    return float(np.degrees(np.arccos(cosine_angle))), True


def calculate_length(a: Landmark, b: Landmark) -> float:
    """Calculate Euclidean distance between two points."""
    return float(np.linalg.norm(np.array([a.x - b.x, a.y - b.y])))


def horizontal_distance(a: Landmark, b: Landmark) -> float:
    return abs(a.x - b.x)


def midpoint(a: Landmark, b: Landmark) -> Landmark:
    return Landmark(
        x=(a.x + b.x) / 2,
        y=(a.y + b.y) / 2,
        z=(a.z + b.z) / 2,
        visibility=min(a.visibility_score, b.visibility_score),
        presence=min(a.presence_score, b.presence_score),
    )


def mean_y(landmarks: Sequence[Landmark]) -> float:
    return float(np.mean([lm.y for lm in landmarks]))


# --- Landmark Quality ---
def check_landmark_reliability(landmarks: Sequence[Landmark], min_score: float = 0.5) -> bool:
    """Check that every landmark has visibility and presence at or above the threshold."""
    return all(
        lm.visibility_score >= min_score and lm.presence_score >= min_score
        for lm in landmarks
    )


def calculate_landmark_confidence(landmarks: Sequence[Landmark]) -> float:
    """Mean of (visibility + presence) / 2 over the given landmarks."""
    if not landmarks:
        return 0.0
    return float(np.mean([(lm.visibility_score + lm.presence_score) / 2 for lm in landmarks]))
