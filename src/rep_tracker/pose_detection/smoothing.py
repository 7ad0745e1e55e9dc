"""
smoothing.py - Kalman-style noise reduction for scalar signals and whole pose frames.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence, Tuple

from .landmarks import Landmark

logger = logging.getLogger("LandmarkFilter")


class ScalarKalmanFilter:
    """Recursive 1D estimator with fixed process and measurement noise."""

    def __init__(
        self,
        initial_value: float = 0.0,
        process_noise: float = 0.001,
        measurement_noise: float = 0.01,
        error_covariance: float = 1.0
    ):
        """
        Args:
            initial_value: Seed estimate, usually the first measurement
            process_noise: q, how much the true value is expected to drift per step
            measurement_noise: r, how noisy each measurement is
            error_covariance: Initial p
        """
        if process_noise < 0 or measurement_noise < 0 or error_covariance < 0:
            raise ValueError("Noise and covariance values must be non-negative")
        self.process_noise = process_noise
        self.measurement_noise = measurement_noise
        self.estimate = float(initial_value)
        self.error_covariance = float(error_covariance)
        self.last_gain = 0.0

    def update(self, measurement: float) -> float:
        predicted = self.error_covariance + self.process_noise
        denominator = predicted + self.measurement_noise
        # p' and r both zero: keep the estimate
        gain = predicted / denominator if denominator > 0 else 0.0
        self.estimate = self.estimate + gain * (measurement - self.estimate)
        self.error_covariance = (1.0 - gain) * predicted
        self.last_gain = gain
        return self.estimate


@dataclass
class FilterState:
    """One smoother per axis (x, y, z) per landmark index."""
    process_noise: float
    measurement_noise: float
    smoothers: List[Tuple[ScalarKalmanFilter, ScalarKalmanFilter, ScalarKalmanFilter]] = field(default_factory=list)

    @property
    def landmark_count(self) -> int:
        return len(self.smoothers)

    @classmethod
    def seeded_from(
        cls,
        landmarks: Sequence[Landmark],
        process_noise: float,
        measurement_noise: float
    ) -> "FilterState":
        def make(value: float) -> ScalarKalmanFilter:
            return ScalarKalmanFilter(value, process_noise, measurement_noise, error_covariance=1.0)

        return cls(
            process_noise=process_noise,
            measurement_noise=measurement_noise,
            smoothers=[(make(lm.x), make(lm.y), make(lm.z)) for lm in landmarks],
        )


class LandmarkFilter:
    """Denoises whole pose frames, one ScalarKalmanFilter per coordinate."""

    def __init__(self, process_noise: float = 0.001, measurement_noise: float = 0.03):
        self.process_noise = process_noise
        self.measurement_noise = measurement_noise
        self.state: Optional[FilterState] = None

    def needs_reinitialize(self, landmark_count: int) -> bool:
        """The bank is rebuilt when it does not exist yet or the frame size changed."""
        return self.state is None or self.state.landmark_count != landmark_count

    def reset(self) -> None:
        self.state = None

    def process(self, landmarks: Sequence[Landmark]) -> Tuple[Landmark, ...]:
        """
        Smooth one frame of landmarks.

        Args:
            landmarks: Raw landmarks of the current frame

        Returns:
            Filtered landmarks of identical cardinality; visibility and presence unchanged
        """
        if self.needs_reinitialize(len(landmarks)):
            self.state = FilterState.seeded_from(landmarks, self.process_noise, self.measurement_noise)
            logger.debug(
                f"Initialized filter for {len(landmarks)} landmarks "
                f"(process={self.process_noise:.4f}, measurement={self.measurement_noise:.4f})"
            )

        filtered = []
        for lm, (fx, fy, fz) in zip(landmarks, self.state.smoothers):
            filtered.append(replace(lm, x=fx.update(lm.x), y=fy.update(lm.y), z=fz.update(lm.z)))
        return tuple(filtered)
