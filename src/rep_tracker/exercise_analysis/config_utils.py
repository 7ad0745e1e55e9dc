import json
import logging
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger("ExerciseConfig")

DEFAULT_FILTER_PARAMS = (0.001, 0.03)


def load_exercise_config(config_path: str = None) -> Dict[str, Any]:
    """Load exercise thresholds, filter parameters and tracker settings from JSON."""
    if config_path is None:
        config_path = os.path.join(os.path.dirname(__file__), "exercise_config.json")
    with open(config_path, "r") as f:
        return json.load(f)


@dataclass
class TrackerConfig:
    """Tracker-wide settings shared by every exercise."""
    reset_delay_frames: int = 10  # Consecutive frames without a subject before a reset
    use_filter: bool = True  # Analyze filtered angles instead of raw ones
    timestamp_epsilon: float = 0.001  # Seconds added to a non-increasing timestamp
    log_every_n_frames: int = 30  # ~1 second at 30fps
    min_landmark_score: float = 0.5  # Visibility/presence required for a joint angle
    coordinate_margin: float = 0.05  # Hip/knee offset used by the coordinate fallback
    hold_progress_interval: int = 5  # Seconds between hold progress updates

    def __post_init__(self):
        for name in ("reset_delay_frames", "log_every_n_frames", "hold_progress_interval"):
            if getattr(self, name) < 1:
                raise ValueError(f"Tracker setting {name} must be at least 1, got {getattr(self, name)}")
        if self.timestamp_epsilon < 0:
            raise ValueError(f"Tracker setting timestamp_epsilon must not be negative, got {self.timestamp_epsilon}")
        if self.coordinate_margin < 0:
            raise ValueError(f"Tracker setting coordinate_margin must not be negative, got {self.coordinate_margin}")
        if not 0.0 <= self.min_landmark_score <= 1.0:
            raise ValueError(f"Tracker setting min_landmark_score must be within [0, 1], got {self.min_landmark_score}")

    @classmethod
    def from_dict(cls, values: Optional[Dict[str, Any]]) -> "TrackerConfig":
        known = {f.name for f in fields(cls)}
        values = values or {}
        unknown = set(values) - known
        if unknown:
            logger.warning(f"Ignoring unknown tracker settings: {', '.join(sorted(unknown))}")
        return cls(**{k: v for k, v in values.items() if k in known})


def get_tracker_config(config: Dict[str, Any]) -> TrackerConfig:
    return TrackerConfig.from_dict(config.get("tracker"))


def get_exercise_entry(config: Dict[str, Any], exercise_key: str) -> Dict[str, Any]:
    try:
        return config["exercises"][exercise_key]
    except KeyError:
        raise ValueError(f"Unsupported exercise type: {exercise_key}")


def get_threshold_table(
    config: Dict[str, Any],
    exercise_key: str,
    overrides: Optional[Dict[str, float]] = None
) -> Dict[str, float]:
    """
    Build the threshold table for an exercise.

    Args:
        config: Parsed exercise configuration
        exercise_key: Exercise type value, e.g. "squat"
        overrides: Optional per-session replacement values

    Returns:
        Mapping of threshold name to value

    Raises:
        ValueError: If the exercise is unknown or an override names an unknown threshold
    """
    table = {k: float(v) for k, v in get_exercise_entry(config, exercise_key).get("thresholds", {}).items()}
    if overrides:
        unknown = set(overrides) - set(table)
        if unknown:
            raise ValueError(
                f"Unknown thresholds for {exercise_key}: {', '.join(sorted(unknown))}"
            )
        table.update({k: float(v) for k, v in overrides.items()})
    return table


def get_filter_params(config: Dict[str, Any], exercise_key: str) -> Tuple[float, float]:
    """Return (process_noise, measurement_noise) for an exercise, falling back to the default pair."""
    filters = config.get("filter", {})
    params = filters.get(exercise_key) or filters.get("default")
    if params is None:
        logger.warning(f"No filter parameters configured for {exercise_key}, using defaults")
        return DEFAULT_FILTER_PARAMS
    return float(params["process_noise"]), float(params["measurement_noise"])


def get_anomaly_limits(config: Dict[str, Any]) -> Dict[str, Any]:
    limits = dict(config.get("anomalies", {}))
    pairs: List[Tuple[str, str]] = [tuple(pair) for pair in limits.pop("pairs", [["left_knee", "right_knee"]])]
    limits["pairs"] = pairs
    return limits
