"""
Exercise analysis package: per-exercise repetition state machines and their configuration.
"""

from .session import ExerciseType, ExerciseSession, WorkoutSummary, parse_exercise_type
from .base_analyzer import (
    ANALYZER_REGISTRY,
    BaseExerciseAnalyzer,
    ThresholdCrossingAnalyzer,
    create_analyzer,
    default_config,
    register_analyzer,
)
from .coordinate_fallback import CoordinateFallback
from .squat_analyzer import SquatAnalyzer
from .pushup_analyzer import PushupAnalyzer
from .lunge_analyzer import LungeAnalyzer
from .jumping_jack_analyzer import JumpingJackAnalyzer
from .plank_analyzer import PlankAnalyzer
from .custom_analyzer import CustomExerciseAnalyzer

__all__ = [
    'ExerciseType',
    'ExerciseSession',
    'WorkoutSummary',
    'parse_exercise_type',
    'ANALYZER_REGISTRY',
    'BaseExerciseAnalyzer',
    'ThresholdCrossingAnalyzer',
    'create_analyzer',
    'default_config',
    'register_analyzer',
    'CoordinateFallback',
    'SquatAnalyzer',
    'PushupAnalyzer',
    'LungeAnalyzer',
    'JumpingJackAnalyzer',
    'PlankAnalyzer',
    'CustomExerciseAnalyzer'
]
