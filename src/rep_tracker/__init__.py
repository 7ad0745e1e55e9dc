"""
rep_tracker - repetition counting and form feedback from pose landmark streams.
"""

from .trainer import ExerciseTracker

__all__ = ['ExerciseTracker']
