"""
Feedback events and message templates.
"""

from .events import Feedback, StateChanged, HoldProgressUpdated, SessionReset, DataQualityIssue, Event
from .messages import FeedbackGenerator

__all__ = [
    'Feedback',
    'StateChanged',
    'HoldProgressUpdated',
    'SessionReset',
    'DataQualityIssue',
    'Event',
    'FeedbackGenerator'
]
