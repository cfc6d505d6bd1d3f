"""Shared testing fixtures for the timed_quiz test suite."""

from .navigation import RecordingNavigator  # noqa: F401
from .scheduler import ManualScheduler, ScheduledCall  # noqa: F401
from .workspace import WorkspaceBuilder, question_record  # noqa: F401

__all__ = [
    "ManualScheduler",
    "RecordingNavigator",
    "ScheduledCall",
    "WorkspaceBuilder",
    "question_record",
]
