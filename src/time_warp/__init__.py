# src/time_warp/__init__.py

"""Variable-interval task scheduler driven by time curves."""

from .core.errors import (
    ExecutionNotFoundError,
    HistoryImportError,
    InvalidDistortionError,
    InvalidOptionError,
    InvalidTaskError,
    MissingCustomCurveError,
    TaskNotFoundError,
    TimeWarpError,
    UnsupportedCurveError,
)
from .core.events import EventKind, SchedulerEvent
from .scheduler.engine import TimeWarpScheduler
from .scheduler.models import CurveKind, ExecutionRecord, Task, TaskHistory, TaskOptions, TaskStatus

__all__ = [
    "CurveKind",
    "EventKind",
    "ExecutionNotFoundError",
    "ExecutionRecord",
    "HistoryImportError",
    "InvalidDistortionError",
    "InvalidOptionError",
    "InvalidTaskError",
    "MissingCustomCurveError",
    "SchedulerEvent",
    "Task",
    "TaskHistory",
    "TaskNotFoundError",
    "TaskOptions",
    "TaskStatus",
    "TimeWarpError",
    "TimeWarpScheduler",
    "UnsupportedCurveError",
]
