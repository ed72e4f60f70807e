# src/time_warp/core/errors.py

"""
Error taxonomy for the scheduler.

Validation errors are raised synchronously by the control surface and never
leave partial state behind. Errors raised by task callbacks are not in this
module: they are reported through the `error` event instead.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any


class TimeWarpError(Exception):
    """Base class for every scheduler error."""


class InvalidTaskError(TimeWarpError, TypeError):
    def __init__(self, callback: Any) -> None:
        super().__init__(f"Task must be callable, got {type(callback).__name__}")
        self.callback = callback


class UnsupportedCurveError(TimeWarpError, ValueError):
    def __init__(self, curve: Any, valid: Iterable[str]) -> None:
        self.curve = curve
        self.valid = tuple(valid)
        super().__init__(f"Unsupported curve type: {curve!r}. Use {', '.join(self.valid)}.")


class InvalidOptionError(TimeWarpError, ValueError):
    def __init__(self, field: str, value: Any) -> None:
        self.field = field
        self.value = value
        super().__init__(f"{field} must be a finite positive number, got {value!r}")


class MissingCustomCurveError(TimeWarpError, ValueError):
    def __init__(self, task_id: int) -> None:
        self.task_id = task_id
        super().__init__(f"Task {task_id}: a custom_curve function is required for the custom curve")


class TaskNotFoundError(TimeWarpError, LookupError):
    def __init__(self, task_id: int) -> None:
        self.task_id = task_id
        super().__init__(f"No task found with ID {task_id}")


class ExecutionNotFoundError(TimeWarpError, LookupError):
    def __init__(self, task_id: int, execution_index: int) -> None:
        self.task_id = task_id
        self.execution_index = execution_index
        super().__init__(f"No execution found at index {execution_index} for task {task_id}")


class InvalidDistortionError(TimeWarpError, ValueError):
    def __init__(self, factor: Any) -> None:
        self.factor = factor
        super().__init__(f"Distortion factor must be a finite positive number, got {factor!r}")


class HistoryImportError(TimeWarpError):
    """Raised when a history snapshot cannot be parsed; chained to the cause."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to import history: {reason}")
