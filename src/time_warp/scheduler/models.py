# src/time_warp/scheduler/models.py

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from ..core.errors import InvalidOptionError, UnsupportedCurveError
from ..core.ports import CustomCurve, TaskCallback


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    pending -> running -> pending on every execution.
    pending -> cancelled is terminal.
    """

    PENDING = "pending"
    RUNNING = "running"
    CANCELLED = "cancelled"


class CurveKind(StrEnum):
    LINEAR = "linear"
    SINUSOIDAL = "sinusoidal"
    EXPONENTIAL = "exponential"
    LOGARITHMIC = "logarithmic"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, raw: Any) -> CurveKind:
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, str):
            try:
                return cls(raw.strip().lower())
            except ValueError:
                pass
        raise UnsupportedCurveError(raw, [c.value for c in cls])


def positive_number(name: str, value: Any) -> float:
    # bool is an int subclass; True is not a duration.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidOptionError(name, value)
    if not math.isfinite(value) or value <= 0:
        raise InvalidOptionError(name, value)
    return float(value)


@dataclass(frozen=True, slots=True)
class TaskOptions:
    curve: CurveKind
    duration: float = 60000.0
    amplitude: float = 1000.0
    scale: float = 1.0
    custom_curve: CustomCurve | None = None

    @classmethod
    def build(
            cls,
            *,
            curve: Any,
            duration: Any = 60000.0,
            amplitude: Any = 1000.0,
            scale: Any = 1.0,
            custom_curve: CustomCurve | None = None,
    ) -> TaskOptions:
        """Validate every field before constructing anything."""
        kind = CurveKind.parse(curve)
        return cls(
            curve=kind,
            duration=positive_number("duration", duration),
            amplitude=positive_number("amplitude", amplitude),
            scale=positive_number("scale", scale),
            custom_curve=custom_curve,
        )


@dataclass(slots=True)
class Task:
    id: int
    callback: TaskCallback
    options: TaskOptions
    last_execution: float
    status: TaskStatus = TaskStatus.PENDING

    @property
    def cancelled(self) -> bool:
        return self.status == TaskStatus.CANCELLED


@dataclass(frozen=True, slots=True)
class ExecutionRecord:
    time: float


@dataclass(slots=True)
class TaskHistory:
    task_id: int
    executions: list[ExecutionRecord] = field(default_factory=list)

    def copy(self) -> TaskHistory:
        return TaskHistory(task_id=self.task_id, executions=list(self.executions))
