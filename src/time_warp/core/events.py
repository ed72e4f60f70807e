# src/time_warp/core/events.py

"""
Lifecycle events and the in-process event bus.

Every event is a small frozen dataclass tagged with an EventKind.
Subscribers are plain callables, dispatched synchronously in subscription order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, ClassVar

from .ports import EventSubscriber

if TYPE_CHECKING:
    from ..scheduler.models import TaskHistory, TaskOptions

logger = logging.getLogger(__name__)


class EventKind(StrEnum):
    TASK_ADDED = "task_added"
    TASK_EXECUTED = "task_executed"
    DISTORTION_CHANGED = "distortion_changed"
    TASK_REWOUND = "task_rewound"
    TASK_CANCELLED = "task_cancelled"
    ERROR = "error"
    PAUSED = "paused"
    RESUMED = "resumed"
    STOPPED = "stopped"
    HISTORY_IMPORTED = "history_imported"


@dataclass(frozen=True, slots=True)
class SchedulerEvent:
    kind: ClassVar[EventKind]


@dataclass(frozen=True, slots=True)
class TaskAdded(SchedulerEvent):
    kind: ClassVar[EventKind] = EventKind.TASK_ADDED
    task_id: int
    options: TaskOptions


@dataclass(frozen=True, slots=True)
class TaskExecuted(SchedulerEvent):
    kind: ClassVar[EventKind] = EventKind.TASK_EXECUTED
    task_id: int
    time: float


@dataclass(frozen=True, slots=True)
class DistortionChanged(SchedulerEvent):
    kind: ClassVar[EventKind] = EventKind.DISTORTION_CHANGED
    factor: float


@dataclass(frozen=True, slots=True)
class TaskRewound(SchedulerEvent):
    kind: ClassVar[EventKind] = EventKind.TASK_REWOUND
    task_id: int
    execution_index: int


@dataclass(frozen=True, slots=True)
class TaskCancelled(SchedulerEvent):
    kind: ClassVar[EventKind] = EventKind.TASK_CANCELLED
    task_id: int


@dataclass(frozen=True, slots=True)
class TaskError(SchedulerEvent):
    """A task callback (or its interval computation) failed."""

    kind: ClassVar[EventKind] = EventKind.ERROR
    task_id: int
    error: Exception


@dataclass(frozen=True, slots=True)
class Paused(SchedulerEvent):
    kind: ClassVar[EventKind] = EventKind.PAUSED


@dataclass(frozen=True, slots=True)
class Resumed(SchedulerEvent):
    kind: ClassVar[EventKind] = EventKind.RESUMED


@dataclass(frozen=True, slots=True)
class Stopped(SchedulerEvent):
    kind: ClassVar[EventKind] = EventKind.STOPPED


@dataclass(frozen=True, slots=True)
class HistoryImported(SchedulerEvent):
    kind: ClassVar[EventKind] = EventKind.HISTORY_IMPORTED
    history: dict[int, TaskHistory] = field(default_factory=dict)


@dataclass(slots=True)
class _Subscription:
    handler: EventSubscriber
    kinds: frozenset[EventKind] | None


class EventBus:
    """
    Observer registry.

    - publish() never raises because of a subscriber: failures are logged and
      the remaining subscribers still run.
    - Subscribing/unsubscribing during a publish affects the next publish only.
    """

    def __init__(self) -> None:
        self._subs: list[_Subscription] = []

    def subscribe(self, handler: EventSubscriber, kinds: Iterable[EventKind | str] | None = None) -> Callable[[], None]:
        """
        Register handler for the given kinds (all kinds if None).
        Returns a callable that removes this subscription.
        """
        if not callable(handler):
            raise TypeError("handler must be callable")
        wanted = frozenset(EventKind(k) for k in kinds) if kinds else None
        sub = _Subscription(handler=handler, kinds=wanted)
        self._subs.append(sub)

        def _unsubscribe() -> None:
            try:
                self._subs.remove(sub)
            except ValueError:
                pass

        return _unsubscribe

    def publish(self, event: SchedulerEvent) -> None:
        for sub in tuple(self._subs):
            if sub.kinds is not None and event.kind not in sub.kinds:
                continue
            try:
                sub.handler(event)
            except Exception:
                logger.exception("Subscriber %r failed on %s", sub.handler, event.kind.value)

    def __len__(self) -> int:
        return len(self._subs)


def describe(event: Any) -> str:
    """One-line, human readable rendering used by the console."""
    kind = getattr(event, "kind", None)
    if kind == EventKind.TASK_ADDED:
        return f"Task {event.task_id} added ({event.options.curve.value})"
    if kind == EventKind.TASK_EXECUTED:
        return f"Task {event.task_id} executed at {event.time:.0f}"
    if kind == EventKind.DISTORTION_CHANGED:
        return f"Rate changed: {event.factor}x"
    if kind == EventKind.TASK_REWOUND:
        return f"Rewound task {event.task_id} to execution {event.execution_index}"
    if kind == EventKind.TASK_CANCELLED:
        return f"Task {event.task_id} cancelled"
    if kind == EventKind.ERROR:
        return f"Error in task {event.task_id}: {event.error}"
    if kind == EventKind.HISTORY_IMPORTED:
        return f"History imported ({len(event.history)} tasks)"
    if kind is not None:
        return f"Scheduler {kind.value}"
    return repr(event)
