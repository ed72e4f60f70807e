# src/time_warp/scheduler/engine.py

from __future__ import annotations

"""
Variable-interval scheduler.

A single polling loop ("ticker") that, every min_interval ms:
- computes each task's current interval from its curve,
- runs the tasks whose interval has elapsed, one after another,
- records history and publishes lifecycle events.

Task failures never stop the loop; they are published as `error` events.
Only stop(), pause() or every task being cancelled halts it.
"""

import asyncio
import contextlib
import inspect
import logging
import math
import time
from collections.abc import Callable
from typing import Any

from ..core.errors import (
    ExecutionNotFoundError,
    HistoryImportError,
    InvalidDistortionError,
    InvalidTaskError,
    MissingCustomCurveError,
    TaskNotFoundError,
)
from ..core.events import (
    DistortionChanged,
    EventBus,
    EventKind,
    HistoryImported,
    Paused,
    Resumed,
    SchedulerEvent,
    Stopped,
    TaskAdded,
    TaskCancelled,
    TaskError,
    TaskExecuted,
    TaskRewound,
)
from ..core.ports import Clock, CustomCurve, EventSubscriber, TaskCallback
from .curves import BUILTIN_CURVES, clamp_interval
from .history import dump_histories, parse_histories
from .models import CurveKind, ExecutionRecord, Task, TaskHistory, TaskOptions, TaskStatus

logger = logging.getLogger(__name__)

DEFAULT_MIN_INTERVAL_MS = 100.0


def wall_clock_ms() -> float:
    return time.time() * 1000.0


class TimeWarpScheduler:
    """
    Owns tasks, their histories and the tick loop.

    One instance per application; there is no module-level singleton.
    Lifecycle: create -> register/start -> pause/resume -> stop -> aclose().
    """

    def __init__(
            self,
            *,
            min_interval: float = DEFAULT_MIN_INTERVAL_MS,
            clock: Clock | None = None,
            callback_timeout: float | None = None,
            autostart: bool = True,
    ) -> None:
        if isinstance(min_interval, bool) or not isinstance(min_interval, (int, float)) \
                or not math.isfinite(min_interval) or min_interval <= 0:
            raise ValueError(f"min_interval must be a finite positive number, got {min_interval!r}")
        if callback_timeout is not None and callback_timeout <= 0:
            raise ValueError("callback_timeout must be positive or None")

        self._min_interval = float(min_interval)
        self._clock: Clock = clock or wall_clock_ms
        self._callback_timeout = callback_timeout
        self._autostart = autostart

        self._tasks: list[Task] = []
        self._histories: dict[int, TaskHistory] = {}
        self._is_running = False
        self._is_paused = False
        self._distortion = 1.0

        self._events = EventBus()
        self._ticker: asyncio.Task[None] | None = None

    @classmethod
    def from_settings(cls, settings: Any, *, clock: Clock | None = None) -> TimeWarpScheduler:
        return cls(
            min_interval=getattr(settings, "min_interval_ms", DEFAULT_MIN_INTERVAL_MS),
            callback_timeout=getattr(settings, "callback_timeout_s", None),
            clock=clock,
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def is_paused(self) -> bool:
        return self._is_paused

    @property
    def distortion_factor(self) -> float:
        return self._distortion

    @property
    def min_interval(self) -> float:
        return self._min_interval

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    def get_task(self, task_id: int) -> Task | None:
        # Ids are dense: the k-th registered task has id k.
        if isinstance(task_id, int) and 0 <= task_id < len(self._tasks):
            return self._tasks[task_id]
        return None

    def get_task_status(self, task_id: int) -> TaskStatus | None:
        task = self.get_task(task_id)
        return task.status if task is not None else None

    def history(self, task_id: int) -> list[ExecutionRecord]:
        h = self._histories.get(task_id)
        if h is None:
            raise TaskNotFoundError(task_id)
        return list(h.executions)

    def histories(self) -> dict[int, TaskHistory]:
        return {k: v.copy() for k, v in self._histories.items()}

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def subscribe(self, handler: EventSubscriber, *kinds: EventKind | str) -> Callable[[], None]:
        """Subscribe to the given event kinds (all if none). Returns an unsubscribe callable."""
        return self._events.subscribe(handler, kinds or None)

    def _publish(self, event: SchedulerEvent) -> None:
        self._events.publish(event)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_task(
            self,
            callback: TaskCallback,
            *,
            curve: CurveKind | str,
            duration: float = 60000.0,
            amplitude: float = 1000.0,
            scale: float = 1.0,
            custom_curve: CustomCurve | None = None,
    ) -> int:
        if not callable(callback):
            raise InvalidTaskError(callback)
        options = TaskOptions.build(
            curve=curve,
            duration=duration,
            amplitude=amplitude,
            scale=scale,
            custom_curve=custom_curve,
        )

        task_id = len(self._tasks)
        task = Task(id=task_id, callback=callback, options=options, last_execution=self._clock())
        self._tasks.append(task)
        self._histories[task_id] = TaskHistory(task_id=task_id)
        logger.info("Task %s registered (curve=%s)", task_id, options.curve.value)
        self._publish(TaskAdded(task_id=task_id, options=options))

        if not self._is_running and not self._is_paused:
            self._is_running = True
            if self._autostart:
                self._spawn_ticker()
        return task_id

    # ------------------------------------------------------------------
    # Intervals
    # ------------------------------------------------------------------

    def compute_interval(self, task: Task, now: float | None = None) -> float:
        """Milliseconds the task should wait since its last execution."""
        if now is None:
            now = self._clock()
        opts = task.options
        elapsed = now - task.last_execution

        if opts.curve == CurveKind.CUSTOM:
            if not callable(opts.custom_curve):
                raise MissingCustomCurveError(task.id)
            raw = opts.custom_curve(elapsed, opts.duration, opts.amplitude, opts.scale)
        else:
            raw = BUILTIN_CURVES[opts.curve](elapsed, opts.duration, opts.amplitude, opts.scale)

        return clamp_interval(raw, distortion=self._distortion, floor=self._min_interval)

    # ------------------------------------------------------------------
    # Tick loop
    # ------------------------------------------------------------------

    def _spawn_ticker(self) -> None:
        if self._ticker is not None and not self._ticker.done():
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; ticker will start on start()")
            return
        self._ticker = loop.create_task(self._run(), name="time-warp-ticker")

    async def _run(self) -> None:
        logger.debug("Tick loop started (every %.0f ms)", self._min_interval)
        while await self.tick():
            await asyncio.sleep(self._min_interval / 1000.0)
        logger.debug("Tick loop halted")

    async def _invoke(self, task: Task) -> None:
        result = task.callback()
        if inspect.isawaitable(result):
            if self._callback_timeout is None:
                await result
            else:
                await asyncio.wait_for(result, self._callback_timeout)

    async def tick(self) -> bool:
        """
        Run one evaluation pass.

        Returns False when the loop should halt. Drive it manually only when the
        engine was built with autostart=False; ticks must not overlap.
        """
        if not self._is_running or self._is_paused or not self._tasks:
            self._is_running = False
            return False

        if all(t.cancelled for t in self._tasks):
            self._is_running = False
            logger.info("All tasks cancelled; scheduler stopped")
            self._publish(Stopped())
            return False

        now = self._clock()
        # Live iteration: tasks registered mid-tick are visited too.
        for task in self._tasks:
            if task.cancelled:
                continue
            try:
                interval = self.compute_interval(task, now)
                if now - task.last_execution < interval:
                    continue

                task.status = TaskStatus.RUNNING
                try:
                    await self._invoke(task)
                finally:
                    if task.status == TaskStatus.RUNNING:
                        task.status = TaskStatus.PENDING

                task.last_execution = now
                self._record(task.id, now)
                self._publish(TaskExecuted(task_id=task.id, time=now))
            except Exception as exc:
                logger.warning("Task %s failed: %s", task.id, exc, exc_info=True)
                self._publish(TaskError(task_id=task.id, error=exc))
        return True

    def _record(self, task_id: int, now: float) -> None:
        # An import may have dropped the entry of a registered task.
        h = self._histories.setdefault(task_id, TaskHistory(task_id=task_id))
        h.executions.append(ExecutionRecord(time=now))

    # ------------------------------------------------------------------
    # Lifecycle control
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self._is_paused or not self._tasks:
            return
        self._is_running = True
        self._spawn_ticker()

    def pause(self) -> None:
        if self._is_paused:
            return
        self._is_paused = True
        self._is_running = False
        logger.info("Scheduler paused")
        self._publish(Paused())

    def resume(self) -> None:
        if not self._is_paused:
            return
        self._is_paused = False
        self._is_running = True
        if self._autostart:
            self._spawn_ticker()
        logger.info("Scheduler resumed")
        self._publish(Resumed())

    def stop(self) -> None:
        self._is_running = False
        self._is_paused = False
        logger.info("Scheduler stopped")
        self._publish(Stopped())

    async def aclose(self) -> None:
        """Stop and dispose of the ticker, aborting an in-flight callback."""
        if self._is_running or self._is_paused:
            self.stop()
        ticker, self._ticker = self._ticker, None
        if ticker is not None and not ticker.done():
            ticker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await ticker

    def cancel_task(self, task_id: int) -> None:
        task = self.get_task(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        task.status = TaskStatus.CANCELLED
        logger.info("Task %s cancelled", task_id)
        self._publish(TaskCancelled(task_id=task_id))

    def apply_distortion(self, factor_fn: Callable[[], float]) -> float:
        if not callable(factor_fn):
            raise InvalidDistortionError(factor_fn)
        factor = factor_fn()
        if isinstance(factor, bool) or not isinstance(factor, (int, float)) \
                or not math.isfinite(factor) or factor <= 0:
            raise InvalidDistortionError(factor)

        self._distortion = float(factor)
        logger.info("Distortion factor set to %s", self._distortion)
        self._publish(DistortionChanged(factor=self._distortion))
        return self._distortion

    # ------------------------------------------------------------------
    # Rewind / history
    # ------------------------------------------------------------------

    async def rewind(self, task_id: int, execution_index: int = 0) -> None:
        """
        Replay the task's action. The looked-up record is not modified; a new
        record with the current time is appended instead.

        Skipped when the task is cancelled or its callback is still running.
        """
        h = self._histories.get(task_id)
        if h is None:
            raise TaskNotFoundError(task_id)
        if isinstance(execution_index, bool) or not isinstance(execution_index, int) \
                or not 0 <= execution_index < len(h.executions):
            raise ExecutionNotFoundError(task_id, execution_index)

        task = self.get_task(task_id)
        if task is None or task.cancelled:
            logger.debug("Rewind of task %s skipped (not active)", task_id)
            return
        if task.status == TaskStatus.RUNNING:
            logger.debug("Rewind of task %s skipped (execution in flight)", task_id)
            return

        try:
            await self._invoke(task)
            self._record(task_id, self._clock())
            self._publish(TaskRewound(task_id=task_id, execution_index=execution_index))
        except Exception as exc:
            logger.warning("Rewind of task %s failed: %s", task_id, exc, exc_info=True)
            self._publish(TaskError(task_id=task_id, error=exc))

    def export_history(self) -> str:
        return dump_histories(self._histories.values())

    def import_history(self, snapshot: str | bytes) -> None:
        # ValueError covers JSON syntax, format and encoding errors.
        try:
            parsed = parse_histories(snapshot)
        except (ValueError, TypeError, RecursionError) as exc:
            raise HistoryImportError(str(exc)) from exc

        self._histories = parsed
        logger.info("Imported history for %d tasks", len(parsed))
        self._publish(HistoryImported(history={k: v.copy() for k, v in parsed.items()}))
