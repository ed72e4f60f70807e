# src/time_warp/cli/heartbeat.py

"""
Heartbeat demo task.

Each beat prints a line with the current rate and appends the same line to a
plain-text log. File I/O runs in a worker thread so the tick loop is not blocked.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from pathlib import Path

from ..core.state import AppState

logger = logging.getLogger(__name__)


class HeartbeatLog:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _append_sync(self, line: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as fh:
            fh.write(line + "\n")

    async def append(self, line: str) -> None:
        await asyncio.to_thread(self._append_sync, line)


def beats_per_minute(interval_ms: float) -> int:
    return round(60000.0 / interval_ms)


def format_beat(ts: datetime, bpm: int) -> str:
    return f"Heartbeat at {ts.isoformat(timespec='milliseconds')}, BPM: {bpm}"


def make_heartbeat(state: AppState):
    """Build the async callback; it reads its own task id from state at call time."""

    async def heartbeat() -> None:
        scheduler = state.scheduler
        task = scheduler.get_task(state.heartbeat_task_id) if state.heartbeat_task_id is not None else None
        interval = scheduler.compute_interval(task) if task is not None else scheduler.min_interval
        line = format_beat(datetime.now().astimezone(), beats_per_minute(interval))
        print(f"<3 {line}", flush=True)
        await state.heartbeat_log.append(line)

    return heartbeat


def register_heartbeat(state: AppState) -> int:
    s = state.settings
    task_id = state.scheduler.register_task(
        make_heartbeat(state),
        curve=s.heartbeat_curve,
        duration=s.heartbeat_duration_ms,
        amplitude=s.heartbeat_amplitude_ms,
        scale=s.heartbeat_scale,
    )
    state.heartbeat_task_id = task_id
    logger.info("Heartbeat registered as task %s (log: %s)", task_id, state.heartbeat_log.path)
    return task_id
