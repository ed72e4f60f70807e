# src/time_warp/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..cli.heartbeat import HeartbeatLog
    from ..scheduler.engine import TimeWarpScheduler


@dataclass
class AppState:
    """Everything the demo CLI shares between the heartbeat, commands and console."""

    settings: Any
    scheduler: TimeWarpScheduler
    heartbeat_log: HeartbeatLog
    heartbeat_task_id: int | None = None
