# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest
import pytest_asyncio

from time_warp.cli.heartbeat import HeartbeatLog
from time_warp.core.state import AppState
from time_warp.scheduler.engine import TimeWarpScheduler

from .fakes import EventRecorder, FakeClock


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="time-warp-test",
        log_level="DEBUG",
        min_interval_ms=100.0,
        callback_timeout_s=None,
        heartbeat_curve="sinusoidal",
        heartbeat_duration_ms=10000.0,
        heartbeat_amplitude_ms=1000.0,
        heartbeat_scale=1.2,
        stress_factor=0.5,
        rest_factor=2.0,
        data_dir=tmp_path,
        heartbeat_log_path=tmp_path / "heartbeats.log",
        history_path=tmp_path / "history.json",
        save_history=True,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def recorder() -> EventRecorder:
    return EventRecorder()


@pytest.fixture()
def engine(clock: FakeClock, recorder: EventRecorder) -> TimeWarpScheduler:
    """
    Engine driven tick by tick: no background ticker, fake clock.
    Tests call `await engine.tick()` themselves.
    """
    sched = TimeWarpScheduler(min_interval=100, clock=clock, autostart=False)
    sched.subscribe(recorder)
    return sched


@pytest_asyncio.fixture()
async def live_engine(recorder: EventRecorder):
    """Engine with a real ticker and a 5 ms tick."""
    sched = TimeWarpScheduler(min_interval=5)
    sched.subscribe(recorder)
    yield sched
    await sched.aclose()


@pytest.fixture()
def state(settings: SimpleNamespace, clock: FakeClock) -> AppState:
    return AppState(
        settings=settings,
        scheduler=TimeWarpScheduler(min_interval=100, clock=clock, autostart=False),
        heartbeat_log=HeartbeatLog(settings.heartbeat_log_path),
    )
