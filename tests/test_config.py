# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from time_warp.config import Settings
from time_warp.scheduler.engine import TimeWarpScheduler


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("TIME_WARP_MIN_INTERVAL_MS", "TIME_WARP_CALLBACK_TIMEOUT_S", "TIME_WARP_DATA_DIR",
                "TIME_WARP_HEARTBEAT_CURVE", "TIME_WARP_SAVE_HISTORY", "TIME_WARP_HISTORY_PATH"):
        monkeypatch.delenv(key, raising=False)
    s = Settings.from_env()
    assert s.min_interval_ms == 100.0
    assert s.callback_timeout_s is None
    assert s.heartbeat_curve == "sinusoidal"
    assert s.save_history is True
    assert s.history_path == Path(".local/time_warp") / "history.json"


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TIME_WARP_MIN_INTERVAL_MS", "25")
    monkeypatch.setenv("TIME_WARP_CALLBACK_TIMEOUT_S", "1.5")
    monkeypatch.setenv("TIME_WARP_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("TIME_WARP_HEARTBEAT_CURVE", " Exponential ")
    monkeypatch.setenv("TIME_WARP_SAVE_HISTORY", "off")

    s = Settings.from_env()
    assert s.min_interval_ms == 25.0
    assert s.callback_timeout_s == 1.5
    assert s.heartbeat_curve == "exponential"
    assert s.save_history is False
    assert s.heartbeat_log_path == tmp_path / "heartbeats.log"

    sched = TimeWarpScheduler.from_settings(s)
    assert sched.min_interval == 25.0


@pytest.mark.parametrize("raw", ["abc", "-5", "0", "nan", ""])
def test_bad_numbers_fall_back(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("TIME_WARP_MIN_INTERVAL_MS", raw)
    monkeypatch.setenv("TIME_WARP_CALLBACK_TIMEOUT_S", raw)
    s = Settings.from_env()
    assert s.min_interval_ms == 100.0
    assert s.callback_timeout_s is None
