# tests/test_console.py

from __future__ import annotations

import pytest

from time_warp.connectors.console_connector import run_console_loop


def _scripted(lines: list[str]):
    pending = list(lines)

    async def reader(prompt: str) -> str:
        if not pending:
            raise EOFError
        return pending.pop(0)

    return reader, pending


@pytest.mark.asyncio
async def test_console_runs_commands_until_stop(state, capsys: pytest.CaptureFixture[str]) -> None:
    state.heartbeat_task_id = state.scheduler.register_task(lambda: None, curve="linear")
    reader, pending = _scripted(["", "pause", "bogus", "stop", "resume"])

    await run_console_loop(state, reader=reader)

    out = capsys.readouterr().out
    assert "Paused." in out
    assert "Unknown command: bogus" in out
    # Lines after "stop" are never read.
    assert pending == ["resume"]
    assert state.scheduler.is_paused


@pytest.mark.asyncio
async def test_console_reports_scheduler_errors(state, capsys: pytest.CaptureFixture[str]) -> None:
    reader, _ = _scripted(["cancel 9"])
    await run_console_loop(state, reader=reader)
    assert "No task found with ID 9" in capsys.readouterr().out
