# tests/test_commands.py

from __future__ import annotations

import pytest

from time_warp.cli.commands import CommandRegistry, registry
from time_warp.core.errors import ExecutionNotFoundError, InvalidDistortionError
from time_warp.scheduler.models import TaskStatus

from .fakes import FakeClock


@pytest.mark.asyncio
async def test_command_registry_routes_sync_and_async(state) -> None:
    reg = CommandRegistry()
    called = {"a": 0, "b": 0}

    def a(state, args):
        called["a"] += 1
        return "a:" + ",".join(args)

    async def b(state, args):
        called["b"] += 1
        return "b"

    reg.register("a", a, "a", aliases=["alpha"])
    reg.register("b", b, "b")

    assert await reg.handle(state, "a x y") == "a:x,y"
    assert await reg.handle(state, "ALPHA") == "a:"
    assert await reg.handle(state, "b") == "b"
    assert called == {"a": 2, "b": 1}


@pytest.mark.asyncio
async def test_command_registry_unknown_and_empty(state) -> None:
    assert await registry.handle(state, "   ") is None
    assert "Unknown command" in (await registry.handle(state, "nope") or "")
    assert "rewind" in (await registry.handle(state, "help") or "")


@pytest.mark.asyncio
async def test_stress_and_rest_apply_configured_factors(state) -> None:
    await registry.handle(state, "stress")
    assert state.scheduler.distortion_factor == state.settings.stress_factor
    await registry.handle(state, "rest")
    assert state.scheduler.distortion_factor == state.settings.rest_factor


@pytest.mark.asyncio
async def test_distort_parses_and_validates(state) -> None:
    assert "Usage" in (await registry.handle(state, "distort abc") or "")
    assert await registry.handle(state, "distort 1.5") == "Distortion set to 1.5x."
    assert state.scheduler.distortion_factor == 1.5
    with pytest.raises(InvalidDistortionError):
        await registry.handle(state, "distort -1")


@pytest.mark.asyncio
async def test_pause_resume_cancel_target_heartbeat(state) -> None:
    state.heartbeat_task_id = state.scheduler.register_task(lambda: None, curve="linear")

    assert await registry.handle(state, "pause") == "Paused."
    assert state.scheduler.is_paused
    assert await registry.handle(state, "pause") == "Scheduler was already paused."
    assert await registry.handle(state, "resume") == "Resumed."
    assert state.scheduler.is_running

    await registry.handle(state, "cancel")
    assert state.scheduler.get_task_status(state.heartbeat_task_id) == TaskStatus.CANCELLED
    assert "cancelled" in (await registry.handle(state, "status") or "")


@pytest.mark.asyncio
async def test_rewind_command(state, clock: FakeClock) -> None:
    calls = []
    state.heartbeat_task_id = state.scheduler.register_task(lambda: calls.append(1), curve="linear", amplitude=100)

    with pytest.raises(ExecutionNotFoundError):
        await registry.handle(state, "rewind")

    clock.advance(100)
    await state.scheduler.tick()
    assert await registry.handle(state, "rewind 0") == "Rewind of task 0 requested."
    assert calls == [1, 1]
    assert "Usage" in (await registry.handle(state, "rewind x") or "")


@pytest.mark.asyncio
async def test_cancel_without_heartbeat_shows_usage(state) -> None:
    assert "Usage" in (await registry.handle(state, "cancel") or "")
