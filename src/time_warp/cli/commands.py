# src/time_warp/cli/commands.py

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable

from ..core.state import AppState

CommandResult = str | Awaitable[str]
CommandHandler = Callable[[AppState, list[str]], CommandResult]


class CommandRegistry:
    """Simple word-command registry used by the console (help, pause, rewind, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "rewind 3".
        Returns a reply string, or None for an empty line.
        Scheduler errors propagate to the caller.
        """
        parts = line.split()
        if not parts:
            return None

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: {name}. Use help to list available commands."

        result = handler(state, args)
        if inspect.isawaitable(result):
            result = await result
        return result

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  {name} - {help_text}")
        lines.append("  stop - stop the simulation and print the history (also: exit, quit)")
        return "\n".join(lines)


registry = CommandRegistry()


def _task_id_arg(state: AppState, args: list[str], pos: int) -> int:
    if len(args) > pos:
        return int(args[pos])
    if state.heartbeat_task_id is None:
        raise ValueError("no heartbeat task registered")
    return state.heartbeat_task_id


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    sched = state.scheduler
    if sched.is_paused:
        mode = "PAUSED"
    elif sched.is_running:
        mode = "RUNNING"
    else:
        mode = "STOPPED"
    lines = [
        "Status:",
        f"  Scheduler: {mode}",
        f"  Distortion: {sched.distortion_factor}x",
        f"  Tick: {sched.min_interval:.0f} ms",
    ]
    hist = sched.histories()
    for task in sched.tasks:
        runs = len(hist[task.id].executions) if task.id in hist else 0
        lines.append(f"  Task {task.id}: {task.status.value} ({task.options.curve.value}, {runs} runs)")
    return "\n".join(lines)


def cmd_stress(state: AppState, args: list[str]) -> str:
    factor = state.settings.stress_factor
    state.scheduler.apply_distortion(lambda: factor)
    return "Stress mode activated!"


def cmd_rest(state: AppState, args: list[str]) -> str:
    factor = state.settings.rest_factor
    state.scheduler.apply_distortion(lambda: factor)
    return "Rest mode activated!"


def cmd_distort(state: AppState, args: list[str]) -> str:
    """
    distort <factor> -> set the distortion factor directly
    """
    if not args:
        return f"Distortion is {state.scheduler.distortion_factor}x. Usage: distort <factor>."
    try:
        factor = float(args[0])
    except ValueError:
        return "Usage: distort <factor> (a positive number)."
    state.scheduler.apply_distortion(lambda: factor)
    return f"Distortion set to {factor}x."


async def cmd_rewind(state: AppState, args: list[str]) -> str:
    """
    rewind            -> replay the first heartbeat
    rewind <i>        -> replay execution i
    rewind <i> <id>   -> replay execution i of task id
    """
    try:
        index = int(args[0]) if args else 0
        task_id = _task_id_arg(state, args, 1)
    except ValueError:
        return "Usage: rewind [index] [task_id]."
    await state.scheduler.rewind(task_id, index)
    return f"Rewind of task {task_id} requested."


def cmd_pause(state: AppState, args: list[str]) -> str:
    was_paused = state.scheduler.is_paused
    state.scheduler.pause()
    return "Scheduler was already paused." if was_paused else "Paused."


def cmd_resume(state: AppState, args: list[str]) -> str:
    was_paused = state.scheduler.is_paused
    state.scheduler.resume()
    return "Resumed." if was_paused else "Scheduler was not paused."


def cmd_cancel(state: AppState, args: list[str]) -> str:
    try:
        task_id = _task_id_arg(state, args, 0)
    except ValueError:
        return "Usage: cancel [task_id]."
    state.scheduler.cancel_task(task_id)
    return f"Task {task_id} cancelled."


def cmd_history(state: AppState, args: list[str]) -> str:
    return state.scheduler.export_history()


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show scheduler state and tasks.")
registry.register("stress", cmd_stress, help_text="Speed up: apply the stress distortion factor.")
registry.register("rest", cmd_rest, help_text="Slow down: apply the rest distortion factor.")
registry.register("distort", cmd_distort, help_text="Set the distortion factor: distort <factor>.")
registry.register("rewind", cmd_rewind, help_text="Replay an execution: rewind [index] [task_id].")
registry.register("pause", cmd_pause, help_text="Pause scheduling.")
registry.register("resume", cmd_resume, help_text="Resume scheduling.")
registry.register("cancel", cmd_cancel, help_text="Cancel a task: cancel [task_id].")
registry.register("history", cmd_history, help_text="Print the execution history as JSON.")
