# src/time_warp/connectors/console_connector.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from collections.abc import Awaitable, Callable
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.errors import TimeWarpError
from ..core.events import SchedulerEvent, describe
from ..core.state import AppState

logger = logging.getLogger(__name__)

LineReader = Callable[[str], Awaitable[str]]

EXIT_COMMANDS = ("stop", "exit", "quit")


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def print_event(event: SchedulerEvent) -> None:
    """Event subscriber: one timestamped line per scheduler event."""
    _print_ts(describe(event))


async def read_line(prompt: str) -> str:
    """
    input() in a daemon thread.

    A daemon thread (instead of asyncio.to_thread) lets the process exit on
    Ctrl+C while a prompt is still waiting for input.
    """
    loop = asyncio.get_running_loop()
    fut: asyncio.Future[str] = loop.create_future()

    def _deliver(line: str | None, exc: BaseException | None) -> None:
        if fut.done():
            return
        if exc is not None:
            fut.set_exception(exc)
        else:
            fut.set_result(line or "")

    def _worker() -> None:
        try:
            line = input(prompt)
        except BaseException as e:  # EOFError / KeyboardInterrupt are re-raised in the loop
            with contextlib.suppress(RuntimeError):
                loop.call_soon_threadsafe(_deliver, None, e)
            return
        with contextlib.suppress(RuntimeError):
            loop.call_soon_threadsafe(_deliver, line, None)

    threading.Thread(target=_worker, name="console-input", daemon=True).start()
    return await fut


async def run_console_loop(state: AppState, *, reader: LineReader | None = None) -> None:
    reader = reader or read_line
    logger.info("Console connector started.")
    _print_ts("Heartbeat simulation started! Type help for commands, stop to quit.")

    while True:
        try:
            user_input = (await reader("Command: ")).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in EXIT_COMMANDS:
            logger.info("Console exit command received.")
            break

        try:
            reply = await command_registry.handle(state, user_input)
        except TimeWarpError as e:
            reply = str(e)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        if reply is not None:
            _print_ts(reply)

    logger.info("Console connector finished.")
