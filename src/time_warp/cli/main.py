# src/time_warp/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, registers the heartbeat task, then runs
the console REPL until stop/EOF/Ctrl+C. On the way out the execution history
is printed and (optionally) saved.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state, persist_history, restore_history
from ..config import get_settings
from ..connectors.console_connector import print_event, run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging
from .heartbeat import register_heartbeat

logger = logging.getLogger(__name__)


async def _shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        state.scheduler.stop()
        print("Heartbeat history:", state.scheduler.export_history(), flush=True)
        persist_history(state)
    except Exception:
        logger.exception("Failed to export history.")

    try:
        await state.scheduler.aclose()
    except Exception:
        logger.debug("Scheduler close failed.", exc_info=True)


async def run(settings) -> None:
    state = create_initial_state(settings=settings)
    state.scheduler.subscribe(print_event)

    # Register first: restoring afterwards keeps the saved entry for the heartbeat id.
    register_heartbeat(state)
    restore_history(state)

    try:
        await run_console_loop(state)
    finally:
        await _shutdown(state)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")

    logger.info("Bye.")


if __name__ == "__main__":
    main()
