# src/time_warp/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the scheduler and the heartbeat log into AppState,
- restores / persists the execution history as JSON (optional).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.errors import HistoryImportError
from ..core.state import AppState
from ..scheduler.engine import TimeWarpScheduler
from ..scheduler.history import load_history_file, save_history_file
from .heartbeat import HeartbeatLog

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.heartbeat_log_path.parent.mkdir(parents=True, exist_ok=True)
    settings.history_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    return AppState(
        settings=settings,
        scheduler=TimeWarpScheduler.from_settings(settings),
        heartbeat_log=HeartbeatLog(settings.heartbeat_log_path),
    )


def restore_history(state: AppState) -> bool:
    """Load a previously saved snapshot. A corrupt file is logged and ignored."""
    if not getattr(state.settings, "save_history", False):
        return False
    path = state.settings.history_path
    try:
        snapshot = load_history_file(path)
    except OSError:
        logger.exception("Failed to read history from %s", path)
        return False
    if snapshot is None:
        return False
    try:
        state.scheduler.import_history(snapshot)
    except HistoryImportError:
        logger.exception("Ignoring unreadable history file %s", path)
        return False
    logger.info("Restored history from %s", path)
    return True


def persist_history(state: AppState) -> None:
    if not getattr(state.settings, "save_history", False):
        return
    path = state.settings.history_path
    try:
        save_history_file(path, state.scheduler.export_history())
    except OSError:
        logger.exception("Failed to save history to %s", path)
