# src/time_warp/scheduler/history.py

"""
History snapshot codec.

Wire format (JSON, 2-space indent, stable key order):

    [
      {"id": 0, "executions": [{"time": 1700000000000.0}, ...]},
      ...
    ]

The engine treats the content as opaque beyond this structure.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from .models import ExecutionRecord, TaskHistory

logger = logging.getLogger(__name__)


class SnapshotFormatError(ValueError):
    pass


def dump_histories(histories: Iterable[TaskHistory]) -> str:
    data = [
        {"id": h.task_id, "executions": [{"time": r.time} for r in h.executions]}
        for h in histories
    ]
    return json.dumps(data, indent=2)


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def parse_histories(raw: str | bytes) -> dict[int, TaskHistory]:
    """
    Decode and validate a snapshot.

    Raises json.JSONDecodeError for malformed JSON and SnapshotFormatError
    for well-formed JSON with the wrong shape.
    """
    data = json.loads(raw)
    if not isinstance(data, list):
        raise SnapshotFormatError("snapshot must be a JSON array")

    out: dict[int, TaskHistory] = {}
    for pos, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise SnapshotFormatError(f"entry {pos} is not an object")
        task_id = entry.get("id")
        if isinstance(task_id, bool) or not isinstance(task_id, int) or task_id < 0:
            raise SnapshotFormatError(f"entry {pos}: id must be a non-negative integer")
        if task_id in out:
            raise SnapshotFormatError(f"entry {pos}: duplicate id {task_id}")
        executions = entry.get("executions")
        if not isinstance(executions, list):
            raise SnapshotFormatError(f"entry {pos}: executions must be an array")

        records: list[ExecutionRecord] = []
        for i, rec in enumerate(executions):
            if not isinstance(rec, dict) or not _is_number(rec.get("time")):
                raise SnapshotFormatError(f"entry {pos}: execution {i} needs a numeric time")
            records.append(ExecutionRecord(time=rec["time"]))
        out[task_id] = TaskHistory(task_id=task_id, executions=records)
    return out


def save_history_file(path: str | Path, snapshot: str) -> None:
    """Atomic write: temp file + os.replace."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(snapshot, "utf-8")
    os.replace(tmp, path)
    with contextlib.suppress(OSError):
        os.chmod(path, 0o600)
    logger.info("Saved execution history to %s", path)


def load_history_file(path: str | Path) -> str | None:
    path = Path(path)
    if not path.exists():
        return None
    return path.read_text("utf-8")
