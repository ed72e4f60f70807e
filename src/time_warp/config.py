# src/time_warp/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Engine code never reads the environment; it receives values explicitly.
- Malformed values fall back to defaults instead of crashing the demo.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TIME_WARP"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if math.isfinite(value) and value > 0 else default


def _env_optional_float(name: str) -> float | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if math.isfinite(value) and value > 0 else None


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Engine ----
    min_interval_ms: float
    callback_timeout_s: float | None

    # ---- Heartbeat demo ----
    heartbeat_curve: str
    heartbeat_duration_ms: float
    heartbeat_amplitude_ms: float
    heartbeat_scale: float
    stress_factor: float
    rest_factor: float

    # ---- Local data paths ----
    data_dir: Path
    heartbeat_log_path: Path
    history_path: Path
    save_history: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "time-warp").strip() or "time-warp"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/time_warp"))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            min_interval_ms=_env_float(_k("MIN_INTERVAL_MS"), 100.0),
            callback_timeout_s=_env_optional_float(_k("CALLBACK_TIMEOUT_S")),
            # Curve names are validated by the engine at registration time.
            heartbeat_curve=_env(_k("HEARTBEAT_CURVE"), "sinusoidal").strip().lower(),
            heartbeat_duration_ms=_env_float(_k("HEARTBEAT_DURATION_MS"), 10000.0),
            heartbeat_amplitude_ms=_env_float(_k("HEARTBEAT_AMPLITUDE_MS"), 1000.0),
            heartbeat_scale=_env_float(_k("HEARTBEAT_SCALE"), 1.2),
            stress_factor=_env_float(_k("STRESS_FACTOR"), 0.5),
            rest_factor=_env_float(_k("REST_FACTOR"), 2.0),
            data_dir=data_dir,
            heartbeat_log_path=_env_path(_k("HEARTBEAT_LOG_PATH"), data_dir / "heartbeats.log"),
            history_path=_env_path(_k("HISTORY_PATH"), data_dir / "history.json"),
            save_history=_env_bool(_k("SAVE_HISTORY"), True),
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
