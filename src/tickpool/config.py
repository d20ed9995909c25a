# src/tickpool/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole process.
- Every value has a sane default; malformed values fall back to it.
- Library users can ignore this module and pass arguments to TaskPool directly.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv

ENV_PREFIX = "TICKPOOL"

_UNBOUNDED = {"", "none", "inf", "infinity", "unbounded"}


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_timeout(name: str) -> Optional[float]:
    """Seconds, or None for "no tick timeout" (unset, 0, negative, inf, none)."""
    raw = os.getenv(name)
    if raw is None or raw.strip().lower() in _UNBOUNDED:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    if value <= 0 or math.isinf(value) or math.isnan(value):
        return None
    return value


def _env_path(name: str) -> Optional[Path]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    log_dir: Optional[Path]

    # ---- Pool ----
    concurrency: int
    tick_timeout: Optional[float]

    # ---- Demo runner ----
    demo_jobs: int
    demo_min_delay: float
    demo_max_delay: float
    demo_fail_rate: float
    stats_interval: float

    @staticmethod
    def from_env(*, dotenv: bool = True) -> "Settings":
        if dotenv:
            # Look for .env next to where the process runs, not next to this file.
            load_dotenv(find_dotenv(usecwd=True), override=False)

        return Settings(
            app_name=_env(_k("APP_NAME"), "tickpool") or "tickpool",
            log_level=_env(_k("LOG_LEVEL"), "INFO"),
            log_dir=_env_path(_k("LOG_DIR")),
            concurrency=_env_int(_k("CONCURRENCY"), 1),
            tick_timeout=_env_timeout(_k("TICK_TIMEOUT")),
            demo_jobs=_env_int(_k("DEMO_JOBS"), 10),
            demo_min_delay=_env_float(_k("DEMO_MIN_DELAY"), 0.1),
            demo_max_delay=_env_float(_k("DEMO_MAX_DELAY"), 1.0),
            demo_fail_rate=_env_float(_k("DEMO_FAIL_RATE"), 0.0),
            stats_interval=_env_float(_k("STATS_INTERVAL"), 0.5),
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
