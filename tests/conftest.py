# tests/conftest.py

from __future__ import annotations

import logging
from types import SimpleNamespace

import pytest


@pytest.fixture()
def settings() -> SimpleNamespace:
    """
    Minimal settings object compatible with TaskPool.from_settings and the demo runner.

    We intentionally use a SimpleNamespace rather than reading the real environment,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="tickpool-test",
        log_level="DEBUG",
        log_dir=None,
        concurrency=2,
        tick_timeout=None,
        demo_jobs=4,
        demo_min_delay=0.0,
        demo_max_delay=0.01,
        demo_fail_rate=0.0,
        stats_interval=0.01,
    )


@pytest.fixture()
def restore_root_logging():
    """setup_logging() rewires the root logger; put pytest's handlers back afterwards."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    for h in handlers:
        if h not in root.handlers:
            root.addHandler(h)
    root.setLevel(level)
    logging.captureWarnings(False)
