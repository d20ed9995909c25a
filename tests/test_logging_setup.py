# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

from tickpool.logging_setup import LOG_FILE_NAME, _ConsoleNoiseFilter, setup_logging


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter_keeps_own_logs_and_drops_noise() -> None:
    f = _ConsoleNoiseFilter()

    assert f.filter(_record("tickpool.core.pool", logging.DEBUG))
    assert f.filter(_record("tickpool", logging.INFO))
    assert f.filter(_record("asyncio", logging.WARNING))
    assert not f.filter(_record("asyncio", logging.INFO))
    assert not f.filter(_record("py.warnings", logging.WARNING))
    assert not f.filter(_record("urllib3", logging.WARNING))
    assert f.filter(_record("urllib3", logging.ERROR))
    assert not f.filter(_record("tickpoolish", logging.INFO))


def test_setup_logging_writes_file(tmp_path: Path, restore_root_logging) -> None:
    log_file = setup_logging(log_dir=tmp_path / "logs", console_level=logging.WARNING)

    assert log_file == tmp_path / "logs" / LOG_FILE_NAME
    logging.getLogger("tickpool.test").debug("hello from the test")
    for h in logging.getLogger().handlers:
        h.flush()

    assert "hello from the test" in log_file.read_text("utf-8")


def test_setup_logging_without_dir_is_console_only(restore_root_logging) -> None:
    assert setup_logging() is None
    root = logging.getLogger()

    assert not any(isinstance(h, logging.FileHandler) for h in root.handlers)
    assert root.level == logging.DEBUG


def test_setup_logging_twice_does_not_duplicate_handlers(tmp_path: Path, restore_root_logging) -> None:
    setup_logging(log_dir=tmp_path)
    setup_logging(log_dir=tmp_path)

    assert len(logging.getLogger().handlers) == 2
