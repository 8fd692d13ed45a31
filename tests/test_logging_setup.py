# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from taskdeck.logging_setup import _BackgroundChatterFilter, level_from_name, setup_logging


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_background_storage_records_need_warning() -> None:
    f = _BackgroundChatterFilter()
    assert not f.filter(_record("taskdeck.storage.writer", logging.INFO))
    assert f.filter(_record("taskdeck.storage.writer", logging.WARNING))
    assert f.filter(_record("taskdeck.tasks.task_store", logging.DEBUG))
    assert f.filter(_record("py.warnings", logging.WARNING))


def test_level_from_name() -> None:
    assert level_from_name("info") == logging.INFO
    assert level_from_name(" DEBUG ") == logging.DEBUG
    assert level_from_name("loud") == logging.WARNING
    assert level_from_name(None, default=logging.ERROR) == logging.ERROR


@pytest.fixture()
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        if h not in handlers:
            h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    logging.captureWarnings(False)


def test_setup_logging_writes_file(tmp_path: Path, restore_root_logger) -> None:
    log_file = setup_logging(log_dir=tmp_path / "logs")
    assert log_file == tmp_path / "logs" / "taskdeck.log"

    logging.getLogger("taskdeck.storage.writer").debug("wrote snapshot")
    for h in logging.getLogger().handlers:
        h.flush()
    assert "wrote snapshot" in log_file.read_text("utf-8")

    console = [
        h
        for h in logging.getLogger().handlers
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
    ]
    assert len(console) == 1
    assert console[0].level == logging.WARNING
