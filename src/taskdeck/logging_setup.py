# src/taskdeck/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "taskdeck.log"

# Loggers that run on the snapshot writer thread; their retries and per-write
# debug lines would interleave with the REPL prompt.
_BACKGROUND_PREFIXES = ("taskdeck.storage.",)


class _BackgroundChatterFilter(logging.Filter):
    """Console only: background storage records pass at WARNING and above."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith(_BACKGROUND_PREFIXES):
            return record.levelno >= logging.WARNING
        return True


def level_from_name(name: str | None, default: int = logging.WARNING) -> int:
    """'info' -> logging.INFO; unknown or empty names give default."""
    level = logging.getLevelName(str(name or "").strip().upper())
    return level if isinstance(level, int) else default


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskdeck",
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Console handler at console_level (background storage filtered), plus a
    file handler with everything from file_level up. warnings.warn() goes
    through logging as 'py.warnings'.

    Replaces any handlers already on the root logger. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_BackgroundChatterFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
