# src/taskdeck/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires storage, write-through and the stores into AppState,
- flushes pending writes on shutdown.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import SnapshotPersistence
from ..core.state import AppState
from ..settings.settings_store import SettingsStore
from ..storage.json_storage import JsonFileStorage, StoragePartition
from ..storage.writer import BackgroundSnapshotWriter
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.log_dir.mkdir(parents=True, exist_ok=True)


def _partition(settings, storage: JsonFileStorage, key: str) -> tuple[SnapshotPersistence, object | None]:
    part = StoragePartition(storage, key)
    if not settings.background_writes:
        return part, None
    writer = BackgroundSnapshotWriter(
        part,
        max_attempts=settings.persist_max_attempts,
        retry_delay_seconds=settings.persist_retry_delay_seconds,
        name=f"writer:{key}",
    )
    return writer, writer


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)
    storage = JsonFileStorage(settings.data_dir)

    task_port, task_writer = _partition(settings, storage, settings.task_store_key)
    settings_port, settings_writer = _partition(settings, storage, settings.settings_store_key)

    state = AppState(
        settings=settings,
        task_store=TaskStore(task_port),
        settings_store=SettingsStore(settings_port),
        closeables=[w for w in (task_writer, settings_writer) if w is not None],
    )
    logger.info("State ready data_dir=%s background_writes=%s", settings.data_dir, settings.background_writes)
    return state


def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown: write pending snapshots (no exceptions should escape)."""
    for item in state.closeables:
        try:
            item.close()
        except Exception:
            logger.exception("Failed to close %r", item)
    state.closeables.clear()
