# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskdeck.core.state import AppState
from taskdeck.settings.settings_store import SettingsStore
from taskdeck.tasks.task_store import TaskStore

from .fakes import FakeClock, FakePersistence


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskdeck-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        log_dir=tmp_path / "logs",
        export_dir=tmp_path / "exports",
        task_store_key="task-store",
        settings_store_key="settings-store",
        background_writes=False,
        persist_max_attempts=2,
        persist_retry_delay_seconds=0.0,
    )


@pytest.fixture()
def persistence() -> FakePersistence:
    return FakePersistence()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(persistence: FakePersistence, clock: FakeClock) -> TaskStore:
    return TaskStore(persistence, clock=clock)


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore) -> AppState:
    """AppState with in-memory persistence (no files)."""
    return AppState(
        settings=settings,
        task_store=store,
        settings_store=SettingsStore(FakePersistence()),
    )
