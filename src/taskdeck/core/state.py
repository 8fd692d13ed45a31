# src/taskdeck/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..settings.settings_store import SettingsStore
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Settings are kept on the state so command handlers can read paths etc.
    settings: Any

    task_store: TaskStore
    settings_store: SettingsStore

    # Objects with a close() to call on shutdown (background writers).
    closeables: list[Any] = field(default_factory=list)
