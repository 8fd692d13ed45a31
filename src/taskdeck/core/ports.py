# src/taskdeck/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the stores.

The stores depend on Protocols instead of concrete implementations.
This keeps storage swappable and makes testing easier.
"""

from typing import Any, Protocol

Snapshot = dict[str, Any]
# Full JSON-ready state of one store, e.g. {"tasks": [...], "categories": [...]}.


class KeyValueStorage(Protocol):
    """Durable string key-value storage (AsyncStorage-like)."""

    def get_item(self, key: str) -> str | None: ...
    def set_item(self, key: str, value: str) -> None: ...
    def remove_item(self, key: str) -> None: ...


class SnapshotPersistence(Protocol):
    """
    Whole-snapshot persistence for one store.

    load() is called once at startup; save() after every mutation.
    Implementations may make save() asynchronous (fire-and-forget).
    """

    def load(self) -> Snapshot | None: ...
    def save(self, snapshot: Snapshot) -> None: ...
