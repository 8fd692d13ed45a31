# src/taskdeck/storage/json_storage.py

from __future__ import annotations

import contextlib
import json
import logging
import os
import re
from pathlib import Path

from ..core.ports import KeyValueStorage, Snapshot

logger = logging.getLogger(__name__)

# Keys map 1:1 to file names, so anything that would need rewriting is refused.
_VALID_KEY = re.compile(r"[A-Za-z0-9][A-Za-z0-9._-]*")

STORAGE_VERSION = 0


class JsonFileStorage:
    """
    File-backed key-value storage: one UTF-8 file per key under data_dir.

    Writes go to a temp file first and are moved into place with os.replace,
    so a reader never sees a half-written value.
    """

    def __init__(self, data_dir: str | Path) -> None:
        self._dir = Path(data_dir)
        self._dir.mkdir(parents=True, exist_ok=True)

    @property
    def data_dir(self) -> Path:
        return self._dir

    def path_for(self, key: str) -> Path:
        """File for key. Raises ValueError for keys that are not plain file names."""
        if not _VALID_KEY.fullmatch(key):
            raise ValueError(f"invalid storage key {key!r}: use letters, digits, ., _ and -")
        return self._dir / f"{key}.json"

    def get_item(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text("utf-8")

    def set_item(self, key: str, value: str) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(value, "utf-8")
        os.replace(tmp, path)
        with contextlib.suppress(OSError):
            # Task data may hold contact details; keep the file private on disk.
            os.chmod(path, 0o600)
        logger.debug("Stored key=%s bytes=%d path=%s", key, len(value), path)

    def remove_item(self, key: str) -> None:
        path = self.path_for(key)
        with contextlib.suppress(FileNotFoundError):
            path.unlink()


class StoragePartition:
    """
    Snapshot persistence for one named partition of a KeyValueStorage.

    The stored value is the envelope {"state": <snapshot>, "version": 0}.
    save() is synchronous and raises on storage errors; wrap it in a
    BackgroundSnapshotWriter for fire-and-forget writes with retries.
    """

    def __init__(self, storage: KeyValueStorage, key: str) -> None:
        self._storage = storage
        self.key = key

    def load(self) -> Snapshot | None:
        try:
            raw = self._storage.get_item(self.key)
        except OSError:
            logger.exception("Failed to read partition %s", self.key)
            return None
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            logger.error("Partition %s holds malformed JSON; starting empty.", self.key)
            return None
        if not isinstance(data, dict):
            return None
        state = data.get("state", data)
        return state if isinstance(state, dict) else None

    def save(self, snapshot: Snapshot) -> None:
        payload = json.dumps({"state": snapshot, "version": STORAGE_VERSION}, ensure_ascii=False)
        self._storage.set_item(self.key, payload)
