# src/taskdeck/storage/writer.py

from __future__ import annotations

"""
Background write-through for store snapshots.

Stores call save() synchronously after every mutation; this wrapper hands
the snapshot to a daemon thread and returns immediately:
- pending snapshots coalesce (only the newest one is written),
- a failed write is retried with exponential backoff,
- after the last attempt a warning is logged and the snapshot is dropped.

The in-memory store stays the read-of-record; a lost write only matters for
the next startup.
"""

import logging
import threading
import time
from collections.abc import Callable

from ..core.ports import Snapshot, SnapshotPersistence

logger = logging.getLogger(__name__)


class BackgroundSnapshotWriter:
    def __init__(
        self,
        target: SnapshotPersistence,
        *,
        max_attempts: int = 3,
        retry_delay_seconds: float = 0.5,
        name: str = "snapshot-writer",
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._target = target
        self._max_attempts = max(1, int(max_attempts))
        self._retry_delay = max(0.0, float(retry_delay_seconds))
        self._sleep = sleep
        self._name = name

        self._cond = threading.Condition()
        self._pending: Snapshot | None = None
        self._has_pending = False
        self._busy = False
        self._closed = False

        self.written = 0
        self.failed_writes = 0

        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()

    # ---- SnapshotPersistence ----

    def load(self) -> Snapshot | None:
        return self._target.load()

    def save(self, snapshot: Snapshot) -> None:
        with self._cond:
            if self._closed:
                logger.warning("%s is closed; snapshot not persisted.", self._name)
                return
            self._pending = snapshot
            self._has_pending = True
            self._cond.notify_all()

    # ---- lifecycle ----

    def flush(self, timeout: float | None = None) -> bool:
        """Wait until every queued snapshot has been handled. False on timeout."""
        with self._cond:
            return self._cond.wait_for(lambda: not self._has_pending and not self._busy, timeout)

    def close(self, timeout: float | None = 5.0) -> None:
        """Write whatever is still pending, then stop the worker thread."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()
        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            logger.warning("%s did not stop within %.1fs", self._name, timeout or 0.0)

    # ---- worker ----

    def _run(self) -> None:
        while True:
            with self._cond:
                while not self._has_pending and not self._closed:
                    self._cond.wait()
                if not self._has_pending:
                    return
                snapshot = self._pending
                self._pending = None
                self._has_pending = False
                self._busy = True

            try:
                if snapshot is not None:
                    self._write_with_retry(snapshot)
            finally:
                with self._cond:
                    self._busy = False
                    self._cond.notify_all()

    def _superseded(self) -> bool:
        with self._cond:
            return self._has_pending

    def _write_with_retry(self, snapshot: Snapshot) -> bool:
        delay = self._retry_delay
        for attempt in range(1, self._max_attempts + 1):
            try:
                self._target.save(snapshot)
                self.written += 1
                return True
            except Exception:
                logger.exception(
                    "%s: snapshot write failed (attempt %d/%d)", self._name, attempt, self._max_attempts
                )

            if attempt == self._max_attempts:
                break
            if self._superseded():
                # A newer snapshot is queued; it replaces this one.
                logger.debug("%s: dropping stale snapshot after failure", self._name)
                return False
            self._sleep(delay)
            delay *= 2

        self.failed_writes += 1
        logger.warning(
            "%s: giving up after %d attempts; changes are kept in memory only.",
            self._name,
            self._max_attempts,
        )
        return False
