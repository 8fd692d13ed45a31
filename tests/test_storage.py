# tests/test_storage.py

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from taskdeck.storage.json_storage import JsonFileStorage, StoragePartition
from taskdeck.storage.writer import BackgroundSnapshotWriter
from taskdeck.tasks.task_models import SubTask
from taskdeck.tasks.task_store import TaskStore

from .fakes import BlockingPersistence, FakePersistence


def test_json_storage_set_get_remove(tmp_path: Path) -> None:
    storage = JsonFileStorage(tmp_path / "kv")
    assert storage.get_item("task-store") is None

    storage.set_item("task-store", '{"a": 1}')
    assert storage.get_item("task-store") == '{"a": 1}'
    assert storage.path_for("task-store").name == "task-store.json"
    assert not storage.path_for("task-store").with_suffix(".tmp").exists()

    storage.remove_item("task-store")
    assert storage.get_item("task-store") is None
    storage.remove_item("task-store")


@pytest.mark.parametrize("key", ["../../etc/passwd", "task store", "", ".hidden", "a/b", " task-store"])
def test_unsafe_keys_are_rejected(tmp_path: Path, key: str) -> None:
    storage = JsonFileStorage(tmp_path)
    with pytest.raises(ValueError):
        storage.path_for(key)
    with pytest.raises(ValueError):
        storage.set_item(key, "{}")
    assert list(tmp_path.iterdir()) == []


def test_distinct_keys_get_distinct_files(tmp_path: Path) -> None:
    storage = JsonFileStorage(tmp_path)
    storage.set_item("task_store", "a")
    storage.set_item("task-store", "b")
    storage.set_item("task.store", "c")
    assert storage.get_item("task_store") == "a"
    assert storage.get_item("task-store") == "b"
    assert len(list(tmp_path.glob("*.json"))) == 3


def test_partition_writes_envelope(tmp_path: Path) -> None:
    storage = JsonFileStorage(tmp_path)
    part = StoragePartition(storage, "task-store")
    part.save({"tasks": [], "categories": []})

    raw = json.loads(storage.get_item("task-store"))
    assert raw == {"state": {"tasks": [], "categories": []}, "version": 0}
    assert part.load() == {"tasks": [], "categories": []}


def test_partition_tolerates_missing_and_malformed(tmp_path: Path) -> None:
    storage = JsonFileStorage(tmp_path)
    part = StoragePartition(storage, "settings-store")
    assert part.load() is None

    storage.set_item("settings-store", "{not json")
    assert part.load() is None

    storage.set_item("settings-store", "[1, 2]")
    assert part.load() is None


def test_task_store_round_trip_through_files(tmp_path: Path) -> None:
    part = StoragePartition(JsonFileStorage(tmp_path), "task-store")
    store = TaskStore(part)
    cid = store.add_category("Finance", "#F59E0B")
    tid = store.add_task(title="Open account", category_id=cid, sub_tasks=[SubTask(description="a")])
    store.toggle_sub_task(tid, store.get_task(tid).sub_tasks[0].id)

    reloaded = TaskStore(StoragePartition(JsonFileStorage(tmp_path), "task-store"))
    assert reloaded.get_category(cid).color == "#F59E0B"
    assert reloaded.get_task_progress(tid) == 100


def test_writer_persists_in_background() -> None:
    target = FakePersistence(initial={"tasks": [], "categories": []})
    writer = BackgroundSnapshotWriter(target, sleep=lambda _s: None)
    try:
        assert writer.load() == {"tasks": [], "categories": []}
        writer.save({"n": 1})
        assert writer.flush(timeout=5.0)
        assert target.saved == [{"n": 1}]
        assert writer.written == 1
    finally:
        writer.close()


def test_writer_retries_with_backoff() -> None:
    delays: list[float] = []
    target = FakePersistence(fail_saves=2)
    writer = BackgroundSnapshotWriter(
        target, max_attempts=3, retry_delay_seconds=0.1, sleep=delays.append
    )
    try:
        writer.save({"n": 1})
        assert writer.flush(timeout=5.0)
    finally:
        writer.close()

    assert target.saved == [{"n": 1}]
    assert target.save_calls == 3
    assert delays == pytest.approx([0.1, 0.2])
    assert writer.failed_writes == 0


def test_writer_gives_up_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="taskdeck.storage.writer")
    target = FakePersistence(fail_saves=10)
    writer = BackgroundSnapshotWriter(target, max_attempts=2, sleep=lambda _s: None)
    try:
        writer.save({"n": 1})
        assert writer.flush(timeout=5.0)
    finally:
        writer.close()

    assert target.saved == []
    assert target.save_calls == 2
    assert writer.failed_writes == 1
    assert "giving up after 2 attempts" in caplog.text


def test_writer_coalesces_pending_snapshots() -> None:
    target = BlockingPersistence()
    writer = BackgroundSnapshotWriter(target, sleep=lambda _s: None)
    try:
        writer.save({"n": 1})
        assert target.entered.wait(timeout=5.0)
        writer.save({"n": 2})
        writer.save({"n": 3})
        target.release.set()
        assert writer.flush(timeout=5.0)
    finally:
        writer.close()

    assert target.saved == [{"n": 1}, {"n": 3}]


def test_writer_close_drains_pending() -> None:
    target = FakePersistence()
    writer = BackgroundSnapshotWriter(target, sleep=lambda _s: None)
    writer.save({"n": 1})
    writer.close(timeout=5.0)
    assert target.saved == [{"n": 1}]

    writer.save({"n": 2})
    assert target.saved == [{"n": 1}]
