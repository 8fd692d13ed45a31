# src/taskdeck/tasks/task_store.py

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime, timedelta
from enum import Enum

from ..core.ports import Snapshot, SnapshotPersistence
from ..utils import generate_id
from . import progress
from .task_models import (
    Category,
    ProgressTracker,
    SubTask,
    Task,
    TaskFilter,
    TaskMetadata,
    utc_now,
)

logger = logging.getLogger(__name__)


class _Unset(Enum):
    TOKEN = 0


# "argument not given"; lets update_sub_task tell omitted fields from None (clear).
_UNSET = _Unset.TOKEN


class TaskStore:
    """
    Single source of truth for tasks and categories.

    State lives in memory and is the read-of-record. Every mutation updates
    memory first and then hands a full snapshot to the persistence port
    (whole-snapshot writes, no deltas). The snapshot is loaded once, here.

    Semantics:
    - unknown ids are silently ignored (no exception, no write),
    - no foreign-key checks: a task may point at a missing category,
    - the store is the only holder of its entities: inputs are copied on the
      way in and reads hand out copies, so callers cannot change stored state
      without going through a mutation (and its persist + updated_at bump),
    - no validation of names/titles; see validation.py for caller-side checks.

    Single-writer: not thread-safe, call from one thread.
    """

    def __init__(
        self,
        persistence: SnapshotPersistence,
        *,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._persistence = persistence
        self._clock = clock or utc_now
        self._new_id = id_factory or generate_id
        self._tasks: list[Task] = []
        self._categories: list[Category] = []
        self._hydrate()
        logger.info(
            "TaskStore ready tasks=%d categories=%d", len(self._tasks), len(self._categories)
        )

    # ---- low-level helpers ----

    def _hydrate(self) -> None:
        try:
            snap = self._persistence.load()
        except Exception:
            logger.exception("Failed to load task store snapshot; starting empty.")
            return
        if not snap:
            return

        self._categories = [
            c for c in (Category.from_dict(x) for x in snap.get("categories") or []) if c is not None
        ]
        self._tasks = [t for t in (Task.from_dict(x) for x in snap.get("tasks") or []) if t is not None]

    def _persist(self) -> None:
        try:
            self._persistence.save(self.snapshot())
        except Exception:
            logger.exception("Failed to persist task store snapshot.")

    def _now(self) -> datetime:
        return self._clock()

    def _bumped(self, previous: datetime) -> datetime:
        """A timestamp strictly after previous (clock may have coarse resolution)."""
        now = self._now()
        if now <= previous:
            now = previous + timedelta(microseconds=1)
        return now

    def _task_index(self, task_id: str) -> int | None:
        for i, task in enumerate(self._tasks):
            if task.id == task_id:
                return i
        logger.debug("Task not found id=%s", task_id)
        return None

    def _category_index(self, category_id: str) -> int | None:
        for i, cat in enumerate(self._categories):
            if cat.id == category_id:
                return i
        logger.debug("Category not found id=%s", category_id)
        return None

    def _commit_task(self, idx: int, task: Task, **changes) -> Task:
        updated = replace(task, **changes, updated_at=self._bumped(task.updated_at))
        self._tasks[idx] = updated
        self._persist()
        return updated

    def snapshot(self) -> Snapshot:
        return {
            "tasks": [t.to_dict() for t in self._tasks],
            "categories": [c.to_dict() for c in self._categories],
        }

    # ---- categories ----

    def add_category(self, name: str, color: str) -> str:
        category_id = self._new_id()
        self._categories.append(
            Category(id=category_id, name=name, color=color, created_at=self._now())
        )
        self._persist()
        logger.debug("Category added id=%s name=%s", category_id, name)
        return category_id

    def update_category(
        self, category_id: str, *, name: str | None = None, color: str | None = None
    ) -> None:
        idx = self._category_index(category_id)
        if idx is None:
            return
        cat = self._categories[idx]
        self._categories[idx] = replace(
            cat,
            name=cat.name if name is None else name,
            color=cat.color if color is None else color,
        )
        self._persist()

    def delete_category(self, category_id: str) -> None:
        """Remove the category and every task that references it."""
        cats = [c for c in self._categories if c.id != category_id]
        tasks = [t for t in self._tasks if t.category_id != category_id]
        removed_tasks = len(self._tasks) - len(tasks)
        if len(cats) == len(self._categories) and removed_tasks == 0:
            logger.debug("Category not found id=%s", category_id)
            return
        self._categories = cats
        self._tasks = tasks
        self._persist()
        logger.debug("Category deleted id=%s cascaded_tasks=%d", category_id, removed_tasks)

    # ---- tasks ----

    def add_task(
        self,
        *,
        title: str,
        category_id: str,
        description: str = "",
        sub_tasks: Iterable[SubTask] | None = None,
        metadata: TaskMetadata | None = None,
    ) -> str:
        task_id = self._new_id()
        now = self._now()
        self._tasks.append(
            Task(
                id=task_id,
                title=title,
                description=description,
                category_id=category_id,
                sub_tasks=[copy.deepcopy(st) for st in (sub_tasks or [])],
                metadata=copy.deepcopy(metadata) if metadata is not None else TaskMetadata(),
                created_at=now,
                updated_at=now,
            )
        )
        self._persist()
        logger.debug("Task added id=%s category=%s", task_id, category_id)
        return task_id

    def update_task(
        self,
        task_id: str,
        *,
        title: str | None = None,
        description: str | None = None,
        category_id: str | None = None,
        sub_tasks: Iterable[SubTask] | None = None,
        metadata: TaskMetadata | None = None,
    ) -> None:
        """
        Shallow update. sub_tasks and metadata are REPLACED wholesale: to change
        one metadata field, pass dataclasses.replace(task.metadata, field=...).
        """
        changes: dict[str, object] = {}
        if title is not None:
            changes["title"] = title
        if description is not None:
            changes["description"] = description
        if category_id is not None:
            changes["category_id"] = category_id
        if sub_tasks is not None:
            changes["sub_tasks"] = [copy.deepcopy(st) for st in sub_tasks]
        if metadata is not None:
            changes["metadata"] = copy.deepcopy(metadata)

        if not changes:
            return

        idx = self._task_index(task_id)
        if idx is None:
            return
        self._commit_task(idx, self._tasks[idx], **changes)

    def delete_task(self, task_id: str) -> None:
        idx = self._task_index(task_id)
        if idx is None:
            return
        del self._tasks[idx]
        self._persist()

    # ---- sub-tasks ----

    def toggle_sub_task(self, task_id: str, sub_task_id: str) -> None:
        """
        Flip one sub-task. When this leaves every sub-task completed and the
        task has a progress tracker, all steps are marked completed too.
        Un-completing a sub-task later does not touch the steps.
        """
        idx = self._task_index(task_id)
        if idx is None:
            return
        task = self._tasks[idx]
        if not any(st.id == sub_task_id for st in task.sub_tasks):
            logger.debug("Sub-task not found task=%s sub=%s", task_id, sub_task_id)
            return

        subs = [
            replace(st, completed=not st.completed) if st.id == sub_task_id else st
            for st in task.sub_tasks
        ]
        metadata = task.metadata
        tracker = metadata.progress_tracker
        if tracker is not None and all(st.completed for st in subs):
            done_steps = [replace(step, completed=True) for step in tracker.steps]
            metadata = replace(metadata, progress_tracker=replace(tracker, steps=done_steps))
            logger.debug("All sub-tasks done; completed %d steps task=%s", len(done_steps), task_id)

        self._commit_task(idx, task, sub_tasks=subs, metadata=metadata)

    def add_sub_task(
        self,
        task_id: str,
        *,
        description: str = "",
        heading: str | None = None,
        bullet_points: list[str] | None = None,
        timeline: str | None = None,
    ) -> str | None:
        """Append a new, uncompleted sub-task. Returns its id (None if the task is unknown)."""
        idx = self._task_index(task_id)
        if idx is None:
            return None
        task = self._tasks[idx]
        sub = SubTask(
            id=self._new_id(),
            description=description,
            heading=heading,
            bullet_points=list(bullet_points) if bullet_points is not None else None,
            timeline=timeline,
            completed=False,
        )
        self._commit_task(idx, task, sub_tasks=[*task.sub_tasks, sub])
        return sub.id

    def update_sub_task(
        self,
        task_id: str,
        sub_task_id: str,
        *,
        heading: str | None | _Unset = _UNSET,
        description: str | _Unset = _UNSET,
        bullet_points: Iterable[str] | None | _Unset = _UNSET,
        timeline: str | None | _Unset = _UNSET,
        completed: bool | _Unset = _UNSET,
    ) -> None:
        """
        Merge the given fields into one sub-task. Omitted fields are left
        alone; passing None for heading, bullet_points or timeline clears it.
        """
        changes: dict[str, object] = {}
        if heading is not _UNSET:
            changes["heading"] = heading
        if description is not _UNSET:
            changes["description"] = description
        if bullet_points is not _UNSET:
            changes["bullet_points"] = list(bullet_points) if bullet_points is not None else None
        if timeline is not _UNSET:
            changes["timeline"] = timeline
        if completed is not _UNSET:
            changes["completed"] = completed

        idx = self._task_index(task_id)
        if idx is None or not changes:
            return
        task = self._tasks[idx]
        if not any(st.id == sub_task_id for st in task.sub_tasks):
            logger.debug("Sub-task not found task=%s sub=%s", task_id, sub_task_id)
            return
        subs = [replace(st, **changes) if st.id == sub_task_id else st for st in task.sub_tasks]
        self._commit_task(idx, task, sub_tasks=subs)

    def delete_sub_task(self, task_id: str, sub_task_id: str) -> None:
        idx = self._task_index(task_id)
        if idx is None:
            return
        task = self._tasks[idx]
        subs = [st for st in task.sub_tasks if st.id != sub_task_id]
        if len(subs) == len(task.sub_tasks):
            logger.debug("Sub-task not found task=%s sub=%s", task_id, sub_task_id)
            return
        self._commit_task(idx, task, sub_tasks=subs)

    # ---- progress tracker ----

    def update_progress_step(self, task_id: str, step_id: str, completed: bool) -> None:
        """
        Set one step's flag and move current_step to the first incomplete step.
        When every step is complete, current_step keeps its previous value.
        """
        idx = self._task_index(task_id)
        if idx is None:
            return
        task = self._tasks[idx]
        tracker = task.metadata.progress_tracker
        if tracker is None or not any(step.id == step_id for step in tracker.steps):
            logger.debug("Progress step not found task=%s step=%s", task_id, step_id)
            return

        steps = [
            replace(step, completed=completed) if step.id == step_id else step
            for step in tracker.steps
        ]
        current = next((step.id for step in steps if not step.completed), tracker.current_step)
        new_tracker = ProgressTracker(steps=steps, current_step=current)
        self._commit_task(idx, task, metadata=replace(task.metadata, progress_tracker=new_tracker))

    # ---- queries ----

    # Reads return copies; the _find_* helpers below hand out live objects
    # and are for internal use only.

    def _find_task(self, task_id: str) -> Task | None:
        return next((t for t in self._tasks if t.id == task_id), None)

    def list_tasks(self) -> list[Task]:
        return copy.deepcopy(self._tasks)

    def list_categories(self) -> list[Category]:
        return [replace(c) for c in self._categories]

    def get_task(self, task_id: str) -> Task | None:
        task = self._find_task(task_id)
        return copy.deepcopy(task) if task is not None else None

    def get_category(self, category_id: str) -> Category | None:
        cat = next((c for c in self._categories if c.id == category_id), None)
        return replace(cat) if cat is not None else None

    def get_tasks_by_category(self, category_id: str) -> list[Task]:
        return copy.deepcopy([t for t in self._tasks if t.category_id == category_id])

    def get_task_progress(self, task_id: str) -> float:
        task = self._find_task(task_id)
        if task is None:
            return 0.0
        return progress.task_progress(task)

    def get_category_progress(self, category_id: str) -> float:
        return progress.category_progress(t for t in self._tasks if t.category_id == category_id)

    def is_task_completed(self, task_id: str) -> bool:
        task = self._find_task(task_id)
        return task is not None and progress.is_task_completed(task)

    def search_tasks(self, query: str) -> list[Task]:
        """
        Case-insensitive substring match over title, description, sub-task
        descriptions and contact name. A blank query matches everything.
        """
        needle = (query or "").strip().lower()
        if not needle:
            return self.list_tasks()
        return copy.deepcopy([t for t in self._tasks if _task_matches(t, needle)])

    def filter_tasks(
        self,
        task_filter: TaskFilter | str = TaskFilter.ALL,
        *,
        search: str | None = None,
        category_id: str | None = None,
    ) -> list[Task]:
        if not isinstance(task_filter, TaskFilter):
            task_filter = TaskFilter.from_raw(task_filter)

        out = self.search_tasks(search or "")
        if task_filter is TaskFilter.COMPLETED:
            out = [t for t in out if progress.is_task_completed(t)]
        elif task_filter is TaskFilter.IN_PROGRESS:
            out = [t for t in out if not progress.is_task_completed(t)]
        if category_id:
            out = [t for t in out if t.category_id == category_id]
        return out

    # ---- bulk ----

    def reset_store(self) -> None:
        """Drop every task and category (destructive "clear all data")."""
        self._tasks = []
        self._categories = []
        self._persist()
        logger.info("TaskStore reset.")

    def load_sample_data(self) -> int:
        """Append the bundled sample categories and tasks. Returns the number of tasks added."""
        from .sample_data import SAMPLE_CATEGORIES, sample_tasks

        id_map: dict[str, str] = {}
        for sample_id, name, color in SAMPLE_CATEGORIES:
            id_map[sample_id] = self.add_category(name, color)

        added = 0
        for sample in sample_tasks():
            self.add_task(
                title=sample.title,
                description=sample.description,
                category_id=id_map.get(sample.category_id, sample.category_id),
                sub_tasks=sample.sub_tasks,
                metadata=sample.metadata,
            )
            added += 1
        logger.info("Loaded sample data: %d categories, %d tasks", len(id_map), added)
        return added


def _task_matches(task: Task, needle: str) -> bool:
    if needle in task.title.lower() or needle in task.description.lower():
        return True
    if any(needle in st.description.lower() for st in task.sub_tasks):
        return True
    contact = task.metadata.contact
    return bool(contact and contact.name and needle in contact.name.lower())
