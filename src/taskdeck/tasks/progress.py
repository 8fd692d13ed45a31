# src/taskdeck/tasks/progress.py

"""
Derived values. Never stored; always recomputed from sub-task flags.
"""

from __future__ import annotations

from collections.abc import Iterable

from .task_models import ProgressTracker, Task


def is_task_completed(task: Task) -> bool:
    return bool(task.sub_tasks) and all(st.completed for st in task.sub_tasks)


def task_progress(task: Task) -> float:
    """Percent of completed sub-tasks; 0 for a task without sub-tasks."""
    total = len(task.sub_tasks)
    if total == 0:
        return 0.0
    done = sum(1 for st in task.sub_tasks if st.completed)
    return 100.0 * done / total


def category_progress(tasks: Iterable[Task]) -> float:
    """
    Aggregate over all sub-tasks of the given tasks (not an average of
    per-task percentages). 0 when there are no sub-tasks at all.
    """
    total = 0
    done = 0
    for task in tasks:
        total += len(task.sub_tasks)
        done += sum(1 for st in task.sub_tasks if st.completed)
    if total == 0:
        return 0.0
    return 100.0 * done / total


def completed_step_count(tracker: ProgressTracker | None) -> int:
    if tracker is None:
        return 0
    return sum(1 for step in tracker.steps if step.completed)
