# src/taskdeck/tasks/export.py

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from datetime import date, datetime, timezone
from pathlib import Path

from .progress import task_progress
from .task_models import Category, Task, TaskMetadata

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    "ID",
    "Title",
    "Description",
    "Category",
    "Progress",
    "Sub-Tasks",
    "Contact",
    "Cost",
    "Timeline",
    "Documents Needed",
    "Contingencies",
    "Progress Tracker",
    "Created At",
    "Updated At",
]


def escape_csv(text: str | None) -> str:
    if not text:
        return ""
    return text.replace('"', '""')


def _quoted(text: str | None) -> str:
    return f'"{escape_csv(text)}"'


def _quoted_or_empty(text: str | None) -> str:
    return _quoted(text) if text else ""


def _csv_date(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).date().isoformat()


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _progress_tracker_text(metadata: TaskMetadata) -> str | None:
    """Legacy free-text note if present, else a rendering of the structured steps."""
    if metadata.progress_note:
        return metadata.progress_note
    tracker = metadata.progress_tracker
    if tracker is None:
        return None
    return "; ".join(
        f"{step.title} ({'Completed' if step.completed else 'Pending'})" for step in tracker.steps
    )


def task_to_csv_row(task: Task, categories_by_id: dict[str, Category]) -> str:
    meta = task.metadata
    category = categories_by_id.get(task.category_id)

    sub_tasks_text = "; ".join(
        f'"{st.description} ({"Completed" if st.completed else "Pending"})"' for st in task.sub_tasks
    )

    contact_text = ""
    if meta.contact is not None:
        parts = [meta.contact.name, meta.contact.email, meta.contact.phone]
        contact_text = " - ".join(p for p in parts if p)

    documents_text = "; ".join(meta.documents_needed) if meta.documents_needed else ""

    fields = [
        task.id,
        _quoted(task.title),
        _quoted(task.description),
        _quoted(category.name) if category is not None else "",
        f"{_round_half_up(task_progress(task))}%",
        _quoted(sub_tasks_text),
        _quoted(contact_text),
        _quoted_or_empty(meta.cost),
        _quoted_or_empty(meta.timeline),
        _quoted(documents_text),
        _quoted_or_empty(meta.contingencies),
        _quoted_or_empty(_progress_tracker_text(meta)),
        _csv_date(task.created_at),
        _csv_date(task.updated_at),
    ]
    return ",".join(fields)


def tasks_to_csv(tasks: Iterable[Task], categories: Sequence[Category]) -> str:
    """One header line plus one line per task, joined with "\\n"."""
    by_id = {c.id: c for c in categories}
    lines = [",".join(CSV_HEADERS)]
    lines.extend(task_to_csv_row(t, by_id) for t in tasks)
    return "\n".join(lines)


def export_filename(today: date | None = None) -> str:
    if today is None:
        today = datetime.now(timezone.utc).date()
    return f"tasks_export_{today.strftime('%Y%m%d')}.csv"


def write_csv_export(
    tasks: Iterable[Task],
    categories: Sequence[Category],
    directory: str | Path,
    *,
    today: date | None = None,
) -> Path:
    task_list = list(tasks)
    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / export_filename(today)
    path.write_text(tasks_to_csv(task_list, categories), "utf-8")
    logger.info("Exported %d tasks to %s", len(task_list), path)
    return path
