# src/taskdeck/tasks/date_matcher.py

"""
Calendar placement: decide whether a task shows up on a given day.

A task is on a day when any of these holds:
- it was created on that (local) day,
- it was last updated on that (local) day,
- its metadata timeline mentions that date,
- any sub-task timeline mentions that date.

Dates inside free text are read DAY-FIRST: "5/6/23" is 5 June 2023, never
May 6th. Separators "/", "-" and "." are accepted; two-digit years mean
20YY. Matches that are not real calendar dates (32/1/24, 31/2/24, 1/13/24)
are ignored.
"""

from __future__ import annotations

import calendar
import re
from collections.abc import Iterable
from datetime import date, datetime, timedelta

from .task_models import Task

TIMELINE_DATE_RE = re.compile(r"(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{2,4})")


def _as_day(value: date | datetime) -> date:
    if isinstance(value, datetime):
        # Aware timestamps are compared in local time.
        return value.astimezone().date() if value.tzinfo is not None else value.date()
    return value


def parse_timeline_dates(text: str | None) -> list[date]:
    """All valid day-first dates mentioned in text, in order of appearance."""
    if not text:
        return []
    out: list[date] = []
    for m in TIMELINE_DATE_RE.finditer(text):
        day, month, year = int(m.group(1)), int(m.group(2)), int(m.group(3))
        if year < 100:
            year += 2000
        if not (1 <= day <= 31 and 1 <= month <= 12):
            continue
        try:
            out.append(date(year, month, day))
        except ValueError:
            continue
    return out


def timeline_mentions(text: str | None, day: date) -> bool:
    return any(d == day for d in parse_timeline_dates(text))


def is_task_on_date(task: Task, day: date | datetime) -> bool:
    target = _as_day(day)

    if _as_day(task.created_at) == target:
        return True
    if _as_day(task.updated_at) == target:
        return True
    if timeline_mentions(task.metadata.timeline, target):
        return True
    return any(timeline_mentions(st.timeline, target) for st in task.sub_tasks)


def tasks_on_date(tasks: Iterable[Task], day: date | datetime) -> list[Task]:
    return [t for t in tasks if is_task_on_date(t, day)]


def build_month_grid(year: int, month: int) -> list[date]:
    """
    Days shown for a month view: whole weeks, Sunday first, padded with the
    tail of the previous month and the head of the next one.
    """
    first = date(year, month, 1)
    last = date(year, month, calendar.monthrange(year, month)[1])

    # date.weekday(): Monday=0 .. Sunday=6; the grid starts on Sunday.
    leading = (first.weekday() + 1) % 7
    trailing = 6 - (last.weekday() + 1) % 7

    start = first - timedelta(days=leading)
    total = leading + last.day + trailing
    return [start + timedelta(days=i) for i in range(total)]


def days_with_tasks(tasks: Iterable[Task], year: int, month: int) -> set[date]:
    """Grid days (including padding days) that have at least one task."""
    task_list = list(tasks)
    return {
        day for day in build_month_grid(year, month) if any(is_task_on_date(t, day) for t in task_list)
    }
