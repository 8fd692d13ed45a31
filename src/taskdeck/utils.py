# src/taskdeck/utils.py

from __future__ import annotations

import random
import re
import uuid
from datetime import date

CATEGORY_COLORS = [
    "#4299E1",  # blue
    "#48BB78",  # green
    "#ED8936",  # orange
    "#9F7AEA",  # purple
    "#F56565",  # red
    "#38B2AC",  # teal
    "#ED64A6",  # pink
    "#ECC94B",  # yellow
]

_BULLET_PREFIX = re.compile(r"^[•◦‣⁃○●■□◆◇\-\*\+>]+\s*")


def generate_id() -> str:
    """Short random id for tasks, sub-tasks, steps and categories."""
    return uuid.uuid4().hex[:12]


def parse_bullet_points(text: str) -> list[str]:
    """
    Split multi-line text into bullet items.

    Blank lines are dropped and leading bullet markers (-, *, +, >, or a
    unicode bullet glyph) are stripped from each line.
    """
    if not text or not text.strip():
        return []
    items: list[str] = []
    for line in text.split("\n"):
        line = line.strip()
        if not line:
            continue
        items.append(_BULLET_PREFIX.sub("", line))
    return items


def get_initials(name: str) -> str:
    if not name:
        return ""
    parts = name.strip().split()
    if not parts:
        return ""
    if len(parts) == 1:
        return parts[0][0].upper()
    return (parts[0][0] + parts[-1][0]).upper()


def random_category_color() -> str:
    return random.choice(CATEGORY_COLORS)


def truncate_text(text: str, max_length: int) -> str:
    if not text:
        return ""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def calculate_days_left(due: date, today: date | None = None) -> int:
    """Whole days from today until due (negative when overdue)."""
    if today is None:
        today = date.today()
    return (due - today).days


def format_days_left(days: int) -> str:
    if days < 0:
        return "Overdue"
    if days == 0:
        return "Due today"
    if days == 1:
        return "Due tomorrow"
    return f"{days} days left"
