# src/taskdeck/tasks/validation.py

"""
Caller-side input checks.

The store accepts anything; front-ends run these first and show the
message of the ValidationError to the user.
"""

from __future__ import annotations

import re

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class ValidationError(ValueError):
    """User-facing input problem."""


def validate_task_title(title: str | None) -> str:
    if not title or not title.strip():
        raise ValidationError("Please enter a task title")
    return title.strip()


def validate_category_name(name: str | None) -> str:
    if not name or not name.strip():
        raise ValidationError("Please enter a category name")
    return name.strip()


def validate_email(email: str | None) -> str | None:
    """Empty is allowed (contact email is optional); anything else must look like an address."""
    if email is None or not email.strip():
        return None
    email = email.strip()
    if not EMAIL_RE.match(email):
        raise ValidationError("Please enter a valid email address")
    return email


def validate_sub_task(description: str | None, heading: str | None = None) -> None:
    """A sub-task needs a description unless it has a heading."""
    if (description or "").strip():
        return
    if (heading or "").strip():
        return
    raise ValidationError("Sub-task needs a description or a heading")
