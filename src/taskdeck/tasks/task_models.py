# src/taskdeck/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

from ..utils import generate_id

EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(raw: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if isinstance(raw, datetime):
        dt = raw
    elif isinstance(raw, str) and raw.strip():
        try:
            dt = datetime.fromisoformat(raw.strip())
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _opt_str(raw: Any) -> str | None:
    if raw is None:
        return None
    return raw if isinstance(raw, str) else str(raw)


def _str_list(raw: Any) -> list[str] | None:
    if not isinstance(raw, list):
        return None
    return [str(x) for x in raw if x is not None]


def _put(out: dict[str, Any], key: str, value: Any) -> None:
    if value is not None:
        out[key] = value


class TaskFilter(StrEnum):
    """List filter used by the task list and the backend list route."""

    ALL = "all"
    COMPLETED = "completed"
    IN_PROGRESS = "inProgress"

    @classmethod
    def from_raw(cls, raw: str | None) -> TaskFilter:
        if not raw:
            return cls.ALL
        norm = raw.strip().replace("_", "").replace("-", "").lower()
        for member in cls:
            if member.value.lower() == norm:
                return member
        return cls.ALL


@dataclass(slots=True)
class Category:
    id: str
    name: str
    color: str
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, raw: Any) -> Category | None:
        if not isinstance(raw, dict) or not raw.get("id"):
            return None
        return cls(
            id=str(raw["id"]),
            name=str(raw.get("name") or ""),
            color=str(raw.get("color") or ""),
            created_at=parse_timestamp(raw.get("createdAt")) or EPOCH,
        )


@dataclass(slots=True)
class SubTask:
    id: str = field(default_factory=generate_id)
    description: str = ""
    heading: str | None = None
    bullet_points: list[str] | None = None
    timeline: str | None = None
    completed: bool = False

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id}
        _put(out, "heading", self.heading)
        out["description"] = self.description
        if self.bullet_points is not None:
            out["bulletPoints"] = list(self.bullet_points)
        _put(out, "timeline", self.timeline)
        out["completed"] = self.completed
        return out

    @classmethod
    def from_dict(cls, raw: Any) -> SubTask | None:
        if not isinstance(raw, dict):
            return None
        return cls(
            id=str(raw.get("id") or generate_id()),
            description=str(raw.get("description") or ""),
            heading=_opt_str(raw.get("heading")),
            bullet_points=_str_list(raw.get("bulletPoints")),
            timeline=_opt_str(raw.get("timeline")),
            completed=bool(raw.get("completed", False)),
        )


@dataclass(slots=True)
class ProgressStep:
    id: str = field(default_factory=generate_id)
    title: str = ""
    description: str | None = None
    due_date: str | None = None
    completed: bool = False

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id, "title": self.title}
        _put(out, "description", self.description)
        _put(out, "dueDate", self.due_date)
        out["completed"] = self.completed
        return out

    @classmethod
    def from_dict(cls, raw: Any) -> ProgressStep | None:
        if not isinstance(raw, dict):
            return None
        return cls(
            id=str(raw.get("id") or generate_id()),
            title=str(raw.get("title") or ""),
            description=_opt_str(raw.get("description")),
            due_date=_opt_str(raw.get("dueDate")),
            completed=bool(raw.get("completed", False)),
        )


@dataclass(slots=True)
class ProgressTracker:
    """Ordered milestones; a step's index is its step number."""

    steps: list[ProgressStep] = field(default_factory=list)
    current_step: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"steps": [s.to_dict() for s in self.steps]}
        _put(out, "currentStep", self.current_step)
        return out

    @classmethod
    def from_dict(cls, raw: Any) -> ProgressTracker | None:
        if not isinstance(raw, dict):
            return None
        steps_raw = raw.get("steps")
        steps = [s for s in (ProgressStep.from_dict(x) for x in steps_raw or []) if s is not None]
        return cls(steps=steps, current_step=_opt_str(raw.get("currentStep")))


@dataclass(slots=True)
class Contact:
    name: str | None = None
    email: str | None = None
    phone: str | None = None

    def is_empty(self) -> bool:
        return not (self.name or self.email or self.phone)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        _put(out, "name", self.name)
        _put(out, "email", self.email)
        _put(out, "phone", self.phone)
        return out

    @classmethod
    def from_dict(cls, raw: Any) -> Contact | None:
        if not isinstance(raw, dict):
            return None
        return cls(
            name=_opt_str(raw.get("name")),
            email=_opt_str(raw.get("email")),
            phone=_opt_str(raw.get("phone")),
        )


@dataclass(slots=True)
class TaskMetadata:
    """
    Free-form task attachments. Every field is optional.

    progress_note holds the legacy plain-text "progress tracker" found in old
    snapshots and sample data; progress_tracker is the structured form.
    """

    contact: Contact | None = None
    cost: str | None = None
    timeline: str | None = None
    documents_needed: list[str] | None = None
    contingencies: str | None = None
    progress_tracker: ProgressTracker | None = None
    progress_note: str | None = None

    def is_empty(self) -> bool:
        return (
            self.contact is None
            and self.cost is None
            and self.timeline is None
            and self.documents_needed is None
            and self.contingencies is None
            and self.progress_tracker is None
            and self.progress_note is None
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.contact is not None:
            out["contact"] = self.contact.to_dict()
        _put(out, "cost", self.cost)
        _put(out, "timeline", self.timeline)
        if self.documents_needed is not None:
            out["documentsNeeded"] = list(self.documents_needed)
        _put(out, "contingencies", self.contingencies)
        if self.progress_tracker is not None:
            out["progressTracker"] = self.progress_tracker.to_dict()
        _put(out, "progressNote", self.progress_note)
        return out

    @classmethod
    def from_dict(cls, raw: Any) -> TaskMetadata:
        if not isinstance(raw, dict):
            return cls()

        tracker_raw = raw.get("progressTracker")
        note = _opt_str(raw.get("progressNote"))
        tracker: ProgressTracker | None = None
        if isinstance(tracker_raw, str):
            # Legacy string form.
            note = note or tracker_raw
        else:
            tracker = ProgressTracker.from_dict(tracker_raw)

        return cls(
            contact=Contact.from_dict(raw.get("contact")),
            cost=_opt_str(raw.get("cost")),
            timeline=_opt_str(raw.get("timeline")),
            documents_needed=_str_list(raw.get("documentsNeeded")),
            contingencies=_opt_str(raw.get("contingencies")),
            progress_tracker=tracker,
            progress_note=note,
        )


@dataclass(slots=True)
class Task:
    id: str
    title: str
    description: str
    category_id: str
    sub_tasks: list[SubTask]
    metadata: TaskMetadata
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "categoryId": self.category_id,
            "subTasks": [st.to_dict() for st in self.sub_tasks],
            "metadata": self.metadata.to_dict(),
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, raw: Any) -> Task | None:
        if not isinstance(raw, dict) or not raw.get("id"):
            return None
        subs = [st for st in (SubTask.from_dict(x) for x in raw.get("subTasks") or []) if st is not None]
        created = parse_timestamp(raw.get("createdAt")) or EPOCH
        return cls(
            id=str(raw["id"]),
            title=str(raw.get("title") or ""),
            description=str(raw.get("description") or ""),
            category_id=str(raw.get("categoryId") or ""),
            sub_tasks=subs,
            metadata=TaskMetadata.from_dict(raw.get("metadata")),
            created_at=created,
            updated_at=parse_timestamp(raw.get("updatedAt")) or created,
        )
