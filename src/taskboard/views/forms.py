"""Parsing of submitted HTML forms into plain values."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

from starlette.datastructures import FormData

from ..core.templates import format_utc
from ..schemas.task import Task, TaskStatus, TaskUpdate

DEFAULT_PRIORITY = 1
PRIORITY_CHOICES = {1: "Low", 2: "Medium", 3: "High"}


def clean_text(raw: object) -> str:
    return str(raw or "").strip()


def clean_email(raw: object) -> str:
    return clean_text(raw).lower()


def parse_int(raw: object, default: int) -> int:
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        return default


def parse_due_date(raw: str) -> datetime | None:
    """Parse a ``datetime-local`` (or full ISO 8601) value.

    Naive values are taken as UTC so the API always receives an offset.
    Raises ``ValueError`` for anything else.
    """

    if not raw:
        return None
    parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_due_date(value: datetime | None) -> str:
    """Render a datetime for a ``datetime-local`` input."""

    return format_utc(value, "%Y-%m-%dT%H:%M")


@dataclass(slots=True)
class AuthForm:
    email: str = ""
    name: str = ""
    password: str = ""

    @classmethod
    def from_form(cls, form: FormData) -> "AuthForm":
        return cls(
            email=clean_email(form.get("email")),
            name=clean_text(form.get("name")),
            password=str(form.get("password") or ""),
        )

    def draft(self) -> dict[str, str]:
        """Values worth showing again after a failure; never the password."""

        return {"email": self.email, "name": self.name}


@dataclass(slots=True)
class TaskForm:
    title: str = ""
    description: str = ""
    priority: int = DEFAULT_PRIORITY
    due_date: str = ""
    assignee_ids: list[int] = field(default_factory=list)

    @classmethod
    def from_form(cls, form: FormData) -> "TaskForm":
        assignee_ids: list[int] = []
        for raw in form.getlist("assignee_ids"):
            value = parse_int(raw, -1)
            if value >= 0 and value not in assignee_ids:
                assignee_ids.append(value)
        return cls(
            title=clean_text(form.get("title")),
            description=clean_text(form.get("description")),
            priority=parse_int(form.get("priority"), DEFAULT_PRIORITY),
            due_date=clean_text(form.get("due_date")),
            assignee_ids=assignee_ids,
        )

    @classmethod
    def from_draft(cls, draft: Mapping[str, Any] | None) -> "TaskForm":
        if not draft:
            return cls()
        return cls(
            title=clean_text(draft.get("title")),
            description=clean_text(draft.get("description")),
            priority=parse_int(draft.get("priority"), DEFAULT_PRIORITY),
            due_date=clean_text(draft.get("due_date")),
            assignee_ids=[parse_int(item, -1) for item in draft.get("assignee_ids") or []],
        )

    @classmethod
    def from_task(cls, task: Task) -> "TaskForm":
        return cls(
            title=task.title,
            description=task.description or "",
            priority=task.priority,
            due_date=format_due_date(task.due_date),
            assignee_ids=task.assignee_ids,
        )

    def draft(self) -> dict[str, Any]:
        return asdict(self)

    def parsed_due_date(self) -> datetime | None:
        return parse_due_date(self.due_date)

    def to_update(self) -> TaskUpdate:
        """Build a partial update carrying the editable fields of the form."""

        fields: dict[str, Any] = {
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
        }
        due_date = self.parsed_due_date()
        if due_date is not None:
            fields["due_date"] = due_date
        return TaskUpdate(**fields)


def parse_status(raw: object) -> TaskStatus | None:
    try:
        return TaskStatus(clean_text(raw))
    except ValueError:
        return None


__all__ = [
    "AuthForm",
    "DEFAULT_PRIORITY",
    "PRIORITY_CHOICES",
    "TaskForm",
    "clean_email",
    "clean_text",
    "format_due_date",
    "parse_due_date",
    "parse_int",
    "parse_status",
]
