# src/boardflow/tasks/task_models.py

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any


class Status(StrEnum):
    """
    Task lifecycle status (one board column per status).

    Member order is the column order on the board.
    """

    BACKLOG = "backlog"
    TODO = "todo"
    INPROGRESS = "inprogress"
    REVIEW = "review"
    DONE = "done"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]

    @classmethod
    def parse(cls, raw: str | None) -> Status:
        """Accept the stored value or a few human spellings ("in-progress", "To Do")."""
        if raw is None:
            raise ValueError("status is required")
        key = raw.strip().lower().replace("-", "").replace("_", "").replace(" ", "")
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"unknown status: {raw!r}") from None

    @classmethod
    def from_db(cls, raw: str | None) -> Status:
        if not raw:
            return cls.TODO
        try:
            return cls.parse(raw)
        except ValueError:
            return cls.TODO


STATUS_LABELS: dict[Status, str] = {
    Status.BACKLOG: "Backlog",
    Status.TODO: "To Do",
    Status.INPROGRESS: "In Progress",
    Status.REVIEW: "Review",
    Status.DONE: "Done",
}


class Priority(StrEnum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @classmethod
    def from_db(cls, raw: str | None) -> Priority:
        if not raw:
            return cls.MEDIUM
        for member in cls:
            if member.value.lower() == raw.strip().lower():
                return member
        return cls.MEDIUM


def new_id() -> str:
    return uuid.uuid4().hex


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(slots=True, frozen=True)
class ChecklistItem:
    id: str
    text: str
    checked: bool = False
    due_date: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "text": self.text, "checked": self.checked, "due_date": self.due_date}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChecklistItem:
        return cls(
            id=str(data.get("id") or new_id()),
            text=str(data.get("text", "")),
            checked=bool(data.get("checked", False)),
            due_date=data.get("due_date"),
        )


@dataclass(slots=True, frozen=True)
class Tag:
    text: str
    color: str = "#737373"


@dataclass(slots=True, frozen=True)
class Task:
    """
    Snapshot of a single board card.

    Notes:
    - snapshots are immutable; use dataclasses.replace() to derive a corrected copy
    - position is None for cards that were never placed (sorts as 0)
    - created_at is an ISO string and is compared as a plain string for tie-breaks
    """

    id: str
    project_id: str
    title: str
    status: Status = Status.TODO
    progress: int = 0
    checklist: tuple[ChecklistItem, ...] = ()
    position: float | None = None
    created_at: str = field(default_factory=now_iso)

    description: str = ""
    priority: Priority = Priority.MEDIUM
    tags: tuple[Tag, ...] = ()
    assignee: str | None = None
    due_date: str | None = None
    scheduled_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "title": self.title,
            "status": self.status.value,
            "progress": self.progress,
            "checklist": [item.to_dict() for item in self.checklist],
            "position": self.position,
            "created_at": self.created_at,
            "description": self.description,
            "priority": self.priority.value,
            "tags": [{"text": t.text, "color": t.color} for t in self.tags],
            "assignee": self.assignee,
            "due_date": self.due_date,
            "scheduled_at": self.scheduled_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        raw_pos = data.get("position")
        return cls(
            id=str(data["id"]),
            project_id=str(data["project_id"]),
            title=str(data.get("title") or ""),
            status=Status.from_db(data.get("status")),
            progress=int(data.get("progress") or 0),
            checklist=tuple(
                ChecklistItem.from_dict(i) for i in data.get("checklist") or [] if isinstance(i, dict)
            ),
            position=float(raw_pos) if raw_pos is not None else None,
            created_at=str(data.get("created_at") or ""),
            description=str(data.get("description") or ""),
            priority=Priority.from_db(data.get("priority")),
            tags=tuple(
                Tag(text=str(t.get("text", "")), color=str(t.get("color") or "#737373"))
                for t in data.get("tags") or []
                if isinstance(t, dict)
            ),
            assignee=data.get("assignee"),
            due_date=data.get("due_date"),
            scheduled_at=data.get("scheduled_at"),
        )
