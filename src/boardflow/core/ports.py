# src/boardflow/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the board service.

BoardService keeps the full task set in memory; durable storage and user
notifications are owned by whoever embeds it and are reached through these
Protocols. Both are optional.
"""

from enum import StrEnum
from typing import Protocol

from ..tasks.task_models import Task
from .access import Project


class NoticeKind(StrEnum):
    SUCCESS = "success"
    ERROR = "error"
    AUTOMATION = "automation"
    ASSIGNEE = "assignee"
    SCHEDULE = "schedule"


class Notifier(Protocol):
    """Where user-facing notices go (toast, console line, chat message...)."""

    def notify(self, *, kind: NoticeKind, text: str) -> None: ...


class TaskRepo(Protocol):
    """
    Durable store written after every accepted change.

    Implementations decide how to handle write races; the service passes the
    snapshot it computed from its in-memory copy.
    """

    def save_task(self, task: Task) -> None: ...
    def delete_task(self, task_id: str) -> None: ...
    def save_project(self, project: Project) -> None: ...
