# src/boardflow/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field

from ..tasks.task_models import Status, Tag, Task
from .access import Project, User

DEFAULT_TAGS: tuple[Tag, ...] = (
    Tag("Data Extraction", "#3b82f6"),
    Tag("Cleanup/ETL", "#06b6d4"),
    Tag("AI Training", "#a855f7"),
    Tag("Prompt Engineering", "#eab308"),
    Tag("Automation", "#f97316"),
    Tag("API Integration", "#22c55e"),
    Tag("Dashboard", "#ec4899"),
    Tag("Infra/Deploy", "#ef4444"),
    Tag("Documentation", "#737373"),
)


@dataclass
class BoardState:
    """
    Everything the board holds client-side.

    tasks/projects are keyed by id. Values are immutable snapshots; updating a
    card means storing a new snapshot under the same key.
    """

    user: User
    settings: object | None = None

    projects: dict[str, Project] = field(default_factory=dict)
    tasks: dict[str, Task] = field(default_factory=dict)
    tags: list[Tag] = field(default_factory=lambda: list(DEFAULT_TAGS))

    current_project_id: str | None = None
    assignee_filter: str | None = None
    hidden_columns: set[Status] = field(default_factory=set)

    def project_tasks(self, project_id: str | None = None) -> list[Task]:
        pid = project_id if project_id is not None else self.current_project_id
        return [t for t in self.tasks.values() if t.project_id == pid]
