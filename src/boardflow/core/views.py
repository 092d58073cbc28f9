# src/boardflow/core/views.py

from __future__ import annotations

"""
Board, list and table projections of a project's cards.

Every view orders cards the same way the board does (position, then created_at).
"""

from collections.abc import Collection, Iterable
from typing import Any

from ..tasks.ordering import sort_column
from ..tasks.task_models import Status, Task


def board_columns(
    tasks: Iterable[Task],
    *,
    hidden: Collection[Status] = (),
) -> dict[Status, list[Task]]:
    items = list(tasks)
    return {
        status: sort_column(t for t in items if t.status == status)
        for status in Status
        if status not in hidden
    }


def list_groups(tasks: Iterable[Task]) -> list[tuple[Status, list[Task]]]:
    """Columns in board order, empty ones skipped."""
    return [(status, col) for status, col in board_columns(tasks).items() if col]


def checklist_summary(task: Task) -> str:
    if not task.checklist:
        return ""
    checked = sum(1 for i in task.checklist if i.checked)
    return f"{checked}/{len(task.checklist)}"


def table_rows(tasks: Iterable[Task]) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for _, column in list_groups(tasks):
        for t in column:
            rows.append(
                {
                    "id": t.id,
                    "title": t.title,
                    "status": t.status.label,
                    "priority": t.priority.value,
                    "assignee": t.assignee or "",
                    "progress": t.progress,
                    "checklist": checklist_summary(t),
                    "due_date": t.due_date or "",
                }
            )
    return rows
