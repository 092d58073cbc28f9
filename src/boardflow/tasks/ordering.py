# src/boardflow/tasks/ordering.py

from __future__ import annotations

"""
Manual ordering of cards inside a column.

Positions are floats. A drop computes exactly one new value for the moved card:
- append: last position + POSITION_INCREMENT
- before/after a sibling: midpoint of the gap around that sibling

Siblings are never renumbered. The gap halves on every insertion at the same
spot, so precision runs out only after ~50 consecutive inserts there.

allocate_position() trusts the caller's ordering; build the sibling list with
column_siblings() / sort_column() so both sides agree on the sort key.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum

from .task_models import Status, Task

logger = logging.getLogger(__name__)

POSITION_INCREMENT = 1000.0


class Side(StrEnum):
    BEFORE = "before"
    AFTER = "after"


@dataclass(slots=True, frozen=True)
class DropIntent:
    """
    Where the user wants the card.

    relative_to=None means "append to the end of the column".
    """

    relative_to: str | None = None
    side: Side = Side.AFTER

    @classmethod
    def append(cls) -> DropIntent:
        return cls()

    @classmethod
    def before(cls, task_id: str) -> DropIntent:
        return cls(relative_to=task_id, side=Side.BEFORE)

    @classmethod
    def after(cls, task_id: str) -> DropIntent:
        return cls(relative_to=task_id, side=Side.AFTER)

    @property
    def is_append(self) -> bool:
        return self.relative_to is None


def position_of(task: Task) -> float:
    return task.position or 0.0


def sort_key(task: Task) -> tuple[float, str]:
    # created_at is compared as a string, not parsed.
    return (position_of(task), task.created_at or "")


def sort_column(tasks: Iterable[Task]) -> list[Task]:
    return sorted(tasks, key=sort_key)


def column_siblings(
    tasks: Iterable[Task],
    *,
    project_id: str,
    status: Status,
    exclude_id: str | None = None,
) -> list[Task]:
    """Cards of one (project, status) column, sorted, optionally without the card being moved."""
    return sort_column(
        t
        for t in tasks
        if t.project_id == project_id and t.status == status and t.id != exclude_id
    )


def append_position(ordered_siblings: Sequence[Task]) -> float:
    if not ordered_siblings:
        return POSITION_INCREMENT
    return position_of(ordered_siblings[-1]) + POSITION_INCREMENT


def allocate_position(
    ordered_siblings: Sequence[Task],
    intent: DropIntent | None = None,
) -> float:
    """
    Compute the position for a card dropped into a column.

    ordered_siblings must be sorted by sort_key() and must not contain the
    moved card. A relative_to id that is not in the list (stale reference)
    yields POSITION_INCREMENT instead of raising.
    """
    if intent is None or intent.is_append:
        return append_position(ordered_siblings)

    index = next(
        (i for i, t in enumerate(ordered_siblings) if t.id == intent.relative_to),
        None,
    )
    if index is None:
        logger.debug("Drop target %s not in column; using %s", intent.relative_to, POSITION_INCREMENT)
        return POSITION_INCREMENT

    target_pos = position_of(ordered_siblings[index])

    if intent.side == Side.BEFORE:
        if index == 0:
            return target_pos / 2
        prev_pos = position_of(ordered_siblings[index - 1])
        return (prev_pos + target_pos) / 2

    if index + 1 < len(ordered_siblings):
        next_pos = position_of(ordered_siblings[index + 1])
    else:
        next_pos = target_pos + POSITION_INCREMENT
    return (target_pos + next_pos) / 2
