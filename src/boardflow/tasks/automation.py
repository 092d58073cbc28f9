# src/boardflow/tasks/automation.py

from __future__ import annotations

"""
Task automation rules.

apply_automation() takes a Task snapshot and returns a corrected snapshot:
- rule 1 maps progress to the status it implies (backlog/todo are kept at 0%)
- rule 2 is the QA gate: a task can only stay "done" when every mandatory
  QA checklist item is present and checked; missing items are appended

The function is pure. It never changes progress and never touches position;
placing a task that changed column is the caller's job (see ordering.py).
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from typing import NamedTuple

from .task_models import ChecklistItem, Status, Task, new_id

logger = logging.getLogger(__name__)

# Matched by exact text equality.
QA_CHECKLIST_ITEMS: tuple[str, ...] = (
    "Description complete?",
    "Attachments present?",
    "Assignee validated?",
)

RULE_NOT_STARTED = "0% → Not Started"
RULE_IN_PROGRESS = "1-60% → In Progress"
RULE_ALMOST_DONE = "61-99% → Almost Done"
RULE_DONE = "100% → Done"
RULE_QA_GENERATED = "QA Block: mandatory checklist generated."
RULE_QA_INCOMPLETE = "QA Block: complete verification."

_PROGRESS_RULES: dict[Status, str] = {
    Status.TODO: RULE_NOT_STARTED,
    Status.INPROGRESS: RULE_IN_PROGRESS,
    Status.REVIEW: RULE_ALMOST_DONE,
    Status.DONE: RULE_DONE,
}


class AutomationResult(NamedTuple):
    task: Task
    rule: str | None


def clamp_progress(value: float | int | None) -> int | float:
    if value is None:
        return 0
    return max(0, min(100, value))


def implied_status(progress: float | int | None) -> Status:
    """Status implied by progress alone (0 -> todo, 1-60 -> inprogress, 61-99 -> review, 100 -> done)."""
    p = clamp_progress(progress)
    if p == 0:
        return Status.TODO
    if p <= 60:
        return Status.INPROGRESS
    if p < 100:
        return Status.REVIEW
    return Status.DONE


def percent(part: int, total: int) -> int:
    """part/total as a whole percent, halves rounded up (0 when total is 0)."""
    if total <= 0:
        return 0
    # Exact integer rounding, halves up.
    return (part * 200 + total) // (2 * total)


def progress_from_checklist(checklist: Iterable[ChecklistItem]) -> int:
    items = list(checklist)
    return percent(sum(1 for i in items if i.checked), len(items))


def missing_qa_items(checklist: Iterable[ChecklistItem]) -> list[str]:
    present = {i.text for i in checklist}
    return [text for text in QA_CHECKLIST_ITEMS if text not in present]


def is_qa_cleared(task: Task) -> bool:
    if missing_qa_items(task.checklist):
        return False
    return all(i.checked for i in task.checklist if i.text in QA_CHECKLIST_ITEMS)


def _progress_rule(task: Task) -> tuple[Status | None, str | None]:
    target = implied_status(task.progress)
    if target == task.status:
        return None, None
    if target == Status.TODO and task.status == Status.BACKLOG:
        return None, None
    return target, _PROGRESS_RULES[target]


def apply_automation(task: Task, *, id_factory: Callable[[], str] = new_id) -> AutomationResult:
    """
    Run the automation rules on one task snapshot.

    Returns the corrected task and the description of the rule that decided the
    outcome (the QA gate wins over the progress rule), or None when the
    corrected task is identical to the input.
    """
    updated = task
    rule: str | None = None

    target, progress_rule = _progress_rule(task)
    if target is not None:
        updated = replace(updated, status=target)
        rule = progress_rule

    if updated.status == Status.DONE:
        missing = missing_qa_items(updated.checklist)
        if missing:
            generated = tuple(ChecklistItem(id=id_factory(), text=text) for text in missing)
            updated = replace(
                updated,
                checklist=updated.checklist + generated,
                status=Status.REVIEW,
            )
            rule = RULE_QA_GENERATED
        elif not is_qa_cleared(updated):
            updated = replace(updated, status=Status.REVIEW)
            rule = RULE_QA_INCOMPLETE

    if updated == task:
        return AutomationResult(task, None)

    logger.debug(
        "Automation task=%s status %s -> %s rule=%r",
        task.id,
        task.status,
        updated.status,
        rule,
    )
    return AutomationResult(updated, rule)
