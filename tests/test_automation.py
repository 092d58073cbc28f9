# tests/test_automation.py

from __future__ import annotations

import random

import pytest

from boardflow.tasks.automation import (
    QA_CHECKLIST_ITEMS,
    RULE_ALMOST_DONE,
    RULE_DONE,
    RULE_IN_PROGRESS,
    RULE_NOT_STARTED,
    RULE_QA_GENERATED,
    RULE_QA_INCOMPLETE,
    apply_automation,
    implied_status,
    is_qa_cleared,
    progress_from_checklist,
)
from boardflow.tasks.task_models import ChecklistItem, Status, Task

from .fakes import SequentialIds


def _task(**kw) -> Task:
    base = dict(id="t1", project_id="p1", title="Card", created_at="2025-01-01T00:00:00+00:00")
    base.update(kw)
    return Task(**base)


def _qa(checked: bool = True) -> tuple[ChecklistItem, ...]:
    return tuple(
        ChecklistItem(id=f"qa{n}", text=text, checked=checked)
        for n, text in enumerate(QA_CHECKLIST_ITEMS)
    )


def test_zero_progress_demotes_to_todo() -> None:
    result = apply_automation(_task(progress=0, status=Status.INPROGRESS))
    assert result.task.status == Status.TODO
    assert result.rule == RULE_NOT_STARTED


def test_full_progress_with_empty_checklist_generates_qa_items() -> None:
    result = apply_automation(
        _task(progress=100, status=Status.REVIEW), id_factory=SequentialIds("qa")
    )
    assert result.task.status == Status.REVIEW
    assert [i.text for i in result.task.checklist] == list(QA_CHECKLIST_ITEMS)
    assert not any(i.checked for i in result.task.checklist)
    assert [i.id for i in result.task.checklist] == ["qa-0001", "qa-0002", "qa-0003"]
    assert result.rule == RULE_QA_GENERATED


def test_full_progress_with_checked_qa_completes() -> None:
    task = _task(progress=100, status=Status.INPROGRESS, checklist=_qa(checked=True))
    result = apply_automation(task)
    assert result.task.status == Status.DONE
    assert result.task.checklist == task.checklist
    assert result.rule == RULE_DONE


@pytest.mark.parametrize("status", [Status.BACKLOG, Status.TODO])
def test_zero_progress_keeps_backlog_and_todo(status: Status) -> None:
    task = _task(progress=0, status=status)
    result = apply_automation(task)
    assert result.task is task
    assert result.rule is None


@pytest.mark.parametrize(
    ("progress", "start", "expected", "rule"),
    [
        (0, Status.REVIEW, Status.TODO, RULE_NOT_STARTED),
        (1, Status.TODO, Status.INPROGRESS, RULE_IN_PROGRESS),
        (60, Status.REVIEW, Status.INPROGRESS, RULE_IN_PROGRESS),
        (61, Status.INPROGRESS, Status.REVIEW, RULE_ALMOST_DONE),
        (99, Status.DONE, Status.REVIEW, RULE_ALMOST_DONE),
        (60, Status.INPROGRESS, Status.INPROGRESS, None),
        (61, Status.REVIEW, Status.REVIEW, None),
    ],
)
def test_progress_boundaries(progress: int, start: Status, expected: Status, rule: str | None) -> None:
    result = apply_automation(_task(progress=progress, status=start))
    assert result.task.status == expected
    assert result.rule == rule


def test_backlog_with_progress_moves_to_in_progress() -> None:
    result = apply_automation(_task(progress=10, status=Status.BACKLOG))
    assert result.task.status == Status.INPROGRESS


def test_drop_into_done_without_checklist_is_sent_to_review() -> None:
    # A 100% card dragged onto the done column.
    result = apply_automation(_task(progress=100, status=Status.DONE))
    assert result.task.status == Status.REVIEW
    assert len(result.task.checklist) == len(QA_CHECKLIST_ITEMS)
    assert len({i.id for i in result.task.checklist}) == len(QA_CHECKLIST_ITEMS)
    assert result.rule == RULE_QA_GENERATED


def test_drop_into_done_with_low_progress_follows_progress() -> None:
    result = apply_automation(_task(progress=40, status=Status.DONE))
    assert result.task.status == Status.INPROGRESS
    assert result.task.checklist == ()
    assert result.rule == RULE_IN_PROGRESS


def test_only_missing_qa_items_are_appended() -> None:
    existing = (
        ChecklistItem(id="a", text="Write docs", checked=True),
        ChecklistItem(id="b", text=QA_CHECKLIST_ITEMS[1], checked=True),
    )
    result = apply_automation(_task(progress=100, status=Status.DONE, checklist=existing))
    texts = [i.text for i in result.task.checklist]
    assert texts[:2] == ["Write docs", QA_CHECKLIST_ITEMS[1]]
    assert sorted(texts[2:]) == sorted([QA_CHECKLIST_ITEMS[0], QA_CHECKLIST_ITEMS[2]])
    assert result.task.status == Status.REVIEW


def test_unchecked_qa_item_blocks_done() -> None:
    checklist = _qa(checked=True)[:2] + (ChecklistItem(id="x", text=QA_CHECKLIST_ITEMS[2]),)
    result = apply_automation(_task(progress=100, status=Status.DONE, checklist=checklist))
    assert result.task.status == Status.REVIEW
    assert result.task.checklist == checklist
    assert result.rule == RULE_QA_INCOMPLETE


def test_duplicate_qa_item_unchecked_blocks_done() -> None:
    checklist = _qa(checked=True) + (ChecklistItem(id="dup", text=QA_CHECKLIST_ITEMS[0]),)
    result = apply_automation(_task(progress=100, status=Status.DONE, checklist=checklist))
    assert result.task.status == Status.REVIEW
    assert result.rule == RULE_QA_INCOMPLETE


def test_extra_unchecked_items_do_not_block_done() -> None:
    checklist = _qa(checked=True) + (ChecklistItem(id="extra", text="Nice to have"),)
    task = _task(progress=100, status=Status.DONE, checklist=checklist)
    result = apply_automation(task)
    assert result.task == task
    assert result.rule is None


def test_qa_text_match_is_exact() -> None:
    near_miss = tuple(
        ChecklistItem(id=f"n{n}", text=text.lower(), checked=True)
        for n, text in enumerate(QA_CHECKLIST_ITEMS)
    )
    result = apply_automation(_task(progress=100, status=Status.DONE, checklist=near_miss))
    assert result.task.status == Status.REVIEW
    assert len(result.task.checklist) == 2 * len(QA_CHECKLIST_ITEMS)


@pytest.mark.parametrize(
    ("progress", "start", "expected"),
    [(150, Status.REVIEW, Status.DONE), (-10, Status.REVIEW, Status.TODO)],
)
def test_out_of_range_progress_is_clamped_but_kept(progress: int, start: Status, expected: Status) -> None:
    result = apply_automation(_task(progress=progress, status=start, checklist=_qa()))
    assert result.task.status == expected
    assert result.task.progress == progress


def test_implied_status_partition() -> None:
    assert [implied_status(p) for p in (0, 1, 60, 61, 99, 100)] == [
        Status.TODO,
        Status.INPROGRESS,
        Status.INPROGRESS,
        Status.REVIEW,
        Status.REVIEW,
        Status.DONE,
    ]


def test_progress_from_checklist() -> None:
    items = [ChecklistItem(id=str(n), text=str(n), checked=n < 2) for n in range(3)]
    assert progress_from_checklist([]) == 0
    assert progress_from_checklist(items[:1]) == 100
    assert progress_from_checklist(items) == 67
    assert progress_from_checklist(items[1:]) == 50


def _random_task(rng: random.Random, n: int) -> Task:
    checklist: list[ChecklistItem] = []
    for i, text in enumerate(QA_CHECKLIST_ITEMS):
        if rng.random() < 0.7:
            checklist.append(ChecklistItem(id=f"q{i}", text=text, checked=rng.random() < 0.7))
    for i in range(rng.randint(0, 3)):
        checklist.append(ChecklistItem(id=f"e{i}", text=f"extra {i}", checked=rng.random() < 0.5))
    rng.shuffle(checklist)
    return _task(
        id=f"t{n}",
        status=rng.choice(list(Status)),
        progress=rng.choice([0, 1, 30, 60, 61, 80, 99, 100, 100, 100]),
        checklist=tuple(checklist),
    )


@pytest.mark.parametrize("seed", range(8))
def test_automation_is_idempotent(seed: int) -> None:
    rng = random.Random(seed)
    for n in range(50):
        first = apply_automation(_random_task(rng, n))
        second = apply_automation(first.task)
        assert second.task == first.task
        assert second.rule is None


@pytest.mark.parametrize("seed", range(8))
def test_done_always_passes_qa_gate(seed: int) -> None:
    rng = random.Random(seed)
    for n in range(50):
        task = _random_task(rng, n)
        result = apply_automation(task)
        assert result.task.progress == task.progress
        if result.task.status == Status.DONE:
            assert is_qa_cleared(result.task)


@pytest.mark.parametrize(
    ("checked", "progress", "status"),
    [(1, 1, Status.INPROGRESS), (120, 60, Status.INPROGRESS), (121, 61, Status.REVIEW), (199, 100, Status.DONE)],
)
def test_checklist_progress_rounds_halves_up(checked: int, progress: int, status: Status) -> None:
    items = [ChecklistItem(id=str(n), text=f"step {n}", checked=n < checked) for n in range(200)]
    assert progress_from_checklist(items) == progress
    assert implied_status(progress_from_checklist(items)) == status
