# src/boardflow/core/metrics.py

from __future__ import annotations

"""
Read-only numbers for the board header and the monitoring dashboard.

pattern_groups() flags groups of open (not done) tasks worth a look:
- critical focus: 2+ high priority tasks
- tag cluster: 3+ tasks sharing a tag
- possible bottleneck: 2+ in-progress tasks under 25% progress
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass, field

from ..tasks.automation import percent
from ..tasks.task_models import Priority, Status, Task

HIGH_PRIORITY_THRESHOLD = 2
TAG_CLUSTER_THRESHOLD = 3
STALLED_THRESHOLD = 2
STALLED_PROGRESS = 25


@dataclass(slots=True, frozen=True)
class HeaderMetrics:
    active: int
    completion_rate: int
    velocity: int


@dataclass(slots=True, frozen=True)
class StatusShare:
    status: Status
    count: int
    percent: float


@dataclass(slots=True, frozen=True)
class DashboardStats:
    total: int
    done: int
    in_progress: int
    backlog: int
    completion_rate: int
    priorities: dict[Priority, int]
    distribution: list[StatusShare]


@dataclass(slots=True, frozen=True)
class PatternGroup:
    id: str
    label: str
    reason: str
    tasks: list[Task] = field(default_factory=list)


def completion_rate(tasks: list[Task]) -> int:
    done = sum(1 for t in tasks if t.status == Status.DONE)
    return percent(done, len(tasks))


def header_metrics(tasks: Iterable[Task]) -> HeaderMetrics:
    items = list(tasks)
    done = sum(1 for t in items if t.status == Status.DONE)
    active = [t for t in items if t.status in (Status.INPROGRESS, Status.REVIEW)]
    velocity = sum(t.progress for t in active) / (len(active) or 1)
    return HeaderMetrics(
        active=len(items) - done,
        completion_rate=completion_rate(items),
        velocity=math.floor(velocity + 0.5),
    )


def dashboard_stats(tasks: Iterable[Task], project_id: str | None = None) -> DashboardStats:
    """Stats for one project, or for every task when project_id is None."""
    items = [t for t in tasks if project_id is None or t.project_id == project_id]
    total = len(items)

    counts = {s: 0 for s in Status}
    priorities = {p: 0 for p in Priority}
    for t in items:
        counts[t.status] += 1
        priorities[t.priority] += 1

    distribution = [
        StatusShare(status=s, count=counts[s], percent=(counts[s] / total * 100) if total else 0.0)
        for s in Status
    ]
    return DashboardStats(
        total=total,
        done=counts[Status.DONE],
        in_progress=counts[Status.INPROGRESS],
        backlog=counts[Status.BACKLOG],
        completion_rate=completion_rate(items),
        priorities=priorities,
        distribution=distribution,
    )


def pattern_groups(tasks: Iterable[Task]) -> list[PatternGroup]:
    open_tasks = [t for t in tasks if t.status != Status.DONE]
    groups: list[PatternGroup] = []

    high = [t for t in open_tasks if t.priority == Priority.HIGH]
    if len(high) >= HIGH_PRIORITY_THRESHOLD:
        groups.append(
            PatternGroup(
                id="critical-focus",
                label="Critical focus",
                reason=f"{len(high)} high priority tasks pending.",
                tasks=high,
            )
        )

    by_tag: dict[str, list[Task]] = {}
    for t in open_tasks:
        for tag in t.tags:
            by_tag.setdefault(tag.text, []).append(t)
    for text, grouped in by_tag.items():
        if len(grouped) >= TAG_CLUSTER_THRESHOLD:
            groups.append(
                PatternGroup(
                    id=f"cluster-{text}",
                    label=f"Cluster: {text}",
                    reason=f"Thematic cluster ({len(grouped)} items).",
                    tasks=grouped,
                )
            )

    stalled = [
        t for t in open_tasks if t.status == Status.INPROGRESS and t.progress < STALLED_PROGRESS
    ]
    if len(stalled) >= STALLED_THRESHOLD:
        groups.append(
            PatternGroup(
                id="stalled",
                label="Possible bottleneck",
                reason=f"In-progress tasks under {STALLED_PROGRESS}% may be blocked.",
                tasks=stalled,
            )
        )

    return groups
