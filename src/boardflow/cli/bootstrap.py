# src/boardflow/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- builds BoardState for the configured user,
- persists the board as a JSON snapshot (optional).
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from ..config import get_settings
from ..core.access import Project, Role, User, visible_projects
from ..core.board import BoardService
from ..core.ports import Notifier
from ..core.state import BoardState
from ..tasks.task_models import Tag, Task, new_id

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.snapshot_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> BoardState:
    """
    Create BoardState from the provided settings.

    Loads the snapshot when enabled and makes sure the user has at least one
    project to work in. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    user = User(
        id=settings.username,
        username=settings.username,
        role=Role.from_db(settings.user_role),
    )
    state = BoardState(user=user, settings=settings)

    if settings.save_snapshot:
        load_snapshot(state)

    projects = visible_projects(user, state.projects.values())
    if not projects:
        project = Project(id=new_id(), name=settings.default_project, owner_id=user.id)
        state.projects[project.id] = project
        projects = [project]
        logger.info("Created default project %r for %s", project.name, user.username)

    state.current_project_id = projects[0].id
    return state


def create_board(state: BoardState, *, notifier: Notifier | None = None) -> BoardService:
    return BoardService(state, notifier=notifier)


def _parse_records(raw_items, parse, kind: str) -> list:
    """Parse snapshot records one by one; a bad record is logged and skipped."""
    parsed = []
    for n, raw in enumerate(raw_items or []):
        if not isinstance(raw, dict) or not raw.get("id"):
            logger.warning("Skipping %s #%d in snapshot: no id", kind, n)
            continue
        try:
            parsed.append(parse(raw))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping %s %r in snapshot: %s", kind, raw.get("id"), e)
    return parsed


def load_snapshot(state: BoardState) -> bool:
    """
    Fill state from the JSON snapshot. Returns False when nothing was loaded.

    Records that fail to parse are skipped; the rest still load. State is only
    touched once the whole file has been read. An unreadable file is renamed
    to <name>.bad so the snapshot written on exit does not replace it.
    """
    raw_path = getattr(state.settings, "snapshot_path", None)
    if not raw_path:
        return False
    path = Path(raw_path)
    if not path.exists():
        return False
    try:
        data = json.loads(path.read_text("utf-8"))
    except (OSError, UnicodeDecodeError, ValueError):
        logger.exception("Failed to read snapshot from %s", path)
        _set_aside(path)
        return False
    if not isinstance(data, dict):
        logger.error("Snapshot %s is not a JSON object", path)
        _set_aside(path)
        return False

    projects = _parse_records(data.get("projects"), Project.from_dict, "project")
    tasks = _parse_records(data.get("tasks"), Task.from_dict, "task")
    tags = [
        Tag(text=str(t["text"]), color=str(t.get("color") or "#737373"))
        for t in data.get("tags") or []
        if isinstance(t, dict) and t.get("text")
    ]

    state.projects.update((p.id, p) for p in projects)
    state.tasks.update((t.id, t) for t in tasks)
    if tags:
        state.tags = tags

    logger.info("Loaded snapshot: %d projects, %d tasks from %s", len(projects), len(tasks), path)
    return True


def _set_aside(path: Path) -> None:
    backup = path.with_name(path.name + ".bad")
    try:
        os.replace(path, backup)
        logger.warning("Moved unreadable snapshot to %s", backup)
    except OSError:
        logger.exception("Could not move unreadable snapshot %s", path)


def save_snapshot(state: BoardState) -> None:
    settings = state.settings
    if not getattr(settings, "save_snapshot", False):
        return
    raw_path = getattr(settings, "snapshot_path", None)
    if not raw_path:
        return
    path = Path(raw_path)
    payload = {
        "projects": [p.to_dict() for p in state.projects.values()],
        "tasks": [t.to_dict() for t in state.tasks.values()],
        "tags": [{"text": t.text, "color": t.color} for t in state.tags],
    }
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), "utf-8")
        os.replace(tmp, path)
        logger.info("Saved snapshot: %d tasks to %s", len(state.tasks), path)
    except Exception:
        logger.exception("Failed to save snapshot to %s", path)
