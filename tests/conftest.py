# tests/conftest.py

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from types import SimpleNamespace

import pytest

from boardflow.core.access import Project, Role, User
from boardflow.core.board import BoardService
from boardflow.core.state import BoardState

from .fakes import FakeNotifier, FakeTaskRepo, SequentialIds

FIXED_NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and BoardState.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="boardflow-test",
        log_level="WARNING",
        username="ana",
        user_role="admin",
        default_project="Test Board",
        data_dir=tmp_path,
        snapshot_path=tmp_path / "board.json",
        save_snapshot=True,
    )


@pytest.fixture()
def admin() -> User:
    return User(id="u-ana", username="ana", role=Role.ADMIN)


@pytest.fixture()
def state(admin: User, settings: SimpleNamespace) -> BoardState:
    project = Project(id="p1", name="Launch", owner_id=admin.id)
    return BoardState(
        user=admin,
        settings=settings,
        projects={project.id: project},
        current_project_id=project.id,
    )


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def repo() -> FakeTaskRepo:
    return FakeTaskRepo()


@pytest.fixture()
def board(state: BoardState, notifier: FakeNotifier, repo: FakeTaskRepo) -> BoardService:
    """BoardService wired with fakes, a fixed clock and sequential ids."""
    return BoardService(
        state,
        notifier=notifier,
        repo=repo,
        clock=lambda: FIXED_NOW,
        id_factory=SequentialIds(),
    )
