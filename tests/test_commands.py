# tests/test_commands.py

from __future__ import annotations

from dataclasses import replace

from boardflow.cli.commands import CommandRegistry, registry
from boardflow.core.access import Role
from boardflow.core.board import BoardService
from boardflow.tasks.task_models import Status


def test_command_registry_routes_2_and_3_params(board: BoardService) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}
    notes: list[str] = []

    def h2(board, args):
        called["h2"] += 1
        return "h2"

    def h3(board, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b", aliases=["bee"])

    assert reg.handle(board, "/a x") == "h2"
    assert reg.handle(board, "/BEE y", emit=notes.append) == "h3"
    assert called == {"h2": 1, "h3": 1}
    assert notes == ["note"]
    assert "/bee" not in reg.build_help()


def test_command_registry_unknown_and_non_command(board: BoardService) -> None:
    reg = CommandRegistry()
    assert reg.handle(board, "hello") is None
    assert "Unknown command" in (reg.handle(board, "/nope") or "")
    assert "Empty command" in (reg.handle(board, "/") or "")


def test_board_errors_become_replies(board: BoardService) -> None:
    assert registry.handle(board, "/show nothing") == "[ERROR] Task nothing not found."
    assert registry.handle(board, "/hide sometime") == "[ERROR] unknown status: 'sometime'"


def test_quick_add_and_board_view(board: BoardService) -> None:
    assert registry.handle(board, "/add Design system") == "Added id-0001 to To Do."
    assert registry.handle(board, "/add in-progress Hotfix") == "Added id-0002 to In Progress."

    view = registry.handle(board, "/board") or ""
    assert "== To Do (1)" in view
    assert "id-0001  Design system  (0%)" in view
    assert "== Done (0)" in view

    assert registry.handle(board, "/hide done") == "Done hidden."
    assert "== Done" not in (registry.handle(board, "/b") or "")


def test_progress_and_move_commands(board: BoardService) -> None:
    registry.handle(board, "/add First")
    registry.handle(board, "/add inprogress Second")

    assert registry.handle(board, "/progress id-0002 0") == "id-0002 at 0% (To Do)."
    assert registry.handle(board, "/move id-0002 before id-0001") == "id-0002 -> To Do."
    assert [t.title for t in board.column(Status.TODO)] == ["Second", "First"]

    assert registry.handle(board, "/move id-0001 backlog") == "id-0001 -> Backlog."
    reply = registry.handle(board, "/progress id-0001 101")
    assert reply == "[ERROR] Progress must be between 0 and 100."
    assert registry.handle(board, "/progress id-0001 lots") == "Usage: /progress <task> <0-100>"


def test_checklist_commands(board: BoardService) -> None:
    registry.handle(board, "/add Docs")
    assert registry.handle(board, "/item id-0001 Write intro") == "Checklist now 0/1 (0%)."
    reply = registry.handle(board, "/check id-0001 1") or ""
    # 100% with no QA items: the QA gate adds them and holds the card in review.
    assert reply == "Checklist 1/4 - 100% (Review)."
    assert "[ ] Description complete?" in (registry.handle(board, "/show id-0001") or "")
    assert registry.handle(board, "/check id-0001 9") == "Task id-0001 has 4 checklist items."


def test_viewer_gets_permission_error(board: BoardService) -> None:
    registry.handle(board, "/add Keep me")
    board.state.user = replace(board.state.user, role=Role.VIEWER)
    assert registry.handle(board, "/delete id-0001") == "[ERROR] User (Viewer) cannot delete tasks."
    assert "Keep me" in (registry.handle(board, "/list") or "")


def test_stats_command(board: BoardService) -> None:
    registry.handle(board, "/add One")
    registry.handle(board, "/add done Two")
    stats = registry.handle(board, "/stats") or ""
    assert "Completion: 50%" in stats
    assert "Total: 2  Done: 1" in stats


def test_move_reports_automation_redirect(board: BoardService) -> None:
    registry.handle(board, "/add inprogress Half done")
    board.set_progress("id-0001", 30)
    notes: list[str] = []

    reply = registry.handle(board, "/move id-0001 done", emit=notes.append)

    assert reply == "id-0001 -> In Progress."
    assert notes == ["Dropped on Done, automation placed it in In Progress."]

    notes.clear()
    registry.handle(board, "/move id-0001 inprogress", emit=notes.append)
    assert notes == []
