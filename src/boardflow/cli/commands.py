# src/boardflow/cli/commands.py

from __future__ import annotations

import inspect
import logging
import math
from collections.abc import Callable
from typing import cast

from ..core.board import BoardService
from ..core.errors import BoardError, ValidationError
from ..core.metrics import dashboard_stats, header_metrics, pattern_groups
from ..core.views import board_columns, checklist_summary, list_groups, table_rows
from ..tasks.ordering import Side
from ..tasks.task_models import Status, Task

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[BoardService, list[str]], str]
CommandHandler3 = Callable[[BoardService, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

SHORT_ID = 8


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /board, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        board: BoardService,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        Board errors (permissions, unknown ids, bad input) become the reply.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(board, args, emit)
            h2 = cast(CommandHandler2, handler)
            return h2(board, args)
        except BoardError as e:
            logger.info("/%s rejected: %s", name, e)
            return f"[ERROR] {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _short(task: Task) -> str:
    return task.id[:SHORT_ID]


def _card(task: Task) -> str:
    extra = [f"{task.progress}%"]
    summary = checklist_summary(task)
    if summary:
        extra.append(f"[{summary}]")
    if task.assignee:
        extra.append(f"@{task.assignee}")
    return f"{_short(task)}  {task.title}  ({' '.join(extra)})"


def _parse_status(raw: str) -> Status:
    try:
        return Status.parse(raw)
    except ValueError as e:
        raise ValidationError(str(e)) from None


def cmd_help(board: BoardService, args: list[str]) -> str:
    return registry.build_help()


def cmd_whoami(board: BoardService, args: list[str]) -> str:
    user = board.user
    project = board.state.projects.get(board.state.current_project_id or "")
    where = project.name if project else "(no project)"
    return f"{user.username} - {user.role.label}. Current project: {where}"


def cmd_projects(board: BoardService, args: list[str]) -> str:
    projects = board.visible_projects()
    if not projects:
        return "No projects. Use /newproject <name>."
    lines = ["Projects:"]
    for p in projects:
        mark = "*" if p.id == board.state.current_project_id else " "
        shared = f"shared with {len(p.shared_with)} users" if p.shared_with else "private"
        lines.append(f" {mark} {p.id[:SHORT_ID]}  {p.name} ({shared})")
    return "\n".join(lines)


def cmd_project(board: BoardService, args: list[str]) -> str:
    """
    /project <id prefix | name>  -> switch current project
    """
    if not args:
        return "Usage: /project <id prefix | name>"
    ref = " ".join(args).strip().lower()
    for p in board.visible_projects():
        if p.id.startswith(ref) or p.name.lower() == ref:
            board.select_project(p.id)
            return f"Switched to project {p.name}."
    return f"No project matches {ref!r}."


def cmd_newproject(board: BoardService, args: list[str]) -> str:
    project = board.create_project(" ".join(args))
    return f"Project {project.name} created ({project.id[:SHORT_ID]})."


def cmd_share(board: BoardService, args: list[str]) -> str:
    """
    /share <username> [task]  -> share current project, optionally assign a task
    """
    if not args:
        return "Usage: /share <username> [task]"
    task_id = board.resolve_task(args[1]).id if len(args) > 1 else None
    project = board.share_project(board.current_project().id, args[0], task_id=task_id)
    return f"{project.name} is shared with: {', '.join(project.shared_with)}"


def cmd_add(board: BoardService, args: list[str]) -> str:
    """
    /add [status] <title...>  -> quick add at the end of a column (default: todo)
    """
    if not args:
        return "Usage: /add [status] <title>"
    status = Status.TODO
    words = args
    if len(args) > 1:
        try:
            status = Status.parse(args[0])
            words = args[1:]
        except ValueError:
            pass
    task = board.quick_add(" ".join(words), status)
    return f"Added {_short(task)} to {status.label}."


def cmd_board(board: BoardService, args: list[str]) -> str:
    columns = board_columns(board.visible_tasks(), hidden=board.state.hidden_columns)
    lines: list[str] = []
    for status, cards in columns.items():
        lines.append(f"== {status.label} ({len(cards)})")
        lines.extend(f"   {_card(t)}" for t in cards)
        if not cards:
            lines.append("   (empty)")
    if board.state.hidden_columns:
        hidden = ", ".join(s.label for s in Status if s in board.state.hidden_columns)
        lines.append(f"(hidden: {hidden})")
    return "\n".join(lines)


def cmd_list(board: BoardService, args: list[str]) -> str:
    groups = list_groups(board.visible_tasks())
    if not groups:
        return "No tasks in this project."
    lines: list[str] = []
    for status, cards in groups:
        lines.append(f"{status.label} ({len(cards)})")
        lines.extend(f"  - {_card(t)}" for t in cards)
    return "\n".join(lines)


def cmd_table(board: BoardService, args: list[str]) -> str:
    rows = table_rows(board.visible_tasks())
    if not rows:
        return "No tasks in this project."
    cols = ("id", "title", "status", "priority", "assignee", "progress", "checklist", "due_date")
    cells = [[str(r[c])[:SHORT_ID] if c == "id" else str(r[c]) for c in cols] for r in rows]
    widths = [max(len(c), *(len(row[i]) for row in cells)) for i, c in enumerate(cols)]
    out = ["  ".join(c.upper().ljust(w) for c, w in zip(cols, widths))]
    out.extend("  ".join(v.ljust(w) for v, w in zip(row, widths)) for row in cells)
    return "\n".join(out)


def cmd_show(board: BoardService, args: list[str]) -> str:
    if not args:
        return "Usage: /show <task>"
    t = board.resolve_task(args[0])
    lines = [
        f"{t.title} [{t.status.label}] {t.progress}%",
        f"  id={t.id} priority={t.priority.value} position={t.position}",
    ]
    if t.assignee:
        lines.append(f"  assignee: {t.assignee}")
    if t.description:
        lines.append(f"  {t.description}")
    for n, item in enumerate(t.checklist, start=1):
        box = "x" if item.checked else " "
        lines.append(f"  {n}. [{box}] {item.text}")
    return "\n".join(lines)


def cmd_move(board: BoardService, args: list[str], emit: CommandEmitter | None) -> str:
    """
    /move <task> <status>             -> append to a column
    /move <task> before|after <task>  -> place next to another card

    When the automation rules redirect the card, emit() gets a note naming the
    column it was dropped on.
    """
    if len(args) < 2:
        return "Usage: /move <task> <status> | /move <task> before|after <task>"
    task = board.resolve_task(args[0])
    if args[1].lower() in (Side.BEFORE, Side.AFTER):
        if len(args) < 3:
            return "Usage: /move <task> before|after <task>"
        target = board.resolve_task(args[2])
        dropped_on = target.status
        result = board.move_task(task.id, relative_to=target.id, side=Side(args[1].lower()))
    else:
        dropped_on = _parse_status(args[1])
        result = board.move_task(task.id, dropped_on)
    if emit is not None and result.task.status != dropped_on:
        emit(f"Dropped on {dropped_on.label}, automation placed it in {result.task.status.label}.")
    return f"{_short(result.task)} -> {result.task.status.label}."


def cmd_progress(board: BoardService, args: list[str]) -> str:
    if len(args) != 2 or not args[1].lstrip("-").isdigit():
        return "Usage: /progress <task> <0-100>"
    task = board.resolve_task(args[0])
    result = board.set_progress(task.id, int(args[1]))
    return f"{_short(result.task)} at {result.task.progress}% ({result.task.status.label})."


def cmd_item(board: BoardService, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /item <task> <text>"
    task = board.resolve_task(args[0])
    result = board.add_checklist_item(task.id, " ".join(args[1:]))
    return f"Checklist now {checklist_summary(result.task)} ({result.task.progress}%)."


def cmd_check(board: BoardService, args: list[str]) -> str:
    """
    /check <task> <n>  -> toggle the n-th checklist item (as numbered by /show)
    """
    if len(args) != 2 or not args[1].isdigit():
        return "Usage: /check <task> <item number>"
    task = board.resolve_task(args[0])
    n = int(args[1])
    if not 1 <= n <= len(task.checklist):
        return f"Task {_short(task)} has {len(task.checklist)} checklist items."
    result = board.toggle_checklist_item(task.id, task.checklist[n - 1].id)
    return (
        f"Checklist {checklist_summary(result.task)} - {result.task.progress}% "
        f"({result.task.status.label})."
    )


def cmd_delete(board: BoardService, args: list[str]) -> str:
    if not args:
        return "Usage: /delete <task>"
    task = board.resolve_task(args[0])
    board.delete_task(task.id)
    return f"Deleted {task.title}."


def cmd_filter(board: BoardService, args: list[str]) -> str:
    board.set_assignee_filter(args[0] if args else None)
    who = board.state.assignee_filter
    return f"Showing tasks assigned to {who}." if who else "Assignee filter cleared."


def cmd_hide(board: BoardService, args: list[str]) -> str:
    if not args:
        return "Usage: /hide <status>"
    status = _parse_status(args[0])
    hidden = board.toggle_column(status)
    return f"{status.label} {'hidden' if hidden else 'visible'}."


def cmd_stats(board: BoardService, args: list[str]) -> str:
    """
    /stats      -> current project
    /stats all  -> every visible project
    """
    if args and args[0].lower() == "all":
        ids = {p.id for p in board.visible_projects()}
        tasks = [t for t in board.state.tasks.values() if t.project_id in ids]
    else:
        tasks = board.visible_tasks()
    stats = dashboard_stats(tasks)

    head = header_metrics(tasks)
    lines = [
        f"Active: {head.active}  Completion: {head.completion_rate}%  Velocity: {head.velocity}",
        f"Total: {stats.total}  Done: {stats.done}  In progress: {stats.in_progress}  "
        f"Backlog: {stats.backlog}",
        "Priority: " + "  ".join(f"{p.value}={n}" for p, n in stats.priorities.items()),
    ]
    for share in stats.distribution:
        lines.append(f"  {share.status.label:<12} {share.count:>3} ({math.floor(share.percent + 0.5)}%)")
    for group in pattern_groups(tasks):
        lines.append(f"! {group.label}: {group.reason}")
    return "\n".join(lines)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("whoami", cmd_whoami, help_text="Show the acting user and current project.")
registry.register("projects", cmd_projects, help_text="List visible projects.")
registry.register("project", cmd_project, help_text="Switch project: /project <id|name>.")
registry.register("newproject", cmd_newproject, help_text="Create a project: /newproject <name>.")
registry.register("share", cmd_share, help_text="Share project: /share <username> [task].")
registry.register("add", cmd_add, help_text="Quick add: /add [status] <title>.")
registry.register("board", cmd_board, help_text="Board view.", aliases=["b"])
registry.register("list", cmd_list, help_text="List view.", aliases=["ls"])
registry.register("table", cmd_table, help_text="Table view.")
registry.register("show", cmd_show, help_text="Task details: /show <task>.")
registry.register("move", cmd_move, help_text="Move: /move <task> <status> | before|after <task>.")
registry.register("progress", cmd_progress, help_text="Set progress: /progress <task> <0-100>.")
registry.register("item", cmd_item, help_text="Add checklist item: /item <task> <text>.")
registry.register("check", cmd_check, help_text="Toggle checklist item: /check <task> <n>.")
registry.register("delete", cmd_delete, help_text="Delete a task (admin): /delete <task>.")
registry.register("filter", cmd_filter, help_text="Filter by assignee: /filter [username].")
registry.register("hide", cmd_hide, help_text="Hide/show a column: /hide <status>.")
registry.register("stats", cmd_stats, help_text="Monitoring dashboard: /stats [all].")
