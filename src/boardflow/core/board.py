# src/boardflow/core/board.py

from __future__ import annotations

"""
Board service.

The thin layer between a front end (console, web handler...) and the pure task
rules. Every write goes through the same steps:
- check the acting user's permission
- run the automation rules on the edited snapshot
- compute a position when the card lands in a new column
- store the snapshot in BoardState, then hand it to the TaskRepo port
- report what happened through the Notifier port
"""

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone

from ..tasks.automation import AutomationResult, apply_automation, progress_from_checklist
from ..tasks.ordering import DropIntent, Side, allocate_position, column_siblings, sort_column
from ..tasks.task_models import ChecklistItem, Status, Tag, Task, new_id
from .access import (
    Permission,
    Project,
    Role,
    User,
    can_access_project,
    require_permission,
    share_with,
    visible_projects,
)
from .errors import NotFound, ValidationError
from .ports import NoticeKind, Notifier, TaskRepo
from .state import BoardState

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BoardService:
    def __init__(
        self,
        state: BoardState,
        *,
        notifier: Notifier | None = None,
        repo: TaskRepo | None = None,
        clock: Callable[[], datetime] = _utc_now,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self.state = state
        self._notifier = notifier
        self._repo = repo
        self._clock = clock
        self._id_factory = id_factory

    @property
    def user(self) -> User:
        return self.state.user

    # ---- ports ----

    def _notify(self, kind: NoticeKind, text: str) -> None:
        if self._notifier is None:
            return
        self._notifier.notify(kind=kind, text=text)

    def _persist(self, what: str, call: Callable[[], None]) -> None:
        if self._repo is None:
            return
        try:
            call()
        except Exception:
            # The in-memory copy stays authoritative; the user is told sync failed.
            logger.exception("TaskRepo write failed (%s)", what)
            self._notify(NoticeKind.ERROR, f"Failed to sync {what} with the server.")

    # ---- lookups ----

    def _can_see(self, task: Task) -> bool:
        project = self.state.projects.get(task.project_id)
        return project is not None and can_access_project(self.user, project)

    def get_task(self, task_id: str) -> Task:
        """Task by id. Tasks in projects the user cannot see are reported as missing."""
        task = self.state.tasks.get(task_id)
        if task is None or not self._can_see(task):
            raise NotFound(f"Task {task_id} not found.")
        return task

    def resolve_task(self, ref: str) -> Task:
        """Find a task by full id or by a unique id prefix."""
        ref = ref.strip()
        exact = self.state.tasks.get(ref)
        if exact is not None and self._can_see(exact):
            return exact
        matches = [
            t for tid, t in self.state.tasks.items() if ref and tid.startswith(ref) and self._can_see(t)
        ]
        if len(matches) == 1:
            return matches[0]
        if not matches:
            raise NotFound(f"Task {ref} not found.")
        raise ValidationError(f"Task id {ref} is ambiguous ({len(matches)} matches).")

    def get_project(self, project_id: str) -> Project:
        project = self.state.projects.get(project_id)
        if project is None or not can_access_project(self.user, project):
            raise NotFound(f"Project {project_id} not found.")
        return project

    def current_project(self) -> Project:
        pid = self.state.current_project_id
        if pid is None:
            raise ValidationError("Select a project first.")
        return self.get_project(pid)

    # ---- projects ----

    def visible_projects(self) -> list[Project]:
        require_permission(self.user, Permission.READ, "view projects")
        return visible_projects(self.user, self.state.projects.values())

    def select_project(self, project_id: str) -> Project:
        require_permission(self.user, Permission.READ, "view projects")
        project = self.get_project(project_id)
        self.state.current_project_id = project.id
        self.state.assignee_filter = None
        return project

    def create_project(self, name: str) -> Project:
        require_permission(self.user, Permission.EDIT, "create projects")
        name = name.strip()
        if not name:
            raise ValidationError("Project name is required.")
        project = Project(id=self._id_factory(), name=name, owner_id=self.user.id)
        self.state.projects[project.id] = project
        self.state.current_project_id = project.id
        self.state.assignee_filter = None
        logger.info("Project created id=%s name=%r", project.id, name)
        self._notify(NoticeKind.SUCCESS, "Project created.")
        self._persist("project", lambda: self._repo.save_project(project))
        return project

    def share_project(self, project_id: str, username: str, *, task_id: str | None = None) -> Project:
        require_permission(self.user, Permission.EDIT, "share projects")
        project = share_with(self.get_project(project_id), username)
        name = username.strip()
        self.state.projects[project.id] = project
        self._persist("project", lambda: self._repo.save_project(project))

        if task_id is not None:
            task = replace(self.get_task(task_id), assignee=name)
            self.state.tasks[task.id] = task
            self._persist("task", lambda: self._repo.save_task(task))

        logger.info("Project %s shared with %s", project.id, name)
        self._notify(NoticeKind.SUCCESS, f"Project shared with {name}.")
        return project

    # ---- tasks ----

    def column(self, status: Status, *, project_id: str | None = None) -> list[Task]:
        """Sorted cards of one column, honoring the assignee filter."""
        require_permission(self.user, Permission.READ, "view tasks")
        return sort_column(t for t in self.visible_tasks(project_id) if t.status == status)

    def visible_tasks(self, project_id: str | None = None) -> list[Task]:
        if project_id is not None:
            self.get_project(project_id)
        tasks = self.state.project_tasks(project_id)
        who = self.state.assignee_filter
        if who:
            tasks = [t for t in tasks if t.assignee == who]
        return tasks

    def quick_add(self, title: str, status: Status = Status.TODO) -> Task:
        require_permission(self.user, Permission.EDIT, "add tasks")
        title = title.strip()
        if not title:
            raise ValidationError("Task title is required.")
        project = self.current_project()

        siblings = column_siblings(self.state.tasks.values(), project_id=project.id, status=status)
        task = Task(
            id=self._id_factory(),
            project_id=project.id,
            title=title,
            status=status,
            progress=0,
            position=allocate_position(siblings, DropIntent.append()),
            created_at=self._clock().isoformat(),
        )
        self.state.tasks[task.id] = task
        logger.info("Quick add id=%s status=%s position=%s", task.id, status, task.position)
        self._persist("task", lambda: self._repo.save_task(task))
        return task

    def save_task(self, task: Task) -> AutomationResult:
        """
        Create or update a task from an edit form.

        The card is appended to its column when it is new, was never placed, or
        now sits in a different column than the stored copy.
        """
        require_permission(self.user, Permission.EDIT, "edit tasks")
        if not task.title.strip():
            raise ValidationError("Task title is required.")
        self.get_project(task.project_id)
        stored = self.state.tasks.get(task.id)
        if stored is not None and not self._can_see(stored):
            raise NotFound(f"Task {task.id} not found.")

        self._notify_schedule(task)

        result = apply_automation(task, id_factory=self._id_factory)
        processed = result.task

        previous = self.state.tasks.get(processed.id)
        if previous is None or processed.position is None or previous.status != processed.status:
            siblings = column_siblings(
                self.state.tasks.values(),
                project_id=processed.project_id,
                status=processed.status,
                exclude_id=processed.id,
            )
            processed = replace(processed, position=allocate_position(siblings))

        if (
            self.user.role == Role.EDITOR
            and processed.assignee
            and processed.assignee != self.user.username
        ):
            self._notify(NoticeKind.ASSIGNEE, f"Notification sent to {processed.assignee}.")

        self.state.tasks[processed.id] = processed
        logger.info(
            "Task saved id=%s status=%s progress=%s rule=%r",
            processed.id,
            processed.status,
            processed.progress,
            result.rule,
        )
        if result.rule:
            self._notify(NoticeKind.AUTOMATION, result.rule)
        self._persist("task", lambda: self._repo.save_task(processed))
        return AutomationResult(processed, result.rule)

    def _notify_schedule(self, task: Task) -> None:
        if not task.scheduled_at:
            return
        try:
            when = datetime.fromisoformat(task.scheduled_at)
        except ValueError:
            logger.debug("Ignoring unparsable scheduled_at=%r task=%s", task.scheduled_at, task.id)
            return
        if when.tzinfo is None:
            when = when.astimezone()
        if when > self._clock():
            self._notify(NoticeKind.SCHEDULE, f"Task scheduled for {when:%Y-%m-%d %H:%M}.")

    def move_task(
        self,
        task_id: str,
        status: Status | None = None,
        *,
        relative_to: str | None = None,
        side: Side = Side.AFTER,
    ) -> AutomationResult:
        """
        Drag-and-drop: move a card to a column, optionally next to another card.

        Without an explicit status the card goes to relative_to's column. If the
        automation rules send the card to another column than the drop column,
        it is appended there and the drop target is ignored.
        """
        require_permission(self.user, Permission.MOVE, "move tasks")
        dragged = self.get_task(task_id)

        if status is None:
            if relative_to is None:
                raise ValidationError("A target column or a target task is required.")
            status = self.get_task(relative_to).status

        result = apply_automation(replace(dragged, status=status), id_factory=self._id_factory)
        final_status = result.task.status

        siblings = column_siblings(
            self.state.tasks.values(),
            project_id=dragged.project_id,
            status=final_status,
            exclude_id=dragged.id,
        )
        if final_status != status or relative_to is None:
            intent = DropIntent.append()
        else:
            intent = DropIntent(relative_to=relative_to, side=side)

        moved = replace(result.task, position=allocate_position(siblings, intent))
        self.state.tasks[moved.id] = moved
        logger.info(
            "Task moved id=%s drop=%s final=%s position=%s rule=%r",
            moved.id,
            status,
            final_status,
            moved.position,
            result.rule,
        )
        if result.rule:
            self._notify(NoticeKind.AUTOMATION, result.rule)
        self._persist("task", lambda: self._repo.save_task(moved))
        return AutomationResult(moved, result.rule)

    def delete_task(self, task_id: str) -> None:
        require_permission(self.user, Permission.DELETE, "delete tasks")
        self.get_task(task_id)
        del self.state.tasks[task_id]
        logger.info("Task deleted id=%s", task_id)
        self._notify(NoticeKind.SUCCESS, "Task deleted.")
        self._persist("task deletion", lambda: self._repo.delete_task(task_id))

    def set_progress(self, task_id: str, progress: int) -> AutomationResult:
        if not 0 <= progress <= 100:
            raise ValidationError("Progress must be between 0 and 100.")
        return self.save_task(replace(self.get_task(task_id), progress=progress))

    # ---- checklist (progress follows the checklist) ----

    def _save_checklist(self, task: Task, checklist: tuple[ChecklistItem, ...]) -> AutomationResult:
        updated = replace(task, checklist=checklist, progress=progress_from_checklist(checklist))
        return self.save_task(updated)

    def add_checklist_item(self, task_id: str, text: str, *, due_date: str | None = None) -> AutomationResult:
        text = text.strip()
        if not text:
            raise ValidationError("Checklist item text is required.")
        task = self.get_task(task_id)
        item = ChecklistItem(id=self._id_factory(), text=text, due_date=due_date)
        return self._save_checklist(task, task.checklist + (item,))

    def toggle_checklist_item(self, task_id: str, item_id: str) -> AutomationResult:
        task = self.get_task(task_id)
        if not any(i.id == item_id for i in task.checklist):
            raise NotFound(f"Checklist item {item_id} not found.")
        checklist = tuple(
            replace(i, checked=not i.checked) if i.id == item_id else i for i in task.checklist
        )
        return self._save_checklist(task, checklist)

    def remove_checklist_item(self, task_id: str, item_id: str) -> AutomationResult:
        task = self.get_task(task_id)
        checklist = tuple(i for i in task.checklist if i.id != item_id)
        if len(checklist) == len(task.checklist):
            raise NotFound(f"Checklist item {item_id} not found.")
        return self._save_checklist(task, checklist)

    # ---- tags / filters ----

    def manage_tag(self, action: str, tag: Tag, old_text: str | None = None) -> list[Tag]:
        """
        action:
        - "add": add tag unless a tag with that text exists
        - "edit": replace the tag named old_text, also on every task using it
        - "delete": drop the tag from the system list (tasks keep their copy)
        """
        require_permission(self.user, Permission.EDIT, "manage tags")
        tags = self.state.tags

        if action == "add":
            if not any(t.text == tag.text for t in tags):
                tags.append(tag)
        elif action == "edit":
            if not old_text:
                raise ValidationError("old_text is required to edit a tag.")
            self.state.tags = [tag if t.text == old_text else t for t in tags]
            for task in list(self.state.tasks.values()):
                if any(t.text == old_text for t in task.tags):
                    renamed = replace(
                        task, tags=tuple(tag if t.text == old_text else t for t in task.tags)
                    )
                    self.state.tasks[task.id] = renamed
                    self._persist("task", lambda renamed=renamed: self._repo.save_task(renamed))
        elif action == "delete":
            self.state.tags = [t for t in tags if t.text != tag.text]
        else:
            raise ValidationError(f"Unknown tag action: {action}")
        return list(self.state.tags)

    def set_assignee_filter(self, username: str | None) -> None:
        self.state.assignee_filter = username.strip() if username and username.strip() else None

    def toggle_column(self, status: Status) -> bool:
        """Hide/show a board column. Returns True if the column is now hidden."""
        hidden = self.state.hidden_columns
        if status in hidden:
            hidden.discard(status)
            return False
        hidden.add(status)
        return True
