# src/boardflow/core/access.py

from __future__ import annotations

"""
Roles, users and projects.

Permissions per role:
- admin: read, edit, move, delete
- editor: read, edit, move
- viewer: read

A project is visible to its owner and to every username in shared_with.
"""

from collections.abc import Iterable
from dataclasses import dataclass, replace
from enum import StrEnum

from .errors import PermissionDenied, ValidationError


class Permission(StrEnum):
    READ = "read"
    EDIT = "edit"
    MOVE = "move"
    DELETE = "delete"


class Role(StrEnum):
    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"

    @property
    def label(self) -> str:
        return ROLE_LABELS[self]

    @classmethod
    def from_db(cls, raw: str | None) -> Role:
        if not raw:
            return cls.ADMIN
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.VIEWER


ROLE_PERMISSIONS: dict[Role, frozenset[Permission]] = {
    Role.ADMIN: frozenset({Permission.READ, Permission.EDIT, Permission.MOVE, Permission.DELETE}),
    Role.EDITOR: frozenset({Permission.READ, Permission.EDIT, Permission.MOVE}),
    Role.VIEWER: frozenset({Permission.READ}),
}

ROLE_LABELS: dict[Role, str] = {
    Role.ADMIN: "Administrator",
    Role.EDITOR: "Manager (Editor)",
    Role.VIEWER: "User (Viewer)",
}


@dataclass(slots=True, frozen=True)
class User:
    id: str
    username: str
    role: Role = Role.ADMIN


@dataclass(slots=True, frozen=True)
class Project:
    id: str
    name: str
    owner_id: str
    shared_with: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "owner_id": self.owner_id,
            "shared_with": list(self.shared_with),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Project:
        shared = data.get("shared_with") or []
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            owner_id=str(data.get("owner_id") or ""),
            shared_with=tuple(s for s in shared if isinstance(s, str)),
        )


def has_permission(user: User, permission: Permission) -> bool:
    return permission in ROLE_PERMISSIONS.get(user.role, frozenset())


def require_permission(user: User, permission: Permission, action: str) -> None:
    """Raise PermissionDenied if user's role does not grant permission."""
    if not has_permission(user, permission):
        raise PermissionDenied(
            f"{user.role.label} cannot {action}.",
            permission=permission.value,
            role=user.role.value,
        )


def can_access_project(user: User, project: Project) -> bool:
    return project.owner_id == user.id or user.username in project.shared_with


def visible_projects(user: User, projects: Iterable[Project]) -> list[Project]:
    return [p for p in projects if can_access_project(user, p)]


def share_with(project: Project, username: str) -> Project:
    """Return project with username added to shared_with (no-op if already shared)."""
    name = username.strip()
    if not name:
        raise ValidationError("Enter a valid username.")
    if name in project.shared_with:
        return project
    return replace(project, shared_with=project.shared_with + (name,))
