# src/boardflow/core/errors.py

from __future__ import annotations


class BoardError(Exception):
    """Base class for errors that connectors show to the user."""


class PermissionDenied(BoardError):
    def __init__(self, message: str, *, permission: str, role: str) -> None:
        super().__init__(message)
        self.permission = permission
        self.role = role


class NotFound(BoardError, KeyError):
    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message.
        return str(self.args[0]) if self.args else ""


class ValidationError(BoardError, ValueError):
    pass
