"""Service layer driving the task API on behalf of the views."""

from __future__ import annotations

from .auth import AuthService
from .tasks import TaskBoard, TaskBoardService

__all__ = ["AuthService", "TaskBoard", "TaskBoardService"]
