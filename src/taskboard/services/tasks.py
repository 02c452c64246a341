"""Task board workflows built on :class:`~taskboard.client.TaskApiClient`."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from ..client import TaskApiClient
from ..errors import ApiException
from ..messages import is_session_error
from ..schemas.task import Task, TaskStatus, TaskUpdate
from ..schemas.user import User

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TaskBoard:
    """Snapshot rendered by the dashboard."""

    user: User
    tasks: list[Task] = field(default_factory=list)
    users: list[User] = field(default_factory=list)

    def user_name(self, user_id: int) -> str:
        for candidate in self.users:
            if candidate.id == user_id:
                return candidate.name
        return f"User {user_id}"


class TaskBoardService:
    """Every mutation is a single remote call; list loads are full re-fetches."""

    def __init__(self, client: TaskApiClient) -> None:
        self._client = client

    async def load_tasks(self) -> list[Task]:
        """Fetch all tasks, logging and swallowing failures.

        Session errors (invalid or expired token) are raised so the caller can
        ask for a fresh login.
        """

        try:
            return await self._client.list_tasks()
        except ApiException as exc:
            if is_session_error(exc):
                raise
            logger.error("Failed to load tasks", extra={"code": exc.code, "status_code": exc.status_code})
            return []

    async def load_users(self) -> list[User]:
        try:
            return await self._client.list_users()
        except ApiException as exc:
            if is_session_error(exc):
                raise
            logger.error("Failed to load users", extra={"code": exc.code, "status_code": exc.status_code})
            return []

    async def load_board(self, user: User) -> TaskBoard:
        tasks = await self.load_tasks()
        users = await self.load_users()
        return TaskBoard(user=user, tasks=tasks, users=users)

    async def get_task(self, task_id: int) -> Task:
        return await self._client.get_task(task_id)

    async def create_task(
        self,
        *,
        title: str,
        description: str,
        priority: int,
        assignee_ids: list[int],
        due_date: datetime | None = None,
    ) -> Task:
        task = await self._client.create_task(
            title,
            description,
            priority,
            assignee_ids or None,
            due_date=due_date,
        )
        logger.info("Task created", extra={"task_id": task.id, "assignees": len(task.assignees)})
        return task

    async def update_status(self, task_id: int, status: TaskStatus) -> Task:
        task = await self._client.update_task_status(task_id, status)
        logger.info("Task status changed", extra={"task_id": task_id, "status": status.value})
        return task

    async def update_task(self, task_id: int, updates: TaskUpdate) -> Task:
        task = await self._client.update_task(task_id, updates)
        logger.info(
            "Task updated",
            extra={"task_id": task_id, "fields": sorted(updates.model_fields_set)},
        )
        return task

    async def delete_task(self, task_id: int) -> None:
        await self._client.delete_task(task_id)
        logger.info("Task deleted", extra={"task_id": task_id})


__all__ = ["TaskBoard", "TaskBoardService"]
