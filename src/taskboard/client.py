"""Async client for the remote task-management API."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from .core.context import REQUEST_ID_HEADER, current_request_id
from .errors import ApiException
from .schemas.system import ApiError
from .schemas.task import Task, TaskCreate, TaskStatus, TaskUpdate
from .schemas.user import AuthResponse, LoginRequest, SignupRequest, User

logger = logging.getLogger(__name__)

T = TypeVar("T")

_USER_LIST = TypeAdapter(list[User])
_TASK_LIST = TypeAdapter(list[Task])
_TASK = TypeAdapter(Task)
_AUTH = TypeAdapter(AuthResponse)


class TaskApiClient:
    """Thin wrapper issuing one HTTP call per operation.

    ``http_client`` must already point at the API base address. The bearer
    token is attached to every call except signup and login. No retries and
    no caching: every failure is raised as :class:`ApiException`.
    """

    def __init__(self, http_client: httpx.AsyncClient, *, token: str | None = None) -> None:
        self._http = http_client
        self._token = token

    def _headers(self, *, authenticated: bool = True) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if authenticated and self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        request_id = current_request_id()
        if request_id:
            headers[REQUEST_ID_HEADER] = request_id
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        body: BaseModel | None = None,
        authenticated: bool = True,
    ) -> httpx.Response:
        content = None
        if body is not None:
            content = body.model_dump_json(by_alias=True, exclude_unset=True)
        try:
            response = await self._http.request(
                method,
                path,
                content=content,
                headers=self._headers(authenticated=authenticated),
            )
        except httpx.TransportError as exc:
            logger.warning(
                "Task API unreachable",
                extra={"method": method, "path": path, "error": exc.__class__.__name__},
            )
            raise ApiException.unknown(503, "Unable to reach the task service.") from exc
        logger.debug(
            "Task API call",
            extra={"method": method, "path": path, "status_code": response.status_code},
        )
        return response

    @staticmethod
    def _raise_for_error(response: httpx.Response) -> None:
        if response.is_success:
            return
        try:
            error = ApiError.model_validate(response.json())
        except (ValueError, ValidationError):
            raise ApiException.unknown(response.status_code) from None
        raise ApiException(response.status_code, error)

    def _parse(self, response: httpx.Response, adapter: TypeAdapter[T]) -> T:
        self._raise_for_error(response)
        try:
            return adapter.validate_json(response.content)
        except ValidationError as exc:
            logger.error(
                "Task API returned an unexpected body",
                extra={"status_code": response.status_code, "errors": exc.error_count()},
            )
            raise ApiException.unknown(response.status_code, "Unexpected response from the task service.") from exc

    def _no_content(self, response: httpx.Response) -> None:
        # 204 carries no body; anything else on success is ignored as well.
        self._raise_for_error(response)

    # -- auth -----------------------------------------------------------------

    async def signup(self, email: str, password: str, name: str) -> AuthResponse:
        body = SignupRequest(email=email, password=password, name=name)
        response = await self._request("POST", "/auth/signup", body=body, authenticated=False)
        return self._parse(response, _AUTH)

    async def login(self, email: str, password: str) -> AuthResponse:
        body = LoginRequest(email=email, password=password)
        response = await self._request("POST", "/auth/login", body=body, authenticated=False)
        return self._parse(response, _AUTH)

    async def logout(self) -> None:
        response = await self._request("POST", "/auth/logout")
        self._no_content(response)

    # -- users ----------------------------------------------------------------

    async def list_users(self) -> list[User]:
        response = await self._request("GET", "/users")
        return self._parse(response, _USER_LIST)

    # -- tasks ----------------------------------------------------------------

    async def list_tasks(self) -> list[Task]:
        response = await self._request("GET", "/tasks")
        return self._parse(response, _TASK_LIST)

    async def get_task(self, task_id: int) -> Task:
        response = await self._request("GET", f"/tasks/{task_id}")
        return self._parse(response, _TASK)

    async def create_task(
        self,
        title: str,
        description: str,
        priority: int,
        assignee_ids: list[int] | None = None,
        *,
        due_date: datetime | None = None,
    ) -> Task:
        payload: dict[str, Any] = {"title": title, "description": description, "priority": priority}
        if assignee_ids:
            payload["assignee_ids"] = list(assignee_ids)
        if due_date is not None:
            payload["due_date"] = due_date
        response = await self._request("POST", "/tasks", body=TaskCreate(**payload))
        return self._parse(response, _TASK)

    async def update_task(self, task_id: int, updates: TaskUpdate) -> Task:
        response = await self._request("PATCH", f"/tasks/{task_id}", body=updates)
        return self._parse(response, _TASK)

    async def update_task_status(self, task_id: int, status: TaskStatus) -> Task:
        return await self.update_task(task_id, TaskUpdate(status=status))

    async def delete_task(self, task_id: int) -> None:
        response = await self._request("DELETE", f"/tasks/{task_id}")
        self._no_content(response)


__all__ = ["TaskApiClient"]
