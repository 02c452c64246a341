"""Fake remote task API used by the test-suite."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

import httpx

API_PREFIX = "/api/v1"

ALICE = {"id": 1, "email": "alice@example.com", "name": "Alice"}
BOB = {"id": 2, "email": "bob@example.com", "name": "Bob"}
CAROL = {"id": 3, "email": "carol@example.com", "name": "Carol"}

_CSRF_PATTERN = re.compile(r'name="csrf_token" value="([^"]+)"')


def make_task(task_id: int, **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": task_id,
        "ownerId": ALICE["id"],
        "title": f"Task {task_id}",
        "description": "",
        "dueDate": None,
        "status": "TODO",
        "priority": 1,
        "assignees": [],
        "createdAt": "2024-01-01T12:00:00Z",
        "updatedAt": "2024-01-01T12:00:00Z",
    }
    payload.update(overrides)
    return payload


@dataclass(slots=True)
class RecordedRequest:
    method: str
    path: str
    headers: httpx.Headers
    body: Any


@dataclass
class FakeTaskApi:
    """In-memory stand-in for the remote task API, served via ``MockTransport``."""

    users: list[dict[str, Any]] = field(default_factory=lambda: [ALICE, BOB, CAROL])
    tasks: list[dict[str, Any]] = field(default_factory=list)
    requests: list[RecordedRequest] = field(default_factory=list)
    overrides: dict[tuple[str, str], httpx.Response] = field(default_factory=dict)
    token: str = "token-abc"

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix(API_PREFIX)
        body = json.loads(request.content) if request.content else None
        self.requests.append(RecordedRequest(request.method, path, request.headers, body))

        override = self.overrides.get((request.method, path))
        if override is not None:
            return override
        return self._route(request.method, path, body)

    def fail(
        self,
        method: str,
        path: str,
        status_code: int,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        payload: dict[str, Any] = {"code": code, "message": message}
        if details is not None:
            payload["details"] = details
        self.overrides[(method, path)] = httpx.Response(status_code, json=payload)

    def calls(self, method: str, path: str) -> list[RecordedRequest]:
        return [item for item in self.requests if item.method == method and item.path == path]

    def _route(self, method: str, path: str, body: Any) -> httpx.Response:
        if (method, path) == ("POST", "/auth/login"):
            user = next((u for u in self.users if u["email"] == body["email"]), ALICE)
            return httpx.Response(200, json={"token": self.token, "user": user})
        if (method, path) == ("POST", "/auth/signup"):
            user = {"id": len(self.users) + 1, "email": body["email"], "name": body["name"]}
            self.users.append(user)
            return httpx.Response(201, json={"token": self.token, "user": user})
        if (method, path) == ("POST", "/auth/logout"):
            return httpx.Response(204)
        if (method, path) == ("GET", "/users"):
            return httpx.Response(200, json=self.users)
        if (method, path) == ("GET", "/tasks"):
            return httpx.Response(200, json=self.tasks)
        if (method, path) == ("POST", "/tasks"):
            task = make_task(
                len(self.tasks) + 1,
                title=body["title"],
                description=body.get("description", ""),
                priority=body.get("priority", 1),
                dueDate=body.get("dueDate"),
                assignees=[assignment(user_id) for user_id in body.get("assigneeIDs") or []],
            )
            self.tasks.append(task)
            return httpx.Response(201, json=task)

        match = re.fullmatch(r"/tasks/(\d+)", path)
        if match is not None:
            task_id = int(match.group(1))
            task = next((t for t in self.tasks if t["id"] == task_id), None)
            if task is None:
                return httpx.Response(404, json={"code": "NOT_FOUND", "message": "resource not found"})
            if method == "GET":
                return httpx.Response(200, json=task)
            if method == "PATCH":
                task.update(body)
                return httpx.Response(200, json=task)
            if method == "DELETE":
                self.tasks.remove(task)
                return httpx.Response(204)
        return httpx.Response(404, json={"code": "NOT_FOUND", "message": f"no route for {method} {path}"})


def extract_csrf_token(html: str) -> str:
    match = _CSRF_PATTERN.search(html)
    assert match is not None, "Expected a CSRF token in the rendered page"
    return match.group(1)


def assignment(user_id: int, assigned_by: int = ALICE["id"]) -> dict[str, Any]:
    return {"userId": user_id, "assignedBy": assigned_by, "assignedAt": "2024-01-01T12:00:00Z"}
