from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
import pytest
import pytest_asyncio

from taskboard.client import TaskApiClient
from taskboard.core.context import request_id_scope
from taskboard.errors import UNKNOWN_ERROR_CODE, ApiException
from taskboard.schemas import TaskStatus, TaskUpdate

from .fakes import ALICE, BOB, CAROL, FakeTaskApi, make_task

pytestmark = pytest.mark.asyncio

BASE_URL = "http://api.test/api/v1"


@pytest.fixture()
def api() -> FakeTaskApi:
    return FakeTaskApi(tasks=[make_task(1)])


@pytest_asyncio.fixture
async def http_client(api: FakeTaskApi) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(api)) as client:
        yield client


async def test_login_returns_token_and_user_without_bearer_header(
    api: FakeTaskApi,
    http_client: httpx.AsyncClient,
) -> None:
    client = TaskApiClient(http_client, token="stale-token")

    auth = await client.login(ALICE["email"], "StrongPass123!")

    assert auth.token == "token-abc"
    assert auth.user.id == ALICE["id"]
    assert auth.user.name == "Alice"
    (request,) = api.calls("POST", "/auth/login")
    assert request.headers["Content-Type"] == "application/json"
    assert "Authorization" not in request.headers
    assert request.body == {"email": ALICE["email"], "password": "StrongPass123!"}


async def test_signup_sends_name(api: FakeTaskApi, http_client: httpx.AsyncClient) -> None:
    auth = await TaskApiClient(http_client).signup("dave@example.com", "StrongPass123!", "Dave")

    assert auth.user.name == "Dave"
    (request,) = api.calls("POST", "/auth/signup")
    assert request.body == {"email": "dave@example.com", "password": "StrongPass123!", "name": "Dave"}


async def test_authenticated_calls_attach_bearer_token(api: FakeTaskApi, http_client: httpx.AsyncClient) -> None:
    client = TaskApiClient(http_client, token="token-abc")

    users = await client.list_users()
    tasks = await client.list_tasks()

    assert [user.name for user in users] == ["Alice", "Bob", "Carol"]
    assert [task.id for task in tasks] == [1]
    for request in api.requests:
        assert request.headers["Authorization"] == "Bearer token-abc"
        assert request.headers["Content-Type"] == "application/json"


async def test_request_id_is_forwarded(api: FakeTaskApi, http_client: httpx.AsyncClient) -> None:
    with request_id_scope("req-123"):
        await TaskApiClient(http_client, token="token-abc").list_tasks()

    assert api.requests[0].headers["X-Request-ID"] == "req-123"


async def test_create_task_sends_assignee_ids(api: FakeTaskApi, http_client: httpx.AsyncClient) -> None:
    client = TaskApiClient(http_client, token="token-abc")

    task = await client.create_task("Write spec", "", 2, [BOB["id"], CAROL["id"]])

    (request,) = api.calls("POST", "/tasks")
    assert request.body["title"] == "Write spec"
    assert request.body["priority"] == 2
    assert request.body["assigneeIDs"] == [BOB["id"], CAROL["id"]]
    assert len(request.body["assigneeIDs"]) == 2
    assert task.assignee_ids == [BOB["id"], CAROL["id"]]


async def test_create_task_omits_empty_assignees(api: FakeTaskApi, http_client: httpx.AsyncClient) -> None:
    await TaskApiClient(http_client, token="token-abc").create_task("Solo", "just me", 1, [])

    (request,) = api.calls("POST", "/tasks")
    assert "assigneeIDs" not in request.body
    assert "dueDate" not in request.body


async def test_update_task_sends_only_set_fields(api: FakeTaskApi, http_client: httpx.AsyncClient) -> None:
    client = TaskApiClient(http_client, token="token-abc")

    task = await client.update_task(1, TaskUpdate(status=TaskStatus.IN_PROGRESS))

    (request,) = api.calls("PATCH", "/tasks/1")
    assert request.body == {"status": "IN_PROGRESS"}
    assert task.status is TaskStatus.IN_PROGRESS


async def test_no_content_responses_skip_body_parsing(api: FakeTaskApi, http_client: httpx.AsyncClient) -> None:
    api.overrides[("DELETE", "/tasks/1")] = httpx.Response(204, content=b"not json at all")
    api.overrides[("POST", "/auth/logout")] = httpx.Response(204, content=b"<html>")
    client = TaskApiClient(http_client, token="token-abc")

    assert await client.delete_task(1) is None
    assert await client.logout() is None


async def test_structured_error_becomes_api_exception(api: FakeTaskApi, http_client: httpx.AsyncClient) -> None:
    api.fail("DELETE", "/tasks/1", 403, "FORBIDDEN", "forbidden")

    with pytest.raises(ApiException) as exc_info:
        await TaskApiClient(http_client, token="token-abc").delete_task(1)

    assert exc_info.value.status_code == 403
    assert exc_info.value.code == "FORBIDDEN"
    assert exc_info.value.message == "forbidden"
    assert exc_info.value.details is None


async def test_error_details_are_preserved(api: FakeTaskApi, http_client: httpx.AsyncClient) -> None:
    api.fail("POST", "/auth/signup", 409, "CONFLICT", "email already exists", {"field": "email"})

    with pytest.raises(ApiException) as exc_info:
        await TaskApiClient(http_client).signup(ALICE["email"], "StrongPass123!", "Alice")

    assert exc_info.value.status_code == 409
    assert exc_info.value.details == {"field": "email"}


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(502, text="<html>Bad Gateway</html>"),
        httpx.Response(500, json=["unexpected", "shape"]),
        httpx.Response(400, json={"message": "code missing"}),
    ],
)
async def test_unparseable_error_body_becomes_unknown_error(
    api: FakeTaskApi,
    http_client: httpx.AsyncClient,
    response: httpx.Response,
) -> None:
    api.overrides[("GET", "/tasks")] = response

    with pytest.raises(ApiException) as exc_info:
        await TaskApiClient(http_client, token="token-abc").list_tasks()

    assert exc_info.value.code == UNKNOWN_ERROR_CODE
    assert exc_info.value.status_code == response.status_code
    assert exc_info.value.message == f"HTTP Error {response.status_code}"


async def test_transport_failure_becomes_unknown_error() -> None:
    def _unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(_unreachable)) as http_client:
        with pytest.raises(ApiException) as exc_info:
            await TaskApiClient(http_client, token="token-abc").list_users()

    assert exc_info.value.code == UNKNOWN_ERROR_CODE
    assert exc_info.value.status_code == 503


async def test_null_assignees_are_treated_as_empty(api: FakeTaskApi, http_client: httpx.AsyncClient) -> None:
    api.overrides[("GET", "/tasks/1")] = httpx.Response(
        200,
        json=make_task(1, assignees=None, description=None, dueDate="2024-06-01T09:00:00Z"),
    )

    task = await TaskApiClient(http_client, token="token-abc").get_task(1)

    assert task.assignees == []
    assert task.description is None
    assert task.due_date is not None and task.due_date.year == 2024
