from __future__ import annotations

import os
from collections.abc import AsyncIterator, Awaitable, Callable

os.environ.setdefault("TASKBOARD_ENVIRONMENT", "test")

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from taskboard.core.config import get_settings
from taskboard.deps import get_http_client
from taskboard.main import create_app

from .fakes import ALICE, BOB, FakeTaskApi, assignment, extract_csrf_token, make_task


@pytest.fixture()
def fake_api() -> FakeTaskApi:
    return FakeTaskApi(tasks=[make_task(1, title="Existing task", assignees=[assignment(BOB["id"])])])


@pytest_asyncio.fixture
async def app(fake_api: FakeTaskApi) -> AsyncIterator[FastAPI]:
    get_settings.cache_clear()
    settings = get_settings()
    application = create_app()

    async def _override_http_client() -> AsyncIterator[httpx.AsyncClient]:
        async with httpx.AsyncClient(
            base_url=settings.api_base_url,
            transport=httpx.MockTransport(fake_api),
        ) as http_client:
            yield http_client

    application.dependency_overrides[get_http_client] = _override_http_client
    try:
        yield application
    finally:
        application.dependency_overrides.clear()
        get_settings.cache_clear()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver", follow_redirects=True) as http_client:
        yield http_client


@pytest_asyncio.fixture
async def csrf(client: AsyncClient) -> Callable[[], Awaitable[str]]:
    """Return a coroutine function fetching the session's CSRF token."""

    async def _fetch() -> str:
        response = await client.get("/")
        return extract_csrf_token(response.text)

    return _fetch


@pytest_asyncio.fixture
async def logged_in(client: AsyncClient, csrf: Callable[[], Awaitable[str]]) -> AsyncClient:
    token = await csrf()
    response = await client.post(
        "/auth/login",
        data={"csrf_token": token, "email": ALICE["email"], "password": "StrongPass123!"},
    )
    assert response.status_code == 200, response.text
    assert "Hello, Alice!" in response.text
    return client
