"""Reusable FastAPI dependencies."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

import httpx
from fastapi import Depends, Request

from .client import TaskApiClient
from .core.config import Settings, get_settings
from .core.session import get_session_token, restore_session
from .errors import LoginRequired
from .messages import Messages
from .schemas.user import User

SettingsDependency = Annotated[Settings, Depends(get_settings)]


async def get_http_client(settings: SettingsDependency) -> AsyncIterator[httpx.AsyncClient]:
    """Yield an HTTP client bound to the remote API for the current request."""

    async with httpx.AsyncClient(
        base_url=settings.api_base_url,
        timeout=settings.api_timeout_seconds,
    ) as client:
        yield client


HttpClientDependency = Annotated[httpx.AsyncClient, Depends(get_http_client)]


def get_api_client(request: Request, http_client: HttpClientDependency) -> TaskApiClient:
    return TaskApiClient(http_client, token=get_session_token(request.session))


def get_messages(settings: SettingsDependency) -> Messages:
    return Messages(settings.locale)


def get_session_user(request: Request) -> User | None:
    restored = restore_session(request.session)
    return restored[1] if restored is not None else None


def require_session_user(request: Request) -> User:
    """Return the signed-in user or send the browser back to the login form."""

    user = get_session_user(request)
    if user is None:
        raise LoginRequired()
    return user


ApiClientDependency = Annotated[TaskApiClient, Depends(get_api_client)]
MessagesDependency = Annotated[Messages, Depends(get_messages)]
AuthenticatedSessionUserDependency = Annotated[User, Depends(require_session_user)]


__all__ = [
    "ApiClientDependency",
    "AuthenticatedSessionUserDependency",
    "HttpClientDependency",
    "MessagesDependency",
    "SettingsDependency",
    "get_api_client",
    "get_http_client",
    "get_messages",
    "get_session_user",
    "require_session_user",
]
