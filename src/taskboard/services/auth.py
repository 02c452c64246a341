"""Authentication workflows: remote auth calls plus session persistence."""

from __future__ import annotations

import logging
from typing import Any, MutableMapping

from ..client import TaskApiClient
from ..core.session import login_user, logout_user
from ..schemas.user import AuthResponse

logger = logging.getLogger(__name__)


class AuthService:
    """Sign users in and out, keeping the browser session in step."""

    def __init__(self, client: TaskApiClient, session: MutableMapping[str, Any]) -> None:
        self._client = client
        self._session = session

    async def login(self, email: str, password: str) -> AuthResponse:
        auth = await self._client.login(email, password)
        login_user(self._session, auth)
        logger.info("User signed in", extra={"user_id": auth.user.id})
        return auth

    async def signup(self, email: str, password: str, name: str) -> AuthResponse:
        auth = await self._client.signup(email, password, name)
        login_user(self._session, auth)
        logger.info("User registered", extra={"user_id": auth.user.id})
        return auth

    async def logout(self) -> None:
        """Revoke the token remotely, then drop the local session.

        The local session is cleared even when the remote call fails; the
        failure is still raised so the caller can report it.
        """

        try:
            await self._client.logout()
        finally:
            logout_user(self._session)


__all__ = ["AuthService"]
