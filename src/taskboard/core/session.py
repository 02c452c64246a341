"""Helpers around the signed cookie session.

The session plays the part of the browser's local storage: it keeps the bearer
token and the cached user record between page loads, plus short-lived UI state
(which auth form is shown, form drafts after a failed submit, CSRF token and
queued flash messages).
"""

from __future__ import annotations

import json
import logging
import secrets
from typing import Any, Literal, MutableMapping

from pydantic import ValidationError

from ..schemas.user import AuthResponse, User

logger = logging.getLogger(__name__)

SESSION_TOKEN_KEY = "token"
SESSION_USER_KEY = "user"
SESSION_CSRF_KEY = "csrf_token"
SESSION_FLASH_KEY = "flash_messages"
SESSION_AUTH_MODE_KEY = "auth_mode"
SESSION_FORM_PREFIX = "form:"

# Browsers drop cookies over 4096 bytes; the draft gets a quarter of that.
FORM_DRAFT_MAX_BYTES = 1024

AuthMode = Literal["login", "signup"]


def get_session_token(session: MutableMapping[str, Any]) -> str | None:
    """Return the persisted bearer token, if any."""

    token = session.get(SESSION_TOKEN_KEY)
    if isinstance(token, str) and token:
        return token
    return None


def get_session_user(session: MutableMapping[str, Any]) -> User | None:
    """Return the cached user record, or ``None`` when absent or unreadable."""

    raw = session.get(SESSION_USER_KEY)
    if raw is None:
        return None
    try:
        if isinstance(raw, str):
            return User.model_validate_json(raw)
        return User.model_validate(raw)
    except ValidationError:
        logger.warning("Discarding unreadable user record from session")
        session.pop(SESSION_USER_KEY, None)
        return None


def restore_session(session: MutableMapping[str, Any]) -> tuple[str, User] | None:
    """Return ``(token, user)`` when both persisted keys are usable."""

    token = get_session_token(session)
    user = get_session_user(session)
    if token is None or user is None:
        return None
    return token, user


def login_user(session: MutableMapping[str, Any], auth: AuthResponse) -> None:
    """Persist the token and user returned by a successful signup/login."""

    session[SESSION_TOKEN_KEY] = auth.token
    session[SESSION_USER_KEY] = auth.user.model_dump_json()


def logout_user(session: MutableMapping[str, Any]) -> None:
    """Remove the persisted session keys and any user-specific UI state."""

    session.pop(SESSION_TOKEN_KEY, None)
    session.pop(SESSION_USER_KEY, None)
    session.pop(SESSION_CSRF_KEY, None)
    for key in [key for key in session if key.startswith(SESSION_FORM_PREFIX)]:
        session.pop(key, None)


def get_auth_mode(session: MutableMapping[str, Any]) -> AuthMode:
    """Return which auth form should be shown; login is the default."""

    return "signup" if session.get(SESSION_AUTH_MODE_KEY) == "signup" else "login"


def set_auth_mode(session: MutableMapping[str, Any], mode: str) -> AuthMode:
    resolved: AuthMode = "signup" if mode == "signup" else "login"
    session[SESSION_AUTH_MODE_KEY] = resolved
    return resolved


def save_form_draft(session: MutableMapping[str, Any], form_name: str, values: dict[str, Any]) -> None:
    """Keep submitted form values so the next render can show them again.

    The draft shares the session cookie with the flash queue, so long text
    values are cut until the draft fits ``FORM_DRAFT_MAX_BYTES``. A draft that
    cannot be cut down is dropped; queued flash messages are left alone.
    """

    key = f"{SESSION_FORM_PREFIX}{form_name}"
    draft = dict(values)
    overflow = _encoded_size(draft) - FORM_DRAFT_MAX_BYTES
    while overflow > 0:
        longest = max(
            (name for name, value in draft.items() if isinstance(value, str) and value),
            key=lambda name: len(draft[name]),
            default=None,
        )
        if longest is None:
            logger.warning("Dropping oversized form draft", extra={"form": form_name})
            session.pop(key, None)
            return
        text = draft[longest]
        draft[longest] = text[: max(len(text) - overflow, 0)]
        overflow = _encoded_size(draft) - FORM_DRAFT_MAX_BYTES
    session[key] = draft


def _encoded_size(values: dict[str, Any]) -> int:
    # Same encoding the session middleware applies before signing.
    return len(json.dumps(values))


def pop_form_draft(session: MutableMapping[str, Any], form_name: str) -> dict[str, Any] | None:
    draft = session.pop(f"{SESSION_FORM_PREFIX}{form_name}", None)
    return draft if isinstance(draft, dict) else None


def ensure_csrf_token(session: MutableMapping[str, Any]) -> str:
    """Return the session's CSRF token, creating it on first use."""

    token = session.get(SESSION_CSRF_KEY)
    if not isinstance(token, str) or not token:
        token = session[SESSION_CSRF_KEY] = secrets.token_urlsafe(32)
    return token


def validate_csrf_token(session: MutableMapping[str, Any], provided: object) -> bool:
    expected = session.get(SESSION_CSRF_KEY)
    if not isinstance(expected, str) or not isinstance(provided, str) or not provided:
        return False
    return secrets.compare_digest(expected, provided)


def add_flash_message(session: MutableMapping[str, Any], category: str, message: str) -> None:
    """Queue a one-time message; the next page shows it in a modal dialog."""

    queued = session.get(SESSION_FLASH_KEY)
    if not isinstance(queued, list):
        queued = []
    session[SESSION_FLASH_KEY] = [*queued, {"category": category, "message": message}]


def pop_flash_messages(session: MutableMapping[str, Any]) -> list[dict[str, str]]:
    """Return queued messages in order and clear the queue; empty ones are dropped."""

    queued = session.pop(SESSION_FLASH_KEY, None)
    if not isinstance(queued, list):
        return []
    return [
        {"category": str(item.get("category") or "info"), "message": str(item["message"])}
        for item in queued
        if isinstance(item, dict) and item.get("message")
    ]


__all__ = [
    "FORM_DRAFT_MAX_BYTES",
    "SESSION_AUTH_MODE_KEY",
    "SESSION_CSRF_KEY",
    "SESSION_FLASH_KEY",
    "SESSION_TOKEN_KEY",
    "SESSION_USER_KEY",
    "add_flash_message",
    "ensure_csrf_token",
    "get_auth_mode",
    "get_session_token",
    "get_session_user",
    "login_user",
    "logout_user",
    "pop_flash_messages",
    "pop_form_draft",
    "restore_session",
    "save_form_draft",
    "set_auth_mode",
    "validate_csrf_token",
]
