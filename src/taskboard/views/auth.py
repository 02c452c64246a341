from __future__ import annotations

import logging

from fastapi import APIRouter, Request

from ..core.session import (
    add_flash_message,
    save_form_draft,
    set_auth_mode,
    validate_csrf_token,
)
from ..deps import ApiClientDependency, MessagesDependency
from ..errors import ApiException
from ..services import AuthService
from .forms import AuthForm
from .pages import redirect_home

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.get("", name="auth:mode")
async def switch_mode(request: Request, mode: str = "login") -> object:
    """Switch between the login and signup tabs."""

    set_auth_mode(request.session, mode)
    return redirect_home(request)


async def _authenticate(
    request: Request,
    api: ApiClientDependency,
    messages: MessagesDependency,
    *,
    signup: bool,
) -> object:
    form_data = await request.form()
    if not validate_csrf_token(request.session, form_data.get("csrf_token")):
        add_flash_message(request.session, "error", messages.text("form_expired"))
        return redirect_home(request)

    form = AuthForm.from_form(form_data)
    service = AuthService(api, request.session)
    try:
        if signup:
            await service.signup(form.email, form.password, form.name)
        else:
            await service.login(form.email, form.password)
    except ApiException as exc:
        logger.warning(
            "Authentication rejected",
            extra={"code": exc.code, "status_code": exc.status_code, "signup": signup},
        )
        save_form_draft(request.session, "auth", form.draft())
        failed_key = "signup_failed" if signup else "login_failed"
        add_flash_message(request.session, "error", messages.action_failed(failed_key, exc))
        return redirect_home(request)

    set_auth_mode(request.session, "login")
    return redirect_home(request)


@router.post("/login", name="auth:login")
async def login(request: Request, api: ApiClientDependency, messages: MessagesDependency) -> object:
    """Sign in and land on the task board."""

    set_auth_mode(request.session, "login")
    return await _authenticate(request, api, messages, signup=False)


@router.post("/signup", name="auth:signup")
async def signup(request: Request, api: ApiClientDependency, messages: MessagesDependency) -> object:
    """Create an account and land on the task board."""

    set_auth_mode(request.session, "signup")
    return await _authenticate(request, api, messages, signup=True)


@router.post("/logout", name="auth:logout")
async def logout(request: Request, api: ApiClientDependency, messages: MessagesDependency) -> object:
    """Sign out and clear the browser session."""

    form_data = await request.form()
    if not validate_csrf_token(request.session, form_data.get("csrf_token")):
        add_flash_message(request.session, "error", messages.text("form_expired"))
        return redirect_home(request)

    try:
        await AuthService(api, request.session).logout()
    except ApiException as exc:
        logger.warning("Remote logout failed", extra={"code": exc.code, "status_code": exc.status_code})
        add_flash_message(request.session, "error", messages.action_failed("logout_failed", exc))
        return redirect_home(request)

    add_flash_message(request.session, "info", messages.text("logged_out"))
    return redirect_home(request)
