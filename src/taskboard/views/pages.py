from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from starlette.responses import RedirectResponse

from ..core.session import (
    add_flash_message,
    get_auth_mode,
    logout_user,
    pop_form_draft,
    restore_session,
)
from ..core.templates import template_response
from ..deps import ApiClientDependency, MessagesDependency
from ..errors import ApiException
from ..schemas.task import TaskStatus
from ..services import TaskBoardService
from .forms import PRIORITY_CHOICES, AuthForm, TaskForm

logger = logging.getLogger(__name__)

router = APIRouter(tags=["web"])


def redirect_home(request: Request) -> RedirectResponse:
    return RedirectResponse(request.url_for("pages:home"), status_code=303)


@router.get("/", name="pages:home")
async def home(
    request: Request,
    api: ApiClientDependency,
    messages: MessagesDependency,
) -> object:
    """Render the auth forms, or restore the session and render the task board."""

    restored = restore_session(request.session)
    if restored is None:
        draft = pop_form_draft(request.session, "auth") or {}
        return template_response(
            request,
            "auth/index.html",
            {
                "title": "Task Manager",
                "mode": get_auth_mode(request.session),
                "form": AuthForm(email=draft.get("email", ""), name=draft.get("name", "")),
            },
        )

    _, user = restored
    service = TaskBoardService(api)
    try:
        board = await service.load_board(user)
    except ApiException as exc:
        logger.info("Stored session rejected by the task API", extra={"code": exc.code})
        logout_user(request.session)
        add_flash_message(request.session, "error", messages.error_message(exc))
        return redirect_home(request)

    return template_response(
        request,
        "tasks/index.html",
        {
            "title": "Task Manager",
            "current_user": user,
            "board": board,
            "form": TaskForm.from_draft(pop_form_draft(request.session, "task")),
            "priorities": PRIORITY_CHOICES,
            "statuses": list(TaskStatus),
        },
    )
