from __future__ import annotations

import logging

from fastapi import APIRouter, Request, status

from ..core.session import add_flash_message, save_form_draft, validate_csrf_token
from ..core.templates import template_response
from ..deps import ApiClientDependency, AuthenticatedSessionUserDependency, MessagesDependency
from ..errors import ApiException
from ..schemas.system import ApiError
from ..schemas.user import User
from ..services import TaskBoardService
from .forms import PRIORITY_CHOICES, TaskForm, clean_text, parse_status
from .pages import redirect_home

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tasks"])


def _invalid_date(raw: str) -> ApiException:
    return ApiException(
        status.HTTP_400_BAD_REQUEST,
        ApiError(code="INVALID_DATE_FORMAT", message=f"invalid due date: {raw}"),
    )


@router.post("/", name="tasks:create")
async def create_task(
    request: Request,
    _: AuthenticatedSessionUserDependency,
    api: ApiClientDependency,
    messages: MessagesDependency,
) -> object:
    """Create a task, then reload the board with an empty form."""

    form_data = await request.form()
    if not validate_csrf_token(request.session, form_data.get("csrf_token")):
        add_flash_message(request.session, "error", messages.text("form_expired"))
        return redirect_home(request)

    form = TaskForm.from_form(form_data)
    try:
        try:
            due_date = form.parsed_due_date()
        except ValueError:
            raise _invalid_date(form.due_date) from None
        await TaskBoardService(api).create_task(
            title=form.title,
            description=form.description,
            priority=form.priority,
            assignee_ids=form.assignee_ids,
            due_date=due_date,
        )
    except ApiException as exc:
        logger.warning("Task creation rejected", extra={"code": exc.code, "status_code": exc.status_code})
        save_form_draft(request.session, "task", form.draft())
        add_flash_message(request.session, "error", messages.action_failed("create_failed", exc))
        return redirect_home(request)

    add_flash_message(request.session, "success", messages.text("task_created"))
    return redirect_home(request)


@router.post("/{task_id}/status", name="tasks:update_status")
async def update_status(
    task_id: int,
    request: Request,
    _: AuthenticatedSessionUserDependency,
    api: ApiClientDependency,
    messages: MessagesDependency,
) -> object:
    """Move a task to another status."""

    form_data = await request.form()
    if not validate_csrf_token(request.session, form_data.get("csrf_token")):
        add_flash_message(request.session, "error", messages.text("form_expired"))
        return redirect_home(request)

    new_status = parse_status(form_data.get("status"))
    try:
        if new_status is None:
            raise ApiException(
                status.HTTP_400_BAD_REQUEST,
                ApiError(code="VALIDATION_ERROR", message="invalid task status", details={"field": "status"}),
            )
        await TaskBoardService(api).update_status(task_id, new_status)
    except ApiException as exc:
        logger.warning(
            "Task status update rejected",
            extra={"task_id": task_id, "code": exc.code, "status_code": exc.status_code},
        )
        add_flash_message(request.session, "error", messages.action_failed("update_failed", exc))
    return redirect_home(request)


@router.get("/{task_id}/edit", name="tasks:edit")
async def edit_form(
    task_id: int,
    request: Request,
    current_user: AuthenticatedSessionUserDependency,
    api: ApiClientDependency,
    messages: MessagesDependency,
) -> object:
    """Render the edit form for a single task."""

    try:
        task = await TaskBoardService(api).get_task(task_id)
    except ApiException as exc:
        add_flash_message(request.session, "error", messages.action_failed("update_failed", exc))
        return redirect_home(request)

    return template_response(
        request,
        "tasks/edit.html",
        {
            "title": f"Edit: {task.title}",
            "current_user": current_user,
            "task": task,
            "form": TaskForm.from_task(task),
            "priorities": PRIORITY_CHOICES,
        },
    )


@router.post("/{task_id}/edit", name="tasks:update")
async def update_task(
    task_id: int,
    request: Request,
    _: AuthenticatedSessionUserDependency,
    api: ApiClientDependency,
    messages: MessagesDependency,
) -> object:
    """Apply a partial update built from the edit form."""

    form_data = await request.form()
    if not validate_csrf_token(request.session, form_data.get("csrf_token")):
        add_flash_message(request.session, "error", messages.text("form_expired"))
        return redirect_home(request)

    form = TaskForm.from_form(form_data)
    try:
        try:
            updates = form.to_update()
        except ValueError:
            raise _invalid_date(form.due_date) from None
        await TaskBoardService(api).update_task(task_id, updates)
    except ApiException as exc:
        logger.warning(
            "Task update rejected",
            extra={"task_id": task_id, "code": exc.code, "status_code": exc.status_code},
        )
        add_flash_message(request.session, "error", messages.action_failed("update_failed", exc))
        return redirect_home(request)

    add_flash_message(request.session, "success", messages.text("task_updated"))
    return redirect_home(request)


def _confirm_response(request: Request, task_id: int, task_title: str, current_user: User) -> object:
    return template_response(
        request,
        "tasks/confirm_delete.html",
        {
            "title": "Delete task",
            "current_user": current_user,
            "task_id": task_id,
            "task_title": task_title,
        },
    )


@router.get("/{task_id}/delete", name="tasks:confirm_delete")
async def confirm_delete(
    task_id: int,
    request: Request,
    current_user: AuthenticatedSessionUserDependency,
    task_title: str = "",
) -> object:
    """Ask for confirmation; nothing is sent to the API from here."""

    return _confirm_response(request, task_id, clean_text(task_title), current_user)


@router.post("/{task_id}/delete", name="tasks:delete")
async def delete_task(
    task_id: int,
    request: Request,
    current_user: AuthenticatedSessionUserDependency,
    api: ApiClientDependency,
    messages: MessagesDependency,
) -> object:
    """Delete a task once the user has explicitly confirmed."""

    form_data = await request.form()
    if not validate_csrf_token(request.session, form_data.get("csrf_token")):
        add_flash_message(request.session, "error", messages.text("form_expired"))
        return redirect_home(request)

    if clean_text(form_data.get("confirm")).lower() != "yes":
        return _confirm_response(request, task_id, clean_text(form_data.get("task_title")), current_user)

    try:
        await TaskBoardService(api).delete_task(task_id)
    except ApiException as exc:
        logger.warning(
            "Task deletion rejected",
            extra={"task_id": task_id, "code": exc.code, "status_code": exc.status_code},
        )
        add_flash_message(request.session, "error", messages.delete_failed(exc))
        return redirect_home(request)

    add_flash_message(request.session, "success", messages.text("task_deleted"))
    return redirect_home(request)
