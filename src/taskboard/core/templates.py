"""Jinja2 environment and the context every page is rendered with."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from fastapi import Request
from fastapi.templating import Jinja2Templates

from ..messages import Messages
from .session import ensure_csrf_token, pop_flash_messages

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


def format_utc(value: datetime | None, fmt: str = "%Y-%m-%d %H:%M") -> str:
    if value is None:
        return ""
    return value.astimezone(timezone.utc).strftime(fmt)


_templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
_templates.env.filters["utc"] = format_utc


def page_context(request: Request, extra: dict[str, Any] | None = None) -> dict[str, Any]:
    """Build the render context; queued flash messages are consumed here."""

    settings = getattr(request.app.state, "settings", None)
    locale = settings.locale if settings is not None else "en"
    context: dict[str, Any] = {
        "settings": settings,
        "current_user": None,
        "t": Messages(locale).text,
    }
    context.update(extra or {})
    context["csrf_token"] = ensure_csrf_token(request.session)
    context["messages"] = pop_flash_messages(request.session)
    return context


def template_response(
    request: Request,
    template_name: str,
    context: dict[str, Any] | None = None,
    *,
    status_code: int = 200,
) -> Any:
    return _templates.TemplateResponse(
        request,
        template_name,
        page_context(request, context),
        status_code=status_code,
    )


__all__ = ["TEMPLATES_DIR", "format_utc", "page_context", "template_response"]
