"""Application factory and console entry point."""

from __future__ import annotations

from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from .api import system_router
from .core.config import Settings, get_settings
from .core.logging import configure_logging
from .core.middleware import CorrelationIdMiddleware
from .errors import register_exception_handlers
from .views import router as views_router

STATIC_DIR = Path(__file__).resolve().parent / "static"


def _install_middleware(application: FastAPI, settings: Settings) -> None:
    # Added last runs first: the session is loaded before a request id is assigned.
    application.add_middleware(CorrelationIdMiddleware)
    application.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret_key,
        session_cookie=settings.session_cookie_name,
        max_age=settings.session_max_age,
        https_only=settings.session_https_only,
        same_site=settings.session_same_site,
    )


def create_app() -> FastAPI:
    """Build the web client: HTML views, JSON system endpoints and error envelopes."""

    settings = get_settings()
    configure_logging(settings)

    application = FastAPI(
        title=settings.project_name,
        version=settings.version,
        summary="Server-rendered client for the task-management API.",
        redoc_url=None,
        openapi_url="/api/openapi.json",
    )
    application.state.settings = settings
    _install_middleware(application, settings)

    if STATIC_DIR.exists():
        application.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")
    application.include_router(views_router)
    application.include_router(system_router)
    register_exception_handlers(application)
    return application


def run() -> None:
    """Console entry point: ``taskboard``."""

    settings = get_settings()
    uvicorn.run(
        "taskboard.main:create_app",
        factory=True,
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.reload,
        log_config=None,
    )


if __name__ == "__main__":
    run()
