"""Exceptions raised by the API client and the app-level handlers for them."""

from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from http import HTTPStatus
from typing import Any, Mapping

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request
from starlette.responses import RedirectResponse

from .core.context import REQUEST_ID_HEADER, request_id_scope
from .core.session import add_flash_message
from .schemas.system import ApiError, ErrorResponse

logger = logging.getLogger(__name__)

UNKNOWN_ERROR_CODE = "UNKNOWN_ERROR"


class ApiException(Exception):
    """A non-2xx answer (or no answer at all) from the remote task API."""

    def __init__(self, status_code: int, error: ApiError) -> None:
        super().__init__(error.message)
        self.status_code = status_code
        self.error = error

    @classmethod
    def unknown(cls, status_code: int, message: str | None = None) -> "ApiException":
        """Build the synthetic error used when the error body is unusable."""

        return cls(
            status_code,
            ApiError(code=UNKNOWN_ERROR_CODE, message=message or f"HTTP Error {status_code}"),
        )

    @property
    def code(self) -> str:
        return self.error.code

    @property
    def message(self) -> str:
        return self.error.message

    @property
    def details(self) -> dict[str, Any] | None:
        return self.error.details

    def __repr__(self) -> str:
        return f"ApiException(status_code={self.status_code}, code={self.code!r}, message={self.message!r})"


class LoginRequired(Exception):
    """Raised by view dependencies when the browser has no usable session."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "Login required.")
        self.message = message


_HTTP_STATUS_CODES: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: "bad_request",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
    status.HTTP_409_CONFLICT: "conflict",
}


def _request_context(request: Request) -> AbstractContextManager[str | None]:
    """Re-bind the request id; the 500 handler runs outside the middleware."""

    return request_id_scope(getattr(request.state, "request_id", None))


def _with_request_id(details: Any | None, request_id: str | None) -> Any | None:
    if not request_id:
        return details
    if details is None:
        return {"request_id": request_id}
    if isinstance(details, dict):
        return {"request_id": request_id, **details} if "request_id" not in details else details
    return {"request_id": request_id, "detail": details}


def _envelope(
    request_id: str | None,
    status_code: int,
    code: str,
    message: str,
    details: Any | None = None,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(code=code, message=message, details=_with_request_id(details, request_id))
    response = JSONResponse(status_code=status_code, content=body.model_dump(), headers=dict(headers or {}))
    if request_id:
        response.headers.setdefault(REQUEST_ID_HEADER, request_id)
    return response


def _describe_http_error(status_code: int, detail: Any) -> tuple[str, Any | None]:
    if isinstance(detail, str):
        return detail, None
    try:
        return HTTPStatus(status_code).phrase, detail
    except ValueError:
        return "Error", detail


def register_exception_handlers(app: FastAPI) -> None:
    """Install the redirect for missing sessions and the JSON error envelopes."""

    @app.exception_handler(LoginRequired)
    async def _login_required(request: Request, exc: LoginRequired) -> RedirectResponse:
        if exc.message:
            add_flash_message(request.session, "error", exc.message)
        return RedirectResponse(request.url_for("pages:home"), status_code=status.HTTP_303_SEE_OTHER)

    @app.exception_handler(ApiException)
    async def _api_error(request: Request, exc: ApiException) -> JSONResponse:
        # Views handle ApiException themselves; reaching here means a route forgot to.
        with _request_context(request) as request_id:
            logger.error(
                "Unhandled task API error",
                extra={"code": exc.code, "status_code": exc.status_code, "path": request.url.path},
            )
            return _envelope(
                request_id,
                status.HTTP_502_BAD_GATEWAY,
                "upstream_error",
                "The task service returned an error.",
                {"upstream_code": exc.code, "upstream_status": exc.status_code},
            )

    @app.exception_handler(RequestValidationError)
    async def _invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        with _request_context(request) as request_id:
            logger.warning("Request validation failed", extra={"errors": exc.errors()})
            return _envelope(
                request_id,
                HTTPStatus.UNPROCESSABLE_ENTITY.value,
                "validation_error",
                "Request validation failed.",
                {"errors": exc.errors()},
            )

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        with _request_context(request) as request_id:
            code = _HTTP_STATUS_CODES.get(exc.status_code, "http_error")
            message, details = _describe_http_error(exc.status_code, exc.detail)
            level = logging.ERROR if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR else logging.WARNING
            logger.log(
                level,
                "HTTP error",
                extra={"code": code, "status_code": exc.status_code, "path": request.url.path},
            )
            return _envelope(request_id, exc.status_code, code, message, details, exc.headers)

    @app.exception_handler(Exception)
    async def _server_error(request: Request, exc: Exception) -> JSONResponse:
        with _request_context(request) as request_id:
            logger.exception("Unhandled application error")
            return _envelope(
                request_id,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "server_error",
                "Internal server error.",
            )


__all__ = [
    "ApiException",
    "LoginRequired",
    "UNKNOWN_ERROR_CODE",
    "register_exception_handlers",
]
