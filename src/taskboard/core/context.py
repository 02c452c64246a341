"""Correlation id of the request currently being served.

The id is bound for the lifetime of a request by
:class:`~taskboard.core.middleware.CorrelationIdMiddleware`, stamped on every
log record and forwarded to the task API as ``X-Request-ID``.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

REQUEST_ID_HEADER = "X-Request-ID"

_request_id: ContextVar[str | None] = ContextVar("taskboard_request_id", default=None)


def current_request_id() -> str | None:
    return _request_id.get()


@contextmanager
def request_id_scope(request_id: str | None) -> Iterator[str | None]:
    """Bind ``request_id`` until the block exits; ``None`` leaves the context untouched."""

    if not request_id:
        yield current_request_id()
        return
    token = _request_id.set(request_id)
    try:
        yield request_id
    finally:
        _request_id.reset(token)


__all__ = ["REQUEST_ID_HEADER", "current_request_id", "request_id_scope"]
