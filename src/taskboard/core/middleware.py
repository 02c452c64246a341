"""ASGI middleware."""

from __future__ import annotations

import uuid

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .context import REQUEST_ID_HEADER, request_id_scope


class CorrelationIdMiddleware:
    """Give every HTTP request a correlation id and echo it on the response.

    An incoming ``X-Request-ID`` is reused so a page action can be traced
    through this app and on into the task API.
    """

    def __init__(self, app: ASGIApp, header_name: str = REQUEST_ID_HEADER) -> None:
        self.app = app
        self._header_name = header_name

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = Headers(scope=scope).get(self._header_name) or uuid.uuid4().hex
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_with_request_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message).setdefault(self._header_name, request_id)
            await send(message)

        with request_id_scope(request_id):
            await self.app(scope, receive, send_with_request_id)


__all__ = ["CorrelationIdMiddleware"]
