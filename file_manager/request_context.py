# file_manager/request_context.py
from __future__ import annotations
from contextvars import ContextVar
from typing import Optional

from starlette.requests import Request
from starlette.types import ASGIApp, Receive, Scope, Send

_current_request: ContextVar[Optional[Request]] = ContextVar("file_manager_request", default=None)


def current_request() -> Optional[Request]:
    """The HTTP request being served, or None outside of a request."""
    return _current_request.get()


class RequestContextMiddleware:
    """Publishes each HTTP request through current_request() for the duration of the call."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return
        token = _current_request.set(Request(scope, receive))
        try:
            await self.app(scope, receive, send)
        finally:
            _current_request.reset(token)
