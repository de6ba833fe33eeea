"""
ASGI middleware forming the proxy's access-control shell.

- ``RequestContextMiddleware``: per-request id for logs, echoed as X-Request-ID.
- ``OriginGuardMiddleware``: rejects declared origins missing from the allow-list.
- ``BodySizeLimitMiddleware``: rejects bodies above the configured ceiling before parsing.
"""
import uuid
from typing import Iterable

from starlette.datastructures import Headers, MutableHeaders
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from bolt_proxy.common.logger import get_logger, request_context

logger = get_logger("middleware")

REQUEST_ID_HEADER = "x-request-id"


class RequestContextMiddleware:
    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = Headers(scope=scope).get(REQUEST_ID_HEADER) or uuid.uuid4().hex

        async def send_with_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message)[REQUEST_ID_HEADER] = request_id
            await send(message)

        with request_context(request_id):
            await self.app(scope, receive, send_with_id)


class OriginGuardMiddleware:
    """Requests without an Origin header (same-origin, server-to-server) always pass."""

    def __init__(self, app: ASGIApp, allowed_origins: Iterable[str]):
        self.app = app
        self.allowed_origins = frozenset(allowed_origins)

    def is_allowed(self, origin) -> bool:
        return origin is None or origin in self.allowed_origins

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        origin = Headers(scope=scope).get("origin")
        if self.is_allowed(origin):
            await self.app(scope, receive, send)
            return

        logger.warning(f"Rejected request from origin not in allow-list: {origin}")
        await Response(status_code=403)(scope, receive, send)


class BodySizeLimitMiddleware:
    def __init__(self, app: ASGIApp, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def _reject(self, scope: Scope, receive: Receive, send: Send, size) -> None:
        logger.warning(f"Rejected request body of {size} bytes (limit {self.max_bytes})")
        await Response(status_code=413)(scope, receive, send)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = Headers(scope=scope).get("content-length")
        if declared is not None:
            try:
                size = int(declared)
            except ValueError:
                await Response(status_code=400)(scope, receive, send)
                return
            if size > self.max_bytes:
                await self._reject(scope, receive, send, size)
                return
            await self.app(scope, receive, send)
            return

        # No declared length (chunked): buffer up to the limit, then replay.
        body = bytearray()
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                return
            body.extend(message.get("body", b""))
            if len(body) > self.max_bytes:
                await self._reject(scope, receive, send, f">{self.max_bytes}")
                return
            if not message.get("more_body", False):
                break

        replayed = False

        async def replay() -> Message:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": bytes(body), "more_body": False}
            return await receive()

        await self.app(scope, replay, send)
