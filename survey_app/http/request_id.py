"""Request ID middleware.

Echoes an incoming X-Request-Id header, or assigns a fresh UUID when the
client sent none, on every HTTP response.
"""

from __future__ import annotations

import uuid


class RequestIdMiddleware:
    def __init__(self, app, header_name: str = "X-Request-Id") -> None:  # type: ignore[no-untyped-def]
        self.app = app
        self.header_name = header_name

    async def __call__(self, scope, receive, send):  # type: ignore[no-untyped-def]
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        header_bytes = self.header_name.lower().encode("latin-1")
        incoming = None
        for k, v in scope.get("headers") or []:
            if k.lower() == header_bytes:
                incoming = v
                break
        request_id = incoming or str(uuid.uuid4()).encode("latin-1")

        async def send_wrapper(message):  # type: ignore[no-untyped-def]
            if message.get("type") == "http.response.start":
                headers = list(message.get("headers") or [])
                if header_bytes not in [k.lower() for k, _ in headers]:
                    headers.append((header_bytes, request_id))
                message = {**message, "headers": headers}
            await send(message)

        await self.app(scope, receive, send_wrapper)


__all__ = ["RequestIdMiddleware"]
