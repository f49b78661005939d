"""Serve an ASGI application (FastAPI, Starlette, ...) as a handler.

Each request runs one HTTP connection scope on a fresh event loop. The
whole body is delivered in a single http.request message, the response is
buffered into the writer. Lifespan events are not sent: apps that need
startup work should do it at import time or lazily.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any

from funcserver.http.request import Request
from funcserver.http.writer import ResponseWriter
from funcserver.logging.structured import get_logger

logger = get_logger("http.asgi")

Scope = MutableMapping[str, Any]
Message = MutableMapping[str, Any]
ASGIApp = Callable[[Scope, Callable[[], Awaitable[Message]], Callable[[Message], Awaitable[None]]], Awaitable[None]]


def build_scope(request: Request) -> Scope:
    headers = request.headers
    scheme = headers.find("X-Forwarded-Proto") or "https"
    host = headers.find("Host")
    port = int(headers.find("X-Forwarded-Port") or (443 if scheme == "https" else 80))
    client_ip = headers.find("X-Forwarded-For").split(",")[0].strip()

    return {
        "type": "http",
        "asgi": {"version": "3.0", "spec_version": "2.3"},
        "http_version": "1.1",
        "method": request.method,
        "scheme": scheme,
        "path": request.url.path,
        "raw_path": request.url.path.encode("utf-8"),
        # Already wire-encoded by the load balancer
        "query_string": request.url.raw_query.encode("latin-1", errors="replace"),
        "root_path": "",
        "headers": [
            (name.lower().encode("latin-1"), value.encode("latin-1", errors="replace"))
            for name, value in headers.items_flat()
        ],
        "server": (host.split(":")[0], port) if host else None,
        "client": (client_ip, 0) if client_ip else None,
        "extensions": {"aws.context": request.context},
    }


class ASGIHandler:
    """Handler adapter: runs an ASGI app for each request."""

    def __init__(self, app: ASGIApp):
        self.app = app

    def serve_http(self, writer: ResponseWriter, request: Request) -> None:
        asyncio.run(self._run(writer, request))

    async def _run(self, writer: ResponseWriter, request: Request) -> None:
        body = request.read_body()
        body_sent = False
        started = False
        response_complete = asyncio.Event()

        async def receive() -> Message:
            nonlocal body_sent
            if not body_sent:
                body_sent = True
                return {"type": "http.request", "body": body, "more_body": False}
            # The client stays connected until the response has been produced
            await response_complete.wait()
            return {"type": "http.disconnect"}

        async def send(message: Message) -> None:
            nonlocal started
            kind = message["type"]
            if kind == "http.response.start":
                if started:
                    raise RuntimeError("http.response.start sent twice")
                out = writer.header()
                for name, value in message.get("headers", []):
                    out.add(name.decode("latin-1"), value.decode("latin-1"))
                writer.write_header(message["status"])
                started = True
            elif kind == "http.response.body":
                if not started:
                    raise RuntimeError("http.response.body sent before http.response.start")
                chunk = message.get("body", b"")
                if chunk:
                    writer.write(chunk)
                if not message.get("more_body", False):
                    response_complete.set()
            else:
                logger.debug("Ignoring ASGI message", extra={"log_data": {"type": kind}})

        await self.app(build_scope(request), receive, send)
