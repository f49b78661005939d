"""Serve a WSGI application (PEP 3333) as a handler."""

from __future__ import annotations

import io
import sys
from collections.abc import Callable
from typing import Any

from funcserver.http.request import Request
from funcserver.http.writer import ResponseWriter

WSGIApp = Callable[[dict, Callable], Any]

_UNPREFIXED = ("Content-Type", "Content-Length")


def _split_host(host: str, scheme: str) -> tuple[str, str]:
    default_port = "443" if scheme == "https" else "80"
    if not host:
        return "localhost", default_port
    if host.startswith("["):
        # IPv6 literal
        end = host.find("]")
        name, rest = host[: end + 1], host[end + 1:]
        return name, rest[1:] if rest.startswith(":") else default_port
    name, sep, port = host.partition(":")
    return name, port if sep else default_port


def build_environ(request: Request) -> dict[str, Any]:
    """WSGI environ for request.

    The raw query string is passed on unchanged; PATH_INFO is the path as
    the load balancer delivered it (already percent-decoded).
    """
    headers = request.headers
    scheme = headers.find("X-Forwarded-Proto") or "https"
    server_name, server_port = _split_host(headers.find("Host"), scheme)
    body = request.read_body()

    environ: dict[str, Any] = {
        "REQUEST_METHOD": request.method,
        "SCRIPT_NAME": "",
        "PATH_INFO": request.url.path,
        "QUERY_STRING": request.url.raw_query,
        "SERVER_NAME": server_name,
        "SERVER_PORT": server_port,
        "SERVER_PROTOCOL": "HTTP/1.1",
        "CONTENT_TYPE": headers.find("Content-Type"),
        "CONTENT_LENGTH": str(len(body)),
        "REMOTE_ADDR": headers.find("X-Forwarded-For").split(",")[0].strip(),
        "wsgi.version": (1, 0),
        "wsgi.url_scheme": scheme,
        "wsgi.input": io.BytesIO(body),
        "wsgi.errors": sys.stderr,
        "wsgi.multithread": False,
        "wsgi.multiprocess": False,
        "wsgi.run_once": False,
        "funcserver.context": request.context,
    }
    for name, values in headers.items():
        if name.title() in _UNPREFIXED:
            continue
        key = "HTTP_" + name.upper().replace("-", "_")
        value = ", ".join(values)
        if key in environ:
            environ[key] = f"{environ[key]}, {value}"
        else:
            environ[key] = value
    return environ


class WSGIHandler:
    """Handler adapter: runs a WSGI app for each request."""

    def __init__(self, app: WSGIApp):
        self.app = app

    def serve_http(self, writer: ResponseWriter, request: Request) -> None:
        started = False
        status: list[int] = []
        headers_set: list[tuple[str, str]] = []

        def start_response(status_line: str, response_headers, exc_info=None):
            if exc_info:
                try:
                    if started:
                        raise exc_info[1].with_traceback(exc_info[2])
                finally:
                    exc_info = None
            elif status:
                raise AssertionError("start_response called twice without exc_info")

            status[:] = [int(status_line.split(" ", 1)[0])]
            headers_set[:] = list(response_headers)
            return write

        def send_headers() -> None:
            nonlocal started
            if started:
                return
            if not status:
                raise AssertionError("write() before start_response()")
            out = writer.header()
            for name, value in headers_set:
                out.add(name, value)
            writer.write_header(status[0])
            started = True

        def write(data: bytes) -> None:
            send_headers()
            if data:
                writer.write(data)

        result = self.app(build_environ(request), start_response)
        try:
            for chunk in result:
                if chunk:
                    write(chunk)
            send_headers()
        finally:
            if hasattr(result, "close"):
                result.close()
