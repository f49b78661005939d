"""Handler-facing response contract.

A handler is any callable taking (writer, request), or an object exposing
serve_http(writer, request). It produces its response through the writer:
headers via header(), the status via write_header(), the body via write().
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from funcserver.http.headers import Headers
from funcserver.http.request import Request


@runtime_checkable
class ResponseWriter(Protocol):

    def header(self) -> Headers:
        """Header map that will be sent by write_header.

        Changing the map after write_header (or write) has no effect.
        """
        ...

    def write_header(self, status_code: int) -> None:
        ...

    def write(self, data: bytes) -> int:
        ...


HandlerFunc = Callable[[ResponseWriter, Request], Any]


@runtime_checkable
class Handler(Protocol):

    def serve_http(self, writer: ResponseWriter, request: Request) -> None:
        ...


def as_handler_func(handler: Handler | HandlerFunc) -> HandlerFunc:
    """Normalize a Handler object or plain callable into a callable."""
    if isinstance(handler, Handler):
        return handler.serve_http
    if callable(handler):
        return handler
    raise TypeError(f"{type(handler).__name__} is not a handler")
