"""In-process HTTP request handed to handlers."""

from __future__ import annotations

import io
from dataclasses import dataclass, field, replace
from urllib.parse import parse_qs

from funcserver.context import Context
from funcserver.http.headers import Headers


class Body(io.BytesIO):
    """In-memory request body whose close() does nothing.

    Middleware commonly closes the body once it has been consumed; later
    reads keep working and return whatever remains, b"" once exhausted.
    """

    def close(self) -> None:
        pass


@dataclass
class URL:
    path: str = ""
    raw_query: str = ""  # Already wire-encoded, without the leading "?"

    def __str__(self) -> str:
        if self.raw_query:
            return f"{self.path}?{self.raw_query}"
        return self.path


@dataclass
class Request:
    method: str
    url: URL
    headers: Headers = field(default_factory=Headers)
    body: io.BytesIO = field(default_factory=Body)
    context: Context = field(default_factory=Context.background)

    @property
    def path(self) -> str:
        return self.url.path

    @property
    def query(self) -> dict[str, list[str]]:
        """Parsed query string, values percent-decoded."""
        return parse_qs(self.url.raw_query, keep_blank_values=True)

    @property
    def host(self) -> str:
        return self.headers.find("Host")

    @property
    def content_type(self) -> str:
        return self.headers.find("Content-Type")

    def read_body(self) -> bytes:
        """Read whatever remains of the body stream."""
        return self.body.read()

    def with_context(self, ctx: Context) -> Request:
        """Shallow copy of the request bound to ctx."""
        if ctx is None:
            raise ValueError("nil context")
        return replace(self, context=ctx)
