"""Request-scoped values and the request converter protocol.

A Context is an immutable chain of key/value links. The root of the chain
may hold the Lambda runtime context object, which carries the invocation
deadline and request id. Values are keyed by ContextKey so that keys owned
by this package never collide with plain strings used by applications.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from funcserver.http.request import Request


@dataclass(frozen=True)
class ContextKey:
    """Namespaced context key, e.g. ContextKey("elb")."""

    name: str

    def __repr__(self) -> str:
        return f"funcserver context value {self.name}"


class Context:
    """Immutable request-scoped value store."""

    __slots__ = ("_parent", "_key", "_value", "_runtime")

    def __init__(self, parent: Context | None = None, key: Any = None, value: Any = None,
                 runtime: Any = None):
        self._parent = parent
        self._key = key
        self._value = value
        self._runtime = runtime if parent is None else parent.runtime

    @classmethod
    def background(cls, runtime: Any = None) -> Context:
        """Root context, optionally bound to the Lambda runtime context object."""
        return cls(runtime=runtime)

    def with_value(self, key: Any, value: Any) -> Context:
        """Return a child context in which key is bound to value."""
        if key is None:
            raise ValueError("nil key")
        return Context(parent=self, key=key, value=value)

    def value(self, key: Any, default: Any = None) -> Any:
        ctx: Context | None = self
        while ctx is not None:
            if ctx._parent is not None and ctx._key == key:
                return ctx._value
            ctx = ctx._parent
        return default

    @property
    def runtime(self) -> Any:
        return self._runtime

    @property
    def request_id(self) -> str:
        return getattr(self._runtime, "aws_request_id", "") or ""

    def remaining_time_ms(self) -> int | None:
        """Milliseconds left before the runtime's deadline, None without a runtime."""
        if self._runtime is None or not hasattr(self._runtime, "get_remaining_time_in_millis"):
            return None
        return self._runtime.get_remaining_time_in_millis()


class RequestConverter(Protocol):
    """Anything that can be turned into a Request for an ordinary HTTP handler."""

    def as_http_request(self, ctx: Context) -> Request:
        ...
