"""Exceptions raised while adapting a load balancer invocation.

Every error propagates out of the adapter call; the Lambda runtime reports
a raised exception as a failed invocation and no response reaches the
load balancer.
"""


class AdapterError(Exception):
    """Base exception for invocation adaptation failures."""

    pass


class MalformedPayload(AdapterError):
    """Raised when the inbound event does not match the ALB request schema."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"malformed ALB request payload: {detail}")


class BodyDecodeError(AdapterError):
    """Raised when isBase64Encoded is set but the body is not valid base64."""

    def __init__(self, body: str, cause: Exception):
        self.body = body
        self.cause = cause
        super().__init__(f"unable to decode body as base64: {body}: {cause}")


class InvalidStatus(AdapterError):
    """Raised when a handler writes a status code outside 199-599."""

    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(f"invalid write_header code {status_code}")


class HandlerAbort(AdapterError):
    """Raised when the wrapped handler terminates with an exception."""

    UNKNOWN_CAUSE = "panic: unknown cause"

    @classmethod
    def from_exception(cls, exc: BaseException) -> "HandlerAbort":
        # Only a lone string argument is treated as a printable cause
        if len(exc.args) == 1 and isinstance(exc.args[0], str):
            return cls(exc.args[0])
        return cls(cls.UNKNOWN_CAUSE)
