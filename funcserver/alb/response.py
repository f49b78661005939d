"""Response capture and conversion to the ALB response format."""

from __future__ import annotations

import base64
from collections.abc import Iterable
from dataclasses import dataclass

from funcserver.alb.types import ALBResponse
from funcserver.config.settings import get_settings
from funcserver.exceptions import InvalidStatus
from funcserver.http.headers import Headers, canonical_header_key
from funcserver.http.sniff import SNIFF_LEN, detect_content_type
from funcserver.http.status import status_text, valid_status
from funcserver.logging.structured import get_logger

logger = get_logger("alb.response")

# Non text/* types the load balancer itself treats as text when deciding
# whether to base64 encode a request body
_TEXT_APPLICATION_TYPES = frozenset({
    "application/json",
    "application/javascript",
    "application/xml",
})


@dataclass(frozen=True)
class ResponseOptions:
    # Multi value headers must be explicitly enabled on the target group
    # https://docs.aws.amazon.com/elasticloadbalancing/latest/application/lambda-functions.html#multi-value-headers
    multi_value_headers: bool = False

    @classmethod
    def from_settings(cls) -> ResponseOptions:
        return cls(multi_value_headers=get_settings().multi_value_headers)


def use_base64_body(content_type: str) -> bool:
    """True unless content_type is one the load balancer passes through as text."""
    if content_type.startswith("text/") or content_type in _TEXT_APPLICATION_TYPES:
        return False
    return True


class ResponseWriter:
    """Buffers a handler's response for one invocation.

    handler_headers is the map handlers get from header(); they may keep
    and mutate it even after write_header. It is copied into
    snapshot_headers at write_header time and only the copy is sent.
    """

    def __init__(self, opts: ResponseOptions | None = None):
        self.opts = opts or ResponseOptions()
        self.handler_headers = Headers()
        self.snapshot_headers = Headers()
        self.handler_touched_headers = False
        self.status_code = 0
        self.status_written = False
        self.body = bytearray()
        self._finalized = False

    def header(self) -> Headers:
        """Header map that will be sent by write_header.

        Changing the map after a call to write_header (or write) has no
        effect on the response.
        """
        self.handler_touched_headers = True
        return self.handler_headers

    def write_header(self, status_code: int) -> None:
        """Set the response status. Only the first call has an effect.

        If write_header is not called explicitly, the first call to write
        triggers an implicit write_header(200).
        """
        if self.status_written:
            logger.warning(
                "multiple write_header calls",
                extra={"log_data": {"status_code": self.status_code, "ignored_status_code": status_code}},
            )
            return

        if not valid_status(status_code):
            raise InvalidStatus(status_code)

        if self.handler_touched_headers:
            self.snapshot_headers = self.handler_headers.clone()

        self.status_code = status_code
        self.status_written = True

    def write(self, data: bytes) -> int:
        """Append data to the response body, writing status 200 first if needed."""
        if isinstance(data, str):
            raise TypeError("write() argument must be bytes-like, not str")
        if not self.status_written:
            self.write_header(200)
        self.body.extend(data)
        return len(data)

    def writelines(self, chunks: Iterable[bytes]) -> None:
        for chunk in chunks:
            self.write(chunk)

    def finalize(self) -> ALBResponse:
        """Convert the captured response into an ALBResponse. Single use."""
        if self._finalized:
            raise RuntimeError("response already finalized")
        self._finalized = True

        if not self.status_written:
            self.write_header(200)

        headers = self.snapshot_headers
        body = bytes(self.body)

        # Ensure we've got a Content-Type header
        content_type = headers.find("Content-Type")
        if body and not content_type:
            content_type = detect_content_type(body[:SNIFF_LEN])
            headers.set("Content-Type", content_type)

        resp = ALBResponse(
            status_code=self.status_code,
            status_description=status_text(self.status_code),
        )

        if self.opts.multi_value_headers:
            resp.multi_headers = {k: list(v) for k, v in headers.items()}
        else:
            single: dict[str, str] = {}
            for k, values in headers.items():
                if values:
                    single.setdefault(canonical_header_key(k), values[0])
            resp.headers = single

        if use_base64_body(content_type):
            resp.is_base64 = True
            resp.body = base64.b64encode(body).decode("ascii")
        else:
            resp.body = body.decode("utf-8", errors="replace")

        return resp
