"""Wrap an ordinary HTTP handler for use as an ALB-triggered Lambda function.

The load balancer invokes the function with a JSON event describing one
request; the wrapper turns it into a Request, calls the handler with a
ResponseWriter and converts what the handler wrote into the response
document the load balancer expects.

Caveats:

- request and response bodies are limited to 1MB in total
- no streaming, the request is received in full before the function is
  invoked and the handler must return before the response is sent
"""

from __future__ import annotations

from typing import Any

from funcserver.alb.response import ResponseOptions, ResponseWriter
from funcserver.alb.types import decode_inbound, encode_outbound
from funcserver.context import Context, RequestConverter
from funcserver.exceptions import AdapterError, HandlerAbort, InvalidStatus
from funcserver.http.writer import Handler, HandlerFunc, as_handler_func
from funcserver.logging.structured import RequestTimer, get_logger, request_id_var

logger = get_logger("alb.handler")


class ALBAdapter:
    """Lambda handler callable: adapter(event, context) -> response document."""

    def __init__(self, handler: Handler | HandlerFunc, opts: ResponseOptions | None = None):
        self.handler = as_handler_func(handler)
        self.opts = opts or ResponseOptions()

    def __call__(self, event: Any, context: Any = None) -> dict[str, Any]:
        ctx = Context.background(context)
        token = request_id_var.set(ctx.request_id)
        try:
            return self._invoke(event, ctx)
        finally:
            request_id_var.reset(token)

    def _invoke(self, event: Any, ctx: Context) -> dict[str, Any]:
        with RequestTimer() as timer:
            try:
                payload = decode_inbound(event)
                converter: RequestConverter = payload
                request = converter.as_http_request(ctx)
            except AdapterError as e:
                logger.warning("Rejected invocation", extra={"log_data": {"error": str(e)}})
                raise

            writer = ResponseWriter(self.opts)
            self._dispatch(writer, request)

            resp = writer.finalize()

        logger.info(
            "Invocation completed",
            extra={"log_data": {
                "method": request.method,
                "path": request.path,
                "status_code": resp.status_code,
                "body_bytes": len(writer.body),
                "is_base64": resp.is_base64,
                "latency_ms": timer.elapsed_ms,
                "target_group_arn": payload.elb.target_group_arn,
            }},
        )
        return encode_outbound(resp)

    def _dispatch(self, writer: ResponseWriter, request) -> None:
        try:
            self.handler(writer, request)
        except InvalidStatus:
            logger.exception("Handler wrote an invalid status")
            raise
        except (Exception, SystemExit) as e:
            # sys.exit() inside a handler must not end the runtime process
            logger.exception("Handler aborted")
            raise HandlerAbort.from_exception(e) from e


def wrap_http_handler(handler: Handler | HandlerFunc, opts: ResponseOptions | None = None) -> ALBAdapter:
    """Wrap handler so it can be used as the Lambda function handler.

    Example:

        handler = wrap_http_handler(WSGIHandler(flask_app), ResponseOptions())
    """
    return ALBAdapter(handler, opts)
