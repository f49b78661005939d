"""Conversion of an ALB event into a Request for ordinary HTTP handlers."""

from __future__ import annotations

import base64
import binascii
from collections.abc import Mapping

from funcserver.alb.types import ALBRequest, ELB
from funcserver.context import Context, ContextKey
from funcserver.exceptions import BodyDecodeError
from funcserver.http.headers import Headers
from funcserver.http.request import URL, Body, Request

ELB_CONTEXT_KEY = ContextKey("elb")


def single_query_string(params: Mapping[str, str]) -> str:
    """Join single value query params into a raw query string.

    Keys and values arrive percent-encoded exactly as the client sent them,
    so they are inserted verbatim. Encoding them again would double-encode
    reserved characters.
    """
    return "&".join(f"{k}={v}" for k, v in params.items())


def multi_query_string(params: Mapping[str, list[str]]) -> str:
    """Join multi value query params into a raw query string, one pair per value.

    As with single_query_string, nothing is re-encoded.
    """
    return "&".join(f"{k}={v}" for k, values in params.items() for v in values)


def resolve_query_string(payload: ALBRequest) -> str:
    if payload.multi_query:
        return multi_query_string(payload.multi_query)
    return single_query_string(payload.single_query)


def resolve_headers(payload: ALBRequest) -> Headers:
    if payload.multi_headers:
        return Headers({k: list(v) for k, v in payload.multi_headers.items()})
    return Headers.from_single(payload.single_headers)


def resolve_body(payload: ALBRequest) -> bytes:
    if not payload.is_base64:
        return payload.body.encode("utf-8")
    try:
        return base64.b64decode(payload.body, validate=True)
    except (binascii.Error, ValueError) as e:
        raise BodyDecodeError(payload.body, e) from e


def to_http_request(payload: ALBRequest, ctx: Context | None = None) -> Request:
    """Build the Request a handler sees for payload.

    The method and path are passed through untouched, an empty value
    included; routing and method checks are left to the handler. The ELB
    record is bound to the request context under ContextKey("elb").
    """
    if ctx is None:
        ctx = Context.background()

    body = resolve_body(payload)
    request = Request(
        method=payload.method,
        url=URL(path=payload.path, raw_query=resolve_query_string(payload)),
        headers=resolve_headers(payload),
        body=Body(body),
    )
    return request.with_context(ctx.with_value(ELB_CONTEXT_KEY, payload.elb))


def get_elb(source: Request | Context) -> ELB | None:
    """ELB record bound to a request (or its context), None if absent."""
    ctx = source.context if isinstance(source, Request) else source
    return ctx.value(ELB_CONTEXT_KEY)
