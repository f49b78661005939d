"""
Pydantic models for the ALB Lambda target event and response.

Reference: https://docs.aws.amazon.com/elasticloadbalancing/latest/application/lambda-functions.html

The load balancer fills in exactly one of the single/multi value variants
of the query string and headers, depending on whether multi value headers
are enabled on the target group.
"""

from collections.abc import Mapping
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr, ValidationError, field_validator

from funcserver.exceptions import MalformedPayload


class ELB(BaseModel):
    """Information about the load balancer target group that received the request.

    Handlers read it from the request context, see funcserver.alb.request.get_elb.
    """

    target_group_arn: StrictStr = Field("", alias="targetGroupArn")

    model_config = ConfigDict(frozen=True)


class ALBRequestContext(BaseModel):
    elb: ELB = Field(default_factory=ELB)

    @field_validator("elb", mode="before")
    @classmethod
    def _null_elb(cls, v: Any) -> Any:
        return {} if v is None else v


class ALBRequest(BaseModel):
    """
    An HTTP request received by the load balancer and forwarded to the function.

    Missing (or null) optional fields decode to empty containers.
    """

    request_context: ALBRequestContext = Field(default_factory=ALBRequestContext, alias="requestContext")
    method: StrictStr = Field("", alias="httpMethod")
    path: StrictStr = ""
    single_query: Dict[StrictStr, StrictStr] = Field(default_factory=dict, alias="queryStringParameters")
    multi_query: Dict[StrictStr, List[StrictStr]] = Field(
        default_factory=dict, alias="multiValueQueryStringParameters"
    )
    single_headers: Dict[StrictStr, StrictStr] = Field(default_factory=dict, alias="headers")
    multi_headers: Dict[StrictStr, List[StrictStr]] = Field(default_factory=dict, alias="multiValueHeaders")
    is_base64: StrictBool = Field(False, alias="isBase64Encoded")

    # Limited to 1MB together with the response body
    body: StrictStr = ""

    # Wire keys only: a field's Python name in the document is just another
    # unknown key and is ignored
    model_config = ConfigDict(populate_by_name=False)

    @field_validator(
        "request_context",
        "single_query",
        "multi_query",
        "single_headers",
        "multi_headers",
        mode="before",
    )
    @classmethod
    def _null_as_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("method", "path", "body", mode="before")
    @classmethod
    def _null_as_blank(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("is_base64", mode="before")
    @classmethod
    def _null_as_false(cls, v: Any) -> Any:
        return False if v is None else v

    @property
    def elb(self) -> ELB:
        return self.request_context.elb

    def as_http_request(self, ctx):
        """Convert to the equivalent Request, see funcserver.alb.request."""
        from funcserver.alb.request import to_http_request

        return to_http_request(self, ctx)


class ALBResponse(BaseModel):
    """
    Response returned to the load balancer.

    Use encode_outbound() to get the document handed back to the runtime.
    """

    status_code: StrictInt = Field(alias="statusCode")
    status_description: StrictStr = Field("", alias="statusDescription")
    headers: Optional[Dict[str, str]] = None
    multi_headers: Optional[Dict[str, List[str]]] = Field(None, alias="multiValueHeaders")
    body: StrictStr = ""
    is_base64: StrictBool = Field(False, alias="isBase64Encoded")

    model_config = ConfigDict(populate_by_name=True)


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "<root>"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def decode_inbound(document: Any) -> ALBRequest:
    """Validate an inbound event document into an ALBRequest.

    Raises MalformedPayload if the document is not a mapping or a field
    has the wrong type.
    """
    if not isinstance(document, Mapping):
        raise MalformedPayload(f"expected a JSON object, got {type(document).__name__}")
    try:
        return ALBRequest.model_validate(dict(document))
    except ValidationError as e:
        raise MalformedPayload(_describe(e)) from e


def encode_outbound(response: ALBResponse) -> Dict[str, Any]:
    """Dump a response to the wire document, omitting the unused header variant."""
    return response.model_dump(by_alias=True, exclude_none=True)
