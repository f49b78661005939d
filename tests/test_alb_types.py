"""Tests for funcserver/alb/types.py: payload decoding and encoding."""

import pytest

from funcserver.alb.types import ALBRequest, ALBResponse, decode_inbound, encode_outbound
from funcserver.exceptions import MalformedPayload
from tests.conftest import TARGET_GROUP_ARN


class TestDecodeInbound:

    def test_full_event(self, alb_event):
        event = alb_event(
            httpMethod="POST",
            path="/lambda",
            queryStringParameters={"query": "1234ABCD"},
            headers={"accept": "text/html", "host": "lambda-alb-123578498.us-east-2.elb.amazonaws.com"},
            body="request_body",
        )
        payload = decode_inbound(event)
        assert payload.method == "POST"
        assert payload.path == "/lambda"
        assert payload.single_query == {"query": "1234ABCD"}
        assert payload.single_headers["accept"] == "text/html"
        assert payload.body == "request_body"
        assert payload.is_base64 is False
        assert payload.elb.target_group_arn == TARGET_GROUP_ARN

    def test_missing_optional_fields_are_empty(self):
        payload = decode_inbound({})
        assert payload.method == ""
        assert payload.path == ""
        assert payload.single_query == {}
        assert payload.multi_query == {}
        assert payload.single_headers == {}
        assert payload.multi_headers == {}
        assert payload.body == ""
        assert payload.is_base64 is False
        assert payload.elb.target_group_arn == ""

    def test_nulls_are_empty(self):
        payload = decode_inbound({
            "requestContext": None,
            "queryStringParameters": None,
            "multiValueQueryStringParameters": None,
            "headers": None,
            "multiValueHeaders": None,
            "body": None,
        })
        assert payload.single_query == {}
        assert payload.multi_headers == {}
        assert payload.body == ""
        assert payload.elb.target_group_arn == ""

    def test_unknown_fields_ignored(self, alb_event):
        payload = decode_inbound(alb_event(somethingElse={"a": 1}))
        assert payload.method == "GET"

    @pytest.mark.parametrize("field, value", [
        ("httpMethod", 42),
        ("path", ["/x"]),
        ("body", {"a": 1}),
        ("isBase64Encoded", "yes"),
        ("headers", {"accept": ["text/html"]}),
        ("multiValueHeaders", {"accept": "text/html"}),
        ("queryStringParameters", "a=1"),
        ("multiValueQueryStringParameters", {"a": [1]}),
        ("requestContext", {"elb": {"targetGroupArn": 7}}),
    ])
    def test_type_mismatch_is_malformed(self, alb_event, field, value):
        with pytest.raises(MalformedPayload):
            decode_inbound(alb_event(**{field: value}))

    def test_non_mapping_is_malformed(self):
        with pytest.raises(MalformedPayload, match="expected a JSON object"):
            decode_inbound(["not", "an", "object"])

    def test_field_names_are_not_wire_keys(self):
        payload = decode_inbound({
            "httpMethod": "GET",
            "method": "X",
            "is_base64": True,
            "single_query": {"a": "b"},
            "multi_query": {"a": ["b"]},
            "single_headers": {"accept": "text/html"},
            "multi_headers": {"accept": ["text/html"]},
            "request_context": {"elb": {"targetGroupArn": "arn:x"}},
            "requestContext": {"elb": {"target_group_arn": "arn:y"}},
        })
        assert payload.method == "GET"
        assert payload.is_base64 is False
        assert payload.single_query == {}
        assert payload.multi_query == {}
        assert payload.single_headers == {}
        assert payload.multi_headers == {}
        assert payload.elb.target_group_arn == ""

    def test_validate_by_alias(self):
        payload = ALBRequest.model_validate({"httpMethod": "PUT", "path": "/p"})
        assert payload.method == "PUT"
        assert payload.path == "/p"


class TestEncodeOutbound:

    def test_single_value_omits_multi(self):
        resp = ALBResponse(
            status_code=200, status_description="OK",
            headers={"Content-Type": "text/plain"}, body="ok",
        )
        assert encode_outbound(resp) == {
            "statusCode": 200,
            "statusDescription": "OK",
            "headers": {"Content-Type": "text/plain"},
            "body": "ok",
            "isBase64Encoded": False,
        }

    def test_multi_value_omits_single(self):
        resp = ALBResponse(status_code=204, multi_headers={"Some-H": ["a", "b"]})
        doc = encode_outbound(resp)
        assert doc["multiValueHeaders"] == {"Some-H": ["a", "b"]}
        assert "headers" not in doc
