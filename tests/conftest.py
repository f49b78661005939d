"""Shared fixtures for the funcserver test suite."""

import json
import logging
from dataclasses import dataclass

import pytest

from funcserver.config.settings import get_settings

TARGET_GROUP_ARN = "arn:aws:elasticloadbalancing:region:123456789012:targetgroup/my-target-group/6d0ecf831eec9f09"


@dataclass
class FakeLambdaContext:
    """Stand-in for the context object the Lambda runtime passes to handlers."""

    aws_request_id: str = "c6af9ac6-7b61-11e6-9a41-93e812345678"
    function_name: str = "funcserver-test"
    remaining_ms: int = 3000

    def get_remaining_time_in_millis(self) -> int:
        return self.remaining_ms


@pytest.fixture
def lambda_context() -> FakeLambdaContext:
    return FakeLambdaContext()


def make_event(**fields) -> dict:
    """ALB event document, round-tripped through JSON like the runtime does."""
    event = {
        "requestContext": {"elb": {"targetGroupArn": TARGET_GROUP_ARN}},
        "httpMethod": "GET",
        "path": "/",
        "body": "",
        "isBase64Encoded": False,
    }
    event.update(fields)
    return json.loads(json.dumps(event))


@pytest.fixture
def alb_event():
    """Factory fixture: alb_event(httpMethod="POST", body="...")."""
    return make_event


@pytest.fixture
def override_settings(monkeypatch):
    """Factory fixture: set env vars and clear settings cache.

    Usage:
        override_settings(MULTI_VALUE_HEADERS="true", LOG_LEVEL="DEBUG")
    """
    def _override(**kwargs):
        for key, value in kwargs.items():
            monkeypatch.setenv(key.upper(), str(value))
        # Clear lru_cache so Settings re-reads env
        get_settings.cache_clear()

    yield _override

    # Always clear cache on teardown so other tests get fresh settings
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo setup_logging() so caplog sees package records in every test."""
    def _reset():
        logger = logging.getLogger("funcserver")
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
        logger.propagate = True
        logger.setLevel(logging.NOTSET)

    _reset()
    yield
    _reset()
