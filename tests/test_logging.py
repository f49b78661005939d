"""Tests for funcserver/logging/structured.py: JSON logging."""

import json
import logging
import sys

from funcserver.logging.structured import (
    JSONFormatter,
    RequestTimer,
    get_logger,
    request_id_var,
    setup_logging,
)


def _record(msg: str = "test") -> logging.LogRecord:
    return logging.LogRecord(
        name="test", level=logging.INFO, pathname="",
        lineno=0, msg=msg, args=(), exc_info=None,
    )


class TestJSONFormatter:

    def test_output_is_valid_json(self):
        output = JSONFormatter().format(_record("hello"))
        parsed = json.loads(output)
        assert parsed["message"] == "hello"
        assert parsed["level"] == "INFO"
        assert "timestamp" in parsed

    def test_includes_request_id(self):
        token = request_id_var.set("c6af9ac6-7b61")
        try:
            parsed = json.loads(JSONFormatter().format(_record()))
            assert parsed["request_id"] == "c6af9ac6-7b61"
        finally:
            request_id_var.reset(token)

    def test_includes_log_data(self):
        record = _record()
        record.log_data = {"status_code": 200, "path": "/x"}
        parsed = json.loads(JSONFormatter().format(record))
        assert parsed["status_code"] == 200
        assert parsed["path"] == "/x"

    def test_empty_request_id_default(self):
        parsed = json.loads(JSONFormatter().format(_record()))
        assert parsed["request_id"] == ""

    def test_includes_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord(
                name="test", level=logging.ERROR, pathname="",
                lineno=0, msg="failed", args=(), exc_info=sys.exc_info(),
            )
        parsed = json.loads(JSONFormatter().format(record))
        assert "ValueError: boom" in parsed["exception"]


class TestGetLogger:

    def test_package_logger(self):
        assert get_logger().name == "funcserver"

    def test_child_logger(self):
        assert get_logger("alb.handler").name == "funcserver.alb.handler"


class TestRequestTimer:

    def test_measures_elapsed(self):
        with RequestTimer() as timer:
            _ = sum(range(1000))
        assert timer.elapsed_ms > 0
        assert isinstance(timer.elapsed_ms, float)


class TestSetupLogging:

    def test_creates_stdout_handler(self, override_settings):
        override_settings(LOG_FILE="")
        setup_logging()
        logger = get_logger()
        try:
            assert len(logger.handlers) == 1
            assert isinstance(logger.handlers[0], logging.StreamHandler)
            assert logger.propagate is False
        finally:
            logger.handlers.clear()
            logger.propagate = True
            logger.setLevel(logging.NOTSET)

    def test_file_handler(self, override_settings, tmp_path):
        path = tmp_path / "funcserver.log"
        override_settings(LOG_FILE=str(path), LOG_LEVEL="DEBUG")
        setup_logging()
        logger = get_logger()
        try:
            assert logger.level == logging.DEBUG
            assert any(isinstance(h, logging.FileHandler) for h in logger.handlers)
            logger.info("written")
            for h in logger.handlers:
                h.flush()
            assert json.loads(path.read_text().splitlines()[0])["message"] == "written"
        finally:
            for h in logger.handlers:
                h.close()
            logger.handlers.clear()
            logger.propagate = True
            logger.setLevel(logging.NOTSET)
