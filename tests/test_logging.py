import json
import logging
import os
import sys
import time
from contextlib import contextmanager
from io import StringIO
from unittest.mock import patch

import pytest

from interview_prep.core.logging import (
    ContextFilter,
    JsonFormatter,
    _coerce_level,
    audit_log,
    get_request_id,
    get_run_id,
    get_trace_id,
    init_logging,
    is_masking,
    log_event,
    mask_text,
    set_masking,
    set_request_id,
    set_run_id,
    set_trace_id,
    short_uuid,
    span,
)

TEST_TRACE_ID = "trace-123"
TEST_REQUEST_ID = "req-456"


@contextmanager
def clean_logging_context():
    """Reset logging context between tests."""
    set_trace_id(None)
    set_run_id("")
    set_request_id(None)
    set_masking(False)

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    yield

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    set_masking(False)


@pytest.fixture
def json_output():
    """Capture JSON log lines written to stdout."""
    with clean_logging_context():
        with patch("sys.stdout", new_callable=StringIO) as mock_stdout:
            init_logging(fmt="json", level="INFO")
            yield mock_stdout


def read_lines(mock_stdout):
    return [json.loads(line) for line in mock_stdout.getvalue().splitlines() if line]


def make_record(msg="test message"):
    record = logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname="/path/file.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )
    record.created = time.time()
    return record


class TestMaskText:
    """Job postings must never land in logs verbatim."""

    def test_short_text_unchanged_without_masking(self):
        with clean_logging_context():
            assert mask_text("short posting") == "short posting"

    def test_long_text_is_truncated(self):
        with clean_logging_context():
            text = "x" * 200
            result = mask_text(text)
            assert result.startswith("x" * 80 + "...")
            assert "len=200" in result
            assert len(result) < 200

    def test_masking_hides_content(self):
        with clean_logging_context():
            set_masking(True)
            result = mask_text("Senior developer at Acme")
            assert result == "[masked len=24]"
            assert is_masking() is True


class TestUtilities:
    def test_short_uuid(self):
        value = short_uuid()
        assert len(value) == 12
        assert value != short_uuid()

    @pytest.mark.parametrize(
        ("level", "expected"),
        [(logging.DEBUG, logging.DEBUG), ("warning", logging.WARNING), ("nope", logging.INFO), (None, logging.INFO)],
    )
    def test_coerce_level(self, level, expected):
        assert _coerce_level(level) == expected

    def test_request_id_roundtrip(self):
        with clean_logging_context():
            set_request_id(TEST_REQUEST_ID)
            assert get_request_id() == TEST_REQUEST_ID


class TestContextFilter:
    def test_adds_correlation_fields(self):
        with clean_logging_context():
            set_trace_id(TEST_TRACE_ID)
            set_request_id(TEST_REQUEST_ID)
            record = make_record()

            assert ContextFilter().filter(record) is True
            assert record.trace_id == TEST_TRACE_ID == get_trace_id()
            assert record.request_id == TEST_REQUEST_ID
            assert record.span_id is None
            assert record.event == "test"


class TestJsonFormatter:
    def test_required_and_extra_fields(self):
        record = make_record()
        record.event = "question.listed"
        record.user_id = "user-1"

        parsed = json.loads(JsonFormatter().format(record))

        assert parsed["level"] == "info"
        assert parsed["logger"] == "test"
        assert parsed["message"] == "test message"
        assert parsed["event"] == "question.listed"
        assert parsed["user_id"] == "user-1"
        assert parsed["timestamp"].endswith("Z")
        assert "pathname" not in parsed
        assert "lineno" not in parsed

    def test_non_serializable_values_are_stringified(self):
        record = make_record()
        record.payload = object()
        parsed = json.loads(JsonFormatter().format(record))
        assert parsed["payload"].startswith("<object object")

    def test_exception_is_included(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord("test", logging.ERROR, "", 0, "failed", (), exc_info=sys.exc_info())
        parsed = json.loads(JsonFormatter().format(record))
        assert "RuntimeError: boom" in parsed["exception"]


class TestInitLogging:
    def test_returns_package_logger_and_sets_run_id(self):
        with clean_logging_context():
            logger = init_logging()
            assert logger.name == "interview_prep"
            assert len(get_run_id()) == 12

    def test_environment_variables(self):
        with clean_logging_context():
            env_vars = {
                "INTERVIEW_PREP_LOG_LEVEL": "DEBUG",
                "INTERVIEW_PREP_LOG_FORMAT": "text",
                "INTERVIEW_PREP_LOG_MASK": "true",
            }
            with patch.dict(os.environ, env_vars):
                init_logging()

            assert logging.getLogger().level == logging.DEBUG
            assert is_masking() is True

    def test_repeated_init_keeps_single_handler(self):
        with clean_logging_context():
            init_logging()
            init_logging()
            assert len(logging.getLogger().handlers) == 1

    def test_file_output(self, tmp_path):
        log_file = tmp_path / "app.log"
        with clean_logging_context():
            init_logging(file_path=str(log_file), fmt="json")
            log_event("file.test", component="test")

            parsed = json.loads(log_file.read_text().strip().splitlines()[-1])
            assert parsed["event"] == "file.test"
            assert parsed["component"] == "test"


class TestStructuredEvents:
    def test_log_event(self, json_output):
        log_event("question.listed", component="api", operation="list_questions", count=3)

        record = read_lines(json_output)[-1]
        assert record["event"] == "question.listed"
        assert record["component"] == "api"
        assert record["count"] == 3

    def test_span_success(self, json_output):
        with span("db.create_batch", component="db", operation="create_batch", questions=5):
            pass

        record = read_lines(json_output)[-1]
        assert record["event"] == "db.create_batch"
        assert record["status"] == "ok"
        assert record["questions"] == 5
        assert record["duration_ms"] >= 0

    def test_span_failure_records_error_and_reraises(self, json_output):
        with pytest.raises(ValueError):
            with span("llm.request", component="openrouter"):
                raise ValueError("bad payload")

        record = read_lines(json_output)[-1]
        assert record["status"] == "error"
        assert record["error_type"] == "ValueError"
        assert record["error_msg"] == "bad payload"

    def test_nested_spans_link_parent(self, json_output):
        with span("outer"):
            with span("inner"):
                pass

        inner, outer = read_lines(json_output)[-2:]
        assert inner["event"] == "inner"
        assert inner["parent_span_id"] == outer["span_id"]

    def test_audit_log(self, json_output):
        audit_log("auth.invalid_token", user_id=None, client_ip="10.0.0.1", path="/api/v1/questions")

        record = read_lines(json_output)[-1]
        assert record["level"] == "warning"
        assert record["event"] == "audit.auth.invalid_token"
        assert record["audit"] is True
        assert record["client_ip"] == "10.0.0.1"
        assert record["path"] == "/api/v1/questions"
