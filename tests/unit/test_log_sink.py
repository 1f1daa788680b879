"""Unit tests for response logging and severity escalation."""

from __future__ import annotations

import logging

import pytest

from eva_api.formatter.log_sink import (
    CONTROLLER_ESCALATION,
    FORMATTER_ESCALATION,
    ResponseLogSink,
)


@pytest.mark.parametrize(
    ("escalate_at", "code", "level"),
    [
        (FORMATTER_ESCALATION, 200, logging.INFO),
        (FORMATTER_ESCALATION, 302, logging.INFO),
        (FORMATTER_ESCALATION, 404, logging.WARNING),
        (FORMATTER_ESCALATION, 429, logging.WARNING),
        (FORMATTER_ESCALATION, 500, logging.ERROR),
        (CONTROLLER_ESCALATION, 404, logging.INFO),
        (CONTROLLER_ESCALATION, 422, logging.INFO),
        (CONTROLLER_ESCALATION, 503, logging.ERROR),
    ],
)
def test_level_for(escalate_at, code, level):
    assert ResponseLogSink(escalate_at=escalate_at).level_for(code) == level


def test_record_attaches_context_fields(caplog, ctx):
    sink = ResponseLogSink(logging.getLogger("test.sink"))
    with caplog.at_level(logging.INFO, logger="test.sink"):
        sink.record("not_found", "Equipment 9 not found", 404, ctx)

    [record] = caplog.records
    assert record.levelno == logging.WARNING
    assert record.getMessage() == "API response not_found: Equipment 9 not found"
    assert record.response_type == "not_found"
    assert record.status_code == 404
    assert record.user_id == 7
    assert record.ip == "10.0.0.5"
    assert record.user_agent == "pytest"
    assert record.endpoint == "/api/v1/equipment"
    assert record.method == "GET"
    assert record.request_id == "req-123"


def test_record_without_context(caplog):
    sink = ResponseLogSink(logging.getLogger("test.sink"))
    with caplog.at_level(logging.INFO, logger="test.sink"):
        sink.record("success", "ok", 200)

    [record] = caplog.records
    assert record.levelno == logging.INFO
    assert record.user_id is None
    assert record.request_id is None


def test_formatter_logs_every_response(caplog, formatter, ctx):
    with caplog.at_level(logging.INFO, logger="eva_api.responses"):
        formatter.success(ctx=ctx)
        formatter.not_found(ctx=ctx)
        formatter.server_error(ctx=ctx)
        formatter.no_content(ctx=ctx)

    levels = [(r.response_type, r.levelno) for r in caplog.records if r.name == "eva_api.responses"]
    assert levels == [
        ("success", logging.INFO),
        ("not_found", logging.WARNING),
        ("server_error", logging.ERROR),
        ("no_content", logging.INFO),
    ]
