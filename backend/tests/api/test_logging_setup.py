"""Tests for app.core.logging — JSON formatting and the request-ID filter."""

from __future__ import annotations

import json
import logging

from app.core.logging import JSONFormatter, RequestIdFilter, request_id_var, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("engine.sizing.sweep", logging.INFO, __file__, 1, "Sweep finished", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_extra_fields_included(self):
        line = JSONFormatter().format(_record(points=5, failed_points=1, unrelated="x"))
        entry = json.loads(line)
        assert entry["message"] == "Sweep finished"
        assert entry["points"] == 5
        assert entry["failed_points"] == 1
        assert "unrelated" not in entry

    def test_request_id_from_context(self):
        token = request_id_var.set("req-42")
        try:
            entry = json.loads(JSONFormatter().format(_record()))
        finally:
            request_id_var.reset(token)
        assert entry["request_id"] == "req-42"


class TestRequestIdFilter:
    def test_placeholder_outside_request(self):
        record = _record()
        assert RequestIdFilter().filter(record)
        assert record.request_id == "-"


class TestSetupLogging:
    def test_single_handler_with_request_id(self):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            setup_logging(json_format=True, level=logging.DEBUG)
            (handler,) = root.handlers
            assert isinstance(handler.formatter, JSONFormatter)
            assert any(isinstance(f, RequestIdFilter) for f in handler.filters)
            assert root.level == logging.DEBUG
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
