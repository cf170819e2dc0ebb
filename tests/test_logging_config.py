import json
import logging

from quiz_engine.logging_config import (
    JSONFormatter,
    RequestIdFilter,
    bind_request_id,
    reset_request_id,
)


def _record(msg="Created quiz %s", args=("q1",), **extra):
    record = logging.LogRecord("quiz_engine.test", logging.INFO, __file__, 1, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    RequestIdFilter().filter(record)
    return record


def test_json_line_has_message_and_level():
    entry = json.loads(JSONFormatter().format(_record()))
    assert entry["message"] == "Created quiz q1"
    assert entry["level"] == "INFO"
    assert entry["logger"] == "quiz_engine.test"
    assert entry["time"].endswith("+00:00")
    assert "request_id" not in entry


def test_engine_context_fields_are_included():
    entry = json.loads(JSONFormatter().format(_record(quiz_id="q1", attempt_id="a1", color="blue")))
    assert entry["quiz_id"] == "q1"
    assert entry["attempt_id"] == "a1"
    assert "student_id" not in entry
    assert "color" not in entry


def test_request_id_is_attached_while_bound():
    token = bind_request_id("req-7")
    try:
        entry = json.loads(JSONFormatter().format(_record()))
    finally:
        reset_request_id(token)
    assert entry["request_id"] == "req-7"
    assert _record().request_id == "-"
