"""Unit tests for structured logging."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from workflow_trigger_engine.engine.logging import JsonFormatter, configure_logging


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord("trigger", logging.WARNING, __file__, 10, "Saved %s", ("x",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_nests_extra_fields() -> None:
    payload = json.loads(JsonFormatter().format(_record(trigger_key="schedule.cron")))

    assert payload["level"] == "WARNING"
    assert payload["logger"] == "trigger"
    assert payload["message"] == "Saved x"
    assert payload["extra"] == {"trigger_key": "schedule.cron"}
    assert "exception" not in payload


def test_json_formatter_without_extra() -> None:
    payload = json.loads(JsonFormatter().format(_record()))

    assert "extra" not in payload
    assert payload["timestamp"].endswith("+00:00")


def test_json_formatter_includes_exception() -> None:
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = logging.LogRecord(
            "trigger", logging.ERROR, __file__, 1, "failed", None, sys.exc_info()
        )

    payload = json.loads(JsonFormatter().format(record))

    assert "RuntimeError: boom" in payload["exception"]


def test_configure_logging_writes_json_to_stdout(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging("debug")

    logging.getLogger("workflow_trigger_engine.test").debug("hello", extra={"count": 2})

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, JsonFormatter)

    line = capsys.readouterr().out.strip().splitlines()[-1]
    assert json.loads(line)["extra"] == {"count": 2}


def test_configure_logging_to_another_stream(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging("info", stream=sys.stderr)

    logging.getLogger("workflow_trigger_engine.test").info("to stderr")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert json.loads(captured.err.strip())["message"] == "to stderr"


def test_configure_logging_keeps_dependency_loggers_quiet() -> None:
    configure_logging("DEBUG")

    assert logging.getLogger("jsonschema").level == logging.INFO
