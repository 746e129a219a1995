from __future__ import annotations

import json
import logging
import sys
from typing import Any

import pytest

from taskdesk.observability import (
    ConsoleLogFormatter,
    JsonLogFormatter,
    Metrics,
    clear_session_context,
    get_json_logger,
    get_session_context,
    set_session_context,
)


def _parse_json_lines(output: str) -> list[dict[str, Any]]:
    return [json.loads(line) for line in output.strip().splitlines() if line.strip()]


def _record(msg: str, **extra: Any) -> logging.LogRecord:
    record = logging.LogRecord("taskdesk.test", logging.INFO, __file__, 1, msg, None, None)
    for k, v in extra.items():
        setattr(record, k, v)
    return record


def test_json_logger_redacts_and_formats(capsys: Any) -> None:
    logger = get_json_logger("obs-test")
    logger.setLevel(20)  # INFO
    logger.info(
        "hello",
        extra={
            "event": "login",
            "attributes": {
                "password": "hunter2",
                "token": "mock-token-user-1-1",
                "nested": {"Authorization": "Bearer x"},
                "safe": "ok",
            },
        },
    )

    out = capsys.readouterr().out
    lines = _parse_json_lines(out)
    assert len(lines) == 1
    rec = lines[0]
    assert rec["msg"] == "hello"
    assert rec["level"] == "info"
    assert rec["event"] == "login"
    attributes = rec.get("attributes")
    assert isinstance(attributes, dict)
    assert attributes["safe"] == "ok"
    assert attributes["password"] == "[REDACTED]"
    assert attributes["token"] == "[REDACTED]"
    assert attributes["nested"]["Authorization"] == "[REDACTED]"


def test_json_formatter_adds_session_user_and_task_fields() -> None:
    fmt = JsonLogFormatter()
    set_session_context("user-2")
    payload = json.loads(fmt.format(_record("task add", event="task_add", task_id="t1")))
    assert payload["user_id"] == "user-2"
    assert payload["task_id"] == "t1"
    assert payload["event"] == "task_add"

    clear_session_context()
    assert get_session_context() is None
    assert "user_id" not in json.loads(fmt.format(_record("after logout")))


def test_json_formatter_includes_exception_details() -> None:
    fmt = JsonLogFormatter()
    try:
        raise ValueError("boom")
    except ValueError:
        record = logging.LogRecord(
            "taskdesk.test", logging.ERROR, __file__, 1, "failed", None, sys.exc_info()
        )
    payload = json.loads(fmt.format(record))
    assert payload["err_type"] == "ValueError"
    assert payload["err"] == "boom"
    assert "Traceback" in payload["stack"]


def test_console_formatter_is_single_line() -> None:
    line = ConsoleLogFormatter().format(
        _record("task update", event="task_update", task_id="abcdefghijkl", user_id="user-1")
    )
    assert "\n" not in line
    assert "task_update" in line
    assert "task=abcdefgh" in line
    assert "user=user-1" in line
    assert line.endswith("- task update")


def test_log_format_env_selects_console(monkeypatch: pytest.MonkeyPatch, capsys: Any) -> None:
    monkeypatch.setenv("LOG_FORMAT", "console")
    logger = get_json_logger("obs-test-console")
    logger.info("plain", extra={"event": "store_ready"})
    out = capsys.readouterr().out.strip()
    assert "store_ready" in out
    with pytest.raises(json.JSONDecodeError):
        json.loads(out)


def test_module_levels_override_base_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setenv("LOG_MODULE_LEVELS", "obs-levels.store=DEBUG, bogus ,=INFO")
    assert get_json_logger("obs-levels.store.team").level == logging.DEBUG
    assert get_json_logger("obs-levels.other").level == logging.WARNING


def test_metrics_counters_increment_by_label_set() -> None:
    metrics = Metrics()
    metrics.increment("task_ops", {"op": "add", "store": "local"}, 2)
    metrics.increment("task_ops", {"store": "local", "op": "add"})
    metrics.increment("task_errors", {"op": "update", "store": "team"})

    assert metrics.get("task_ops", {"op": "add", "store": "local"}) == 3
    assert metrics.get("task_ops", {"op": "delete", "store": "local"}) == 0
    assert metrics.get("task_errors", {"op": "update", "store": "team"}) == 1
    assert metrics.get("task_errors") == 0
