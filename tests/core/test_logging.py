from __future__ import annotations

import json
import logging
import sys
from types import ModuleType

import pytest

from breaddie.core import logging as logging_module


@pytest.fixture()
def fresh_logging_module(monkeypatch: pytest.MonkeyPatch) -> ModuleType:
    root_logger = logging.getLogger()
    original_handlers = root_logger.handlers[:]
    original_level = root_logger.level

    monkeypatch.setattr(logging_module, "_LOGGING_CONFIGURED", False)

    yield logging_module

    root_logger.handlers = original_handlers
    root_logger.setLevel(original_level)
    logging_module._LOGGING_CONFIGURED = False


def _record(extra: dict[str, object] | None = None, exc_info: object = None) -> logging.LogRecord:
    return logging.getLogger("breaddie.test").makeRecord(
        name="breaddie.test",
        level=logging.INFO,
        fn="test_logging.py",
        lno=1,
        msg="story %s",
        args=("ready",),
        exc_info=exc_info,  # type: ignore[arg-type]
        extra=extra,
    )


def test_configure_logging_installs_json_formatter(fresh_logging_module: ModuleType) -> None:
    fresh_logging_module.configure_logging("debug")

    root_logger = logging.getLogger()
    assert root_logger.level == logging.DEBUG
    assert any(
        isinstance(handler.formatter, logging_module.JsonLogFormatter)
        for handler in root_logger.handlers
    )


def test_configure_logging_is_idempotent(fresh_logging_module: ModuleType) -> None:
    fresh_logging_module.configure_logging("info")
    root_logger = logging.getLogger()
    first_handlers = list(root_logger.handlers)

    fresh_logging_module.configure_logging("warning")

    assert list(root_logger.handlers) == first_handlers
    assert root_logger.level == logging.INFO


def test_configure_logging_falls_back_to_info_for_unknown_level(fresh_logging_module: ModuleType) -> None:
    fresh_logging_module.configure_logging("chatty")

    assert logging.getLogger().level == logging.INFO


def test_json_formatter_enriches_request_context() -> None:
    token = logging_module.bind_request_id("req-123")
    try:
        formatted = logging_module.JsonLogFormatter().format(
            _record({"story_session_id": "abc", "word_count": 3, "fields": ["bio", "name"]})
        )
    finally:
        logging_module.reset_request_id(token)

    payload = json.loads(formatted)
    assert payload["message"] == "story ready"
    assert payload["logger"] == "breaddie.test"
    assert payload["request_id"] == "req-123"
    assert payload["story_session_id"] == "abc"
    assert payload["word_count"] == 3
    assert payload["fields"] == ["bio", "name"]


def test_json_formatter_omits_request_id_outside_request() -> None:
    payload = json.loads(logging_module.JsonLogFormatter().format(_record()))

    assert "request_id" not in payload
    assert logging_module.get_request_id() is None


def test_json_formatter_stringifies_unserializable_extras() -> None:
    payload = json.loads(logging_module.JsonLogFormatter().format(_record({"when": object(), "skip": None})))

    assert isinstance(payload["when"], str)
    assert "skip" not in payload


def test_json_formatter_flattens_exception_traceback() -> None:
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = _record(exc_info=sys.exc_info())

    payload = json.loads(logging_module.JsonLogFormatter().format(record))

    assert "RuntimeError: boom" in payload["exc_info"]
    assert "\n" not in payload["exc_info"]
