# tests/unit/infrastructure/logging/test_json_logger.py
from __future__ import annotations

import contextvars
import json
import logging
import sys

from tickerbot.infrastructure.logging.logger import (
    _JsonFormatter,
    get_interaction_id,
    get_request_id,
    set_request_context,
)


def _record(msg: str = "cache.miss", **attrs: object) -> logging.LogRecord:
    record = logging.LogRecord("tickerbot.test", logging.INFO, __file__, 1, msg, None, None)
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


def test_payload_has_stable_keys_and_extras() -> None:
    line = _JsonFormatter().format(_record(extra={"key": "tickerbot:cache:v1:stock:price:AAPL"}))
    payload = json.loads(line)

    assert payload["level"] == "INFO"
    assert payload["logger"] == "tickerbot.test"
    assert payload["message"] == "cache.miss"
    assert payload["key"] == "tickerbot:cache:v1:stock:price:AAPL"
    assert "ts" in payload


def test_context_ids_are_attached() -> None:
    def run() -> dict:
        set_request_context(request_id="req-1", interaction_id="int-2")
        assert get_request_id() == "req-1"
        assert get_interaction_id() == "int-2"
        return json.loads(_JsonFormatter().format(_record()))

    payload = contextvars.copy_context().run(run)
    assert payload["request_id"] == "req-1"
    assert payload["interaction_id"] == "int-2"


def test_partial_update_keeps_other_id() -> None:
    def run() -> tuple[str | None, str | None]:
        set_request_context(request_id="req-1", interaction_id="int-2")
        set_request_context(interaction_id="int-3")
        return get_request_id(), get_interaction_id()

    assert contextvars.copy_context().run(run) == ("req-1", "int-3")


def test_exception_type_and_message_are_included() -> None:
    try:
        raise ValueError("bad payload")
    except ValueError:
        record = _record(exc_info=sys.exc_info())
    payload = json.loads(_JsonFormatter().format(record))
    assert payload["exc_type"] == "ValueError"
    assert payload["exc_message"] == "bad payload"
