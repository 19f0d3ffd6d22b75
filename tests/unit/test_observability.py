"""Unit tests for structured logging and trace context helpers."""

import json
import logging

from intent_client.observability import (
    bind_context,
    clear_context,
    configure_logging,
    get_correlation_id,
    inject_context,
    set_correlation_id,
)
from intent_client.observability.tracing import (
    CORRELATION_HEADER,
    clear_correlation_id,
    create_span,
    current_correlation_id,
)


def test_unbound_correlation_id_is_not_kept():
    clear_correlation_id()

    first = get_correlation_id()

    assert get_correlation_id() != first
    assert current_correlation_id() is None


def test_span_binds_correlation_id_for_its_duration():
    clear_correlation_id()

    with create_span("DetectIntent"):
        inside = current_correlation_id()
        assert inside is not None
        assert get_correlation_id() == inside
        assert inject_context({})[CORRELATION_HEADER] == inside

    assert current_correlation_id() is None


def test_each_span_gets_its_own_correlation_id():
    clear_correlation_id()

    with create_span("DetectIntent"):
        first = current_correlation_id()
    with create_span("DetectIntent"):
        second = current_correlation_id()

    assert first != second


def test_span_keeps_caller_correlation_id():
    set_correlation_id("cid-caller")
    try:
        with create_span("DetectIntent"):
            assert current_correlation_id() == "cid-caller"
        assert current_correlation_id() == "cid-caller"
    finally:
        clear_correlation_id()


def test_inject_context_adds_correlation_id():
    set_correlation_id("cid-123")
    try:
        carrier = inject_context({})
    finally:
        clear_correlation_id()

    assert carrier[CORRELATION_HEADER] == "cid-123"


def test_json_log_lines(restore_logging, capsys):
    configure_logging("intent-test", "INFO", json_output=True)
    set_correlation_id("cid-456")
    bind_context(session_id="s1")
    try:
        logging.getLogger("intent_client.test").info("DetectIntent matched")
    finally:
        clear_context()
        clear_correlation_id()

    line = capsys.readouterr().err.strip().splitlines()[-1]
    record = json.loads(line)
    assert record["event"] == "DetectIntent matched"
    assert record["service"] == "intent-test"
    assert record["level"] == "info"
    assert record["correlation_id"] == "cid-456"
    assert record["session_id"] == "s1"
    assert record["logger"] == "intent_client.test"


def test_log_level_filters(restore_logging, capsys):
    configure_logging("intent-test", "WARNING", json_output=True)

    logging.getLogger("intent_client.test").info("hidden")

    assert "hidden" not in capsys.readouterr().err
