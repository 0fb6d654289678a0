"""Tests for utils/logging.py -- configure_logging, trace binding and get_logger."""
from __future__ import annotations

import io
import json
import logging

import structlog

from tracekit.core.config import TracingOptions
from tracekit.utils.logging import (
    bind_trace,
    configure_from_options,
    configure_logging,
    get_logger,
    unbind_trace,
)


def teardown_function() -> None:
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


def test_configure_logging_sets_root_level_debug() -> None:
    configure_logging("DEBUG", json=False)
    assert logging.getLogger().level == logging.DEBUG


def test_configure_logging_sets_root_level_warning() -> None:
    configure_logging("WARNING", json=True)
    assert logging.getLogger().level == logging.WARNING


def test_configure_logging_sets_single_handler() -> None:
    configure_logging("INFO", json=True)
    configure_logging("INFO", json=True)
    assert len(logging.getLogger().handlers) == 1


def test_configure_logging_invalid_level_falls_back_to_info() -> None:
    configure_logging("NOTAREAL_LEVEL", json=False)
    assert logging.getLogger().level == logging.INFO


def test_configure_from_options() -> None:
    configure_from_options(TracingOptions(log_level="ERROR"))
    assert logging.getLogger().level == logging.ERROR


def test_json_output_carries_bound_trace() -> None:
    stream = io.StringIO()
    configure_logging("INFO", json=True, stream=stream)
    bind_trace("a" * 32, "b" * 16)

    get_logger("tracekit.test").info("span_finished", op="db")

    entry = json.loads(stream.getvalue().strip().splitlines()[-1])
    assert entry["event"] == "span_finished"
    assert entry["op"] == "db"
    assert entry["trace_id"] == "a" * 32
    assert entry["span_id"] == "b" * 16


def test_unbind_trace() -> None:
    structlog.contextvars.clear_contextvars()
    bind_trace("a" * 32)
    assert structlog.contextvars.get_contextvars() == {"trace_id": "a" * 32}
    unbind_trace()
    assert structlog.contextvars.get_contextvars() == {}


def test_get_logger_returns_logger() -> None:
    logger = get_logger("test.module")
    assert logger is not None
    assert hasattr(logger, "info")
