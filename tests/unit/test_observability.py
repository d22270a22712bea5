"""Unit tests for structured logging utilities in ``observability``.

Validates the null handler, trace binding, and event construction behaviour
that hosting applications rely on when they attach their own handlers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import pytest

from lib_env_binder import Options, bind_trace_id, env_field, get_logger, parse_with_options
from lib_env_binder.observability import TRACE_ID, log_info, make_event


@dataclass
class Probe:
    value: str = env_field("VALUE", default="")


def test_null_handler_present() -> None:
    """Package logger should always include a NullHandler to avoid surprises."""

    logger = get_logger()
    assert any(isinstance(handler, logging.NullHandler) for handler in logger.handlers)


def test_trace_id_in_log(caplog: pytest.LogCaptureFixture) -> None:
    """Structured logs should include the bound trace identifier and contextual fields."""

    caplog.set_level(logging.INFO, logger="lib_env_binder")
    bind_trace_id("trace-123")
    try:
        log_info("environment_bound", source="options", path=None)
    finally:
        bind_trace_id(None)
    record = caplog.records[-1]
    assert getattr(record, "context") == {"trace_id": "trace-123", "source": "options", "path": None}


def test_bind_trace_id_clears_context() -> None:
    """Clearing the trace ID should reset the context variable to None."""

    bind_trace_id("trace-temp")
    bind_trace_id(None)
    assert TRACE_ID.get() is None


def test_make_event_merges_optional_payload() -> None:
    """make_event should merge optional metadata after the base keys."""

    assert make_event("dotenv", ".env", {"keys": 3}) == {"source": "dotenv", "path": ".env", "keys": 3}
    assert make_event("env", None) == {"source": "env", "path": None}


def test_bind_emits_environment_bound_event(caplog: pytest.LogCaptureFixture) -> None:
    """A successful bind reports the target type and mapping size."""

    caplog.set_level(logging.INFO, logger="lib_env_binder")
    parse_with_options(Probe(), Options(env={"VALUE": "x", "OTHER": "y"}))
    events = [record for record in caplog.records if record.getMessage() == "environment_bound"]
    assert events
    context = getattr(events[-1], "context")
    assert context["target"] == "Probe"
    assert context["keys"] == 2
    assert context["source"] == "options"
