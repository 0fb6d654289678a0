"""Shared test fixtures."""
from __future__ import annotations

from collections.abc import Callable

import pytest

from tracekit.core.config import TracingOptions
from tracekit.hub import Hub
from tracekit.submission.sinks import InMemoryTransactionSink
from tracekit.tracing.context import TransactionContext
from tracekit.tracing.tracer import Tracer


@pytest.fixture
def sink() -> InMemoryTransactionSink:
    return InMemoryTransactionSink()


@pytest.fixture
def hub(sink: InMemoryTransactionSink) -> Hub:
    return Hub(TracingOptions(traces_sample_rate=1.0), sinks=[sink])


@pytest.fixture
def make_tracer(sink: InMemoryTransactionSink) -> Callable[..., Tracer]:
    """Build a tracer named ``"name"`` with operation ``"op"`` writing to *sink*."""

    def _make(
        sampled: bool | None = True,
        wait_for_children: bool = False,
        auto_finish_after: float | None = None,
    ) -> Tracer:
        context = TransactionContext(name="name", operation="op", sampled=sampled)
        return Tracer(
            context,
            sink,
            wait_for_children=wait_for_children,
            auto_finish_after=auto_finish_after,
        )

    return _make
