"""Finished-transaction data models handed to sinks."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from tracekit.core.constants import SpanStatus
from tracekit.core.ids import new_event_id


class SpanRecord(BaseModel):
    """Snapshot of a finished span."""

    trace_id: str
    span_id: str
    parent_span_id: str | None = None
    op: str
    description: str | None = None
    status: SpanStatus | None = None
    start_timestamp: datetime
    timestamp: datetime | None = None
    """End time of the span."""
    tags: dict[str, str] = Field(default_factory=dict)
    data: dict[str, Any] = Field(default_factory=dict)

    @property
    def duration_ms(self) -> int | None:
        if self.timestamp is None:
            return None
        return int((self.timestamp - self.start_timestamp).total_seconds() * 1000)


class TransactionRecord(BaseModel):
    """A finished transaction with its span tree flattened.

    ``trace`` describes the root span; ``spans`` holds every child span
    owned by the transaction, ordered by start time. The root's tags and
    data travel as ``tags`` and ``extra``.
    """

    event_id: str = Field(default_factory=new_event_id)
    name: str
    sampled: bool | None = None
    trace: SpanRecord
    tags: dict[str, str] = Field(default_factory=dict)
    extra: dict[str, Any] = Field(default_factory=dict)
    spans: list[SpanRecord] = Field(default_factory=list)

    @property
    def status(self) -> SpanStatus | None:
        return self.trace.status

    @property
    def duration_ms(self) -> int | None:
        return self.trace.duration_ms
