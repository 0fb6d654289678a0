"""Tests for submission/ -- records and transaction sinks."""
from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from structlog.testing import capture_logs

from tracekit.core.constants import SpanStatus
from tracekit.core.exceptions import SubmissionError
from tracekit.submission.models import SpanRecord, TransactionRecord
from tracekit.submission.sinks import (
    FileTransactionSink,
    InMemoryTransactionSink,
    StructlogTransactionSink,
    TransactionSink,
)
from tracekit.tracing.context import TransactionContext
from tracekit.tracing.tracer import Tracer

_T0 = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def _record(name: str = "checkout", trace_id: str = "a" * 32) -> TransactionRecord:
    return TransactionRecord(
        name=name,
        sampled=True,
        trace=SpanRecord(
            trace_id=trace_id,
            span_id="b" * 16,
            op="http.server",
            status=SpanStatus.OK,
            start_timestamp=_T0,
            timestamp=_T0 + timedelta(milliseconds=250),
        ),
        tags={"env": "prod"},
        extra={"user": 42},
        spans=[
            SpanRecord(
                trace_id=trace_id,
                span_id="c" * 16,
                parent_span_id="b" * 16,
                op="db.query",
                status=SpanStatus.DEADLINE_EXCEEDED,
                start_timestamp=_T0,
                timestamp=_T0 + timedelta(milliseconds=100),
            )
        ],
    )


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


def test_record_defaults() -> None:
    record = _record()
    assert len(record.event_id) == 32
    assert record.status == SpanStatus.OK
    assert record.duration_ms == 250
    assert record.spans[0].duration_ms == 100


def test_span_record_open_has_no_duration() -> None:
    span = SpanRecord(trace_id="a" * 32, span_id="b" * 16, op="op", start_timestamp=_T0)
    assert span.duration_ms is None
    assert span.status is None


def test_record_json_uses_status_strings() -> None:
    data = _record().model_dump(mode="json")
    assert data["trace"]["status"] == "ok"
    assert data["spans"][0]["status"] == "deadline_exceeded"


# ---------------------------------------------------------------------------
# InMemoryTransactionSink
# ---------------------------------------------------------------------------


async def test_in_memory_sink_stores_records() -> None:
    sink = InMemoryTransactionSink()
    record = _record()
    await sink.submit(record)
    assert sink.records == [record]


async def test_in_memory_sink_circular_buffer() -> None:
    sink = InMemoryTransactionSink(max_entries=2)
    for name in ("a", "b", "c"):
        await sink.submit(_record(name=name))
    assert [r.name for r in sink.records] == ["b", "c"]


async def test_in_memory_sink_find() -> None:
    sink = InMemoryTransactionSink()
    await sink.submit(_record(name="a", trace_id="1" * 32))
    await sink.submit(_record(name="b", trace_id="2" * 32))
    await sink.submit(_record(name="a", trace_id="2" * 32))

    assert len(sink.find(name="a")) == 2
    assert len(sink.find(trace_id="2" * 32)) == 2
    assert len(sink.find(name="a", trace_id="2" * 32)) == 1

    sink.clear()
    assert sink.records == []


async def test_base_sink_close_is_noop() -> None:
    class Minimal(TransactionSink):
        async def submit(self, record: TransactionRecord) -> None:
            pass

    await Minimal().close()


# ---------------------------------------------------------------------------
# FileTransactionSink
# ---------------------------------------------------------------------------


async def test_file_sink_writes_jsonl(tmp_path: Path) -> None:
    path = tmp_path / "transactions.jsonl"
    sink = FileTransactionSink(path)
    await sink.submit(_record(name="a"))
    await sink.submit(_record(name="b"))

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first["name"] == "a"
    assert first["extra"] == {"user": 42}


async def test_file_sink_read_round_trip(tmp_path: Path) -> None:
    sink = FileTransactionSink(tmp_path / "tx.jsonl")
    record = _record()
    await sink.submit(record)

    loaded = await sink.read()
    assert len(loaded) == 1
    assert loaded[0].event_id == record.event_id
    assert loaded[0].spans[0].status == SpanStatus.DEADLINE_EXCEEDED
    assert loaded[0].trace.start_timestamp == _T0


async def test_file_sink_write_failure_raises_submission_error(tmp_path: Path) -> None:
    record = _record()
    sink = FileTransactionSink(tmp_path / "no-such-dir" / "tx.jsonl")
    with pytest.raises(SubmissionError) as exc_info:
        await sink.submit(record)
    assert exc_info.value.code == "WRITE_FAILED"
    assert exc_info.value.details["event_id"] == record.event_id
    assert isinstance(exc_info.value.__cause__, OSError)


async def test_file_sink_read_missing_file(tmp_path: Path) -> None:
    sink = FileTransactionSink(tmp_path / "missing.jsonl")
    assert await sink.read() == []


async def test_file_sink_receives_tracer_output(tmp_path: Path) -> None:
    sink = FileTransactionSink(tmp_path / "tx.jsonl")
    tracer = Tracer(TransactionContext(name="job", operation="task"), sink)
    tracer.start_child("step")
    await tracer.finish()

    loaded = await sink.read()
    assert loaded[0].name == "job"
    assert loaded[0].spans[0].status == SpanStatus.DEADLINE_EXCEEDED


# ---------------------------------------------------------------------------
# StructlogTransactionSink
# ---------------------------------------------------------------------------


async def test_structlog_sink_emits_summary() -> None:
    sink = StructlogTransactionSink()
    record = _record()
    with capture_logs() as logs:
        await sink.submit(record)

    assert len(logs) == 1
    entry = logs[0]
    assert entry["event"] == "transaction"
    assert entry["log_level"] == "info"
    assert entry["name"] == "checkout"
    assert entry["status"] == "ok"
    assert entry["spans"] == 1
    assert entry["duration_ms"] == 250


async def test_structlog_sink_custom_level() -> None:
    sink = StructlogTransactionSink(log_level="warning")
    with capture_logs() as logs:
        await sink.submit(_record())
    assert logs[0]["log_level"] == "warning"
