"""Pluggable transaction sinks: in-memory, file (JSONL), and structlog."""

from __future__ import annotations

import asyncio
import json
from abc import ABC, abstractmethod
from collections import deque
from pathlib import Path
from typing import Any

import structlog

from tracekit.core.exceptions import SubmissionError
from tracekit.submission.models import TransactionRecord


class TransactionSink(ABC):
    """Abstract base for consumers of finished transactions.

    Subclass this to hand transactions to a transport (an HTTP envelope
    client, a message queue, a collector agent).
    """

    @abstractmethod
    async def submit(self, record: TransactionRecord) -> None:
        """Accept a single finished transaction."""

    async def close(self) -> None:
        """Release resources held by the sink."""


class InMemoryTransactionSink(TransactionSink):
    """Circular-buffer sink backed by :class:`collections.deque`.

    Args:
        max_entries: Maximum number of transactions to retain (default 1 000).
    """

    def __init__(self, max_entries: int = 1000) -> None:
        self._records: deque[TransactionRecord] = deque(maxlen=max_entries)

    async def submit(self, record: TransactionRecord) -> None:
        self._records.append(record)

    @property
    def records(self) -> list[TransactionRecord]:
        """Return all stored transactions (oldest first)."""
        return list(self._records)

    def find(self, name: str | None = None, trace_id: str | None = None) -> list[TransactionRecord]:
        """Return stored transactions matching *name* and/or *trace_id*."""
        return [
            r
            for r in self._records
            if (name is None or r.name == name)
            and (trace_id is None or r.trace.trace_id == trace_id)
        ]

    def clear(self) -> None:
        self._records.clear()


class FileTransactionSink(TransactionSink):
    """Append-only JSONL file sink, one transaction per line.

    Uses :func:`asyncio.to_thread` so file I/O does not block the event
    loop.

    Args:
        path: Filesystem path of the JSONL file.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def _serialize(self, record: TransactionRecord) -> str:
        data: dict[str, Any] = record.model_dump(mode="json")
        return json.dumps(data, default=str, sort_keys=True)

    def _write_sync(self, line: str) -> None:
        with self._path.open("a", encoding="utf-8") as fh:
            fh.write(line + "\n")

    async def submit(self, record: TransactionRecord) -> None:
        """Append *record* as one JSON line.

        Raises:
            SubmissionError: If the file cannot be written.
        """
        line = self._serialize(record)
        try:
            await asyncio.to_thread(self._write_sync, line)
        except OSError as exc:
            raise SubmissionError(
                f"Could not write transaction to {self._path}",
                code="WRITE_FAILED",
                details={"path": str(self._path), "event_id": record.event_id},
            ) from exc

    async def read(self) -> list[TransactionRecord]:
        """Load every transaction written so far."""
        if not self._path.exists():
            return []

        def _read() -> list[TransactionRecord]:
            results: list[TransactionRecord] = []
            with self._path.open("r", encoding="utf-8") as fh:
                for raw_line in fh:
                    raw_line = raw_line.strip()
                    if raw_line:
                        results.append(TransactionRecord.model_validate_json(raw_line))
            return results

        return await asyncio.to_thread(_read)


class StructlogTransactionSink(TransactionSink):
    """Sink that emits a summary of each transaction via :mod:`structlog`."""

    def __init__(self, log_level: str = "info") -> None:
        self._log_level = log_level
        self._logger = structlog.get_logger("tracekit.transactions")

    async def submit(self, record: TransactionRecord) -> None:
        log_fn = getattr(self._logger, self._log_level, self._logger.info)
        log_fn(
            "transaction",
            event_id=record.event_id,
            name=record.name,
            trace_id=record.trace.trace_id,
            op=record.trace.op,
            status=str(record.status),
            duration_ms=record.duration_ms,
            spans=len(record.spans),
        )
