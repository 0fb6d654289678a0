"""Spans -- timed units of work inside a transaction.

Two variants share the :class:`BaseSpan` capability: the recording
:class:`Span` and the inert :class:`NoOpSpan`, handed out wherever tracing
is disabled or a span can no longer accept children. Call sites never need
to check which one they hold.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Awaitable, Callable

import structlog

from tracekit.core.constants import SpanStatus
from tracekit.submission.models import SpanRecord
from tracekit.tracing.context import SpanContext, TraceHeader

if TYPE_CHECKING:
    from tracekit.tracing.tracer import Tracer

logger = structlog.get_logger(__name__)

FinishCallback = Callable[["Span"], Awaitable[None]]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseSpan(ABC):
    """Operations every span variant supports."""

    @property
    @abstractmethod
    def context(self) -> SpanContext: ...

    @property
    @abstractmethod
    def span_id(self) -> str: ...

    @property
    @abstractmethod
    def trace_id(self) -> str: ...

    @property
    @abstractmethod
    def sampled(self) -> bool | None: ...

    @property
    @abstractmethod
    def start_timestamp(self) -> datetime: ...

    @property
    @abstractmethod
    def end_timestamp(self) -> datetime | None: ...

    @property
    @abstractmethod
    def duration_ms(self) -> int | None: ...

    @property
    @abstractmethod
    def status(self) -> SpanStatus | None: ...

    @property
    @abstractmethod
    def finished(self) -> bool: ...

    @property
    @abstractmethod
    def tags(self) -> dict[str, str]: ...

    @property
    @abstractmethod
    def data(self) -> dict[str, Any]: ...

    @abstractmethod
    async def finish(self, status: SpanStatus | None = None) -> None: ...

    @abstractmethod
    def set_status(self, status: SpanStatus) -> None: ...

    @abstractmethod
    def set_tag(self, key: str, value: str) -> None: ...

    @abstractmethod
    def remove_tag(self, key: str) -> None: ...

    @abstractmethod
    def set_data(self, key: str, value: Any) -> None: ...

    @abstractmethod
    def remove_data(self, key: str) -> None: ...

    @abstractmethod
    def start_child(self, operation: str, description: str | None = None) -> BaseSpan: ...

    def to_trace_header(self) -> TraceHeader:
        """Return the propagation header for calls made on behalf of this span."""
        ctx = self.context
        return TraceHeader(trace_id=ctx.trace_id, span_id=ctx.span_id, sampled=ctx.sampled)


class Span(BaseSpan):
    """A recording span.

    Once finished the span is frozen: tag, data and status changes are
    silently dropped so late instrumentation calls can never rewrite an
    outcome that has already been recorded.

    Args:
        context: Identity of the span.
        tracer: The transaction that owns this span. Grandchildren started
            from this span are registered with it.
        on_finish: Awaited once, right after the span finishes.
    """

    def __init__(
        self,
        context: SpanContext,
        tracer: Tracer | None = None,
        on_finish: FinishCallback | None = None,
    ) -> None:
        self._context = context
        self._tracer = tracer
        self._on_finish = on_finish
        self._lock = threading.Lock()
        self._start_timestamp = _utcnow()
        self._end_timestamp: datetime | None = None
        self._status: SpanStatus | None = None
        self._tags: dict[str, str] = {}
        self._data: dict[str, Any] = {}
        self._finished = False

    @property
    def context(self) -> SpanContext:
        return self._context

    @property
    def span_id(self) -> str:
        return self._context.span_id

    @property
    def trace_id(self) -> str:
        return self._context.trace_id

    @property
    def sampled(self) -> bool | None:
        return self._context.sampled

    @property
    def start_timestamp(self) -> datetime:
        return self._start_timestamp

    @property
    def end_timestamp(self) -> datetime | None:
        return self._end_timestamp

    @property
    def status(self) -> SpanStatus | None:
        return self._status

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def tags(self) -> dict[str, str]:
        with self._lock:
            return dict(self._tags)

    @property
    def data(self) -> dict[str, Any]:
        with self._lock:
            return dict(self._data)

    @property
    def duration_ms(self) -> int | None:
        """Return elapsed milliseconds, or ``None`` if not yet finished."""
        if self._end_timestamp is None:
            return None
        return int((self._end_timestamp - self._start_timestamp).total_seconds() * 1000)

    async def finish(self, status: SpanStatus | None = None) -> None:
        """Finish the span (only the first call takes effect).

        Without *status* the span keeps a status given through
        :meth:`set_status`, falling back to ``ok``.
        """
        if not self._close(status):
            return
        logger.debug(
            "span_finished",
            trace_id=self.trace_id,
            span_id=self.span_id,
            op=self._context.operation,
            status=str(self._status),
        )
        if self._on_finish is not None:
            await self._on_finish(self)

    def _close(self, status: SpanStatus | None) -> bool:
        """Record the end of the span. Returns ``False`` if it was already closed."""
        with self._lock:
            if self._finished:
                return False
            self._end_timestamp = _utcnow()
            if status is not None:
                self._status = status
            elif self._status is None:
                self._status = SpanStatus.OK
            self._finished = True
            return True

    def set_status(self, status: SpanStatus) -> None:
        with self._lock:
            if not self._finished:
                self._status = status

    def set_tag(self, key: str, value: str) -> None:
        with self._lock:
            if not self._finished:
                self._tags[key] = value

    def remove_tag(self, key: str) -> None:
        with self._lock:
            if not self._finished:
                self._tags.pop(key, None)

    def set_data(self, key: str, value: Any) -> None:
        with self._lock:
            if not self._finished:
                self._data[key] = value

    def remove_data(self, key: str) -> None:
        with self._lock:
            if not self._finished:
                self._data.pop(key, None)

    def start_child(self, operation: str, description: str | None = None) -> BaseSpan:
        """Start a span nested under this one, owned by the same transaction."""
        if self._finished or self._tracer is None:
            return NOOP_SPAN
        return self._tracer.start_child_with_parent_span_id(
            self.span_id, operation, description=description
        )

    def to_record(self) -> SpanRecord:
        ctx = self._context
        with self._lock:
            return SpanRecord(
                trace_id=ctx.trace_id,
                span_id=ctx.span_id,
                parent_span_id=ctx.parent_span_id,
                op=ctx.operation,
                description=ctx.description,
                status=self._status,
                start_timestamp=self._start_timestamp,
                timestamp=self._end_timestamp,
                tags=dict(self._tags),
                data=dict(self._data),
            )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(op={self._context.operation!r}, "
            f"span_id={self.span_id!r}, finished={self._finished})"
        )


class NoOpSpan(BaseSpan):
    """A span that records nothing. Every instance is interchangeable."""

    _CONTEXT = SpanContext(
        operation="",
        trace_id="0" * 32,
        span_id="0" * 16,
        sampled=False,
    )

    @property
    def context(self) -> SpanContext:
        return self._CONTEXT

    @property
    def span_id(self) -> str:
        return self._CONTEXT.span_id

    @property
    def trace_id(self) -> str:
        return self._CONTEXT.trace_id

    @property
    def sampled(self) -> bool | None:
        return False

    @property
    def start_timestamp(self) -> datetime:
        return _EPOCH

    @property
    def end_timestamp(self) -> datetime | None:
        return None

    @property
    def duration_ms(self) -> int | None:
        return None

    @property
    def status(self) -> SpanStatus | None:
        return None

    @property
    def finished(self) -> bool:
        return False

    @property
    def tags(self) -> dict[str, str]:
        return {}

    @property
    def data(self) -> dict[str, Any]:
        return {}

    async def finish(self, status: SpanStatus | None = None) -> None:
        pass

    def set_status(self, status: SpanStatus) -> None:
        pass

    def set_tag(self, key: str, value: str) -> None:
        pass

    def remove_tag(self, key: str) -> None:
        pass

    def set_data(self, key: str, value: Any) -> None:
        pass

    def remove_data(self, key: str) -> None:
        pass

    def start_child(self, operation: str, description: str | None = None) -> BaseSpan:
        return self

    # Transaction-level calls, so a disabled transaction can stand in for a Tracer.

    @property
    def name(self) -> str:
        return ""

    def start_child_with_parent_span_id(
        self,
        parent_span_id: str,
        operation: str,
        description: str | None = None,
    ) -> BaseSpan:
        return self

    async def wait_until_finished(self, timeout: float | None = None) -> None:
        pass

    def __eq__(self, other: object) -> bool:
        return isinstance(other, NoOpSpan)

    def __hash__(self) -> int:
        return hash(NoOpSpan)

    def __repr__(self) -> str:
        return "NoOpSpan()"


NOOP_SPAN = NoOpSpan()
