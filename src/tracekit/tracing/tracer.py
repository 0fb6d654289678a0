"""Tracer -- the root span of a transaction and owner of its children."""

from __future__ import annotations

import asyncio
import threading
from typing import TYPE_CHECKING

import structlog

from tracekit.core.constants import SpanStatus
from tracekit.submission.models import TransactionRecord
from tracekit.tracing.context import TransactionContext
from tracekit.tracing.span import NOOP_SPAN, BaseSpan, Span

if TYPE_CHECKING:
    from tracekit.submission.sinks import TransactionSink

logger = structlog.get_logger(__name__)


class Tracer(Span):
    """A transaction: a root span that owns, finalizes and ships its children.

    Children are created through :meth:`start_child` (or from a child via
    :meth:`Span.start_child`) and are never shared with another tracer. When
    the transaction completes, children the caller abandoned are closed with
    ``deadline_exceeded`` and the whole tree is handed to *sink* exactly once.

    Usage::

        tracer = Tracer(TransactionContext(name="checkout", operation="http"), sink)
        db = tracer.start_child("db.query", description="SELECT ...")
        await db.finish()
        await tracer.finish()

    Args:
        context: Identity of the transaction.
        sink: Receives the finished transaction.
        wait_for_children: When ``True``, :meth:`finish` only takes effect
            once every child has finished. Completion then happens on the
            last child's finish.
        auto_finish_after: Seconds after which the transaction finishes
            itself with ``ok``. Needs a running event loop.
    """

    def __init__(
        self,
        context: TransactionContext,
        sink: TransactionSink,
        *,
        wait_for_children: bool = False,
        auto_finish_after: float | None = None,
    ) -> None:
        super().__init__(context)
        self._name = context.name
        self._sink = sink
        self._wait_for_children = wait_for_children
        self._auto_finish_after = auto_finish_after
        self._children: list[Span] = []
        self._state_lock = threading.Lock()
        self._finish_requested = False
        self._requested_status: SpanStatus | None = None
        self._finalizing = False
        self._completed = asyncio.Event()
        self._auto_finish_handle: asyncio.TimerHandle | None = None
        self._auto_finish_task: asyncio.Task[None] | None = None

        if auto_finish_after is not None:
            self._schedule_auto_finish(auto_finish_after)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def context(self) -> TransactionContext:
        return self._context  # type: ignore[return-value]

    @property
    def name(self) -> str:
        return self._name

    @property
    def wait_for_children(self) -> bool:
        return self._wait_for_children

    @property
    def auto_finish_after(self) -> float | None:
        return self._auto_finish_after

    @property
    def finish_requested(self) -> bool:
        """``True`` while a finish call is waiting for children to complete."""
        return self._finish_requested and not self._finished

    @property
    def children(self) -> list[Span]:
        """Return a snapshot of the child spans in creation order."""
        with self._state_lock:
            return list(self._children)

    # ------------------------------------------------------------------
    # Children
    # ------------------------------------------------------------------

    def start_child(self, operation: str, description: str | None = None) -> BaseSpan:
        """Start a child span directly under the transaction."""
        return self.start_child_with_parent_span_id(
            self.span_id, operation, description=description
        )

    def start_child_with_parent_span_id(
        self,
        parent_span_id: str,
        operation: str,
        description: str | None = None,
    ) -> BaseSpan:
        """Start a child span whose parent is *parent_span_id*.

        The span is still owned by this transaction and is finalized and
        shipped with it. Returns the no-op span once the transaction is
        finishing or finished.
        """
        with self._state_lock:
            if self._finalizing or self._finished:
                return NOOP_SPAN
            context = self._context.child(
                operation, description=description, parent_span_id=parent_span_id
            )
            span = Span(context, tracer=self, on_finish=self._on_child_finished)
            self._children.append(span)
        logger.debug(
            "span_started",
            trace_id=self.trace_id,
            span_id=span.span_id,
            parent_span_id=parent_span_id,
            op=operation,
        )
        return span

    def _has_unfinished_children(self) -> bool:
        return any(not child.finished for child in self._children)

    async def _on_child_finished(self, child: Span) -> None:
        with self._state_lock:
            if self._finalizing or not self._finish_requested:
                return
            if self._has_unfinished_children():
                return
            self._finalizing = True
            status = self._requested_status
        logger.debug(
            "transaction_children_finished",
            trace_id=self.trace_id,
            name=self._name,
            last_span_id=child.span_id,
        )
        await self._finalize(status)

    # ------------------------------------------------------------------
    # Finishing
    # ------------------------------------------------------------------

    async def finish(self, status: SpanStatus | None = None) -> None:
        """Finish the transaction.

        Only the first call has an effect. With ``wait_for_children`` and
        open children, the call is remembered and completion is deferred to
        the last child's finish.
        """
        with self._state_lock:
            if self._finalizing or self._finish_requested:
                return
            if self._wait_for_children and self._has_unfinished_children():
                self._finish_requested = True
                self._requested_status = status
                logger.debug(
                    "transaction_finish_deferred",
                    trace_id=self.trace_id,
                    name=self._name,
                    pending=sum(1 for c in self._children if not c.finished),
                )
                return
            self._finalizing = True
        await self._finalize(status)

    async def _finalize(self, status: SpanStatus | None) -> None:
        self._cancel_auto_finish()

        # No child can be added once _finalizing is set.
        with self._state_lock:
            children = list(self._children)

        forced = [c for c in children if c._close(SpanStatus.DEADLINE_EXCEEDED)]
        if forced:
            logger.debug(
                "spans_deadline_exceeded",
                trace_id=self.trace_id,
                name=self._name,
                span_ids=[c.span_id for c in forced],
            )

        self._close(status)
        record = self._build_record(children)
        try:
            await self._sink.submit(record)
            logger.debug(
                "transaction_submitted",
                trace_id=self.trace_id,
                name=self._name,
                event_id=record.event_id,
                spans=len(record.spans),
            )
        except Exception:
            logger.warning(
                "transaction_submit_failed",
                trace_id=self.trace_id,
                name=self._name,
                sink=type(self._sink).__name__,
                exc_info=True,
            )
        finally:
            self._completed.set()

    def _build_record(self, children: list[Span]) -> TransactionRecord:
        root = self.to_record()
        ordered = sorted(children, key=lambda c: c.start_timestamp)
        return TransactionRecord(
            name=self._name,
            sampled=self.sampled,
            trace=root.model_copy(update={"tags": {}, "data": {}}),
            tags=root.tags,
            extra=root.data,
            spans=[c.to_record() for c in ordered],
        )

    async def wait_until_finished(self, timeout: float | None = None) -> None:
        """Wait until the transaction has been finalized and submitted.

        Raises:
            asyncio.TimeoutError: If *timeout* seconds elapse first.
        """
        await asyncio.wait_for(self._completed.wait(), timeout=timeout)

    # ------------------------------------------------------------------
    # Auto-finish timer
    # ------------------------------------------------------------------

    def _schedule_auto_finish(self, delay: float) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(
                "auto_finish_requires_event_loop",
                name=self._name,
                auto_finish_after=delay,
            )
            return
        self._auto_finish_handle = loop.call_later(delay, self._on_auto_finish)

    def _on_auto_finish(self) -> None:
        self._auto_finish_handle = None
        logger.debug("transaction_auto_finish", trace_id=self.trace_id, name=self._name)
        self._auto_finish_task = asyncio.get_running_loop().create_task(
            self.finish(SpanStatus.OK)
        )

    def _cancel_auto_finish(self) -> None:
        handle = self._auto_finish_handle
        if handle is not None:
            handle.cancel()
            self._auto_finish_handle = None

    def __repr__(self) -> str:
        return (
            f"Tracer(name={self._name!r}, trace_id={self.trace_id!r}, "
            f"children={len(self._children)}, finished={self._finished})"
        )
