"""Hub -- entry point that starts transactions and ships finished ones."""

from __future__ import annotations

from contextvars import ContextVar
from typing import Any

import structlog

from tracekit.core.config import TracingOptions
from tracekit.core.exceptions import TraceHeaderError
from tracekit.submission.models import TransactionRecord
from tracekit.submission.sinks import TransactionSink
from tracekit.tracing.context import TraceHeader, TransactionContext
from tracekit.tracing.sampling import TracesSampler, sample_transaction
from tracekit.tracing.span import NOOP_SPAN, BaseSpan
from tracekit.tracing.tracer import Tracer
from tracekit.utils.logging import bind_trace, unbind_trace

logger = structlog.get_logger(__name__)

_scope_span: ContextVar[BaseSpan | None] = ContextVar("tracekit_scope_span", default=None)


class Hub(TransactionSink):
    """Starts transactions and fans finished ones out to sinks.

    The hub is the sink of every tracer it creates: unsampled transactions
    are dropped here, sampled ones are written to each registered sink.
    Sink failures are logged but never propagated to the caller.

    Example::

        hub = Hub(TracingOptions(traces_sample_rate=1.0))
        hub.add_sink(StructlogTransactionSink())
        transaction = hub.start_transaction("checkout", "http.server")
        span = transaction.start_child("db.query")
        await span.finish()
        await transaction.finish()

    Args:
        options: Tracing configuration. Defaults to :class:`TracingOptions`
            with no sample rate, which leaves tracing disabled unless
            *traces_sampler* is given.
        sinks: Initial sinks.
        traces_sampler: Per-transaction sampling callback, consulted before
            the parent decision and the sample rate.
    """

    def __init__(
        self,
        options: TracingOptions | None = None,
        sinks: list[TransactionSink] | None = None,
        traces_sampler: TracesSampler | None = None,
    ) -> None:
        self._options = options or TracingOptions()
        self._sinks: list[TransactionSink] = list(sinks) if sinks else []
        self._traces_sampler = traces_sampler

    @property
    def options(self) -> TracingOptions:
        return self._options

    @property
    def tracing_enabled(self) -> bool:
        return self._options.enabled and (
            self._options.traces_sample_rate is not None or self._traces_sampler is not None
        )

    def add_sink(self, sink: TransactionSink) -> Hub:
        """Register a new sink.  Returns ``self`` for chaining."""
        self._sinks.append(sink)
        return self

    def start_transaction(
        self,
        name: str,
        operation: str,
        *,
        description: str | None = None,
        sampled: bool | None = None,
        trace_header: TraceHeader | str | None = None,
        bind_to_scope: bool = False,
        wait_for_children: bool | None = None,
        auto_finish_after: float | None = None,
        custom_sampling_context: dict[str, Any] | None = None,
    ) -> BaseSpan:
        """Start a new transaction, or return the no-op span if tracing is off.

        Args:
            name: Transaction name (e.g. the route or screen).
            operation: Operation of the root span (e.g. ``"http.server"``).
            description: Optional longer description of the root span.
            sampled: Force the sampling decision.
            trace_header: Incoming propagation header to continue. A
                malformed header is logged and a fresh trace is started.
            bind_to_scope: Make the transaction the current span for
                :meth:`get_span` in this context and stamp its ids on log
                entries. The binding is released when the transaction
                completes in this context; a transaction completed from
                another task or thread needs :meth:`clear_span`.
            wait_for_children: Overrides ``options.wait_for_children``.
            auto_finish_after: Overrides ``options.auto_finish_after``.
            custom_sampling_context: Extra data passed to the sampler.
        """
        if not self.tracing_enabled:
            return NOOP_SPAN

        context = self._transaction_context(name, operation, description, trace_header)
        if sampled is not None:
            context = context.model_copy(update={"sampled": sampled})
        decision = sample_transaction(
            context,
            traces_sampler=self._traces_sampler,
            traces_sample_rate=self._options.traces_sample_rate,
            custom_sampling_context=custom_sampling_context,
        )
        context = context.model_copy(update={"sampled": decision})

        tracer = Tracer(
            context,
            self,
            wait_for_children=(
                self._options.wait_for_children
                if wait_for_children is None
                else wait_for_children
            ),
            auto_finish_after=(
                self._options.auto_finish_after
                if auto_finish_after is None
                else auto_finish_after
            ),
        )
        if bind_to_scope:
            _scope_span.set(tracer)
            bind_trace(context.trace_id, context.span_id)
        logger.debug(
            "transaction_started",
            name=name,
            op=operation,
            trace_id=context.trace_id,
            sampled=decision,
        )
        return tracer

    def _transaction_context(
        self,
        name: str,
        operation: str,
        description: str | None,
        trace_header: TraceHeader | str | None,
    ) -> TransactionContext:
        if trace_header is not None:
            try:
                return TransactionContext.from_trace_header(
                    name, operation, trace_header, description=description
                )
            except TraceHeaderError as exc:
                logger.warning("invalid_trace_header", name=name, header=exc.details.get("value"))
        return TransactionContext(name=name, operation=operation, description=description)

    def get_span(self) -> BaseSpan | None:
        """Return the span bound to the current context, if it is still running."""
        span = _scope_span.get()
        if span is None or span.finished:
            return None
        return span

    def clear_span(self) -> None:
        _scope_span.set(None)
        unbind_trace()

    def _release_scope(self, record: TransactionRecord) -> None:
        span = _scope_span.get()
        if span is not None and span.span_id == record.trace.span_id:
            self.clear_span()

    async def submit(self, record: TransactionRecord) -> None:
        """Dispatch a finished transaction to all registered sinks.

        If the transaction is the one bound to the current context, the
        binding and its log context are released first.
        """
        self._release_scope(record)
        if not record.sampled:
            logger.debug(
                "transaction_dropped",
                reason="not_sampled",
                name=record.name,
                trace_id=record.trace.trace_id,
            )
            return
        for sink in self._sinks:
            try:
                await sink.submit(record)
            except Exception:
                logger.warning(
                    "transaction_sink_error",
                    sink=type(sink).__name__,
                    event_id=record.event_id,
                    exc_info=True,
                )

    async def close(self) -> None:
        """Close all registered sinks."""
        for sink in self._sinks:
            try:
                await sink.close()
            except Exception:
                logger.warning(
                    "transaction_sink_close_error",
                    sink=type(sink).__name__,
                    exc_info=True,
                )
