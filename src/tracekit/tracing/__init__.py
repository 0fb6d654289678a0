from tracekit.tracing.context import SpanContext, TraceHeader, TransactionContext
from tracekit.tracing.sampling import SamplingContext, TracesSampler, sample_transaction
from tracekit.tracing.span import NOOP_SPAN, BaseSpan, NoOpSpan, Span
from tracekit.tracing.tracer import Tracer

__all__ = [
    "NOOP_SPAN",
    "BaseSpan",
    "NoOpSpan",
    "SamplingContext",
    "Span",
    "SpanContext",
    "TraceHeader",
    "Tracer",
    "TracesSampler",
    "TransactionContext",
    "sample_transaction",
]
