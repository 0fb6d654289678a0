"""tracekit -- transaction and span tracing for Python services."""

from tracekit.__version__ import __version__
from tracekit.core.config import TracingOptions
from tracekit.core.constants import TRACE_HEADER_NAME, SpanStatus
from tracekit.core.exceptions import (
    ConfigurationError,
    SubmissionError,
    TraceHeaderError,
    TraceKitError,
)
from tracekit.hub import Hub
from tracekit.submission.models import SpanRecord, TransactionRecord
from tracekit.submission.sinks import (
    FileTransactionSink,
    InMemoryTransactionSink,
    StructlogTransactionSink,
    TransactionSink,
)
from tracekit.tracing.context import SpanContext, TraceHeader, TransactionContext
from tracekit.tracing.sampling import SamplingContext
from tracekit.tracing.span import NOOP_SPAN, BaseSpan, NoOpSpan, Span
from tracekit.tracing.tracer import Tracer
from tracekit.utils.logging import configure_logging, get_logger

__all__ = [
    "__version__",
    # Core
    "Hub",
    "TracingOptions",
    "SpanStatus",
    "TRACE_HEADER_NAME",
    # Spans
    "BaseSpan",
    "Span",
    "NoOpSpan",
    "NOOP_SPAN",
    "Tracer",
    "SpanContext",
    "TransactionContext",
    "TraceHeader",
    "SamplingContext",
    # Submission
    "SpanRecord",
    "TransactionRecord",
    "TransactionSink",
    "InMemoryTransactionSink",
    "FileTransactionSink",
    "StructlogTransactionSink",
    # Errors
    "TraceKitError",
    "ConfigurationError",
    "TraceHeaderError",
    "SubmissionError",
    # Logging
    "configure_logging",
    "get_logger",
]
