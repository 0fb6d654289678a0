from tracekit.submission.models import SpanRecord, TransactionRecord
from tracekit.submission.sinks import (
    FileTransactionSink,
    InMemoryTransactionSink,
    StructlogTransactionSink,
    TransactionSink,
)

__all__ = [
    "FileTransactionSink",
    "InMemoryTransactionSink",
    "SpanRecord",
    "StructlogTransactionSink",
    "TransactionRecord",
    "TransactionSink",
]
