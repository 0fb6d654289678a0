from __future__ import annotations

from enum import StrEnum

TRACE_HEADER_NAME = "sentry-trace"
"""HTTP header name carrying the trace propagation value."""


class SpanStatus(StrEnum):
    """Outcome of a finished span.

    Values follow the canonical status codes used by distributed-tracing
    backends, rendered in snake_case.
    """

    OK = "ok"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"
    UNKNOWN_ERROR = "unknown_error"
    INVALID_ARGUMENT = "invalid_argument"
    DEADLINE_EXCEEDED = "deadline_exceeded"
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    PERMISSION_DENIED = "permission_denied"
    RESOURCE_EXHAUSTED = "resource_exhausted"
    FAILED_PRECONDITION = "failed_precondition"
    ABORTED = "aborted"
    OUT_OF_RANGE = "out_of_range"
    UNIMPLEMENTED = "unimplemented"
    INTERNAL_ERROR = "internal_error"
    UNAVAILABLE = "unavailable"
    DATA_LOSS = "data_loss"
    UNAUTHENTICATED = "unauthenticated"

    @classmethod
    def from_http_status(cls, status_code: int) -> SpanStatus:
        """Map an HTTP response status code to a :class:`SpanStatus`."""
        if status_code < 400:
            return cls.OK
        if status_code < 500:
            return _HTTP_4XX.get(status_code, cls.INVALID_ARGUMENT)
        if status_code < 600:
            return _HTTP_5XX.get(status_code, cls.INTERNAL_ERROR)
        return cls.UNKNOWN_ERROR


_HTTP_4XX: dict[int, SpanStatus] = {
    401: SpanStatus.UNAUTHENTICATED,
    403: SpanStatus.PERMISSION_DENIED,
    404: SpanStatus.NOT_FOUND,
    409: SpanStatus.ALREADY_EXISTS,
    413: SpanStatus.FAILED_PRECONDITION,
    429: SpanStatus.RESOURCE_EXHAUSTED,
}

_HTTP_5XX: dict[int, SpanStatus] = {
    501: SpanStatus.UNIMPLEMENTED,
    503: SpanStatus.UNAVAILABLE,
    504: SpanStatus.DEADLINE_EXCEEDED,
}
