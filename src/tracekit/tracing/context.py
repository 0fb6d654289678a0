"""Immutable identity and correlation data for spans and transactions."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field

from tracekit.core.exceptions import TraceHeaderError
from tracekit.core.ids import new_span_id, new_trace_id

_TRACE_HEADER_RE = re.compile(
    r"^[ \t]*(?P<trace_id>[0-9a-f]{32})-(?P<span_id>[0-9a-f]{16})(?:-(?P<sampled>[01]))?[ \t]*$"
)


class TraceHeader(BaseModel):
    """Trace propagation value sent to (or received from) other services.

    Rendered as ``{trace_id}-{span_id}-{sampled}`` where the sampled digit is
    ``1`` or ``0`` and is left out entirely when the sampling decision has not
    been made yet.
    """

    model_config = ConfigDict(frozen=True)

    trace_id: str
    span_id: str
    sampled: bool | None = None

    @property
    def value(self) -> str:
        if self.sampled is None:
            return f"{self.trace_id}-{self.span_id}"
        return f"{self.trace_id}-{self.span_id}-{1 if self.sampled else 0}"

    @classmethod
    def parse(cls, value: str) -> TraceHeader:
        """Parse an incoming header value.

        Raises:
            TraceHeaderError: If *value* is not a well-formed trace header.
        """
        match = _TRACE_HEADER_RE.match(value)
        if match is None:
            raise TraceHeaderError(
                f"Malformed trace header: {value!r}",
                code="BAD_HEADER",
                details={"value": value},
            )
        sampled = match.group("sampled")
        return cls(
            trace_id=match.group("trace_id"),
            span_id=match.group("span_id"),
            sampled=None if sampled is None else sampled == "1",
        )

    def __str__(self) -> str:
        return self.value


class SpanContext(BaseModel):
    """Identifying data of a single span. Never mutated after construction."""

    model_config = ConfigDict(frozen=True)

    operation: str
    trace_id: str = Field(default_factory=new_trace_id)
    span_id: str = Field(default_factory=new_span_id)
    parent_span_id: str | None = None
    description: str | None = None
    sampled: bool | None = None

    def child(
        self,
        operation: str,
        description: str | None = None,
        parent_span_id: str | None = None,
    ) -> SpanContext:
        """Return the context for a new span in the same trace.

        The child gets a fresh span id and inherits the trace id and sampling
        decision. Its parent is this span unless *parent_span_id* is given.
        """
        return SpanContext(
            operation=operation,
            description=description,
            trace_id=self.trace_id,
            parent_span_id=self.span_id if parent_span_id is None else parent_span_id,
            sampled=self.sampled,
        )


class TransactionContext(SpanContext):
    """Context of a transaction: a span context plus the transaction name."""

    name: str
    parent_sampled: bool | None = None
    """Sampling decision made upstream, when continuing an incoming trace."""

    @classmethod
    def from_trace_header(
        cls,
        name: str,
        operation: str,
        header: TraceHeader | str,
        description: str | None = None,
    ) -> TransactionContext:
        """Continue the trace described by an incoming *header*.

        Raises:
            TraceHeaderError: If *header* is a string that cannot be parsed.
        """
        if isinstance(header, str):
            header = TraceHeader.parse(header)
        return cls(
            name=name,
            operation=operation,
            description=description,
            trace_id=header.trace_id,
            parent_span_id=header.span_id,
            parent_sampled=header.sampled,
        )
