from __future__ import annotations

from typing import Any


class TraceKitError(Exception):
    """Base exception for all tracekit errors.

    The span/tracer core never raises; these errors belong to the surfaces
    around it (configuration loading, incoming header parsing, sinks).

    Attributes:
        code: Optional machine-readable error code (e.g. ``"BAD_HEADER"``).
        details: Arbitrary key/value context about the error.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}


class ConfigurationError(TraceKitError): ...


class TraceHeaderError(TraceKitError): ...


class SubmissionError(TraceKitError):
    """A sink failed to accept a finished transaction.

    Raised by sink implementations; the hub logs it and carries on.
    """
