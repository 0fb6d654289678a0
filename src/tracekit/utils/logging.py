from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, TextIO, cast

import structlog

if TYPE_CHECKING:
    from tracekit.core.config import TracingOptions


def configure_logging(
    level: str = "INFO",
    json: bool = True,
    stream: TextIO | None = None,
) -> None:
    """Route tracekit's structlog events through stdlib logging.

    With ``json=True`` entries are rendered as JSON lines; otherwise the
    coloured console renderer is used. Unknown level names fall back to INFO.

    Args:
        level: Standard logging level string, e.g. "DEBUG", "INFO", "WARNING".
        json: Render log entries as JSON instead of console output.
        stream: Destination stream, ``sys.stdout`` by default.
    """
    log_level = getattr(logging, level.upper(), None)
    if not isinstance(log_level, int):
        log_level = logging.INFO
    out = stream or sys.stdout

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(out)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)


def configure_from_options(options: TracingOptions, json: bool = True) -> None:
    """Configure logging at the level carried by *options*."""
    configure_logging(options.log_level, json=json)


def bind_trace(trace_id: str, span_id: str | None = None) -> None:
    """Attach trace ids to every log entry emitted from the current context."""
    if span_id is None:
        structlog.contextvars.bind_contextvars(trace_id=trace_id)
    else:
        structlog.contextvars.bind_contextvars(trace_id=trace_id, span_id=span_id)


def unbind_trace() -> None:
    structlog.contextvars.unbind_contextvars("trace_id", "span_id")


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a named structlog logger.

    Args:
        name: Logger name, typically ``__name__`` of the calling module.
    """
    return cast(structlog.BoundLogger, structlog.get_logger(name))
