from __future__ import annotations

import os
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError

from tracekit.core.exceptions import ConfigurationError

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class TracingOptions(BaseModel):
    enabled: bool = True
    traces_sample_rate: float | None = Field(default=None, ge=0.0, le=1.0)
    """Probability that a new trace is sampled. ``None`` disables rate-based sampling."""
    wait_for_children: bool = False
    """Default for transactions: defer completion until every child has finished."""
    auto_finish_after: float | None = Field(default=None, gt=0)
    """Default idle timeout in seconds after which a transaction finishes itself."""
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @classmethod
    def from_env(cls) -> TracingOptions:
        """Create :class:`TracingOptions` from ``TRACEKIT_*`` environment variables.

        Reads the following env vars (all optional):

        * ``TRACEKIT_ENABLED`` → ``enabled`` (``1``/``0``, ``true``/``false``, ...)
        * ``TRACEKIT_TRACES_SAMPLE_RATE`` → ``traces_sample_rate`` (float, 0–1)
        * ``TRACEKIT_WAIT_FOR_CHILDREN`` → ``wait_for_children``
        * ``TRACEKIT_AUTO_FINISH_AFTER`` → ``auto_finish_after`` (float seconds)
        * ``TRACEKIT_LOG_LEVEL`` → ``log_level``

        Any variable that is not set or is empty is left at its default value.

        Raises:
            ConfigurationError: If a numeric or boolean variable cannot be parsed,
                or a parsed value is out of range.
        """
        kwargs: dict[str, Any] = {}

        enabled = os.environ.get("TRACEKIT_ENABLED")
        if enabled:
            kwargs["enabled"] = _parse_bool("TRACEKIT_ENABLED", enabled)

        sample_rate = os.environ.get("TRACEKIT_TRACES_SAMPLE_RATE")
        if sample_rate:
            kwargs["traces_sample_rate"] = _parse_float(
                "TRACEKIT_TRACES_SAMPLE_RATE", sample_rate
            )

        wait = os.environ.get("TRACEKIT_WAIT_FOR_CHILDREN")
        if wait:
            kwargs["wait_for_children"] = _parse_bool("TRACEKIT_WAIT_FOR_CHILDREN", wait)

        auto_finish = os.environ.get("TRACEKIT_AUTO_FINISH_AFTER")
        if auto_finish:
            kwargs["auto_finish_after"] = _parse_float(
                "TRACEKIT_AUTO_FINISH_AFTER", auto_finish
            )

        log_level = os.environ.get("TRACEKIT_LOG_LEVEL")
        if log_level:
            kwargs["log_level"] = log_level.upper()

        try:
            return cls(**kwargs)
        except ValidationError as exc:
            fields = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
            raise ConfigurationError(
                f"Invalid tracing configuration in environment: {', '.join(fields)}",
                code="INVALID_CONFIG",
                details={"fields": fields},
            ) from exc


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(
        f"{name} must be a boolean, got {raw!r}",
        code="BAD_ENV_VALUE",
        details={"variable": name},
    )


def _parse_float(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(
            f"{name} must be a number, got {raw!r}",
            code="BAD_ENV_VALUE",
            details={"variable": name},
        ) from exc
