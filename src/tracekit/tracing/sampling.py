"""Sampling decisions for new transactions."""

from __future__ import annotations

import random
from typing import Any, Callable

import structlog
from pydantic import BaseModel, Field

from tracekit.tracing.context import TransactionContext

logger = structlog.get_logger(__name__)


class SamplingContext(BaseModel):
    """What a custom sampler gets to look at."""

    transaction_context: TransactionContext
    custom_sampling_context: dict[str, Any] = Field(default_factory=dict)


TracesSampler = Callable[[SamplingContext], float | bool | None]
"""Returns a sample rate, a fixed decision, or ``None`` to defer to the defaults."""


def sample_transaction(
    context: TransactionContext,
    *,
    traces_sampler: TracesSampler | None = None,
    traces_sample_rate: float | None = None,
    custom_sampling_context: dict[str, Any] | None = None,
) -> bool:
    """Decide whether the transaction described by *context* is sampled.

    Precedence: an explicit ``context.sampled``, then *traces_sampler*, then
    the upstream decision carried in ``context.parent_sampled``, then
    *traces_sample_rate*. With none of these the transaction is not sampled.
    """
    if context.sampled is not None:
        return context.sampled

    if traces_sampler is not None:
        try:
            result = traces_sampler(
                SamplingContext(
                    transaction_context=context,
                    custom_sampling_context=custom_sampling_context or {},
                )
            )
        except Exception:
            logger.warning("traces_sampler_error", name=context.name, exc_info=True)
            result = None
        if result is not None:
            return _roll(result)

    if context.parent_sampled is not None:
        return context.parent_sampled

    if traces_sample_rate is not None:
        return _roll(traces_sample_rate)

    return False


def _roll(rate: float | bool) -> bool:
    if isinstance(rate, bool):
        return rate
    return rate > 0 and random.random() < rate
