"""Trace and span identifier generation."""

from __future__ import annotations

import uuid


def new_trace_id() -> str:
    """Return a fresh 128-bit trace id as 32 lowercase hex characters."""
    return uuid.uuid4().hex


def new_span_id() -> str:
    """Return a fresh 64-bit span id as 16 lowercase hex characters."""
    return uuid.uuid4().hex[:16]


def new_event_id() -> str:
    return uuid.uuid4().hex
