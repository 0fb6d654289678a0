"""Tests for core/exceptions.py."""
from __future__ import annotations

import pytest

from tracekit.core.exceptions import (
    ConfigurationError,
    SubmissionError,
    TraceHeaderError,
    TraceKitError,
)


@pytest.mark.parametrize("cls", [ConfigurationError, TraceHeaderError, SubmissionError])
def test_subclasses_share_base(cls: type[TraceKitError]) -> None:
    err = cls("boom", code="X", details={"a": 1})
    assert isinstance(err, TraceKitError)
    assert str(err) == "boom"
    assert err.code == "X"
    assert err.details == {"a": 1}


def test_defaults() -> None:
    err = TraceKitError("plain")
    assert err.code is None
    assert err.details == {}
