"""Tests for core/config.py -- TracingOptions and from_env()."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from tracekit.core.config import TracingOptions
from tracekit.core.exceptions import ConfigurationError

_ENV_VARS = (
    "TRACEKIT_ENABLED",
    "TRACEKIT_TRACES_SAMPLE_RATE",
    "TRACEKIT_WAIT_FOR_CHILDREN",
    "TRACEKIT_AUTO_FINISH_AFTER",
    "TRACEKIT_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    options = TracingOptions()
    assert options.enabled is True
    assert options.traces_sample_rate is None
    assert options.wait_for_children is False
    assert options.auto_finish_after is None
    assert options.log_level == "INFO"


def test_sample_rate_bounds() -> None:
    with pytest.raises(ValidationError):
        TracingOptions(traces_sample_rate=1.5)
    with pytest.raises(ValidationError):
        TracingOptions(traces_sample_rate=-0.1)


def test_auto_finish_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        TracingOptions(auto_finish_after=0)


def test_from_env_defaults_when_not_set() -> None:
    assert TracingOptions.from_env() == TracingOptions()


def test_from_env_reads_all(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRACEKIT_ENABLED", "false")
    monkeypatch.setenv("TRACEKIT_TRACES_SAMPLE_RATE", "0.25")
    monkeypatch.setenv("TRACEKIT_WAIT_FOR_CHILDREN", "yes")
    monkeypatch.setenv("TRACEKIT_AUTO_FINISH_AFTER", "30")
    monkeypatch.setenv("TRACEKIT_LOG_LEVEL", "debug")

    options = TracingOptions.from_env()
    assert options.enabled is False
    assert options.traces_sample_rate == 0.25
    assert options.wait_for_children is True
    assert options.auto_finish_after == 30.0
    assert options.log_level == "DEBUG"


def test_from_env_empty_values_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRACEKIT_TRACES_SAMPLE_RATE", "")
    monkeypatch.setenv("TRACEKIT_ENABLED", "")
    options = TracingOptions.from_env()
    assert options.traces_sample_rate is None
    assert options.enabled is True


def test_from_env_bad_number(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRACEKIT_TRACES_SAMPLE_RATE", "lots")
    with pytest.raises(ConfigurationError) as exc_info:
        TracingOptions.from_env()
    assert exc_info.value.code == "BAD_ENV_VALUE"
    assert exc_info.value.details == {"variable": "TRACEKIT_TRACES_SAMPLE_RATE"}


def test_from_env_bad_bool(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRACEKIT_WAIT_FOR_CHILDREN", "maybe")
    with pytest.raises(ConfigurationError):
        TracingOptions.from_env()


@pytest.mark.parametrize(
    ("variable", "value", "field"),
    [
        ("TRACEKIT_TRACES_SAMPLE_RATE", "2", "traces_sample_rate"),
        ("TRACEKIT_AUTO_FINISH_AFTER", "0", "auto_finish_after"),
        ("TRACEKIT_LOG_LEVEL", "verbose", "log_level"),
    ],
)
def test_from_env_out_of_range(
    monkeypatch: pytest.MonkeyPatch, variable: str, value: str, field: str
) -> None:
    monkeypatch.setenv(variable, value)
    with pytest.raises(ConfigurationError) as exc_info:
        TracingOptions.from_env()
    assert exc_info.value.code == "INVALID_CONFIG"
    assert exc_info.value.details == {"fields": [field]}
    assert isinstance(exc_info.value.__cause__, ValidationError)
