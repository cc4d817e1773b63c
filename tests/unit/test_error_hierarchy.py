"""Tests for error hierarchy."""

from sievedir.errors import (
    BytecodeError,
    ConfigError,
    ScriptIOError,
    ScriptParseError,
    SievedirError,
)


def test_hierarchy() -> None:
    assert issubclass(ScriptParseError, SievedirError)
    assert issubclass(BytecodeError, SievedirError)
    assert issubclass(ScriptIOError, SievedirError)
    assert issubclass(ConfigError, SievedirError)


def test_retryable_default() -> None:
    assert SievedirError("test").retryable is False
    assert ScriptIOError("test").retryable is True
    assert BytecodeError("test").retryable is False
    assert ConfigError("test").retryable is False


def test_parse_error_carries_diagnostics() -> None:
    err = ScriptParseError(["line 1: bad", "line 2: worse"])
    assert err.errors == ["line 1: bad", "line 2: worse"]
    assert str(err) == "line 1: bad; line 2: worse"
    assert str(ScriptParseError([])) == "script failed to parse"


def test_catch_as_sievedir_error() -> None:
    try:
        raise ScriptParseError(["line 1: bad"])
    except SievedirError as exc:
        assert exc.retryable is False
