"""Sievedir exception hierarchy.

All sievedir-specific exceptions inherit from SievedirError.
Repository operations report expected failures as outcome codes; these
exceptions cross the boundary between the pipelines and their collaborators.
"""


class SievedirError(Exception):
    """Base exception for all sievedir errors."""

    def __init__(self, message: str = "", *, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


class ScriptParseError(SievedirError):
    """Script source failed to parse; carries the parser diagnostics."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors) or "script failed to parse")
        self.errors = list(errors)


class BytecodeError(SievedirError):
    """Error generating or emitting a compiled script."""


class ScriptIOError(SievedirError):
    """Error reading a script after it was opened."""

    def __init__(self, message: str = "", *, retryable: bool = True) -> None:
        super().__init__(message, retryable=retryable)


class ConfigError(SievedirError):
    """Invalid or missing configuration."""
