"""
Domain Errors

A single exception type carrying a closed set of error kinds.
Callers dispatch on ``HarnessError.kind`` rather than on subclass identity.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Closed enumeration of failure kinds."""
    VALIDATION = "validation"
    PARSE = "parse"
    EXECUTION = "execution"
    TIMEOUT = "timeout"
    UNKNOWN_TECHNIQUE = "unknown_technique"
    CONFIGURATION = "configuration"


class HarnessError(Exception):
    """Error raised anywhere in the harness, tagged with its kind."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        path: str | None = None,
        exit_code: int | None = None,
        stderr: str | None = None,
        field: str | None = None,
        value: Any = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.path = path
        self.exit_code = exit_code
        self.stderr = stderr
        self.field = field
        self.value = value

    def __str__(self) -> str:
        if self.path:
            return f"{self.message} ({self.path})"
        return self.message

    @classmethod
    def validation(cls, message: str, path: str | None = None) -> "HarnessError":
        return cls(ErrorKind.VALIDATION, message, path=path)

    @classmethod
    def parse(
        cls, message: str, field: str | None = None, value: Any = None
    ) -> "HarnessError":
        return cls(ErrorKind.PARSE, message, field=field, value=value)

    @classmethod
    def execution(
        cls, message: str, exit_code: int | None = None, stderr: str = ""
    ) -> "HarnessError":
        return cls(ErrorKind.EXECUTION, message, exit_code=exit_code, stderr=stderr)

    @classmethod
    def timeout(cls, message: str, stderr: str = "") -> "HarnessError":
        return cls(ErrorKind.TIMEOUT, message, stderr=stderr)

    @classmethod
    def unknown_technique(cls, name: str, available: list[str]) -> "HarnessError":
        return cls(
            ErrorKind.UNKNOWN_TECHNIQUE,
            f"Unknown technique: {name}. Available: {', '.join(available)}",
            value=name,
        )

    @classmethod
    def configuration(cls, message: str) -> "HarnessError":
        return cls(ErrorKind.CONFIGURATION, message)
