"""Shared data models: exit codes, errors and command results."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

__all__ = [
    "CommandResult",
    "ExitCode",
    "PyrocksError",
]


class ExitCode(IntEnum):
    """Symbolic process exit codes."""

    OK = 0
    UNSPECIFIED = 1  # Usage and configuration errors, failed commands
    PERMISSIONDENIED = 2
    CONFIGFILE = 3
    CRASH = 99


class PyrocksError(Exception):
    """A fatal condition, carrying the message shown to the user and its exit code."""

    def __init__(self, message: str, exit_code: int = ExitCode.UNSPECIFIED) -> None:
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a command handler."""

    ok: bool
    message: str = ""
    exit_code: int | None = None

    @classmethod
    def success(cls) -> CommandResult:
        """Build a successful result."""
        return cls(ok=True)

    @classmethod
    def failure(cls, message: str, exit_code: int | None = None) -> CommandResult:
        """Build a failed result.

        Args:
            message: Error message for the user
            exit_code: Exit code to use, UNSPECIFIED when omitted
        """
        return cls(ok=False, message=message, exit_code=exit_code)
