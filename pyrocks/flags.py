"""Command line tokens: variable assignments, flags and positional arguments."""

from __future__ import annotations

import re

from .constants import DEPS_MODES
from .models import PyrocksError

__all__ = [
    "SUPPORTED_FLAGS",
    "Flags",
    "check_deps_mode_flag",
    "extract_variables",
    "parse_flags",
]

Flags = dict[str, str | bool]

# Flag name -> True when the flag takes a value
SUPPORTED_FLAGS: dict[str, bool] = {
    "branch": True,
    "deps-mode": True,
    "dev": False,
    "from": True,
    "help": False,
    "local": False,
    "nodeps": False,
    "only-from": True,
    "only-server": True,
    "only-sources": True,
    "only-sources-from": True,
    "pack-binary-rock": False,
    "server": True,
    "timeout": True,
    "to": True,
    "tree": True,
    "verbose": False,
    "version": False,
}

SHORT_FLAGS = {"-h": "help"}

# Looks like an assignment: doesn't start with "-" and has a "=" after the first char
_ASSIGNMENT_CANDIDATE = re.compile(r"^[^-][^=]*=")
_ASSIGNMENT = re.compile(r"^([A-Z_][A-Z0-9_]*)=(.+)$", re.DOTALL)


def extract_variables(args: list[str]) -> tuple[list[str], dict[str, str]]:
    """Remove `NAME=value` assignments from `args`.

    Args are scanned back to front; the remaining ones keep their order.

    Returns:
        Tuple of (remaining_args, variables)

    Raises:
        PyrocksError: On a malformed assignment such as `1BAD=x` or `FOO=`
    """
    remaining = list(args)
    variables: dict[str, str] = {}
    for index in range(len(remaining) - 1, -1, -1):
        arg = remaining[index]
        if not _ASSIGNMENT_CANDIDATE.match(arg):
            continue
        match = _ASSIGNMENT.match(arg)
        if not match:
            raise PyrocksError(f"Invalid assignment: {arg}")
        variables[match.group(1)] = match.group(2)
        del remaining[index]
    return remaining, variables


def parse_flags(args: list[str], supported: dict[str, bool] | None = None) -> tuple[Flags, list[str]]:
    """Split `args` into flags and positional arguments.

    Accepts `--name`, `--name=value` and, for flags taking a value,
    `--name value`. A lone `--` ends flag parsing.

    Returns:
        Tuple of (flags, positionals)

    Raises:
        PyrocksError: On unknown flags or missing values
    """
    supported = SUPPORTED_FLAGS if supported is None else supported
    flags: Flags = {}
    positionals: list[str] = []
    tokens = iter(args)
    for arg in tokens:
        if arg == "--":
            positionals.extend(tokens)
            break
        if arg in SHORT_FLAGS:
            flags[SHORT_FLAGS[arg]] = True
            continue
        if not arg.startswith("--"):
            positionals.append(arg)
            continue

        name, sep, value = arg[2:].partition("=")
        if name not in supported:
            raise PyrocksError(f"Invalid argument: unknown flag --{name}. See --help.")
        if not supported[name]:
            if sep:
                raise PyrocksError(f"Invalid argument: flag --{name} does not take a value. See --help.")
            flags[name] = True
            continue
        if not sep:
            value = next(tokens, "")
            if value.startswith("--"):
                value = ""
        if not value:
            raise PyrocksError(f"Invalid argument: parameter to flag --{name} was not given. See --help.")
        flags[name] = value
    return flags, positionals


def check_deps_mode_flag(mode: str | bool) -> bool:
    """Tell whether `mode` is a recognized --deps-mode value."""
    return mode in DEPS_MODES
