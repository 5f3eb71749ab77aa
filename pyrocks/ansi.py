"""Terminal colouring for log records and user-facing error messages.

Colours are only emitted when the target stream is a TTY, unless overridden
by the NO_COLOR / FORCE_COLOR environment variables.
"""

import os
import sys
from typing import TextIO

__all__ = [
    "BOLD",
    "DIM",
    "RED",
    "RESET",
    "YELLOW",
    "LogStyles",
    "colorize",
    "make_style",
    "should_colorize",
]

_ESC = "\x1b["

RESET = f"{_ESC}0m"

BOLD = "1"
DIM = "2"

RED = "31"
YELLOW = "33"


def should_colorize(stream: TextIO | None = None) -> bool:
    """Tell whether ANSI sequences should be written to `stream` (stderr by default)."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("FORCE_COLOR"):
        return True
    if stream is None:
        stream = sys.stderr
    return hasattr(stream, "isatty") and stream.isatty()


def make_style(*codes: str) -> tuple[str, str]:
    """Return the (prefix, suffix) pair wrapping text in the given ANSI codes."""
    if not codes:
        return ("", RESET)
    return (f"{_ESC}{';'.join(codes)}m", RESET)


def colorize(text: str, *codes: str, stream: TextIO | None = None) -> str:
    """Wrap `text` in ANSI codes when `stream` supports it.

    Args:
        text: The text to colorize.
        *codes: ANSI codes to apply (e.g., RED, BOLD).
        stream: Destination stream used for the TTY check.
    """
    if not codes or not should_colorize(stream):
        return text
    prefix, suffix = make_style(*codes)
    return f"{prefix}{text}{suffix}"


class LogStyles:
    """Styles per log level."""

    WARNING = (YELLOW, DIM)
    ERROR = (RED, DIM)
    CRITICAL = (RED, BOLD)
