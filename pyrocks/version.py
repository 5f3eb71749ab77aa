"""Package version."""

VERSION = "3.2.0"
