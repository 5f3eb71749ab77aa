"""Filesystem service used by the dispatcher.

Gathers the few filesystem capabilities needed before a command runs:
user identity, ownership, existence and writability checks, temporary
directories and their removal.
"""

from __future__ import annotations

import getpass
import os
import shutil
import tempfile
from typing import TYPE_CHECKING

from .constants import PROGRAM_NAME
from .logging_setup import get_logger

if TYPE_CHECKING:
    import logging

__all__ = ["FileSystem"]

try:
    import pwd
except ImportError:  # Windows
    pwd = None  # type: ignore[assignment]


class FileSystem:
    """Thin wrapper over `os`, `shutil` and `tempfile`."""

    def __init__(self, platforms: list[str] | None = None, verbose: bool = False) -> None:
        self.platforms = platforms or []
        self.verbose = verbose
        self.log: logging.Logger = get_logger("fs")

    def _trace(self, action: str, *args: str) -> None:
        if self.verbose:
            self.log.debug("%s %s", action, " ".join(args))

    def current_user(self) -> str:
        """Return the name of the effective user."""
        if pwd is not None:
            return pwd.getpwuid(os.geteuid()).pw_name
        return getpass.getuser()

    def attributes(self, pathname: str, attribute: str) -> str | None:
        """Return a single attribute of `pathname`, or None if it can't be obtained.

        Only "owner" is supported.
        """
        if attribute != "owner":
            raise ValueError(f"Unsupported attribute: {attribute}")
        try:
            stat = os.stat(pathname)
        except OSError:
            return None
        if pwd is None:
            return self.current_user()
        try:
            return pwd.getpwuid(stat.st_uid).pw_name
        except KeyError:
            return str(stat.st_uid)

    def exists(self, pathname: str) -> bool:
        """Tell whether `pathname` exists."""
        return os.path.exists(pathname)

    def is_writable(self, pathname: str) -> bool:
        """Tell whether the current user can write into `pathname`."""
        return os.access(pathname, os.W_OK)

    def root_of(self, pathname: str) -> str:
        """Return the filesystem root containing `pathname`."""
        drive, _ = os.path.splitdrive(pathname)
        return f"{drive}/" if drive else "/"

    def current_dir(self) -> str | None:
        """Return the working directory, or None if it was removed."""
        try:
            return os.getcwd()
        except FileNotFoundError:
            return None

    def absolute_name(self, pathname: str, relative_to: str | None = None) -> str:
        """Return `pathname` as an absolute path (relative to the working directory by default)."""
        pathname = os.path.expanduser(pathname)
        if os.path.isabs(pathname):
            return pathname
        base = relative_to or self.current_dir() or "/"
        return os.path.join(base, pathname)

    def make_temp_dir(self, name: str) -> str:
        """Create a fresh private temporary directory and return its path."""
        pathname = tempfile.mkdtemp(prefix=f"{PROGRAM_NAME}_{name}-")
        self._trace("mkdir", pathname)
        return pathname

    def delete(self, pathname: str) -> None:
        """Remove a file or a directory tree, ignoring missing paths."""
        self._trace("rm -rf", pathname)
        if os.path.isdir(pathname) and not os.path.islink(pathname):
            shutil.rmtree(pathname, ignore_errors=True)
        elif os.path.lexists(pathname):
            os.remove(pathname)
