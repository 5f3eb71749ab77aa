"""Pure path and URL helpers.

None of these functions touch the filesystem; see `pyrocks.fs` for that.
"""

from __future__ import annotations

import posixpath
import re

__all__ = [
    "dir_name",
    "join",
    "normalize",
    "split_url",
    "strip_trailing_separators",
]

_URL_PATTERN = re.compile(r"^([^:/]*)://(.*)$")


def split_url(url: str) -> tuple[str, str]:
    """Split a URL into its protocol and path parts.

    Plain paths are reported with the "file" protocol.
    Eg:
        split_url("https://luarocks.org//m") == ("https", "luarocks.org/m")
    """
    match = _URL_PATTERN.match(url)
    if match:
        protocol, pathname = match.group(1), match.group(2)
    else:
        protocol, pathname = "file", url
    pathname = re.sub(r"/{2,}", "/", pathname)
    if protocol != "file":
        pathname = pathname.rstrip("/")
    return protocol, pathname


def strip_trailing_separators(pathname: str) -> str:
    """Remove trailing "/" characters, keeping a lone root intact."""
    stripped = pathname.rstrip("/")
    if not stripped and pathname.startswith("/"):
        return "/"
    return stripped


def normalize(pathname: str) -> str:
    """Resolve `.` and `..` components, duplicated and trailing separators.

    URLs keep their protocol part untouched.
    """
    protocol, rest = split_url(pathname)
    if protocol != "file":
        return f"{protocol}://{rest}"
    if not rest:
        return rest
    return posixpath.normpath(rest)


def join(*parts: str) -> str:
    """Join path components (or a URL and path components) and normalize the result."""
    return normalize("/".join(part for part in parts if part))


def dir_name(pathname: str) -> str:
    """Return the parent directory of `pathname`, or "" if it has none."""
    return posixpath.dirname(strip_trailing_separators(pathname))
