"""Runtime configuration object.

A `RocksConfig` is built once per invocation (see `config_loader`), mutated
while the command line is resolved, then handed to the command handler.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import Any

from . import constants
from .models import ExitCode
from .paths import join, normalize

__all__ = [
    "BOOL_FALSE_STRINGS",
    "RocksConfig",
    "Tree",
    "TreeRecord",
    "coerce_to_bool",
    "default_home_tree",
    "detect_platforms",
]

BOOL_FALSE_STRINGS = frozenset({"false", "no", "off", "0", "disabled"})


def coerce_to_bool(value: Any, default: bool = False) -> bool:  # noqa: ANN401
    """Coerce a value to boolean, handling loose typing.

    Behavior:
        - None → default
        - Empty string → False
        - Explicit falsy strings ("false", "no", "off", "0", "disabled") → False
        - Any other non-empty string → True
        - Non-string values → bool(value)
    """
    if value is None:
        return default
    if isinstance(value, str):
        if not value.strip():
            return False
        return value.lower().strip() not in BOOL_FALSE_STRINGS
    return bool(value)


@dataclass
class TreeRecord:
    """A named tree from the configuration.

    Directories left to None are derived from `root`.
    """

    name: str
    root: str | None = None
    bin_dir: str | None = None
    lua_dir: str | None = None
    lib_dir: str | None = None
    rocks_dir: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TreeRecord:
        """Build a record from a `[[rocks_trees]]` table."""
        return cls(
            name=str(data.get("name", "")),
            root=data.get("root") or None,
            bin_dir=data.get("bin_dir"),
            lua_dir=data.get("lua_dir"),
            lib_dir=data.get("lib_dir"),
            rocks_dir=data.get("rocks_dir"),
        )


Tree = str | TreeRecord


def detect_platforms(platform: str | None = None) -> list[str]:
    """Return the platform identifiers for `platform` (defaults to `sys.platform`)."""
    platform = platform or sys.platform
    if platform.startswith("win"):
        return ["windows", "win32"]
    platforms = ["unix"]
    if platform.startswith("linux"):
        platforms.append("linux")
    elif platform == "darwin":
        platforms.extend(["bsd", "macosx"])
    elif "bsd" in platform:
        platforms.extend(["bsd", platform.rstrip("0123456789")])
    return platforms


def default_home_tree() -> str | None:
    """Return the user tree, or None when running as the superuser."""
    if hasattr(os, "geteuid") and os.geteuid() == 0:
        return None
    return constants.HOME_TREE


def _default_trees() -> list[Tree]:
    home = default_home_tree()
    return [constants.SYSTEM_TREE, home] if home else [constants.SYSTEM_TREE]


@dataclass
class RocksConfig:  # pylint: disable=too-many-instance-attributes
    """Settings for a single invocation."""

    program_version: str = ""
    errorcodes: dict[str, int] = field(default_factory=lambda: {code.name: int(code) for code in ExitCode})
    lua_version: str = constants.DEFAULT_LUA_VERSION
    rocks_trees: list[Tree] = field(default_factory=_default_trees)
    home_tree: str | None = field(default_factory=default_home_tree)
    local_by_default: bool = False
    rocks_servers: list[str] = field(default_factory=lambda: list(constants.DEFAULT_ROCKS_SERVERS))
    platforms: list[str] = field(default_factory=detect_platforms)
    connection_timeout: float = constants.DEFAULT_CONNECTION_TIMEOUT
    variables: dict[str, str] = field(default_factory=dict)
    local_cache: str = constants.CACHE_DIR
    branch: str | None = None
    only_sources_from: str | None = None
    flags: dict[str, str | bool] = field(default_factory=dict)

    # Filled by use_tree()
    root_dir: str = ""
    rocks_dir: str = ""
    deploy_bin_dir: str = ""
    deploy_lua_dir: str = ""
    deploy_lib_dir: str = ""

    def errorcode(self, name: str) -> int:
        """Return the numeric exit code for a symbolic name."""
        return self.errorcodes.get(name, int(ExitCode[name]))

    def is_platform(self, name: str) -> bool:
        """Tell whether the current platform is `name`."""
        return name in self.platforms

    def use_tree(self, tree: Tree) -> None:
        """Make `tree` the root for every path computed afterwards."""
        if isinstance(tree, TreeRecord):
            root = normalize(tree.root or "")
            self.root_dir = root
            self.rocks_dir = tree.rocks_dir or self._rocks_dir(root)
            self.deploy_bin_dir = tree.bin_dir or join(root, "bin")
            self.deploy_lua_dir = tree.lua_dir or join(root, "share", "lua", self.lua_version)
            self.deploy_lib_dir = tree.lib_dir or join(root, "lib", "lua", self.lua_version)
        else:
            root = normalize(tree)
            self.root_dir = root
            self.rocks_dir = self._rocks_dir(root)
            self.deploy_bin_dir = join(root, "bin")
            self.deploy_lua_dir = join(root, "share", "lua", self.lua_version)
            self.deploy_lib_dir = join(root, "lib", "lua", self.lua_version)

    def _rocks_dir(self, root: str) -> str:
        return join(root, "lib", "luarocks", f"rocks-{self.lua_version}")

    def find_named_tree(self, name: str) -> TreeRecord | None:
        """Return the configured tree called `name`, if any."""
        for tree in self.rocks_trees:
            if isinstance(tree, TreeRecord) and tree.name == name:
                return tree
        return None

    def as_dict(self) -> dict[str, Any]:
        """Return the resolved settings as plain data."""
        return {
            "program_version": self.program_version,
            "lua_version": self.lua_version,
            "root_dir": self.root_dir,
            "rocks_dir": self.rocks_dir,
            "deploy_bin_dir": self.deploy_bin_dir,
            "deploy_lua_dir": self.deploy_lua_dir,
            "deploy_lib_dir": self.deploy_lib_dir,
            "rocks_trees": [tree if isinstance(tree, str) else tree.__dict__ for tree in self.rocks_trees],
            "home_tree": self.home_tree,
            "local_by_default": self.local_by_default,
            "rocks_servers": list(self.rocks_servers),
            "only_sources_from": self.only_sources_from,
            "local_cache": self.local_cache,
            "connection_timeout": self.connection_timeout,
            "branch": self.branch,
            "platforms": list(self.platforms),
            "variables": dict(self.variables),
        }
