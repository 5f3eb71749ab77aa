"""Shared constants for pyrocks."""

import os
from pathlib import Path

__all__ = [
    "BUG_REPORT_URL",
    "CACHE_DIR",
    "CONFIG_ENV_VAR",
    "DEFAULT_CONNECTION_TIMEOUT",
    "DEFAULT_LUA_VERSION",
    "DEFAULT_ROCKS_SERVERS",
    "DEPS_MODES",
    "HOME_TREE",
    "PROGRAM_DESCRIPTION",
    "PROGRAM_NAME",
    "SYSTEM_CONFIG_FILE",
    "SYSTEM_TREE",
    "USER_CONFIG_FILE",
]

PROGRAM_NAME = "pyrocks"
PROGRAM_DESCRIPTION = "pyrocks main command-line interface"
BUG_REPORT_URL = "https://github.com/pyrocks/pyrocks/issues"

# Config file paths - use XDG_CONFIG_HOME with fallback to ~/.config
_xdg_config_home = Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")
_xdg_cache_home = Path(os.environ.get("XDG_CACHE_HOME") or Path.home() / ".cache")
SYSTEM_CONFIG_FILE = Path("/etc/pyrocks/config.toml")
USER_CONFIG_FILE = _xdg_config_home / "pyrocks" / "config.toml"
CONFIG_ENV_VAR = "PYROCKS_CONFIG"

SYSTEM_TREE = "/usr/local"
HOME_TREE = str(Path.home() / ".luarocks")
CACHE_DIR = str(_xdg_cache_home / PROGRAM_NAME)

DEFAULT_LUA_VERSION = "5.4"
DEFAULT_ROCKS_SERVERS = ("https://luarocks.org",)
DEFAULT_CONNECTION_TIMEOUT = 30.0

# Accepted values for --deps-mode
DEPS_MODES = ("one", "order", "all", "none")
