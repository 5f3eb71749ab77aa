"""Configuration file loading.

Reads the system and user TOML files (or the single file named by
$PYROCKS_CONFIG), validates them and builds the `RocksConfig` used by the
rest of the run.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any

from . import constants
from .config import RocksConfig, TreeRecord, coerce_to_bool
from .models import ExitCode, PyrocksError
from .utils import merge
from .validation import ConfigValidator
from .version import VERSION

if TYPE_CHECKING:
    import logging

__all__ = ["ConfigLoader", "build_config"]


class ConfigLoader:
    """Handles loading and merging configuration files.

    Later files override the keys of earlier ones; tables are merged
    recursively, lists and scalars are replaced.
    """

    def __init__(self, log: logging.Logger) -> None:
        self.log = log
        self._config: dict[str, Any] = {}
        self.loaded_files: list[Path] = []

    @property
    def config(self) -> dict[str, Any]:
        """Return the merged raw configuration."""
        return self._config

    def config_files(self) -> list[Path]:
        """Return the files to read, in precedence order."""
        override = os.environ.get(constants.CONFIG_ENV_VAR)
        if override:
            return [Path(os.path.expandvars(override)).expanduser()]
        return [constants.SYSTEM_CONFIG_FILE, constants.USER_CONFIG_FILE]

    def load(self) -> RocksConfig:
        """Load every configuration file and build the runtime configuration.

        Raises:
            PyrocksError: If a file has syntax or schema errors, or if the
                file named by $PYROCKS_CONFIG does not exist.
        """
        explicit = bool(os.environ.get(constants.CONFIG_ENV_VAR))
        for fname in self.config_files():
            if not fname.exists():
                if explicit:
                    raise PyrocksError(f"Config file not found: {fname}", ExitCode.CONFIGFILE)
                self.log.debug("Skipping missing config %s", fname)
                continue
            merge(self._config, self._load_config_file(fname), replace=True)
            self.loaded_files.append(fname)
        return build_config(self._config)

    def _load_config_file(self, fname: Path) -> dict[str, Any]:
        """Load and validate a single configuration file."""
        self.log.info("Loading %s", fname)
        with fname.open("rb") as f:
            try:
                config = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                self.log.critical("Problem reading %s: %s", fname, e)
                raise PyrocksError(f"Error loading config file {fname}: {e}", ExitCode.CONFIGFILE) from e

        validator = ConfigValidator(config, str(fname), self.log)
        errors = validator.validate()
        if errors:
            raise PyrocksError("\n".join(errors), ExitCode.CONFIGFILE)
        validator.warn_unknown_keys()
        return config


def build_config(data: dict[str, Any]) -> RocksConfig:
    """Build a RocksConfig from a validated configuration mapping."""
    cfg = RocksConfig(program_version=VERSION)
    if "lua_version" in data:
        cfg.lua_version = data["lua_version"]
    if "home_tree" in data:
        cfg.home_tree = os.path.expanduser(data["home_tree"]) or None
    if "rocks_trees" in data:
        cfg.rocks_trees = [
            os.path.expanduser(tree) if isinstance(tree, str) else _tree_record(tree)
            for tree in data["rocks_trees"]
        ]
    if "local_by_default" in data:
        cfg.local_by_default = coerce_to_bool(data["local_by_default"])
    if "rocks_servers" in data:
        cfg.rocks_servers = list(data["rocks_servers"])
    if "connection_timeout" in data:
        cfg.connection_timeout = float(data["connection_timeout"])
    if "local_cache" in data:
        cfg.local_cache = os.path.expanduser(data["local_cache"])
    if "branch" in data:
        cfg.branch = data["branch"]
    cfg.variables.update({str(k): str(v) for k, v in data.get("variables", {}).items()})
    cfg.errorcodes.update(data.get("errorcodes", {}))
    return cfg


def _tree_record(data: dict[str, Any]) -> TreeRecord:
    record = TreeRecord.from_dict(data)
    if record.root:
        record.root = os.path.expanduser(record.root)
    return record
