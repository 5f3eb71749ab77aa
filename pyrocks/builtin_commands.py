"""Commands shipped with the dispatcher."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from .command_registry import CommandRegistry
from .constants import PROGRAM_DESCRIPTION
from .help import HelpCommand
from .models import CommandResult

if TYPE_CHECKING:
    from .config import RocksConfig
    from .flags import Flags

__all__ = ["default_registry", "show_config"]


def show_config(flags: Flags, *args: str, cfg: RocksConfig) -> CommandResult:
    """[key] Show the resolved configuration.

    Without argument, dumps every setting in JSON format.
    With a key (e.g. "rocks_dir"), prints only its value.
    """
    settings = cfg.as_dict()
    if not args:
        print(json.dumps(settings, indent=2))
        return CommandResult.success()
    key = args[0].replace("-", "_")
    if key not in settings:
        return CommandResult.failure(f"Unknown configuration key: {args[0]}")
    value = settings[key]
    print(value if isinstance(value, str) else json.dumps(value))
    return CommandResult.success()


def default_registry(description: str = PROGRAM_DESCRIPTION) -> CommandRegistry:
    """Return a registry holding the built-in commands."""
    registry = CommandRegistry()
    registry.register("help", HelpCommand(registry, description))
    registry.register("config", show_config)
    return registry
