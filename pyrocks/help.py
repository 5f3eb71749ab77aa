"""The `help` command."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .command_registry import normalize_command_name
from .constants import PROGRAM_NAME
from .models import CommandResult

if TYPE_CHECKING:
    from .command_registry import CommandRegistry
    from .config import RocksConfig
    from .flags import Flags

__all__ = ["GLOBAL_FLAGS_HELP", "HelpCommand"]

GLOBAL_FLAGS_HELP: dict[str, str] = {
    "--version": "Show version and exit.",
    "--help, -h": "Show this help.",
    "--tree=<tree>": "Which tree to operate on (a path, or the name of a configured tree).",
    "--local": "Use the tree in the user's home directory.",
    "--server=<server>": "Fetch rocks from this server (takes priority over configured servers).",
    "--only-server=<server>": "Fetch rocks from this server only.",
    "--only-sources=<url>": "Restrict downloads to paths matching the given URL.",
    "--dev": "Enable the sub-repositories of the servers holding development rocks.",
    "--deps-mode=<mode>": "How to handle dependencies: one, order, all or none.",
    "--nodeps": "Same as --deps-mode=none.",
    "--branch=<name>": "Override the source branch of SCM rocks.",
    "--timeout=<seconds>": "Timeout on network operations, in seconds.",
    "--verbose": "Display verbose output of the commands executed.",
}


class HelpCommand:
    """[command] Show the list of commands, or the help of a single command."""

    def __init__(self, registry: CommandRegistry, description: str) -> None:
        self.registry = registry
        self.description = description

    def __call__(self, flags: Flags, *args: str, cfg: RocksConfig) -> CommandResult:
        if args:
            return self.show_command(args[0])
        print(self.render(cfg))
        return CommandResult.success()

    def render(self, cfg: RocksConfig) -> str:
        """Return the general help text."""
        lines = [
            f"{PROGRAM_NAME} {cfg.program_version}, {self.description}",
            "",
            f"Usage: {PROGRAM_NAME} [<flags...>] [VAR=VALUE]... <command> [<argument>]",
            "",
            "Variables from the \"variables\" table of the configuration file",
            "can be overridden with VAR=VALUE assignments.",
            "",
            "Global flags:",
        ]
        lines.extend(f"  {flag:26s} {doc}" for flag, doc in GLOBAL_FLAGS_HELP.items())
        lines.extend(["", "Commands:"])
        lines.extend(f"  {spec.name.replace('_', '-'):26s} {spec.summary}" for spec in self.registry)
        lines.extend(["", "Configuration:", f"  Lua version: {cfg.lua_version}", "  Rocks trees in use:"])
        for tree in cfg.rocks_trees:
            if isinstance(tree, str):
                lines.append(f"    {tree}")
            else:
                lines.append(f"    {tree.root} (\"{tree.name}\")")
        return "\n".join(lines)

    def show_command(self, command: str) -> CommandResult:
        """Print the help of a single command."""
        spec = self.registry.get(normalize_command_name(command))
        if spec is None:
            return CommandResult.failure(f"Unknown command: {command}")
        name = spec.name.replace("_", "-")
        print(f"Usage: {PROGRAM_NAME} {name} {spec.usage}".rstrip())
        print()
        print(spec.description)
        if spec.flags:
            print()
            print("Flags:")
            for flag, takes_value in sorted(spec.flags.items()):
                print(f"  --{flag}=<value>" if takes_value else f"  --{flag}")
        return CommandResult.success()
