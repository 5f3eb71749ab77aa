"""Command registry - explicit mapping from command names to handlers.

Handlers are registered by the program that embeds the dispatcher, never
discovered by importing modules. Their docstring documents them:
the first line may start with the arguments (<required> / [optional]),
followed by a short description.
"""

from __future__ import annotations

import inspect
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from .flags import SUPPORTED_FLAGS

if TYPE_CHECKING:
    from .config import RocksConfig
    from .flags import Flags
    from .models import CommandResult

__all__ = [
    "CommandArg",
    "CommandHandler",
    "CommandRegistry",
    "CommandSpec",
    "normalize_command_name",
    "parse_docstring",
]


class CommandHandler(Protocol):
    """Callable implementing a command."""

    def __call__(self, flags: Flags, *args: str, cfg: RocksConfig) -> CommandResult: ...


@dataclass
class CommandArg:
    """An argument parsed from a command's docstring."""

    value: str  # e.g., "name" or "one|order|all"
    required: bool  # True for <arg>, False for [arg]


@dataclass
class CommandSpec:
    """A registered command."""

    name: str
    handler: CommandHandler
    check_permissions: bool = False
    flags: dict[str, bool] = field(default_factory=dict)  # name -> takes a value
    args: list[CommandArg] = field(default_factory=list)
    summary: str = ""
    description: str = ""

    @property
    def usage(self) -> str:
        """Return the argument synopsis, e.g. "<name> [version]"."""
        return " ".join(f"<{arg.value}>" if arg.required else f"[{arg.value}]" for arg in self.args)


# Regex pattern to match args: <required> or [optional]
_ARG_PATTERN = re.compile(r"([<\[])([^>\]]+)([>\]])")


def normalize_command_name(cmd: str) -> str:
    """Normalize a user-typed command to internal format.

    E.g., "show-config" -> "show_config"
    """
    return cmd.replace("-", "_")


def parse_docstring(docstring: str) -> tuple[list[CommandArg], str, str]:
    """Parse a docstring to extract arguments and descriptions.

    The first line may contain arguments like:
    "<arg> Short description" or "[optional_arg] Short description"

    Returns:
        Tuple of (args, short_description, full_description)
    """
    if not docstring:
        return [], "No description available.", ""

    full_description = docstring.strip()
    first_line = full_description.split("\n")[0].strip()

    args: list[CommandArg] = []
    last_end = 0

    for match in _ARG_PATTERN.finditer(first_line):
        # Stop at the first arg preceded by description text
        if match.start() != last_end and first_line[last_end : match.start()].strip():
            break
        args.append(CommandArg(value=match.group(2), required=match.group(1) == "<"))
        last_end = match.end()
        while last_end < len(first_line) and first_line[last_end] == " ":
            last_end += 1

    short_description = first_line[last_end:].strip() if args else first_line
    return args, short_description or first_line, full_description


class CommandRegistry:
    """Mapping of normalized command names to `CommandSpec`, fixed once the run starts."""

    def __init__(self) -> None:
        self._commands: dict[str, CommandSpec] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        check_permissions: bool = False,
        flags: dict[str, bool] | None = None,
    ) -> CommandSpec:
        """Register `handler` as the command `name`.

        Args:
            name: Command name (hyphens are normalized to underscores)
            handler: The command implementation
            check_permissions: Verify write permissions on the tree before running
            flags: Flags of this command, mapped to True when they take a value

        Raises:
            ValueError: If the name is taken, or a flag clashes with a known flag of the other kind
        """
        name = normalize_command_name(name)
        if name in self._commands:
            raise ValueError(f"Command already registered: {name}")
        flags = dict(flags or {})
        known = self.supported_flags()
        for flag, takes_value in flags.items():
            if flag in known and known[flag] != takes_value:
                raise ValueError(f"Flag --{flag} of command {name} clashes with an existing flag")
        args, short_desc, full_desc = parse_docstring(inspect.getdoc(handler) or "")
        spec = CommandSpec(
            name=name,
            handler=handler,
            check_permissions=check_permissions,
            flags=flags,
            args=args,
            summary=short_desc,
            description=full_desc,
        )
        self._commands[name] = spec
        return spec

    def command(
        self,
        name: str,
        check_permissions: bool = False,
        flags: dict[str, bool] | None = None,
    ) -> Callable[[CommandHandler], CommandHandler]:
        """Decorator registering the decorated function as the command `name`."""

        def _register(handler: CommandHandler) -> CommandHandler:
            self.register(name, handler, check_permissions, flags)
            return handler

        return _register

    def get(self, name: str) -> CommandSpec | None:
        """Return the command called `name` (already normalized), if registered."""
        return self._commands.get(name)

    def supported_flags(self) -> dict[str, bool]:
        """Return the global flags plus the flags of every registered command."""
        supported = dict(SUPPORTED_FLAGS)
        for spec in self._commands.values():
            supported.update(spec.flags)
        return supported

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def __iter__(self) -> Iterator[CommandSpec]:
        return iter(sorted(self._commands.values(), key=lambda spec: spec.name))

    def __len__(self) -> int:
        return len(self._commands)
