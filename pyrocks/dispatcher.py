"""Command line dispatcher.

Turns the raw argument list into a command invocation:

    variables -> flags -> global options -> tree -> servers -> cache
    -> permissions -> handler -> cleanup -> exit code

Every fatal condition is a `PyrocksError` caught in `run_command`, which
prints it, drains the scheduled cleanup actions and returns the exit code.
"""

from __future__ import annotations

import math
import sys
import traceback
from typing import TYPE_CHECKING

from .ansi import BOLD, RED, colorize
from .cleanup import CleanupScheduler
from .command_registry import normalize_command_name
from .constants import BUG_REPORT_URL, PROGRAM_NAME
from .flags import SUPPORTED_FLAGS, check_deps_mode_flag, extract_variables, parse_flags
from .fs import FileSystem
from .logging_setup import get_logger, is_debug, set_debug
from .models import CommandResult, PyrocksError
from .permissions import check_command_permissions, ensure_cache_ownership
from .trees import adjust_servers, normalize_tree_dirs, resolve_tree

if TYPE_CHECKING:
    import logging
    from collections.abc import Sequence

    from .command_registry import CommandRegistry, CommandSpec
    from .config import RocksConfig
    from .flags import Flags

__all__ = ["crash_report", "resolve_global_options", "run_command"]

# Folded into their canonical flag before anything else looks at flags
FLAG_ALIASES = {
    "from": "server",
    "only-from": "only-server",
    "only-sources-from": "only-sources",
    "to": "tree",
}


def printerr(message: str) -> None:
    """Print an error message to stderr."""
    print(colorize(message, RED, BOLD, stream=sys.stderr), file=sys.stderr)


def crash_report(cfg: RocksConfig) -> str:
    """Describe the exception being handled as a bug to report."""
    return f"{PROGRAM_NAME} {cfg.program_version} bug (please report at {BUG_REPORT_URL}).\n{traceback.format_exc().rstrip()}"


def _terminate(cfg: RocksConfig, cleanup: CleanupScheduler, exit_code: int, message: str | None = None) -> int:
    """Report `message`, run the scheduled cleanup and return the exit code to use."""
    if message is not None:
        printerr(f"\nError: {message}")
    try:
        cleanup.run()
    except Exception:  # pylint: disable=broad-except
        printerr(f"\nError: {crash_report(cfg)}")
        return cfg.errorcode("CRASH")
    return exit_code


def resolve_global_options(flags: Flags, positionals: list[str], cfg: RocksConfig) -> str:
    """Apply the global flags to `cfg` and return the normalized command name.

    Consumes the command name from `positionals`.

    Raises:
        PyrocksError: On invalid --timeout or --deps-mode values
    """
    for alias, target in FLAG_ALIASES.items():
        if flags.get(alias):
            flags[target] = flags[alias]
    if flags.get("nodeps"):
        flags["deps-mode"] = "none"

    cfg.flags = flags

    if flags.get("timeout"):
        try:
            timeout = float(flags["timeout"])
        except ValueError:
            timeout = math.nan
        if not math.isfinite(timeout):
            raise PyrocksError("Argument error: --timeout expects a numeric argument.")
        cfg.connection_timeout = timeout

    if flags.get("help") or not positionals:
        command = "help"
    else:
        command = positionals.pop(0)
    command = normalize_command_name(command)

    if cfg.local_by_default:
        flags["local"] = True

    if "deps-mode" in flags and not check_deps_mode_flag(flags["deps-mode"]):
        raise PyrocksError("Invalid entry for --deps-mode.")

    if flags.get("branch"):
        cfg.branch = str(flags["branch"])

    return command


def _call_handler(spec: CommandSpec, flags: Flags, args: Sequence[str], cfg: RocksConfig) -> None:
    """Run a command handler, turning its failures into `PyrocksError`."""
    try:
        result = spec.handler(flags, *args, cfg=cfg)
    except PyrocksError:
        raise
    except Exception:  # pylint: disable=broad-except
        raise PyrocksError(crash_report(cfg), cfg.errorcode("CRASH")) from None

    if not isinstance(result, CommandResult):
        raise PyrocksError(
            f"{PROGRAM_NAME} {cfg.program_version} bug (please report at {BUG_REPORT_URL}).\n"
            f"Command '{spec.name}' returned {result!r} instead of a CommandResult.",
            cfg.errorcode("CRASH"),
        )
    if not result.ok:
        exit_code = result.exit_code if result.exit_code is not None else cfg.errorcode("UNSPECIFIED")
        raise PyrocksError(result.message, exit_code)


def _dispatch(  # noqa: PLR0913
    description: str,
    registry: CommandRegistry,
    args: Sequence[str],
    cfg: RocksConfig,
    fs: FileSystem | None,
    cleanup: CleanupScheduler,
    log: logging.Logger,
) -> int:
    remaining, variables = extract_variables(list(args))
    flags, positionals = parse_flags(remaining, registry.supported_flags())

    if flags.get("version"):
        print(f"{PROGRAM_NAME} {cfg.program_version}")
        print(description)
        print()
        return cfg.errorcode("OK")

    if flags.get("verbose"):
        set_debug(True)

    command = resolve_global_options(flags, positionals, cfg)
    log.debug("command=%s flags=%s args=%s", command, flags, positionals)

    if fs is None:
        fs = FileSystem(cfg.platforms, verbose=bool(flags.get("verbose")))

    cfg.variables.update(variables)
    resolve_tree(flags, cfg, fs)
    normalize_tree_dirs(cfg)
    adjust_servers(flags, cfg)

    if not fs.current_dir():
        raise PyrocksError(f"Current directory does not exist. Please run {PROGRAM_NAME} from an existing directory.")

    ensure_cache_ownership(cfg, fs, cleanup, log)

    if command == "help":
        help_spec = registry.get("help")
        if help_spec is None:
            raise PyrocksError("No help command is registered.")
        _call_handler(help_spec, flags, positionals[:1], cfg)
        return cfg.errorcode("OK")

    spec = registry.get(command)
    if spec is None:
        raise PyrocksError(f"Unknown command: {command}")

    for name in flags:
        if name not in SUPPORTED_FLAGS and name not in spec.flags:
            raise PyrocksError(f"Invalid argument: unknown flag --{name} for command {spec.name}. See --help.")

    if spec.check_permissions:
        ok, err = check_command_permissions(flags, cfg, fs)
        if not ok:
            raise PyrocksError(err or "Permission denied", cfg.errorcode("PERMISSIONDENIED"))

    _call_handler(spec, flags, positionals, cfg)
    return cfg.errorcode("OK")


def run_command(  # noqa: PLR0913
    description: str,
    registry: CommandRegistry,
    args: Sequence[str],
    cfg: RocksConfig,
    fs: FileSystem | None = None,
    log: logging.Logger | None = None,
) -> int:
    """Parse `args`, run the requested command and return the process exit code.

    Args:
        description: Program description, shown by --version and help
        registry: The available commands; must contain "help"
        args: Command line arguments, without the program name
        cfg: Configuration for this run, updated in place
        fs: Filesystem service (created from the flags when omitted)
        log: Logger for warnings and debug output

    Returns:
        The numeric exit code (see `ExitCode`)
    """
    log = log or get_logger()
    debug = is_debug()
    try:
        with CleanupScheduler() as cleanup:
            try:
                exit_code = _dispatch(description, registry, args, cfg, fs, cleanup, log)
            except PyrocksError as e:
                return _terminate(cfg, cleanup, e.exit_code, e.message)
            except Exception:  # pylint: disable=broad-except
                return _terminate(cfg, cleanup, cfg.errorcode("CRASH"), crash_report(cfg))
            return _terminate(cfg, cleanup, exit_code)
    finally:
        # --verbose only lasts for this run
        if is_debug() != debug:
            set_debug(debug)
