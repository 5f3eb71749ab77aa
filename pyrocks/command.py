"""Pyrocks - command line entry point."""

import sys

from .builtin_commands import default_registry
from .config_loader import ConfigLoader
from .constants import BUG_REPORT_URL, PROGRAM_DESCRIPTION, PROGRAM_NAME
from .dispatcher import printerr, run_command
from .logging_setup import get_logger, init_logger
from .models import ExitCode, PyrocksError
from .version import VERSION

__all__ = ["main"]


def use_param(txt: str, argv: list[str]) -> str:
    """Check if parameter `txt` is in argv.

    if found, removes it from argv & returns the argument value
    """
    v = ""
    if txt in argv:
        i = argv.index(txt)
        v = argv[i + 1] if i + 1 < len(argv) else ""
        del argv[i : i + 2]
    return v


def main(argv: list[str] | None = None) -> None:
    """Run the command."""
    args = list(sys.argv[1:] if argv is None else argv)
    debug_flag = use_param("--debug", args)
    if debug_flag:
        init_logger(filename=debug_flag, force_debug=True)
    else:
        init_logger()
    log = get_logger()

    try:
        cfg = ConfigLoader(get_logger("config")).load()
    except PyrocksError as e:
        printerr(f"\nError: {e.message}")
        sys.exit(e.exit_code)

    try:
        exit_code = run_command(PROGRAM_DESCRIPTION, default_registry(), args, cfg, log=log)
    except KeyboardInterrupt:
        printerr("\nInterrupted")
        exit_code = ExitCode.UNSPECIFIED
    except Exception:  # pylint: disable=broad-except
        log.critical("%s %s bug (please report at %s).", PROGRAM_NAME, VERSION, BUG_REPORT_URL, exc_info=True)
        exit_code = ExitCode.CRASH
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
