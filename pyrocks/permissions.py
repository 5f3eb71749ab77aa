"""Write permission and cache ownership checks."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .constants import PROGRAM_NAME
from .paths import dir_name

if TYPE_CHECKING:
    import logging

    from .cleanup import CleanupScheduler
    from .config import RocksConfig
    from .flags import Flags
    from .fs import FileSystem

__all__ = [
    "check_command_permissions",
    "ensure_cache_ownership",
    "is_ownership_ok",
]

# How many levels (self, parent, grandparent) are tried to find an owner
OWNERSHIP_LOOKUP_DEPTH = 3


def _nearest_existing_parent(directory: str, fs: FileSystem) -> str:
    """Walk up from `directory` until an existing ancestor or the filesystem root."""
    root = fs.root_of(directory)
    parent = directory
    while True:
        parent = dir_name(parent)
        if parent == "":
            parent = root
        if parent == root or fs.exists(parent):
            return parent


def check_command_permissions(flags: Flags, cfg: RocksConfig, fs: FileSystem) -> tuple[bool, str | None]:
    """Check that the current user can write where a command will install files.

    Returns:
        (True, None) on success, (False, message) naming the first failing directory
    """
    if flags.get("pack-binary-rock"):
        return True, None

    err = None
    # deploy_lua_dir is listed twice: this is the exact set of directories checked
    for directory in (cfg.rocks_dir, cfg.deploy_lua_dir, cfg.deploy_bin_dir, cfg.deploy_lua_dir):
        if fs.exists(directory):
            if not fs.is_writable(directory):
                err = f"Your user does not have write permissions in {directory}"
                break
        else:
            parent = _nearest_existing_parent(directory, fs)
            if not fs.is_writable(parent):
                err = f"{directory} does not exist and your user does not have write permissions in {parent}"
                break

    if err is None:
        return True, None
    if flags.get("local"):
        err += " \n-- please check your permissions."
    else:
        err += " \n-- you may want to run as a privileged user or use your local tree with --local."
    return False, err


def is_ownership_ok(directory: str, fs: FileSystem) -> bool:
    """Tell whether `directory` (or its nearest ancestor with an owner) belongs to the current user."""
    me = fs.current_user()
    for _ in range(OWNERSHIP_LOOKUP_DEPTH):
        owner = fs.attributes(directory, "owner")
        if owner:
            return owner == me
        directory = dir_name(directory)
    return False


def ensure_cache_ownership(cfg: RocksConfig, fs: FileSystem, cleanup: CleanupScheduler, log: logging.Logger) -> None:
    """Replace a cache directory owned by someone else with a temporary one.

    The temporary directory is scheduled for deletion.
    """
    if is_ownership_ok(cfg.local_cache, fs):
        return
    hint = f"If executing {PROGRAM_NAME} with sudo, you may want sudo's -H flag." if cfg.is_platform("unix") else ""
    log.warning(
        "The directory '%s' or its parent directory is not owned by the current user and the cache has been disabled. "
        "Please check the permissions and owner of that directory. %s",
        cfg.local_cache,
        hint,
    )
    cfg.local_cache = fs.make_temp_dir("local_cache")
    cleanup.schedule(fs.delete, cfg.local_cache)
