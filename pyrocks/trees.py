"""Tree resolution and server list adjustments.

Exactly one tree is active per invocation. It comes from, in order of
precedence:

- `--tree=X`: the configured tree named X, else X as a path
- `--local`: the home tree
- the last entry of `rocks_trees`
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from .config import Tree, TreeRecord
from .models import PyrocksError
from .paths import join, normalize, split_url, strip_trailing_separators

if TYPE_CHECKING:
    from .config import RocksConfig
    from .flags import Flags
    from .fs import FileSystem

__all__ = [
    "adjust_servers",
    "normalize_tree_dirs",
    "replace_tree",
    "resolve_tree",
]

LOCAL_WITHOUT_HOME_TREE = (
    "The --local flag is meant for operating in a user's home directory.\n"
    "You are running as a superuser, which is intended for system-wide operation.\n"
    "To force using the superuser's home, use --tree explicitly."
)


def replace_tree(flags: Flags, cfg: RocksConfig, tree: Tree) -> None:
    """Activate `tree` and record its root under flags["tree"]."""
    if isinstance(tree, TreeRecord):
        tree = replace(tree, root=normalize(tree.root or ""))
        flags["tree"] = tree.root or ""
    else:
        tree = normalize(tree)
        flags["tree"] = tree
    cfg.use_tree(tree)


def _check_root(tree: TreeRecord) -> None:
    if not tree.root:
        raise PyrocksError(f"Configuration error: tree '{tree.name}' has no 'root' field.")


def resolve_tree(flags: Flags, cfg: RocksConfig, fs: FileSystem) -> None:
    """Select the active tree from flags and configuration.

    Raises:
        PyrocksError: If the selected tree has no root, or --local is used without a home tree
    """
    tree_flag = flags.get("tree")
    if tree_flag:
        # --tree wins over --local (including local_by_default)
        flags.pop("local", None)
        named = cfg.find_named_tree(str(tree_flag))
        if named is not None:
            _check_root(named)
            replace_tree(flags, cfg, named)
        else:
            replace_tree(flags, cfg, fs.absolute_name(str(tree_flag)))
    elif flags.get("local"):
        if not cfg.home_tree:
            raise PyrocksError(LOCAL_WITHOUT_HOME_TREE)
        replace_tree(flags, cfg, cfg.home_tree)
    else:
        if not cfg.rocks_trees:
            raise PyrocksError("Configuration error: no rocks trees are configured.")
        default = cfg.rocks_trees[-1]
        if isinstance(default, TreeRecord):
            _check_root(default)
        cfg.use_tree(default)


def normalize_tree_dirs(cfg: RocksConfig) -> None:
    """Strip trailing separators from the tree directories and publish path variables."""
    cfg.root_dir = strip_trailing_separators(cfg.root_dir)
    cfg.rocks_dir = strip_trailing_separators(cfg.rocks_dir)
    cfg.deploy_bin_dir = strip_trailing_separators(cfg.deploy_bin_dir)
    cfg.deploy_lua_dir = strip_trailing_separators(cfg.deploy_lua_dir)
    cfg.deploy_lib_dir = strip_trailing_separators(cfg.deploy_lib_dir)

    cfg.variables["ROCKS_TREE"] = cfg.rocks_dir
    cfg.variables["SCRIPTS_DIR"] = cfg.deploy_bin_dir


def adjust_servers(flags: Flags, cfg: RocksConfig) -> None:
    """Apply --server, --dev, --only-server and --only-sources to the configuration.

    Raises:
        PyrocksError: If --only-server is combined with --dev or --server
    """
    if flags.get("server"):
        protocol, pathname = split_url(str(flags["server"]))
        cfg.rocks_servers.insert(0, f"{protocol}://{pathname}")

    if flags.get("dev"):
        dev_servers = [join(server, "dev") for server in cfg.rocks_servers]
        cfg.rocks_servers = dev_servers + cfg.rocks_servers

    if flags.get("only-server"):
        if flags.get("dev"):
            raise PyrocksError("--only-server cannot be used with --dev")
        if flags.get("server"):
            raise PyrocksError("--only-server cannot be used with --server")
        cfg.rocks_servers = [str(flags["only-server"])]

    if flags.get("only-sources"):
        cfg.only_sources_from = str(flags["only-sources"])
