" generic fixtures "
from unittest.mock import Mock

import pytest

from pyrocks.builtin_commands import default_registry
from pyrocks.config import RocksConfig, TreeRecord
from pyrocks.models import CommandResult

from .testtools import FakeFileSystem


def pytest_configure():
    "Runs once before all"
    from pyrocks.logging_setup import init_logger

    init_logger("/dev/null")


@pytest.fixture
def test_logger():
    return Mock()


@pytest.fixture
def fake_fs():
    "Filesystem with a writable home and a system tree owned by root"
    fs = FakeFileSystem()
    fs.add_dir("/home", owner="root", writable=False)
    fs.add_dir("/home/alice")
    fs.add_dir("/home/alice/.cache/pyrocks")
    fs.add_dir("/usr/local", owner="root", writable=False)
    return fs


@pytest.fixture
def rocks_config():
    return RocksConfig(
        program_version="3.2.0",
        lua_version="5.4",
        rocks_trees=[
            "/usr/local",
            TreeRecord(name="project", root="/home/alice/project/lua_modules"),
            "/home/alice/.luarocks",
        ],
        home_tree="/home/alice/.luarocks",
        rocks_servers=["https://luarocks.org"],
        platforms=["unix", "linux"],
        local_cache="/home/alice/.cache/pyrocks",
    )


# Command handler recording its calls
class Recorder:
    "<name> [version] Install a rock."

    def __init__(self, result=None):
        self.calls = []
        self.result = result or CommandResult.success()

    def __call__(self, flags, *args, cfg):
        self.calls.append((dict(flags), args, cfg))
        return self.result


@pytest.fixture
def install_cmd():
    return Recorder()


@pytest.fixture
def registry(install_cmd):
    "Built-in commands plus a few test ones"
    reg = default_registry("test description")
    reg.register("install", install_cmd, check_permissions=True)

    def fail(flags, *args, cfg):
        "Always fail."
        return CommandResult.failure("nothing to do", 5)

    def fail_default(flags, *args, cfg):
        "Fail without exit code."
        return CommandResult.failure("it went wrong")

    def boom(flags, *args, cfg):
        "Crash."
        raise RuntimeError("kaboom")

    def show_thing(flags, *args, cfg):
        "Read-only command."
        return CommandResult.success()

    reg.register("fail", fail)
    reg.register("fail-default", fail_default)
    reg.register("boom", boom)
    reg.register("show-thing", show_thing)
    return reg
