"""Tests for the `pyrocks` entry point."""

import json

import pytest

from pyrocks import constants
from pyrocks.command import main, use_param
from pyrocks.models import ExitCode


@pytest.fixture(autouse=True)
def init_logger(mocker):
    "Keeps the test logging setup in place"
    return mocker.patch("pyrocks.command.init_logger")


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    "A configuration whose trees and cache live in tmp_path"
    tree = tmp_path / "tree"
    cache = tmp_path / "cache"
    cache.mkdir()
    path = tmp_path / "config.toml"
    path.write_text(
        f"""
rocks_trees = ["{tree}"]
home_tree = "{tree}"
local_cache = "{cache}"
"""
    )
    monkeypatch.setenv(constants.CONFIG_ENV_VAR, str(path))
    monkeypatch.chdir(tmp_path)
    return path


def test_use_param():
    argv = ["--debug", "/tmp/log", "config"]
    assert use_param("--debug", argv) == "/tmp/log"
    assert argv == ["config"]
    assert use_param("--debug", argv) == ""


def test_version(config_file, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])
    assert excinfo.value.code == ExitCode.OK
    assert capsys.readouterr().out.startswith("pyrocks 3.2.0\n")


def test_config_command(config_file, tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["config", "root_dir"])
    assert excinfo.value.code == ExitCode.OK
    assert capsys.readouterr().out.strip() == str(tmp_path / "tree")


def test_variables_reach_the_config(config_file, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["config", "variables", "CC=gcc"])
    assert excinfo.value.code == ExitCode.OK
    variables = json.loads(capsys.readouterr().out)
    assert variables["CC"] == "gcc"
    assert "ROCKS_TREE" in variables


def test_unknown_command(config_file, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["frobnicate"])
    assert excinfo.value.code == ExitCode.UNSPECIFIED
    assert "Unknown command: frobnicate" in capsys.readouterr().err


def test_broken_config(config_file, capsys):
    config_file.write_text("rocks_trees = 3\n")
    with pytest.raises(SystemExit) as excinfo:
        main(["config"])
    assert excinfo.value.code == ExitCode.CONFIGFILE
    assert "Config error for 'rocks_trees'" in capsys.readouterr().err


def test_debug_log_file(config_file, init_logger):
    with pytest.raises(SystemExit):
        main(["--debug", "/tmp/pyrocks-debug.log", "config"])
    init_logger.assert_called_once_with(filename="/tmp/pyrocks-debug.log", force_debug=True)


def test_default_logging(config_file, init_logger):
    with pytest.raises(SystemExit):
        main(["config"])
    init_logger.assert_called_once_with()
