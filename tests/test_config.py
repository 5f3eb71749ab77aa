from pyrocks.config import RocksConfig, TreeRecord, coerce_to_bool, detect_platforms
from pyrocks.models import ExitCode
from pyrocks.validation import CONFIG_SCHEMA, ConfigField, ConfigItems, ConfigValidator, _find_similar_key, format_config_error


def test_coerce_to_bool():
    for value in (True, "true", "yes", "on", "1", "foo", 1):
        assert coerce_to_bool(value) is True
    for value in (False, "false", "No", " off ", "0", "disabled", "", 0):
        assert coerce_to_bool(value) is False
    assert coerce_to_bool(None) is False
    assert coerce_to_bool(None, default=True) is True


def test_detect_platforms():
    assert detect_platforms("linux") == ["unix", "linux"]
    assert detect_platforms("darwin") == ["unix", "bsd", "macosx"]
    assert detect_platforms("freebsd14") == ["unix", "bsd", "freebsd"]
    assert detect_platforms("win32") == ["windows", "win32"]


def test_use_tree_from_path():
    cfg = RocksConfig(lua_version="5.1")
    cfg.use_tree("/opt/rocks/")
    assert cfg.root_dir == "/opt/rocks"
    assert cfg.rocks_dir == "/opt/rocks/lib/luarocks/rocks-5.1"
    assert cfg.deploy_bin_dir == "/opt/rocks/bin"
    assert cfg.deploy_lua_dir == "/opt/rocks/share/lua/5.1"
    assert cfg.deploy_lib_dir == "/opt/rocks/lib/lua/5.1"


def test_use_tree_record_overrides():
    cfg = RocksConfig(lua_version="5.4")
    cfg.use_tree(TreeRecord(name="sys", root="/opt", bin_dir="/usr/bin", rocks_dir="/var/rocks"))
    assert cfg.root_dir == "/opt"
    assert cfg.rocks_dir == "/var/rocks"
    assert cfg.deploy_bin_dir == "/usr/bin"
    assert cfg.deploy_lua_dir == "/opt/share/lua/5.4"


def test_tree_record_from_dict():
    record = TreeRecord.from_dict({"name": "user", "root": "/home/bob/.luarocks", "lua_dir": "/home/bob/lua"})
    assert record == TreeRecord(name="user", root="/home/bob/.luarocks", lua_dir="/home/bob/lua")
    assert TreeRecord.from_dict({"name": "empty", "root": ""}).root is None


def test_find_named_tree(rocks_config):
    assert rocks_config.find_named_tree("project").root == "/home/alice/project/lua_modules"
    assert rocks_config.find_named_tree("/usr/local") is None
    assert rocks_config.find_named_tree("missing") is None


def test_errorcode():
    cfg = RocksConfig()
    assert cfg.errorcode("PERMISSIONDENIED") == ExitCode.PERMISSIONDENIED
    cfg.errorcodes["PERMISSIONDENIED"] = 13
    assert cfg.errorcode("PERMISSIONDENIED") == 13
    del cfg.errorcodes["CRASH"]
    assert cfg.errorcode("CRASH") == 99


def test_is_platform(rocks_config):
    assert rocks_config.is_platform("unix")
    assert not rocks_config.is_platform("windows")


def test_as_dict(rocks_config):
    rocks_config.use_tree("/usr/local")
    data = rocks_config.as_dict()
    assert data["rocks_dir"] == "/usr/local/lib/luarocks/rocks-5.4"
    assert data["rocks_trees"][1]["name"] == "project"
    assert data["rocks_trees"][0] == "/usr/local"
    assert data["rocks_servers"] is not rocks_config.rocks_servers


class TestValidation:
    def test_valid_config(self, test_logger):
        config = {
            "lua_version": "5.3",
            "rocks_trees": ["/usr/local", {"name": "user", "root": "~/.luarocks"}],
            "local_by_default": "yes",
            "connection_timeout": 5,
            "errorcodes": {"CRASH": 70},
        }
        assert ConfigValidator(config, "test.toml", test_logger).validate() == []

    def test_type_error(self, test_logger):
        errors = ConfigValidator({"lua_version": 5.3}, "test.toml", test_logger).validate()
        assert errors == ["[test.toml] Config error for 'lua_version': Expected str, got float"]

    def test_bool_suggestion(self, test_logger):
        [error] = ConfigValidator({"local_by_default": "maybe"}, "test.toml", test_logger).validate()
        assert "Use true/false (without quotes)" in error

    def test_bool_not_a_number(self, test_logger):
        [error] = ConfigValidator({"connection_timeout": True}, "test.toml", test_logger).validate()
        assert "Expected int or float, got bool" in error

    def test_tree_entries(self, test_logger):
        config = {"rocks_trees": ["/usr", 3, {"root": "/opt"}, {"name": "x", "root": 1}]}
        errors = ConfigValidator(config, "t", test_logger).validate()
        assert errors == [
            "[t] Config error for 'rocks_trees': entry #2 must be a path or a table, got int",
            "[t] Config error for 'rocks_trees': entry #3 must have a 'name'",
            "[t] Config error for 'rocks_trees': entry #4: 'root' must be a string",
        ]

    def test_tree_entries_need_a_root(self, test_logger):
        config = {"rocks_trees": [{"name": "a"}, {"name": "b", "root": ""}, {"name": "c", "root": "/opt"}]}
        errors = ConfigValidator(config, "t", test_logger).validate()
        assert errors == [
            "[t] Config error for 'rocks_trees': entry #1 must have a 'root'",
            "[t] Config error for 'rocks_trees': entry #2 must have a 'root'",
        ]

    def test_errorcodes(self, test_logger):
        errors = ConfigValidator({"errorcodes": {"OOPS": 3, "CRASH": "x"}}, "t", test_logger).validate()
        assert "[t] Config error for 'errorcodes': unknown exit code name 'OOPS'" in errors
        assert "[t] Config error for 'errorcodes': 'CRASH' must be an integer" in errors

    def test_servers(self, test_logger):
        [error] = ConfigValidator({"rocks_servers": ["https://a", 2]}, "t", test_logger).validate()
        assert error.endswith("item #2 must be a string")

    def test_unknown_keys(self, test_logger):
        validator = ConfigValidator({"rocks_server": [], "xyzzy": "red"}, "t", test_logger)
        warnings = validator.warn_unknown_keys()
        assert warnings == [
            "[t] Unknown option 'rocks_server' (did you mean 'rocks_servers'?)",
            "[t] Unknown option 'xyzzy' - will be ignored",
        ]
        assert test_logger.warning.call_count == 2

    def test_custom_schema(self, test_logger):
        schema = ConfigItems(ConfigField("size", int, validator=lambda v: ["too big"] if v > 10 else []))
        assert ConfigValidator({"size": 12}, "t", test_logger).validate(schema) == ["[t] Config error for 'size': too big"]
        assert schema.get("size").type_name == "int"
        assert schema.get("other") is None


def test_schema_names():
    assert CONFIG_SCHEMA.get("connection_timeout").type_name == "int or float"


def test_find_similar_key():
    assert _find_similar_key("lua_versoin", ["lua_version", "branch"]) == "lua_version"
    assert _find_similar_key("zzz", ["lua_version", "branch"]) is None


def test_format_config_error():
    assert format_config_error("a.toml", "branch", "bad") == "[a.toml] Config error for 'branch': bad"
    assert format_config_error("a.toml", "branch", "bad", "fix it") == "[a.toml] Config error for 'branch': bad -> fix it"
