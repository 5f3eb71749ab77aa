"""Configuration file validation.

Declarative schema (ConfigField, ConfigItems) describing the keys accepted
in `config.toml`, and a validator reporting type errors and unknown keys
with fuzzy "did you mean" suggestions.
"""

from __future__ import annotations

import difflib
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .config import BOOL_FALSE_STRINGS
from .models import ExitCode

__all__ = [
    "CONFIG_SCHEMA",
    "ConfigField",
    "ConfigItems",
    "ConfigValidator",
    "format_config_error",
]

BOOL_STRINGS = BOOL_FALSE_STRINGS | {"true", "yes", "on", "1", "enabled"}


@dataclass
class ConfigField:
    """Describes an expected configuration key.

    Attributes:
        name: The configuration key name
        field_type: Expected type, or tuple of types for unions
        description: Human-readable description
        validator: Custom validator returning a list of error messages
    """

    name: str
    field_type: type | tuple[type, ...] = str
    description: str = ""
    validator: Callable[[Any], list[str]] | None = None

    @property
    def type_name(self) -> str:
        """Return human-readable type name (e.g., 'str or list')."""
        if isinstance(self.field_type, tuple):
            return " or ".join(typ.__name__ for typ in self.field_type)
        return self.field_type.__name__


class ConfigItems(list):
    """A list of ConfigField items with lookup by name."""

    def __init__(self, *args: ConfigField) -> None:
        super().__init__(args)

    def get(self, name: str) -> ConfigField | None:
        """Get a ConfigField by name."""
        for prop in self:
            if prop.name == name:
                return prop
        return None


def _find_similar_key(unknown_key: str, known_keys: list[str]) -> str | None:
    """Find a similar key using fuzzy matching."""
    matches = difflib.get_close_matches(unknown_key, known_keys, n=1)
    if matches:
        return matches[0]
    return None


def format_config_error(source: str, field: str, message: str, suggestion: str = "") -> str:
    """Format a configuration error message.

    Args:
        source: Config file (or section) holding the field
        field: Field name that has the error
        message: Error description
        suggestion: Optional suggestion for fixing the error
    """
    msg = f"[{source}] Config error for '{field}': {message}"
    if suggestion:
        msg += f" -> {suggestion}"
    return msg


def _validate_trees(trees: list) -> list[str]:
    errors = []
    for index, tree in enumerate(trees):
        if isinstance(tree, str):
            continue
        if not isinstance(tree, dict):
            errors.append(f"entry #{index + 1} must be a path or a table, got {type(tree).__name__}")
            continue
        if not isinstance(tree.get("name"), str) or not tree["name"]:
            errors.append(f"entry #{index + 1} must have a 'name'")
        if not tree.get("root"):
            errors.append(f"entry #{index + 1} must have a 'root'")
        for key in ("root", "bin_dir", "lua_dir", "lib_dir", "rocks_dir"):
            if key in tree and not isinstance(tree[key], str):
                errors.append(f"entry #{index + 1}: '{key}' must be a string")
    return errors


def _validate_errorcodes(codes: dict) -> list[str]:
    known = {code.name for code in ExitCode}
    errors = [f"unknown exit code name '{name}'" for name in codes if name not in known]
    errors.extend(f"'{name}' must be an integer" for name, value in codes.items() if not isinstance(value, int) or isinstance(value, bool))
    return errors


def _validate_string_list(items: list) -> list[str]:
    return [f"item #{index + 1} must be a string" for index, item in enumerate(items) if not isinstance(item, str)]


CONFIG_SCHEMA = ConfigItems(
    ConfigField("lua_version", str, "Lua version used to name deploy directories"),
    ConfigField("rocks_trees", list, "Trees, as paths or {name, root} tables", validator=_validate_trees),
    ConfigField("home_tree", str, "Tree selected by --local"),
    ConfigField("local_by_default", bool, "Behave as if --local was always given"),
    ConfigField("rocks_servers", list, "Servers queried for rocks", validator=_validate_string_list),
    ConfigField("connection_timeout", (int, float), "Network timeout in seconds"),
    ConfigField("local_cache", str, "Download cache directory"),
    ConfigField("branch", str, "Source branch used when building from SCM"),
    ConfigField("variables", dict, "Variables available to command templates"),
    ConfigField("errorcodes", dict, "Override numeric exit codes", validator=_validate_errorcodes),
)


class ConfigValidator:
    """Validates a configuration mapping against a schema."""

    def __init__(self, config: dict, source: str, logger: logging.Logger) -> None:
        """Initialize the validator.

        Args:
            config: The configuration dictionary to validate
            source: Name of the configuration file, for error messages
            logger: Logger instance for warnings
        """
        self.config = config
        self.source = source
        self.log = logger

    def validate(self, schema: ConfigItems = CONFIG_SCHEMA) -> list[str]:
        """Validate configuration against schema.

        Returns:
            List of error messages (empty if validation passed)
        """
        errors = []
        for field_def in schema:
            value = self.config.get(field_def.name)
            if value is None:
                continue
            type_error = self._check_type(field_def, value)
            if type_error:
                errors.append(type_error)
                continue
            if field_def.validator:
                errors.extend(format_config_error(self.source, field_def.name, error) for error in field_def.validator(value))
        return errors

    def _check_type(self, field_def: ConfigField, value: Any) -> str | None:  # noqa: ANN401
        expected = field_def.field_type if isinstance(field_def.field_type, tuple) else (field_def.field_type,)
        for single_type in expected:
            if single_type is bool:
                if isinstance(value, bool) or (isinstance(value, str) and value.lower() in BOOL_STRINGS):
                    return None
            elif single_type in (int, float):
                if isinstance(value, (int, float)) and not isinstance(value, bool):
                    return None
            elif isinstance(value, single_type):
                return None
        suggestion = "Use true/false (without quotes)" if field_def.field_type is bool else ""
        return format_config_error(
            self.source,
            field_def.name,
            f"Expected {field_def.type_name}, got {type(value).__name__}",
            suggestion,
        )

    def warn_unknown_keys(self, schema: ConfigItems = CONFIG_SCHEMA) -> list[str]:
        """Log warnings for unknown configuration keys.

        Returns:
            List of warning messages
        """
        warnings = []
        known_keys = [f.name for f in schema]

        for key in self.config:
            if key in known_keys:
                continue
            similar = _find_similar_key(key, known_keys)
            if similar:
                msg = f"[{self.source}] Unknown option '{key}' (did you mean '{similar}'?)"
            else:
                msg = f"[{self.source}] Unknown option '{key}' - will be ignored"
            self.log.warning(msg)
            warnings.append(msg)

        return warnings
