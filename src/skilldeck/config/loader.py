"""
Configuration loader with deep merge.

Precedence order (lowest to highest):
1. Defaults (defined in the Pydantic schemas)
2. YAML file (explicit -c path, or .skilldeck.yaml at the corpus root)
3. Environment variables
4. CLI arguments

The merge is recursive to preserve all keys at every level.
"""

import os
from pathlib import Path
from typing import Any

import yaml

from ..errors import ConfigError
from .schema import AppConfig

DEFAULT_CONFIG_NAME = ".skilldeck.yaml"

_TRUTHY = {"1", "true", "yes", "on"}


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursive dictionary merge.

    Args:
        base: Base dictionary
        override: Dictionary whose values win over the base

    Returns:
        New merged dictionary. Override wins on leaf conflicts.

    Example:
        >>> base = {"a": {"b": 1, "c": 2}, "d": 3}
        >>> override = {"a": {"b": 99}, "e": 4}
        >>> deep_merge(base, override)
        {"a": {"b": 99, "c": 2}, "d": 3, "e": 4}
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml_config(config_path: Path | None) -> dict[str, Any]:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML file, or None to skip

    Returns:
        Dictionary with the configuration, or an empty dict without a file

    Raises:
        FileNotFoundError: If config_path does not exist
        ConfigError: If the file is not valid YAML or not a mapping
    """
    if not config_path:
        return {}

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a mapping at the top level")
    return data


def load_env_overrides() -> dict[str, Any]:
    """Load overrides from environment variables.

    Supported variables:
        SKILLDECK_ROOT: overrides workspace.root
        SKILLDECK_LOG_LEVEL: overrides logging.level
        SKILLDECK_STRICT: overrides lint.warnings_as_errors

    Returns:
        Dictionary with overrides from env vars
    """
    overrides: dict[str, Any] = {}

    if root := os.environ.get("SKILLDECK_ROOT"):
        overrides.setdefault("workspace", {})["root"] = root

    if log_level := os.environ.get("SKILLDECK_LOG_LEVEL"):
        overrides.setdefault("logging", {})["level"] = log_level.lower()

    if strict := os.environ.get("SKILLDECK_STRICT"):
        overrides.setdefault("lint", {})["warnings_as_errors"] = strict.lower() in _TRUTHY

    return overrides


def apply_cli_overrides(config_dict: dict[str, Any], cli_args: dict[str, Any]) -> dict[str, Any]:
    """Apply overrides from CLI arguments.

    Args:
        config_dict: Base configuration (already merged with YAML and env)
        cli_args: Dictionary with CLI arguments

    Returns:
        Configuration with CLI overrides applied
    """
    overrides: dict[str, Any] = {}

    if cli_args.get("root"):
        overrides.setdefault("workspace", {})["root"] = cli_args["root"]

    if cli_args.get("log_level"):
        overrides.setdefault("logging", {})["level"] = cli_args["log_level"]

    if cli_args.get("log_file"):
        overrides.setdefault("logging", {})["file"] = cli_args["log_file"]

    if cli_args.get("verbose") is not None:
        overrides.setdefault("logging", {})["verbose"] = cli_args["verbose"]

    if cli_args.get("strict"):
        overrides.setdefault("lint", {})["warnings_as_errors"] = True

    if cli_args.get("no_links"):
        overrides.setdefault("lint", {})["check_links"] = False

    # --disable adds to the configured list instead of replacing it
    if cli_args.get("disable"):
        configured = config_dict.get("lint", {}).get("disabled_rules", [])
        overrides.setdefault("lint", {})["disabled_rules"] = list(
            dict.fromkeys([*configured, *cli_args["disable"]])
        )

    return deep_merge(config_dict, overrides)


def _discover_config(cli_args: dict[str, Any]) -> Path | None:
    """Find .skilldeck.yaml at the corpus root when no -c was given."""
    root = cli_args.get("root") or os.environ.get("SKILLDECK_ROOT") or "."
    candidate = Path(root) / DEFAULT_CONFIG_NAME
    return candidate if candidate.is_file() else None


def load_config(
    config_path: Path | None = None,
    cli_args: dict[str, Any] | None = None,
) -> AppConfig:
    """Load and validate the complete application configuration.

    Loading process:
    1. Pydantic defaults
    2. Merge with YAML (explicit path or discovered at the corpus root)
    3. Merge with env vars
    4. Merge with CLI args
    5. Validate with Pydantic

    Args:
        config_path: Path to the YAML configuration file
        cli_args: Dictionary with CLI arguments

    Returns:
        Validated, complete AppConfig

    Raises:
        FileNotFoundError: If config_path does not exist
        ConfigError: If the YAML cannot be parsed
        ValidationError: If the final configuration is invalid
    """
    cli_args = cli_args or {}

    if config_path is None:
        config_path = _discover_config(cli_args)

    yaml_config = load_yaml_config(config_path)

    env_overrides = load_env_overrides()
    merged = deep_merge(yaml_config, env_overrides)

    merged = apply_cli_overrides(merged, cli_args)

    return AppConfig(**merged)
