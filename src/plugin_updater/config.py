"""
Configuration management for the plugin updater.

This module implements the AppConfig Pydantic model and configuration loading.

Configuration is loaded from multiple sources with layered precedence:
1. Built-in defaults (Pydantic model defaults)
2. YAML config file (--config path)
3. Environment variables (PLUGIN_UPDATER_* prefix, __ for nesting)
4. Command-line arguments (highest precedence)
"""

from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_REGISTRY_URL = "https://api.spiget.org/v2"


def _numeric_to_str(v: Any) -> Any:
    """Accept numbers from YAML or the environment for string fields."""
    if isinstance(v, int | float) and not isinstance(v, bool):
        return str(v)
    return v

# =============================================================================
# Registry Configuration
# =============================================================================


class RegistryConfig(BaseModel):
    """Remote resource registry settings.

    Attributes:
        base_url: Base URL of the registry API.
        connect_timeout: Connect timeout in seconds.
        read_timeout: Read timeout in seconds.
        user_agent_suffix: Appended to the host name to build the User-Agent.
    """

    base_url: str = Field(
        default=DEFAULT_REGISTRY_URL,
        description="Base URL of the registry API",
    )
    connect_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Connect timeout in seconds",
    )
    read_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Read timeout in seconds",
    )
    user_agent_suffix: str = Field(
        default="-Updater",
        description="Suffix appended to the host name in the User-Agent header",
    )

    @field_validator("base_url", "user_agent_suffix", mode="before")
    @classmethod
    def coerce_numeric(cls, v: Any) -> Any:
        return _numeric_to_str(v)

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the base URL so endpoint paths can be appended."""
        return v.rstrip("/")


# =============================================================================
# Updater Configuration
# =============================================================================


class UpdaterConfig(BaseModel):
    """Artifact and filesystem settings.

    Attributes:
        resource_id: Registry key of the artifact.
        artifact_name: Artifact name, used as the file name prefix.
        current_version: Version of the installed artifact.
        auto_update: Download a newer version as soon as it is found.
        data_dir: Host data directory; staging lives below it.
        install_dir: Directory holding the installed artifacts.
        artifact_extension: File extension of artifact files.
        staging_dir_name: Name of the staging directory below data_dir.
    """

    resource_id: int | str | None = Field(
        default=None,
        description="Registry key of the artifact (e.g., Spiget resource id)",
    )
    artifact_name: str = Field(
        default="",
        description="Artifact name, used as the file name prefix",
    )
    current_version: str = Field(
        default="",
        description="Version of the installed artifact",
    )
    auto_update: bool = Field(
        default=True,
        description="Download a newer version as soon as it is found",
    )
    data_dir: str = Field(
        default=".",
        description="Host data directory",
    )
    install_dir: str = Field(
        default="plugins",
        description="Directory holding the installed artifacts",
    )
    artifact_extension: str = Field(
        default=".jar",
        description="File extension of artifact files",
    )
    staging_dir_name: str = Field(
        default="AutoUpdater",
        description="Name of the staging directory below data_dir",
    )

    @field_validator(
        "artifact_name",
        "current_version",
        "data_dir",
        "install_dir",
        "staging_dir_name",
        mode="before",
    )
    @classmethod
    def coerce_numeric(cls, v: Any) -> Any:
        """Accept numeric names, versions and paths as strings."""
        return _numeric_to_str(v)

    @field_validator("artifact_extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        """Validate that the extension starts with a dot."""
        if not v.startswith(".") or len(v) < 2:
            raise ValueError(
                f"Invalid artifact extension: {v!r}. Must start with '.' (e.g., '.jar')"
            )
        return v.lower()

    @field_validator("staging_dir_name")
    @classmethod
    def validate_staging_dir_name(cls, v: str) -> str:
        """Validate that the staging directory is a single path component."""
        if not v or "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"Invalid staging directory name: {v!r}")
        return v


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level.
        json_format: Emit JSON log lines instead of plain text.
        stream: Console stream for log lines: stdout, stderr or none.
        file: Optional log file, appended to.
    """

    level: str = Field(
        default="info",
        description="Log level: debug, info, warn, error",
    )
    json_format: bool = Field(
        default=True,
        description="Emit JSON log lines instead of plain text",
    )
    stream: str = Field(
        default="stdout",
        description="Console stream for log lines: stdout, stderr or none",
    )
    file: str | None = Field(
        default=None,
        description="Optional log file, appended to",
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"debug", "info", "warn", "warning", "error", "critical"}
        v_lower = v.lower()
        if v_lower not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(sorted(valid_levels))}"
            )
        # Normalize 'warn' to 'warning'
        if v_lower == "warn":
            return "warning"
        return v_lower

    @field_validator("file", mode="before")
    @classmethod
    def coerce_numeric(cls, v: Any) -> Any:
        return _numeric_to_str(v)

    @field_validator("stream")
    @classmethod
    def validate_stream(cls, v: str) -> str:
        """Validate the console stream name."""
        v_lower = v.lower()
        if v_lower not in {"stdout", "stderr", "none"}:
            raise ValueError(
                f"Invalid log stream: {v}. Must be one of: none, stderr, stdout"
            )
        return v_lower


# =============================================================================
# Main Application Configuration
# =============================================================================


class AppConfig(BaseModel):
    """
    Main application configuration model.

    Built from multiple layers following the precedence rules:
    1. Built-in defaults (defined in this model)
    2. YAML config file
    3. Environment variables (PLUGIN_UPDATER_* prefix)
    4. Command-line arguments

    Attributes:
        registry: Registry settings.
        updater: Artifact and filesystem settings.
        logging: Logging configuration.
    """

    registry: RegistryConfig = Field(
        default_factory=RegistryConfig,
        description="Registry settings",
    )
    updater: UpdaterConfig = Field(
        default_factory=UpdaterConfig,
        description="Artifact and filesystem settings",
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration",
    )


# =============================================================================
# Configuration Loading Functions
# =============================================================================


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Args:
        base: The base dictionary.
        override: The dictionary with values to override.

    Returns:
        A new dictionary with merged values.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _load_yaml_config(config_path: Path) -> dict[str, Any]:
    """
    Load configuration from a YAML file.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        yaml.YAMLError: If the YAML is invalid.
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


def _parse_env_value(value: str) -> Any:
    """
    Parse an environment variable value to an appropriate Python type.

    Only booleans and integers are converted; version strings such as
    "1.10" must stay strings, so floats are not parsed.
    """
    if value.lower() in ("true", "yes", "on"):
        return True
    if value.lower() in ("false", "no", "off"):
        return False

    try:
        return int(value)
    except ValueError:
        pass

    return value


def _load_env_config(prefix: str = "PLUGIN_UPDATER_") -> dict[str, Any]:
    """
    Load configuration from environment variables.

    Environment variables are parsed with the following rules:
    - Prefix: PLUGIN_UPDATER_ (configurable)
    - Nested keys: Double underscore (__) separator
    - Example: PLUGIN_UPDATER_UPDATER__RESOURCE_ID=12345

    Args:
        prefix: Environment variable prefix.

    Returns:
        Dictionary with configuration values.
    """
    result: dict[str, Any] = {}

    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue

        config_key = key[len(prefix) :].lower()
        parts = config_key.split("__")

        current = result
        for part in parts[:-1]:
            if part not in current:
                current[part] = {}
            current = current[part]

        current[parts[-1]] = _parse_env_value(value)

    return result


def build_arg_parser() -> argparse.ArgumentParser:
    """Build the command-line parser shared by config loading and the CLI."""
    parser = argparse.ArgumentParser(
        prog="plugin-updater",
        description="Check a plugin registry for updates and stage them for install",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Path to configuration file",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error"],
        help="Override log level",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument("--log-file", type=str, help="Append log lines to this file")
    parser.add_argument("--resource-id", type=str, help="Registry resource id")
    parser.add_argument("--name", type=str, help="Artifact name")
    parser.add_argument("--current-version", type=str, help="Installed version")
    parser.add_argument("--data-dir", type=str, help="Host data directory")
    parser.add_argument("--install-dir", type=str, help="Installation directory")
    parser.add_argument(
        "--no-auto-update",
        action="store_true",
        help="Only check; do not download a newer version",
    )
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Move a downloaded update into the installation directory right away",
    )

    return parser


def _parse_cli_args(args: list[str] | None = None) -> dict[str, Any]:
    """
    Parse command-line arguments into a configuration override dictionary.

    Args:
        args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Dictionary with parsed arguments. The config file path is returned
        under the "_config_path" key and the apply flag under "_apply".
    """
    parsed = build_arg_parser().parse_args(args)

    result: dict[str, Any] = {}

    if parsed.config:
        result["_config_path"] = parsed.config
    if parsed.apply:
        result["_apply"] = True

    if parsed.log_level:
        result["logging"] = {"level": parsed.log_level}

    if parsed.debug:
        result.setdefault("logging", {})["level"] = "debug"

    if parsed.log_file:
        result.setdefault("logging", {})["file"] = parsed.log_file

    updater: dict[str, Any] = {}
    if parsed.resource_id:
        updater["resource_id"] = parsed.resource_id
    if parsed.name:
        updater["artifact_name"] = parsed.name
    if parsed.current_version:
        updater["current_version"] = parsed.current_version
    if parsed.data_dir:
        updater["data_dir"] = parsed.data_dir
    if parsed.install_dir:
        updater["install_dir"] = parsed.install_dir
    if parsed.no_auto_update:
        updater["auto_update"] = False
    if updater:
        result["updater"] = updater

    return result


def load_config(
    config_path: Path | str | None = None,
    env_prefix: str = "PLUGIN_UPDATER_",
    cli_args: list[str] | None = None,
) -> AppConfig:
    """
    Load configuration from all sources with layered precedence.

    Configuration is loaded from multiple sources in order:
    1. Built-in defaults (from AppConfig model)
    2. YAML config file (if specified)
    3. Environment variables (PLUGIN_UPDATER_* prefix)
    4. Command-line arguments

    Later sources override earlier ones.

    Args:
        config_path: Path to YAML configuration file. If None, uses the CLI
            --config argument when given.
        env_prefix: Prefix for environment variables.
        cli_args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Fully configured AppConfig instance.

    Raises:
        FileNotFoundError: If specified config file doesn't exist.
        ValidationError: If configuration is invalid.

    Example:
        >>> config = load_config(cli_args=["--resource-id", "12345"])
        >>> config.registry.base_url
        'https://api.spiget.org/v2'
    """
    config_dict: dict[str, Any] = {}

    cli_config = _parse_cli_args(cli_args)
    cli_config.pop("_apply", None)

    if config_path is None:
        if "_config_path" in cli_config:
            config_path = Path(cli_config.pop("_config_path"))
    else:
        cli_config.pop("_config_path", None)
        if isinstance(config_path, str):
            config_path = Path(config_path)

    if config_path is not None:
        yaml_config = _load_yaml_config(config_path)
        config_dict = _deep_merge(config_dict, yaml_config)

    env_config = _load_env_config(env_prefix)
    config_dict = _deep_merge(config_dict, env_config)

    config_dict = _deep_merge(config_dict, cli_config)

    return AppConfig(**config_dict)
