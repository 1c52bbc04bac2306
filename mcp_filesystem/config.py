from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Literal

import yaml
from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mcp_filesystem.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "config.yaml"

Transport = Literal["stdio", "sse", "http", "api"]


def expand_env_vars(config_str: str) -> str:
    """
    Expand environment variables in the format ${VAR_NAME} within a YAML string.
    Skips expansion in YAML comments (lines starting with #).

    Args:
        config_str: YAML configuration string potentially containing ${VAR_NAME} placeholders

    Returns:
        YAML string with all ${VAR_NAME} placeholders expanded to environment variable values

    Raises:
        KeyError: If a referenced environment variable is not set
    """
    def replace_var(match: re.Match[str]) -> str:
        var_name = match.group(1)
        try:
            return os.environ[var_name]
        except KeyError:
            msg = f"Environment variable '{var_name}' referenced in config file but not set"
            raise KeyError(msg) from None

    lines = []
    for line in config_str.split("\n"):
        stripped = line.lstrip()
        if stripped.startswith("#"):
            lines.append(line)
        else:
            lines.append(re.sub(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}", replace_var, line))

    return "\n".join(lines)


def resolve_config_path(config_path: str | None = None) -> Path | None:
    """
    Pick the configuration file to load.

    Precedence: explicit argument, CONFIG_PATH environment variable,
    ./config.yaml when it exists. Returns None when no file applies
    (settings then come from defaults and environment only).

    Raises:
        ConfigurationError: If an explicitly requested file does not exist
    """
    explicit = config_path or os.environ.get("CONFIG_PATH")
    if explicit:
        path = Path(explicit)
        if not path.exists():
            msg = f"Configuration file not found at {explicit}"
            raise ConfigurationError(msg, context={"config_file": explicit})
        return path

    default = Path(DEFAULT_CONFIG_FILE)
    return default if default.exists() else None


def load_config_from_yaml(config_file: Path) -> dict:
    """
    Load YAML configuration file and expand environment variables.

    Args:
        config_file: Path to the YAML configuration file

    Returns:
        Dictionary containing parsed configuration

    Raises:
        ConfigurationError: If the file is unreadable, invalid, or references unset variables
    """
    try:
        config_str = config_file.read_text(encoding="utf-8")
    except OSError as e:
        msg = f"Cannot read configuration file: {e}"
        raise ConfigurationError(msg, context={"config_file": str(config_file)}) from e

    try:
        expanded_config = expand_env_vars(config_str)
    except KeyError as e:
        msg = f"Error expanding environment variables in {config_file.name}: {e}"
        raise ConfigurationError(msg, context={"config_file": str(config_file)}) from None

    try:
        config_dict = yaml.safe_load(expanded_config)
    except yaml.YAMLError as e:
        msg = f"Invalid YAML in {config_file.name}: {e}"
        raise ConfigurationError(msg, context={"config_file": str(config_file)}) from None

    if config_dict is None:
        return {}

    if not isinstance(config_dict, dict):
        msg = f"{config_file.name} must contain a YAML mapping/dictionary at root level"
        raise ConfigurationError(msg, context={"config_file": str(config_file)})

    return config_dict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="MCP_FS_",
        env_file=None,
        case_sensitive=False,
    )

    # Server
    server_name: str = "mcp-filesystem"
    transport: Transport = "stdio"
    host: str = "127.0.0.1"
    port: int = 8787

    # Security
    auth_token: str | None = None  # Required only for the HTTP API transport

    # Filesystem confinement (None = paths are used as given)
    root_path: str | None = None

    # Observability
    log_level: str = "INFO"
    log_json: bool = True

    @field_validator("log_level", mode="after")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the logging level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            msg = f"Unknown log level: {v}"
            raise ValueError(msg)
        return level

    @field_validator("root_path", mode="after")
    @classmethod
    def validate_root_path(cls, v: str | None) -> str | None:
        """Require the confinement root to be an existing directory."""
        if v is None:
            return v
        if not Path(v).is_dir():
            msg = f"filesystem.root must be an existing directory: {v}"
            raise ValueError(msg)
        return v

    def validate_api_config(self) -> None:
        """Refuse to expose the HTTP API without a bearer token."""
        if not self.auth_token:
            msg = (
                "The HTTP API requires auth.token to be set.\n"
                "Set auth.token in the config file or the MCP_FS_AUTH_TOKEN environment variable."
            )
            raise ConfigurationError(msg, context={"field": "auth.token"})


def _flatten_config(config_dict: dict) -> dict[str, object]:
    """Flatten the nested YAML layout into Settings field names."""
    flat_config: dict[str, object] = {}

    server = config_dict.get("server")
    if isinstance(server, dict):
        for key in ("transport", "host", "port"):
            if key in server:
                flat_config[key] = server[key]
        if "name" in server:
            flat_config["server_name"] = server["name"]

    auth = config_dict.get("auth")
    if isinstance(auth, dict) and auth.get("token"):
        flat_config["auth_token"] = auth["token"]

    filesystem = config_dict.get("filesystem")
    if isinstance(filesystem, dict) and filesystem.get("root"):
        flat_config["root_path"] = filesystem["root"]

    logging_section = config_dict.get("logging")
    if isinstance(logging_section, dict):
        if "level" in logging_section:
            flat_config["log_level"] = logging_section["level"]
        if "json" in logging_section:
            flat_config["log_json"] = logging_section["json"]

    return flat_config


def load_settings(config_path: str | None = None, **overrides: object) -> Settings:
    """
    Build Settings from the config file, environment variables and overrides.

    Values from the YAML file take precedence over MCP_FS_* environment
    variables; explicit keyword overrides (e.g. CLI flags) win over both.

    Raises:
        ConfigurationError: If the file or the resulting settings are invalid
    """
    config_file = resolve_config_path(config_path)
    flat_config = _flatten_config(load_config_from_yaml(config_file)) if config_file else {}
    flat_config.update({key: value for key, value in overrides.items() if value is not None})

    try:
        settings = Settings(**flat_config)
    except ValidationError as e:
        msg = f"Configuration validation error: {e}"
        raise ConfigurationError(
            msg,
            context={"config_file": str(config_file) if config_file else None},
        ) from e

    logger.debug(
        "Settings loaded",
        extra={
            "config_file": str(config_file) if config_file else None,
            "transport": settings.transport,
            "root_path": settings.root_path,
        },
    )
    return settings


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the process-wide Settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def set_settings(settings: Settings | None) -> None:
    """Install (or clear, with None) the process-wide Settings."""
    global _settings
    _settings = settings
