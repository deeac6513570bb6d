"""Configuration loading for the Trac client."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAME = "tracflow.yaml"
USER_CONFIG_PATH = Path("~/.config/tracflow") / CONFIG_FILENAME

# Environment variable -> TracConfig attribute
ENV_OVERRIDES = {
    "TRAC_HOST": "host",
    "TRAC_PATH": "path",
    "TRAC_USER": "username",
    "TRAC_PASSWORD": "password",
}


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


def normalize_path(path: str) -> str:
    """Make sure a Trac base path starts and ends with a slash."""
    if not path.startswith("/"):
        path = "/" + path
    if not path.endswith("/"):
        path = path + "/"
    return path


@dataclass(frozen=True)
class TracConfig:
    """Connection parameters for one Trac server.

    Shared read-only by every call made against the server. ``path`` is the
    base path of the Trac environment, e.g. ``/`` or ``/trac/``.
    """

    username: str
    password: str = field(repr=False)
    host: str
    path: str = "/"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TracConfig:
        """Create config from dictionary.

        Args:
            data: Configuration mapping, typically parsed from YAML.

        Returns:
            Parsed configuration object.

        Raises:
            ConfigError: If required fields are missing or not strings.
        """
        required_fields = ["host", "username", "password"]
        missing = [f for f in required_fields if not data.get(f)]
        if missing:
            raise ConfigError(f"Missing required fields: {', '.join(missing)}")

        values = {name: data[name] for name in required_fields}
        values["path"] = data.get("path") or "/"
        wrong_type = [name for name, value in values.items() if not isinstance(value, str)]
        if wrong_type:
            raise ConfigError(f"Fields must be strings: {', '.join(wrong_type)}")

        return cls(
            username=values["username"],
            password=values["password"],
            host=values["host"],
            path=normalize_path(values["path"]),
        )


def apply_env_overrides(
    data: Mapping[str, Any], environ: Mapping[str, str] | None = None
) -> dict[str, Any]:
    """Overlay TRAC_* environment variables on a configuration mapping."""
    if environ is None:
        environ = os.environ
    merged = dict(data)
    for variable, key in ENV_OVERRIDES.items():
        value = environ.get(variable)
        if value:
            merged[key] = value
    return merged


def load_config(config_path: Path | str | None = None) -> TracConfig:
    """Load Trac configuration from a YAML file plus environment overrides.

    Args:
        config_path: Path to tracflow.yaml. When None, only the environment
                     is consulted.

    Returns:
        Parsed configuration object.

    Raises:
        ConfigError: If the file doesn't exist or is invalid, or required
                     values are missing.
    """
    data: dict[str, Any] = {}
    if config_path is not None:
        config_path = Path(config_path)

        if not config_path.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path) as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(loaded, dict):
            raise ConfigError(
                f"Configuration must be a YAML mapping, got {type(loaded).__name__}"
            )
        data = loaded

    return TracConfig.from_dict(apply_env_overrides(data))


def find_config(start_path: Path | str | None = None) -> Path | None:
    """Find tracflow.yaml by walking up the directory tree.

    Falls back to ~/.config/tracflow/tracflow.yaml.

    Args:
        start_path: Starting directory. Defaults to current directory.

    Returns:
        Path to the config file, or None if there is none.
    """
    current = Path.cwd() if start_path is None else Path(start_path)
    current = current.resolve()

    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.exists():
            return candidate
        if current.parent == current:
            break
        current = current.parent

    user_config = USER_CONFIG_PATH.expanduser()
    if user_config.exists():
        return user_config
    return None

