"""Configuration module for repopush.

This module provides access to user configuration stored in one of these locations:
1. $REPOPUSH_CONFIG_DIR/repopushrc if $REPOPUSH_CONFIG_DIR is defined
2. $XDG_CONFIG_HOME/repopush/repopushrc if $XDG_CONFIG_HOME is defined
3. $HOME/.repopushrc

The configuration is stored in TOML format.
"""

import copy
import os
import sys
from pathlib import Path
from typing import Any

import tomli

__all__ = [
    "DEFAULT_GITIGNORE_PATTERNS",
    "get_config_path",
    "load_config",
    "get_logger_verbosity",
    "get_logger_path",
    "get_git_defaults",
    "get_identity",
    "get_gitignore_patterns",
]

DEFAULT_GITIGNORE_PATTERNS = [
    "__pycache__/",
    "*.py[cod]",
    ".env",
    ".venv/",
    "venv/",
    "*.log",
    ".DS_Store",
]

# Default configuration values
DEFAULT_CONFIG: dict[str, Any] = {
    "logger": {
        "verbosity": "INFO",
        "path": str(Path.home() / ".repopush"),
    },
    "git": {
        "host": "github.com",
        "remote": "origin",
        "branch": "main",
        "commit_message": "Initial commit",
    },
    "identity": {
        "name": "",
        "email": "",
    },
    "gitignore": {
        "patterns": DEFAULT_GITIGNORE_PATTERNS,
    },
}


def get_config_path() -> Path:
    """Return the path to the user's config file.

    Checks the following locations in order:
    1. $REPOPUSH_CONFIG_DIR/repopushrc if $REPOPUSH_CONFIG_DIR is defined
    2. $XDG_CONFIG_HOME/repopush/repopushrc if $XDG_CONFIG_HOME is defined
    3. Fallback to $HOME/.repopushrc

    Returns:
        Path to the config file
    """
    if "REPOPUSH_CONFIG_DIR" in os.environ:
        path = Path(os.environ["REPOPUSH_CONFIG_DIR"]) / "repopushrc"
        if path.exists():
            return path

    if "XDG_CONFIG_HOME" in os.environ:
        path = Path(os.environ["XDG_CONFIG_HOME"]) / "repopush" / "repopushrc"
        if path.exists():
            return path

    return Path.home() / ".repopushrc"


def load_config() -> dict[str, Any]:
    """Load configuration from the config file.

    Returns:
        Dict containing the merged configuration (defaults + user config).
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    config_path = get_config_path()

    if config_path.exists():
        try:
            with open(config_path, "rb") as f:
                user_config = tomli.load(f)

            _merge_configs(config, user_config)
        except (OSError, tomli.TOMLDecodeError) as e:
            print(f"Error loading config from {config_path}: {e}", file=sys.stderr)

    return config


def _merge_configs(base: dict[str, Any], override: dict[str, Any]) -> None:
    """Recursively merge override dict into base dict.

    Args:
        base: The base configuration dictionary to merge into.
        override: The override configuration dictionary to merge from.

    """
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            nested_value: dict[str, Any] = value
            _merge_configs(base[key], nested_value)
        else:
            base[key] = value


def get_logger_verbosity() -> str:
    """Get the configured logger verbosity level.

    Returns:
        String representing the logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).

    """
    config = load_config()
    return config["logger"]["verbosity"]


def get_logger_path() -> str:
    """Get the configured logger path, with ~ expanded."""
    config = load_config()
    return os.path.expanduser(config["logger"]["path"])


def get_git_defaults() -> dict[str, str]:
    """Get the [git] table: host, remote, branch and commit_message."""
    config = load_config()
    return dict(config["git"])


def get_identity() -> tuple[str | None, str | None]:
    """Get the fallback commit identity as (name, email); empty values become None."""
    config = load_config()
    identity = config["identity"]
    return identity.get("name") or None, identity.get("email") or None


def get_gitignore_patterns() -> list[str]:
    config = load_config()
    return list(config["gitignore"]["patterns"])
