"""
Configuration management for tmux-worktree.

The configuration is a JSON object stored at
``~/.config/tmux-worktree-tui/config.json``::

    {"search_paths": ["~/code", "~/work"], "depth": 2}

A missing file yields the defaults. A ``depth`` that is missing or zero means 2.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from tmux_worktree.core.discovery import DEFAULT_SCAN_DEPTH, expand_tilde
from tmux_worktree.exceptions import ConfigError
from tmux_worktree.utils.io import atomic_write_json

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = "tmux-worktree-tui"
CONFIG_FILENAME = "config.json"


class Config(BaseModel):
    """Main configuration model for tmux-worktree."""

    search_paths: list[str] = Field(
        default_factory=list,
        description="Root directories to scan for repositories (~ is expanded)",
    )
    depth: int = Field(
        default=DEFAULT_SCAN_DEPTH,
        description="Maximum directory depth below each search path",
    )

    @field_validator("depth", mode="before")
    @classmethod
    def _default_depth(cls, value):
        if value is None or value == 0:
            return DEFAULT_SCAN_DEPTH
        return value

    @field_validator("depth")
    @classmethod
    def _non_negative_depth(cls, value: int) -> int:
        if value < 0:
            raise ValueError(f"depth must not be negative, got {value}")
        return value

    def expanded_search_paths(self) -> list[str]:
        """Search paths with a leading ~ expanded."""
        return [expand_tilde(p) for p in self.search_paths]


def get_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".config" / CONFIG_DIR_NAME / CONFIG_FILENAME


def load_config(config_path: Optional[str | Path] = None) -> Config:
    """
    Load configuration from file or use defaults.

    Args:
        config_path: Optional explicit path to the config file.

    Returns:
        Config instance with loaded or default values.

    Raises:
        ConfigError: If the file exists but is not a valid configuration.
    """
    path = Path(config_path) if config_path else get_config_path()

    if not path.exists():
        logger.debug(f"No config file at {path}, using defaults")
        return Config()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Failed to read config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must contain a JSON object")

    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {path}: {e}") from e


def save_config(config: Config, config_path: Optional[str | Path] = None) -> Path:
    """
    Save configuration as indented JSON.

    Args:
        config: Configuration to save.
        config_path: Destination. Defaults to :func:`get_config_path`.

    Returns:
        The path written.
    """
    path = Path(config_path) if config_path else get_config_path()
    return atomic_write_json(path, config.model_dump())
