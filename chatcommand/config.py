"""Configuration management for chatcommand.

Loads YAML settings (settings.yaml) and environment variables (.env)
into a Config object. Property getters provide safe access with
defaults for the dispatch prefix, the dispatch log channel and the
logging subsystem.

Example settings.yaml::

    command_prefix: "!"
    logging:
      channel: mybot.commands
      level: DEBUG
      subsystem_levels:
        dispatch: INFO

Key classes:
    Config: Central configuration manager.

Key functions:
    get_config: Singleton accessor for the global Config instance.
"""

import os
from pathlib import Path
from typing import Optional

import structlog
import yaml
from dotenv import load_dotenv

from .exceptions import ConfigurationError
from .logging_config import resolve_level

logger = structlog.get_logger("chatcommand.config")

DEFAULT_PREFIX = "!"
DEFAULT_LOG_CHANNEL = "chatcommand.dispatch"


class Config:
    """Central configuration manager for chatcommand.

    Args:
        config_dir: Directory holding settings.yaml and .env. Defaults
            to ``<repo_root>/config/``.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        if config_dir is None:
            config_dir = Path(__file__).parent.parent / "config"
        self.config_dir = Path(config_dir)

        env_file = self.config_dir / ".env"
        if env_file.exists():
            load_dotenv(env_file)

        self.settings = self._load_yaml("settings.yaml")

    def _load_yaml(self, filename: str) -> dict:
        """Load a YAML configuration file."""
        filepath = self.config_dir / filename
        if not filepath.exists():
            return {}
        with open(filepath, "r") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(
                    f"Cannot parse {filename}", file=str(filepath)
                ) from e
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"{filename} must contain a mapping", file=str(filepath)
            )
        return data

    @property
    def command_prefix(self) -> str:
        """Prefix that marks a chat line as a command. Env var CHATCOMMAND_PREFIX takes precedence."""
        env_prefix = os.environ.get("CHATCOMMAND_PREFIX")
        if env_prefix is not None:
            return env_prefix
        return self.settings.get("command_prefix", DEFAULT_PREFIX)

    @property
    def log_channel(self) -> str:
        """Logger name used for "Executing"/"Could not execute" entries."""
        log_config = self.settings.get("logging", {})
        return log_config.get("channel", DEFAULT_LOG_CHANNEL)

    @property
    def log_dir(self) -> Path:
        """Get log directory path."""
        configured = self.settings.get("log_dir")
        if configured:
            return Path(configured).expanduser()
        return Path(__file__).parent.parent / "logs"

    @property
    def logging_level(self) -> str:
        """Global log level (default INFO). Env var CHATCOMMAND_LOG_LEVEL takes precedence."""
        env_level = os.environ.get("CHATCOMMAND_LOG_LEVEL")
        if env_level:
            return env_level
        log_config = self.settings.get("logging", {})
        return log_config.get("level", "INFO")

    @property
    def logging_subsystem_levels(self) -> dict:
        """Per-subsystem log level overrides. E.g. {"dispatch": "DEBUG"}."""
        log_config = self.settings.get("logging", {})
        return log_config.get("subsystem_levels", {})

    @property
    def logging_max_file_size_mb(self) -> int:
        """Max size per log file in MB before rotation (default 10)."""
        log_config = self.settings.get("logging", {})
        return log_config.get("max_file_size_mb", 10)

    @property
    def logging_backup_count(self) -> int:
        """Number of rotated log files to keep (default 5)."""
        log_config = self.settings.get("logging", {})
        return log_config.get("backup_count", 5)

    def validate(self):
        """Validate settings at startup.

        Raises:
            ConfigurationError: On the first invalid setting found.
        """
        prefix = self.command_prefix
        if not isinstance(prefix, str) or any(c.isspace() for c in prefix):
            logger.error("config_invalid_value", key="command_prefix", value=prefix)
            raise ConfigurationError(
                "command_prefix must be a string without whitespace",
                setting_name="command_prefix",
            )

        level = self.logging_level
        if resolve_level(level) is None:
            logger.error("config_invalid_value", key="logging.level", value=level)
            raise ConfigurationError(
                f"Unknown log level: {level}", setting_name="logging.level"
            )

        subsystem_levels = self.logging_subsystem_levels
        if not isinstance(subsystem_levels, dict):
            logger.error(
                "config_invalid_value",
                key="logging.subsystem_levels",
                value=subsystem_levels,
            )
            raise ConfigurationError(
                "logging.subsystem_levels must be a mapping",
                setting_name="logging.subsystem_levels",
            )
        for subsystem, sub_level in subsystem_levels.items():
            if resolve_level(sub_level) is None:
                key = f"logging.subsystem_levels.{subsystem}"
                logger.error("config_invalid_value", key=key, value=sub_level)
                raise ConfigurationError(
                    f"Unknown log level for {subsystem}: {sub_level}",
                    setting_name=key,
                )

        channel = self.log_channel
        if not isinstance(channel, str) or not channel:
            logger.error("config_invalid_value", key="logging.channel", value=channel)
            raise ConfigurationError(
                "logging.channel must be a non-empty string",
                setting_name="logging.channel",
            )


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config
