"""
bootstrap/config.py - Application configuration

Provides configuration loading from files, environment variables, and
defaults. Command-line options override everything loaded here.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from pathlib import Path
import os
import json
import logging

from kernelhost.errors import InvalidConfigError

logger = logging.getLogger("bootstrap.config")

CONFIG_ENV_VAR = "KERNELHOST_CONFIG"
DEFAULT_CONFIG_PATHS = ("./kernelhost.json",)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: Optional[str] = None  # None: per-command default
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_file: Optional[str] = None
    json_logs: bool = False

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        return cls(
            level=os.getenv("KERNELHOST_LOG_LEVEL"),
            format=os.getenv("KERNELHOST_LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
            log_file=os.getenv("KERNELHOST_LOG_FILE"),
            json_logs=_env_flag("KERNELHOST_JSON_LOGS"),
        )


@dataclass
class InstallConfig:
    """Kernel spec registration settings."""

    jupyter_command: str = "jupyter"
    user: bool = False
    prefix: Optional[str] = None

    @classmethod
    def from_env(cls) -> "InstallConfig":
        return cls(
            jupyter_command=os.getenv("KERNELHOST_JUPYTER", "jupyter"),
            user=_env_flag("KERNELHOST_INSTALL_USER"),
            prefix=os.getenv("KERNELHOST_INSTALL_PREFIX"),
        )


@dataclass
class KernelHostConfig:
    """Root configuration for kernel applications."""

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    install: InstallConfig = field(default_factory=InstallConfig)

    # Additional settings
    settings: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> "KernelHostConfig":
        """Create configuration from environment variables."""
        return cls(
            logging=LoggingConfig.from_env(),
            install=InstallConfig.from_env(),
        )

    @classmethod
    def from_file(cls, filepath: str) -> "KernelHostConfig":
        """Load configuration from JSON file, layered over the environment."""
        path = Path(filepath)
        if not path.exists():
            logger.warning(f"Config file not found: {filepath}, using environment")
            return cls.from_env()

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise InvalidConfigError(f"Could not load config file {filepath}: {e}", path=str(path)) from e

        if not isinstance(data, dict):
            raise InvalidConfigError(f"Config file {filepath} must contain a JSON object", path=str(path))

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "KernelHostConfig":
        config = cls.from_env()

        for section in ("logging", "install", "settings"):
            if not isinstance(data.get(section, {}), dict):
                raise InvalidConfigError(f"Config section {section!r} must be a JSON object")

        for section in ("logging", "install"):
            for key, value in data.get(section, {}).items():
                target = getattr(config, section)
                if hasattr(target, key):
                    setattr(target, key, value)
                else:
                    logger.warning(f"Ignoring unknown config key: {section}.{key}")

        if "settings" in data:
            config.settings.update(data["settings"])

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Serialize config to dictionary."""
        return {
            "logging": {
                "level": self.logging.level,
                "format": self.logging.format,
                "log_file": self.logging.log_file,
                "json_logs": self.logging.json_logs,
            },
            "install": {
                "jupyter_command": self.install.jupyter_command,
                "user": self.install.user,
                "prefix": self.install.prefix,
            },
            "settings": dict(self.settings),
        }


def load_config(filepath: str = None) -> KernelHostConfig:
    """
    Load configuration from file or environment.

    Args:
        filepath: Optional path to JSON config file; falls back to
            $KERNELHOST_CONFIG, then ./kernelhost.json

    Returns:
        KernelHostConfig instance
    """
    filepath = filepath or os.getenv(CONFIG_ENV_VAR)
    if filepath:
        return KernelHostConfig.from_file(filepath)

    for path in DEFAULT_CONFIG_PATHS:
        if Path(path).exists():
            logger.debug(f"Loading config from: {path}")
            return KernelHostConfig.from_file(path)

    return KernelHostConfig.from_env()
