"""
config_manager.py: module for managing multiple configuration sources
"""
import logging
import os
from pathlib import Path
import yaml
from dotenv import dotenv_values
from typing import Dict, Any, Optional
from enum import Enum

logger = logging.getLogger(__name__)

class ConfigSource(Enum):
    """Enumeration of configuration sources"""
    DEFAULTS = "defaults"
    GLOBAL_CONFIG = "global_config"  # ~/.config/podlab/config.yaml
    PROJECT_CONFIG = "project_config"  # ./podlab.yaml or ./.podlab.yaml
    DOTENV = "dotenv"  # .env file in current directory
    ENVIRONMENT = "environment"  # PODLAB_* environment variables
    COMMAND_LINE = "command_line"  # Command line arguments

# PODLAB_* variable -> config key
ENV_MAPPING = {
    "PODLAB_KUBECTL": "kubectl",
    "PODLAB_NAMESPACE": "namespace",
    "PODLAB_DEFAULT_NODE_IMAGE": "default_node_image",
    "PODLAB_POLL_INTERVAL": "poll_interval",
    "PODLAB_STABILITY_THRESHOLD": "stability_threshold",
    "PODLAB_PROVISION_TIMEOUT": "provision_timeout",
    "PODLAB_DELETE_GRACE_PERIOD": "delete_grace_period",
    "PODLAB_FATAL_STATUSES": "fatal_statuses",
    "PODLAB_LOG_LEVEL": "log_level",
}

class ConfigManager:
    """
    ConfigManager: class that manages multiple configuration sources with priority order
    """

    def __init__(self, cwd: Optional[Path] = None, home: Optional[Path] = None):
        self.cwd = cwd or Path.cwd()
        self.home = home or Path.home()
        self.config_data: Dict[str, Any] = {}
        self.command_line: Dict[str, Any] = {}
        self.priority_order = [
            ConfigSource.DEFAULTS,
            ConfigSource.GLOBAL_CONFIG,
            ConfigSource.PROJECT_CONFIG,
            ConfigSource.DOTENV,
            ConfigSource.ENVIRONMENT,
            ConfigSource.COMMAND_LINE
        ]

    @property
    def global_config_path(self) -> Path:
        return self.home / ".config" / "podlab" / "config.yaml"

    def load_config(self, config_source: ConfigSource = None):
        """
        Load configuration from specified source or use default priority order
        """
        if config_source is not None:
            return self._load_single_source(config_source)
        else:
            return self._load_with_priority()

    def _load_with_priority(self):
        """Load configuration following priority order"""
        self.config_data = {}
        for source in self.priority_order:
            source_config = self._load_single_source(source)
            if source_config:
                self._merge_config(self.config_data, source_config)

        return self.config_data

    def _load_single_source(self, source: ConfigSource):
        """Load configuration from a single source"""
        if source == ConfigSource.DEFAULTS:
            return self._get_defaults()

        elif source == ConfigSource.GLOBAL_CONFIG:
            return self._load_yaml(self.global_config_path)

        elif source == ConfigSource.PROJECT_CONFIG:
            return self._load_project_config()

        elif source == ConfigSource.DOTENV:
            return self._load_dotenv_config()

        elif source == ConfigSource.ENVIRONMENT:
            return self._map_env(os.environ)

        elif source == ConfigSource.COMMAND_LINE:
            return dict(self.command_line)

        return None

    def _get_defaults(self):
        """Get default configuration values"""
        return {
            "kubectl": "kubectl",
            "namespace": None,
            "default_node_image": "kindest/node:v1.27.3",
            "poll_interval": 1.0,
            "stability_threshold": 10,
            "provision_timeout": 300,
            "delete_grace_period": 1,
            "fatal_statuses": None,
            "log_level": "WARNING",
        }

    def _load_yaml(self, path: Path):
        """Load a YAML mapping, unreadable files count as empty"""
        if not path.exists():
            return {}
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Ignoring unreadable config {path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring config {path}: not a mapping")
            return {}
        return data

    def _load_project_config(self):
        """Load project-specific config from current directory"""
        project_config_paths = [
            self.cwd / "podlab.yaml",
            self.cwd / ".podlab.yaml",
        ]

        for config_path in project_config_paths:
            if config_path.exists():
                return self._load_yaml(config_path)
        return {}

    def _load_dotenv_config(self):
        """Load PODLAB_* values from a .env file without touching os.environ"""
        dotenv_path = self.cwd / ".env"
        if not dotenv_path.exists():
            return {}
        values = {k: v for k, v in dotenv_values(dotenv_path).items() if v is not None}
        return self._map_env(values)

    def _map_env(self, environ):
        """Translate PODLAB_* variables into config keys"""
        env_config = {}
        for env_key, config_key in ENV_MAPPING.items():
            if env_key in environ:
                value = environ[env_key]
                if config_key == "fatal_statuses":
                    env_config[config_key] = [s.strip() for s in value.split(",") if s.strip()]
                else:
                    env_config[config_key] = value
        return env_config

    def _merge_config(self, base: Dict[str, Any], update: Dict[str, Any]):
        """Merge update config into base config (nested merge)"""
        for key, value in update.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def set_command_line(self, overrides: Dict[str, Any]):
        """Record command line overrides, None values are ignored"""
        self.command_line = {k: v for k, v in overrides.items() if v is not None}
