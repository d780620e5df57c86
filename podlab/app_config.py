"""
app_config.py: module for handling main podlab application configuration
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Optional
from .config_manager import ConfigManager
from .errors import ConfigError
from .readiness import FATAL_STATUSES


@dataclass(frozen=True)
class ProvisionSettings:
    """Typed view of the settings the provisioning engine needs."""
    kubectl: str = "kubectl"
    namespace: Optional[str] = None
    default_node_image: str = "kindest/node:v1.27.3"
    poll_interval: float = 1.0
    stability_threshold: int = 10
    provision_timeout: float = 300.0
    delete_grace_period: int = 1
    fatal_statuses: FrozenSet[str] = FATAL_STATUSES
    log_level: str = "WARNING"


def _number(data: Dict[str, Any], key: str, kind, minimum):
    value = data.get(key)
    try:
        number = kind(value)
    except (TypeError, ValueError):
        raise ConfigError(f"invalid value for {key}: {value!r}")
    if number < minimum:
        raise ConfigError(f"{key} must be >= {minimum}, got {number}")
    return number


def _positive(data: Dict[str, Any], key: str) -> float:
    number = _number(data, key, float, 0.0)
    if number == 0:
        raise ConfigError(f"{key} must be > 0")
    return number


class PodlabAppConfig:
    """
    PodlabAppConfig: class that encapsulates data and actions for configuring
    the main podlab application
    """
    def __init__(self, config_manager: Optional[ConfigManager] = None):
        self.data: Dict[str, Any] = {}
        self.config_manager = config_manager or ConfigManager()

    def load(self, overrides: Optional[Dict[str, Any]] = None):
        """Load app config following priority order"""
        if overrides:
            self.config_manager.set_command_line(overrides)
        self.data = self.config_manager.load_config()
        return self

    def settings(self) -> ProvisionSettings:
        """Validate loaded values and return them as ProvisionSettings"""
        data = self.data
        statuses = data.get("fatal_statuses")
        if statuses is None:
            fatal_statuses = FATAL_STATUSES
        elif isinstance(statuses, (list, tuple, set, frozenset)):
            fatal_statuses = frozenset(str(s) for s in statuses)
        else:
            raise ConfigError(f"fatal_statuses must be a list, got {statuses!r}")

        log_level = str(data.get("log_level") or "WARNING").upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ConfigError(f"unknown log_level: {log_level!r}")

        return ProvisionSettings(
            kubectl=str(data.get("kubectl") or "kubectl"),
            namespace=data.get("namespace") or None,
            default_node_image=str(data.get("default_node_image") or ProvisionSettings.default_node_image),
            poll_interval=_positive(data, "poll_interval"),
            stability_threshold=_number(data, "stability_threshold", int, 1),
            provision_timeout=_positive(data, "provision_timeout"),
            delete_grace_period=_number(data, "delete_grace_period", int, 0),
            fatal_statuses=fatal_statuses,
            log_level=log_level,
        )
