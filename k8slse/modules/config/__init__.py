"""
Config Module - Black Box Interface

Purpose: Application configuration management
Interface: get_config(), ConfigModule.get/set/get_all(), load_profile()
Hidden: Config sources, validation logic, environment parsing

Command line options override whatever this module loads.
"""

import os
from typing import Any, Dict

from dotenv import find_dotenv, load_dotenv

# Upper bound on concurrent remote sessions per pipeline stage.
DEFAULT_WORKERS = 16

# Configuration Contract: Required and Optional Keys
# This defines the black box interface - what the config module guarantees to provide

REQUIRED_CONFIG_KEYS = {
    "namespace": "Namespace whose containers are enumerated",
    "output": "Report format (ansi, text, html)",
    "directory": "Directory reports are written to",
    "workers": "Concurrency ceiling for each worker pool",
    "exec_timeout": "Per exec timeout in seconds",
    "kubectl": "kubectl binary used to reach the cluster",
    "log_level": "Logging level (DEBUG, INFO, WARNING, ERROR)",
}

OPTIONAL_CONFIG_KEYS = {
    "kubeconfig": {
        "description": "Path to the kubeconfig file",
        "default": None,  # kubectl falls back to ~/.kube/config
    },
    "context": {
        "description": "kubeconfig context to use",
        "default": None,
    },
    "profile_file": {
        "description": "YAML probe profile (shells and required utilities)",
        "default": None,
    },
    "script_file": {
        "description": "Audit script replacing the embedded one",
        "default": None,
    },
}


def _int_env(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


class ConfigModule:
    """Configuration management module."""

    def __init__(self):
        """Initialize with environment variables."""
        self._config = self._load_from_env()
        self._validate_required_keys()

    def _validate_required_keys(self) -> None:
        """
        Validate that all required configuration keys are present.

        Raises:
            ValueError: If required keys are missing
        """
        missing_keys = []
        for key in REQUIRED_CONFIG_KEYS:
            if key not in self._config or self._config[key] is None:
                missing_keys.append(key)

        if missing_keys:
            raise ValueError(
                f"Missing required configuration keys: {', '.join(missing_keys)}. "
                f"Check environment variables."
            )

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment."""
        return {
            # Cluster settings
            "namespace": os.getenv("K8SLSE_NAMESPACE", "default"),
            "kubeconfig": os.getenv("KUBECONFIG"),
            "context": os.getenv("K8SLSE_CONTEXT"),
            "kubectl": os.getenv("K8SLSE_KUBECTL", "kubectl"),
            "exec_timeout": _int_env("K8SLSE_EXEC_TIMEOUT", "300"),
            # Scan settings
            "output": os.getenv("K8SLSE_OUTPUT", "ansi").lower(),
            "directory": os.getenv("K8SLSE_DIRECTORY", os.getcwd()),
            "workers": _int_env("K8SLSE_WORKERS", str(DEFAULT_WORKERS)),
            "profile_file": os.getenv("K8SLSE_PROFILE_FILE"),
            "script_file": os.getenv("K8SLSE_SCRIPT_FILE"),
            # Logging
            "log_level": os.getenv("LOG_LEVEL", "WARNING").upper(),
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value."""
        self._config[key] = value

    def get_all(self) -> Dict[str, Any]:
        """Get all configuration values."""
        return self._config.copy()

    @staticmethod
    def get_config_schema() -> Dict[str, Any]:
        """
        Get the configuration schema (contract) for this module.

        Returns:
            Dictionary with 'required' and 'optional' key specifications
        """
        return {
            "required": REQUIRED_CONFIG_KEYS.copy(),
            "optional": OPTIONAL_CONFIG_KEYS.copy(),
        }


# Singleton instance
_instance = None


def get_config() -> ConfigModule:
    """Get the configuration module singleton."""
    global _instance
    if _instance is None:
        load_dotenv(find_dotenv(usecwd=True))
        _instance = ConfigModule()
    return _instance


def reset_config() -> None:
    """Drop the singleton so the next get_config() re-reads the environment."""
    global _instance
    _instance = None


# Public profile loader interface
from .profile import DEFAULT_SHELLS, DEFAULT_UTILITIES, ProbeProfile, load_profile
from .settings import ScanSettings

__all__ = [
    "get_config",
    "reset_config",
    "ConfigModule",
    "DEFAULT_WORKERS",
    "DEFAULT_SHELLS",
    "DEFAULT_UTILITIES",
    "ProbeProfile",
    "load_profile",
    "ScanSettings",
]
