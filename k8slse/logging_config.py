"""
Logging configuration for the k8slse command line.

Diagnostics go to stderr through the standard logging module. User facing
status lines do not pass through here; they use the status sink.
"""

import logging
import logging.config
from typing import Dict, Any


def get_logging_config(level: str = "WARNING") -> Dict[str, Any]:
    """Get logging configuration for the given k8slse log level."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stderr"
            },
        },
        "loggers": {
            "k8slse": {
                "handlers": ["default"],
                "level": level.upper(),
                "propagate": False
            },
        },
        "root": {
            "level": "WARNING",
            "handlers": ["default"]
        }
    }


def configure_logging(level: str = "WARNING") -> None:
    """Apply the logging configuration."""
    logging.config.dictConfig(get_logging_config(level))
