"""
Custom logging configuration to keep guard child output out of the logs
"""

import logging
import logging.config
from typing import Dict, Any


class ChildOutputFilter(logging.Filter):
    """Filter to suppress stdout/stderr echoed from guard commands."""

    def __init__(self, enabled: bool = False):
        super().__init__()
        self.enabled = enabled

    def filter(self, record: logging.LogRecord) -> bool:
        """Drop records carrying child process output unless enabled."""
        if getattr(record, "guard_stream", None) is not None:
            return self.enabled
        return True  # Allow all other logs


def get_logging_config(level: str = "INFO", log_child_output: bool = False) -> Dict[str, Any]:
    """Get logging configuration with child output suppression."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "child_output_filter": {
                "()": ChildOutputFilter,
                "enabled": log_child_output,
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stderr",
                "filters": ["child_output_filter"]
            }
        },
        "loggers": {
            "scriptguard": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            }
        },
        "root": {
            "level": "WARNING",
            "handlers": ["default"]
        }
    }


def configure_logging(level: str = "INFO", log_child_output: bool = False) -> None:
    logging.config.dictConfig(get_logging_config(level, log_child_output))
