"""
Configuration and logging utilities.
"""

from .config import CheckinConfig, load_config, get_config, reset_config
from .log_setup import configure_logging

__all__ = [
    "CheckinConfig",
    "load_config",
    "get_config",
    "reset_config",
    "configure_logging",
]
