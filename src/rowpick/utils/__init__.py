"""Utility modules."""

from rowpick.utils.config import Config, get_config, load_config, set_config
from rowpick.utils.logging import get_logger, setup_logging

__all__ = [
    "Config",
    "get_config",
    "load_config",
    "set_config",
    "get_logger",
    "setup_logging",
]
