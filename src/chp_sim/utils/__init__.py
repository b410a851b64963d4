"""Utilities module for configuration and logging."""

from .config import ConfigManager, PRESET_CONFIGS
from .logging import Logger, setup_logging, get_logger

__all__ = ['ConfigManager', 'PRESET_CONFIGS', 'Logger', 'setup_logging', 'get_logger']
