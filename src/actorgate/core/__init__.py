"""Core configuration and logging for the ActorGate client."""

from .config_manager import ClientConfig, ConfigManager
from .logging_manager import ColoredFormatter, LoggingManager

__all__ = ['ClientConfig', 'ConfigManager', 'ColoredFormatter', 'LoggingManager']
