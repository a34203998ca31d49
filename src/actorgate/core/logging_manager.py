"""Centralized Logging Management for the ActorGate Client

Configures the ``actorgate`` logger tree. Library modules only create
module loggers; nothing is emitted to the console until an application asks
for it here.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Dict, Optional, Union


LOGGER_NAME = 'actorgate'


class ColoredFormatter(logging.Formatter):
    """Custom formatter that adds colors to console output."""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'        # Reset
    }

    def format(self, record):
        log_message = super().format(record)
        return f"{self.COLORS.get(record.levelname, '')}{log_message}{self.COLORS['RESET']}"


def _numeric_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f'Invalid log level: {level}')
    return numeric_level


class LoggingManager:
    """Logging configuration for the client's logger tree."""

    _instance: Optional['LoggingManager'] = None
    _initialized: bool = False

    def __new__(cls, *args, **kwargs) -> 'LoggingManager':
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(
        self,
        level: Union[str, int] = 'INFO',
        log_file: Optional[Path] = None,
        max_bytes: int = 10 * 1024 * 1024,  # 10MB
        backup_count: int = 5,
        colored: bool = True
    ):
        """Initialize logging manager (only once).

        Args:
            level: Console log level
            log_file: Optional path of a rotating log file receiving all records
            max_bytes: Size at which the log file is rotated
            backup_count: Number of rotated files to keep
            colored: Whether console output uses ANSI colors
        """
        if self._initialized:
            return

        self.logger = logging.getLogger(LOGGER_NAME)
        self.loggers: Dict[str, logging.Logger] = {}
        self.console_handler: Optional[logging.Handler] = None
        self.file_handler: Optional[logging.Handler] = None
        self._setup_logger(_numeric_level(level), log_file, max_bytes, backup_count, colored)
        self._initialized = True

    def _setup_logger(
        self,
        level: int,
        log_file: Optional[Path],
        max_bytes: int,
        backup_count: int,
        colored: bool
    ):
        """Attach console and file handlers to the package logger."""
        self.logger.setLevel(logging.DEBUG)

        # Console handler
        self.console_handler = logging.StreamHandler(sys.stdout)
        self.console_handler.setLevel(level)
        formatter_class = ColoredFormatter if colored else logging.Formatter
        self.console_handler.setFormatter(formatter_class(
            '%(asctime)s | %(name)s | %(levelname)s | %(message)s',
            datefmt='%H:%M:%S'
        ))
        self.logger.addHandler(self.console_handler)

        if log_file:
            log_file = Path(log_file)
            log_file.parent.mkdir(parents=True, exist_ok=True)
            self.file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=max_bytes,
                backupCount=backup_count
            )
            self.file_handler.setLevel(logging.DEBUG)
            self.file_handler.setFormatter(logging.Formatter(
                '%(asctime)s | %(name)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            self.logger.addHandler(self.file_handler)

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Get a logger below the package logger.

        Args:
            name: Logger name (typically __name__ of the module)
        """
        manager = cls()
        if name in manager.loggers:
            return manager.loggers[name]

        logger = logging.getLogger(name)
        manager.loggers[name] = logger
        return logger

    def set_log_level(self, level: Union[str, int]):
        """Set the console logging level.

        Args:
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        """
        numeric_level = _numeric_level(level)
        if self.console_handler:
            self.console_handler.setLevel(numeric_level)

    def add_custom_handler(self, handler: logging.Handler, level: Optional[str] = None):
        """Add a custom handler to the package logger."""
        if level:
            handler.setLevel(_numeric_level(level))
        self.logger.addHandler(handler)

    def shutdown(self):
        """Detach and close all handlers added by this manager."""
        for handler in (self.console_handler, self.file_handler):
            if handler is not None:
                self.logger.removeHandler(handler)
                handler.close()
        self.console_handler = None
        self.file_handler = None
        LoggingManager._instance = None
        self._initialized = False
