import logging
import os
import sys
from enum import Enum
from functools import lru_cache
from typing import Optional

ROOT_LOGGER_NAME = 'beancontext'


class LogLevel(Enum):
    """Log level enumeration"""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @classmethod
    def parse(cls, value: Optional[str], default: 'LogLevel') -> 'LogLevel':
        """Parse level name, falling back to default on unknown values"""
        if not value:
            return default
        try:
            return cls(value.strip().upper())
        except ValueError:
            return default


class LoggerProvider:
    """Unified logging management class - package scoped + LRU cache optimization"""

    _instance: Optional['LoggerProvider'] = None
    _initialized: bool = False

    def __new__(cls) -> 'LoggerProvider':
        """Singleton pattern implementation"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize the logger provider"""
        if not self._initialized:
            self._setup_logging()
            self._initialized = True

    def _setup_logging(self):
        """Set up package logging

        The library never touches the root logger. The package logger gets a
        NullHandler and, when LOG_LEVEL is set, that level plus a stdout handler.
        """
        package_logger = logging.getLogger(ROOT_LOGGER_NAME)
        package_logger.addHandler(logging.NullHandler())

        env_level = os.getenv('LOG_LEVEL')
        if env_level:
            level = LogLevel.parse(env_level, LogLevel.INFO)
            package_logger.setLevel(getattr(logging, level.value))
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                logging.Formatter(
                    '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
                )
            )
            package_logger.addHandler(handler)

    @lru_cache(maxsize=1000)
    def _get_cached_logger(self, module_name: str) -> logging.Logger:
        """Get cached logger (LRU cache, up to 1000)

        Args:
            module_name: Module name

        Returns:
            logging.Logger: Cached logger instance
        """
        return logging.getLogger(f'{module_name}')

    def get_logger(self, name: Optional[str] = None) -> logging.Logger:
        """Get logger with specified name (recommended usage: explicitly pass module name)

        Args:
            name: Logger name, if None uses caller's module name (lower performance)

        Returns:
            logging.Logger: Logger instance
        """
        if name is None:
            # Get caller's module name (convenient but lower performance)
            frame = sys._getframe(2)
            name = frame.f_globals.get('__name__', 'unknown')

        return self._get_cached_logger(name)


# Create global logger provider instance
logger_provider = LoggerProvider()


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get logger (recommended usage: explicitly pass __name__)

    Recommended usage:
        logger = get_logger(__name__)  # Get once at module top
        logger.debug("High-frequency log calls")    # Use directly afterwards

    Args:
        name: Module name, recommended to pass __name__. If None, automatically get (lower performance)
    """
    return logger_provider.get_logger(name)
