"""Logging utility for critical-css."""

import logging
from typing import Optional
from colorama import Fore, Style
from colorama import init as colorama_init
from .config import LOG_LEVELS

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

logging.addLevelName(LOG_LEVELS['trace'], 'TRACE')


class ColorFormatter(logging.Formatter):
    """Formatter colouring the level name for terminal output."""

    COLORS = {
        'TRACE': Style.DIM,
        'DEBUG': Fore.CYAN,
        'INFO': Fore.GREEN,
        'WARNING': Fore.YELLOW,
        'ERROR': Fore.RED,
        'CRITICAL': Fore.RED + Style.BRIGHT,
    }

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = self.COLORS.get(record.levelname)
        if not color:
            return message
        return f"{color}{message}{Style.RESET_ALL}"


class LevelAdapter(logging.LoggerAdapter):
    """Apply a minimum level to a logger without reconfiguring it.

    The wrapped logger may belong to the caller, so its own level and
    handlers are left untouched.
    """

    def __init__(self, logger: logging.Logger, level: int):
        super().__init__(logger, {})
        self.level = level

    def isEnabledFor(self, level: int) -> bool:
        return level >= self.level and self.logger.isEnabledFor(level)

    def trace(self, msg, *args, **kwargs) -> None:
        self.log(LOG_LEVELS['trace'], msg, *args, **kwargs)


def setup_logging(log_level: int = logging.INFO, color: bool = True) -> None:
    """Set up logging configuration for command line use."""
    handler = logging.StreamHandler()
    if color:
        colorama_init()
        handler.setFormatter(ColorFormatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    else:
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))

    logging.basicConfig(level=log_level, handlers=[handler], force=True)

def get_logger(name):
    """Get a logger instance for the specified module.

    Args:
        name: Name of the module

    Returns:
        Logger instance
    """
    return logging.getLogger(name)

def resolve_logger(logger: Optional[logging.Logger], log_level: str,
                   name: str = 'critical_css') -> LevelAdapter:
    """Return the logger to report through, filtered by `log_level`.

    Args:
        logger: Caller supplied logger, or None for the package logger
        log_level: One of the names in LOG_LEVELS
        name: Logger name used when no logger is supplied

    Returns:
        LevelAdapter wrapping the logger
    """
    return LevelAdapter(logger or get_logger(name), LOG_LEVELS[log_level])

# Exported functions
__all__ = ['setup_logging', 'get_logger', 'resolve_logger', 'LevelAdapter', 'ColorFormatter']
