"""
=======================================
Centralized logging for the SQL builder.
=======================================

Provides consistent logging setup across all modules with:
- File and console output
- Levels taken from core.config unless overridden
- Colored console output with emojis

Library modules only call ``get_logger(__name__)`` (or
``logging.getLogger(__name__)``); handlers are configured here once.

Example:
    >>> from core.logger import get_logger, setup_logging
    >>>
    >>> setup_logging(log_level='DEBUG', log_file='rdb.log')
    >>> logger = get_logger(__name__)
    >>> logger.debug("Materialized statement")
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from core.config import config

DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
PLAIN_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
COLORED_FORMAT = '%(emoji)s %(asctime)s - %(name)s - %(levelname)s - %(message)s'


class ColoredFormatter(logging.Formatter):
    """Formatter adding ANSI colors and emoji indicators for console output.

    Attributes:
        COLORS: Dict mapping log levels to ANSI color codes
        EMOJI: Dict mapping log levels to emoji indicators
    """

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'
    }

    EMOJI = {
        'DEBUG': '🔍',
        'INFO': 'ℹ️ ',
        'WARNING': '⚠️ ',
        'ERROR': '❌',
        'CRITICAL': '🔥'
    }

    def format(self, record):
        """Format a record with colors and emoji without altering it for other handlers."""
        levelname = record.levelname
        record.emoji = self.EMOJI.get(levelname, '')
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Get a logger instance for the specified module.

    Args:
        name: Logger name (typically __name__ of calling module)
        level: Optional logging level override

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)

    if level:
        logger.setLevel(getattr(logging, level.upper()))

    return logger


def setup_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_dir: Optional[str] = None,
    console_output: bool = True,
    use_colors: Optional[bool] = None
) -> None:
    """Configure the root logger with console and/or file handlers.

    Unset arguments fall back to ``core.config``. Existing root handlers are
    replaced, so calling this again reconfigures logging.

    Args:
        log_level: Logging level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
        log_file: Optional log file name (e.g., 'rdb.log')
        log_dir: Optional log directory (defaults to the configured one)
        console_output: If True, output to stdout
        use_colors: If True, use colored console output
    """
    level = getattr(logging, (log_level or config.logging.level).upper())
    log_file = log_file or config.logging.log_file
    use_colors = config.logging.use_colors if use_colors is None else use_colors

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        if use_colors:
            console_handler.setFormatter(ColoredFormatter(COLORED_FORMAT, datefmt=DATE_FORMAT))
        else:
            console_handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_dir) if log_dir else config.logging.log_dir
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path / log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)


def _init_default_logging():
    """Initialize default logging if nothing configured the root logger yet."""
    if not logging.getLogger().handlers:
        setup_logging(console_output=True)


# Auto-initialize on import
_init_default_logging()
