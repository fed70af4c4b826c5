"""
======================================
Core infrastructure for the SQL builder.
======================================

This package provides configuration management and logging infrastructure
shared by the ``sql`` and ``utils`` packages.

Modules:
    config: Configuration management from environment variables
    logger: Centralized logging configuration

Example:
    >>> from core.config import config
    >>> from core.logger import get_logger
    >>>
    >>> logger = get_logger(__name__)
    >>> logger.info(f"Connecting to {config.db_host}")
"""

__version__ = "1.0.0"
__all__ = ['get_logger', 'setup_logging', 'config', 'Config']

from core.config import Config, config
from core.logger import get_logger, setup_logging
