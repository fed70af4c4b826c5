"""
===============================================
Database connectivity utilities for the driver.
===============================================

Builds SQLAlchemy engines from ``core.config`` and hands out
``SQLAlchemyDriver`` instances bound to an open connection, so callers can
execute statement builders without wiring connections themselves.

Key Features:
    - Engine creation from config or an explicit URL
    - Database availability checking
    - Driver context manager committing on clean exit

Example:
    >>> from utils.database_utils import create_sqlalchemy_engine, open_driver
    >>> from sql import StatementBuilder
    >>>
    >>> engine = create_sqlalchemy_engine()
    >>> with open_driver(engine) as driver:
    ...     StatementBuilder.check('users', ['id INT PRIMARY KEY']).execute(driver)
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import ArgumentError, SQLAlchemyError

from core.config import config
from utils.driver import SQLAlchemyDriver

logger = logging.getLogger(__name__)


class DatabaseConnectionError(Exception):
    """Exception raised when an engine cannot be created."""
    pass


def get_connection_string(url: Optional[str] = None) -> str:
    """
    Resolve the connection string to use.

    Args:
        url: Explicit SQLAlchemy URL (defaults to config)

    Returns:
        SQLAlchemy connection string
    """
    return url if url else config.get_connection_string()


def create_sqlalchemy_engine(url: Optional[str] = None, echo: bool = False) -> Engine:
    """
    Create a SQLAlchemy engine.

    Args:
        url: Explicit SQLAlchemy URL (defaults to config)
        echo: Enable SQLAlchemy statement logging

    Returns:
        SQLAlchemy Engine

    Raises:
        DatabaseConnectionError: If the URL is invalid or its DBAPI is missing
    """
    connection_string = get_connection_string(url)
    try:
        return create_engine(connection_string, echo=echo)
    except (ArgumentError, ImportError) as e:
        logger.error(f"❌ Cannot create engine: {e}")
        raise DatabaseConnectionError(f"Cannot create engine: {e}") from e


def check_database_available(engine: Engine) -> bool:
    """
    Check whether the database behind an engine answers.

    Args:
        engine: SQLAlchemy engine

    Returns:
        True if ``SELECT 1`` succeeds, False otherwise
    """
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.debug(f"Database not available: {e}")
        return False


@contextmanager
def open_driver(engine: Engine) -> Iterator[SQLAlchemyDriver]:
    """
    Yield a driver on a fresh connection, committing on clean exit.

    Args:
        engine: SQLAlchemy engine

    Yields:
        SQLAlchemyDriver bound to the connection
    """
    with engine.begin() as connection:
        yield SQLAlchemyDriver(connection)
