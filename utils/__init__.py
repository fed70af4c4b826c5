"""
==========================
Utility Functions Package.
==========================

Pure helper functions used while assembling statements, the driver contract
with its SQLAlchemy implementation, and engine helpers.

Modules:
    helpers: String and array helpers (concat, blank, whitelist, prefix, is_square_array)
    driver: Driver / PreparedStatement contract and SQLAlchemyDriver
    database_utils: Engine creation, availability checks, driver context manager
"""

__version__ = "1.0.0"
__all__ = [
    'blank',
    'concat',
    'whitelist',
    'prefix',
    'is_square_array',
    'Driver',
    'PreparedStatement',
    'SQLAlchemyDriver',
    'SQLAlchemyPreparedStatement',
    'DatabaseConnectionError',
    'check_database_available',
    'create_sqlalchemy_engine',
    'get_connection_string',
    'open_driver',
]

from .helpers import blank, concat, is_square_array, prefix, whitelist
from .driver import Driver, PreparedStatement, SQLAlchemyDriver, SQLAlchemyPreparedStatement
from .database_utils import (
    DatabaseConnectionError,
    check_database_available,
    create_sqlalchemy_engine,
    get_connection_string,
    open_driver,
)
