"""
=============================================
Configuration management for the SQL builder.
=============================================

Loads configuration from environment variables (.env file) and provides a
module-level Config instance for application-wide access.

The statement builder itself needs no configuration; these settings are
consumed by the engine helpers in ``utils.database_utils`` and the logging
setup in ``core.logger``.

Environment variables:
    RDB_DATABASE_URL    Full SQLAlchemy URL, overrides the individual parts
    RDB_DB_DRIVER       SQLAlchemy driver name (default: mysql+pymysql)
    RDB_DB_HOST         Server hostname (default: localhost)
    RDB_DB_PORT         Server port (default: 3306)
    RDB_DB_USER         Username (default: root)
    RDB_DB_PASSWORD     Password (default: empty)
    RDB_DB_NAME         Database name (default: rdb)
    RDB_LOG_LEVEL       Logging level (default: INFO)
    RDB_LOG_FILE        Optional log file name
    RDB_LOG_DIR         Log directory (default: logs)
    RDB_LOG_COLORS      Colored console output (default: true)

Example:
    >>> from core.config import config
    >>>
    >>> engine_url = config.get_connection_string()
    >>> print(f"Host: {config.db_host}, Port: {config.db_port}")
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import quote_plus

from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=env_path)


@dataclass
class DatabaseConfig:
    """Database connection settings.

    Attributes:
        driver: SQLAlchemy driver name, e.g. ``mysql+pymysql``
        host: Server hostname or IP address
        port: Server port number
        user: Database username
        password: Database password
        database: Database name
        url: Explicit SQLAlchemy URL, used as-is when set
    """

    driver: str
    host: str
    port: int
    user: str
    password: str
    database: str
    url: Optional[str] = None

    def get_connection_string(self) -> str:
        """Get the SQLAlchemy connection string.

        Returns:
            The explicit URL if configured, otherwise one built from the parts
            with the password URL-encoded
        """
        if self.url:
            return self.url
        return (
            f"{self.driver}://{self.user}:{quote_plus(self.password)}"
            f"@{self.host}:{self.port}/{self.database}"
        )


@dataclass
class LoggingConfig:
    """Logging settings.

    Attributes:
        level: Logging level name (DEBUG/INFO/WARNING/ERROR/CRITICAL)
        log_file: Optional log file name
        log_dir: Directory holding the log file
        use_colors: Use colored console output
    """

    level: str
    log_file: Optional[str]
    log_dir: Path
    use_colors: bool = True


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Centralized configuration manager.

    Attributes:
        db: DatabaseConfig instance with connection settings
        logging: LoggingConfig instance with logging settings

    Example:
        >>> config = Config()
        >>> config.get_connection_string()
        'mysql+pymysql://root:@localhost:3306/rdb'
    """

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.db = DatabaseConfig(
            driver=os.getenv('RDB_DB_DRIVER', 'mysql+pymysql'),
            host=os.getenv('RDB_DB_HOST', 'localhost'),
            port=int(os.getenv('RDB_DB_PORT', '3306')),
            user=os.getenv('RDB_DB_USER', 'root'),
            password=os.getenv('RDB_DB_PASSWORD', ''),
            database=os.getenv('RDB_DB_NAME', 'rdb'),
            url=os.getenv('RDB_DATABASE_URL') or None
        )

        self.logging = LoggingConfig(
            level=os.getenv('RDB_LOG_LEVEL', 'INFO').upper(),
            log_file=os.getenv('RDB_LOG_FILE') or None,
            log_dir=Path(os.getenv('RDB_LOG_DIR', 'logs')),
            use_colors=_env_flag('RDB_LOG_COLORS', True)
        )

    @property
    def db_host(self) -> str:
        """Get database server hostname."""
        return self.db.host

    @property
    def db_port(self) -> int:
        """Get database server port number."""
        return self.db.port

    @property
    def db_user(self) -> str:
        """Get database username."""
        return self.db.user

    @property
    def db_name(self) -> str:
        """Get database name."""
        return self.db.database

    @property
    def log_level(self) -> str:
        """Get configured logging level name."""
        return self.logging.level

    def get_connection_string(self) -> str:
        """Get the database connection string.

        Returns:
            SQLAlchemy-compatible connection string
        """
        return self.db.get_connection_string()


# Global configuration instance
config = Config()
