"""
==============================
Database driver collaborators.
==============================

The statement builder never talks to a database directly. It asks a driver
to prepare its rendered text, binds named values onto the prepared statement
and runs it. This module defines that contract and a SQLAlchemy-backed
implementation working on an already opened ``Connection``.

Contract:
    Driver.prepare(sql) -> PreparedStatement
    PreparedStatement.bind(name, value, kind)
    PreparedStatement.execute()            raises on failure
    PreparedStatement.fetch_row()          dict or None when exhausted
    PreparedStatement.last_insert_id()
    PreparedStatement.row_count()
    PreparedStatement.close()

Example:
    >>> from sqlalchemy import create_engine
    >>> from utils.driver import SQLAlchemyDriver
    >>>
    >>> engine = create_engine('sqlite://')
    >>> with engine.begin() as connection:
    ...     driver = SQLAlchemyDriver(connection)
    ...     rows = StatementBuilder.select('users', '*').execute(driver).fetch_all()
"""

from typing import Any, Dict, Optional, Protocol

from sqlalchemy import Boolean, Integer, String, bindparam, text
from sqlalchemy.engine import Connection, CursorResult
from sqlalchemy.sql.elements import BindParameter

from core.logger import get_logger
from sql.exceptions import UsageStateError
from sql.values import BindKind

logger = get_logger(__name__)

_SQL_TYPES = {
    BindKind.STRING: String(),
    BindKind.INTEGER: Integer(),
    BindKind.BOOLEAN: Boolean(),
}


class PreparedStatement(Protocol):
    """A statement prepared by a driver, ready to receive bound values."""

    def bind(self, name: str, value: Any, kind: BindKind) -> None: ...

    def execute(self) -> None: ...

    def fetch_row(self) -> Optional[Dict[str, Any]]: ...

    def last_insert_id(self) -> Any: ...

    def row_count(self) -> int: ...

    def close(self) -> None: ...


class Driver(Protocol):
    """Anything able to prepare SQL text."""

    def prepare(self, statement: str) -> PreparedStatement: ...


class SQLAlchemyPreparedStatement:
    """Prepared statement backed by ``sqlalchemy.text``.

    Bound values are kept until the next ``execute()`` so the same statement
    can be run several times with different values (insert batches).
    """

    def __init__(self, connection: Connection, statement: str):
        self._connection = connection
        self._statement = statement
        self._clause = text(statement)
        self._bindings: Dict[str, BindParameter] = {}
        self._result: Optional[CursorResult] = None

    @property
    def statement(self) -> str:
        return self._statement

    def bind(self, name: str, value: Any, kind: BindKind) -> None:
        self._bindings[name] = bindparam(name, value, type_=_SQL_TYPES[kind])

    def execute(self) -> None:
        clause = self._clause.bindparams(*self._bindings.values()) if self._bindings else self._clause
        self._result = self._connection.execute(clause)

    def fetch_row(self) -> Optional[Dict[str, Any]]:
        row = self._executed().fetchone()
        return dict(row._mapping) if row is not None else None

    def last_insert_id(self) -> Any:
        return self._executed().lastrowid

    def row_count(self) -> int:
        return self._executed().rowcount

    def close(self) -> None:
        if self._result is not None:
            self._result.close()

    def _executed(self) -> CursorResult:
        if self._result is None:
            raise UsageStateError("The statement has not been executed yet")
        return self._result


class SQLAlchemyDriver:
    """Driver preparing statements on one SQLAlchemy connection.

    The connection is owned by the caller; the driver never opens, commits or
    closes it.

    Args:
        connection: Open SQLAlchemy connection
    """

    def __init__(self, connection: Connection):
        self.connection = connection

    def prepare(self, statement: str) -> SQLAlchemyPreparedStatement:
        logger.debug(f"Preparing: {statement}")
        return SQLAlchemyPreparedStatement(self.connection, statement)
