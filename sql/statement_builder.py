"""
==========================
Fluent SQL statement builder.
==========================

``StatementBuilder`` accumulates one SQL operation through chained calls and
renders it once into parameterized MySQL text plus a mapping of bind marker
names to values.

Factories:
- select(table, *columns)
- insert(table, columns, rows)      rows are column-major: one list per column
- update(table, columns, row)
- delete(table) / drop(table) / truncate(table) / show(table)
- check(table, structure)           CREATE TABLE unless the table already exists

Modifiers (select only unless noted):
- inner_join / left_join / right_join / full_join
- union / union_all
- order_by / limit
- add_condition / begin_condition / or_     (select, update, delete)

WHERE structure:
    Conditions are collected in groups. Conditions inside a group are joined
    with AND (parenthesized when there is more than one), groups are joined
    with OR. ``or_()`` makes the next condition open a new group.

Materialization:
    ``get_statement()`` (or ``execute()``) renders the statement once and
    caches it with its parameters. Any modification afterwards raises
    ``UsageStateError``.

Example:
    >>> from sql.statement_builder import StatementBuilder
    >>>
    >>> adults = StatementBuilder.select('users', 'users.id').add_condition('age', '>=', 18)
    >>> query = (
    ...     StatementBuilder.select('posts', '*')
    ...     .begin_condition('posts.author').in_(adults)
    ...     .or_()
    ...     .add_condition('posts.pinned', '=', True)
    ...     .order_by('posts.created', 'DESC')
    ...     .limit(10)
    ... )
    >>> query.get_statement()
    'SELECT * FROM posts WHERE posts.author IN (SELECT users.id FROM users WHERE age >= :age_0) OR posts.pinned = :posts_pinned_0 ORDER BY posts.created DESC LIMIT :limit'
    >>> query.parameters
    {'age_0': 18, 'posts_pinned_0': True, 'limit': 10}
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Tuple, Union

from sql.exceptions import ContractViolationError, StatementBuilderError, UsageStateError
from sql.parameters import BindRegistry, bind_name
from sql.predicate import Predicate
from sql.results import ResultCursor
from sql.values import BindKind, infer_bind_kind
from utils.helpers import blank, concat, is_square_array, prefix, whitelist

if TYPE_CHECKING:
    from utils.driver import Driver

logger = logging.getLogger(__name__)

ORDER_DIRECTIONS = ('ASC', 'DESC', 'RAND()')
RANDOM_ORDER = 'RAND()'


class Operation(Enum):
    """SQL operation a builder renders."""

    SELECT = 'select'
    INSERT = 'insert'
    UPDATE = 'update'
    DELETE = 'delete'
    CHECK = 'check'
    DROP = 'drop'
    TRUNCATE = 'truncate'
    SHOW = 'show'


_FILTERABLE = (Operation.SELECT, Operation.UPDATE, Operation.DELETE)


class StatementBuilder:
    """One SQL operation assembled from chained calls.

    Use the classmethod factories rather than the constructor.

    Attributes:
        operation: Operation rendered by this builder
        table: Table expression, may carry aliases (``"users A, users B"``)
        columns: Projected columns (select) or target columns (insert/update)
        rows: Column-major batch (insert), single row (update) or DDL fragments (check)
    """

    _EXECUTORS = {
        Operation.SELECT: '_execute_select',
        Operation.INSERT: '_execute_insert',
        Operation.UPDATE: '_execute_write',
        Operation.DELETE: '_execute_write',
        Operation.DROP: '_execute_write',
        Operation.TRUNCATE: '_execute_write',
        Operation.CHECK: '_execute_check',
        Operation.SHOW: '_execute_show',
    }

    def __init__(
        self,
        operation: Operation,
        table: str,
        columns: Sequence[str] = (),
        rows: Sequence[Any] = ()
    ):
        if blank(table):
            raise ContractViolationError(f"A {operation.value} statement needs a table")

        self._operation = operation
        self._table = table
        self._columns: Tuple[str, ...] = tuple(columns)
        self._rows: Tuple[Any, ...] = tuple(rows)

        self._groups: List[List[Predicate]] = [[]]
        self._group_pointer = 0
        self._sequence = 0
        self._joins: List[str] = []
        self._unions: List[Tuple[str, 'StatementBuilder']] = []
        self._order_by: Optional[str] = None
        self._limit: Optional[int] = None
        self._offset: Optional[int] = None

        self._statement: Optional[str] = None
        self._parameters: Optional[BindRegistry] = None

    def __repr__(self) -> str:
        return f"StatementBuilder(operation={self._operation.value!r}, table={self._table!r})"

    # ==================
    # Factories
    # ==================

    @classmethod
    def select(cls, table: str, *columns: str) -> 'StatementBuilder':
        """
        Start a SELECT statement.

        Args:
            table: Table expression
            *columns: Projected columns (``'*'`` allowed)

        Returns:
            New select builder

        Raises:
            ContractViolationError: If no column is given
        """
        if blank(columns) or any(blank(column) for column in columns):
            raise ContractViolationError("select needs at least one column")
        return cls(Operation.SELECT, table, columns)

    @classmethod
    def insert(cls, table: str, columns: Sequence[str], rows: Sequence[Sequence[Any]]) -> 'StatementBuilder':
        """
        Start an INSERT statement for a batch of rows.

        Args:
            table: Table name
            columns: Target columns, e.g. ``['name', 'age']``
            rows: One value list per column, e.g. ``[['john', 'marie'], [31, 27]]``

        Returns:
            New insert builder. Executing it returns the generated ids.

        Raises:
            ContractViolationError: If columns and rows do not line up
        """
        cls._check_targets(columns, rows)
        for column_values in rows:
            if isinstance(column_values, (str, bytes)) or not isinstance(column_values, Sequence):
                raise ContractViolationError("insert rows must hold one value list per column")
        return cls(Operation.INSERT, table, columns, [tuple(values) for values in rows])

    @classmethod
    def update(cls, table: str, columns: Sequence[str], row: Sequence[Any]) -> 'StatementBuilder':
        """
        Start an UPDATE statement.

        Args:
            table: Table name
            columns: Columns to set
            row: New values aligned with columns

        Returns:
            New update builder
        """
        cls._check_targets(columns, row)
        return cls(Operation.UPDATE, table, columns, row)

    @classmethod
    def delete(cls, table: str) -> 'StatementBuilder':
        """Start a DELETE statement."""
        return cls(Operation.DELETE, table)

    @classmethod
    def drop(cls, table: str) -> 'StatementBuilder':
        """Start a DROP TABLE statement."""
        return cls(Operation.DROP, table)

    @classmethod
    def truncate(cls, table: str) -> 'StatementBuilder':
        """Start a TRUNCATE TABLE statement."""
        return cls(Operation.TRUNCATE, table)

    @classmethod
    def show(cls, table: str) -> 'StatementBuilder':
        """Start a table existence check. Executing it returns a bool."""
        return cls(Operation.SHOW, table)

    @classmethod
    def check(cls, table: str, structure: Sequence[str]) -> 'StatementBuilder':
        """
        Ensure a table exists, creating it from ``structure`` if needed.

        Args:
            table: Table name
            structure: Column definitions, e.g. ``['id INT PRIMARY KEY', 'name VARCHAR(255)']``

        Returns:
            New check builder. Executing it returns True once the table exists.
        """
        if blank(structure) or isinstance(structure, str):
            raise ContractViolationError("check needs a list of column definitions")
        return cls(Operation.CHECK, table, (), structure)

    @staticmethod
    def _check_targets(columns: Sequence[str], rows: Sequence[Any]) -> None:
        if blank(columns) or blank(rows) or isinstance(rows, str):
            raise ContractViolationError("columns and rows must both be non-empty")
        if len(columns) != len(rows):
            raise ContractViolationError(
                f"Got {len(columns)} columns but {len(rows)} value lists"
            )
        if len(set(columns)) != len(columns):
            raise ContractViolationError(f"Duplicate target columns in {list(columns)}")

    # ==================
    # Read-only state
    # ==================

    @property
    def operation(self) -> Operation:
        return self._operation

    @property
    def table(self) -> str:
        return self._table

    @property
    def columns(self) -> Tuple[str, ...]:
        return self._columns

    @property
    def rows(self) -> Tuple[Any, ...]:
        return self._rows

    @property
    def is_select(self) -> bool:
        return self._operation is Operation.SELECT

    @property
    def is_materialized(self) -> bool:
        """True once the statement text has been rendered and cached."""
        return self._statement is not None

    @property
    def predicate_groups(self) -> List[List[Predicate]]:
        """Copy of the condition groups (AND inside, OR between)."""
        return [list(group) for group in self._groups]

    # ==================
    # Modifiers
    # ==================

    def add_condition(self, column: str, comparator: str, value: Any) -> 'StatementBuilder':
        """
        Add a complete ``<column> <comparator> :marker`` condition.

        Args:
            column: Column to compare
            comparator: One of ``=``, ``!=``, ``<``, ``<>``, ``>``, ``<=``, ``>=``
            value: Value to bind

        Returns:
            This builder
        """
        self._register(column, comparator, value)
        return self

    def begin_condition(self, column: str) -> Predicate:
        """
        Open a condition to be completed by a Predicate finalizer.

        Args:
            column: Column to filter on

        Returns:
            Predicate awaiting one finalizer (starts_with, in_, between...)
        """
        return self._register(column, None, None)

    def or_(self) -> 'StatementBuilder':
        """Make the next condition start a new OR-connected group."""
        self._ensure_mutable()
        self._group_pointer += 1
        return self

    def order_by(self, column: str, direction: str = 'ASC') -> 'StatementBuilder':
        """
        Set the ORDER BY clause.

        Args:
            column: Column or expression to sort on (ignored for ``RAND()``)
            direction: ``ASC``, ``DESC`` or ``RAND()``

        Returns:
            This builder
        """
        self._ensure_select('order_by')
        self._ensure_mutable()
        try:
            direction = whitelist(str(direction).upper(), ORDER_DIRECTIONS)
        except ValueError as e:
            raise ContractViolationError(f"Invalid order direction {direction!r}: {e}") from e
        self._order_by = RANDOM_ORDER if direction == RANDOM_ORDER else f"{column} {direction}"
        return self

    def limit(self, limit: int, offset: Optional[int] = None) -> 'StatementBuilder':
        """Set the LIMIT clause, optionally with an offset."""
        self._ensure_select('limit')
        self._ensure_mutable()
        for value in (limit, offset):
            if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value < 0):
                raise ContractViolationError(f"limit and offset must be non-negative integers, got {value!r}")
        self._limit = limit
        self._offset = offset
        return self

    def inner_join(self, table: str, on: str) -> 'StatementBuilder':
        """Append ``INNER JOIN <table> ON <on>``."""
        return self._join('INNER JOIN', table, on)

    def left_join(self, table: str, on: str) -> 'StatementBuilder':
        """Append ``LEFT JOIN <table> ON <on>``."""
        return self._join('LEFT JOIN', table, on)

    def right_join(self, table: str, on: str) -> 'StatementBuilder':
        """Append ``RIGHT JOIN <table> ON <on>``."""
        return self._join('RIGHT JOIN', table, on)

    def full_join(self, table: str, on: str) -> 'StatementBuilder':
        """Append ``FULL JOIN <table> ON <on>``."""
        return self._join('FULL JOIN', table, on)

    def union(self, other: 'StatementBuilder') -> 'StatementBuilder':
        """Append ``UNION <other>``, rendered without its ORDER BY and LIMIT."""
        return self._union('UNION', other)

    def union_all(self, other: 'StatementBuilder') -> 'StatementBuilder':
        """Append ``UNION ALL <other>``, rendered without its ORDER BY and LIMIT."""
        return self._union('UNION ALL', other)

    def _register(self, column: str, comparator: Optional[str], value: Any) -> Predicate:
        if self._operation not in _FILTERABLE:
            raise ContractViolationError(
                f"Conditions are not supported on {self._operation.value} statements"
            )
        self._ensure_mutable()
        predicate = Predicate(self, self._next_sequence_index(), column, comparator, value)
        while len(self._groups) <= self._group_pointer:
            self._groups.append([])
        self._groups[self._group_pointer].append(predicate)
        return predicate

    def _next_sequence_index(self) -> int:
        index = self._sequence
        self._sequence += 1
        return index

    def _discard(self, predicate: Predicate) -> None:
        for group in self._groups:
            for index, candidate in enumerate(group):
                if candidate is predicate:
                    del group[index]
                    return

    def _join(self, kind: str, table: str, on: str) -> 'StatementBuilder':
        self._ensure_select(kind)
        self._ensure_mutable()
        if blank(table) or blank(on):
            raise ContractViolationError(f"{kind} needs a table and a condition")
        self._joins.append(concat(' ', kind, table, 'ON', on))
        return self

    def _union(self, kind: str, other: 'StatementBuilder') -> 'StatementBuilder':
        self._ensure_select(kind)
        self._ensure_mutable()
        if not isinstance(other, StatementBuilder) or not other.is_select:
            raise ContractViolationError(f"{kind} expects a select statement")
        if other is self:
            raise ContractViolationError(f"A statement cannot be combined with itself using {kind}")
        self._unions.append((kind, other))
        return self

    def _ensure_select(self, clause: str) -> None:
        if not self.is_select:
            raise ContractViolationError(
                f"{clause} is only valid on select statements, not {self._operation.value}"
            )

    def _ensure_mutable(self) -> None:
        if self._statement is not None:
            raise UsageStateError(
                f"The {self._operation.value} statement on '{self._table}' is already "
                f"materialized and cannot be modified"
            )

    # ==================
    # Rendering
    # ==================

    def get_statement(self) -> str:
        """
        Return the SQL text, rendering and caching it on first call.

        Raises:
            UsageStateError: If a condition was opened but never finalized
        """
        self._materialize()
        return self._statement

    @property
    def parameters(self) -> Dict[str, Any]:
        """Bind values keyed by marker name (materializes the statement)."""
        self._materialize()
        return self._parameters.as_dict()

    def _materialize(self) -> None:
        if self._statement is not None:
            return
        registry = BindRegistry()
        statement = self.compile(registry, trailing=True)
        self._parameters = registry
        self._statement = statement
        logger.debug(f"Materialized {self._operation.value} statement: {statement}")

    def compile(self, registry: BindRegistry, trailing: bool = True) -> str:
        """
        Render this builder into ``registry`` without caching.

        Used for nested rendering: IN subqueries and union members share the
        outer registry and are compiled with ``trailing=False``, which leaves
        out their ORDER BY and LIMIT clauses.

        Args:
            registry: Registry shared by the whole rendering pass
            trailing: Render ORDER BY and LIMIT clauses

        Returns:
            SQL text
        """
        operation = self._operation
        if operation is Operation.SHOW:
            return f"SHOW TABLES LIKE '{self._table}'"
        if operation is Operation.DROP:
            return f"DROP TABLE {self._table}"
        if operation is Operation.TRUNCATE:
            return f"TRUNCATE TABLE {self._table}"
        if operation is Operation.CHECK:
            return f"CREATE TABLE {self._table} ({', '.join(self._rows)})"
        if operation is Operation.SELECT:
            return self._compile_select(registry, trailing)
        if operation is Operation.INSERT:
            return self._compile_insert(registry)
        if operation is Operation.UPDATE:
            return self._compile_update(registry)
        return concat(' ', 'DELETE FROM', self._table, self._compile_where(registry))

    def _compile_select(self, registry: BindRegistry, trailing: bool) -> str:
        # Outer LIMIT markers keep their exact names
        if trailing and self._limit is not None:
            registry.reserve('limit')
            if self._offset is not None:
                registry.reserve('offset')

        parts = ['SELECT', ', '.join(self._columns), 'FROM', self._table]
        parts.extend(self._joins)
        parts.append(self._compile_where(registry))
        for kind, other in self._unions:
            parts.append(f"{kind} {other.compile(registry, trailing=False)}")

        if trailing:
            if self._order_by:
                parts.append(f"ORDER BY {self._order_by}")
            if self._limit is not None:
                registry.register('limit', self._limit, BindKind.INTEGER)
                if self._offset is not None:
                    registry.register('offset', self._offset, BindKind.INTEGER)
                    parts.append('LIMIT :limit, :offset')
                else:
                    parts.append('LIMIT :limit')

        return concat(' ', *parts)

    def _compile_insert(self, registry: BindRegistry) -> str:
        markers = prefix(':', [registry.reserve(bind_name(column)) for column in self._columns])
        return (
            f"INSERT INTO {self._table} ({concat(', ', list(self._columns))}) "
            f"VALUES ({concat(', ', markers)})"
        )

    def _compile_update(self, registry: BindRegistry) -> str:
        assignments = [
            f"{column} = :{registry.register(bind_name(column), value)}"
            for column, value in zip(self._columns, self._rows)
        ]
        return concat(' ', 'UPDATE', self._table, 'SET', ', '.join(assignments), self._compile_where(registry))

    def _compile_where(self, registry: BindRegistry) -> str:
        clauses = []
        for group in self._groups:
            if not group:
                continue
            rendered = ' AND '.join(predicate.render(registry) for predicate in group)
            clauses.append(f"({rendered})" if len(group) > 1 else rendered)
        if not clauses:
            return ''
        return 'WHERE ' + ' OR '.join(clauses)

    # ==================
    # Execution
    # ==================

    def bind_values(self, prepared) -> None:
        """
        Bind every materialized parameter onto a prepared statement.

        Condition values of nested subqueries and union members are included;
        only this builder's own ``:limit``/``:offset`` are bound.

        Args:
            prepared: Driver prepared statement
        """
        self._materialize()
        for parameter in self._parameters:
            prepared.bind(parameter.name, parameter.value, parameter.kind)

    def execute(self, driver: 'Driver') -> Union[List[Any], bool, ResultCursor]:
        """
        Render (once), prepare, bind and run the statement.

        Args:
            driver: Driver used to prepare the statement

        Returns:
            insert: list of generated ids, one per inserted row
            select: ResultCursor
            show: True if the table exists
            others: True on success

        Raises:
            ContractViolationError: If an insert batch is not square
            UsageStateError: If a condition was never finalized
        """
        self._materialize()
        executor = getattr(self, self._EXECUTORS[self._operation])
        logger.debug(f"Executing {self._operation.value} on '{self._table}'")
        try:
            return executor(driver)
        except StatementBuilderError:
            raise
        except Exception as e:
            logger.error(f"❌ {self._operation.value} on '{self._table}' failed: {e}")
            raise

    def _execute_select(self, driver: 'Driver') -> ResultCursor:
        prepared = driver.prepare(self._statement)
        self.bind_values(prepared)
        prepared.execute()
        return ResultCursor(prepared)

    def _execute_insert(self, driver: 'Driver') -> List[Any]:
        amount = is_square_array(self._rows)
        if amount is False or amount == 0:
            raise ContractViolationError(
                f"Insert batch for '{self._table}' is not square: "
                f"{[len(values) for values in self._rows]} values per column"
            )

        names = [bind_name(column) for column in self._columns]
        prepared = driver.prepare(self._statement)
        inserted = []
        try:
            for position in range(amount):
                for name, values in zip(names, self._rows):
                    value = values[position]
                    prepared.bind(name, value, infer_bind_kind(value))
                prepared.execute()
                inserted.append(prepared.last_insert_id())
        finally:
            prepared.close()

        logger.debug(f"Inserted {len(inserted)} row(s) into '{self._table}'")
        return inserted

    def _execute_write(self, driver: 'Driver') -> bool:
        prepared = driver.prepare(self._statement)
        try:
            self.bind_values(prepared)
            prepared.execute()
        finally:
            prepared.close()
        return True

    def _execute_show(self, driver: 'Driver') -> bool:
        prepared = driver.prepare(self._statement)
        try:
            prepared.execute()
            return prepared.row_count() > 0
        finally:
            prepared.close()

    def _execute_check(self, driver: 'Driver') -> bool:
        if StatementBuilder.show(self._table).execute(driver):
            logger.debug(f"Table '{self._table}' already exists")
            return True
        logger.info(f"Creating table '{self._table}'")
        return self._execute_write(driver)
