"""
==========================
WHERE condition builder.
==========================

A ``Predicate`` is one ``<column> <operator> <markers>`` condition owned by a
``StatementBuilder``. It is created either complete, with an inline
comparator, or open, waiting for exactly one finalizer:

    starts_with / ends_with / contains  ->  LIKE :x
    in_ / not_in                        ->  IN (:x_0, :x_1, ...) or IN (<subquery>)
    between / not_between               ->  BETWEEN :x_min AND :x_max

A finalizer that receives a blank value (empty search box, empty list,
invalid range) removes the predicate from its group instead of producing a
vacuous clause.

Example:
    >>> from sql.statement_builder import StatementBuilder
    >>>
    >>> query = (
    ...     StatementBuilder.delete('users')
    ...     .begin_condition('age').between(10, 20)
    ...     .begin_condition('name').starts_with('j')
    ... )
    >>> query.get_statement()
    'DELETE FROM users WHERE (age BETWEEN :age_min AND :age_max AND name LIKE :name_0)'
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, List, Optional, Sequence, Tuple

from sql.exceptions import ContractViolationError, UsageStateError
from sql.parameters import BindRegistry, bind_name
from sql.values import PredicateValue, Scalar, SubQuery
from utils.helpers import blank, whitelist

if TYPE_CHECKING:
    from sql.statement_builder import StatementBuilder

logger = logging.getLogger(__name__)

COMPARATORS = ('=', '!=', '<', '<>', '>', '<=', '>=')


class PredicateState(Enum):
    """Lifecycle of a predicate."""

    AWAITING_FINALIZER = 'awaiting_finalizer'
    FINALIZED = 'finalized'
    DROPPED = 'dropped'


class Predicate:
    """One WHERE condition and the values bound to its markers.

    Attributes:
        column: Column the condition applies to, rendered verbatim
        sequence_index: Creation index inside the owning builder
        state: Current PredicateState
    """

    def __init__(
        self,
        owner: 'StatementBuilder',
        sequence_index: int,
        column: str,
        comparator: Optional[str] = None,
        value: Any = None
    ):
        if blank(column):
            raise ContractViolationError("A condition needs a column")

        self._owner = owner
        self.sequence_index = sequence_index
        self.column = column
        self._template: Optional[str] = None
        self._values: List[PredicateValue] = []
        self._suffixes: List[str] = []
        self._chain: Optional[Tuple[str, 'Predicate']] = None
        self.state = PredicateState.AWAITING_FINALIZER

        if comparator is not None:
            try:
                whitelist(comparator, COMPARATORS)
            except ValueError as e:
                raise ContractViolationError(f"Invalid comparator {comparator!r}: {e}") from e
            self._complete(f"{comparator} %s", [Scalar(value)])

    def __repr__(self) -> str:
        return (
            f"Predicate(column={self.column!r}, sequence_index={self.sequence_index}, "
            f"state={self.state.value})"
        )

    @property
    def values(self) -> List[PredicateValue]:
        """Tagged values held by this predicate, in marker order."""
        return list(self._values)

    @property
    def chain(self) -> Optional[Tuple[str, 'Predicate']]:
        """``(connective, next predicate)`` or None for a terminal predicate."""
        return self._chain

    def or_column(self, column: str) -> 'Predicate':
        """
        Apply the coming finalizer to another column too, joined with OR.

        ``begin_condition('name').or_column('email').contains('j')`` renders
        ``(name LIKE :name_0 OR email LIKE :email_0)``. A chain uses a single
        connective.

        Args:
            column: Additional column

        Returns:
            This predicate, still awaiting its finalizer
        """
        return self._extend('OR', column)

    def and_column(self, column: str) -> 'Predicate':
        """Apply the coming finalizer to another column too, joined with AND."""
        return self._extend('AND', column)

    def starts_with(self, value: Any) -> 'StatementBuilder':
        """Match values starting with ``value`` (``LIKE 'value%'``)."""
        if blank(value):
            return self._drop()
        return self._finalize('LIKE %s', [Scalar(f"{value}%")])

    def ends_with(self, value: Any) -> 'StatementBuilder':
        """Match values ending with ``value`` (``LIKE '%value'``)."""
        if blank(value):
            return self._drop()
        return self._finalize('LIKE %s', [Scalar(f"%{value}")])

    def contains(self, value: Any) -> 'StatementBuilder':
        """Match values containing ``value`` (``LIKE '%value%'``)."""
        if blank(value):
            return self._drop()
        return self._finalize('LIKE %s', [Scalar(f"%{value}%")])

    def in_(self, values: Any) -> 'StatementBuilder':
        """
        Match any of the given values, or any row of a select subquery.

        Args:
            values: List of scalars, or a select StatementBuilder

        Returns:
            The owning builder
        """
        return self._membership('IN', values)

    def not_in(self, values: Any) -> 'StatementBuilder':
        """Exclude the given values, or every row of a select subquery."""
        return self._membership('NOT IN', values)

    def between(self, minimum: Any, maximum: Any) -> 'StatementBuilder':
        """
        Match the inclusive range ``[minimum, maximum]``.

        The predicate is dropped when either bound is blank or when
        ``maximum`` is not greater than ``minimum``.

        Args:
            minimum: Lower bound
            maximum: Upper bound

        Returns:
            The owning builder
        """
        return self._range('BETWEEN', minimum, maximum)

    def not_between(self, minimum: Any, maximum: Any) -> 'StatementBuilder':
        """Exclude the inclusive range ``[minimum, maximum]``, same drop rules as between."""
        return self._range('NOT BETWEEN', minimum, maximum)

    def render(self, registry: BindRegistry) -> str:
        """
        Render the condition, allocating its markers in ``registry``.

        Args:
            registry: Registry shared by the whole rendering pass

        Returns:
            Condition text, e.g. ``age BETWEEN :age_min AND :age_max``

        Raises:
            UsageStateError: If no finalizer was called
        """
        if self.state is not PredicateState.FINALIZED:
            raise UsageStateError(
                f"Condition on '{self.column}' is {self.state.value}, it cannot be rendered"
            )
        if self._chain is None:
            return self._render_single(registry)

        parts = [self._render_single(registry)]
        node = self
        while node._chain is not None:
            connective, node = node._chain
            parts.append(node._render_single(registry))
        return '(' + f" {connective} ".join(parts) + ')'

    def _render_single(self, registry: BindRegistry) -> str:
        placeholders = []
        base = bind_name(self.column)
        for suffix, value in zip(self._suffixes, self._values):
            if isinstance(value, SubQuery):
                placeholders.append(value.builder.compile(registry, trailing=False))
            else:
                placeholders.append(':' + registry.allocate(base, suffix, self.sequence_index, value.value))
        return f"{self.column} {self._template % tuple(placeholders)}"

    def _membership(self, keyword: str, values: Any) -> 'StatementBuilder':
        from sql.statement_builder import StatementBuilder

        if isinstance(values, StatementBuilder):
            if values is self._owner:
                raise ContractViolationError("A statement cannot be nested inside itself")
            if not values.is_select:
                raise ContractViolationError(
                    f"Only select statements can be nested, got {values.operation.value}"
                )
            return self._finalize(f"{keyword} (%s)", [SubQuery(values)])

        if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
            raise ContractViolationError(
                f"{keyword} expects a list of values or a select statement, "
                f"got {type(values).__name__}"
            )

        items: Sequence[Any] = list(values)
        if blank(items):
            return self._drop()
        markers = ', '.join(['%s'] * len(items))
        return self._finalize(f"{keyword} ({markers})", [Scalar(item) for item in items])

    def _range(self, keyword: str, minimum: Any, maximum: Any) -> 'StatementBuilder':
        if blank(minimum) or blank(maximum):
            return self._drop()
        try:
            valid = maximum > minimum
        except TypeError as e:
            raise ContractViolationError(
                f"Cannot compare range bounds {minimum!r} and {maximum!r}"
            ) from e
        if not valid:
            return self._drop()
        return self._finalize(
            f"{keyword} %s AND %s",
            [Scalar(minimum), Scalar(maximum)],
            suffixes=['min', 'max']
        )

    def _finalize(
        self,
        template: str,
        values: List[PredicateValue],
        suffixes: Optional[List[str]] = None
    ) -> 'StatementBuilder':
        self._ensure_awaiting()
        self._complete(template, values, suffixes)
        return self._owner

    def _complete(
        self,
        template: str,
        values: List[PredicateValue],
        suffixes: Optional[List[str]] = None
    ) -> None:
        self._template = template
        self._values = values
        self._suffixes = suffixes if suffixes is not None else [str(i) for i in range(len(values))]
        self.state = PredicateState.FINALIZED
        if self._chain is not None:
            self._chain[1]._complete(template, list(values), suffixes)

    def _extend(self, connective: str, column: str) -> 'Predicate':
        self._ensure_awaiting()
        tail = self
        while tail._chain is not None:
            if tail._chain[0] != connective:
                raise ContractViolationError(
                    f"A column chain uses a single connective, cannot add {connective} to {tail._chain[0]}"
                )
            tail = tail._chain[1]
        tail._chain = (connective, Predicate(self._owner, self._owner._next_sequence_index(), column))
        return self

    def _drop(self) -> 'StatementBuilder':
        self._ensure_awaiting()
        self.state = PredicateState.DROPPED
        node = self
        while node._chain is not None:
            node = node._chain[1]
            node.state = PredicateState.DROPPED
        self._owner._discard(self)
        logger.debug(f"Dropped condition on '{self.column}' (blank or empty value)")
        return self._owner

    def _ensure_awaiting(self) -> None:
        if self.state is not PredicateState.AWAITING_FINALIZER:
            raise UsageStateError(
                f"Condition on '{self.column}' is already {self.state.value}, "
                f"only one finalizer may be called"
            )
        self._owner._ensure_mutable()
