"""
=====================================
Fluent parameterized SQL statements.
=====================================

This package assembles MySQL statements from chained calls and renders them
with named bind markers and a collision-free parameter mapping.

The package follows a clear organization:
    - statement_builder.py: StatementBuilder factories, modifiers, rendering, execution
    - predicate.py: WHERE conditions and their finalizers
    - parameters.py: Bind marker allocation for one rendering pass
    - values.py: Tagged predicate values and bind kinds
    - results.py: Lazily iterated select results
    - exceptions.py: Error taxonomy

Example:
    >>> from sql import StatementBuilder
    >>>
    >>> query = (
    ...     StatementBuilder.delete('users')
    ...     .begin_condition('age').between(10, 20)
    ...     .begin_condition('name').starts_with('j')
    ... )
    >>> query.get_statement()
    'DELETE FROM users WHERE (age BETWEEN :age_min AND :age_max AND name LIKE :name_0)'
    >>> query.parameters
    {'age_min': 10, 'age_max': 20, 'name_0': 'j%'}
"""

__version__ = "1.0.0"
__all__ = [
    'StatementBuilder', 'Operation', 'ORDER_DIRECTIONS',
    'Predicate', 'PredicateState', 'COMPARATORS',
    'BindRegistry', 'BoundParameter',
    'BindKind', 'Scalar', 'SubQuery', 'infer_bind_kind',
    'ResultCursor',
    'StatementBuilderError', 'ContractViolationError', 'UsageStateError',
]

from .exceptions import ContractViolationError, StatementBuilderError, UsageStateError
from .parameters import BindRegistry, BoundParameter
from .predicate import COMPARATORS, Predicate, PredicateState
from .results import ResultCursor
from .statement_builder import ORDER_DIRECTIONS, Operation, StatementBuilder
from .values import BindKind, Scalar, SubQuery, infer_bind_kind
