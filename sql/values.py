"""
=====================
Tagged bind values.
=====================

A predicate value is either a plain scalar bound through a named marker, or
a nested select builder rendered inline as a subquery. Modelling both as a
closed set of types lets rendering and binding dispatch on ``isinstance``
without guessing.

Bind kinds mirror the driver's typed binding: strings, integers and booleans
get their own kind, everything else is bound as a string.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from sql.statement_builder import StatementBuilder


class BindKind(Enum):
    """Type hint passed to the driver alongside a bound value."""

    STRING = 'string'
    INTEGER = 'integer'
    BOOLEAN = 'boolean'


def infer_bind_kind(value: Any) -> BindKind:
    """
    Infer the bind kind from a value's Python type.

    Args:
        value: Value about to be bound

    Returns:
        BOOLEAN for bool, INTEGER for int, STRING otherwise
    """
    # bool is a subclass of int, check it first
    if isinstance(value, bool):
        return BindKind.BOOLEAN
    if isinstance(value, int):
        return BindKind.INTEGER
    return BindKind.STRING


@dataclass(frozen=True)
class Scalar:
    """A value bound through its own named marker."""

    value: Any


@dataclass(frozen=True)
class SubQuery:
    """A nested select builder rendered inline instead of bound."""

    builder: 'StatementBuilder'


PredicateValue = Union[Scalar, SubQuery]
