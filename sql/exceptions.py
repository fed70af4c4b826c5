"""
==============================
Statement builder error types.
==============================

Exceptions raised by the statement builder. Driver failures are not wrapped:
whatever the driver raises (usually ``sqlalchemy.exc.SQLAlchemyError``)
reaches the caller unchanged.

Hierarchy:
    StatementBuilderError
    ├── ContractViolationError  (bad arguments, also a ValueError)
    └── UsageStateError         (wrong call order, also a RuntimeError)
"""


class StatementBuilderError(Exception):
    """Base exception for all statement builder errors."""
    pass


class ContractViolationError(StatementBuilderError, ValueError):
    """Exception raised when a call receives invalid arguments.

    Raised for comparators outside the allowed set, column/row count
    mismatches, joins or unions on non-select statements and non-square
    insert batches.
    """
    pass


class UsageStateError(StatementBuilderError, RuntimeError):
    """Exception raised when a builder or predicate is used out of order.

    Raised when a predicate finalizer is called twice, when a statement with
    an unfinalized predicate is rendered, or when a builder is modified after
    its statement was materialized.
    """
    pass
