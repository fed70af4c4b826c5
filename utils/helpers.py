"""
=================================
String and array helper functions.
=================================

Small pure functions shared by the statement builder for text assembly and
argument validation. None of them touch the database.

Functions:
- blank: Check whether a value counts as empty
- concat: Join non-blank parts with a separator (lists are flattened)
- whitelist: Validate a value against an allowed set
- prefix: Prefix a string or every string of a list
- is_square_array: Return the common length of column-major rows

Example:
    >>> from utils.helpers import concat, is_square_array
    >>>
    >>> concat(' ', 'SELECT', 'id', '', 'FROM users')
    'SELECT id FROM users'
    >>> is_square_array([['john', 'marie'], [31, 27]])
    2
"""

from typing import Any, Iterable, List, Sequence, Union

_MISSING = object()


def blank(value: Any) -> bool:
    """
    Determine whether a value is considered blank.

    None, whitespace-only strings and empty collections are blank. Numbers and
    booleans never are, so ``0`` and ``False`` are valid filter values.

    Args:
        value: Value to check

    Returns:
        True if the value is blank
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ''
    if isinstance(value, (bool, int, float)):
        return False
    if hasattr(value, '__len__'):
        return len(value) == 0
    return False


def concat(separator: str, *parts: Union[str, Iterable[Any], Any]) -> str:
    """
    Concatenate parts with a separator, skipping blank ones.

    Lists and tuples are flattened recursively.

    Args:
        separator: Text placed between two parts
        *parts: Strings, scalars or lists of them

    Returns:
        Concatenated string

    Raises:
        ValueError: If a part cannot be represented as a string
    """
    pieces: List[str] = []
    for part in parts:
        if blank(part):
            continue
        if isinstance(part, (list, tuple)):
            nested = concat(separator, *part)
            if nested:
                pieces.append(nested)
        elif isinstance(part, (str, int, float, bool)):
            pieces.append(str(part))
        else:
            raise ValueError(f"Cannot concatenate value of type {type(part).__name__}")
    return separator.join(pieces)


def whitelist(value: Any, allowed: Sequence[Any], default: Any = _MISSING) -> Any:
    """
    Validate a value against an allowed set.

    Args:
        value: Value to check
        allowed: Allowed values
        default: Returned when value is not allowed (optional)

    Returns:
        The value itself, or the default

    Raises:
        ValueError: If the value is not allowed and no default is given
    """
    if value in allowed:
        return value
    if default is not _MISSING:
        return default
    raise ValueError(f"Value {value!r} is not allowed here, expected one of {list(allowed)}")


def prefix(prefix_text: str, value: Union[str, Sequence[Any]]) -> Union[str, List[str]]:
    """Prefix a string, or every element of a list of strings."""
    if isinstance(value, str):
        return prefix_text + value
    result = []
    for element in value:
        if not isinstance(element, (str, int, float)):
            raise ValueError("prefix works only with strings")
        result.append(f"{prefix_text}{element}")
    return result


def is_square_array(rows: Sequence[Sequence[Any]]) -> Union[int, bool]:
    """
    Check that every inner sequence has the same length.

    Args:
        rows: Column-major rows (one inner sequence per column)

    Returns:
        The shared length, or False if lengths differ

    Raises:
        ValueError: If rows is empty
    """
    if blank(rows):
        raise ValueError("is_square_array expects a non-empty sequence")

    amount = len(rows[0])
    for column in rows:
        if len(column) != amount:
            return False
    return amount
