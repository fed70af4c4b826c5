"""
=========================
Bind parameter registry.
=========================

A ``BindRegistry`` is created by the caller of a rendering pass and threaded
through every builder and predicate that takes part in it, nested subqueries
and union members included. It hands out marker names that are unique for
the whole statement and remembers the value attached to each one.

Name derivation for predicates:
    1. ``<base>_<suffix>``                    e.g. ``age_min``, ``name_0``
    2. ``<base>_<sequence>_<suffix>``         e.g. ``age_3_min``
    3. ``<base>_<sequence>_<suffix>_<n>``     numeric counter, n >= 1

Example:
    >>> registry = BindRegistry()
    >>> registry.allocate('age', 'min', 0, 10)
    'age_min'
    >>> registry.allocate('age', 'min', 2, 30)
    'age_2_min'
    >>> registry.as_dict()
    {'age_min': 10, 'age_2_min': 30}
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Set

from sql.exceptions import ContractViolationError
from sql.values import BindKind, infer_bind_kind

_NON_WORD = re.compile(r'\W')


def bind_name(column: str) -> str:
    """Turn a (possibly qualified) column into a marker-safe base name."""
    return _NON_WORD.sub('_', column)


@dataclass(frozen=True)
class BoundParameter:
    """A named marker and the value bound to it."""

    name: str
    value: Any
    kind: BindKind


class BindRegistry:
    """Allocates collision-free marker names for one rendering pass."""

    def __init__(self):
        self._taken: Set[str] = set()
        self._parameters: Dict[str, BoundParameter] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._taken

    def __iter__(self) -> Iterator[BoundParameter]:
        return iter(self._parameters.values())

    def __len__(self) -> int:
        return len(self._parameters)

    def reserve(self, name: str) -> str:
        """
        Claim an exact marker name without attaching a value yet.

        Args:
            name: Marker name (without the leading colon)

        Returns:
            The reserved name

        Raises:
            ContractViolationError: If the name is already taken
        """
        if name in self._taken:
            raise ContractViolationError(f"Bind marker :{name} is already in use")
        self._taken.add(name)
        return name

    def register(self, name: str, value: Any, kind: Optional[BindKind] = None) -> str:
        """
        Attach a value to an exact marker name, reserving it if needed.

        Args:
            name: Marker name
            value: Value to bind
            kind: Bind kind, inferred from the value when omitted

        Returns:
            The marker name
        """
        if name not in self._taken:
            self.reserve(name)
        elif name in self._parameters:
            raise ContractViolationError(f"Bind marker :{name} already has a value")
        self._parameters[name] = BoundParameter(
            name, value, kind if kind is not None else infer_bind_kind(value)
        )
        return name

    def allocate(self, base: str, suffix: str, sequence_index: int, value: Any) -> str:
        """
        Derive a free marker name for a predicate value and register it.

        Args:
            base: Marker-safe column name
            suffix: Value position (``0``, ``1``...) or ``min``/``max``
            sequence_index: Index of the predicate inside its builder
            value: Value to bind

        Returns:
            The allocated marker name
        """
        candidate = f"{base}_{suffix}"
        if candidate in self._taken:
            candidate = f"{base}_{sequence_index}_{suffix}"
            counter = 1
            while candidate in self._taken:
                candidate = f"{base}_{sequence_index}_{suffix}_{counter}"
                counter += 1
        return self.register(candidate, value)

    def as_dict(self) -> Dict[str, Any]:
        """Return the bound values keyed by marker name, in render order."""
        return {parameter.name: parameter.value for parameter in self._parameters.values()}
