"""
==================
Select result rows.
==================

``ResultCursor`` wraps an executed prepared statement and pulls rows from the
driver only when iterated. Rows are dictionaries keyed by column name.

Example:
    >>> cursor = StatementBuilder.select('users', 'id', 'name').execute(driver)
    >>> for row in cursor:
    ...     print(row['name'])
    >>>
    >>> frame = StatementBuilder.select('users', '*').execute(driver).to_dataframe()
"""

from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional

import pandas as pd

if TYPE_CHECKING:
    from utils.driver import PreparedStatement


class ResultCursor:
    """Lazily iterable rows of an executed select statement."""

    def __init__(self, prepared: 'PreparedStatement'):
        self._prepared = prepared
        self._exhausted = False

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        while not self._exhausted:
            row = self._prepared.fetch_row()
            if row is None:
                self.close()
                return
            yield row

    def first(self) -> Optional[Dict[str, Any]]:
        """Return the next row and close the cursor, or None if there is none."""
        row = next(iter(self), None)
        self.close()
        return row

    def fetch_all(self) -> List[Dict[str, Any]]:
        """Return every remaining row."""
        return list(self)

    def to_dataframe(self) -> pd.DataFrame:
        """
        Load every remaining row into a DataFrame.

        Returns:
            DataFrame with one column per selected column (empty if no rows)
        """
        return pd.DataFrame(self.fetch_all())

    def close(self) -> None:
        """Release the underlying statement. Safe to call more than once."""
        if not self._exhausted:
            self._exhausted = True
            self._prepared.close()
