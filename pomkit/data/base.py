"""
Shared row helpers for the data readers.
"""

from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import Any

from .exceptions import DataFileNotFound, RowIndexError

Row = dict[str, Any]
RowFilter = Callable[[Row], bool]


def existing_file(path: str | Path, kind: str) -> Path:
    """Resolve a data file path, raising DataFileNotFound when it is missing."""
    resolved = Path(path).resolve()
    if not resolved.is_file():
        raise DataFileNotFound(str(resolved), kind)
    return resolved


def select_columns(rows: Iterable[Row], columns: Sequence[str]) -> list[Row]:
    """Project rows onto the given columns. Columns a row lacks are left out."""
    return [{c: row[c] for c in columns if c in row} for row in rows]


def pick_row(rows: Sequence[Row], index: int) -> Row:
    """Return rows[index]. Negative indexes are out of bounds."""
    if index < 0 or index >= len(rows):
        raise RowIndexError(index, len(rows))
    return rows[index]
