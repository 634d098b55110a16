"""
CSV test data reader.

The first row holds the column names. Blank lines are skipped, cells are
trimmed, and numeric cells are cast to int or float. Everything else stays text.
"""

from __future__ import annotations

import csv
import re
from pathlib import Path
from typing import Any

from pomkit.exceptions import DataError
from pomkit.log import Logger, get_logger

from .base import Row, RowFilter, existing_file, pick_row, select_columns

_INT_RE = re.compile(r"^[+-]?\d+$")
_FLOAT_RE = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$")


def cast_cell(value: str) -> Any:
    """
    Cast a trimmed CSV cell to int or float where it looks like a number.

    Examples:
        >>> cast_cell("42"), cast_cell("1.5"), cast_cell("TRUE")
        (42, 1.5, 'TRUE')
    """
    if _INT_RE.match(value):
        return int(value)
    if _FLOAT_RE.match(value):
        return float(value)
    return value


class CsvReader:
    """
    Reads test data rows from CSV files.

    Example:
        reader = CsvReader()
        users = reader.read("tests/data/csv/users.csv")
        admins = reader.read_with_filter(path, lambda row: row["role"] == "admin")
    """

    def __init__(self, logger: Logger | None = None, encoding: str = "utf-8-sig"):
        self._lg = logger or get_logger("data")
        self._encoding = encoding

    def read(self, path: str | Path) -> list[Row]:
        """
        Read all rows of a CSV file.

        Raises:
            DataFileNotFound: If the file does not exist
            DataError: If the file cannot be decoded, or a row has more cells
                than the header has columns
        """
        resolved = existing_file(path, "CSV")
        self._lg.info(f"reading csv file: {resolved}")

        try:
            rows = self._parse(resolved)
        except DataError as e:
            self._lg.error(f"error reading csv file: {e}")
            raise

        self._lg.info(f"successfully read {len(rows)} records from csv")
        return rows

    def _parse(self, path: Path) -> list[Row]:
        try:
            with open(path, newline="", encoding=self._encoding) as f:
                reader = csv.reader(f)
                lines = [
                    (reader.line_num, cells)
                    for cells in reader
                    if any(cell.strip() for cell in cells)
                ]
        except UnicodeDecodeError as e:
            raise DataError(
                f"File is not valid {self._encoding}: {e.reason}",
                file=str(path),
                position=e.start,
            ) from e

        if not lines:
            return []

        header = [cell.strip() for cell in lines[0][1]]
        rows: list[Row] = []
        for line_no, cells in lines[1:]:
            if len(cells) > len(header):
                raise DataError(
                    f"Row has {len(cells)} cells but the header has {len(header)} columns",
                    file=str(path),
                    line=line_no,
                )
            padded = [c.strip() for c in cells] + [""] * (len(header) - len(cells))
            rows.append(
                {col: cast_cell(cell) for col, cell in zip(header, padded)}
            )
        return rows

    def read_columns(self, path: str | Path, columns: list[str]) -> list[Row]:
        return select_columns(self.read(path), columns)

    def read_with_filter(self, path: str | Path, predicate: RowFilter) -> list[Row]:
        return [row for row in self.read(path) if predicate(row)]

    def read_row(self, path: str | Path, index: int) -> Row:
        """
        Raises:
            RowIndexError: If index is outside the data set
        """
        return pick_row(self.read(path), index)

    def row_count(self, path: str | Path) -> int:
        return len(self.read(path))
