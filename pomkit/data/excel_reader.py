"""
Excel test data reader (openpyxl).

Every cell is rendered as text and empty cells become "", so rows from a
workbook compare the same way regardless of how a cell was typed in Excel.
"""

from __future__ import annotations

import datetime
import zipfile
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.workbook.workbook import Workbook

from pomkit.exceptions import DataError
from pomkit.log import Logger, get_logger

from .base import Row, RowFilter, existing_file, pick_row, select_columns
from .exceptions import SheetNotFound


def cell_text(value: Any) -> str:
    """
    Render a cell value as text.

    Whole floats drop their fraction ("3.0" -> "3"), dates render as ISO
    dates, and midnight datetimes as dates too.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime.datetime):
        if value.time() == datetime.time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, datetime.date):
        return value.isoformat()
    return str(value).strip()


def _sheet_rows(values: Iterable[tuple[Any, ...]]) -> list[Row]:
    """Turn raw sheet rows into dicts keyed by the header row."""
    rows_iter = iter(values)
    header: list[str] = []
    for first in rows_iter:
        header = [cell_text(v) for v in first]
        if any(header):
            break
    else:
        return []

    rows: list[Row] = []
    for raw in rows_iter:
        cells = [cell_text(v) for v in raw]
        if not any(cells):
            continue
        cells += [""] * (len(header) - len(cells))
        rows.append({col: cell for col, cell in zip(header, cells) if col})
    return rows


class ExcelReader:
    """
    Reads test data rows from .xlsx/.xlsm workbooks.

    Example:
        reader = ExcelReader()
        reader.sheet_names("tests/data/excel/assignments.xlsx")  # ['Sheet1', 'Regression']
        rows = reader.read("tests/data/excel/assignments.xlsx", sheet="Regression")
    """

    def __init__(self, logger: Logger | None = None):
        self._lg = logger or get_logger("data")

    def _open(self, path: str | Path) -> tuple[Path, Workbook]:
        resolved = existing_file(path, "Excel")
        try:
            wb = openpyxl.load_workbook(resolved, read_only=True, data_only=True)
        except (zipfile.BadZipFile, InvalidFileException) as e:
            self._lg.error(f"error opening excel file: {e}")
            raise DataError(f"Not a readable Excel workbook: {e}", file=str(resolved)) from e
        return resolved, wb

    def read(self, path: str | Path, sheet: str | None = None) -> list[Row]:
        """
        Read the rows of one sheet.

        Args:
            path: Workbook path
            sheet: Sheet name (default: the first sheet)

        Raises:
            DataFileNotFound: If the workbook does not exist
            SheetNotFound: If the workbook has no such sheet
            DataError: If the file is not a readable workbook
        """
        resolved, wb = self._open(path)
        self._lg.info(f"reading excel file: {resolved}")
        try:
            if sheet is None:
                ws = wb.worksheets[0]
            elif sheet in wb.sheetnames:
                ws = wb[sheet]
            else:
                error = SheetNotFound(sheet, wb.sheetnames, str(resolved))
                self._lg.error(f"error reading excel file: {error}")
                raise error
            rows = _sheet_rows(ws.iter_rows(values_only=True))
        finally:
            wb.close()

        self._lg.info(f"successfully read {len(rows)} rows from excel")
        return rows

    def sheet_names(self, path: str | Path) -> list[str]:
        _, wb = self._open(path)
        try:
            return list(wb.sheetnames)
        finally:
            wb.close()

    def read_all_sheets(self, path: str | Path) -> dict[str, list[Row]]:
        """Read every sheet, keyed by sheet name in workbook order."""
        resolved, wb = self._open(path)
        self._lg.info(f"reading all sheets from excel file: {resolved}")
        try:
            result = {
                ws.title: _sheet_rows(ws.iter_rows(values_only=True))
                for ws in wb.worksheets
            }
        finally:
            wb.close()

        self._lg.info(f"successfully read {len(result)} sheets from excel")
        return result

    def read_columns(
        self, path: str | Path, columns: list[str], sheet: str | None = None
    ) -> list[Row]:
        return select_columns(self.read(path, sheet), columns)

    def read_with_filter(
        self, path: str | Path, predicate: RowFilter, sheet: str | None = None
    ) -> list[Row]:
        return [row for row in self.read(path, sheet) if predicate(row)]

    def read_row(self, path: str | Path, index: int, sheet: str | None = None) -> Row:
        return pick_row(self.read(path, sheet), index)

    def row_count(self, path: str | Path, sheet: str | None = None) -> int:
        return len(self.read(path, sheet))
