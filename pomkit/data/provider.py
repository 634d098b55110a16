"""
Unified, cached access to test data files.

The provider picks a reader by file extension and caches the rows it read.
Cached rows are returned as the same list object on every call, so callers
must treat them as read-only.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from pomkit.log import Logger, get_logger

from .base import Row, RowFilter, pick_row
from .csv_reader import CsvReader
from .excel_reader import ExcelReader
from .exceptions import UnsupportedFileType
from .json_reader import JsonReader

CSV_EXTENSIONS = (".csv",)
EXCEL_EXTENSIONS = (".xlsx", ".xlsm")
SCENARIO_COLUMN = "scenario"


class DataProvider:
    """
    Test data access with per-file caching.

    Cache keys are the path as given, suffixed with ":<sheet>" when a sheet
    is named.

    Example:
        provider = DataProvider(data_dir="tests/data")
        users = provider.get_csv_data("users.csv")             # tests/data/csv/users.csv
        smoke = provider.get_data_by_tag(path, "suite", "smoke")
        row = provider.get_row(path, 0)
    """

    def __init__(
        self,
        data_dir: str | Path = "tests/data",
        caching: bool = True,
        logger: Logger | None = None,
    ):
        self._data_dir = Path(data_dir)
        self._caching = caching
        self._cache: dict[str, list[Row]] = {}
        self._lg = logger or get_logger("data")
        self._csv = CsvReader(self._lg)
        self._excel = ExcelReader(self._lg)
        self._json = JsonReader(logger=self._lg)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def is_caching_enabled(self) -> bool:
        return self._caching

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def set_caching(self, enabled: bool) -> None:
        """Enable or disable caching. Disabling clears the cache."""
        self._caching = enabled
        if not enabled:
            self.clear_cache()

    def clear_cache(self) -> None:
        self._cache.clear()
        self._lg.info("data cache cleared")

    def _get_data(self, path: str | Path, sheet: str | None = None) -> list[Row]:
        cache_key = f"{path}:{sheet}" if sheet else str(path)

        if self._caching and cache_key in self._cache:
            self._lg.debug(f"returning cached data for: {cache_key}")
            return self._cache[cache_key]

        extension = Path(path).suffix.lower()
        if extension in CSV_EXTENSIONS:
            data = self._csv.read(path)
        elif extension in EXCEL_EXTENSIONS:
            data = self._excel.read(path, sheet)
        else:
            raise UnsupportedFileType(extension, CSV_EXTENSIONS + EXCEL_EXTENSIONS)

        if self._caching:
            self._cache[cache_key] = data
            self._lg.debug(f"cached data for: {cache_key}")
        return data

    def get_test_data(self, path: str | Path, sheet: str | None = None) -> list[Row]:
        """
        Read test data, choosing the reader by file extension.

        Raises:
            UnsupportedFileType: If the extension is not .csv, .xlsx or .xlsm
            DataFileNotFound: If the file does not exist
        """
        self._lg.info(f"loading test data from: {path}")
        return self._get_data(path, sheet)

    def get_from_data_dir(
        self, file_name: str, sub_dir: str | None = None, sheet: str | None = None
    ) -> list[Row]:
        """Read a file below the data directory, optionally in a subdirectory."""
        base = self._data_dir / sub_dir if sub_dir else self._data_dir
        return self.get_test_data(base / file_name, sheet)

    def get_csv_data(self, file_name: str) -> list[Row]:
        """Read <data_dir>/csv/<file_name>."""
        return self.get_from_data_dir(file_name, "csv")

    def get_excel_data(self, file_name: str, sheet: str | None = None) -> list[Row]:
        """Read <data_dir>/excel/<file_name>."""
        return self.get_from_data_dir(file_name, "excel", sheet)

    def get_row(self, path: str | Path, index: int, sheet: str | None = None) -> Row:
        """
        Raises:
            RowIndexError: If index is outside the data set (reports the row total)
        """
        return pick_row(self._get_data(path, sheet), index)

    def get_filtered_data(
        self, path: str | Path, predicate: RowFilter, sheet: str | None = None
    ) -> list[Row]:
        return [row for row in self._get_data(path, sheet) if predicate(row)]

    def get_data_by_tag(
        self, path: str | Path, tag_column: str, tag_value: str, sheet: str | None = None
    ) -> list[Row]:
        """Rows whose tag column equals tag_value, compared case-insensitively."""
        wanted = tag_value.lower()
        return self.get_filtered_data(
            path,
            lambda row: row.get(tag_column) is not None
            and str(row[tag_column]).lower() == wanted,
            sheet,
        )

    def get_data_for_scenario(
        self, path: str | Path, scenario: str, sheet: str | None = None
    ) -> list[Row]:
        return self.get_data_by_tag(path, SCENARIO_COLUMN, scenario, sheet)

    def row_count(self, path: str | Path, sheet: str | None = None) -> int:
        return len(self._get_data(path, sheet))

    def validate_required_fields(
        self, data: Sequence[Row], required_fields: Sequence[str]
    ) -> bool:
        """
        Check that every row has a non-empty value for every required field.

        Logs the first offending row and returns False; returns True otherwise.
        """
        for row in data:
            for field in required_fields:
                if row.get(field) in (None, ""):
                    self._lg.error(
                        f'missing required field "{field}" in row: '
                        f"{json.dumps(row, default=str)}"
                    )
                    return False
        return True

    def merge_data(
        self, paths: Sequence[str | Path], sheets: Sequence[str | None] | None = None
    ) -> list[Row]:
        """Concatenate rows from several files; sheets[i] applies to paths[i]."""
        merged: list[Row] = []
        for i, path in enumerate(paths):
            sheet = sheets[i] if sheets is not None and i < len(sheets) else None
            merged.extend(self._get_data(path, sheet))

        self._lg.info(
            f"merged data from {len(paths)} sources. total rows: {len(merged)}"
        )
        return merged

    def get_json_data(self, path: str | Path) -> Any:
        """Parse a JSON file. Relative paths resolve against the working directory."""
        return self._json.read(path)
