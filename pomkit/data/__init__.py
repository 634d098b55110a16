"""
Test data readers and the caching data provider.

Example:
    from pomkit.data import DataProvider

    provider = DataProvider()
    for row in provider.get_data_for_scenario("tests/data/csv/login.csv", "valid"):
        ...
"""

from .base import Row, RowFilter
from .csv_reader import CsvReader, cast_cell
from .excel_reader import ExcelReader, cell_text
from .exceptions import (
    DataFileNotFound,
    RowIndexError,
    SheetNotFound,
    UnsupportedFileType,
)
from .json_reader import JsonReader
from .provider import DataProvider

__all__ = [
    "CsvReader",
    "DataFileNotFound",
    "DataProvider",
    "ExcelReader",
    "JsonReader",
    "Row",
    "RowFilter",
    "RowIndexError",
    "SheetNotFound",
    "UnsupportedFileType",
    "cast_cell",
    "cell_text",
]
