"""
Exceptions raised by the test data readers and the data provider.
"""

from collections.abc import Iterable

from pomkit.exceptions import DataError


class DataFileNotFound(DataError):
    """Raised when a data file does not exist."""

    def __init__(self, path: str, kind: str = "Data") -> None:
        self.path = path
        super().__init__(f"{kind} file not found: {path}")


class UnsupportedFileType(DataError):
    """Raised when the data provider is asked for a format it cannot read."""

    def __init__(self, extension: str, supported: Iterable[str]) -> None:
        self.extension = extension
        self.supported = list(supported)
        super().__init__(
            f"Unsupported file type: {extension or '(none)'}. "
            f"Supported types: {', '.join(self.supported)}"
        )


class SheetNotFound(DataError):
    """Raised when a workbook has no sheet with the requested name."""

    def __init__(self, sheet: str, available: Iterable[str], path: str) -> None:
        self.sheet = sheet
        self.available = list(available)
        super().__init__(
            f'Sheet "{sheet}" not found in Excel file. '
            f"Available sheets: {', '.join(self.available)}",
            file=path,
        )


class RowIndexError(DataError, IndexError):
    """Raised when a row index is outside the data set."""

    def __init__(self, index: int, total: int) -> None:
        self.index = index
        self.total = total
        super().__init__(f"Row index {index} out of bounds. Total rows: {total}")
