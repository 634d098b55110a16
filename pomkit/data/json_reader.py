"""
JSON test data reader.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pomkit.exceptions import DataError
from pomkit.log import Logger, get_logger

from .base import existing_file


class JsonReader:
    """
    Reads a JSON document. Relative paths are resolved against base_dir.

    Example:
        reader = JsonReader(base_dir="tests/data")
        payload = reader.read("json/assignment.json")
    """

    def __init__(self, base_dir: str | Path | None = None, logger: Logger | None = None):
        self._base_dir = Path(base_dir) if base_dir is not None else None
        self._lg = logger or get_logger("data")

    def _locate(self, path: str | Path) -> Path:
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = (self._base_dir or Path.cwd()) / candidate
        return candidate

    def read(self, path: str | Path) -> Any:
        """
        Parse a JSON file.

        Raises:
            DataFileNotFound: If the file does not exist
            DataError: If the file is not valid UTF-8 JSON
        """
        resolved = existing_file(self._locate(path), "JSON")
        self._lg.info(f"loading json test data from: {path}")
        try:
            with open(resolved, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            self._lg.error(f"error reading json file: {e}")
            raise DataError(f"Invalid JSON: {e.msg}", file=str(resolved), line=e.lineno) from e
        except UnicodeDecodeError as e:
            self._lg.error(f"error reading json file: {e}")
            raise DataError(
                f"File is not valid utf-8: {e.reason}", file=str(resolved), position=e.start
            ) from e

        self._lg.info(f"json data loaded successfully from: {path}")
        return data
