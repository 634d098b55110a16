"""
Environment table loading.

The table is plain data kept in a YAML file (etc/environments.yaml by
default). It is loaded once, checked for shape, and exposed read-only.
"""

import os
from collections.abc import Iterator, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

import pydantic
import yaml  # type: ignore[import-untyped]

from .constants import (
    CONFIG_FILE_ENV_VAR,
    DEFAULT_CONFIG_FILENAME,
    MAX_CONFIG_SIZE_BYTES,
)
from .exceptions import TableFormatError
from .models import EnvironmentDefinition
from .schemas import validate_table


def _check_file_size(path: Path) -> None:
    """Check file size limit before parsing."""
    file_size = os.path.getsize(path)
    if file_size > MAX_CONFIG_SIZE_BYTES:
        raise TableFormatError(
            f"Environment table '{path}' is {file_size} bytes, "
            f"exceeding maximum size of {MAX_CONFIG_SIZE_BYTES} bytes "
            f"({MAX_CONFIG_SIZE_BYTES // (1024 * 1024)} MB)",
            file=str(path),
        )


def _format_pydantic_error(error: pydantic.ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


class EnvironmentTable(Mapping[str, EnvironmentDefinition]):
    """
    Read-only mapping of environment name to EnvironmentDefinition.

    Iteration order follows the table file, so error messages that enumerate
    environments list them in the order they were defined.

    Example:
        table = EnvironmentTable.from_file("etc/environments.yaml")
        qa = table["QA"]
        print(table.names())  # ['dev', 'QA', 'prod', 'local']
    """

    def __init__(self, environments: Mapping[str, EnvironmentDefinition]) -> None:
        self._environments = MappingProxyType(dict(environments))
        self._source: Path | None = None

    def __getitem__(self, name: str) -> EnvironmentDefinition:
        return self._environments[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._environments)

    def __len__(self) -> int:
        return len(self._environments)

    def __repr__(self) -> str:
        return f"EnvironmentTable({self.names()!r})"

    def names(self) -> list[str]:
        """Environment names in definition order."""
        return list(self._environments)

    @property
    def source(self) -> Path | None:
        """File the table was loaded from, if any."""
        return self._source

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EnvironmentTable":
        """
        Build a table from its parsed file form.

        Args:
            data: Mapping with a top-level "environments" mapping

        Returns:
            EnvironmentTable instance

        Raises:
            TableFormatError: If the structure does not match the table schema
        """
        if not isinstance(data, Mapping):
            raise TableFormatError(
                "Environment table must be a mapping with an 'environments' key"
            )
        try:
            checked = validate_table(dict(data))
        except pydantic.ValidationError as e:
            raise TableFormatError(
                f"Invalid environment table: {_format_pydantic_error(e)}"
            ) from e

        return cls(
            {
                key: EnvironmentDefinition.from_dict(env)
                for key, env in checked["environments"].items()
            }
        )

    @classmethod
    def from_file(cls, path: str | Path) -> "EnvironmentTable":
        """
        Load a table from a YAML file.

        Args:
            path: Path to the YAML table file

        Returns:
            EnvironmentTable instance

        Raises:
            FileNotFoundError: If the file does not exist
            TableFormatError: If the file is too large, not valid YAML, or
                does not match the table schema
        """
        resolved = Path(path).resolve()
        _check_file_size(resolved)

        with open(resolved) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise TableFormatError(
                    f"Environment table is not valid YAML: {e}", file=str(resolved)
                ) from e

        try:
            table = cls.from_dict(data or {})
        except TableFormatError as e:
            e.context.setdefault("file", str(resolved))
            raise
        table._source = resolved
        return table


def get_table_file_path(start: str | Path | None = None) -> Path:
    """
    Locate the environment table file.

    Uses POM_CONFIG_FILE when set; otherwise searches upward from ``start``
    (default: the current directory) for etc/environments.yaml.

    Returns:
        Path to the table file

    Raises:
        FileNotFoundError: If no table file can be found
    """
    explicit = os.environ.get(CONFIG_FILE_ENV_VAR)
    if explicit:
        return Path(explicit)

    current = Path(start or Path.cwd()).resolve()
    for parent in (current, *current.parents):
        candidate = parent / "etc" / DEFAULT_CONFIG_FILENAME
        if candidate.exists():
            return candidate

    raise FileNotFoundError(
        f"Could not find etc/{DEFAULT_CONFIG_FILENAME} above {current}. "
        f"Set {CONFIG_FILE_ENV_VAR} to point at the environment table."
    )


def load_default_table() -> EnvironmentTable:
    """Load the table from get_table_file_path()."""
    return EnvironmentTable.from_file(get_table_file_path())
