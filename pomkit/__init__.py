from importlib.metadata import PackageNotFoundError, version

from .config import (
    ConfigResolver,
    Credentials,
    EnvironmentDefinition,
    EnvironmentTable,
    EnvOverrides,
    MappingOverrides,
    UrlParts,
    derive_override_key,
    get_default_resolver,
    load_default_table,
    reset_default_resolver,
)
from .data import CsvReader, DataProvider, ExcelReader, JsonReader
from .exceptions import (
    ConfigError,
    DataError,
    PomError,
    ScreenshotError,
    ValidationError,
)
from .log import get_logger
from .screenshot import ScreenshotHelper
from .security import SecretMasker, get_masker

# Version is read from package metadata (pyproject.toml)
try:
    __version__ = version("pomkit")
except PackageNotFoundError:
    # Package not installed, use fallback (development mode)
    __version__ = "0.1.0-dev"

# Explicit public API
__all__ = [
    # Version
    "__version__",
    # Configuration
    "ConfigResolver",
    "Credentials",
    "EnvironmentDefinition",
    "EnvironmentTable",
    "EnvOverrides",
    "MappingOverrides",
    "UrlParts",
    "derive_override_key",
    "get_default_resolver",
    "load_default_table",
    "reset_default_resolver",
    # Test data
    "CsvReader",
    "DataProvider",
    "ExcelReader",
    "JsonReader",
    # Screenshots
    "ScreenshotHelper",
    # Logging and masking
    "SecretMasker",
    "get_logger",
    "get_masker",
    # Exceptions
    "ConfigError",
    "DataError",
    "PomError",
    "ScreenshotError",
    "ValidationError",
]
