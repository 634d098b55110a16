"""
Environment configuration and credential resolution.

This package provides:
- EnvironmentTable for loading the YAML environment table
- ConfigResolver for resolving base URLs, paths and credentials per environment
- Override sources for environment-variable driven overrides
"""

from .constants import DEFAULT_ENVIRONMENT, MAX_CONFIG_SIZE_BYTES
from .exceptions import (
    EmptyCredentialSet,
    EmptyPathSet,
    IncompleteCredentialPair,
    MissingBaseUrl,
    MissingField,
    NoEnvironmentsDefined,
    TableFormatError,
    UnknownCredential,
    UnknownEnvironment,
    UnknownPath,
)
from .models import Credentials, EnvironmentDefinition, UrlParts
from .overrides import (
    EnvOverrides,
    MappingOverrides,
    OverrideSource,
    derive_override_key,
)
from .resolver import ConfigResolver, get_default_resolver, reset_default_resolver
from .table import EnvironmentTable, get_table_file_path, load_default_table

__all__ = [
    # Resolution
    "ConfigResolver",
    "get_default_resolver",
    "reset_default_resolver",
    # Table
    "EnvironmentTable",
    "get_table_file_path",
    "load_default_table",
    # Models
    "Credentials",
    "EnvironmentDefinition",
    "UrlParts",
    # Overrides
    "EnvOverrides",
    "MappingOverrides",
    "OverrideSource",
    "derive_override_key",
    # Errors
    "EmptyCredentialSet",
    "EmptyPathSet",
    "IncompleteCredentialPair",
    "MissingBaseUrl",
    "MissingField",
    "NoEnvironmentsDefined",
    "TableFormatError",
    "UnknownCredential",
    "UnknownEnvironment",
    "UnknownPath",
    # Constants
    "DEFAULT_ENVIRONMENT",
    "MAX_CONFIG_SIZE_BYTES",
]
