"""
Logging for pomkit.

Extends Python's standard logging with:
- Structured extra fields rendered as [key:value]
- Colored console output with short timestamps
- Rotating execution and error log files
- Secret masking on every handler
- Test narrative helpers (test_start, test_end, step, verify, test_data)

Usage:
    from pomkit.log import get_logger

    lg = get_logger("login")
    lg.test_start("valid login")
    lg.step("open login page")

The framework root logger is created lazily from LOG_LEVEL and POM_LOG_DIR
on first use; call configure() first to choose a different configuration.
"""

from __future__ import annotations

from pomkit.security import SecretMasker

from .colors import ColorManager
from .config import LogConfig
from .constants import LogConstants
from .exceptions import InvalidLogLevelError, LogError
from .factory import LoggerFactory
from .formatters import ConsoleFormatter, FileFormatter
from .logger import Logger

_root: Logger | None = None


def resolve_level(s: str | int | bool) -> int | bool:
    """
    Resolve log level from string, numeric value, or boolean.

    Raises:
        InvalidLogLevelError: If the log level is invalid
    """
    return LogConfig._resolve_level(s)


def configure(
    config: LogConfig | None = None, masker: SecretMasker | None = None
) -> Logger:
    """
    (Re)create the framework root logger.

    Any previous root logger's handlers are closed. Child loggers obtained
    earlier keep pointing at the old root, so configure before creating
    components.

    Args:
        config: Logging configuration (default: LogConfig.from_env())
        masker: Secret masker for the handlers (default: the global masker)

    Returns:
        The new root logger
    """
    global _root
    if _root is not None:
        LoggerFactory.close(_root)
    _root = LoggerFactory.create(
        LogConstants.ROOT_NAME, config or LogConfig.from_env(), masker
    )
    return _root


def get_root_logger() -> Logger:
    """Return the framework root logger, creating it on first use."""
    if _root is None:
        return configure()
    return _root


def get_logger(name: str | None = None) -> Logger:
    """
    Return a framework logger.

    Args:
        name: Child name ("config" -> "/pomkit/config"), or None for the root

    Returns:
        Logger sharing the root logger's handlers
    """
    root = get_root_logger()
    if not name:
        return root
    return LoggerFactory.create_child(root, name)


def reset() -> None:
    """Close and forget the framework root logger."""
    global _root
    if _root is not None:
        LoggerFactory.close(_root)
    _root = None


__all__ = [
    "ColorManager",
    "ConsoleFormatter",
    "FileFormatter",
    "InvalidLogLevelError",
    "LogConfig",
    "LogConstants",
    "LogError",
    "Logger",
    "LoggerFactory",
    "configure",
    "get_logger",
    "get_root_logger",
    "reset",
    "resolve_level",
]
