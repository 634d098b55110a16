"""
Custom exceptions for the logging system.
"""

from typing import Any

from pomkit.exceptions import PomError


class LogError(PomError):
    """Base exception for logging-related errors."""

    pass


class InvalidLogLevelError(LogError):
    """Raised when an invalid log level is specified."""

    def __init__(self, level: Any) -> None:
        self.level = level
        super().__init__(f"Invalid log level: {level}")
