"""
Unified exception hierarchy for pomkit.

Every error raised by the framework derives from PomError, so a test run can
catch all framework failures with a single except clause while the concrete
subclasses (see pomkit.config.exceptions and pomkit.data.exceptions) keep the
diagnostics specific.
"""

from typing import Any


class PomError(Exception):
    """
    Base exception for all pomkit errors.

    Example:
        try:
            resolver.get_url("login")
        except PomError as e:
            lg.error(f"setup failed: {e}")
    """

    def __init__(self, message: str, **context: Any) -> None:
        """
        Initialize the exception with a message and optional context.

        Args:
            message: Human-readable error message
            **context: Additional context information (stored in self.context)
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """String representation with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class ConfigError(PomError):
    """
    Configuration-related errors.

    Raised when an environment, path or credential cannot be resolved, or
    when the environment table file cannot be loaded.
    """

    pass


class ValidationError(ConfigError):
    """
    Environment table validation errors.

    Raised by ConfigResolver.validate_config() when the table breaks one of
    its structural invariants.
    """

    pass


class DataError(PomError):
    """
    Test data errors.

    Examples:
        - Data file not found
        - Unsupported file type
        - Sheet not found in workbook
        - Row index out of bounds
    """

    pass


class ScreenshotError(PomError):
    """Raised when a screenshot cannot be captured or stored."""

    pass
