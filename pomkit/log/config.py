"""
Configuration for the logging system.

LogConfig is immutable so a logger's configuration cannot drift after the
handlers have been built from it.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .constants import LogConstants
from .exceptions import InvalidLogLevelError


@dataclass(frozen=True)
class LogConfig:
    """
    Immutable logger configuration.

    Attributes:
        level: Numeric log level, or False to disable logging
        colors: Colored console output
        console: Attach the console handler
        log_dir: Directory for the rotating log files, or None for no files
    """

    level: int | bool = logging.INFO
    colors: bool = True
    console: bool = True
    log_dir: Path | None = None

    @staticmethod
    def _resolve_level(level: str | int | bool) -> int | bool:
        """Resolve level parameter to int or False."""
        if isinstance(level, bool):
            return False if not level else logging.INFO
        if isinstance(level, str):
            if level.isnumeric():
                return int(level)
            if level.lower() in LogConstants.LEVEL_NAMES:
                return LogConstants.LEVEL_NAMES[level.lower()]
            raise InvalidLogLevelError(level)
        return level

    @classmethod
    def from_params(
        cls,
        level: str | int | bool = "info",
        colors: bool = True,
        console: bool = True,
        log_dir: str | Path | None = None,
    ) -> LogConfig:
        """
        Create LogConfig from individual parameters.

        Args:
            level: Log level (string name, numeric value, or False to disable logging)
            colors: Whether to enable colored console output
            console: Whether to log to the console
            log_dir: Directory for rotating log files (None disables file output)

        Returns:
            LogConfig instance
        """
        return cls(
            level=cls._resolve_level(level),
            colors=colors,
            console=console,
            log_dir=Path(log_dir) if log_dir is not None else None,
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> LogConfig:
        """
        Create LogConfig from environment variables.

        LOG_LEVEL sets the level (default: info). POM_LOG_DIR sets the log
        directory (default: ./logs).
        """
        env = os.environ if environ is None else environ
        return cls.from_params(
            level=env.get(LogConstants.LOG_LEVEL_ENV_VAR) or "info",
            log_dir=env.get(LogConstants.LOG_DIR_ENV_VAR)
            or LogConstants.DEFAULT_LOG_DIR,
        )
