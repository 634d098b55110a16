"""
Constants and configuration values for the logging system.
"""

import logging


class LogConstants:
    """Constants for the logging system."""

    # Format strings
    FILE_FORMAT: str = "[%(asctime)s] %(levelname)s: %(message)s"
    CONSOLE_FORMAT: str = "[%(asctime)s] %(levelname)s: %(message)s"
    FILE_DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"
    CONSOLE_DATE_FORMAT: str = "%H:%M:%S"

    # Log files, written under the log directory
    EXECUTION_LOG: str = "test-execution.log"
    ERROR_LOG: str = "errors.log"
    DEFAULT_LOG_DIR: str = "logs"

    # Rotation: 5MB per file, 5 backups
    MAX_BYTES: int = 5 * 1024 * 1024
    BACKUP_COUNT: int = 5

    # Environment variables
    LOG_LEVEL_ENV_VAR: str = "LOG_LEVEL"
    LOG_DIR_ENV_VAR: str = "POM_LOG_DIR"

    # Root logger name; children are "/pomkit/<name>"
    ROOT_NAME: str = "/pomkit"

    # Width of test banner rules
    BANNER_WIDTH: int = 80

    LEVEL_NAMES: dict[str, int | bool] = {
        "critical": logging.CRITICAL,
        "error": logging.ERROR,
        "warning": logging.WARNING,
        "warn": logging.WARNING,
        "info": logging.INFO,
        "debug": logging.DEBUG,
        "false": False,  # Special value to disable all logging
    }

    # ANSI escape sequences
    RESET: str = "\x1b[0m"
