"""
Factory for creating and configuring loggers.

The framework logs through one root logger ("/pomkit") that owns the
handlers: a console handler, a rotating execution log with every record and
a rotating error log with ERROR and above. Components log through child
"view" loggers ("/pomkit/config", "/pomkit/data", ...) that delegate to the
root's handlers.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any, cast

from pomkit.security import SecretMasker, SecretMaskingFilter

from .config import LogConfig
from .constants import LogConstants
from .formatters import ConsoleFormatter, FileFormatter
from .logger import Logger


def _handler_level(config: LogConfig) -> int:
    return logging.CRITICAL + 1 if config.level is False else cast(int, config.level)


class LoggerFactory:
    """Factory for creating and configuring loggers."""

    @staticmethod
    def _console_handler(config: LogConfig) -> logging.Handler:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(_handler_level(config))
        handler.setFormatter(ConsoleFormatter(colors=config.colors))
        return handler

    @staticmethod
    def _file_handler(path: Path, level: int) -> logging.Handler:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=LogConstants.MAX_BYTES,
            backupCount=LogConstants.BACKUP_COUNT,
            encoding="utf-8",
        )
        handler.setLevel(level)
        handler.setFormatter(FileFormatter())
        return handler

    @staticmethod
    def create_handlers(config: LogConfig) -> list[logging.Handler]:
        """
        Build the handler set described by a LogConfig.

        Returns:
            Console handler (if enabled), then execution and error log
            handlers (if a log directory is configured)
        """
        handlers: list[logging.Handler] = []
        if config.console:
            handlers.append(LoggerFactory._console_handler(config))
        if config.log_dir is not None:
            log_dir = Path(config.log_dir)
            handlers.append(
                LoggerFactory._file_handler(
                    log_dir / LogConstants.EXECUTION_LOG, _handler_level(config)
                )
            )
            handlers.append(
                LoggerFactory._file_handler(
                    log_dir / LogConstants.ERROR_LOG,
                    max(logging.ERROR, _handler_level(config)),
                )
            )
        return handlers

    @staticmethod
    def create(
        name: str,
        config: LogConfig,
        masker: SecretMasker | None = None,
        extra: dict[str, Any] | None = None,
    ) -> Logger:
        """
        Create a root logger with its own handlers.

        Every handler gets a SecretMaskingFilter, so known secrets and
        password-like assignments are masked before they reach any output.

        Args:
            name: Logger name
            config: Logger configuration
            masker: Secret masker (default: the global masker)
            extra: Pre-populated extra fields to include in all log records

        Returns:
            Configured logger instance

        Example:
            >>> config = LogConfig.from_params(level="debug", log_dir="logs")
            >>> lg = LoggerFactory.create("/pomkit", config)
            >>> lg.info("run started", extra={"env": "QA"})
            [12:34:56] INFO: run started [env:QA]
        """
        lg = Logger(name, config, extra)
        for handler in LoggerFactory.create_handlers(config):
            handler.addFilter(SecretMaskingFilter(masker))
            lg.addHandler(handler)
        lg.propagate = False
        lg.parent = logging.root
        return lg

    @staticmethod
    def create_child(parent: Logger, name: str) -> Logger:
        """
        Create a child "view" logger that delegates to the root's handlers.

        Args:
            parent: Parent logger (root or another view logger)
            name: Child name, appended to the parent's path

        Returns:
            Child logger with no handlers of its own
        """
        root = parent._root_logger if parent._root_logger else parent
        lg = Logger(f"{parent.name}/{name}", parent.config, parent._extra)
        lg.setLevel(logging.NOTSET)
        lg._root_logger = root
        lg.parent = parent
        lg.propagate = False
        return lg

    @staticmethod
    def close(lg: Logger) -> None:
        """Flush, close and detach all handlers of a root logger."""
        for handler in list(lg.handlers):
            handler.flush()
            handler.close()
            lg.removeHandler(handler)
