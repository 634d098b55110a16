"""
Logger class for the logging system.

Extends logging.Logger with pre-populated structured fields, "view" child
loggers that share the root's handlers, and the narrative helpers test
suites use to mark test boundaries and steps.
"""

from __future__ import annotations

import collections
import json
import logging
from collections.abc import Mapping
from typing import Any

from .config import LogConfig
from .constants import LogConstants
from .formatters import EXTRA_ATTR


class Logger(logging.Logger):
    """
    Enhanced logger with structured extra fields.

    Extra fields given at construction are merged into every record; fields
    given per call win on conflict. Fields are kept on the record under a
    private attribute, so keys such as "name" or "message" never collide with
    LogRecord attributes.

    Example:
        lg.info("built base url", extra={"env": "QA", "url": url})
        # [10:12:44] INFO: built base url [env:QA] [url:https://...]
    """

    def __init__(
        self,
        name: str,
        config: LogConfig | None = None,
        extra: Mapping[str, Any] | None = None,
    ):
        """
        Initialize the logger.

        Args:
            name: Logger name
            config: Logger configuration (default: info level, console only)
            extra: Pre-populated extra fields to include in all log records
        """
        if config is None:
            config = LogConfig.from_params("info")

        if config.level is False:
            super().__init__(name, logging.CRITICAL + 1)
            self._logging_disabled = True
        else:
            super().__init__(name, config.level)
            self._logging_disabled = False

        self._config = config
        self._extra: dict[str, Any] = dict(extra or {})
        self._root_logger: Logger | None = None  # Set for derived "view" loggers

    @property
    def config(self) -> LogConfig:
        return self._config

    @property
    def disabled(self) -> bool:  # type: ignore[override]
        """Check if logging is disabled."""
        return self._logging_disabled

    @disabled.setter
    def disabled(self, value: bool) -> None:
        self._logging_disabled = value

    def isEnabledFor(self, level: int) -> bool:
        if self._logging_disabled:
            return False
        if not super().isEnabledFor(level):
            return False
        if self._root_logger is not None:
            return self._root_logger.isEnabledFor(level)
        return True

    def _merge_extra(self, extra: Mapping[str, Any] | None) -> dict[str, Any]:
        """Merge pre-populated extra fields with per-call extra fields."""
        merged: dict[str, Any]
        if isinstance(extra, collections.OrderedDict):
            merged = collections.OrderedDict(self._extra)
        else:
            merged = self._extra.copy()
        if extra:
            merged.update(extra)
        return merged

    def makeRecord(
        self,
        name: str,
        level: int,
        fn: str,
        lno: int,
        msg: object,
        args: Any,
        exc_info: Any,
        func: str | None = None,
        extra: Mapping[str, Any] | None = None,
        sinfo: str | None = None,
    ) -> logging.LogRecord:
        """Create log record, keeping extra fields under a private attribute."""
        record = super().makeRecord(
            name, level, fn, lno, msg, args, exc_info, func=func, sinfo=sinfo
        )
        # setattr avoids name mangling of the __ prefix
        setattr(record, EXTRA_ATTR, self._merge_extra(extra))
        return record

    def callHandlers(self, record: logging.LogRecord) -> None:
        """
        Pass a record to all relevant handlers.

        Derived "view" loggers delegate to the root logger's handlers instead
        of holding their own.
        """
        if self._root_logger is not None:
            for handler in self._root_logger.handlers:
                if record.levelno >= handler.level:
                    handler.handle(record)
        else:
            super().callHandlers(record)

    # Test narrative helpers

    def _banner(self, text: str) -> None:
        rule = "=" * LogConstants.BANNER_WIDTH
        self.info(rule)
        self.info(text)
        self.info(rule)

    def test_start(self, test_name: str) -> None:
        """Log a banner marking the start of a test."""
        self._banner(f"TEST STARTED: {test_name}")

    def test_end(self, test_name: str, status: str) -> None:
        """Log a banner marking the end of a test with its status (e.g. PASSED)."""
        self._banner(f"TEST {status.upper()}: {test_name}")

    def step(self, step: str) -> None:
        self.info(f"STEP: {step}")

    def verify(self, assertion: str) -> None:
        self.info(f"VERIFY: {assertion}")

    def test_data(self, data: Mapping[str, Any]) -> None:
        """Log test data as indented JSON."""
        self.info(f"TEST DATA: {json.dumps(dict(data), indent=2, default=str)}")
