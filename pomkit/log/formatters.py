"""
Log formatters.

Both formatters render the structured extra fields carried by
pomkit.log.Logger records as trailing ``[key:value]`` pairs:

    [2026-01-05 10:12:44] INFO: built base url [env:QA] [url:https://...]
"""

import collections
import logging

from .colors import ColorManager
from .constants import LogConstants

EXTRA_ATTR = "__pomkit__extra"


def format_extra(record: logging.LogRecord) -> str:
    """Render the record's extra fields, or an empty string if there are none."""
    extra = getattr(record, EXTRA_ATTR, None)
    if not extra:
        return ""

    keys = extra.keys()
    if not isinstance(extra, collections.OrderedDict):
        keys = sorted(keys)

    parts = []
    for key in keys:
        value = extra[key]
        if isinstance(value, BaseException):
            parts.append(f"[{key}:{value.__class__.__name__}: {value}]")
        else:
            parts.append(f"[{key}:{value}]")
    return " " + " ".join(parts)


class FileFormatter(logging.Formatter):
    """Plain formatter for log files, with full date and exception stacks."""

    def __init__(self) -> None:
        super().__init__(LogConstants.FILE_FORMAT, LogConstants.FILE_DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extra = format_extra(record)
        if not extra:
            return line
        # Keep stack traces below the extra fields
        head, sep, tail = line.partition("\n")
        return head + extra + sep + tail


class ConsoleFormatter(logging.Formatter):
    """Console formatter with short timestamps and optional level colors."""

    def __init__(self, colors: bool = True) -> None:
        super().__init__(
            LogConstants.CONSOLE_FORMAT, LogConstants.CONSOLE_DATE_FORMAT
        )
        self._colors = colors

    @property
    def colors(self) -> bool:
        return self._colors

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        asctime = self.formatTime(record, self.datefmt)
        level = record.levelname
        if self._colors:
            level = ColorManager.colorize(level, record.levelno, bold=True)

        line = f"[{asctime}] {level}: {record.message}{format_extra(record)}"

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            line += "\n" + record.exc_text
        return line
