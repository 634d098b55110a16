"""
Output abstraction for the CLI.

Commands write through an OutputWriter so they can be tested without
capturing stdout.
"""

import sys
from typing import Protocol, TextIO


class OutputWriter(Protocol):
    """Protocol for CLI output writing."""

    def write(self, text: str = "") -> None:
        """Write text with trailing newline."""
        ...


class ConsoleOutput:
    """
    Output writer for a stream (stdout by default).

    Example:
        out = ConsoleOutput()
        out.write("QA")
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream if stream is not None else sys.stdout

    def write(self, text: str = "") -> None:
        print(text, file=self._stream)


class BufferedOutput:
    """
    Output writer that captures lines in memory.

    Example:
        out = BufferedOutput()
        out.write("dev")
        out.write("QA")
        assert out.lines == ["dev", "QA"]
    """

    def __init__(self) -> None:
        self._lines: list[str] = []

    def write(self, text: str = "") -> None:
        self._lines.append(text)

    @property
    def lines(self) -> list[str]:
        return self._lines.copy()

    @property
    def text(self) -> str:
        return "\n".join(self._lines) + ("\n" if self._lines else "")
