"""Command line interface for inspecting the environment table."""

from .main import build_parser, main
from .output import BufferedOutput, ConsoleOutput, OutputWriter

__all__ = ["BufferedOutput", "ConsoleOutput", "OutputWriter", "build_parser", "main"]
