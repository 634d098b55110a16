"""
Color management for console log output.
"""

import logging

from .constants import LogConstants


class ColorManager:
    """Centralized ANSI color code management."""

    RED = "\x1b[31"
    GREEN = "\x1b[32"
    YELLOW = "\x1b[33"
    BLUE = "\x1b[34"
    MAGENTA = "\x1b[35"
    CYAN = "\x1b[36"
    WHITE = "\x1b[37"
    DEFAULT = "\x1b[38"

    RESET = LogConstants.RESET

    COLORS: dict[int, str] = {
        logging.DEBUG: BLUE,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: MAGENTA,
    }

    @staticmethod
    def get_color_for_level(level: int) -> str:
        """
        Get color for a log level.

        Levels between the standard ones use the color of the nearest
        standard level below them.
        """
        for known in sorted(ColorManager.COLORS, reverse=True):
            if level >= known:
                return ColorManager.COLORS[known]
        return ColorManager.DEFAULT

    @staticmethod
    def colorize(text: str, level: int, bold: bool = False) -> str:
        """Wrap text in the color of the given level."""
        col = ColorManager.get_color_for_level(level)
        suffix = ";1m" if bold else "m"
        return f"{col}{suffix}{text}{ColorManager.RESET}"
