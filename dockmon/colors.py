"""
Terminal styling for the Dockmon client.

Escape codes are only emitted when stdout is a terminal and ``NO_COLOR`` is
unset, so piped or exported output stays plain text.
"""

import os
import sys


class Colors:
    """ANSI styling for log lines and status messages."""

    RED = '\033[0;31m'
    GREEN = '\033[0;32m'
    YELLOW = '\033[0;33m'
    BLUE = '\033[0;34m'
    GRAY = '\033[0;90m'
    BOLD_WHITE = '\033[1;37m'
    RESET = '\033[0m'

    # Same palette as the browser view
    LEVEL_COLORS = {
        'error': RED,
        'warning': YELLOW,
        'info': BLUE,
        'debug': GRAY,
        'default': GREEN,
    }

    enabled = sys.stdout.isatty() and 'NO_COLOR' not in os.environ

    @staticmethod
    def colorize(text: str, color: str) -> str:
        if not Colors.enabled:
            return text
        return f"{color}{text}{Colors.RESET}"

    @staticmethod
    def success(text: str) -> str:
        return Colors.colorize(text, Colors.GREEN)

    @staticmethod
    def error(text: str) -> str:
        return Colors.colorize(text, Colors.RED)

    @staticmethod
    def warning(text: str) -> str:
        return Colors.colorize(text, Colors.YELLOW)

    @staticmethod
    def info(text: str) -> str:
        return Colors.colorize(text, Colors.BLUE)

    @staticmethod
    def dim(text: str) -> str:
        """Timestamps and filter summaries."""
        return Colors.colorize(text, Colors.GRAY)

    @staticmethod
    def bold(text: str) -> str:
        return Colors.colorize(text, Colors.BOLD_WHITE)

    @staticmethod
    def level(text: str, level: str) -> str:
        """Color a log line by the level ``classify_level`` gave it."""
        return Colors.colorize(text, Colors.LEVEL_COLORS.get(level, Colors.GREEN))

    @staticmethod
    def state(state: str) -> str:
        """Running containers in green, anything else in yellow."""
        return Colors.success(state) if state == 'running' else Colors.warning(state)
