"""
Logging utilities for OneLiner.

This module provides a structured logging system for the application,
with support for different log levels, file output, and formatting.
Console logs go to stderr so stdout stays clean for shell capture.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional, TextIO, Union

from oneliner.config.settings import settings
from oneliner.utils import platform_utils

ROOT_LOGGER = "oneliner"


class LogFormatter(logging.Formatter):
    """Custom formatter for logs with color support."""

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",  # Reset
    }

    def __init__(self, use_colors: bool = True):
        """
        Initialize the formatter.

        Args:
            use_colors (bool): Whether to use colors in the output.
        """
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        """
        Format the log record with optional colors.

        Args:
            record (logging.LogRecord): The log record to format.

        Returns:
            str: Formatted log message.
        """
        original_levelname = record.levelname

        if self.use_colors and record.levelname in self.COLORS:
            record.levelname = (
                f"{self.COLORS[record.levelname]}"
                f"{record.levelname}{self.COLORS['RESET']}"
            )

        result = super().format(record)

        # Restore the original levelname
        record.levelname = original_levelname

        return result


def setup_logging(
    log_level: str = "ERROR",
    log_file: Optional[Union[str, Path]] = None,
    use_colors: bool = True,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Set up the logging system.

    Args:
        log_level (str): Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file (Optional[Union[str, Path]]): Path to log file.
        use_colors (bool): Whether to use colors in console output.
        stream (Optional[TextIO]): Console stream, stderr by default.

    Returns:
        logging.Logger: Configured logger.
    """
    logger = logging.getLogger(ROOT_LOGGER)

    # Clear any existing handlers to avoid duplicate logs
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    requested = (log_level or "ERROR").upper()
    valid_names = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    if requested not in valid_names:
        requested = "ERROR"
    numeric_level = getattr(logging, requested, logging.ERROR)
    logger.setLevel(numeric_level)
    logger.propagate = False

    # Keep third-party loggers quiet unless explicitly elevated by caller
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setLevel(numeric_level)
    supports_colors = platform_utils.supports_ansi_colors() and use_colors
    console_handler.setFormatter(LogFormatter(use_colors=supports_colors))
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        os.makedirs(log_path.parent, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(LogFormatter(use_colors=False))
        logger.addHandler(file_handler)

    logger.debug(f"Logging initialized at level {requested}")

    return logger


def initialize_logging(debug: bool = False) -> logging.Logger:
    """
    Initialize logging based on application settings.

    Debug sessions log everything and always write a log file; normal
    sessions use the configured level, which is quiet by default so log
    lines do not tear through the live terminal UI.

    Returns:
        logging.Logger: Configured logger.
    """
    if debug:
        settings.set("advanced", "debug_mode", True)
        return setup_logging(
            log_level="DEBUG",
            log_file=settings.get_log_file_path(),
            use_colors=True,
        )

    return setup_logging(
        log_level=settings.get("advanced", "log_level", "ERROR"),
        log_file=settings.get_log_file_path(),
        use_colors=True,
    )
