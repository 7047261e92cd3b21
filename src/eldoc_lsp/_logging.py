"""Colored logging configuration for eldoc-lsp."""

from __future__ import annotations

import logging
import sys
from typing import ClassVar, TextIO


class PlainFormatter(logging.Formatter):
    """Formatter producing JupyterLab style lines without colors.

    Formats log messages as:
    [L YYYY-MM-DD HH:MM:SS.mmm module] message
    """

    LEVEL_CODES: ClassVar[dict[str, str]] = {
        "DEBUG": "D",
        "INFO": "I",
        "WARNING": "W",
        "ERROR": "E",
        "CRITICAL": "C",
    }

    def _module_name(self, record: logging.LogRecord) -> str:
        # Drop the package prefix for shorter lines
        if record.name.startswith("eldoc_lsp."):
            return record.name[len("eldoc_lsp.") :]
        if record.name == "eldoc_lsp":
            return "EldocLSP"
        return record.name

    def _prefix(self, record: logging.LogRecord) -> str:
        level_code = self.LEVEL_CODES.get(record.levelname, record.levelname[0])
        ct = self.converter(record.created)
        timestamp = (
            f"{ct.tm_year:04d}-{ct.tm_mon:02d}-{ct.tm_mday:02d} "
            f"{ct.tm_hour:02d}:{ct.tm_min:02d}:{ct.tm_sec:02d}.{int(record.msecs):03d}"
        )
        return f"[{level_code} {timestamp} {self._module_name(record)}]"

    def format(self, record: logging.LogRecord) -> str:
        message = f"{self._prefix(record)} {record.getMessage()}"
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


class ColoredFormatter(PlainFormatter):
    """Formatter coloring the line prefix by log level."""

    COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET: ClassVar[str] = "\033[0m"

    def _prefix(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        return f"{color}{super()._prefix(record)}{self.RESET}"


def setup_colored_logging(level: int = logging.INFO, stream: TextIO | None = None) -> None:
    """Configure root logging for eldoc-lsp.

    Args:
        level: The logging level to use (e.g., logging.INFO, logging.DEBUG)
        stream: Output stream, stderr by default. The LSP stdio transport owns stdout.
    """
    stream = stream or sys.stderr
    supports_color = hasattr(stream, "isatty") and stream.isatty()
    formatter = ColoredFormatter() if supports_color else PlainFormatter()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
