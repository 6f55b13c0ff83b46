"""Logging configuration for srvbase.

Console output is colored by level; an optional file log captures
everything at DEBUG with timestamps. Uses % formatting (PEP 391).
"""

import copy
import logging
from pathlib import Path


class ColoredFormatter(logging.Formatter):
    """Add ANSI colors to log levels."""

    COLORS = {
        "DEBUG": "\033[96m",  # Cyan
        "INFO": "\033[92m",  # Green
        "WARNING": "\033[93m",  # Yellow
        "ERROR": "\033[91m",  # Red
        "CRITICAL": "\033[95m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors.

        Works on a copy so the file handler never sees color codes.

        Args:
            record: Log record to format

        Returns:
            Formatted log message with color codes.
        """
        levelname = record.levelname
        if levelname in self.COLORS:
            record = copy.copy(record)
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.RESET}"
        return super().format(record)


def setup_logging(
    verbose: bool = False,
    log_file: Path | None = None,
    use_colors: bool = True,
) -> None:
    """Configure logging.

    Safe to call more than once: handlers installed by a previous call
    are replaced rather than duplicated.

    Args:
        verbose: Enable DEBUG level (default: WARNING+ only)
        log_file: Optional file output path
        use_colors: Color the console level names
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    for handler in list(root_logger.handlers):
        if getattr(handler, "_srvbase", False):
            root_logger.removeHandler(handler)
            handler.close()

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)

    if use_colors:
        console_handler.setFormatter(ColoredFormatter("%(levelname)s: %(message)s"))
    else:
        console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    console_handler._srvbase = True  # type: ignore[attr-defined]
    root_logger.addHandler(console_handler)

    # File handler
    if log_file:
        root_logger.setLevel(logging.DEBUG)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        file_handler.setFormatter(file_formatter)
        file_handler._srvbase = True  # type: ignore[attr-defined]
        root_logger.addHandler(file_handler)

    # Suppress third-party loggers in default mode
    if not verbose:
        logging.getLogger("urllib3").setLevel(logging.WARNING)
        logging.getLogger("requests").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get logger for module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Logger instance for the module.
    """
    return logging.getLogger(name)
