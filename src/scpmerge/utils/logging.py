"""
Logging configuration for SCP Merge.

Provides console logging through rich and optional file logging with
system information capture for troubleshooting.
"""

import logging
import sys
import platform
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

# Handlers added by setup_logging, replaced on the next call
_installed_handlers = []


def setup_logging(log_file: Optional[Union[str, Path]] = None,
                  level: int = logging.INFO) -> None:
    """
    Configure logging for the application.

    Console output goes to stderr through rich. When a log file is given,
    everything down to DEBUG is also written there.

    Args:
        log_file: Optional path to a log file
        level: Console logging level (default: logging.INFO)

    Example:
        >>> setup_logging("merge.log", logging.DEBUG)
        >>> logging.info("Merge started")
    """
    root = logging.getLogger()
    while _installed_handlers:
        handler = _installed_handlers.pop()
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.DEBUG if log_file else level)

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter('%(message)s'))
    root.addHandler(console_handler)
    _installed_handlers.append(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        root.addHandler(file_handler)
        _installed_handlers.append(file_handler)

    log_system_info()


def log_system_info() -> None:
    """
    Log system information for debugging purposes.

    Captures platform and Python details at DEBUG level.
    """
    logging.debug("=" * 60)
    logging.debug("SCP Merge - System Information")
    logging.debug("=" * 60)
    logging.debug("Platform: %s %s", platform.system(), platform.release())
    logging.debug("Machine: %s", platform.machine())
    logging.debug("Python version: %s", sys.version)
    logging.debug("Python executable: %s", sys.executable)
    logging.debug("=" * 60)


def log_operation(operation: str, details: str, level: int = logging.INFO) -> None:
    """
    Log an image operation with details.

    Args:
        operation: Name of the operation (e.g., "merge", "copy_track")
        details: Additional details about the operation
        level: Logging level (default: logging.INFO)

    Example:
        >>> log_operation("copy_track", "T10.0 from source 1", logging.DEBUG)
    """
    logging.log(level, "%s: %s", operation, details)


def log_performance(operation: str, duration: float, **metrics) -> None:
    """
    Log performance metrics for an operation.

    Args:
        operation: Name of the operation
        duration: Duration in seconds
        **metrics: Additional metrics (e.g., tracks=160, bytes=1048576)

    Example:
        >>> log_performance("merge", 0.42, tracks=164, bytes=9437184)
    """
    metrics_str = ", ".join(f"{k}={v}" for k, v in metrics.items())
    logging.info("Performance - %s: %.2fs, %s", operation, duration, metrics_str)
