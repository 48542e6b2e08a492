"""
Utility functions for SCP Merge.

This module provides logging setup, error message formatting and output
file context management.
"""

from scpmerge.utils.error_handler import (
    handle_image_error,
    EXIT_FAILURE,
    EXIT_USAGE,
)

from scpmerge.utils.logging import (
    setup_logging,
    log_system_info,
    log_operation,
    log_performance,
)

from scpmerge.utils.context_managers import (
    OutputFileContext,
)

__all__ = [
    # Error handling
    "handle_image_error",
    "EXIT_FAILURE",
    "EXIT_USAGE",

    # Logging
    "setup_logging",
    "log_system_info",
    "log_operation",
    "log_performance",

    # Context managers
    "OutputFileContext",
]
