"""
Error handling utilities for SCP Merge.

Turns image and file system errors into short, actionable messages for
the command line.
"""

import errno
from typing import Optional

from scpmerge.imaging.image_formats import (
    ImageCorruptError,
    ImageError,
    ImageFormatError,
    ImageUnsupportedError,
)

# Exit status for any failed merge run
EXIT_FAILURE = 1
# Exit status for invalid command-line usage
EXIT_USAGE = 2


_ERRNO_MESSAGES = {
    errno.ENOENT: "File does not exist - check the path",
    errno.EACCES: "Permission denied - check file permissions",
    errno.EISDIR: "Path is a directory, not a file",
    errno.ENOSPC: "No space left on device",
    errno.EROFS: "File system is read-only",
    errno.EIO: "I/O error - storage may be failing",
}


def _find_os_error(error: BaseException) -> Optional[OSError]:
    current: Optional[BaseException] = error
    while current is not None:
        if isinstance(current, OSError):
            return current
        current = current.__cause__
    return None


def handle_image_error(error: BaseException, operation: str = "merge") -> str:
    """
    Build a user-facing message for a failed operation.

    Args:
        error: The exception raised
        operation: Description of the operation that failed

    Returns:
        Formatted error message

    Example:
        >>> handle_image_error(ImageUnsupportedError("Unsupported bitcell time",
        ...                                          "a.scp"), "load")
        'a.scp: Unsupported bitcell time'
    """
    if isinstance(error, ImageUnsupportedError):
        # Matches the per-file rejection message
        return f"{error.filepath}: {error.message}" if error.filepath else error.message

    if isinstance(error, ImageCorruptError):
        return f"{operation} failed: image is truncated or corrupt: {error}"

    if isinstance(error, ImageFormatError):
        return f"{operation} failed: invalid SCP image: {error}"

    os_error = _find_os_error(error)
    if os_error is not None and os_error.errno in _ERRNO_MESSAGES:
        location = ""
        if isinstance(error, ImageError) and error.filepath:
            location = f" [File: {error.filepath}]"
        elif os_error.filename:
            location = f" [File: {os_error.filename}]"
        return f"{operation} failed: {_ERRNO_MESSAGES[os_error.errno]}{location}"

    return f"{operation} failed: {error}"
