"""
Context managers for SCP Merge.

Provides safe output file handling so that a failed merge does not leave
a half-written image in place of the requested output.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import BinaryIO, Optional, Union


class OutputFileContext:
    """
    Context manager for writing an output image.

    In atomic mode the data is written to a freshly created temp file next
    to the output and renamed over the output path only when the block exits
    without an exception; on failure the temp file is removed. The temp file
    is created exclusively, so an existing file is never opened for writing
    in its place. In direct mode the output path is written in place and
    left as-is on failure.

    Attributes:
        path: Final output path
        atomic: Whether to write through a temp file
        stream: Open binary stream (set during context)
        write_path: Path actually written (set during context)

    Example:
        >>> with OutputFileContext("merged.scp") as stream:
        ...     stream.write(data)
        >>> # merged.scp now holds the complete data
    """

    def __init__(self, path: Union[str, Path], atomic: bool = True):
        """
        Initialize output file context.

        Args:
            path: Final output path
            atomic: Write through a temp file and rename on success
        """
        self.path = Path(path)
        self.atomic = atomic
        self.stream: Optional[BinaryIO] = None
        self.write_path: Optional[Path] = None

    def __enter__(self) -> BinaryIO:
        """
        Enter context - create the file.

        The output directory must already exist.

        Returns:
            Binary stream opened for read/write

        Raises:
            OSError: If the file cannot be created
        """
        # w+b: the merge seeks back to rewrite headers
        if self.atomic:
            self.stream = tempfile.NamedTemporaryFile(
                mode='w+b',
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix='.tmp',
                delete=False,
            )
            self.write_path = Path(self.stream.name)
        else:
            self.write_path = self.path
            self.stream = open(self.write_path, 'w+b')
        logging.debug("Opened %s (atomic=%s)", self.write_path, self.atomic)
        return self.stream

    def __exit__(self, exc_type, exc_val, exc_tb):
        """
        Exit context - flush, close and commit or discard.

        Returns:
            False to not suppress exceptions
        """
        if self.stream is None:
            return False

        try:
            if exc_type is None:
                self.stream.flush()
                os.fsync(self.stream.fileno())
        finally:
            self.stream.close()
            self.stream = None

        if not self.atomic:
            return False

        if exc_type is None:
            self.write_path.replace(self.path)
            logging.debug("Committed %s", self.path)
        else:
            try:
                self.write_path.unlink()
                logging.debug("Discarded %s", self.write_path)
            except OSError as e:
                logging.warning("Failed to remove temp file %s: %s", self.write_path, e)

        # Don't suppress exceptions
        return False
