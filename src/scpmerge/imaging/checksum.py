"""
SCP checksum helpers.

The SCP checksum is a 32-bit wraparound sum of byte values covering every
byte of the file after the 16-byte fixed header: the track offset table,
all track headers and all flux payloads.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Union

import numpy as np

from .image_formats import (
    ImageCorruptError,
    ImageReadError,
    SCP_CHECKSUM_OFFSET,
    SCP_HEADER_SIZE,
    UINT32_MAX,
)

logger = logging.getLogger(__name__)

# Read size when summing whole files
CHECKSUM_CHUNK_SIZE = 1 << 20


def checksum(data: Union[bytes, bytearray, memoryview]) -> int:
    """
    Sum all byte values modulo 2**32.

    Args:
        data: Byte span to sum

    Returns:
        Unsigned 32-bit byte sum
    """
    if not len(data):
        return 0
    values = np.frombuffer(data, dtype=np.uint8)
    return int(values.sum(dtype=np.uint64)) & UINT32_MAX


def add_checksum(total: int, value: int) -> int:
    """Fold a partial sum into a running total with 32-bit wraparound."""
    return (total + value) & UINT32_MAX


class ChecksumAccumulator:
    """Running 32-bit byte sum over successive spans."""

    def __init__(self, initial: int = 0):
        self.total = initial & UINT32_MAX

    def update(self, data: Union[bytes, bytearray, memoryview]) -> int:
        self.total = add_checksum(self.total, checksum(data))
        return self.total


def compute_image_checksum(stream: BinaryIO) -> int:
    """
    Compute the checksum of an SCP image stream.

    Sums every byte from offset 0x10 to end of stream. The stream position
    is left at end of stream.
    """
    stream.seek(SCP_HEADER_SIZE)
    accumulator = ChecksumAccumulator()
    while True:
        chunk = stream.read(CHECKSUM_CHUNK_SIZE)
        if not chunk:
            break
        accumulator.update(chunk)
    return accumulator.total


@dataclass(frozen=True)
class ChecksumReport:
    """
    Stored versus recomputed checksum of an image file.

    Attributes:
        stored: Checksum field read from offset 0x0C
        computed: Byte sum recomputed over the file contents
    """
    stored: int
    computed: int

    @property
    def valid(self) -> bool:
        return self.stored == self.computed


def verify_image_checksum(filepath: Union[str, Path]) -> ChecksumReport:
    """
    Recompute an image file's checksum and compare it with the stored one.

    Raises:
        ImageReadError: If the file cannot be read
        ImageCorruptError: If the file is shorter than the fixed header
    """
    try:
        with open(filepath, 'rb') as f:
            prefix = f.read(SCP_HEADER_SIZE)
            if len(prefix) < SCP_HEADER_SIZE:
                raise ImageCorruptError("File too small for SCP header", filepath,
                                        expected_size=SCP_HEADER_SIZE,
                                        actual_size=len(prefix))
            stored = int.from_bytes(
                prefix[SCP_CHECKSUM_OFFSET:SCP_CHECKSUM_OFFSET + 4], 'little'
            )
            computed = compute_image_checksum(f)
    except OSError as e:
        raise ImageReadError(f"Failed to read file: {e}", filepath) from e

    report = ChecksumReport(stored=stored, computed=computed)
    logger.debug("Checksum %s: stored=%#010x computed=%#010x",
                 filepath, report.stored, report.computed)
    return report
