"""
SCP image format constants and error types.

This module defines the on-disk constants of the SuperCard Pro flux image
format and the exception hierarchy shared by the codec, the image loader
and the merge engine.

File layout:
    - 16-byte header (magic, 9 single-byte fields, 32-bit checksum)
    - Track offset table (168 x 32-bit absolute offsets)
    - Track blocks ("TRK" + track number + revolution entries)
    - Flux payloads (16-bit samples, referenced from revolution entries)
"""

from typing import Optional


# =============================================================================
# Custom Exceptions
# =============================================================================

class ImageError(Exception):
    """Base exception for image-related errors."""

    def __init__(self, message: str, filepath: Optional[str] = None):
        self.message = message
        self.filepath = str(filepath) if filepath is not None else None
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.filepath:
            return f"{self.message} [File: {self.filepath}]"
        return self.message


class ImageFormatError(ImageError):
    """Raised when image structure is invalid (bad magic, missing track)."""

    def __init__(self, message: str, filepath: Optional[str] = None,
                 offset: Optional[int] = None):
        self.offset = offset
        super().__init__(message, filepath)

    def _format_message(self) -> str:
        base = super()._format_message()
        if self.offset is not None:
            return f"{base} [Offset: {self.offset:#x}]"
        return base


class ImageCorruptError(ImageFormatError):
    """Raised when a structure or payload is truncated."""

    def __init__(self, message: str, filepath: Optional[str] = None,
                 expected_size: Optional[int] = None,
                 actual_size: Optional[int] = None,
                 offset: Optional[int] = None):
        self.expected_size = expected_size
        self.actual_size = actual_size
        super().__init__(message, filepath, offset=offset)

    def _format_message(self) -> str:
        base = super()._format_message()
        if self.expected_size is not None and self.actual_size is not None:
            return f"{base} [Expected: {self.expected_size}, Actual: {self.actual_size}]"
        return base


class ImageUnsupportedError(ImageError):
    """Raised when an image uses a timing mode other than 16-bit cells."""

    def __init__(self, message: str, filepath: Optional[str] = None,
                 bit_cell_width: Optional[int] = None):
        self.bit_cell_width = bit_cell_width
        super().__init__(message, filepath)


class ImageReadError(ImageError):
    """Raised when reading image file fails."""
    pass


class ImageWriteError(ImageError):
    """Raised when writing image file fails."""
    pass


# =============================================================================
# Format Constants
# =============================================================================

SCP_MAGIC = b'SCP'
TRK_MAGIC = b'TRK'

# Slot index = track_number * 2 + side
SCP_TRACK_SLOTS = 168
SCP_MAX_TRACK_NUMBER = SCP_TRACK_SLOTS // 2 - 1

SCP_HEADER_SIZE = 16                                   # magic + fields + checksum
SCP_CHECKSUM_OFFSET = 0x0C
SCP_OFFSET_TABLE_SIZE = SCP_TRACK_SLOTS * 4
SCP_FULL_HEADER_SIZE = SCP_HEADER_SIZE + SCP_OFFSET_TABLE_SIZE  # 0x2B0

SCP_TRACK_HEADER_SIZE = 4                              # "TRK" + track number
SCP_REVOLUTION_SIZE = 12                               # index time, length, offset

SCP_FLUX_SAMPLE_SIZE = 2                               # 16-bit flux intervals
SCP_BIT_CELL_WIDTH_16 = 0

UINT32_MAX = 0xFFFFFFFF


def track_block_size(num_revolutions: int) -> int:
    """Size in bytes of an encoded track header with its revolution entries."""
    return SCP_TRACK_HEADER_SIZE + SCP_REVOLUTION_SIZE * num_revolutions


def slot_index(track_number: int, side: int) -> int:
    """Flatten a (track, side) pair into an offset table index."""
    return track_number * 2 + side


def slot_name(slot: int) -> str:
    """Human-readable name for a slot, e.g. ``T05.1``."""
    return f"T{slot // 2:02d}.{slot % 2}"
