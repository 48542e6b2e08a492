"""
SCP flux image handling.

This module provides the binary codec for SuperCard Pro flux images, an
image loader that keeps flux payloads on disk until they are needed, and
the checksum helpers used when writing images.

Example Usage:
    from scpmerge.imaging import load_image, verify_image_checksum

    with load_image("disk.scp") as image:
        flux = image.read_flux(0, 0)

    report = verify_image_checksum("disk.scp")
"""

# Import from image_formats
from .image_formats import (
    # Exceptions
    ImageError,
    ImageFormatError,
    ImageCorruptError,
    ImageUnsupportedError,
    ImageReadError,
    ImageWriteError,
    # Functions
    slot_index,
    slot_name,
    track_block_size,
    # Constants
    SCP_MAGIC,
    TRK_MAGIC,
    SCP_TRACK_SLOTS,
    SCP_HEADER_SIZE,
    SCP_FULL_HEADER_SIZE,
    SCP_CHECKSUM_OFFSET,
)

# Import from scp_codec
from .scp_codec import (
    SCPHeader,
    SCPTrack,
    SCPRevolution,
)

# Import from flux_image
from .flux_image import (
    DiskImage,
    load_image,
)

# Import from checksum
from .checksum import (
    ChecksumAccumulator,
    ChecksumReport,
    checksum,
    add_checksum,
    compute_image_checksum,
    verify_image_checksum,
)


__all__ = [
    # Exceptions
    'ImageError',
    'ImageFormatError',
    'ImageCorruptError',
    'ImageUnsupportedError',
    'ImageReadError',
    'ImageWriteError',

    # Structures
    'SCPHeader',
    'SCPTrack',
    'SCPRevolution',
    'DiskImage',

    # Loading
    'load_image',

    # Checksum
    'ChecksumAccumulator',
    'ChecksumReport',
    'checksum',
    'add_checksum',
    'compute_image_checksum',
    'verify_image_checksum',

    # Helpers
    'slot_index',
    'slot_name',
    'track_block_size',

    # Constants
    'SCP_MAGIC',
    'TRK_MAGIC',
    'SCP_TRACK_SLOTS',
    'SCP_HEADER_SIZE',
    'SCP_FULL_HEADER_SIZE',
    'SCP_CHECKSUM_OFFSET',
]
