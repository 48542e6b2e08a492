"""
Test fixtures for SCP Merge.

Provides synthetic SCP image builders and raw-byte readers for testing
without real flux captures.
"""

from tests.fixtures.scp_images import (
    HEADER_SIZE,
    SLOTS,
    build_scp_image,
    create_standard_disk,
    create_unsupported_disk,
    make_flux,
    raw_checksum,
    raw_flux,
    raw_offsets,
    raw_revolutions,
    write_scp_image,
)

__all__ = [
    "HEADER_SIZE",
    "SLOTS",
    "build_scp_image",
    "create_standard_disk",
    "create_unsupported_disk",
    "make_flux",
    "raw_checksum",
    "raw_flux",
    "raw_offsets",
    "raw_revolutions",
    "write_scp_image",
]
