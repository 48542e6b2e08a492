"""
SCP Merge - combine two SuperCard Pro flux images track by track.

A tool for building one flux image out of two captures of the same disk,
taking each track side from whichever capture read it best. Track headers
and flux payloads are re-linked into a new file with a fresh checksum.
"""

__version__ = "0.1.0"
__license__ = "MIT"

# Re-export main entry point
from scpmerge.main import main

# Re-export image loading and merging
from scpmerge.imaging import (
    DiskImage,
    load_image,
    verify_image_checksum,
)
from scpmerge.core import (
    MergeResult,
    SelectionTable,
    TrackOverride,
    merge_images,
)

__all__ = [
    # Main entry point
    "main",
    "__version__",

    # Images
    "DiskImage",
    "load_image",
    "verify_image_checksum",

    # Merging
    "MergeResult",
    "SelectionTable",
    "TrackOverride",
    "merge_images",
]
