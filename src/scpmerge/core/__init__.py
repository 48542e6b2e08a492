"""
Core merge functionality for SCP Merge.

This module provides the per-slot selection table, run settings and the
merge engine that recombines two SCP images into one.
"""

from scpmerge.core.selection import (
    SOURCE_COUNT,
    SelectionTable,
    TrackOverride,
)

from scpmerge.core.settings import (
    MergeSettings,
)

from scpmerge.core.merger import (
    MergeResult,
    merge_images,
    write_merged_image,
)

__all__ = [
    # Selection
    "SOURCE_COUNT",
    "SelectionTable",
    "TrackOverride",

    # Settings
    "MergeSettings",

    # Merging
    "MergeResult",
    "merge_images",
    "write_merged_image",
]
