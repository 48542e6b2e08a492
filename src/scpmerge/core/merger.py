"""
SCP image merging.

Combines two SCP images of the same disk into one, taking each track slot
from the source chosen in a SelectionTable. Track headers and flux payloads
are copied into a fresh layout, so every revolution's data offset and every
entry of the track offset table is rewritten, and the file checksum is
accumulated over exactly the bytes written after the 16-byte header.

Layout of the output:
    - File header (placeholder first, rewritten last with offsets/checksum)
    - For each present slot, in slot order:
        - Track header (placeholder, rewritten once offsets are known)
        - Flux payload of each revolution, in revolution order

Example:
    with load_image("a.scp") as a, load_image("b.scp") as b:
        selection = SelectionTable.parse(["10:1:1"])
        result = merge_images([a, b], selection, "merged.scp")
"""

import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Dict, Optional, Sequence, Union

from scpmerge.core.selection import SOURCE_COUNT, SelectionTable
from scpmerge.imaging.checksum import ChecksumAccumulator
from scpmerge.imaging.flux_image import DiskImage
from scpmerge.imaging.image_formats import (
    ImageFormatError,
    ImageWriteError,
    SCP_HEADER_SIZE,
    SCP_TRACK_SLOTS,
    UINT32_MAX,
    slot_name,
)
from scpmerge.utils.context_managers import OutputFileContext
from scpmerge.utils.logging import log_operation, log_performance

logger = logging.getLogger(__name__)


@dataclass
class MergeResult:
    """
    Result of writing a merged image.

    Attributes:
        output_path: Path written, None when merging into a bare stream
        checksum: Final checksum stored in the header
        tracks_written: Number of track slots written
        flux_bytes: Total flux payload bytes copied
        slot_sources: Slot index -> source index for every written slot
    """
    output_path: Optional[str] = None
    checksum: int = 0
    tracks_written: int = 0
    flux_bytes: int = 0
    slot_sources: Dict[int, int] = field(default_factory=dict)

    def tracks_from(self, source: int) -> int:
        """Number of written slots taken from a source."""
        return sum(1 for src in self.slot_sources.values() if src == source)


def _check_offset(position: int, output_name: Optional[str]) -> int:
    if position > UINT32_MAX:
        raise ImageWriteError(
            f"Output offset {position:#x} exceeds 32-bit range", output_name
        )
    return position


def write_merged_image(sources: Sequence[DiskImage], selection: SelectionTable,
                       stream: BinaryIO) -> MergeResult:
    """
    Write a merged image to a seekable binary stream.

    The stream must be empty and positioned at 0. Slot presence always
    follows source 0: a slot missing from source 0 is left out of the
    output whatever the selection says.

    Args:
        sources: Exactly two loaded images
        selection: Slot -> source table
        stream: Writable, seekable binary stream

    Returns:
        MergeResult describing what was written

    Raises:
        ValueError: If the number of sources is not two
        ImageFormatError: If a selected source lacks a slot present in
            source 0, or its revolution count differs from source 0
        ImageCorruptError: If a source's flux payload is truncated
        ImageReadError: If reading a source fails
        OSError: If writing or seeking the output fails
    """
    if len(sources) != SOURCE_COUNT:
        raise ValueError(f"Exactly {SOURCE_COUNT} source images are required, "
                         f"got {len(sources)}")

    output_name = getattr(stream, 'name', None)
    output_name = output_name if isinstance(output_name, str) else None

    layout = sources[0]
    out_header = layout.header.copy()
    out_header.checksum = 0
    out_header.write(stream)  # placeholder, rewritten at the end

    total = ChecksumAccumulator()
    result = MergeResult(output_path=output_name)

    for slot in range(SCP_TRACK_SLOTS):
        if layout.tracks[slot] is None:
            out_header.track_offsets[slot] = 0
            continue

        source_index = selection[slot]
        source = sources[source_index]
        source_track = source.track(slot)
        if source_track is None:
            raise ImageFormatError(
                f"{slot_name(slot)} selected from source {source_index} "
                f"but that image has no such track",
                source.filepath,
            )
        if len(source_track.revolutions) != out_header.num_revolutions:
            raise ImageFormatError(
                f"{slot_name(slot)} has {len(source_track.revolutions)} revolutions, "
                f"output expects {out_header.num_revolutions}",
                source.filepath,
            )

        new_track = source_track.copy()
        track_header_pos = _check_offset(stream.tell(), output_name)
        out_header.track_offsets[slot] = track_header_pos
        new_track.write(stream)  # reserve space; offsets still stale

        for rev_index, rev in enumerate(new_track.revolutions):
            flux_data = source.read_flux(slot, rev_index)
            flux_pos = stream.tell()
            rev.data_offset = _check_offset(flux_pos - track_header_pos, output_name)
            total.update(flux_data)
            stream.write(flux_data)
            result.flux_bytes += len(flux_data)

        # Same revolution count, so the rewrite is an in-place overwrite
        track_bytes = new_track.to_bytes()
        stream.seek(track_header_pos)
        stream.write(track_bytes)
        total.update(track_bytes)
        stream.seek(0, os.SEEK_END)

        result.tracks_written += 1
        result.slot_sources[slot] = source_index
        log_operation("copy_track",
                      f"{slot_name(slot)} from source {source_index} "
                      f"at {track_header_pos:#x}", logging.DEBUG)

    header_bytes = out_header.to_bytes()
    total.update(header_bytes[SCP_HEADER_SIZE:])
    out_header.checksum = total.total

    stream.seek(0)
    out_header.write(stream)
    stream.seek(0, os.SEEK_END)

    result.checksum = out_header.checksum
    return result


def merge_images(sources: Sequence[DiskImage], selection: SelectionTable,
                 output_path: Union[str, Path], atomic: bool = True) -> MergeResult:
    """
    Merge two loaded images into a new file.

    Args:
        sources: Exactly two loaded images
        selection: Slot -> source table
        output_path: Destination file
        atomic: Write through a temp file and rename on success

    Returns:
        MergeResult describing what was written

    Raises:
        ImageWriteError: If the output cannot be created or written
        ImageFormatError / ImageReadError: As for write_merged_image
    """
    output_path = str(output_path)
    logger.info("Merging %s into %s",
                " + ".join(str(src.filepath) for src in sources), output_path)
    start = time.perf_counter()

    try:
        with OutputFileContext(output_path, atomic=atomic) as stream:
            result = write_merged_image(sources, selection, stream)
    except OSError as e:
        raise ImageWriteError(f"Failed to write file: {e}", output_path) from e

    result.output_path = output_path
    log_performance("merge", time.perf_counter() - start,
                    tracks=result.tracks_written, bytes=result.flux_bytes)
    logger.info("Saved SCP: %d tracks, checksum %#010x",
                result.tracks_written, result.checksum)
    return result
