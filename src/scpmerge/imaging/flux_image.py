"""
SCP flux image loading.

DiskImage decodes the file header and every present track header up front,
but leaves the flux payloads on disk. The backing file stays open for the
lifetime of the image so payloads can be fetched on demand by seeking into
the original file.

Example:
    with load_image("disk.scp") as image:
        track = image.track(0)
        flux = image.read_flux(0, 0)
"""

import logging
from pathlib import Path
from typing import BinaryIO, List, Optional, Union

from .image_formats import (
    ImageCorruptError,
    ImageError,
    ImageFormatError,
    ImageReadError,
    ImageUnsupportedError,
    SCP_BIT_CELL_WIDTH_16,
    SCP_TRACK_SLOTS,
    slot_name,
)
from .scp_codec import SCPHeader, SCPRevolution, SCPTrack

logger = logging.getLogger(__name__)


class DiskImage:
    """
    SCP image with eagerly decoded metadata and lazily read flux.

    Attributes:
        filepath: Path the image was loaded from
        header: Decoded file header
        tracks: 168 entries, None where the header offset is 0
    """

    def __init__(self):
        """Initialize an empty, unloaded image."""
        self.filepath: Optional[str] = None
        self.header: SCPHeader = SCPHeader()
        self.tracks: List[Optional[SCPTrack]] = [None] * SCP_TRACK_SLOTS
        self._file: Optional[BinaryIO] = None

    def __enter__(self) -> "DiskImage":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        return (f"DiskImage({self.filepath!r}, revolutions={self.revolutions}, "
                f"tracks={len(self.present_slots)})")

    @property
    def revolutions(self) -> int:
        """Number of revolutions stored per track."""
        return self.header.num_revolutions

    @property
    def present_slots(self) -> List[int]:
        """Slot indices that carry a track."""
        return [i for i, track in enumerate(self.tracks) if track is not None]

    @property
    def is_open(self) -> bool:
        return self._file is not None and not self._file.closed

    def load(self, filepath: Union[str, Path]) -> None:
        """
        Load SCP image metadata from file.

        Args:
            filepath: Path to SCP file

        Raises:
            ImageReadError: If file cannot be opened or read
            ImageFormatError: If a magic tag is missing
            ImageCorruptError: If a structure is truncated
            ImageUnsupportedError: If the bit cell width is not 16-bit
        """
        filepath = str(filepath)
        logger.info("Loading SCP image: %s", filepath)

        try:
            stream = open(filepath, 'rb')
        except OSError as e:
            raise ImageReadError(f"Failed to open file: {e}", filepath) from e

        try:
            header = SCPHeader.read(stream)
            if header.bit_cell_width != SCP_BIT_CELL_WIDTH_16:
                raise ImageUnsupportedError("Unsupported bitcell time", filepath,
                                            bit_cell_width=header.bit_cell_width)

            tracks: List[Optional[SCPTrack]] = []
            for slot, offset in enumerate(header.track_offsets):
                if offset == 0:
                    tracks.append(None)
                    continue
                stream.seek(offset)
                track = SCPTrack.read(stream, header.num_revolutions)
                if track.track_number != slot:
                    logger.warning("%s: track header number %d stored in slot %d",
                                   filepath, track.track_number, slot)
                tracks.append(track)
        except ImageError:
            stream.close()
            raise
        except OSError as e:
            stream.close()
            raise ImageReadError(f"Failed to read file: {e}", filepath) from e

        self.close()
        self._file = stream
        self.filepath = filepath
        self.header = header
        self.tracks = tracks

        logger.info("Loaded SCP: %d tracks, %d revolutions",
                    len(self.present_slots), header.num_revolutions)

    def close(self) -> None:
        """Release the backing file handle."""
        if self._file is not None:
            self._file.close()
            self._file = None

    def track(self, slot: int) -> Optional[SCPTrack]:
        """Get the decoded track header for a slot, or None if absent."""
        if slot < 0 or slot >= SCP_TRACK_SLOTS:
            return None
        return self.tracks[slot]

    def read_flux(self, slot: int, rev_index: int) -> bytes:
        """
        Read the raw flux payload of one revolution from the backing file.

        Args:
            slot: Track slot index (track * 2 + side)
            rev_index: Revolution number (0-based)

        Returns:
            Exactly ``track_length * 2`` payload bytes

        Raises:
            ImageFormatError: If the slot has no track
            ImageCorruptError: If the payload runs past end of file
            ImageReadError: If the file is closed or a read fails
        """
        track = self.track(slot)
        if track is None:
            raise ImageFormatError(f"No track in slot {slot_name(slot)}", self.filepath)
        if not self.is_open:
            raise ImageReadError("Image file is not open", self.filepath)

        rev: SCPRevolution = track.revolutions[rev_index]
        position = self.header.track_offsets[slot] + rev.data_offset
        size = rev.flux_byte_length
        try:
            self._file.seek(position)
            data = self._file.read(size)
        except OSError as e:
            raise ImageReadError(f"Failed to read flux data: {e}", self.filepath) from e

        if len(data) != size:
            raise ImageCorruptError(
                f"{slot_name(slot)} rev {rev_index} flux data truncated",
                self.filepath,
                expected_size=size,
                actual_size=len(data),
                offset=position,
            )
        return data


def load_image(filepath: Union[str, Path]) -> DiskImage:
    """
    Open an SCP image file.

    Args:
        filepath: Path to image file

    Returns:
        Loaded DiskImage holding its file open
    """
    image = DiskImage()
    image.load(filepath)
    return image
