"""
Binary codec for SCP image structures.

Decodes and encodes the three fixed-layout structures of an SCP flux image:
the file header (with its 168-entry track offset table), the per-track
header and the revolution entries it carries. All integers are
little-endian and there is no padding between fields.

A track header is not self-describing: the number of revolution entries
comes from the owning file header and must be passed in when decoding.

Example:
    with open("disk.scp", "rb") as f:
        header = SCPHeader.read(f)
        f.seek(header.track_offsets[0])
        track = SCPTrack.read(f, header.num_revolutions)
"""

import io
import struct
from dataclasses import dataclass, field, replace
from typing import BinaryIO, List, Optional

from .image_formats import (
    ImageCorruptError,
    ImageFormatError,
    SCP_FLUX_SAMPLE_SIZE,
    SCP_FULL_HEADER_SIZE,
    SCP_MAGIC,
    SCP_REVOLUTION_SIZE,
    SCP_TRACK_HEADER_SIZE,
    SCP_TRACK_SLOTS,
    TRK_MAGIC,
    track_block_size,
)

# magic, version, disk type, revolutions, start, end, flags, cell width,
# heads, resolution, checksum
_HEADER_STRUCT = struct.Struct('<3s9BI')
_OFFSETS_STRUCT = struct.Struct(f'<{SCP_TRACK_SLOTS}I')
_TRACK_STRUCT = struct.Struct('<3sB')
_REVOLUTION_STRUCT = struct.Struct('<III')


def _stream_name(stream: BinaryIO) -> Optional[str]:
    name = getattr(stream, 'name', None)
    return name if isinstance(name, str) else None


def _read_exact(stream: BinaryIO, size: int, what: str) -> bytes:
    """Read exactly ``size`` bytes or raise ImageCorruptError."""
    start = stream.tell()
    data = stream.read(size)
    if len(data) != size:
        raise ImageCorruptError(
            f"Unexpected end of data reading {what}",
            _stream_name(stream),
            expected_size=size,
            actual_size=len(data),
            offset=start,
        )
    return data


# =============================================================================
# Revolution Entry
# =============================================================================

@dataclass
class SCPRevolution:
    """
    One captured revolution of a track.

    Attributes:
        index_time: Revolution duration in capture ticks (carried opaquely)
        track_length: Number of 16-bit flux samples in the payload
        data_offset: Payload offset relative to the start of the track header
    """
    index_time: int = 0
    track_length: int = 0
    data_offset: int = 0

    @property
    def flux_byte_length(self) -> int:
        """Size of the flux payload in bytes."""
        return self.track_length * SCP_FLUX_SAMPLE_SIZE

    @classmethod
    def from_bytes(cls, data: bytes) -> "SCPRevolution":
        index_time, track_length, data_offset = _REVOLUTION_STRUCT.unpack(data)
        return cls(index_time=index_time, track_length=track_length,
                   data_offset=data_offset)

    @classmethod
    def read(cls, stream: BinaryIO) -> "SCPRevolution":
        return cls.from_bytes(_read_exact(stream, SCP_REVOLUTION_SIZE, "revolution entry"))

    def to_bytes(self) -> bytes:
        return _REVOLUTION_STRUCT.pack(self.index_time, self.track_length,
                                       self.data_offset)


# =============================================================================
# Track Header
# =============================================================================

@dataclass
class SCPTrack:
    """
    Track header: "TRK" magic, track number and revolution entries.

    Attributes:
        track_number: Slot index stored in the track header
        revolutions: Revolution entries, one per captured revolution
    """
    track_number: int = 0
    revolutions: List[SCPRevolution] = field(default_factory=list)

    @property
    def encoded_size(self) -> int:
        """Encoded size in bytes; fixed for a given revolution count."""
        return track_block_size(len(self.revolutions))

    @classmethod
    def read(cls, stream: BinaryIO, num_revolutions: int) -> "SCPTrack":
        """
        Decode a track header at the current stream position.

        Args:
            stream: Binary stream positioned at the "TRK" magic
            num_revolutions: Revolution count from the owning file header

        Returns:
            Decoded SCPTrack

        Raises:
            ImageFormatError: If the "TRK" magic is missing
            ImageCorruptError: If the stream ends early
        """
        start = stream.tell()
        magic, track_number = _TRACK_STRUCT.unpack(
            _read_exact(stream, SCP_TRACK_HEADER_SIZE, "track header")
        )
        if magic != TRK_MAGIC:
            raise ImageFormatError("Invalid track header magic",
                                   _stream_name(stream), offset=start)

        revolutions = [SCPRevolution.read(stream) for _ in range(num_revolutions)]
        return cls(track_number=track_number, revolutions=revolutions)

    @classmethod
    def from_bytes(cls, data: bytes, num_revolutions: int) -> "SCPTrack":
        return cls.read(io.BytesIO(data), num_revolutions)

    def to_bytes(self) -> bytes:
        parts = [_TRACK_STRUCT.pack(TRK_MAGIC, self.track_number)]
        parts.extend(rev.to_bytes() for rev in self.revolutions)
        return b''.join(parts)

    def write(self, stream: BinaryIO) -> int:
        return stream.write(self.to_bytes())

    def copy(self) -> "SCPTrack":
        """Clone with independent revolution entries."""
        return SCPTrack(
            track_number=self.track_number,
            revolutions=[replace(rev) for rev in self.revolutions],
        )


# =============================================================================
# File Header
# =============================================================================

@dataclass
class SCPHeader:
    """
    SCP file header structure.

    Attributes:
        version: File format version
        disk_type: Type of disk (PC, Amiga, etc.)
        num_revolutions: Number of revolutions per track
        start_track: First track number
        end_track: Last track number
        flags: Format flags
        bit_cell_width: Bit cell encoding (0=16bit, else unsupported)
        heads: Head configuration (0=both, 1=head0, 2=head1)
        resolution: Time resolution in 25ns units
        checksum: Byte sum of everything after the first 16 bytes
        track_offsets: Absolute track header offsets, 0 if absent
    """
    version: int = 0
    disk_type: int = 0
    num_revolutions: int = 1
    start_track: int = 0
    end_track: int = SCP_TRACK_SLOTS - 1
    flags: int = 0
    bit_cell_width: int = 0
    heads: int = 0
    resolution: int = 0
    checksum: int = 0
    track_offsets: List[int] = field(default_factory=lambda: [0] * SCP_TRACK_SLOTS)

    def __post_init__(self):
        if len(self.track_offsets) != SCP_TRACK_SLOTS:
            raise ValueError(
                f"track_offsets must have {SCP_TRACK_SLOTS} entries, "
                f"got {len(self.track_offsets)}"
            )

    @property
    def present_slots(self) -> List[int]:
        """Slot indices with a track present."""
        return [i for i, off in enumerate(self.track_offsets) if off]

    @classmethod
    def read(cls, stream: BinaryIO) -> "SCPHeader":
        """
        Decode the file header at the current stream position.

        Raises:
            ImageFormatError: If the "SCP" magic is missing
            ImageCorruptError: If the stream ends early
        """
        start = stream.tell()
        (
            magic,
            version,
            disk_type,
            num_revolutions,
            start_track,
            end_track,
            flags,
            bit_cell_width,
            heads,
            resolution,
            checksum,
        ) = _HEADER_STRUCT.unpack(_read_exact(stream, _HEADER_STRUCT.size, "file header"))
        if magic != SCP_MAGIC:
            raise ImageFormatError("Not an SCP image (missing SCP signature)",
                                   _stream_name(stream), offset=start)

        track_offsets = _OFFSETS_STRUCT.unpack(
            _read_exact(stream, _OFFSETS_STRUCT.size, "track offset table")
        )
        return cls(
            version=version,
            disk_type=disk_type,
            num_revolutions=num_revolutions,
            start_track=start_track,
            end_track=end_track,
            flags=flags,
            bit_cell_width=bit_cell_width,
            heads=heads,
            resolution=resolution,
            checksum=checksum,
            track_offsets=list(track_offsets),
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "SCPHeader":
        return cls.read(io.BytesIO(data[:SCP_FULL_HEADER_SIZE]))

    def to_bytes(self) -> bytes:
        return _HEADER_STRUCT.pack(
            SCP_MAGIC,
            self.version,
            self.disk_type,
            self.num_revolutions,
            self.start_track,
            self.end_track,
            self.flags,
            self.bit_cell_width,
            self.heads,
            self.resolution,
            self.checksum,
        ) + _OFFSETS_STRUCT.pack(*self.track_offsets)

    def write(self, stream: BinaryIO) -> int:
        return stream.write(self.to_bytes())

    def copy(self) -> "SCPHeader":
        """Clone with an independent offset table."""
        return replace(self, track_offsets=list(self.track_offsets))
