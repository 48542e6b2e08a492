"""
Unit tests for the SCP binary codec.

Tests header, track and revolution decoding/encoding against hand-built
byte layouts.
"""

import io
import struct

import pytest

from scpmerge.imaging import (
    ImageCorruptError,
    ImageFormatError,
    SCPHeader,
    SCPRevolution,
    SCPTrack,
    SCP_FULL_HEADER_SIZE,
)
from tests.fixtures import build_scp_image, make_flux


class TestSCPHeader:
    """Test SCPHeader decoding and encoding."""

    def test_decode_fields(self):
        """Test every header field is decoded from its fixed position."""
        raw = struct.pack('<3s9BI', b'SCP', 0x18, 0x2C, 3, 0, 159, 0x01, 0, 0, 0, 0xDEADBEEF)
        raw += struct.pack('<168I', *([0x2B0] + [0] * 167))

        header = SCPHeader.from_bytes(raw)

        assert header.version == 0x18
        assert header.disk_type == 0x2C
        assert header.num_revolutions == 3
        assert header.start_track == 0
        assert header.end_track == 159
        assert header.flags == 0x01
        assert header.bit_cell_width == 0
        assert header.heads == 0
        assert header.resolution == 0
        assert header.checksum == 0xDEADBEEF
        assert header.track_offsets[0] == 0x2B0
        assert len(header.track_offsets) == 168

    def test_encoded_size(self):
        """Test header encodes to 16 + 168*4 bytes."""
        assert len(SCPHeader().to_bytes()) == SCP_FULL_HEADER_SIZE == 688

    def test_encode_matches_source_bytes(self):
        """Test re-encoding a decoded header reproduces the original bytes."""
        image = build_scp_image({0: [make_flux(0, 0, 0)], 5: [make_flux(0, 5, 0)]})

        header = SCPHeader.from_bytes(image)

        assert header.to_bytes() == image[:SCP_FULL_HEADER_SIZE]

    def test_checksum_little_endian_at_0x0c(self):
        """Test checksum is stored little-endian at offset 0x0C."""
        header = SCPHeader(checksum=0x11223344)

        data = header.to_bytes()

        assert data[0:3] == b'SCP'
        assert data[0x0C:0x10] == bytes([0x44, 0x33, 0x22, 0x11])

    def test_bad_magic(self):
        """Test a missing SCP signature raises ImageFormatError."""
        raw = b'XYZ' + bytes(SCP_FULL_HEADER_SIZE - 3)

        with pytest.raises(ImageFormatError):
            SCPHeader.from_bytes(raw)

    def test_truncated_offset_table(self):
        """Test a short offset table raises ImageCorruptError."""
        raw = SCPHeader().to_bytes()[:100]

        with pytest.raises(ImageCorruptError) as exc_info:
            SCPHeader.from_bytes(raw)

        assert exc_info.value.expected_size == 168 * 4
        assert exc_info.value.actual_size == 100 - 16

    def test_corrupt_error_is_format_error(self):
        """Test truncation is reported as a format error subtype."""
        with pytest.raises(ImageFormatError):
            SCPHeader.from_bytes(b'SC')

    def test_offset_table_length_enforced(self):
        """Test constructing a header with a wrong-length table fails."""
        with pytest.raises(ValueError):
            SCPHeader(track_offsets=[0] * 10)

    def test_copy_is_independent(self):
        """Test copying a header does not share the offset table."""
        header = SCPHeader()
        clone = header.copy()

        clone.track_offsets[3] = 1234
        clone.checksum = 7

        assert header.track_offsets[3] == 0
        assert header.checksum == 0

    def test_present_slots(self):
        """Test present_slots lists non-zero offsets."""
        offsets = [0] * 168
        offsets[2] = 0x300
        offsets[9] = 0x400

        assert SCPHeader(track_offsets=offsets).present_slots == [2, 9]


class TestSCPTrack:
    """Test SCPTrack decoding and encoding."""

    def test_decode_with_revolution_count(self):
        """Test the revolution count comes from the caller."""
        raw = b'TRK' + bytes([7])
        raw += struct.pack('<III', 100, 10, 28)
        raw += struct.pack('<III', 200, 20, 48)

        track = SCPTrack.from_bytes(raw, 2)

        assert track.track_number == 7
        assert track.revolutions == [
            SCPRevolution(index_time=100, track_length=10, data_offset=28),
            SCPRevolution(index_time=200, track_length=20, data_offset=48),
        ]

    def test_encode_layout(self):
        """Test encoded track is 4 + 12*revs bytes with literal magic."""
        track = SCPTrack(track_number=3, revolutions=[
            SCPRevolution(1, 2, 3), SCPRevolution(4, 5, 6), SCPRevolution(7, 8, 9),
        ])

        data = track.to_bytes()

        assert len(data) == track.encoded_size == 40
        assert data[:4] == b'TRK\x03'
        assert struct.unpack_from('<III', data, 28) == (7, 8, 9)

    def test_write_to_stream(self):
        """Test write() emits the same bytes as to_bytes()."""
        track = SCPTrack(track_number=1, revolutions=[SCPRevolution(9, 8, 16)])
        stream = io.BytesIO()

        written = track.write(stream)

        assert written == 16
        assert stream.getvalue() == track.to_bytes()

    def test_bad_magic(self):
        """Test a missing TRK signature raises ImageFormatError with offset."""
        stream = io.BytesIO(b'\x00' * 8 + b'TRX\x00' + bytes(12))
        stream.seek(8)

        with pytest.raises(ImageFormatError) as exc_info:
            SCPTrack.read(stream, 1)

        assert exc_info.value.offset == 8

    def test_truncated_revolutions(self):
        """Test fewer revolution entries than requested raises ImageCorruptError."""
        raw = b'TRK\x00' + struct.pack('<III', 1, 2, 3)

        with pytest.raises(ImageCorruptError):
            SCPTrack.from_bytes(raw, 2)

    def test_copy_is_independent(self):
        """Test copying a track does not share revolution entries."""
        track = SCPTrack(track_number=0, revolutions=[SCPRevolution(1, 2, 16)])
        clone = track.copy()

        clone.revolutions[0].data_offset = 999

        assert track.revolutions[0].data_offset == 16


class TestSCPRevolution:
    """Test SCPRevolution encoding."""

    def test_flux_byte_length(self):
        """Test payload length is two bytes per sample."""
        assert SCPRevolution(track_length=1500).flux_byte_length == 3000

    def test_values_round_trip_at_32_bit_limits(self):
        """Test full 32-bit values survive encoding."""
        rev = SCPRevolution(0xFFFFFFFF, 0x80000000, 0x12345678)

        assert SCPRevolution.from_bytes(rev.to_bytes()) == rev
