"""
Unit tests for checksum computation and verification.
"""

import io
import struct

import pytest

from scpmerge.imaging import (
    ChecksumAccumulator,
    ImageCorruptError,
    ImageReadError,
    add_checksum,
    checksum,
    compute_image_checksum,
    verify_image_checksum,
)
from tests.fixtures import build_scp_image, create_standard_disk, make_flux


class TestChecksum:
    """Test the byte-sum function."""

    def test_empty(self):
        """Test an empty span sums to zero."""
        assert checksum(b'') == 0

    def test_simple_sum(self):
        """Test byte values are summed."""
        assert checksum(bytes([1, 2, 3, 250])) == 256

    def test_accepts_bytearray_and_memoryview(self):
        """Test non-bytes buffers are accepted."""
        data = bytearray(b'\x10\x20')

        assert checksum(data) == 0x30
        assert checksum(memoryview(data)) == 0x30

    def test_no_overflow_for_large_spans(self):
        """Test large spans are summed exactly before masking."""
        data = b'\xff' * 100_000

        assert checksum(data) == 255 * 100_000

    def test_add_checksum_wraps(self):
        """Test folding wraps around at 2**32."""
        assert add_checksum(0xFFFFFFFF, 2) == 1
        assert add_checksum(0x80000000, 0x80000000) == 0


class TestChecksumAccumulator:
    """Test the running accumulator."""

    def test_order_independent(self):
        """Test accumulation order does not affect the total."""
        spans = [b'abc', b'\xff' * 10, b'', b'xyz']
        forward = ChecksumAccumulator()
        backward = ChecksumAccumulator()

        for span in spans:
            forward.update(span)
        for span in reversed(spans):
            backward.update(span)

        assert forward.total == backward.total == checksum(b''.join(spans))

    def test_wraps_from_initial(self):
        """Test the running total wraps."""
        acc = ChecksumAccumulator(initial=0xFFFFFFFF)

        assert acc.update(b'\x01') == 0


class TestImageChecksum:
    """Test whole-image checksum computation."""

    def test_excludes_first_16_bytes(self):
        """Test the fixed header prefix is not summed."""
        data = b'\xff' * 16 + b'\x01\x02'

        assert compute_image_checksum(io.BytesIO(data)) == 3

    def test_verify_valid_image(self, tmp_path):
        """Test a correctly built image verifies."""
        path = tmp_path / "disk.scp"
        path.write_bytes(create_standard_disk(seed=4, revolutions=2))

        report = verify_image_checksum(path)

        assert report.valid
        assert report.stored == report.computed

    def test_verify_detects_mismatch(self, tmp_path):
        """Test a wrong stored checksum is reported."""
        path = tmp_path / "bad.scp"
        path.write_bytes(build_scp_image({0: [make_flux(0, 0, 0)]}, checksum=1))

        report = verify_image_checksum(path)

        assert not report.valid
        assert report.stored == 1

    def test_verify_detects_flux_change(self, tmp_path):
        """Test altering one payload byte breaks verification."""
        data = bytearray(create_standard_disk(seed=4))
        data[-1] ^= 0xFF
        path = tmp_path / "flip.scp"
        path.write_bytes(bytes(data))

        assert not verify_image_checksum(path).valid

    def test_verify_short_file(self, tmp_path):
        """Test a file shorter than the header prefix is corrupt."""
        path = tmp_path / "short.scp"
        path.write_bytes(b'SCP\x00')

        with pytest.raises(ImageCorruptError):
            verify_image_checksum(path)

    def test_verify_missing_file(self, tmp_path):
        """Test a missing file raises ImageReadError."""
        with pytest.raises(ImageReadError):
            verify_image_checksum(tmp_path / "nope.scp")
