"""
Shared pytest fixtures for SCP Merge tests.
"""

import pytest

from scpmerge.imaging import load_image
from tests.fixtures import create_standard_disk, write_scp_image


@pytest.fixture
def disk_a_path(tmp_path):
    """Full 84x2 single-revolution image."""
    return write_scp_image(tmp_path / "a.scp", create_standard_disk(seed=1))


@pytest.fixture
def disk_b_path(tmp_path):
    """Same layout as disk A with different flux content."""
    return write_scp_image(tmp_path / "b.scp", create_standard_disk(seed=2))


@pytest.fixture
def sources(disk_a_path, disk_b_path):
    """Both standard disks loaded; closed after the test."""
    images = [load_image(disk_a_path), load_image(disk_b_path)]
    yield images
    for image in images:
        image.close()
