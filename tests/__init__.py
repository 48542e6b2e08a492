"""
Test suite for SCP Merge.

This package contains:
- Unit tests for the codec, loader, checksum and selection table
- Integration tests for complete merges and the command line
- Synthetic image fixtures for testing without real captures
"""
