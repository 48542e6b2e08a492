#!/usr/bin/env python3
"""
Packaging for SCP Merge.

Supports standard installs and editable installs with ``pip install -e .``.
"""

from setuptools import setup, find_packages

setup(
    name="scp-merge",
    version="0.1.0",
    description="Merge two SuperCard Pro (SCP) flux images track by track",
    license="MIT",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.5.0",
        "rich>=13.7.0",
        "numpy>=1.26.0",
    ],
    extras_require={
        "test": ["pytest>=7.4.0"],
    },
    entry_points={
        "console_scripts": [
            "scp-merge=scpmerge.main:main",
        ],
    },
)
