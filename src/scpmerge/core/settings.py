"""
Run configuration for a merge.

MergeSettings collects and validates everything a single merge run needs:
the two input images, the output path, the per-slot selection table and
output behaviour flags. It is built from parsed command-line arguments.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from scpmerge.core.selection import SOURCE_COUNT, SelectionTable

logger = logging.getLogger(__name__)


class MergeSettings(BaseModel):
    """
    Validated settings for one merge run.

    Attributes:
        inputs: Source image paths, exactly two
        output: Destination image path
        selection: Slot -> source table
        atomic: Write through a temp file and rename on success
        verify: Re-check the output checksum after writing
        log_file: Optional path for a debug log file
        verbose: Enable debug output on the console
    """
    model_config = ConfigDict(frozen=True)

    inputs: List[Path]
    output: Path
    selection: SelectionTable = Field(default_factory=SelectionTable)
    atomic: bool = True
    verify: bool = False
    log_file: Optional[Path] = None
    verbose: bool = False

    @field_validator('inputs')
    @classmethod
    def _check_input_count(cls, value: List[Path]) -> List[Path]:
        if len(value) != SOURCE_COUNT:
            raise ValueError(f"Two input scp files must be specified (got {len(value)})")
        return value

    @model_validator(mode='after')
    def _check_output_distinct(self) -> "MergeSettings":
        out = self.output.resolve()
        if any(path.resolve() == out for path in self.inputs):
            raise ValueError("Output file must differ from the input files")
        return self

    @classmethod
    def from_args(cls, inputs: Sequence[str], output: str,
                  tracks: Sequence[str] = (), **options) -> "MergeSettings":
        """
        Build settings from command-line values.

        Args:
            inputs: Input paths as given
            output: Output path as given
            tracks: ``TRACK:SIDE:SOURCE`` override strings
            **options: atomic, verify, log_file, verbose

        Raises:
            ValueError: If an override string is malformed
            pydantic.ValidationError: If any value fails validation
        """
        selection = SelectionTable.parse(tracks)
        settings = cls(
            inputs=[Path(p) for p in inputs],
            output=Path(output),
            selection=selection,
            **options,
        )
        logger.debug("Merge settings: %s", settings)
        return settings
