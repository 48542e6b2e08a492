"""
Per-slot source selection for image merging.

A selection table maps each of the 168 track slots (track * 2 + side) to
the index of the source image that supplies it. Every slot defaults to
source 0; individual slots are overridden with ``TRACK:SIDE:SOURCE``
strings on the command line.
"""

import logging
from typing import Dict, Iterable, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from scpmerge.imaging.image_formats import (
    SCP_MAX_TRACK_NUMBER,
    SCP_TRACK_SLOTS,
    slot_index,
)

logger = logging.getLogger(__name__)

# Number of source images a merge combines
SOURCE_COUNT = 2


class TrackOverride(BaseModel):
    """
    Route one track side to a given source image.

    Attributes:
        track: Physical track number (0-83)
        side: Disk side (0 or 1)
        source: Source image index (0 or 1)
    """
    model_config = ConfigDict(frozen=True)

    track: int = Field(ge=0, le=SCP_MAX_TRACK_NUMBER)
    side: int = Field(ge=0, le=1)
    source: int = Field(ge=0, lt=SOURCE_COUNT)

    @property
    def slot(self) -> int:
        return slot_index(self.track, self.side)

    @classmethod
    def parse(cls, text: str) -> "TrackOverride":
        """
        Parse a ``TRACK:SIDE:SOURCE`` override string.

        Raises:
            ValueError: If the string is malformed
            pydantic.ValidationError: If a value is out of range
        """
        parts = text.strip().split(':')
        if len(parts) != 3:
            raise ValueError(
                f"Invalid track override '{text}' (expected TRACK:SIDE:SOURCE)"
            )
        try:
            track, side, source = (int(part) for part in parts)
        except ValueError:
            raise ValueError(
                f"Invalid track override '{text}' (values must be integers)"
            ) from None
        return cls(track=track, side=side, source=source)


class SelectionTable(BaseModel):
    """
    Flat slot -> source table.

    Attributes:
        sources: 168 source indices, one per slot
    """
    model_config = ConfigDict(frozen=True)

    sources: Tuple[int, ...] = Field(default=(0,) * SCP_TRACK_SLOTS)

    @field_validator('sources')
    @classmethod
    def _check_sources(cls, value: Tuple[int, ...]) -> Tuple[int, ...]:
        if len(value) != SCP_TRACK_SLOTS:
            raise ValueError(f"expected {SCP_TRACK_SLOTS} entries, got {len(value)}")
        bad = [i for i, src in enumerate(value) if not 0 <= src < SOURCE_COUNT]
        if bad:
            raise ValueError(f"source index out of range in slots {bad}")
        return value

    def __getitem__(self, slot: int) -> int:
        return self.sources[slot]

    def __len__(self) -> int:
        return len(self.sources)

    @classmethod
    def from_overrides(cls, overrides: Iterable[TrackOverride]) -> "SelectionTable":
        """Build a table from overrides; later overrides win."""
        sources = [0] * SCP_TRACK_SLOTS
        for override in overrides:
            logger.debug("Slot %d routed to source %d", override.slot, override.source)
            sources[override.slot] = override.source
        return cls(sources=tuple(sources))

    @classmethod
    def parse(cls, texts: Iterable[str]) -> "SelectionTable":
        return cls.from_overrides(TrackOverride.parse(text) for text in texts)

    def with_override(self, override: TrackOverride) -> "SelectionTable":
        sources = list(self.sources)
        sources[override.slot] = override.source
        return SelectionTable(sources=tuple(sources))

    def source_for(self, slot: int) -> int:
        return self.sources[slot]

    @property
    def overridden_slots(self) -> List[int]:
        """Slots that take their data from a source other than 0."""
        return [i for i, src in enumerate(self.sources) if src != 0]

    def counts(self) -> Dict[int, int]:
        """Number of slots assigned to each source."""
        return {src: self.sources.count(src) for src in range(SOURCE_COUNT)}
