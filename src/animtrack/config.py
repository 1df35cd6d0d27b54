"""Tunable defaults for track storage and editing."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_TIMELINE_DURATION = 100.0
DEFAULT_NUMBER_LOW = 0.0
DEFAULT_NUMBER_HIGH = 1.0

# Headroom added past the last key when a new track extends the timeline.
DURATION_MARGIN = 1.0

# Minimum time between two enum/func keys on the same track.
MIN_SEPARATION = 0.1


@dataclass(frozen=True)
class EditorConfig:

    duration: float = DEFAULT_TIMELINE_DURATION
    duration_margin: float = DURATION_MARGIN
    min_separation: float = MIN_SEPARATION
    history_limit: int | None = None

    def __post_init__(self) -> None:
        if self.min_separation < 0:
            raise ValueError(f"min_separation must be >= 0, got {self.min_separation!r}")
        if self.history_limit is not None and self.history_limit < 1:
            raise ValueError(f"history_limit must be >= 1, got {self.history_limit!r}")
