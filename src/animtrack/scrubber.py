"""Playback stepping: evaluate every track and dispatch to its callback."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .evaluate import evaluate_enum, evaluate_number, hits_in_range
from .tracks import EnumTrackDef, FuncTrackDef, NumberTrackDef, TrackStore

log = logging.getLogger(__name__)


@dataclass
class Scrubber:
    """Applies externally driven time to a :class:`TrackStore`.

    Nothing is cached between calls: every scrub recomputes each track from
    scratch, so tracks added or edited between scrubs need no bookkeeping.
    """

    store: TrackStore

    _current_time: float = field(default=0.0, init=False, repr=False)
    _last_time: float = field(default=0.0, init=False, repr=False)

    @property
    def current_time(self) -> float:
        return self._current_time

    @property
    def last_time(self) -> float:
        """Time of the previous scrub or jump; hits at or before it are spent."""
        return self._last_time

    def scrub_to_time(self, t: float) -> int:
        """Move the playhead to *t* with full callback semantics.

        Number and enum callbacks fire on every call, whatever the direction
        and even if the value did not change. Func hits in
        ``(last_time, t]`` fire once each, in time order, and only when
        moving forward; hits passed over backward are skipped for good.
        Returns the number of hits fired.

        A raising callback aborts the remaining dispatch, but the playhead
        still advances: hits in the interval are never delivered twice.
        """
        self._current_time = t
        fired = 0
        try:
            for track in self.store.ordered_tracks():
                definition = track.definition
                if definition.update is None:
                    continue
                if isinstance(definition, NumberTrackDef):
                    definition.update(evaluate_number(track, t))
                elif isinstance(definition, EnumTrackDef):
                    definition.update(evaluate_enum(track, t))
                elif isinstance(definition, FuncTrackDef):
                    for hit in hits_in_range(track, self._last_time, t):
                        definition.update(hit.func_name, *hit.args)
                        fired += 1
        finally:
            if fired:
                log.debug("Fired %d hit(s) scrubbing %.3f -> %.3f", fired, self._last_time, t)
            self._last_time = t
            self.store.invalidate()
        return fired

    def jump_to_time(self, t: float) -> None:
        """Move the playhead to *t* silently, without replaying hits on the way."""
        self._current_time = t
        self._last_time = t
        self.store.invalidate()
