"""Edits to track keys that preserve ordering, separation and bounds.

Every committing operation follows the same protocol: validate, push a
history snapshot, mutate, invalidate. Requests that break a constraint are
corrected (clamped or pushed aside) rather than rejected, and the
correction is reported on the returned :class:`EditResult` and on the
``warnings`` signal.

The ``preview_*`` methods run the same correction math without touching
the store, for drag feedback. A cancelled drag simply never commits.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Sequence

from .history import HistoryManager
from .signal import Signal
from .timeindex import clamp, upper_bound
from .tracks import EnumKey, FieldType, FuncKey, NumberKey, Track, TrackDef, TrackStore

log = logging.getLogger(__name__)

# Float slack when comparing a pushed time against the separation.
_TOLERANCE = 1e-9


@dataclass(frozen=True)
class EditResult:
    element_id: str
    time: float
    collision: bool = False
    clamped: bool = False


def _blocking(times: Sequence[float], t: float, min_separation: float) -> list[float]:
    """Times in sorted *times* closer than *min_separation* to *t*."""
    found = []
    i = upper_bound(times, t - min_separation)
    while i < len(times) and times[i] < t + min_separation:
        if abs(times[i] - t) < min_separation - _TOLERANCE:
            found.append(times[i])
        i += 1
    return found


def separate(t: float, times: Sequence[float], min_separation: float) -> float:
    """Nearest time >= 0 that is at least *min_separation* from every entry of *times*.

    *times* must be sorted. Returns *t* unchanged when it is already clear.
    When pushing earlier and later displace equally, later wins.

    >>> separate(1.05, [1.0], 0.1)
    1.1
    >>> separate(0.5, [0.0, 1.0], 0.1)
    0.5
    """
    blocking = _blocking(times, t, min_separation)
    if not blocking:
        return t

    later = t
    while blocking:
        later = blocking[-1] + min_separation
        blocking = _blocking(times, later, min_separation)

    earlier: float | None = t
    blocking = _blocking(times, t, min_separation)
    while blocking:
        earlier = blocking[0] - min_separation
        if earlier < 0:
            earlier = None
            break
        blocking = _blocking(times, earlier, min_separation)

    if earlier is None or later - t <= t - earlier + _TOLERANCE:
        return later
    return earlier


@dataclass
class EditEngine:
    """Mutation surface for editing UIs.

    Calls are assumed to be serialized by the caller. Unknown track or key
    ids, and operations on a track of the wrong field type, raise.
    """

    store: TrackStore
    history: HistoryManager
    warnings: Signal = field(default_factory=Signal)

    @property
    def min_separation(self) -> float:
        return self.store.config.min_separation

    def _track(self, track_id: str, field_type: FieldType) -> Track:
        track = self.store.track(track_id)
        if track.field_type is not field_type:
            raise TypeError(
                f"Track {track.name!r} is a {track.field_type.value} track, expected {field_type.value}"
            )
        return track

    def _warn(self, message: str, *args) -> None:
        log.warning(message, *args)
        self.warnings.emit(message % args)

    # --- Tracks ---

    def add_track(self, definition: TrackDef) -> bool:
        """History-tracked :meth:`TrackStore.add_track`."""
        TrackStore.validate_definition(definition)
        if self.store.get_track(definition.name) is not None:
            self._warn("Track %r already exists", definition.name)
            return False
        self.history.push_snapshot()
        return self.store.add_track(definition)

    def delete_track(self, track_id: str) -> None:
        if track_id not in self.store:
            return
        self.history.push_snapshot()
        self.store.delete_track(track_id)

    def move_track(self, track_id: str, index: int) -> None:
        self.store.track(track_id)
        self.history.push_snapshot()
        self.store.move_track(track_id, index)

    def set_track_bounds(self, track_id: str, low: float, high: float) -> bool:
        """Change a number track's bounds, leaving stored values untouched.

        Values outside the new range stay as they are; evaluation clamps them.
        """
        track = self._track(track_id, FieldType.NUMBER)
        if not low < high:
            self._warn("Bounds for %r need low < high, got low=%r high=%r", track.name, low, high)
            return False
        self.history.push_snapshot()
        return self.store.set_bounds(track_id, low, high)

    # --- Keys (shared) ---

    def delete_key(self, track_id: str, element_id: str) -> None:
        track = self.store.track(track_id)
        track.index_of(element_id)
        self.history.push_snapshot()
        track.remove(element_id)
        self.store.invalidate()

    # --- Number keys ---

    def _resolve_number(self, track: Track, element_id: str, time: float) -> tuple[int, EditResult]:
        i = track.index_of(element_id)
        upper = track.times[i + 1] if i + 1 < len(track) else math.inf
        lower = track.times[i - 1] if i > 0 else min(0.0, track.times[i])
        resolved = clamp(float(time), lower, upper)
        return i, EditResult(element_id, resolved, clamped=resolved != time)

    def add_number_key(self, track_id: str, time: float, value: float) -> str:
        """Insert a key after any keys at the same time. *value* is stored unclamped."""
        track = self._track(track_id, FieldType.NUMBER)
        key = NumberKey(self.store.new_key_id(), max(0.0, float(time)), float(value))
        self.history.push_snapshot()
        track.insert(key)
        self.store.invalidate()
        return key.id

    def preview_number_key(self, track_id: str, element_id: str, time: float) -> EditResult:
        track = self._track(track_id, FieldType.NUMBER)
        return self._resolve_number(track, element_id, time)[1]

    def update_number_key(
        self,
        track_id: str,
        element_id: str,
        time: float,
        value: float | None = None,
    ) -> EditResult:
        """Move a number key, clamped between its current neighbors.

        Number keys never cross one another, whether dragged or typed in.
        """
        track = self._track(track_id, FieldType.NUMBER)
        i, result = self._resolve_number(track, element_id, time)
        old = track.elements[i]
        self.history.push_snapshot()
        track.replace(i, replace(
            old,
            time=result.time,
            value=old.value if value is None else float(value),
        ))
        if result.clamped:
            self._warn("Key %s on %r clamped to t=%.3f by its neighbors", element_id, track.name, result.time)
        self.store.invalidate()
        return result

    # --- Enum and func keys ---

    def _resolve_marker(self, track: Track, time: float, element_id: str | None = None) -> EditResult:
        requested = max(0.0, float(time))
        others = [t for t, key in zip(track.times, track.elements) if key.id != element_id]
        resolved = separate(requested, others, self.min_separation)
        return EditResult(
            element_id or "",
            resolved,
            collision=resolved != requested,
            clamped=requested != time,
        )

    def _warn_marker(self, track: Track, requested: float, result: EditResult) -> None:
        if result.collision:
            self._warn(
                "Key %s on %r moved from t=%.3f to t=%.3f to keep %.3f from its neighbors",
                result.element_id, track.name, requested, result.time, self.min_separation,
            )
        elif result.clamped:
            self._warn("Key %s on %r moved from t=%.3f to t=0", result.element_id, track.name, requested)

    def _add_marker(self, track: Track, key: EnumKey | FuncKey, time: float) -> str:
        result = replace(self._resolve_marker(track, time), element_id=key.id)
        self.history.push_snapshot()
        track.insert(replace(key, time=result.time))
        self._warn_marker(track, time, result)
        self.store.invalidate()
        return key.id

    def _move_marker(self, track: Track, element_id: str, time: float, **changes) -> EditResult:
        old = track.key(element_id)
        result = self._resolve_marker(track, time, element_id)
        self.history.push_snapshot()
        track.remove(element_id)
        track.insert(replace(old, time=result.time, **changes))
        self._warn_marker(track, time, result)
        self.store.invalidate()
        return result

    def add_enum_key(self, track_id: str, time: float) -> str:
        """Insert a key holding the track's first known enum value ('' if none)."""
        track = self._track(track_id, FieldType.ENUM)
        value = track.enum_values[0] if track.enum_values else ""
        return self._add_marker(track, EnumKey(self.store.new_key_id(), 0.0, value), time)

    def add_func_key(self, track_id: str, time: float) -> str:
        """Insert a placeholder hit with no function name and no arguments."""
        track = self._track(track_id, FieldType.FUNC)
        return self._add_marker(track, FuncKey(self.store.new_key_id(), 0.0), time)

    def preview_enum_key(self, track_id: str, element_id: str, time: float) -> EditResult:
        track = self._track(track_id, FieldType.ENUM)
        track.index_of(element_id)
        return self._resolve_marker(track, time, element_id)

    def preview_func_key(self, track_id: str, element_id: str, time: float) -> EditResult:
        track = self._track(track_id, FieldType.FUNC)
        track.index_of(element_id)
        return self._resolve_marker(track, time, element_id)

    def update_enum_key(
        self,
        track_id: str,
        element_id: str,
        time: float,
        value: str | None = None,
    ) -> EditResult:
        """Move (and optionally relabel) an enum key.

        Enum keys may cross each other; only ``time >= 0`` and the minimum
        separation are enforced. A new value joins the track's known set.
        """
        track = self._track(track_id, FieldType.ENUM)
        if value is None:
            return self._move_marker(track, element_id, time)
        result = self._move_marker(track, element_id, time, value=value)
        if value not in track.enum_values:
            track.enum_values.append(value)
        return result

    def update_func_key(
        self,
        track_id: str,
        element_id: str,
        time: float,
        func_name: str | None = None,
        args: Sequence | None = None,
    ) -> EditResult:
        """Move a hit and optionally change what it calls, under the enum-key rules."""
        track = self._track(track_id, FieldType.FUNC)
        changes = {}
        if func_name is not None:
            changes["func_name"] = func_name
        if args is not None:
            changes["args"] = tuple(args)
        return self._move_marker(track, element_id, time, **changes)
