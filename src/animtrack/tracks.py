"""Track definitions, keyframe records and the track store."""

from __future__ import annotations

import copy
import itertools
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, ClassVar, Iterator, Sequence

from .config import DEFAULT_NUMBER_HIGH, DEFAULT_NUMBER_LOW, EditorConfig
from .signal import Signal
from .timeindex import upper_bound

log = logging.getLogger(__name__)

_NAME_RE = re.compile(r"[A-Za-z0-9_]+(?:\.[A-Za-z0-9_]+)*")


class FieldType(Enum):
    NUMBER = "number"
    ENUM = "enum"
    FUNC = "func"


@dataclass(frozen=True)
class FuncCall:
    """Element payload of a func-track datum."""

    func_name: str
    args: tuple = ()


# --- Track definitions ---


@dataclass
class NumberTrackDef:
    """Interpolated number track; ``update`` receives the clamped value."""

    name: str
    data: list[tuple[float, float]] = field(default_factory=list)
    update: Callable[[float], None] | None = None
    low: float = DEFAULT_NUMBER_LOW
    high: float = DEFAULT_NUMBER_HIGH

    field_type: ClassVar[FieldType] = FieldType.NUMBER


@dataclass
class EnumTrackDef:
    """Stepped string track.

    ``values`` lists the known enum values up front; values found in
    ``data`` are appended to that set in first-seen order.
    """

    name: str
    data: list[tuple[float, str]] = field(default_factory=list)
    update: Callable[[str], None] | None = None
    values: Sequence[str] = ()

    field_type: ClassVar[FieldType] = FieldType.ENUM


@dataclass
class FuncTrackDef:
    """Hit track; ``update(func_name, *args)`` fires once per crossed key."""

    name: str
    data: list[tuple[float, FuncCall]] = field(default_factory=list)
    update: Callable[..., None] | None = None

    field_type: ClassVar[FieldType] = FieldType.FUNC


TrackDef = NumberTrackDef | EnumTrackDef | FuncTrackDef


# --- Keys ---


@dataclass(frozen=True)
class NumberKey:
    id: str
    time: float
    value: float


@dataclass(frozen=True)
class EnumKey:
    id: str
    time: float
    value: str


@dataclass(frozen=True)
class FuncKey:
    id: str
    time: float
    func_name: str = ""
    args: tuple = ()


Key = NumberKey | EnumKey | FuncKey


def _split_datum(datum: Any) -> tuple[float, Any]:
    if isinstance(datum, Mapping):
        return datum["time"], datum["element"]
    time, element = datum
    return time, element


def _make_key(key_id: str, field_type: FieldType, time: float, element: Any) -> Key:
    if field_type is FieldType.NUMBER:
        return NumberKey(key_id, float(time), float(element))
    if field_type is FieldType.ENUM:
        return EnumKey(key_id, float(time), str(element))
    if isinstance(element, FuncCall):
        return FuncKey(key_id, float(time), element.func_name, tuple(element.args))
    if isinstance(element, str):
        return FuncKey(key_id, float(time), element)
    raise ValueError(f"Unsupported func element {element!r}")


@dataclass
class Track:
    """Runtime state of one track.

    ``times`` and ``elements`` are parallel lists sorted by time so every
    lookup is a binary search. Keys sharing a time keep insertion order.
    """

    id: str
    definition: TrackDef
    times: list[float] = field(default_factory=list)
    elements: list[Key] = field(default_factory=list)
    low: float = DEFAULT_NUMBER_LOW
    high: float = DEFAULT_NUMBER_HIGH
    enum_values: list[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def field_type(self) -> FieldType:
        return self.definition.field_type

    def __len__(self) -> int:
        return len(self.times)

    def keys(self) -> Iterator[tuple[int, Key]]:
        """Yield ``(index, key)`` pairs in time order."""
        return enumerate(self.elements)

    def index_of(self, element_id: str) -> int:
        """Index of a key, which disambiguates keys stacked at the same time."""
        for i, key in enumerate(self.elements):
            if key.id == element_id:
                return i
        raise KeyError(f"No key with id {element_id!r} on track {self.name!r}")

    def key(self, element_id: str) -> Key:
        return self.elements[self.index_of(element_id)]

    def insert(self, key: Key) -> int:
        """Insert *key* after any keys at the same time; return its index."""
        i = upper_bound(self.times, key.time)
        self.times.insert(i, key.time)
        self.elements.insert(i, key)
        return i

    def remove(self, element_id: str) -> Key:
        i = self.index_of(element_id)
        del self.times[i]
        return self.elements.pop(i)

    def replace(self, index: int, key: Key) -> None:
        """Overwrite the key at *index*; caller keeps the time between neighbors."""
        self.times[index] = key.time
        self.elements[index] = key


# --- Snapshots ---


@dataclass(frozen=True)
class TrackState:
    id: str
    definition: TrackDef
    times: tuple[float, ...]
    elements: tuple[Key, ...]
    low: float
    high: float
    enum_values: tuple[str, ...]


@dataclass(frozen=True)
class StoreSnapshot:
    """Deep copy of the store's mutable state, tracks in display order.

    Definitions (and the callbacks on them) are shared, not copied.
    """

    tracks: tuple[TrackState, ...]
    duration: float


class TrackStore:
    """Owns every track, keyed by a stable id and kept in display order."""

    def __init__(self, config: EditorConfig | None = None) -> None:
        self.config = config or EditorConfig()
        self.duration: float = self.config.duration
        self.invalidated = Signal()
        self._tracks: dict[str, Track] = {}
        self._ids_by_name: dict[str, str] = {}
        self._order: list[str] = []
        self._front: dict[FieldType, str] = {}
        self._track_ids = itertools.count(1)
        self._key_ids = itertools.count(1)

    def invalidate(self) -> None:
        self.invalidated.emit()

    def new_key_id(self) -> str:
        return f"key_{next(self._key_ids)}"

    @staticmethod
    def validate_definition(definition: TrackDef) -> None:
        """Raise ValueError for a definition no store could accept."""
        name = definition.name
        if not _NAME_RE.fullmatch(name):
            raise ValueError(f"Invalid track name {name!r}: expected dot-separated alphanumeric segments")
        if definition.field_type is FieldType.NUMBER and not definition.low < definition.high:
            raise ValueError(
                f"Track {name!r} needs low < high, got low={definition.low!r} high={definition.high!r}"
            )

    def add_track(self, definition: TrackDef) -> bool:
        """Add a track built from *definition*.

        Returns False, leaving the store untouched, if a track with the same
        name already exists.
        """
        self.validate_definition(definition)
        name = definition.name
        if name in self._ids_by_name:
            log.warning("Track %r already exists", name)
            return False

        field_type = definition.field_type
        low, high = DEFAULT_NUMBER_LOW, DEFAULT_NUMBER_HIGH
        if field_type is FieldType.NUMBER:
            low, high = definition.low, definition.high

        keys = []
        for datum in definition.data:
            time, element = _split_datum(datum)
            keys.append(_make_key(self.new_key_id(), field_type, time, element))
        # list.sort is stable, so keys at equal times keep input order
        keys.sort(key=lambda k: k.time)

        enum_values: list[str] = []
        if field_type is FieldType.ENUM:
            enum_values = list(dict.fromkeys([*definition.values, *(k.value for k in keys)]))

        track = Track(
            id=f"track_{next(self._track_ids)}",
            definition=definition,
            times=[k.time for k in keys],
            elements=keys,
            low=low,
            high=high,
            enum_values=enum_values,
        )
        self._tracks[track.id] = track
        self._ids_by_name[name] = track.id
        self._order.append(track.id)

        if keys and keys[-1].time + self.config.duration_margin > self.duration:
            self.duration = keys[-1].time + self.config.duration_margin

        log.debug("Added %s track %r as %s", field_type.value, name, track.id)
        self.invalidate()
        return True

    def get_track(self, name: str) -> Track | None:
        track_id = self._ids_by_name.get(name)
        return None if track_id is None else self._tracks[track_id]

    def get_track_by_id(self, track_id: str) -> Track | None:
        return self._tracks.get(track_id)

    def track(self, track_id: str) -> Track:
        """Look up a track that must exist."""
        if track_id not in self._tracks:
            raise KeyError(f"No track with id {track_id!r}")
        return self._tracks[track_id]

    def ordered_tracks(self) -> list[Track]:
        return [self._tracks[track_id] for track_id in self._order]

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, track_id: object) -> bool:
        return track_id in self._tracks

    def move_track(self, track_id: str, index: int) -> None:
        """Move a track to *index* in display order (clamped to the list)."""
        self.track(track_id)
        self._order.remove(track_id)
        index = max(0, min(index, len(self._order)))
        self._order.insert(index, track_id)
        self.invalidate()

    def delete_track(self, track_id: str) -> None:
        track = self._tracks.pop(track_id, None)
        if track is None:
            return
        del self._ids_by_name[track.name]
        self._order.remove(track_id)
        self.invalidate()

    def set_bounds(self, track_id: str, low: float, high: float) -> bool:
        """Set a number track's bounds. Returns False (bounds kept) unless low < high."""
        track = self.track(track_id)
        if track.field_type is not FieldType.NUMBER:
            raise TypeError(f"Track {track.name!r} is a {track.field_type.value} track, bounds need a number track")
        if not low < high:
            log.warning("Rejected bounds low=%r high=%r for track %r", low, high, track.name)
            return False
        track.low, track.high = low, high
        self.invalidate()
        return True

    # --- Front tracks ---

    def front_track(self, field_type: FieldType) -> Track | None:
        """The primary edit target for *field_type*, defaulting to the first in order."""
        track_id = self._front.get(field_type)
        if track_id in self._tracks:
            return self._tracks[track_id]
        for track in self.ordered_tracks():
            if track.field_type is field_type:
                return track
        return None

    def set_front_track(self, track_id: str) -> None:
        track = self.track(track_id)
        self._front[track.field_type] = track_id
        self.invalidate()

    # --- Snapshots ---

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(
            tracks=tuple(
                TrackState(
                    id=track.id,
                    definition=track.definition,
                    times=tuple(track.times),
                    elements=tuple(copy.deepcopy(track.elements)),
                    low=track.low,
                    high=track.high,
                    enum_values=tuple(track.enum_values),
                )
                for track in self.ordered_tracks()
            ),
            duration=self.duration,
        )

    def restore(self, snapshot: StoreSnapshot) -> None:
        """Make *snapshot* the canonical state.

        Tracks that still exist are updated in place so outside references
        to them stay live; deleted tracks come back under their old id.
        """
        tracks: dict[str, Track] = {}
        for state in snapshot.tracks:
            track = self._tracks.get(state.id)
            if track is None:
                track = Track(id=state.id, definition=state.definition)
            track.times = list(state.times)
            track.elements = list(copy.deepcopy(state.elements))
            track.low, track.high = state.low, state.high
            track.enum_values = list(state.enum_values)
            tracks[state.id] = track

        self._tracks = tracks
        self._ids_by_name = {track.name: track.id for track in tracks.values()}
        self._order = [state.id for state in snapshot.tracks]
        self.duration = snapshot.duration
        self.invalidate()
