"""One object wiring the store, scrubber, history and edit engine together."""

from __future__ import annotations

from typing import Callable

from .config import EditorConfig
from .edit import EditEngine
from .evaluate import evaluate
from .history import HistoryManager
from .scrubber import Scrubber
from .tracks import Track, TrackDef, TrackStore


class AnimationCore:
    """Caller-facing timeline engine.

    The embedding application drives time through :meth:`scrub_to_time` and
    :meth:`jump_to_time`; editing UIs go through :attr:`edit`. Rendering
    layers subscribe with :meth:`on_invalidate`, toast layers with
    :meth:`on_warning`.

    >>> from animtrack import NumberTrackDef
    >>> core = AnimationCore()
    >>> seen = []
    >>> core.add_track(NumberTrackDef("fade", [(0, 0.2), (2, 0.8)], update=seen.append))
    True
    >>> core.scrub_to_time(1.0)
    0
    >>> seen
    [0.5]
    """

    def __init__(self, config: EditorConfig | None = None) -> None:
        self.config = config or EditorConfig()
        self.store = TrackStore(self.config)
        self.scrubber = Scrubber(self.store)
        self.history = HistoryManager(self.store, limit=self.config.history_limit)
        self.edit = EditEngine(self.store, self.history)

    def on_invalidate(self, callback: Callable[[], None]) -> Callable[[], None]:
        return self.store.invalidated.connect(callback)

    def on_warning(self, callback: Callable[[str], None]) -> Callable[[str], None]:
        return self.edit.warnings.connect(callback)

    @property
    def current_time(self) -> float:
        return self.scrubber.current_time

    @property
    def last_time(self) -> float:
        return self.scrubber.last_time

    @property
    def duration(self) -> float:
        return self.store.duration

    @property
    def tracks(self) -> list[Track]:
        return self.store.ordered_tracks()

    def add_track(self, definition: TrackDef) -> bool:
        """Add a track at setup time. Not recorded in history; see ``edit.add_track``.

        A duplicate name returns False and is reported on the warning sink.
        """
        if not self.store.add_track(definition):
            self.edit.warnings.emit(f"Track {definition.name!r} already exists")
            return False
        return True

    def get_track(self, name: str) -> Track | None:
        return self.store.get_track(name)

    def get_track_by_id(self, track_id: str) -> Track | None:
        return self.store.get_track_by_id(track_id)

    def value_at(self, name: str, t: float) -> float | str:
        """Evaluate a number or enum track by name, without dispatching."""
        track = self.store.get_track(name)
        if track is None:
            raise KeyError(f"No track named {name!r}")
        return evaluate(track, t)

    def scrub_to_time(self, t: float) -> int:
        return self.scrubber.scrub_to_time(t)

    def jump_to_time(self, t: float) -> None:
        self.scrubber.jump_to_time(t)

    def undo(self) -> bool:
        return self.history.undo()

    def redo(self) -> bool:
        return self.history.redo()
