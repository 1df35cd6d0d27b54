"""Snapshot-based undo/redo over a TrackStore."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .tracks import StoreSnapshot, TrackStore

log = logging.getLogger(__name__)


@dataclass
class HistoryManager:
    """Undo/redo stacks of full store snapshots.

    Callers push a snapshot *before* each committed edit. With ``limit`` set,
    the oldest undo entries are dropped beyond that depth.
    """

    store: TrackStore
    limit: int | None = None

    _undo: list[StoreSnapshot] = field(default_factory=list, init=False, repr=False)
    _redo: list[StoreSnapshot] = field(default_factory=list, init=False, repr=False)

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def push_snapshot(self) -> None:
        """Record the current state; any redo history becomes unreachable."""
        self._undo.append(self.store.snapshot())
        if self.limit is not None and len(self._undo) > self.limit:
            del self._undo[: len(self._undo) - self.limit]
        self._redo.clear()

    def undo(self) -> bool:
        if not self._undo:
            return False
        previous = self._undo.pop()
        self._redo.append(self.store.snapshot())
        self.store.restore(previous)
        log.debug("Undo (%d left)", len(self._undo))
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        following = self._redo.pop()
        self._undo.append(self.store.snapshot())
        self.store.restore(following)
        log.debug("Redo (%d left)", len(self._redo))
        return True

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()
