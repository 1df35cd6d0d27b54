"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest

from animtrack import (
    AnimationCore,
    EnumTrackDef,
    FuncCall,
    FuncTrackDef,
    NumberTrackDef,
    Track,
    TrackDef,
    TrackStore,
)


@dataclass
class Recorder:
    """Callback stub recording the positional args of every call."""

    calls: list[tuple] = field(default_factory=list)

    def __call__(self, *args) -> None:
        self.calls.append(args)

    @property
    def values(self) -> list:
        return [args[0] for args in self.calls]


def add(target: TrackStore | AnimationCore, definition: TrackDef) -> Track:
    """Add *definition* and return the resulting track."""
    assert target.add_track(definition)
    return target.get_track(definition.name)


def fade_def(update=None) -> NumberTrackDef:
    return NumberTrackDef("light.fade", [(0.0, 0.2), (2.0, 0.8)], update=update)


def mode_def(update=None) -> EnumTrackDef:
    return EnumTrackDef("robot.mode", [(0.0, "idle"), (2.5, "walking")], update=update)


def cue_def(update=None) -> FuncTrackDef:
    return FuncTrackDef("show.cues", [(1.0, FuncCall("flash", (3, "red")))], update=update)


@pytest.fixture
def store() -> TrackStore:
    return TrackStore()


@pytest.fixture
def core() -> AnimationCore:
    return AnimationCore()


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()
