"""Tests for TrackStore and the track data model."""

import logging

import pytest

from animtrack import (
    EditorConfig,
    EnumTrackDef,
    FieldType,
    FuncCall,
    FuncKey,
    FuncTrackDef,
    NumberTrackDef,
    TrackStore,
)

from conftest import add, cue_def, fade_def, mode_def


# --- add_track ---


class TestAddTrack:
    def test_add_returns_true(self, store: TrackStore) -> None:
        assert store.add_track(fade_def()) is True
        assert len(store) == 1

    def test_duplicate_name_rejected(self, store: TrackStore, caplog) -> None:
        store.add_track(NumberTrackDef("a"))
        with caplog.at_level(logging.WARNING):
            assert store.add_track(EnumTrackDef("a")) is False
        assert len(store) == 1
        assert store.get_track("a").field_type is FieldType.NUMBER
        assert "already exists" in caplog.text

    def test_duplicate_does_not_invalidate(self, store: TrackStore) -> None:
        store.add_track(NumberTrackDef("a"))
        calls = []
        store.invalidated.connect(lambda: calls.append(1))
        store.add_track(NumberTrackDef("a"))
        assert calls == []

    @pytest.mark.parametrize("name", ["", "a b", ".a", "a.", "a..b", "a-b"])
    def test_malformed_name_raises(self, store: TrackStore, name: str) -> None:
        with pytest.raises(ValueError):
            store.add_track(NumberTrackDef(name))
        assert len(store) == 0

    @pytest.mark.parametrize("name", ["a", "robot.arm_1.x", "A1.B2"])
    def test_dotted_names_accepted(self, store: TrackStore, name: str) -> None:
        assert store.add_track(NumberTrackDef(name))

    def test_inverted_bounds_raise(self, store: TrackStore) -> None:
        with pytest.raises(ValueError):
            store.add_track(NumberTrackDef("a", low=1.0, high=1.0))

    def test_data_sorted_stably(self, store: TrackStore) -> None:
        track = add(store, EnumTrackDef("e", [(2.0, "b"), (1.0, "a"), (1.0, "c")]))
        assert track.times == [1.0, 1.0, 2.0]
        assert [k.value for k in track.elements] == ["a", "c", "b"]

    def test_parallel_arrays(self, store: TrackStore) -> None:
        track = add(store, fade_def())
        assert len(track.times) == len(track.elements) == 2
        assert [k.time for k in track.elements] == track.times

    def test_mapping_datums_accepted(self, store: TrackStore) -> None:
        track = add(store, NumberTrackDef("n", [{"time": 1.0, "element": 0.5}]))
        assert track.elements[0].value == 0.5

    def test_func_datum_as_bare_name(self, store: TrackStore) -> None:
        track = add(store, FuncTrackDef("f", [(1.0, "beep")]))
        assert track.elements[0] == FuncKey(track.elements[0].id, 1.0, "beep", ())

    def test_func_args_stored_as_tuple(self, store: TrackStore) -> None:
        track = add(store, FuncTrackDef("f", [(1.0, FuncCall("go", [1, 2]))]))
        assert track.elements[0].args == (1, 2)

    def test_unsupported_func_element(self, store: TrackStore) -> None:
        with pytest.raises(ValueError):
            store.add_track(FuncTrackDef("f", [(1.0, 42)]))

    def test_default_bounds(self, store: TrackStore) -> None:
        track = add(store, NumberTrackDef("n"))
        assert (track.low, track.high) == (0.0, 1.0)

    def test_custom_bounds(self, store: TrackStore) -> None:
        track = add(store, NumberTrackDef("n", low=-5.0, high=5.0))
        assert (track.low, track.high) == (-5.0, 5.0)

    def test_enum_values_known_then_seen(self, store: TrackStore) -> None:
        track = add(store, EnumTrackDef(
            "e", [(0.0, "walk"), (1.0, "idle")], values=("idle", "run"),
        ))
        assert track.enum_values == ["idle", "run", "walk"]


# --- Duration ---


class TestDuration:
    def test_default_duration(self, store: TrackStore) -> None:
        assert store.duration == 100.0

    def test_short_track_keeps_duration(self, store: TrackStore) -> None:
        store.add_track(NumberTrackDef("n", [(50.0, 0.0)]))
        assert store.duration == 100.0

    def test_long_track_extends_with_margin(self, store: TrackStore) -> None:
        store.add_track(NumberTrackDef("n", [(150.0, 0.0)]))
        assert store.duration == 151.0

    def test_configured_margin(self) -> None:
        store = TrackStore(EditorConfig(duration=10.0, duration_margin=2.0))
        store.add_track(NumberTrackDef("n", [(10.0, 0.0)]))
        assert store.duration == 12.0


# --- Identity and lookup ---


class TestLookup:
    def test_ids_are_per_store(self) -> None:
        a, b = TrackStore(), TrackStore()
        assert add(a, fade_def()).id == add(b, fade_def()).id == "track_1"

    def test_ids_never_reused(self, store: TrackStore) -> None:
        first = add(store, NumberTrackDef("a"))
        store.delete_track(first.id)
        second = add(store, NumberTrackDef("a"))
        assert second.id != first.id

    def test_key_ids_unique_across_tracks(self, store: TrackStore) -> None:
        add(store, fade_def())
        add(store, mode_def())
        ids = [k.id for t in store.ordered_tracks() for k in t.elements]
        assert len(ids) == len(set(ids))

    def test_get_track_by_id(self, store: TrackStore) -> None:
        track = add(store, fade_def())
        assert store.get_track_by_id(track.id) is track
        assert store.get_track_by_id("nope") is None
        assert store.get_track("nope") is None

    def test_strict_lookup_raises(self, store: TrackStore) -> None:
        with pytest.raises(KeyError):
            store.track("nope")

    def test_index_of(self, store: TrackStore) -> None:
        track = add(store, NumberTrackDef("n", [(1.0, 0.1), (1.0, 0.9)]))
        second = track.elements[1]
        assert track.index_of(second.id) == 1
        assert track.key(second.id) is second
        assert list(track.keys()) == [(0, track.elements[0]), (1, second)]

    def test_index_of_unknown_raises(self, store: TrackStore) -> None:
        track = add(store, fade_def())
        with pytest.raises(KeyError):
            track.index_of("nope")


# --- Order, deletion, bounds ---


class TestOrder:
    def test_insertion_order(self, store: TrackStore) -> None:
        add(store, fade_def())
        add(store, mode_def())
        add(store, cue_def())
        assert [t.name for t in store.ordered_tracks()] == ["light.fade", "robot.mode", "show.cues"]

    def test_move_track(self, store: TrackStore) -> None:
        add(store, fade_def())
        add(store, mode_def())
        cues = add(store, cue_def())
        store.move_track(cues.id, 0)
        assert [t.name for t in store.ordered_tracks()] == ["show.cues", "light.fade", "robot.mode"]

    def test_move_track_clamps_index(self, store: TrackStore) -> None:
        fade = add(store, fade_def())
        add(store, mode_def())
        store.move_track(fade.id, 99)
        assert store.ordered_tracks()[-1] is fade

    def test_delete_track(self, store: TrackStore) -> None:
        fade = add(store, fade_def())
        store.delete_track(fade.id)
        assert len(store) == 0
        assert store.get_track("light.fade") is None

    def test_delete_absent_is_noop(self, store: TrackStore) -> None:
        add(store, fade_def())
        store.delete_track("nope")
        assert len(store) == 1

    def test_deleted_name_can_be_reused(self, store: TrackStore) -> None:
        fade = add(store, fade_def())
        store.delete_track(fade.id)
        assert store.add_track(fade_def())


class TestSetBounds:
    def test_set_bounds(self, store: TrackStore) -> None:
        fade = add(store, fade_def())
        assert store.set_bounds(fade.id, -1.0, 2.0)
        assert (fade.low, fade.high) == (-1.0, 2.0)

    @pytest.mark.parametrize("low, high", [(1.0, 1.0), (2.0, 1.0)])
    def test_invalid_bounds_keep_previous(self, store: TrackStore, low: float, high: float) -> None:
        fade = add(store, fade_def())
        assert store.set_bounds(fade.id, low, high) is False
        assert (fade.low, fade.high) == (0.0, 1.0)

    def test_bounds_on_enum_track_raise(self, store: TrackStore) -> None:
        mode = add(store, mode_def())
        with pytest.raises(TypeError):
            store.set_bounds(mode.id, 0.0, 1.0)


class TestFrontTrack:
    def test_defaults_to_first_of_type(self, store: TrackStore) -> None:
        add(store, mode_def())
        first = add(store, NumberTrackDef("a"))
        add(store, NumberTrackDef("b"))
        assert store.front_track(FieldType.NUMBER) is first
        assert store.front_track(FieldType.FUNC) is None

    def test_designated_front_track(self, store: TrackStore) -> None:
        add(store, NumberTrackDef("a"))
        b = add(store, NumberTrackDef("b"))
        store.set_front_track(b.id)
        assert store.front_track(FieldType.NUMBER) is b

    def test_deleted_front_track_falls_back(self, store: TrackStore) -> None:
        a = add(store, NumberTrackDef("a"))
        b = add(store, NumberTrackDef("b"))
        store.set_front_track(b.id)
        store.delete_track(b.id)
        assert store.front_track(FieldType.NUMBER) is a
