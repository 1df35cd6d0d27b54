"""Pure evaluation of tracks at a point in time."""

from __future__ import annotations

from .timeindex import clamp, lerp, upper_bound
from .tracks import FieldType, FuncKey, Track


def evaluate_number(track: Track, t: float) -> float:
    """Linearly interpolated value at *t*, clamped to the track's bounds.

    Holds the first value before the first key and the last value after the
    last key. At a time shared by several keys the last of them wins.
    Stored values may sit outside ``[low, high]``; only this result is
    clamped.
    """
    times, elements = track.times, track.elements
    n = len(times)
    if n == 0:
        return track.low

    r = upper_bound(times, t)
    i1, i2 = r - 1, r
    if i1 < 0:
        value = elements[0].value
    elif i2 >= n:
        value = elements[i1].value
    else:
        t1, t2 = times[i1], times[i2]
        alpha = (t - t1) / (t2 - t1)
        value = lerp(elements[i1].value, elements[i2].value, alpha)
    return clamp(value, track.low, track.high)


def evaluate_enum(track: Track, t: float) -> str:
    """Step function: the last key at or before *t*, else the first key."""
    if not track.elements:
        return ""
    i = upper_bound(track.times, t) - 1
    if i < 0:
        return track.elements[0].value
    return track.elements[i].value


def hits_in_range(track: Track, from_exclusive: float, to_inclusive: float) -> list[FuncKey]:
    """Keys with ``from_exclusive < time <= to_inclusive``, in time order.

    Backward or zero-length ranges yield nothing.
    """
    if to_inclusive <= from_exclusive:
        return []
    start = upper_bound(track.times, from_exclusive)
    end = upper_bound(track.times, to_inclusive)
    return track.elements[start:end]


def evaluate(track: Track, t: float) -> float | str:
    """Evaluate a number or enum track at *t*."""
    if track.field_type is FieldType.NUMBER:
        return evaluate_number(track, t)
    if track.field_type is FieldType.ENUM:
        return evaluate_enum(track, t)
    raise TypeError(f"Track {track.name!r} is a func track; use hits_in_range")
