"""Binary-search primitives over sorted time arrays."""

from __future__ import annotations

import bisect
from typing import Sequence


def upper_bound(times: Sequence[float], t: float) -> int:
    """Return the smallest index ``i`` with ``times[i] > t``, or ``len(times)``.

    The one temporal query every component uses, so that duplicate times
    break ties the same way everywhere: keys at exactly ``t`` fall on the
    left of the returned index.

    >>> upper_bound([0.0, 1.0, 1.0, 2.0], 1.0)
    3
    >>> upper_bound([], 5.0)
    0
    """
    return bisect.bisect_right(times, t)


def lerp(a: float, b: float, alpha: float) -> float:
    return a + (b - a) * alpha


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
