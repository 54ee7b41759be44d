# Package: utils

from __future__ import annotations

import math
from fractions import Fraction
from typing import Sequence, Union

from feebid.util.errors import EmptySampleError

Number = Union[int, float, Fraction]


def asc(samples: Sequence[Number]) -> list[Number]:
    """Sorted ascending copy, `samples` is left untouched"""
    return sorted(samples)


def sum(samples: Sequence[Number]) -> Number:
    total: Number = 0
    for n in samples:
        total += n
    return total


def mean(samples: Sequence[Number]) -> int:
    """
    Arithmetic mean rounded to the nearest integer, halves rounded up.
    Computed on exact fractions so wei amounts above 2**53 keep their precision.
    """
    if len(samples) == 0:
        raise EmptySampleError("mean")
    exact = Fraction(sum(samples)) / len(samples)
    return math.floor(exact + Fraction(1, 2))


def quantile(samples: Sequence[Number], q: float) -> Number:
    """
    Linear interpolation between the two closest order statistics (the "type 7" estimator).

    q=0 is the minimum, q=1 the maximum, and a single sample is returned as is for any q.
    When the rank lands on an index the sample itself is returned, so ints stay ints.
    Between two int samples the result is an exact `Fraction`.
    """
    if len(samples) == 0:
        raise EmptySampleError("quantile")
    if not 0 <= q <= 1:
        raise ValueError(f"quantile position must be in [0, 1], got {q}")
    ordered = asc(samples)
    pos = (len(ordered) - 1) * q
    base = math.floor(pos)
    rest = pos - base
    if base + 1 < len(ordered) and rest != 0:
        return ordered[base] + Fraction(rest) * (ordered[base + 1] - ordered[base])
    return ordered[base]
