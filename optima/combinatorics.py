"""Counting, ranking and ordered-insertion helpers used by the schedulers."""

from __future__ import annotations

import math
from typing import List, Sequence


def combination(a: int, b: int) -> int:
    """Binomial coefficient; 0 for negative ``b`` and 1 when ``b`` exceeds ``a``."""
    if b < 0:
        return 0
    if b > a:
        return 1
    return math.comb(a, b)


def factorial(a: int) -> int:
    """``a!``, taken as 1 for ``a`` below 2."""
    return math.factorial(a) if a >= 2 else 1


def encode_bits(flags: Sequence[bool]) -> int:
    """Read the flags as a little-endian binary number."""
    return sum(1 << i for i, flag in enumerate(flags) if flag)


def encode_combination(flags: Sequence[bool], r: int) -> int:
    """Rank of an ``r``-subset of ``len(flags)`` items in combinatorial order."""
    res = 0
    u = len(flags) - 1
    d = r - 1
    for flag in flags:
        if flag:
            d -= 1
        else:
            res += combination(u, d)
        u -= 1
    return res


def decode_combination(code: int, n: int, r: int) -> List[bool]:
    """The ``r``-subset of ``n`` items whose rank is ``code``."""
    res: List[bool] = []
    chosen = 0
    u = n - 1
    d = r - 1
    for _ in range(n):
        if chosen < r:
            count = combination(u, d)
            if code < count:
                res.append(True)
                d -= 1
                chosen += 1
            else:
                res.append(False)
                code -= count
            u -= 1
        else:
            res.append(False)
    return res


def decode_permutation(index: int, n: int, divid: Sequence[int]) -> List[int]:
    """The permutation of ``range(n)`` with the given index.

    ``divid[i]`` is the number of permutations sharing the first ``i + 1``
    positions, normally ``(n - 1 - i)!``.
    """
    remaining = list(range(n))
    res: List[int] = []
    for step in range(n):
        position, index = divmod(index, divid[step])
        res.append(remaining.pop(position))
    return res


def find_place(values: Sequence[float], indices: Sequence[int], value: float) -> int:
    """Position in ``indices`` (sorted ascending by ``values``) at or below ``value``.

    Returns the last position when ``value`` is not below the largest entry.
    """
    ul = len(indices) - 1
    ll = 0
    if value >= values[indices[ul]]:
        return ul
    while ul - ll > 1:
        curr = (ul - ll) // 2 + ll
        current = values[indices[curr]]
        if value < current:
            ul = curr
        elif value > current:
            ll = curr
        else:
            return curr
    return ll


def find_insert_place(values: Sequence[float], indices: Sequence[int], value: float) -> int:
    """Where to insert ``value`` so ``indices`` stays sorted ascending by ``values``."""
    size = len(indices)
    if size == 0:
        return 0
    ul = size
    ll = 0
    while ul - ll > 1:
        curr = (ul - ll) // 2 + ll
        current = values[indices[curr]]
        if value < current:
            ul = curr
        elif value > current:
            ll = curr
        else:
            return curr
    if value > values[indices[ll]]:
        return ul
    return ll