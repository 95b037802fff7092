import itertools
import math

import pytest

from optima.combinatorics import (
    combination,
    decode_combination,
    decode_permutation,
    encode_bits,
    encode_combination,
    factorial,
    find_insert_place,
    find_place,
)


def test_combination_edges():
    assert combination(5, -1) == 0
    assert combination(4, 0) == 1
    assert combination(4, 4) == 1


@pytest.mark.parametrize("n", range(1, 9))
def test_combination_pascal_and_symmetry(n):
    for k in range(1, n):
        assert combination(n, k) == combination(n - 1, k - 1) + combination(n - 1, k)
        assert combination(n, k) == combination(n, n - k)


def test_factorial_recurrence():
    assert factorial(0) == 1
    assert factorial(1) == 1
    for a in range(2, 10):
        assert factorial(a) == a * factorial(a - 1)


def test_encode_bits():
    assert encode_bits([True, False, True]) == 5
    assert encode_bits([False, False]) == 0


@pytest.mark.parametrize("n,r", [(4, 2), (5, 3), (6, 1), (6, 6)])
def test_combination_round_trip(n, r):
    seen = set()
    for code in range(combination(n, r)):
        flags = decode_combination(code, n, r)
        assert len(flags) == n
        assert sum(flags) == r
        assert encode_combination(flags, r) == code
        seen.add(tuple(flags))
    assert len(seen) == combination(n, r)


@pytest.mark.parametrize("n", [1, 3, 4])
def test_decode_permutation_enumerates_all(n):
    divid = [factorial(n - 1 - i) for i in range(n)]
    perms = [tuple(decode_permutation(i, n, divid)) for i in range(factorial(n))]
    assert perms[0] == tuple(range(n))
    assert perms[-1] == tuple(reversed(range(n)))
    assert sorted(perms) == sorted(itertools.permutations(range(n)))
    assert perms == sorted(perms)


def test_find_insert_place_keeps_order():
    values = [5.0, 1.0, 4.0, 2.0, 3.0, 0.5, 4.5]
    order = []
    for i, value in enumerate(values):
        order.insert(find_insert_place(values, order, value), i)
    assert [values[i] for i in order] == sorted(values)


def test_find_insert_place_empty():
    assert find_insert_place([1.0], [], 1.0) == 0


def test_find_place_bounds():
    values = [1.0, 3.0, 5.0, 7.0]
    indices = [0, 1, 2, 3]
    assert find_place(values, indices, 9.0) == 3
    assert find_place(values, indices, 7.0) == 3
    for pos, value in enumerate(values):
        assert values[indices[find_place(values, indices, value)]] == value
    for probe in (1.5, 3.5, 6.0):
        place = find_place(values, indices, probe)
        assert values[indices[place]] <= probe < values[indices[place + 1]]


def test_find_place_uses_indirection():
    values = [7.0, 1.0, 5.0, 3.0]
    indices = sorted(range(4), key=values.__getitem__)
    place = find_place(values, indices, 4.0)
    assert math.isclose(values[indices[place]], 3.0)