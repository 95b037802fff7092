"""Seedable random number sources used by the simulations."""

from __future__ import annotations

import random
import time
from typing import Optional


def _make_rng(seed: Optional[int]) -> random.Random:
    return random.Random(time.time_ns() if seed is None else seed)


class UniformRandom:
    """Uniform real numbers in [minimum, maximum)."""

    def __init__(self, minimum: float, maximum: float, seed: Optional[int] = None) -> None:
        self.minimum = minimum
        self.maximum = maximum
        self._rng = _make_rng(seed)

    def generate(self) -> float:
        return self.minimum + (self.maximum - self.minimum) * self._rng.random()


class NormalRandom:
    """Normally distributed numbers, redrawn until strictly positive."""

    def __init__(self, mean: float, std: float, seed: Optional[int] = None) -> None:
        self.mean = mean
        self.std = std
        self._rng = _make_rng(seed)

    def generate(self) -> float:
        while True:
            res = self._rng.gauss(self.mean, self.std)
            if res > 0:
                return res