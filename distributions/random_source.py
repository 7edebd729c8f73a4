"""
Uniform random sources for the Monte Carlo engine.

The simulator never touches global random state: it is handed a source.
  - LCGSource:   32-bit linear congruential generator, bit-reproducible from a seed
  - NumpySource: numpy PCG64 generator; non-deterministic when seed is None

uniforms(n) returns exactly the values n successive next() calls would,
so batch and scalar consumers see the same stream.
"""

from __future__ import annotations

from typing import Optional, Protocol

import numpy as np


class RandomSource(Protocol):
    """Anything producing uniform floats in [0, 1)."""

    def next(self) -> float:
        ...

    def uniforms(self, n: int) -> np.ndarray:
        ...


class LCGSource:
    """
    s <- (1664525 * s + 1013904223) mod 2^32, output s / 2^32.

    Constants from Numerical Recipes. Seeds are reduced modulo 2^32.
    """

    MULTIPLIER = 1664525
    INCREMENT = 1013904223
    MODULUS = 2 ** 32

    def __init__(self, seed: int = 42):
        self.seed = int(seed)
        self._state = self.seed % self.MODULUS

    def next(self) -> float:
        self._state = (self.MULTIPLIER * self._state + self.INCREMENT) % self.MODULUS
        return self._state / self.MODULUS

    def uniforms(self, n: int) -> np.ndarray:
        """
        n successive next() values.

        The recurrence runs in a Python loop, one iteration per draw, so a
        seeded run costs 2 * n_paths * horizon_days iterations (about 2.9M
        for 8000 paths over 180 days). Unseeded runs use NumpySource.
        """
        out = np.empty(int(n), dtype=float)
        s = self._state
        a, c, m = self.MULTIPLIER, self.INCREMENT, self.MODULUS
        for i in range(int(n)):
            s = (a * s + c) % m
            out[i] = s
        self._state = s
        return out / m

    def __repr__(self) -> str:
        return f"LCGSource(seed={self.seed})"


class NumpySource:
    """Uniforms from numpy's default_rng."""

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self.rng = np.random.default_rng(seed)

    def next(self) -> float:
        return float(self.rng.random())

    def uniforms(self, n: int) -> np.ndarray:
        return self.rng.random(int(n))

    def __repr__(self) -> str:
        return f"NumpySource(seed={self.seed})"


def make_source(seed: Optional[int] = None) -> RandomSource:
    """Seeded runs use the LCG; unseeded runs draw from fresh OS entropy."""
    if seed is None:
        return NumpySource()
    return LCGSource(seed)
