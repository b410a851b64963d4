"""Random-bit sources for the random measurement branch."""

from __future__ import annotations

from typing import Iterable, Optional

import numpy as np


def coerce_rng(rng=None, seed: Optional[int] = None):
    """
    Return a random source:
    - if rng is provided, use it;
    - else if seed is provided, create a fresh Generator from that seed;
    - else create an unseeded Generator.

    Anything exposing ``integers(low, high)`` like :class:`numpy.random.Generator`
    is accepted as ``rng``.
    """
    if rng is not None:
        if not callable(getattr(rng, "integers", None)):
            raise TypeError(
                f"rng must provide an integers(low, high) method, got {type(rng).__name__}"
            )
        return rng
    return np.random.default_rng(seed)


def draw_bit(rng) -> int:
    """Draw one unbiased bit (0 or 1) from ``rng``."""
    return int(rng.integers(0, 2))


class FixedBits:
    """
    Replays a fixed sequence of bits, cycling when exhausted.

    Useful for pinning the outcome of random measurements:

    >>> src = FixedBits([1, 0])
    >>> [src.integers(0, 2) for _ in range(3)]
    [1, 0, 1]
    """

    def __init__(self, bits: Iterable[int]):
        self._bits = [int(b) for b in bits]
        if not self._bits:
            raise ValueError("FixedBits needs at least one bit.")
        bad = [b for b in self._bits if b not in (0, 1)]
        if bad:
            raise ValueError(f"FixedBits only accepts 0/1 values, got {bad}")
        self._pos = 0
        self.draws = 0

    def integers(self, low: int, high: int) -> int:
        if (low, high) != (0, 2):
            raise ValueError("FixedBits only supports integers(0, 2).")
        bit = self._bits[self._pos]
        self._pos = (self._pos + 1) % len(self._bits)
        self.draws += 1
        return bit

    def __repr__(self):
        return f"FixedBits({self._bits!r})"
