"""Seeded pseudo-random sequences keyed by record identity.

``hash_key`` is an order-sensitive 32-bit avalanche hash (xmur3-style: each
character is xor-ed in, multiplied and rotated, then the accumulator is
finalized with xor-shift/multiply rounds). ``Mulberry32`` turns the seed into
a fast reproducible stream of floats in [0, 1).

All arithmetic is masked to 32 bits so results are identical on every
platform and match the browser implementation bit for bit.
"""

from __future__ import annotations

MASK32 = 0xFFFFFFFF


def _imul(a: int, b: int) -> int:
    return (a * b) & MASK32


def _rotl(x: int, r: int) -> int:
    return ((x << r) | (x >> (32 - r))) & MASK32


def _utf16_units(key: str) -> list[int]:
    data = key.encode("utf-16-le", "surrogatepass")
    return [data[i] | data[i + 1] << 8 for i in range(0, len(data), 2)]


def hash_key(key: str) -> int:
    """32-bit seed for ``key``. Changing any character changes the seed.

    Hashes UTF-16 code units, as the browser does, so a character outside
    the Basic Multilingual Plane contributes its two surrogates.
    """
    units = _utf16_units(key)
    h = (1779033703 ^ len(units)) & MASK32
    for unit in units:
        h = _imul(h ^ unit, 3432918353)
        h = _rotl(h, 13)
    h = _imul(h ^ (h >> 16), 2246822507)
    h = _imul(h ^ (h >> 13), 3266489909)
    return (h ^ (h >> 16)) & MASK32


class Mulberry32:
    """Deterministic float generator seeded with a 32-bit integer."""

    def __init__(self, seed: int) -> None:
        self.state = seed & MASK32

    def __call__(self) -> float:
        self.state = (self.state + 0x6D2B79F5) & MASK32
        t = self.state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & MASK32
        return ((t ^ (t >> 14)) & MASK32) / 4294967296

    def uniform(self, lo: float, hi: float) -> float:
        return lo + (hi - lo) * self()

    def jitter(self, amount: float) -> float:
        """Symmetric offset in [-amount, amount)."""
        return (self() * 2.0 - 1.0) * amount


def rng_for(key: str) -> Mulberry32:
    return Mulberry32(hash_key(key))
