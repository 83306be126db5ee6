"""Seeded 32-bit random streams and integer hashing.

Every piece of generated content is derived from these two primitives.
``Mulberry32`` yields a reproducible float stream for one generation call;
``hash_int`` derives independent child seeds (star from galaxy, planet from
star, roll from planet) without advancing any shared stream.
"""

from __future__ import annotations

import math
from typing import Callable, Sequence, TypeVar

T = TypeVar("T")

MASK32 = 0xFFFFFFFF
_GOLDEN = 0x6D2B79F5


def _imul(a: int, b: int) -> int:
    return (a * b) & MASK32


class Mulberry32:
    """Mulberry32 generator: one call to ``random()`` advances the state once."""

    def __init__(self, seed: int) -> None:
        self.state = seed & MASK32

    def random(self) -> float:
        """Next float in [0, 1)."""
        self.state = (self.state + _GOLDEN) & MASK32
        s = self.state
        t = _imul(s ^ (s >> 15), 1 | s)
        t = ((t + _imul(t ^ (t >> 7), 61 | t)) & MASK32) ^ t
        return ((t ^ (t >> 14)) & MASK32) / 4294967296

    __call__ = random

    def uniform(self, a: float, b: float) -> float:
        return a + (b - a) * self.random()

    def index(self, n: int) -> int:
        """Uniform index in [0, n)."""
        return math.floor(self.random() * n)

    def randint(self, lo: int, hi: int) -> int:
        """Uniform integer in [lo, hi], inclusive."""
        return lo + math.floor(self.random() * (hi - lo + 1))

    def choice(self, seq: Sequence[T]) -> T:
        return seq[self.index(len(seq))]

    def shuffle(self, items: list) -> None:
        """In-place Fisher-Yates shuffle."""
        for i in range(len(items) - 1, 0, -1):
            j = self.index(i + 1)
            items[i], items[j] = items[j], items[i]


def mulberry32(seed: int) -> Callable[[], float]:
    """Return a generator function bound to a fresh stream."""
    return Mulberry32(seed).random


def hash_int(a: int, b: int) -> int:
    """Mix two integers into a well-distributed unsigned 32-bit value."""
    h = ((a * 2654435761) ^ (b * 340573321)) & MASK32
    h = _imul(h ^ (h >> 16), 0x45D9F3B)
    return (h ^ (h >> 16)) & MASK32


# ---------------------------------------------------------------------------
# Numeric helpers
# ---------------------------------------------------------------------------

def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def round_half_up(x: float) -> int:
    """Round to nearest integer, halves toward +inf (not banker's rounding)."""
    return math.floor(x + 0.5)


def ease_in_out_cubic(t: float) -> float:
    if t < 0.5:
        return 4 * t * t * t
    return 1 - (-2 * t + 2) ** 3 / 2


# ---------------------------------------------------------------------------
# Name generation
# ---------------------------------------------------------------------------

STAR_PREFIXES = [
    "Alph", "Bet", "Cep", "Dra", "Eri", "For", "Gem", "Hyd", "Ind", "Kep",
    "Lyr", "Mir", "Nex", "Ori", "Pol", "Rig", "Sig", "Tau", "Vel", "Xen", "Zet",
]

STAR_SUFFIXES = ["a", "ar", "ax", "ei", "en", "ia", "is", "on", "or", "um", "us", "ix"]

CLUSTER_ADJECTIVES = [
    "Crimson", "Azure", "Golden", "Silver", "Obsidian", "Verdant",
    "Amber", "Cobalt", "Ivory", "Scarlet", "Violet", "Ashen",
]

CLUSTER_NOUNS = [
    "Reach", "Expanse", "Drift", "Veil", "Crown", "Deep",
    "Haven", "Nexus", "Rift", "Gate", "Abyss", "Arc",
]

ROMAN = ["I", "II", "III", "IV", "V", "VI", "VII", "VIII", "IX", "X"]

SPECIALS = [
    "Ancient Ruins Detected",
    "Rare Element Deposits",
    "Anomalous Signals",
    "Crystalline Formations",
    "Subterranean Caverns",
    "Magnetic Anomaly",
]


def gen_star_name(seed: int) -> str:
    rng = Mulberry32(seed)
    return rng.choice(STAR_PREFIXES) + rng.choice(STAR_SUFFIXES)


def gen_cluster_name(seed: int) -> str:
    rng = Mulberry32(seed)
    return f"{rng.choice(CLUSTER_ADJECTIVES)} {rng.choice(CLUSTER_NOUNS)}"


def roman(n: int) -> str:
    """Roman numeral for a 0-based planet index; falls back to arabic past X."""
    return ROMAN[n] if n < len(ROMAN) else str(n + 1)
