"""Deterministic random source used by map generation.

Every draw goes through a single ``numpy.random.Generator`` so a seed fully
determines the sequence. Map generation builds a fresh instance per run;
nothing here is shared between generator instances.
"""

from __future__ import annotations

import random
from typing import Any, List, Optional, Sequence

import numpy as np


class GameRNG:
    def __init__(self, seed: Optional[int] = None) -> None:
        self.initial_seed = seed if seed is not None else random.randint(0, 2**32 - 1)
        self.rng = np.random.default_rng(self.initial_seed)

    def get_int(self, a: int, b: int) -> int:
        """Uniform integer in ``[a, b]``, both ends inclusive."""
        if a > b:
            raise ValueError("a <= b")
        return int(self.rng.integers(a, b + 1))

    def shuffle(self, seq: List[Any]) -> None:
        """Shuffles ``seq`` in place."""
        self.rng.shuffle(seq)

    def choice(self, seq: Sequence[Any]) -> Any:
        if not seq:
            raise ValueError("cannot choose from an empty sequence")
        return seq[self.get_int(0, len(seq) - 1)]


__all__ = ["GameRNG"]
