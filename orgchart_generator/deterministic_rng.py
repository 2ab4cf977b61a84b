"""
Deterministic RNG — Seeded random source for roster generation.

Every random decision in the generator is drawn from a DeterministicRNG.
Mutation phases (exits, moves, hires) each draw from their own fork, so
changing the number of hires leaves the chosen exits and moves untouched.
"""

from __future__ import annotations

import hashlib
import random
from typing import List, Sequence, TypeVar

T = TypeVar("T")


class DeterministicRNG:
    """Local seeded RNG. No global random state touched."""

    def __init__(self, seed: int) -> None:
        self.seed = seed
        self._rng = random.Random(seed)

    def fork(self, label: str) -> "DeterministicRNG":
        """Independent stream derived from (seed, label); process-stable."""
        digest = hashlib.sha256(f"{self.seed}:{label}".encode("utf-8")).digest()
        return DeterministicRNG(int.from_bytes(digest[:8], "big"))

    def rand_choice(self, seq: Sequence[T]) -> T:
        return self._rng.choice(seq)

    def sample(self, seq: Sequence[T], k: int) -> List[T]:
        """``k`` distinct elements in draw order; ``k`` is capped at len(seq)."""
        pool = list(seq)
        return self._rng.sample(pool, min(k, len(pool)))

    def full_name(self, first_names: Sequence[str], last_names: Sequence[str]) -> str:
        return f"{self.rand_choice(first_names)} {self.rand_choice(last_names)}"
