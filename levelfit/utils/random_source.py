"""Injectable randomness for quest generation, debuff targeting and luck rolls"""
import random
from typing import Optional, Protocol, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    """Source of uniform random draws"""

    def uniform_float(self) -> float:
        """Uniform float in [0, 1)"""
        ...

    def uniform_int(self, bound: int) -> int:
        """Uniform int in [0, bound)"""
        ...


class SeededRandom:
    """RandomSource backed by random.Random; pass a seed for reproducible runs"""

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)

    def uniform_float(self) -> float:
        return self._rng.random()

    def uniform_int(self, bound: int) -> int:
        if bound <= 0:
            raise ValueError(f"bound must be positive, got {bound}")
        return self._rng.randrange(bound)


def pick(rng: RandomSource, choices: Sequence[T]) -> T:
    """Uniform choice; duplicate entries in `choices` act as weights"""
    return choices[rng.uniform_int(len(choices))]
