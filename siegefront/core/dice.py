"""
Randomness for the battle simulator.

Every stochastic decision (deck shuffles, weather rolls, AI score variance)
goes through a RandomSource so a fixed seed reproduces a whole battle:
- Uniform floats for probability checks
- Inclusive integer rolls for durations
- Seeded, in-place shuffles for decks
"""
import random
from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")


class RandomSource:
    """Seedable random stream. Pass one instance through a battle."""

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._random = random.Random(seed)

    def random(self) -> float:
        """Float in [0.0, 1.0)."""
        return self._random.random()

    def chance(self, probability: float) -> bool:
        """True with the given probability; <= 0 never, >= 1 always."""
        if probability <= 0:
            return False
        if probability >= 1:
            return True
        return self.random() < probability

    def randint(self, low: int, high: int) -> int:
        """Inclusive integer in [low, high]."""
        return self._random.randint(low, high)

    def choice(self, items: Sequence[T]) -> T:
        if not items:
            raise ValueError("Cannot choose from an empty sequence")
        return items[self._random.randrange(len(items))]

    def shuffle(self, items: List[T]) -> None:
        """In-place shuffle."""
        self._random.shuffle(items)

    def __repr__(self) -> str:
        return f"RandomSource(seed={self.seed!r})"


def ensure_rng(rng: Optional[RandomSource] = None) -> RandomSource:
    """Return the given source, or a fresh unseeded one."""
    return rng if rng is not None else RandomSource()

