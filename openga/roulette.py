from __future__ import annotations

from bisect import bisect_right
from itertools import accumulate
import random
from typing import Callable, Generic, Sequence, TypeVar

T = TypeVar("T")


class WeightedRouletteWheel(Generic[T]):
    """Weighted random sampling over a finite candidate list.

    ``spin`` samples with replacement and leaves the wheel untouched.
    ``spin_and_readjust`` removes the winner, so successive draws from the
    same wheel never repeat a candidate. When every remaining weight is
    zero the wheel falls back to uniform weighting instead of failing.
    """

    def __init__(
        self,
        candidates: Sequence[T],
        weight_fn: Callable[[T], float],
        rng: random.Random,
    ):
        if not candidates:
            raise ValueError("Cannot build a roulette wheel without candidates")

        weights = [float(weight_fn(candidate)) for candidate in candidates]
        negative = [w for w in weights if w < 0]
        if negative:
            raise ValueError(
                f"Roulette wheel weights must be non-negative, got {negative[0]}"
            )

        self._candidates: list[T] = list(candidates)
        self._weights = weights
        self._rng = rng
        self._rebuild()

    @classmethod
    def uniform(
        cls, candidates: Sequence[T], rng: random.Random
    ) -> WeightedRouletteWheel[T]:
        return cls(candidates, lambda _: 1.0, rng)

    def __len__(self) -> int:
        return len(self._candidates)

    @property
    def candidates(self) -> list[T]:
        return list(self._candidates)

    @property
    def probabilities(self) -> list[float]:
        """Selection probability of each remaining candidate."""
        total = self._cumulative[-1]
        return [w / total for w in self._effective_weights()]

    def spin(self) -> T:
        """Draw one candidate proportionally to its weight."""
        return self._candidates[self._draw_index()]

    def spin_and_readjust(self) -> T:
        """Draw one candidate and remove it from the wheel."""
        index = self._draw_index()
        winner = self._candidates.pop(index)
        self._weights.pop(index)
        if self._candidates:
            self._rebuild()
        return winner

    def _draw_index(self) -> int:
        if not self._candidates:
            raise ValueError("Cannot spin an empty roulette wheel")
        if len(self._candidates) == 1:
            return 0
        total = self._cumulative[-1]
        u = self._rng.random() * total
        # first prefix strictly above u: zero-weight slots are never hit
        return min(bisect_right(self._cumulative, u), len(self._cumulative) - 1)

    def _effective_weights(self) -> list[float]:
        if self._uniform:
            return [1.0] * len(self._weights)
        return self._weights

    def _rebuild(self) -> None:
        self._uniform = not any(w > 0 for w in self._weights)
        self._cumulative = list(accumulate(self._effective_weights()))
