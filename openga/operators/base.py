from __future__ import annotations

from abc import ABC, abstractmethod
import random
from typing import Iterator

from openga.chromosome import Chromosome
from openga.couple import Couple
from openga.exceptions import InvalidCandidateError
from openga.roulette import WeightedRouletteWheel


class Operator(ABC):
    """A pluggable strategy for one step of the evolutionary cycle.

    Operators are compared by identity. ``custom_weight`` is only read by
    :class:`~openga.policies.simple.CustomWeightPolicy`; zero means unset.
    """

    def __init__(self, custom_weight: float = 0.0):
        self._custom_weight = 0.0
        self.custom_weight = custom_weight

    @property
    def custom_weight(self) -> float:
        return self._custom_weight

    @custom_weight.setter
    def custom_weight(self, value: float) -> None:
        if value < 0:
            raise ValueError(f"custom_weight must be non-negative, got {value}")
        self._custom_weight = float(value)

    def with_custom_weight(self, weight: float) -> Operator:
        self.custom_weight = weight
        return self

    @property
    def name(self) -> str:
        return type(self).__name__

    def __repr__(self) -> str:
        return f"{self.name}(custom_weight={self._custom_weight})"


class ParentSelector(Operator):
    """Selects mating couples from a population snapshot."""

    @abstractmethod
    def select_mating_pairs(
        self,
        population: list[Chromosome],
        rng: random.Random,
        minimum_couples: int,
        epoch: int = 0,
    ) -> Iterator[Couple]:
        """Yield at least ``minimum_couples`` couples.

        Populations with fewer than two members yield nothing; a population
        of exactly two yields its only couple repeatedly.
        """

    @staticmethod
    def _couples_from_two(
        population: list[Chromosome], minimum_couples: int
    ) -> Iterator[Couple]:
        first, second = population
        for _ in range(minimum_couples):
            yield Couple.pair(first, second)

    @staticmethod
    def _stochastic_couples(
        population: list[Chromosome],
        rng: random.Random,
        minimum_couples: int,
        weights: dict[str, float] | None = None,
    ) -> Iterator[Couple]:
        """Draw each couple from a fresh wheel without replacement."""
        for _ in range(minimum_couples):
            if weights is None:
                wheel = WeightedRouletteWheel.uniform(population, rng)
            else:
                wheel = WeightedRouletteWheel(
                    population, lambda c: weights[c.id], rng
                )
            yield Couple.pair(wheel.spin_and_readjust(), wheel.spin_and_readjust())


class CrossoverStrategy(Operator):
    """Recombines a couple into one or two offspring."""

    def __init__(self, crossover_rate: float | None = None, custom_weight: float = 0.0):
        super().__init__(custom_weight=custom_weight)
        if crossover_rate is not None and not 0.0 <= crossover_rate <= 1.0:
            raise ValueError(
                f"crossover_rate must be within [0, 1], got {crossover_rate}"
            )
        self.crossover_rate = crossover_rate

    @abstractmethod
    def crossover(self, couple: Couple, rng: random.Random) -> list[Chromosome]:
        """Produce offspring; every offspring is a fresh deep copy."""

    @staticmethod
    def _require_genes(couple: Couple) -> None:
        for parent in couple:
            if not parent.genes:
                raise InvalidCandidateError(
                    f"Chromosome {parent.id} has no genes to recombine"
                )


class ReplacementStrategy(Operator):
    """Decides which members of the current population make way for offspring."""

    @property
    @abstractmethod
    def recommended_offspring_rate(self) -> float:
        """Fraction of the population to regenerate per epoch."""

    @abstractmethod
    def select_for_elimination(
        self,
        population: list[Chromosome],
        offspring: list[Chromosome],
        rng: random.Random,
        epoch: int = 0,
    ) -> list[Chromosome]:
        """Return the members of ``population`` to eliminate."""

    def apply(
        self,
        population: list[Chromosome],
        offspring: list[Chromosome],
        rng: random.Random,
        epoch: int = 0,
    ) -> list[Chromosome]:
        """Return survivors followed by offspring."""
        eliminated = {
            c.id for c in self.select_for_elimination(population, offspring, rng, epoch)
        }
        return [c for c in population if c.id not in eliminated] + list(offspring)

    @staticmethod
    def _elimination_count(
        population: list[Chromosome], offspring: list[Chromosome]
    ) -> int:
        if not population or not offspring:
            return 0
        return min(len(offspring), len(population))
