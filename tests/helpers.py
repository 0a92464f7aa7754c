"""Sample chromosomes shared by the test modules."""

from __future__ import annotations

import asyncio
import random

from pydantic import Field

from openga.chromosome import Chromosome


class ListChromosome(Chromosome):
    """Fitness is the sum of the genes; mutation nudges one gene."""

    genes: list[float] = Field(default_factory=list)

    def calculate_fitness(self) -> float:
        return float(sum(self.genes))

    def mutate(self, rng: random.Random) -> None:
        if not self.genes:
            return
        genes = list(self.genes)
        index = rng.randrange(len(genes))
        genes[index] += rng.uniform(-1.0, 1.0)
        self.genes = genes


class AsyncListChromosome(ListChromosome):
    """Same problem with a coroutine fitness function."""

    async def calculate_fitness(self) -> float:
        await asyncio.sleep(0)
        return float(sum(self.genes))


def make_population(
    size: int, length: int = 4, seed: int = 0, cls: type[ListChromosome] = ListChromosome
) -> list[ListChromosome]:
    rng = random.Random(seed)
    return [
        cls(genes=[rng.uniform(0.0, 10.0) for _ in range(length)]) for _ in range(size)
    ]


def with_fitness(*values: float) -> list[ListChromosome]:
    """One single-gene chromosome per requested fitness value."""
    return [ListChromosome(genes=[v]) for v in values]
