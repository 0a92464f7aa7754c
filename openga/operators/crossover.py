from __future__ import annotations

import random

from openga.chromosome import Chromosome
from openga.couple import Couple
from openga.operators.base import CrossoverStrategy


def _child_with_genes(template: Chromosome, genes: list) -> Chromosome:
    child = template.deep_copy()
    child.genes = genes
    return child


class OnePointCrossover(CrossoverStrategy):
    """Swaps gene tails at a single cut point; yields two offspring."""

    def crossover(self, couple: Couple, rng: random.Random) -> list[Chromosome]:
        self._require_genes(couple)
        a, b = couple.first, couple.second
        point = rng.randint(1, min(len(a.genes), len(b.genes)))
        return [
            _child_with_genes(a, a.genes[:point] + b.genes[point:]),
            _child_with_genes(b, b.genes[:point] + a.genes[point:]),
        ]


class KPointCrossover(CrossoverStrategy):
    """Alternates segments between parents at ``points`` distinct cut points.

    Short gene sequences get as many cuts as fit; with no room for a cut
    the offspring are plain copies of their parents.
    """

    def __init__(
        self,
        points: int = 2,
        crossover_rate: float | None = None,
        custom_weight: float = 0.0,
    ):
        super().__init__(crossover_rate=crossover_rate, custom_weight=custom_weight)
        if points < 1:
            raise ValueError(f"points must be at least 1, got {points}")
        self.points = points

    def crossover(self, couple: Couple, rng: random.Random) -> list[Chromosome]:
        self._require_genes(couple)
        a, b = couple.first, couple.second
        shortest = min(len(a.genes), len(b.genes))
        slots = range(1, shortest)
        cuts = sorted(rng.sample(slots, min(self.points, len(slots))))
        return [
            _child_with_genes(a, self._splice(a.genes, b.genes, cuts)),
            _child_with_genes(b, self._splice(b.genes, a.genes, cuts)),
        ]

    @staticmethod
    def _splice(primary: list, secondary: list, cuts: list[int]) -> list:
        bounds = [0, *cuts]
        genes: list = []
        for index, start in enumerate(bounds):
            source = primary if index % 2 == 0 else secondary
            if index + 1 < len(bounds):
                genes.extend(source[start : bounds[index + 1]])
            else:
                genes.extend(source[start:])
        return genes


class UniformCrossover(CrossoverStrategy):
    """Picks each overlapping gene from either parent; yields one offspring.

    The child is based on the longer parent, which also supplies any genes
    beyond the shorter parent's length.
    """

    def crossover(self, couple: Couple, rng: random.Random) -> list[Chromosome]:
        self._require_genes(couple)
        a, b = couple.first, couple.second
        longer = a if len(a.genes) >= len(b.genes) else b
        overlap = min(len(a.genes), len(b.genes))
        genes = [
            a.genes[i] if rng.random() >= 0.5 else b.genes[i] for i in range(overlap)
        ]
        genes.extend(longer.genes[overlap:])
        return [_child_with_genes(longer, genes)]
