from __future__ import annotations

import math
import random
from typing import Iterator

from loguru import logger

from openga.chromosome import Chromosome
from openga.couple import Couple
from openga.operators.base import ParentSelector
from openga.operators.utils import boltzmann_temperature
from openga.roulette import WeightedRouletteWheel


def non_negative_fitness(population: list[Chromosome]) -> dict[str, float]:
    """Map chromosome ids to fitness values shifted into non-negative space."""
    fitnesses = {c.id: c.fitness for c in population}
    min_fitness = min(fitnesses.values())
    if min_fitness < 0:
        fitnesses = {
            key: f - min_fitness + 1e-6 for key, f in fitnesses.items()
        }  # shift to positive space
    return fitnesses


class RandomParentSelector(ParentSelector):
    """Pairs parents uniformly at random."""

    def select_mating_pairs(
        self,
        population: list[Chromosome],
        rng: random.Random,
        minimum_couples: int,
        epoch: int = 0,
    ) -> Iterator[Couple]:
        if len(population) <= 1:
            return
        if len(population) == 2:
            yield from self._couples_from_two(population, minimum_couples)
            return
        yield from self._stochastic_couples(population, rng, minimum_couples)


class RouletteWheelParentSelector(ParentSelector):
    """Fitness-proportional selection."""

    def select_mating_pairs(
        self,
        population: list[Chromosome],
        rng: random.Random,
        minimum_couples: int,
        epoch: int = 0,
    ) -> Iterator[Couple]:
        if len(population) <= 1:
            return
        if len(population) == 2:
            yield from self._couples_from_two(population, minimum_couples)
            return
        yield from self._stochastic_couples(
            population, rng, minimum_couples, non_negative_fitness(population)
        )


class RankParentSelector(ParentSelector):
    """Selection weighted by fitness rank (1 for the worst, n for the best)."""

    def select_mating_pairs(
        self,
        population: list[Chromosome],
        rng: random.Random,
        minimum_couples: int,
        epoch: int = 0,
    ) -> Iterator[Couple]:
        if len(population) <= 1:
            return
        if len(population) == 2:
            yield from self._couples_from_two(population, minimum_couples)
            return
        ranked = sorted(population, key=lambda c: c.fitness)
        ranks = {c.id: float(rank) for rank, c in enumerate(ranked, start=1)}
        yield from self._stochastic_couples(population, rng, minimum_couples, ranks)


class TournamentParentSelector(ParentSelector):
    """Tournament selection over a shuffled subset of the population.

    With ``tournament_size=None`` every tournament draws its size as
    5-20% of the population. Tournaments smaller than two fall back to the
    whole population, and sizes are always capped at the population size.
    In deterministic mode the two fittest participants mate; in stochastic
    mode both parents are drawn from a fitness-weighted wheel.
    """

    def __init__(
        self,
        tournament_size: int | None = None,
        stochastic: bool = True,
        custom_weight: float = 0.0,
    ):
        super().__init__(custom_weight=custom_weight)
        if tournament_size is not None and tournament_size < 2:
            raise ValueError(
                f"tournament_size must be at least 2, got {tournament_size}"
            )
        self.tournament_size = tournament_size
        self.stochastic = stochastic

    def select_mating_pairs(
        self,
        population: list[Chromosome],
        rng: random.Random,
        minimum_couples: int,
        epoch: int = 0,
    ) -> Iterator[Couple]:
        if len(population) <= 1:
            return
        if len(population) == 2:
            yield from self._couples_from_two(population, minimum_couples)
            return

        for _ in range(minimum_couples):
            size = self._resolve_size(len(population), rng)
            participants = rng.sample(population, size)
            if self.stochastic:
                weights = non_negative_fitness(participants)
                wheel = WeightedRouletteWheel(
                    participants, lambda c: weights[c.id], rng
                )
                yield Couple.pair(wheel.spin_and_readjust(), wheel.spin_and_readjust())
            else:
                best, runner_up = sorted(
                    participants, key=lambda c: c.fitness, reverse=True
                )[:2]
                yield Couple.pair(best, runner_up)

    def _resolve_size(self, population_size: int, rng: random.Random) -> int:
        if self.tournament_size is not None:
            size = self.tournament_size
        else:
            size = math.ceil(population_size * rng.randint(5, 20) / 100)
        if size < 2:
            size = population_size
        return min(size, population_size)


class BoltzmannParentSelector(ParentSelector):
    """Selection weighted by exp((f - f_max) / T) with a decaying temperature."""

    def __init__(
        self,
        temperature_decay_rate: float = 0.01,
        initial_temperature: float = 1.0,
        use_exponential_decay: bool = True,
        custom_weight: float = 0.0,
    ):
        super().__init__(custom_weight=custom_weight)
        if temperature_decay_rate < 0:
            raise ValueError(
                f"temperature_decay_rate must be non-negative, got {temperature_decay_rate}"
            )
        if initial_temperature <= 0:
            raise ValueError(
                f"initial_temperature must be positive, got {initial_temperature}"
            )
        self.temperature_decay_rate = temperature_decay_rate
        self.initial_temperature = initial_temperature
        self.use_exponential_decay = use_exponential_decay

    def temperature(self, epoch: int) -> float:
        return boltzmann_temperature(
            self.initial_temperature,
            self.temperature_decay_rate,
            epoch,
            self.use_exponential_decay,
        )

    def select_mating_pairs(
        self,
        population: list[Chromosome],
        rng: random.Random,
        minimum_couples: int,
        epoch: int = 0,
    ) -> Iterator[Couple]:
        if len(population) <= 1:
            return
        if len(population) == 2:
            yield from self._couples_from_two(population, minimum_couples)
            return

        temperature = self.temperature(epoch)
        max_fitness = max(c.fitness for c in population)
        weights = {
            c.id: math.exp((c.fitness - max_fitness) / temperature) for c in population
        }
        logger.debug(
            "[BoltzmannParentSelector] epoch={} temperature={:.4f}", epoch, temperature
        )
        yield from self._stochastic_couples(population, rng, minimum_couples, weights)


class ElitistParentSelector(ParentSelector):
    """Mates every elite first, then fills up from a fitness-weighted mating pool."""

    def __init__(
        self,
        allow_elite_non_elite_mating: bool = True,
        elite_proportion: float = 0.1,
        non_elite_proportion: float = 0.9,
        custom_weight: float = 0.0,
    ):
        super().__init__(custom_weight=custom_weight)
        if not 0.0 < elite_proportion <= 1.0:
            raise ValueError(
                f"elite_proportion must be within (0, 1], got {elite_proportion}"
            )
        if not 0.0 <= non_elite_proportion <= 1.0:
            raise ValueError(
                f"non_elite_proportion must be within [0, 1], got {non_elite_proportion}"
            )
        self.allow_elite_non_elite_mating = allow_elite_non_elite_mating
        self.elite_proportion = elite_proportion
        self.non_elite_proportion = non_elite_proportion

    def select_mating_pairs(
        self,
        population: list[Chromosome],
        rng: random.Random,
        minimum_couples: int,
        epoch: int = 0,
    ) -> Iterator[Couple]:
        if len(population) <= 1:
            return
        if len(population) == 2:
            yield from self._couples_from_two(population, minimum_couples)
            return

        ranked = sorted(population, key=lambda c: c.fitness, reverse=True)
        elite_count = max(1, math.ceil(self.elite_proportion * len(population)))
        elites = ranked[:elite_count]
        non_elite_count = (
            math.ceil(self.non_elite_proportion * (len(population) - elite_count))
            if self.non_elite_proportion > 0
            else 0
        )
        non_elites = ranked[elite_count : elite_count + non_elite_count]
        elite_ids = {c.id for c in elites}

        produced = 0
        mated: set[str] = set()
        for elite in elites:
            mates = self._potential_mates(elite, elite_ids, elites, non_elites, mated)
            if not mates:
                mates = self._potential_mates(elite, elite_ids, elites, non_elites, set())
            if not mates:
                break
            yield Couple.pair(elite, self._select_by_fitness(mates, rng))
            mated.add(elite.id)
            produced += 1

        pool = self._mating_pool(elites, non_elites)
        while produced < minimum_couples and len(pool) >= 2:
            first = self._select_by_fitness(pool, rng)
            mates = self._potential_mates(first, elite_ids, elites, non_elites, set())
            if not mates:
                break
            yield Couple.pair(first, self._select_by_fitness(mates, rng))
            produced += 1

    def _mating_pool(
        self, elites: list[Chromosome], non_elites: list[Chromosome]
    ) -> list[Chromosome]:
        pool: list[Chromosome] = []
        if len(elites) >= 2:
            pool.extend(elites)
        if self.allow_elite_non_elite_mating:
            pool.extend(non_elites)
            if len(elites) == 1 and non_elites:
                pool.append(elites[0])
        elif len(non_elites) >= 2:
            pool.extend(non_elites)
        return pool

    def _potential_mates(
        self,
        chromosome: Chromosome,
        elite_ids: set[str],
        elites: list[Chromosome],
        non_elites: list[Chromosome],
        mated: set[str],
    ) -> list[Chromosome]:
        if chromosome.id in elite_ids:
            same, other = elites, non_elites
        else:
            same, other = non_elites, elites
        mates = [c for c in same if c.id != chromosome.id and c.id not in mated]
        if self.allow_elite_non_elite_mating:
            mates.extend(c for c in other if c.id not in mated)
        return mates

    @staticmethod
    def _select_by_fitness(
        candidates: list[Chromosome], rng: random.Random
    ) -> Chromosome:
        if len(candidates) == 1:
            return candidates[0]
        weights = non_negative_fitness(candidates)
        return WeightedRouletteWheel(candidates, lambda c: weights[c.id], rng).spin()
