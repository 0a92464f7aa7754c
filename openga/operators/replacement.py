from __future__ import annotations

import math
import random

from loguru import logger

from openga.chromosome import Chromosome
from openga.operators.base import ReplacementStrategy
from openga.operators.utils import boltzmann_temperature, fitness_range, shuffled
from openga.roulette import WeightedRouletteWheel


def _draw_without_replacement(
    wheel: WeightedRouletteWheel[Chromosome], count: int
) -> list[Chromosome]:
    return [wheel.spin_and_readjust() for _ in range(min(count, len(wheel)))]


class GenerationalReplacement(ReplacementStrategy):
    """The whole population makes way for the offspring."""

    @property
    def recommended_offspring_rate(self) -> float:
        return 1.0

    def select_for_elimination(
        self,
        population: list[Chromosome],
        offspring: list[Chromosome],
        rng: random.Random,
        epoch: int = 0,
    ) -> list[Chromosome]:
        if not population or not offspring:
            return []
        return list(population)


class ElitistReplacement(ReplacementStrategy):
    """Protects the fittest ``elite_percentage`` and eliminates randomly among the rest."""

    def __init__(self, elite_percentage: float = 0.1, custom_weight: float = 0.0):
        super().__init__(custom_weight=custom_weight)
        if not 0.0 <= elite_percentage <= 1.0:
            raise ValueError(
                f"elite_percentage must be within [0, 1], got {elite_percentage}"
            )
        self.elite_percentage = elite_percentage

    @property
    def recommended_offspring_rate(self) -> float:
        return 1.0 - self.elite_percentage

    def select_for_elimination(
        self,
        population: list[Chromosome],
        offspring: list[Chromosome],
        rng: random.Random,
        epoch: int = 0,
    ) -> list[Chromosome]:
        if not population or not offspring:
            return []
        elite_count = math.ceil(len(population) * self.elite_percentage)
        ranked = sorted(population, key=lambda c: c.fitness, reverse=True)
        candidates = ranked[elite_count:]
        count = min(len(offspring), len(candidates))
        logger.debug(
            "[ElitistReplacement] protecting {} elite(s), eliminating {} of {}",
            elite_count,
            count,
            len(candidates),
        )
        return rng.sample(candidates, count)


class RandomEliminationReplacement(ReplacementStrategy):
    """Eliminates uniformly at random."""

    @property
    def recommended_offspring_rate(self) -> float:
        return 0.25

    def select_for_elimination(
        self,
        population: list[Chromosome],
        offspring: list[Chromosome],
        rng: random.Random,
        epoch: int = 0,
    ) -> list[Chromosome]:
        return rng.sample(population, self._elimination_count(population, offspring))


class TournamentReplacement(ReplacementStrategy):
    """Repeated tournaments; the loser of each is eliminated.

    Participants are drawn by walking a single shuffle of the population
    circularly. In stochastic mode the loser is drawn with inverse-fitness
    weights instead of being the least fit participant. Once fewer
    candidates than ``tournament_size`` remain, the rest are eliminated at
    random.
    """

    def __init__(
        self,
        tournament_size: int = 3,
        stochastic: bool = False,
        custom_weight: float = 0.0,
    ):
        super().__init__(custom_weight=custom_weight)
        if tournament_size < 2:
            raise ValueError(
                f"tournament_size must be at least 2, got {tournament_size}"
            )
        self.tournament_size = tournament_size
        self.stochastic = stochastic

    @property
    def recommended_offspring_rate(self) -> float:
        return 0.5

    def select_for_elimination(
        self,
        population: list[Chromosome],
        offspring: list[Chromosome],
        rng: random.Random,
        epoch: int = 0,
    ) -> list[Chromosome]:
        count = self._elimination_count(population, offspring)
        order = shuffled(population, rng)
        eliminated: list[Chromosome] = []
        eliminated_ids: set[str] = set()
        cursor = 0

        while len(eliminated) < count:
            remaining = [c for c in order if c.id not in eliminated_ids]
            if len(remaining) < self.tournament_size:
                eliminated.extend(rng.sample(remaining, count - len(eliminated)))
                break

            participants: list[Chromosome] = []
            while len(participants) < self.tournament_size:
                candidate = order[cursor % len(order)]
                cursor += 1
                if candidate.id not in eliminated_ids and candidate not in participants:
                    participants.append(candidate)

            loser = self._loser(participants, rng)
            eliminated.append(loser)
            eliminated_ids.add(loser.id)

        return eliminated

    def _loser(self, participants: list[Chromosome], rng: random.Random) -> Chromosome:
        if not self.stochastic:
            return min(participants, key=lambda c: c.fitness)
        fitnesses = [c.fitness for c in participants]
        epsilon = 0.01 * fitness_range(fitnesses) + 0.001
        ceiling = max(fitnesses) + epsilon
        return WeightedRouletteWheel(
            participants, lambda c: ceiling - c.fitness, rng
        ).spin()


class AgeBasedReplacement(ReplacementStrategy):
    """Older chromosomes are more likely to be eliminated."""

    @property
    def recommended_offspring_rate(self) -> float:
        return 0.35

    def select_for_elimination(
        self,
        population: list[Chromosome],
        offspring: list[Chromosome],
        rng: random.Random,
        epoch: int = 0,
    ) -> list[Chromosome]:
        count = self._elimination_count(population, offspring)
        if count == 0:
            return []
        if all(c.age == 0 for c in population):
            return rng.sample(population, count)
        wheel = WeightedRouletteWheel(population, lambda c: c.age + 1, rng)
        return _draw_without_replacement(wheel, count)


class BoltzmannReplacement(ReplacementStrategy):
    """Eliminates with probability proportional to exp((f_max - f) / T)."""

    def __init__(
        self,
        temperature_decay_rate: float = 0.05,
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

    @property
    def recommended_offspring_rate(self) -> float:
        return 0.4

    def temperature(self, epoch: int) -> float:
        return boltzmann_temperature(
            self.initial_temperature,
            self.temperature_decay_rate,
            epoch,
            self.use_exponential_decay,
        )

    def select_for_elimination(
        self,
        population: list[Chromosome],
        offspring: list[Chromosome],
        rng: random.Random,
        epoch: int = 0,
    ) -> list[Chromosome]:
        count = self._elimination_count(population, offspring)
        if count == 0:
            return []
        fitnesses = [c.fitness for c in population]
        if fitness_range(fitnesses) == 0:
            return rng.sample(population, count)

        temperature = self.temperature(epoch)
        min_fitness = min(fitnesses)
        # same proportions as exp((f_max - f) / T) without overflowing
        wheel = WeightedRouletteWheel(
            population,
            lambda c: math.exp((min_fitness - c.fitness) / temperature),
            rng,
        )
        return _draw_without_replacement(wheel, count)
