"""Reward signals fed back into adaptive operator-selection policies.

The reward formula is a policy choice rather than a universal constant:
the engine calls a configurable :data:`RewardFunction` once per operator
family per epoch and forwards whatever signal it returns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from openga.operators.utils import fitness_range, mean, standard_deviation


class OperatorFamily(str, Enum):
    PARENT_SELECTION = "parent_selection"
    CROSSOVER = "crossover"
    REPLACEMENT = "replacement"


@dataclass(frozen=True)
class RewardSignal:
    """Fitness before and after applying an operator.

    ``reward`` is the improvement normalised by ``normalization_range``
    when that range is positive, and the raw improvement otherwise.
    ``diversity`` is weighted separately by the receiving policy.
    """

    pre: float
    post: float
    normalization_range: float = 0.0
    diversity: float = 0.0

    @property
    def reward(self) -> float:
        delta = self.post - self.pre
        if self.normalization_range > 0:
            return delta / self.normalization_range
        return delta


@dataclass(frozen=True)
class EpochOutcome:
    """Fitness values observed during one epoch."""

    epoch: int
    population_before: list[float]
    parents: list[float] = field(default_factory=list)
    offspring: list[float] = field(default_factory=list)
    population_after: list[float] = field(default_factory=list)


RewardFunction = Callable[[OperatorFamily, EpochOutcome], RewardSignal | None]


def default_reward(family: OperatorFamily, outcome: EpochOutcome) -> RewardSignal | None:
    """Best offspring vs. best parent for reproduction, mean fitness shift for replacement."""
    if not outcome.offspring:
        return None

    spread = fitness_range(outcome.population_before)
    if family is OperatorFamily.REPLACEMENT:
        if not outcome.population_after:
            return None
        return RewardSignal(
            pre=mean(outcome.population_before),
            post=mean(outcome.population_after),
            normalization_range=spread,
            diversity=standard_deviation(outcome.population_after)
            - standard_deviation(outcome.population_before),
        )

    if not outcome.parents:
        return None
    return RewardSignal(
        pre=max(outcome.parents),
        post=max(outcome.offspring),
        normalization_range=spread,
        diversity=standard_deviation(outcome.offspring),
    )


def best_fitness_reward(
    family: OperatorFamily, outcome: EpochOutcome
) -> RewardSignal | None:
    """Improvement of the population's best fitness, for every family."""
    if not outcome.population_after:
        return None
    return RewardSignal(
        pre=max(outcome.population_before),
        post=max(outcome.population_after),
        normalization_range=fitness_range(outcome.population_before),
    )
