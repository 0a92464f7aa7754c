from __future__ import annotations

from collections import deque
import math
import random
from typing import Sequence

from loguru import logger

from openga.exceptions import ConfigurationError
from openga.operators.base import Operator
from openga.policies.base import OperatorSelectionPolicy
from openga.policies.rewards import RewardSignal
from openga.roulette import WeightedRouletteWheel

_RECENCY_DECAY = 0.1


class AdaptivePursuitPolicy(OperatorSelectionPolicy):
    """Bandit-style operator selection by probability matching with pursuit.

    Keeps a selection probability ``p`` and a reward estimate ``Q`` per
    operator. Up to and including epoch ``warmup_runs`` operators are tried
    in round-robin order; afterwards they are drawn from a roulette wheel
    weighted by ``p``. Each reward moves ``p`` towards the operator with the
    highest estimate (ties go to the lowest index) while every probability
    stays at or above ``minimum_probability``. With N operators the best one
    converges to ``1 - (N - 1) * minimum_probability``.

    Reward estimates are either an exponential moving average (when
    ``reward_learning_rate`` is set) or a recency-weighted average over the
    last ``reward_window_size`` rewards.
    """

    adaptive = True

    def __init__(
        self,
        learning_rate: float = 0.1,
        minimum_probability: float = 0.05,
        reward_window_size: int = 10,
        reward_learning_rate: float | None = None,
        diversity_weight: float = 0.1,
        minimum_usage_before_adaptation: int = 5,
        warmup_runs: int = 10,
    ):
        super().__init__()
        if not 0.0 <= learning_rate <= 1.0:
            raise ValueError(f"learning_rate must be within [0, 1], got {learning_rate}")
        if not 0.0 <= minimum_probability <= 1.0:
            raise ValueError(
                f"minimum_probability must be within [0, 1], got {minimum_probability}"
            )
        if reward_window_size < 1:
            raise ValueError(
                f"reward_window_size must be at least 1, got {reward_window_size}"
            )
        if reward_learning_rate is not None and not 0.0 < reward_learning_rate <= 1.0:
            raise ValueError(
                f"reward_learning_rate must be within (0, 1], got {reward_learning_rate}"
            )
        if diversity_weight < 0:
            raise ValueError(
                f"diversity_weight must be non-negative, got {diversity_weight}"
            )
        if minimum_usage_before_adaptation < 0:
            raise ValueError(
                "minimum_usage_before_adaptation must be non-negative, "
                f"got {minimum_usage_before_adaptation}"
            )
        if warmup_runs < 0:
            raise ValueError(f"warmup_runs must be non-negative, got {warmup_runs}")

        self.learning_rate = learning_rate
        self.minimum_probability = minimum_probability
        self.reward_window_size = reward_window_size
        self.reward_learning_rate = reward_learning_rate
        self.diversity_weight = diversity_weight
        self.minimum_usage_before_adaptation = minimum_usage_before_adaptation
        self.warmup_runs = warmup_runs

        self._probabilities: list[float] = []
        self._estimates: list[float] = []
        self._usage: list[int] = []
        self._windows: list[deque[float]] = []
        self._cursor = 0

    def apply_operators(self, operators: Sequence[Operator]) -> None:
        super().apply_operators(operators)
        n = len(self._operators)
        if self.minimum_probability * n > 1.0 + 1e-12:
            raise ConfigurationError(
                f"minimum_probability={self.minimum_probability} is infeasible "
                f"for {n} operators (minimum_probability * n must not exceed 1)"
            )
        self._probabilities = [1.0 / n] * n
        self._estimates = [0.0] * n
        self._usage = [0] * n
        self._windows = [deque(maxlen=self.reward_window_size) for _ in range(n)]
        self._cursor = 0

    @property
    def probabilities(self) -> list[float]:
        return list(self._probabilities)

    @property
    def reward_estimates(self) -> list[float]:
        return list(self._estimates)

    @property
    def usage_counts(self) -> list[int]:
        return list(self._usage)

    def select_operator(self, rng: random.Random, epoch: int = 0) -> Operator:
        operators = self._require_operators()
        if epoch <= self.warmup_runs:
            index = self._cursor % len(operators)
            self._cursor += 1
        else:
            index = WeightedRouletteWheel(
                range(len(operators)), lambda i: self._probabilities[i], rng
            ).spin()
        self._usage[index] += 1
        return operators[index]

    def update_reward(self, operator: Operator, signal: RewardSignal) -> None:
        index = self._index_of(operator)
        reward = signal.reward + self.diversity_weight * signal.diversity
        self._update_estimate(index, reward)

        if min(self._usage) < self.minimum_usage_before_adaptation:
            return
        self._pursue()
        logger.debug(
            "[AdaptivePursuitPolicy] {} reward={:.4f} | p={}",
            operator.name,
            reward,
            [round(p, 4) for p in self._probabilities],
        )

    def _index_of(self, operator: Operator) -> int:
        for index, candidate in enumerate(self._require_operators()):
            if candidate is operator:
                return index
        raise ValueError(f"{operator.name} is not registered with this policy")

    def _update_estimate(self, index: int, reward: float) -> None:
        window = self._windows[index]
        window.append(reward)
        if self.reward_learning_rate is not None:
            self._estimates[index] += self.reward_learning_rate * (
                reward - self._estimates[index]
            )
            return
        weights = [
            math.exp(-(len(window) - 1 - i) * _RECENCY_DECAY) for i in range(len(window))
        ]
        self._estimates[index] = sum(w * r for w, r in zip(weights, window)) / sum(weights)

    def _pursue(self) -> None:
        n = len(self._probabilities)
        floor = self.minimum_probability
        ceiling = 1.0 - (n - 1) * floor
        best = self._estimates.index(max(self._estimates))
        beta = self.learning_rate

        for i, p in enumerate(self._probabilities):
            target = ceiling if i == best else floor
            self._probabilities[i] = p + beta * (target - p)
        self._normalize()

    def _normalize(self) -> None:
        """Clamp to the floor and redistribute the free mass proportionally."""
        n = len(self._probabilities)
        floor = self.minimum_probability
        free = 1.0 - floor * n
        if free <= 0:
            self._probabilities = [1.0 / n] * n
            return

        excess = [max(p, floor) - floor for p in self._probabilities]
        total_excess = sum(excess)
        if total_excess <= 0:
            self._probabilities = [floor + free / n] * n
            return

        self._probabilities = [floor + free * e / total_excess for e in excess]
        drift = 1.0 - sum(self._probabilities)
        largest = self._probabilities.index(max(self._probabilities))
        self._probabilities[largest] += drift
