from __future__ import annotations

import random
from typing import Sequence

from openga.operators.base import Operator
from openga.policies.base import OperatorSelectionPolicy
from openga.roulette import WeightedRouletteWheel


class FirstChoicePolicy(OperatorSelectionPolicy):
    """Always the first registered operator."""

    def select_operator(self, rng: random.Random, epoch: int = 0) -> Operator:
        return self._require_operators()[0]


class RoundRobinPolicy(OperatorSelectionPolicy):
    """Cycles through the operators in registration order."""

    def __init__(self) -> None:
        super().__init__()
        self._cursor = 0

    def apply_operators(self, operators: Sequence[Operator]) -> None:
        super().apply_operators(operators)
        self._cursor = 0

    def select_operator(self, rng: random.Random, epoch: int = 0) -> Operator:
        operators = self._require_operators()
        operator = operators[self._cursor % len(operators)]
        self._cursor = (self._cursor + 1) % len(operators)
        return operator


class RandomChoicePolicy(OperatorSelectionPolicy):
    """Uniform draw over the registered operators."""

    def select_operator(self, rng: random.Random, epoch: int = 0) -> Operator:
        return WeightedRouletteWheel.uniform(self._require_operators(), rng).spin()


class CustomWeightPolicy(OperatorSelectionPolicy):
    """Draw proportional to each operator's ``custom_weight``.

    Operators left at weight zero are never chosen while another operator
    has a positive weight; if all weights are zero the draw is uniform.
    """

    def select_operator(self, rng: random.Random, epoch: int = 0) -> Operator:
        return WeightedRouletteWheel(
            self._require_operators(), lambda op: op.custom_weight, rng
        ).spin()
