from __future__ import annotations

from abc import ABC, abstractmethod
import random
from typing import Sequence

from openga.exceptions import MissingOperatorError
from openga.operators.base import Operator
from openga.policies.rewards import RewardSignal


class OperatorSelectionPolicy(ABC):
    """Chooses which registered operator of one family runs on a given epoch."""

    adaptive: bool = False

    def __init__(self) -> None:
        self._operators: list[Operator] = []

    def apply_operators(self, operators: Sequence[Operator]) -> None:
        """Register the candidate operators; replaces any earlier registration."""
        if not operators:
            raise MissingOperatorError(
                f"{type(self).__name__} requires at least one operator"
            )
        self._operators = list(operators)

    @property
    def operators(self) -> list[Operator]:
        return list(self._operators)

    @abstractmethod
    def select_operator(self, rng: random.Random, epoch: int = 0) -> Operator:
        """Pick the operator to apply this epoch."""

    def update_reward(self, operator: Operator, signal: RewardSignal) -> None:
        """Feed back the outcome of applying ``operator``. Ignored unless adaptive."""

    def _require_operators(self) -> list[Operator]:
        if not self._operators:
            raise MissingOperatorError(
                f"{type(self).__name__} has no registered operators"
            )
        return self._operators

    def __repr__(self) -> str:
        names = ", ".join(op.name for op in self._operators)
        return f"{type(self).__name__}([{names}])"
