from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Callable, Sequence

from pydantic import BaseModel, ConfigDict, Field, computed_field

from openga.operators.utils import mean, standard_deviation


class RunState(BaseModel):
    """Read-only snapshot of a run, taken at an epoch boundary."""

    epoch: int = Field(default=0, ge=0, description="Completed epochs")
    best_fitness: float = Field(default=float("-inf"))
    mean_fitness: float = Field(default=0.0)
    fitness_std: float = Field(default=0.0, ge=0)
    elapsed: float = Field(default=0.0, ge=0, description="Wall-clock seconds")
    population_size: int = Field(default=0, ge=0)
    best_fitness_history: tuple[float, ...] = Field(
        default=(), description="Best fitness after each epoch, oldest first"
    )

    model_config = ConfigDict(frozen=True)

    @classmethod
    def observe(
        cls,
        epoch: int,
        fitnesses: Sequence[float],
        elapsed: float,
        history: tuple[float, ...] = (),
    ) -> RunState:
        best = max(fitnesses) if fitnesses else float("-inf")
        return cls(
            epoch=epoch,
            best_fitness=best,
            mean_fitness=mean(fitnesses),
            fitness_std=standard_deviation(fitnesses),
            elapsed=elapsed,
            population_size=len(fitnesses),
            best_fitness_history=(*history, best),
        )

    @computed_field
    @property
    def elapsed_time(self) -> timedelta:
        return timedelta(seconds=self.elapsed)


class TerminationStrategy(ABC):
    """Boolean stop condition evaluated at every epoch boundary."""

    @abstractmethod
    def should_stop(self, state: RunState) -> bool:
        """Return True once the run should terminate."""

    def __repr__(self) -> str:
        params = ", ".join(f"{k}={v!r}" for k, v in vars(self).items())
        return f"{type(self).__name__}({params})"


class MaximumEpochs(TerminationStrategy):
    def __init__(self, max_epochs: int):
        if max_epochs <= 0:
            raise ValueError(f"max_epochs must be positive, got {max_epochs}")
        self.max_epochs = max_epochs

    def should_stop(self, state: RunState) -> bool:
        return state.epoch >= self.max_epochs


class MaximumDuration(TerminationStrategy):
    def __init__(self, duration: float | timedelta):
        seconds = (
            duration.total_seconds() if isinstance(duration, timedelta) else float(duration)
        )
        if seconds <= 0:
            raise ValueError(f"duration must be positive, got {duration}")
        self.seconds = seconds

    def should_stop(self, state: RunState) -> bool:
        return state.elapsed >= self.seconds


class TargetFitness(TerminationStrategy):
    """Stops once the best fitness reaches ``target``."""

    def __init__(self, target: float):
        self.target = target

    def should_stop(self, state: RunState) -> bool:
        return state.best_fitness >= self.target


class TargetStandardDeviation(TerminationStrategy):
    """Stops once the best fitness has plateaued.

    The plateau is measured as the population standard deviation of the
    best fitness over the last ``window`` epochs; at least two observations
    are required.
    """

    def __init__(self, target: float, window: int = 5):
        if target < 0:
            raise ValueError(f"target must be non-negative, got {target}")
        if window < 2:
            raise ValueError(f"window must be at least 2, got {window}")
        self.target = target
        self.window = window

    def should_stop(self, state: RunState) -> bool:
        recent = state.best_fitness_history[-self.window :]
        if len(recent) < 2:
            return False
        return standard_deviation(recent) <= self.target


class CustomTermination(TerminationStrategy):
    def __init__(self, predicate: Callable[[RunState], bool]):
        self.predicate = predicate

    def should_stop(self, state: RunState) -> bool:
        return bool(self.predicate(state))
