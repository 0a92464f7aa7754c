from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from openga.exceptions import ConfigurationError
from openga.operators.base import (
    CrossoverStrategy,
    Operator,
    ParentSelector,
    ReplacementStrategy,
)
from openga.operators.crossover import OnePointCrossover
from openga.operators.parent_selectors import TournamentParentSelector
from openga.operators.replacement import ElitistReplacement
from openga.policies.registration import OperatorRegistration
from openga.policies.rewards import RewardFunction, default_reward
from openga.termination import MaximumEpochs, TerminationStrategy


class EngineConfig(BaseModel):
    """Immutable configuration controlling EvolutionEngine behaviour.

    Operator families accept a single operator, a list of operators or an
    :class:`OperatorRegistration` carrying an explicit policy. The whole
    configuration is validated when it is built, so conflicting operator
    weights and policies are reported before any epoch runs.
    """

    min_population_fraction: float = Field(
        default=0.5,
        gt=0,
        le=1,
        description="Minimum population size as a fraction of the initial size",
    )
    max_population_fraction: float = Field(
        default=2.0,
        ge=1,
        description="Maximum population size as a fraction of the initial size",
    )
    mutation_rate: float = Field(default=0.2, ge=0, le=1)
    crossover_rate: float = Field(default=0.9, ge=0, le=1)
    offspring_rate: float | None = Field(
        default=None,
        gt=0,
        description=(
            "Override of the replacement operator's recommended offspring rate; "
            "values above 1 are allowed and capped at the maximum population size"
        ),
    )
    parent_selection: OperatorRegistration = Field(
        default_factory=lambda: OperatorRegistration.of(TournamentParentSelector())
    )
    crossover: OperatorRegistration = Field(
        default_factory=lambda: OperatorRegistration.of(OnePointCrossover())
    )
    replacement: OperatorRegistration = Field(
        default_factory=lambda: OperatorRegistration.of(ElitistReplacement(0.1))
    )
    termination: list[TerminationStrategy] = Field(
        default_factory=lambda: [MaximumEpochs(100)],
        description="The run stops as soon as any strategy fires",
    )
    reward_function: RewardFunction = Field(
        default=default_reward,
        description="Reward fed to adaptive policies for each operator family",
    )
    seed: int | None = Field(
        default=None, description="Seed for the run's random source (None = entropy)"
    )
    deadline: float | None = Field(
        default=None,
        gt=0,
        description="Wall-clock budget in seconds, checked before expensive steps",
    )
    log_interval: int = Field(
        default=10, ge=0, description="Epochs between metric logs (0 = never)"
    )

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    @field_validator("parent_selection", "crossover", "replacement", mode="before")
    @classmethod
    def coerce_registration(cls, value: Any) -> Any:
        if isinstance(value, Operator):
            return OperatorRegistration.of(value)
        if isinstance(value, (list, tuple)):
            return OperatorRegistration(operators=list(value))
        return value

    @field_validator("termination", mode="before")
    @classmethod
    def coerce_termination(cls, value: Any) -> Any:
        if isinstance(value, TerminationStrategy):
            return [value]
        return value

    @model_validator(mode="after")
    def validate_configuration(self) -> EngineConfig:
        if self.min_population_fraction >= self.max_population_fraction:
            raise ConfigurationError(
                "min_population_fraction must be below max_population_fraction, got "
                f"{self.min_population_fraction} >= {self.max_population_fraction}"
            )
        for family, registration, expected in self.families():
            registration.validate_policy(family)
            for operator in registration.operators:
                if not isinstance(operator, expected):
                    raise ConfigurationError(
                        f"{operator.name} cannot be registered for {family}; "
                        f"expected a {expected.__name__}"
                    )
        if not self.termination:
            raise ConfigurationError("At least one termination strategy is required")
        return self

    def families(self) -> list[tuple[str, OperatorRegistration, type[Operator]]]:
        return [
            ("parent_selection", self.parent_selection, ParentSelector),
            ("crossover", self.crossover, CrossoverStrategy),
            ("replacement", self.replacement, ReplacementStrategy),
        ]
