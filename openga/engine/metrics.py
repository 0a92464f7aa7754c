from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class EngineMetrics(BaseModel):
    """Counters accumulated over a run."""

    total_epochs: int = Field(default=0, description="Total number of epochs run")
    offspring_created: int = Field(
        default=0, description="Total offspring produced by crossover"
    )
    crossovers_skipped: int = Field(
        default=0, description="Couples that produced no offspring (crossover rate)"
    )
    mutations_applied: int = Field(
        default=0, description="Total offspring mutated"
    )
    chromosomes_eliminated: int = Field(
        default=0, description="Total chromosomes removed by replacement"
    )
    population_padded: int = Field(
        default=0, description="Eliminated chromosomes reinstated to honour min size"
    )
    population_trimmed: int = Field(
        default=0, description="Offspring dropped to honour max size"
    )
    cancelled_epochs: int = Field(
        default=0, description="Epochs abandoned because of a stop or deadline"
    )
    operator_usage: dict[str, int] = Field(
        default_factory=dict, description="Times each operator was applied"
    )

    def record_operator(self, name: str) -> None:
        self.operator_usage[name] = self.operator_usage.get(name, 0) + 1

    def record_reproduction_metrics(
        self, offspring_created: int, crossovers_skipped: int, mutations_applied: int
    ) -> None:
        """Record metrics from crossover and mutation."""
        self.offspring_created += offspring_created
        self.crossovers_skipped += crossovers_skipped
        self.mutations_applied += mutations_applied

    def record_replacement_metrics(
        self, eliminated: int, padded: int, trimmed: int
    ) -> None:
        """Record metrics from replacement and bound enforcement."""
        self.chromosomes_eliminated += eliminated
        self.population_padded += padded
        self.population_trimmed += trimmed

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()
