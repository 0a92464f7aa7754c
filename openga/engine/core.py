from __future__ import annotations

import asyncio
import random
import time
from typing import Sequence

from loguru import logger

from openga.chromosome import Chromosome
from openga.engine.config import EngineConfig
from openga.engine.metrics import EngineMetrics
from openga.engine.state import EngineStatus, is_terminal, validate_transition
from openga.exceptions import (
    ConfigurationError,
    EpochCancelledError,
    EvolutionError,
    MissingInitialPopulationError,
)
from openga.operators.base import (
    CrossoverStrategy,
    Operator,
    ParentSelector,
    ReplacementStrategy,
)
from openga.policies.base import OperatorSelectionPolicy
from openga.policies.rewards import EpochOutcome, OperatorFamily, RewardSignal
from openga.termination import RunState

__all__ = ["EvolutionEngine"]

_PAUSE_POLL_INTERVAL = 0.05


class EvolutionEngine:
    """
    Epoch-driven evolution loop:
    - The population is only replaced at the end of a successful epoch.
    - Fitness evaluation is the single suspension point inside an epoch.
    - Every stochastic decision draws from one seeded random source.
    """

    def __init__(
        self,
        population: Sequence[Chromosome],
        config: EngineConfig | None = None,
    ):
        self.config = config or EngineConfig()
        if not population:
            raise MissingInitialPopulationError(
                "An initial population is required to start evolving"
            )
        ids = [c.id for c in population]
        if len(set(ids)) != len(ids):
            raise ConfigurationError("Initial population contains duplicate chromosome ids")

        initial_size = len(population)
        self.min_population_size = max(
            1, int(initial_size * self.config.min_population_fraction)
        )
        self.max_population_size = max(
            self.min_population_size,
            int(initial_size * self.config.max_population_fraction),
        )

        self._population: list[Chromosome] = list(population)
        self._rng = random.Random(self.config.seed)
        self._status = EngineStatus.NOT_STARTED
        self._policies: dict[OperatorFamily, OperatorSelectionPolicy] = {}
        self._epoch = 0
        self._state = RunState(population_size=initial_size)
        self._best: Chromosome | None = None
        self._started_at: float | None = None
        self._paused = False
        self._stop_requested = False

        self.metrics = EngineMetrics()

        logger.info(
            "[EvolutionEngine] Init | population={}, bounds=[{}, {}], seed={}",
            initial_size,
            self.min_population_size,
            self.max_population_size,
            self.config.seed,
        )

    # Public API

    @property
    def status(self) -> EngineStatus:
        return self._status

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def population(self) -> list[Chromosome]:
        return list(self._population)

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def best(self) -> Chromosome | None:
        return self._best

    @property
    def policies(self) -> dict[OperatorFamily, OperatorSelectionPolicy]:
        return dict(self._policies)

    async def run(self) -> Chromosome:
        """Evolve until a termination strategy fires; return the best chromosome seen."""
        await self._start()
        logger.info("[EvolutionEngine] Start")

        try:
            while not self._stop_requested:
                if self._paused:
                    await asyncio.sleep(_PAUSE_POLL_INTERVAL)
                    continue

                if self._should_terminate():
                    break

                try:
                    await self._step()
                except EpochCancelledError as exc:
                    self.metrics.cancelled_epochs += 1
                    logger.info(
                        "[EvolutionEngine] Epoch {} cancelled: {}", self._epoch, exc
                    )
                    break

                if self._every(self._epoch, self.config.log_interval):
                    self._log_metrics()
        finally:
            self._terminate()

        return self._best  # type: ignore[return-value]

    def run_sync(self) -> Chromosome:
        return asyncio.run(self.run())

    async def evolve_step(self) -> None:
        """Run exactly one epoch, starting the engine first if needed."""
        await self._start()
        await self._step()

    def stop(self) -> None:
        """Request the main loop to exit; an epoch in flight is abandoned."""
        self._stop_requested = True

    def pause(self) -> None:
        """Pause new epochs; the run loop keeps idling."""
        self._paused = True

    def resume(self) -> None:
        """Resume from a paused state."""
        self._paused = False

    def is_running(self) -> bool:
        return self._status is EngineStatus.RUNNING

    async def get_status(self) -> dict[str, object]:
        """Light, non-blocking status for UIs/health checks."""
        return {
            "status": self._status.value,
            "paused": self._paused,
            "epoch": self._epoch,
            "population_size": len(self._population),
            "best_fitness": self._state.best_fitness,
            "mean_fitness": self._state.mean_fitness,
            **self.metrics.to_dict(),
        }

    # Lifecycle

    async def _start(self) -> None:
        if self._status is EngineStatus.RUNNING:
            return
        if is_terminal(self._status):
            raise ValueError(
                "Engine has already terminated; build a new EvolutionEngine to run again"
            )
        validate_transition(self._status, EngineStatus.RUNNING)

        policies = {
            OperatorFamily.PARENT_SELECTION: self.config.parent_selection.resolve_policy(
                OperatorFamily.PARENT_SELECTION.value
            ),
            OperatorFamily.CROSSOVER: self.config.crossover.resolve_policy(
                OperatorFamily.CROSSOVER.value
            ),
            OperatorFamily.REPLACEMENT: self.config.replacement.resolve_policy(
                OperatorFamily.REPLACEMENT.value
            ),
        }
        await self._evaluate(self._population)

        self._policies = policies
        self._started_at = time.monotonic()
        self._state = RunState.observe(
            0, [c.fitness for c in self._population], 0.0
        )
        self._best = max(self._population, key=lambda c: c.fitness)
        self._status = EngineStatus.RUNNING
        logger.info(
            "[EvolutionEngine] Running | {}",
            ", ".join(f"{f.value}={p!r}" for f, p in self._policies.items()),
        )

    def _terminate(self) -> None:
        validate_transition(self._status, EngineStatus.TERMINATED)
        self._status = EngineStatus.TERMINATED
        logger.info(
            "[EvolutionEngine] Stopped | epochs={}, best={:.6f}",
            self._epoch,
            self._state.best_fitness,
        )

    def _should_terminate(self) -> bool:
        if self._deadline_passed():
            logger.info("[EvolutionEngine] Stop: deadline={}s", self.config.deadline)
            return True
        state = self._state.model_copy(update={"elapsed": self._elapsed()})
        for strategy in self.config.termination:
            if strategy.should_stop(state):
                logger.info("[EvolutionEngine] Stop: {}", strategy)
                return True
        return False

    # Epoch

    async def _step(self) -> None:
        epoch = self._epoch
        population = list(self._population)

        replacement = self._select(OperatorFamily.REPLACEMENT, epoch)
        parent_selector = self._select(OperatorFamily.PARENT_SELECTION, epoch)
        crossover = self._select(OperatorFamily.CROSSOVER, epoch)

        quota = self._offspring_quota(replacement, len(population))
        logger.debug(
            "[EvolutionEngine] Epoch {} | quota={}, selector={}, crossover={}, replacement={}",
            epoch,
            quota,
            parent_selector.name,
            crossover.name,
            replacement.name,
        )

        self._check_cancelled()
        offspring, parent_fitness, skipped = self._reproduce(
            population, parent_selector, crossover, quota, epoch
        )
        mutated = self._mutate_and_repair(offspring)

        self._check_cancelled()
        await self._evaluate(offspring)

        eliminated = replacement.select_for_elimination(
            population, offspring, self._rng, epoch
        )
        survivors, kept_offspring, padded, trimmed = self._enforce_bounds(
            population, eliminated, offspring
        )
        new_population = survivors + kept_offspring

        outcome = EpochOutcome(
            epoch=epoch,
            population_before=[c.fitness for c in population],
            parents=parent_fitness,
            offspring=[c.fitness for c in offspring],
            population_after=[c.fitness for c in new_population],
        )

        rewards = self._collect_rewards(
            {
                OperatorFamily.PARENT_SELECTION: parent_selector,
                OperatorFamily.CROSSOVER: crossover,
                OperatorFamily.REPLACEMENT: replacement,
            },
            outcome,
        )
        state = RunState.observe(
            epoch + 1,
            outcome.population_after,
            self._elapsed(),
            self._state.best_fitness_history,
        )
        epoch_best = max(new_population, key=lambda c: c.fitness)

        # Commit
        for chromosome in survivors:
            chromosome.increment_age()
        self._population = new_population
        self._epoch = epoch + 1
        for policy, operator, signal in rewards:
            policy.update_reward(operator, signal)
        self._state = state
        if self._best is None or epoch_best.fitness > self._best.fitness:
            self._best = epoch_best

        self.metrics.total_epochs += 1
        for operator in (parent_selector, crossover, replacement):
            self.metrics.record_operator(operator.name)
        self.metrics.record_reproduction_metrics(len(offspring), skipped, mutated)
        self.metrics.record_replacement_metrics(
            len(population) - len(survivors), padded, trimmed
        )
        logger.debug(
            "[EvolutionEngine] Epoch {} done | size={}, offspring={}, best={:.6f}, mean={:.6f}",
            epoch,
            len(new_population),
            len(kept_offspring),
            self._state.best_fitness,
            self._state.mean_fitness,
        )

    def _select(self, family: OperatorFamily, epoch: int) -> Operator:
        return self._policies[family].select_operator(self._rng, epoch)

    def _offspring_quota(self, replacement: ReplacementStrategy, size: int) -> int:
        rate = (
            self.config.offspring_rate
            if self.config.offspring_rate is not None
            else replacement.recommended_offspring_rate
        )
        quota = max(1, round(rate * size))
        lower = max(1, self.min_population_size - size)
        quota = min(max(quota, lower), self.max_population_size)
        if quota <= 0:
            raise EvolutionError(f"Offspring quota must be positive, got {quota}")
        return quota

    def _reproduce(
        self,
        population: list[Chromosome],
        parent_selector: ParentSelector,
        crossover: CrossoverStrategy,
        quota: int,
        epoch: int,
    ) -> tuple[list[Chromosome], list[float], int]:
        rate = (
            crossover.crossover_rate
            if crossover.crossover_rate is not None
            else self.config.crossover_rate
        )
        offspring: list[Chromosome] = []
        parent_fitness: list[float] = []
        skipped = 0

        while len(offspring) < quota:
            self._check_cancelled()
            produced = 0
            couples = parent_selector.select_mating_pairs(
                population, self._rng, quota - len(offspring), epoch
            )
            for couple in couples:
                if len(offspring) >= quota:
                    break
                if self._rng.random() >= rate:
                    skipped += 1
                    continue
                children = crossover.crossover(couple, self._rng)
                parent_fitness.extend(parent.fitness for parent in couple)
                children = children[: quota - len(offspring)]
                offspring.extend(children)
                produced += len(children)
            if produced == 0:
                break

        return offspring, parent_fitness, skipped

    def _mutate_and_repair(self, offspring: list[Chromosome]) -> int:
        mutated = 0
        for child in offspring:
            if self._rng.random() < self.config.mutation_rate:
                child.mutate(self._rng)
                mutated += 1
            child.repair()
            child.invalidate_fitness()
        return mutated

    def _enforce_bounds(
        self,
        population: list[Chromosome],
        eliminated: list[Chromosome],
        offspring: list[Chromosome],
    ) -> tuple[list[Chromosome], list[Chromosome], int, int]:
        """Keep the merged population within [min_population_size, max_population_size].

        Excess offspring are dropped worst first; a shortfall is covered by
        reinstating the fittest eliminated chromosomes.
        """
        eliminated_ids = {c.id for c in eliminated}
        survivors = [c for c in population if c.id not in eliminated_ids]

        trimmed = 0
        capacity = max(0, self.max_population_size - len(survivors))
        if len(offspring) > capacity:
            ranked = sorted(offspring, key=lambda c: c.fitness, reverse=True)
            keep_ids = {c.id for c in ranked[:capacity]}
            trimmed = len(offspring) - capacity
            offspring = [c for c in offspring if c.id in keep_ids]

        padded = 0
        shortfall = self.min_population_size - len(survivors) - len(offspring)
        if shortfall > 0:
            candidates = [c for c in population if c.id in eliminated_ids]
            reinstated = sorted(candidates, key=lambda c: c.fitness, reverse=True)[
                :shortfall
            ]
            padded = len(reinstated)
            eliminated_ids -= {c.id for c in reinstated}
            survivors = [c for c in population if c.id not in eliminated_ids]

        return survivors, offspring, padded, trimmed

    def _collect_rewards(
        self, applied: dict[OperatorFamily, Operator], outcome: EpochOutcome
    ) -> list[tuple[OperatorSelectionPolicy, Operator, RewardSignal]]:
        """Evaluate the reward function for every adaptive family, before commit."""
        rewards = []
        for family, operator in applied.items():
            policy = self._policies[family]
            if not policy.adaptive:
                continue
            signal = self.config.reward_function(family, outcome)
            if signal is not None:
                rewards.append((policy, operator, signal))
        return rewards

    async def _evaluate(self, chromosomes: Sequence[Chromosome]) -> None:
        pending = [c for c in chromosomes if not c.has_fitness]
        if pending:
            await asyncio.gather(*(c.evaluate() for c in pending))

    # Helpers

    def _check_cancelled(self) -> None:
        if self._stop_requested:
            raise EpochCancelledError("stop requested")
        if self._deadline_passed():
            raise EpochCancelledError(f"deadline of {self.config.deadline}s reached")

    def _deadline_passed(self) -> bool:
        return self.config.deadline is not None and self._elapsed() >= self.config.deadline

    def _elapsed(self) -> float:
        if self._started_at is None:
            return 0.0
        return time.monotonic() - self._started_at

    @staticmethod
    def _every(i: int, n: int) -> bool:
        return n > 0 and i % n == 0

    def _log_metrics(self) -> None:
        m = self.metrics.to_dict()
        m.pop("operator_usage")
        metrics_str = " | ".join(f"{k}={v}" for k, v in m.items())
        logger.info(
            "[EvolutionEngine] Epoch {} | best={:.6f}, mean={:.6f}, std={:.6f} | {}",
            self._epoch,
            self._state.best_fitness,
            self._state.mean_fitness,
            self._state.fitness_std,
            metrics_str,
        )
