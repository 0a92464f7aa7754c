from __future__ import annotations

from abc import abstractmethod
import inspect
import random
from typing import Any, Awaitable, Callable, Generic, TypeVar
import uuid

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from openga.exceptions import InvalidCandidateError

T = TypeVar("T")


class Cached(Generic[T]):
    """A lazily computed value guarded by a dirty flag."""

    def __init__(self) -> None:
        self._value: T | None = None
        self._dirty = True

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    @property
    def value(self) -> T:
        if self._dirty:
            raise LookupError("Cached value is not available until it is computed")
        return self._value  # type: ignore[return-value]

    def get(self, compute: Callable[[], T]) -> T:
        """Return the cached value, recomputing it first when dirty."""
        if self._dirty:
            self.set(compute())
        return self._value  # type: ignore[return-value]

    def set(self, value: T) -> None:
        self._value = value
        self._dirty = False

    def invalidate(self) -> None:
        self._dirty = True

    def __repr__(self) -> str:
        state = "dirty" if self._dirty else repr(self._value)
        return f"Cached({state})"


class Chromosome(BaseModel):
    """A candidate solution owned by the caller.

    Subclasses supply the problem: how fitness is computed, how genes
    mutate and, optionally, how an invalid gene sequence is repaired.
    Fitness is cached and invalidated whenever ``genes`` is reassigned;
    code that edits genes in place must call :meth:`invalidate_fitness`.
    """

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        description="Unique chromosome identifier",
    )
    genes: list[Any] = Field(
        default_factory=list, description="Problem-specific gene sequence"
    )
    age: int = Field(
        default=0, ge=0, description="Number of epochs this chromosome survived"
    )

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        validate_assignment=True,
    )

    _fitness: Cached[float] = PrivateAttr(default_factory=Cached)

    @field_validator("id")
    @classmethod
    def validate_uuid(cls, v: str) -> str:
        """Validate that the ID is a valid UUID."""
        try:
            uuid.UUID(v)
            return v
        except ValueError:
            raise ValueError("Invalid UUID format")

    def __setattr__(self, name: str, value: Any) -> None:
        super().__setattr__(name, value)
        if name == "genes":
            self.invalidate_fitness()

    def __hash__(self) -> int:
        return hash(self.id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Chromosome):
            return NotImplemented
        return self.id == other.id

    # Caller contract

    @abstractmethod
    def calculate_fitness(self) -> float | Awaitable[float]:
        """Compute fitness from the current genes (higher is better)."""

    @abstractmethod
    def mutate(self, rng: random.Random) -> None:
        """Mutate genes in place using the supplied random source."""

    def repair(self) -> None:
        """Restore gene invariants after crossover or mutation."""

    def deep_copy(self) -> Chromosome:
        """Return an independent copy with a fresh id, age 0 and no cached fitness."""
        clone = self.model_copy(
            deep=True, update={"id": str(uuid.uuid4()), "age": 0}
        )
        clone._fitness = Cached()
        return clone

    # Fitness cache

    @property
    def fitness(self) -> float:
        return self._fitness.get(self._compute_fitness_now)

    @property
    def has_fitness(self) -> bool:
        return not self._fitness.is_dirty

    async def evaluate(self) -> float:
        """Return the cached fitness, awaiting the computation if necessary."""
        if not self._fitness.is_dirty:
            return self._fitness.value
        result = self.calculate_fitness()
        if inspect.isawaitable(result):
            result = await result
        self._fitness.set(float(result))
        return self._fitness.value

    def invalidate_fitness(self) -> None:
        self._fitness.invalidate()

    def _compute_fitness_now(self) -> float:
        result = self.calculate_fitness()
        if inspect.isawaitable(result):
            if inspect.iscoroutine(result):
                result.close()
            raise InvalidCandidateError(
                f"Chromosome {self.id} computes fitness asynchronously; "
                "await evaluate() before reading fitness"
            )
        return float(result)

    # Age

    def increment_age(self) -> None:
        self.age += 1

    def reset_age(self) -> None:
        self.age = 0
