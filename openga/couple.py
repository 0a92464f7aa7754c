from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from openga.chromosome import Chromosome
from openga.exceptions import InvalidCandidateError


@dataclass(frozen=True)
class Couple:
    """Two distinct parents drawn from the same population snapshot."""

    first: Chromosome
    second: Chromosome

    def __post_init__(self) -> None:
        if self.first.id == self.second.id:
            raise InvalidCandidateError(
                f"Chromosome {self.first.id} cannot be paired with itself"
            )

    @classmethod
    def pair(cls, first: Chromosome, second: Chromosome) -> Couple:
        return cls(first=first, second=second)

    def __iter__(self) -> Iterator[Chromosome]:
        yield self.first
        yield self.second
