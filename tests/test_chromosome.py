import random

import pydantic
from pydantic import PrivateAttr
import pytest

from helpers import AsyncListChromosome, ListChromosome
from openga.chromosome import Cached
from openga.couple import Couple
from openga.exceptions import InvalidCandidateError


class CountingChromosome(ListChromosome):
    _calls: int = PrivateAttr(default=0)

    def calculate_fitness(self) -> float:
        self._calls += 1
        return super().calculate_fitness()


def test_fitness_is_computed_once_until_genes_change():
    chromosome = CountingChromosome(genes=[1.0, 2.0])

    assert chromosome.fitness == 3.0
    assert chromosome.fitness == 3.0
    assert chromosome._calls == 1

    chromosome.genes = [5.0]
    assert not chromosome.has_fitness
    assert chromosome.fitness == 5.0
    assert chromosome._calls == 2


def test_in_place_edits_need_explicit_invalidation():
    chromosome = ListChromosome(genes=[1.0, 1.0])
    assert chromosome.fitness == 2.0

    chromosome.genes[0] = 10.0
    assert chromosome.fitness == 2.0

    chromosome.invalidate_fitness()
    assert chromosome.fitness == 11.0


def test_mutate_invalidates_through_assignment():
    chromosome = ListChromosome(genes=[1.0, 1.0, 1.0])
    before = chromosome.fitness

    chromosome.mutate(random.Random(3))

    assert not chromosome.has_fitness
    assert chromosome.fitness != before


def test_deep_copy_is_independent():
    original = ListChromosome(genes=[1.0, 2.0], age=4)
    assert original.fitness == 3.0

    clone = original.deep_copy()

    assert clone.id != original.id
    assert clone.age == 0
    assert clone.genes == original.genes
    assert not clone.has_fitness
    clone.genes.append(7.0)
    assert original.genes == [1.0, 2.0]


def test_identity_is_by_id():
    a = ListChromosome(genes=[1.0])
    b = ListChromosome(genes=[1.0])

    assert a != b
    assert a == a.model_copy()
    assert len({a, b, a}) == 2


def test_id_must_be_a_uuid():
    with pytest.raises(pydantic.ValidationError):
        ListChromosome(id="not-a-uuid", genes=[1.0])


def test_age_counter():
    chromosome = ListChromosome(genes=[1.0])
    chromosome.increment_age()
    chromosome.increment_age()
    assert chromosome.age == 2
    chromosome.reset_age()
    assert chromosome.age == 0


@pytest.mark.asyncio
async def test_async_fitness_is_awaited_and_cached():
    chromosome = AsyncListChromosome(genes=[2.0, 3.0])

    with pytest.raises(InvalidCandidateError):
        _ = chromosome.fitness

    assert await chromosome.evaluate() == 5.0
    assert chromosome.fitness == 5.0


@pytest.mark.asyncio
async def test_evaluate_reuses_cached_value():
    chromosome = CountingChromosome(genes=[4.0])
    assert await chromosome.evaluate() == 4.0
    assert await chromosome.evaluate() == 4.0
    assert chromosome._calls == 1


def test_cached_cell():
    cell: Cached[int] = Cached()
    assert cell.is_dirty
    with pytest.raises(LookupError):
        _ = cell.value

    assert cell.get(lambda: 42) == 42
    assert cell.get(lambda: 0) == 42

    cell.invalidate()
    assert cell.get(lambda: 7) == 7


def test_couple_rejects_identical_members():
    chromosome = ListChromosome(genes=[1.0])
    with pytest.raises(InvalidCandidateError):
        Couple.pair(chromosome, chromosome)


def test_couple_iterates_over_both_parents():
    a, b = ListChromosome(genes=[1.0]), ListChromosome(genes=[3.0])
    couple = Couple.pair(a, b)
    assert list(couple) == [a, b]
