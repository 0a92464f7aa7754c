import random

import pytest

from helpers import ListChromosome
from openga.couple import Couple
from openga.exceptions import InvalidCandidateError
from openga.operators import KPointCrossover, OnePointCrossover, UniformCrossover


def _couple(a, b):
    return Couple.pair(ListChromosome(genes=a), ListChromosome(genes=b))


def test_one_point_exchanges_tails(seeded_rng):
    a, b = [0.0] * 6, [1.0] * 6
    couple = _couple(a, b)

    for _ in range(20):
        first, second = OnePointCrossover().crossover(couple, seeded_rng)
        point = first.genes.index(1.0) if 1.0 in first.genes else len(a)
        assert 1 <= point <= len(a)
        assert first.genes == a[:point] + b[point:]
        assert second.genes == b[:point] + a[point:]


def test_offspring_are_fresh_copies(seeded_rng):
    couple = _couple([1.0, 2.0, 3.0], [4.0, 5.0, 6.0])
    couple.first.increment_age()
    _ = couple.first.fitness

    children = OnePointCrossover().crossover(couple, seeded_rng)

    for child in children:
        assert child.id not in {couple.first.id, couple.second.id}
        assert child.age == 0
        assert not child.has_fitness
    assert couple.first.genes == [1.0, 2.0, 3.0]


def test_one_point_with_unequal_lengths(seeded_rng):
    couple = _couple([0.0, 0.0], [1.0, 1.0, 1.0, 1.0, 1.0])
    for _ in range(10):
        first, second = OnePointCrossover().crossover(couple, seeded_rng)
        assert len(first.genes) + len(second.genes) == 7


@pytest.mark.parametrize(
    "operator", [OnePointCrossover(), KPointCrossover(points=3), UniformCrossover()]
)
def test_empty_genes_are_invalid(operator, seeded_rng):
    with pytest.raises(InvalidCandidateError):
        operator.crossover(_couple([], [1.0, 2.0]), seeded_rng)


def test_k_point_alternates_segments(seeded_rng):
    a, b = [0.0] * 12, [1.0] * 12
    operator = KPointCrossover(points=3)

    for _ in range(20):
        first, second = operator.crossover(_couple(a, b), seeded_rng)
        switches = sum(1 for x, y in zip(first.genes, first.genes[1:]) if x != y)
        assert switches <= 3
        assert first.genes[0] == 0.0
        assert [x + y for x, y in zip(first.genes, second.genes)] == [1.0] * 12


def test_k_point_with_more_points_than_slots():
    first, second = KPointCrossover(points=10).crossover(
        _couple([0.0, 0.0, 0.0], [1.0, 1.0, 1.0]), random.Random(1)
    )
    assert first.genes == [0.0, 1.0, 0.0]
    assert second.genes == [1.0, 0.0, 1.0]


def test_k_point_rejects_non_positive_points():
    with pytest.raises(ValueError):
        KPointCrossover(points=0)


def test_uniform_produces_one_child_shaped_like_longer_parent(seeded_rng):
    a, b = [0.0] * 4, [1.0] * 7
    (child,) = UniformCrossover().crossover(_couple(a, b), seeded_rng)

    assert len(child.genes) == 7
    assert child.genes[4:] == [1.0, 1.0, 1.0]
    assert set(child.genes[:4]) <= {0.0, 1.0}


def test_uniform_mixes_both_parents(seeded_rng):
    a, b = [0.0] * 200, [1.0] * 200
    (child,) = UniformCrossover().crossover(_couple(a, b), seeded_rng)
    assert 60 < sum(child.genes) < 140


def test_crossover_rate_override_is_validated():
    assert OnePointCrossover(crossover_rate=0.4).crossover_rate == 0.4
    assert UniformCrossover().crossover_rate is None
    with pytest.raises(ValueError):
        UniformCrossover(crossover_rate=1.5)
