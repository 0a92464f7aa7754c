from collections import Counter
import random

import pytest

from openga.roulette import WeightedRouletteWheel


def test_spin_heavily_favours_dominant_weight(seeded_rng):
    weights = {"a": 1, "b": 1, "c": 1, "d": 1, "e": 100}
    wheel = WeightedRouletteWheel(list(weights), weights.__getitem__, seeded_rng)

    counts = Counter(wheel.spin() for _ in range(10_000))

    assert counts["e"] / 10_000 >= 0.9


def test_spin_frequencies_converge_to_weights(seeded_rng):
    weights = {"a": 1.0, "b": 2.0, "c": 3.0, "d": 4.0}
    wheel = WeightedRouletteWheel(list(weights), weights.__getitem__, seeded_rng)
    trials = 40_000

    counts = Counter(wheel.spin() for _ in range(trials))

    for candidate, weight in weights.items():
        assert counts[candidate] / trials == pytest.approx(weight / 10.0, abs=0.015)


def test_spin_does_not_consume_candidates(seeded_rng):
    wheel = WeightedRouletteWheel.uniform(["a", "b", "c"], seeded_rng)
    for _ in range(10):
        wheel.spin()
    assert len(wheel) == 3


@pytest.mark.parametrize("size", [2, 3, 10, 57])
def test_spin_and_readjust_never_repeats(size, seeded_rng):
    candidates = list(range(size))
    wheel = WeightedRouletteWheel(candidates, lambda c: c + 1, seeded_rng)

    drawn = [wheel.spin_and_readjust() for _ in range(size)]

    assert sorted(drawn) == candidates
    assert len(wheel) == 0
    with pytest.raises(ValueError):
        wheel.spin()


def test_zero_weight_candidate_is_never_drawn(seeded_rng):
    weights = {"zero": 0.0, "one": 1.0, "two": 2.0}
    wheel = WeightedRouletteWheel(list(weights), weights.__getitem__, seeded_rng)

    assert "zero" not in {wheel.spin() for _ in range(2_000)}


def test_all_zero_weights_fall_back_to_uniform(seeded_rng):
    wheel = WeightedRouletteWheel(["a", "b", "c"], lambda _: 0.0, seeded_rng)

    counts = Counter(wheel.spin() for _ in range(3_000))

    assert set(counts) == {"a", "b", "c"}
    assert wheel.probabilities == pytest.approx([1 / 3] * 3)


def test_readjust_falls_back_to_uniform_when_remaining_weights_are_zero(seeded_rng):
    weights = {"a": 5.0, "b": 0.0, "c": 0.0}
    wheel = WeightedRouletteWheel(list(weights), weights.__getitem__, seeded_rng)

    assert wheel.spin_and_readjust() == "a"
    assert {wheel.spin_and_readjust(), wheel.spin_and_readjust()} == {"b", "c"}


def test_single_candidate_is_always_returned(seeded_rng):
    wheel = WeightedRouletteWheel(["only"], lambda _: 3.0, seeded_rng)
    assert wheel.spin() == "only"
    assert wheel.spin_and_readjust() == "only"


def test_invalid_inputs_raise(seeded_rng):
    with pytest.raises(ValueError):
        WeightedRouletteWheel([], lambda _: 1.0, seeded_rng)
    with pytest.raises(ValueError):
        WeightedRouletteWheel(["a", "b"], lambda c: -1.0 if c == "a" else 1.0, seeded_rng)


def test_draws_are_reproducible_for_same_seed():
    candidates = list("abcdefgh")

    def draws(seed):
        wheel = WeightedRouletteWheel(candidates, lambda c: ord(c) - 96, random.Random(seed))
        return [wheel.spin() for _ in range(50)] + [
            wheel.spin_and_readjust() for _ in range(len(candidates))
        ]

    assert draws(7) == draws(7)
    assert draws(7) != draws(8)
