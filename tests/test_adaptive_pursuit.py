import random

import pytest

from openga.exceptions import ConfigurationError
from openga.operators import (
    AgeBasedReplacement,
    ElitistReplacement,
    GenerationalReplacement,
    RandomEliminationReplacement,
)
from openga.policies import AdaptivePursuitPolicy, RewardSignal


def _policy(operators, **kwargs):
    policy = AdaptivePursuitPolicy(**kwargs)
    policy.apply_operators(operators)
    return policy


@pytest.fixture
def operators():
    return [
        GenerationalReplacement(),
        ElitistReplacement(),
        RandomEliminationReplacement(),
        AgeBasedReplacement(),
    ]


def test_starts_with_uniform_probabilities(operators):
    policy = _policy(operators)
    assert policy.probabilities == pytest.approx([0.25] * 4)
    assert policy.reward_estimates == [0.0] * 4


def test_probabilities_stay_normalised_above_floor(operators, seeded_rng):
    policy = _policy(
        operators,
        learning_rate=0.3,
        minimum_probability=0.05,
        warmup_runs=4,
        minimum_usage_before_adaptation=1,
    )

    for epoch in range(500):
        operator = policy.select_operator(seeded_rng, epoch)
        pre = seeded_rng.uniform(0, 1)
        post = seeded_rng.uniform(-1, 2)
        policy.update_reward(
            operator, RewardSignal(pre, post, seeded_rng.uniform(0, 2), seeded_rng.random())
        )

        probabilities = policy.probabilities
        assert sum(probabilities) == pytest.approx(1.0, abs=1e-9)
        assert min(probabilities) >= 0.05 - 1e-12


@pytest.mark.parametrize("estimator", [None, 0.3])
def test_converges_towards_rewarded_operator(estimator):
    loser, winner = GenerationalReplacement(), ElitistReplacement()
    policy = _policy(
        [loser, winner],
        learning_rate=0.2,
        minimum_probability=0.1,
        reward_learning_rate=estimator,
        diversity_weight=0.0,
        minimum_usage_before_adaptation=0,
        warmup_runs=0,
    )
    rng = random.Random(5)

    for epoch in range(500):
        operator = policy.select_operator(rng, epoch)
        reward = 1.0 if operator is winner else 0.0
        policy.update_reward(operator, RewardSignal(pre=0.0, post=reward))

    # 1 - (N - 1) * pMin
    assert policy.probabilities[1] == pytest.approx(0.9, abs=1e-6)
    assert policy.probabilities[0] == pytest.approx(0.1, abs=1e-6)


def test_ties_favour_lowest_index(operators):
    policy = _policy(operators, minimum_usage_before_adaptation=0, warmup_runs=0)

    policy.update_reward(operators[2], RewardSignal(pre=1.0, post=1.0))

    probabilities = policy.probabilities
    assert probabilities[0] > 0.25
    assert probabilities[1] == pytest.approx(probabilities[2])


def test_warmup_is_round_robin_through_last_warmup_epoch(operators, seeded_rng):
    policy = _policy(operators, warmup_runs=6)

    picks = [policy.select_operator(seeded_rng, epoch) for epoch in range(7)]

    assert picks == operators + operators[:3]
    assert policy.usage_counts == [2, 2, 2, 1]


def test_zero_warmup_still_starts_round_robin(operators):
    policy = _policy(operators, warmup_runs=0)
    rng = random.Random(0)

    assert policy.select_operator(rng, 0) is operators[0]

    for epoch in range(1, 40):
        policy.select_operator(rng, epoch)
    assert sum(policy.usage_counts) == 40


def test_no_adaptation_before_minimum_usage(operators, seeded_rng):
    policy = _policy(operators, minimum_usage_before_adaptation=3, warmup_runs=0)

    operator = policy.select_operator(seeded_rng)
    policy.update_reward(operator, RewardSignal(pre=0.0, post=10.0))

    assert policy.probabilities == pytest.approx([0.25] * 4)
    assert max(policy.reward_estimates) > 0


def test_exponential_reward_estimate():
    first, second = GenerationalReplacement(), ElitistReplacement()
    policy = _policy([first, second], reward_learning_rate=0.5, diversity_weight=0.0)

    policy.update_reward(first, RewardSignal(pre=0.0, post=1.0))
    policy.update_reward(first, RewardSignal(pre=0.0, post=1.0))

    assert policy.reward_estimates[0] == pytest.approx(0.75)


def test_windowed_reward_estimate_prefers_recent_rewards():
    first, second = GenerationalReplacement(), ElitistReplacement()
    policy = _policy([first, second], reward_window_size=3, diversity_weight=0.0)

    for post in (0.0, 0.0, 0.0, 1.0):
        policy.update_reward(first, RewardSignal(pre=0.0, post=post))

    # window holds (0, 0, 1): the latest reward carries the largest weight
    assert 1 / 3 < policy.reward_estimates[0] < 1.0


def test_reward_normalisation_and_diversity_bonus():
    signal = RewardSignal(pre=1.0, post=3.0, normalization_range=4.0, diversity=2.0)
    assert signal.reward == pytest.approx(0.5)
    assert RewardSignal(pre=1.0, post=3.0).reward == pytest.approx(2.0)

    first, second = GenerationalReplacement(), ElitistReplacement()
    policy = _policy(
        [first, second], reward_learning_rate=1.0, diversity_weight=0.25
    )
    policy.update_reward(first, signal)
    assert policy.reward_estimates[0] == pytest.approx(1.0)


def test_infeasible_floor_is_a_configuration_error(operators):
    with pytest.raises(ConfigurationError):
        _policy(operators, minimum_probability=0.3)


def test_floor_equal_to_uniform_share_keeps_probabilities_fixed(operators, seeded_rng):
    policy = _policy(
        operators, minimum_probability=0.25, minimum_usage_before_adaptation=0, warmup_runs=0
    )
    for _ in range(20):
        operator = policy.select_operator(seeded_rng)
        policy.update_reward(operator, RewardSignal(pre=0.0, post=1.0))
    assert policy.probabilities == pytest.approx([0.25] * 4)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"learning_rate": 1.5},
        {"minimum_probability": -0.1},
        {"warmup_runs": -1},
        {"reward_window_size": 0},
        {"reward_learning_rate": 0.0},
    ],
)
def test_invalid_parameters_raise(kwargs):
    with pytest.raises(ValueError):
        AdaptivePursuitPolicy(**kwargs)


def test_update_for_unknown_operator_raises(operators):
    policy = _policy(operators)
    with pytest.raises(ValueError):
        policy.update_reward(GenerationalReplacement(), RewardSignal(0.0, 1.0))
