from openga.policies.adaptive_pursuit import AdaptivePursuitPolicy
from openga.policies.base import OperatorSelectionPolicy
from openga.policies.registration import OperatorRegistration
from openga.policies.rewards import (
    EpochOutcome,
    OperatorFamily,
    RewardFunction,
    RewardSignal,
    best_fitness_reward,
    default_reward,
)
from openga.policies.simple import (
    CustomWeightPolicy,
    FirstChoicePolicy,
    RandomChoicePolicy,
    RoundRobinPolicy,
)

__all__ = [
    "AdaptivePursuitPolicy",
    "CustomWeightPolicy",
    "EpochOutcome",
    "FirstChoicePolicy",
    "OperatorFamily",
    "OperatorRegistration",
    "OperatorSelectionPolicy",
    "RandomChoicePolicy",
    "RewardFunction",
    "RewardSignal",
    "RoundRobinPolicy",
    "best_fitness_reward",
    "default_reward",
]
