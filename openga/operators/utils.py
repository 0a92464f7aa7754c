import math
import random
import sys
from typing import Sequence, TypeVar

T = TypeVar("T")


def shuffled(items: Sequence[T], rng: random.Random) -> list[T]:
    """Return a Fisher-Yates shuffled copy of ``items``."""
    result = list(items)
    rng.shuffle(result)
    return result


def standard_deviation(values: Sequence[float]) -> float:
    """Population standard deviation; 0.0 for fewer than two values."""
    if len(values) <= 1:
        return 0.0
    mean = sum(values) / len(values)
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return math.sqrt(variance)


def mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def fitness_range(values: Sequence[float]) -> float:
    return max(values) - min(values) if values else 0.0


def boltzmann_temperature(
    initial_temperature: float,
    decay_rate: float,
    epoch: int,
    use_exponential_decay: bool,
) -> float:
    """Temperature schedule shared by the Boltzmann operators.

    Never returns zero so that it can be used as a divisor.
    """
    if use_exponential_decay:
        temperature = initial_temperature * math.exp(-decay_rate * epoch)
    else:
        temperature = max(0.0, initial_temperature - decay_rate * epoch)
    return temperature if temperature > 0 else sys.float_info.epsilon
