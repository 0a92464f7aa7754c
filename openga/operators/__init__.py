from openga.operators.base import (
    CrossoverStrategy,
    Operator,
    ParentSelector,
    ReplacementStrategy,
)
from openga.operators.crossover import (
    KPointCrossover,
    OnePointCrossover,
    UniformCrossover,
)
from openga.operators.parent_selectors import (
    BoltzmannParentSelector,
    ElitistParentSelector,
    RandomParentSelector,
    RankParentSelector,
    RouletteWheelParentSelector,
    TournamentParentSelector,
)
from openga.operators.replacement import (
    AgeBasedReplacement,
    BoltzmannReplacement,
    ElitistReplacement,
    GenerationalReplacement,
    RandomEliminationReplacement,
    TournamentReplacement,
)

__all__ = [
    "AgeBasedReplacement",
    "BoltzmannParentSelector",
    "BoltzmannReplacement",
    "CrossoverStrategy",
    "ElitistParentSelector",
    "ElitistReplacement",
    "GenerationalReplacement",
    "KPointCrossover",
    "OnePointCrossover",
    "Operator",
    "ParentSelector",
    "RandomEliminationReplacement",
    "RandomParentSelector",
    "RankParentSelector",
    "ReplacementStrategy",
    "RouletteWheelParentSelector",
    "TournamentParentSelector",
    "TournamentReplacement",
    "UniformCrossover",
]
