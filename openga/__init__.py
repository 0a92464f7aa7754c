from openga.chromosome import Cached, Chromosome
from openga.couple import Couple
from openga.engine import EngineConfig, EngineMetrics, EngineStatus, EvolutionEngine
from openga.exceptions import (
    ConfigurationError,
    EvolutionError,
    InvalidCandidateError,
    MissingInitialPopulationError,
    OpenGAError,
    OperatorSelectionPolicyConflictError,
)
from openga.policies import OperatorRegistration
from openga.roulette import WeightedRouletteWheel
from openga.runner import EvolutionRunner
from openga.termination import (
    CustomTermination,
    MaximumDuration,
    MaximumEpochs,
    RunState,
    TargetFitness,
    TargetStandardDeviation,
    TerminationStrategy,
)
from openga.utils import RunLog, setup_logger

__all__ = [
    "Cached",
    "Chromosome",
    "ConfigurationError",
    "Couple",
    "CustomTermination",
    "EngineConfig",
    "EngineMetrics",
    "EngineStatus",
    "EvolutionEngine",
    "EvolutionError",
    "EvolutionRunner",
    "InvalidCandidateError",
    "MaximumDuration",
    "MaximumEpochs",
    "MissingInitialPopulationError",
    "OpenGAError",
    "OperatorRegistration",
    "OperatorSelectionPolicyConflictError",
    "RunLog",
    "RunState",
    "TargetFitness",
    "TargetStandardDeviation",
    "TerminationStrategy",
    "WeightedRouletteWheel",
    "setup_logger",
]
