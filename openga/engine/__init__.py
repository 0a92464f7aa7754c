from __future__ import annotations

from openga.engine.config import EngineConfig
from openga.engine.core import EvolutionEngine
from openga.engine.metrics import EngineMetrics
from openga.engine.state import EngineStatus

__all__ = [
    "EngineConfig",
    "EngineMetrics",
    "EngineStatus",
    "EvolutionEngine",
]
