import asyncio
import contextlib

from loguru import logger

from openga.chromosome import Chromosome
from openga.engine import EvolutionEngine
from openga.utils.logger_setup import RunLog, setup_logger


class EvolutionRunner:
    """Drives an EvolutionEngine as a background asyncio task.

    With ``log_dir`` set, the run's engine output is captured in a log file
    named after the engine seed for as long as the task is alive.
    """

    def __init__(
        self,
        engine: EvolutionEngine,
        log_dir: str | None = None,
        log_level: str = "INFO",
    ) -> None:
        self._engine = engine
        self._task: asyncio.Task | None = None
        self._log_dir = log_dir
        self._log_level = log_level
        self._run_log: RunLog | None = None

    def start(self) -> None:
        if self._task and not self._task.done():
            return
        if self._log_dir is not None and self._run_log is None:
            self._run_log = setup_logger(
                self._log_dir, seed=self._engine.config.seed, level=self._log_level
            )
        self._task = asyncio.create_task(self._engine.run(), name="evolution-engine")
        logger.info("[EvolutionRunner] Evolution engine started")

    async def stop(self) -> Chromosome | None:
        """Stop the engine and wait for it; returns the best chromosome seen."""
        self._engine.stop()
        best = None
        if self._task:
            try:
                with contextlib.suppress(asyncio.CancelledError):
                    best = await self._task
            finally:
                self._task = None
                logger.info("[EvolutionRunner] Evolution engine stopped")
                self._close_log()
        return best

    async def wait(self) -> Chromosome | None:
        """Wait for the run to finish on its own."""
        if not self._task:
            return None
        try:
            return await self._task
        finally:
            self._close_log()

    def pause(self) -> None:
        self._engine.pause()

    def resume(self) -> None:
        self._engine.resume()

    def is_running(self) -> bool:
        return self._engine.is_running()

    async def get_status(self) -> dict[str, object]:
        return await self._engine.get_status()

    @property
    def task(self) -> asyncio.Task | None:
        return self._task

    @property
    def run_log(self) -> RunLog | None:
        return self._run_log

    def _close_log(self) -> None:
        if self._run_log is not None:
            self._run_log.close()
