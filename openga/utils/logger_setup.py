"""
Per-run log capture for OpenGA.

The library only emits records and never touches the caller's sinks on
import. :func:`setup_logger` adds a file sink (and optionally a console
sink) that captures one run's engine output; pass ``log_dir`` to
:class:`~openga.runner.EvolutionRunner` to have it managed for you.
"""

from __future__ import annotations

import contextlib
from dataclasses import dataclass
from datetime import datetime, timezone
import os
import sys

from loguru import logger

_FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{name}:{function}:{line} | {message}"
)
_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan> | "
    "<level>{message}</level>"
)


@dataclass(frozen=True)
class RunLog:
    """Sinks installed for a single run; ``close`` removes exactly those."""

    run_name: str
    path: str
    handler_ids: tuple[int, ...]

    def close(self) -> None:
        for handler_id in self.handler_ids:
            # already removed by the caller
            with contextlib.suppress(ValueError):
                logger.remove(handler_id)


def run_name_for(seed: int | None, started_at: datetime | None = None) -> str:
    """``openga_seed<seed>_<UTC timestamp>``, or ``openga_unseeded_...``."""
    stamp = (started_at or datetime.now(timezone.utc)).strftime("%Y%m%d_%H%M%S")
    seed_part = f"seed{seed}" if seed is not None else "unseeded"
    return f"openga_{seed_part}_{stamp}"


def _is_openga_record(record) -> bool:
    return record["name"].split(".", 1)[0] == "openga"


def setup_logger(
    log_dir: str = "logs",
    seed: int | None = None,
    level: str = "INFO",
    console: bool = False,
    enable_colors: bool = True,
    rotation: str = "50 MB",
    retention: str = "30 days",
) -> RunLog:
    """
    Capture engine output for one run.

    Args:
        log_dir: Directory for the run's log file
        seed: Seed of the run, used to name the file so reruns are easy to match
        level: Minimum level captured (DEBUG shows every epoch)
        console: Also echo engine records to stderr
        enable_colors: Colour the console sink when stderr is a TTY
        rotation: Log rotation policy (e.g., "50 MB", "1 day")
        retention: Log retention policy (e.g., "30 days")

    Returns:
        RunLog describing the installed sinks; call ``close()`` when the run ends
    """
    os.makedirs(log_dir, exist_ok=True)
    run_name = run_name_for(seed)
    path = os.path.join(log_dir, f"{run_name}.log")

    handler_ids = [
        logger.add(
            path,
            level=level,
            format=_FILE_FORMAT,
            filter=_is_openga_record,
            rotation=rotation,
            retention=retention,
            compression="zip",
            encoding="utf-8",
            backtrace=True,
            diagnose=False,
        )
    ]
    if console:
        colorize = enable_colors and sys.stderr.isatty()
        handler_ids.append(
            logger.add(
                sys.stderr,
                level=level,
                format=_CONSOLE_FORMAT,
                filter=_is_openga_record,
                colorize=colorize,
            )
        )

    logger.info("[Logger] Capturing run {} in {}", run_name, path)
    return RunLog(run_name=run_name, path=path, handler_ids=tuple(handler_ids))
