"""Pytest configuration and fixtures for OpenGA tests."""

import contextlib
import random
import sys

from loguru import logger
import pytest

from helpers import make_population


@pytest.fixture(autouse=True, scope="session")
def quiet_logs():
    logger.remove()
    handler_id = logger.add(sys.stderr, level="WARNING")
    yield
    # tests that reconfigure sinks may already have removed it
    with contextlib.suppress(ValueError):
        logger.remove(handler_id)


@pytest.fixture
def seeded_rng():
    """Provide a deterministic RNG for tests."""
    return random.Random(42)


@pytest.fixture
def population():
    return make_population(10)
