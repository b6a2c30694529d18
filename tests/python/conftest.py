"""
Pytest configuration and shared fixtures for scimath tests.
"""

import pytest
import numpy as np
from pathlib import Path
import sys

# Add src to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root / "src"))

import scimath
from scimath import Engine, VectorArena, forced
from scimath import Path as ComputePath
from scimath._kernel import shutdown_thread_pool


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def clean_config():
    """Restore default configuration and a sequential pool after each test."""
    yield
    scimath.config.reset()
    shutdown_thread_pool()


@pytest.fixture
def arena():
    """Fresh vector arena."""
    return VectorArena()


@pytest.fixture
def engine():
    """Engine over a fresh arena."""
    return Engine()


@pytest.fixture
def rng():
    """Seeded random generator."""
    return np.random.default_rng(12345)


@pytest.fixture(params=[ComputePath.ACCELERATED, ComputePath.PORTABLE],
                ids=["accelerated", "portable"])
def path(request):
    """Run the test once with every dispatch forced onto each path."""
    with forced(request.param):
        yield request.param


@pytest.fixture
def spike_signal():
    """Flat signal with a single spike in the middle.

    [10, 10, 10, 100, 10, 10, 10]
    """
    return np.array([10.0, 10.0, 10.0, 100.0, 10.0, 10.0, 10.0])


@pytest.fixture
def peak_signal():
    """Signal with peaks at indices 2 and 5."""
    return np.array([0.0, 1.0, 3.0, 1.0, 0.5, 2.0, 0.0])
