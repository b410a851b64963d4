"""Shared fixtures for the chp_sim test suite."""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from chp_sim import Circuit, Tableau  # noqa: E402


@pytest.fixture
def bell_circuit():
    qc = Circuit(2, name="bell")
    qc.h(1).cx(1, 2).measure(1).measure(2)
    return qc


@pytest.fixture(params=["python", "numba"])
def engine(request):
    return request.param


def scrambled_tableau(n: int, seed: int, num_gates: int = 40, engine: str = "python") -> Tableau:
    """Tableau driven to a pseudo-random stabilizer state by H/S/CNOT gates."""
    rng = np.random.default_rng(seed)
    tab = Tableau(n, engine=engine)
    for _ in range(num_gates):
        kind = int(rng.integers(0, 3))
        if kind == 0 or n == 1 and kind == 2:
            tab.hadamard(int(rng.integers(1, n + 1)))
        elif kind == 1:
            tab.phase(int(rng.integers(1, n + 1)))
        else:
            a, b = rng.choice(n, size=2, replace=False) + 1
            tab.cnot(int(a), int(b))
    return tab
