"""
chp_sim: stabilizer-tableau simulation of Clifford circuits.

This package provides:
- The Aaronson-Gottesman tableau with Hadamard, Phase, CNOT and Z-basis measurement
- Numba-compiled kernels for the same updates
- A small circuit container and sampling helpers
- Configuration management and logging utilities
"""

__version__ = "0.1.0"
__author__ = "chp-sim developers"

from .backend import set_backend, backend_info
from .errors import ChpSimError, InvalidQubitIndexError
from .rng import FixedBits, coerce_rng
from .circuit import Circuit, decompose
from .tableau import Tableau
from .analysis import (
    commutes,
    gf2_rank,
    is_valid_tableau,
    random_clifford_circuit,
    sample_measurements,
    stabilizers_commute,
    symplectic_product,
)
from .utils import ConfigManager, Logger, setup_logging, get_logger

__all__ = [
    # Core
    'Tableau',
    'Circuit',
    'decompose',

    # Errors
    'ChpSimError',
    'InvalidQubitIndexError',

    # Randomness
    'FixedBits',
    'coerce_rng',

    # Analysis
    'symplectic_product',
    'commutes',
    'stabilizers_commute',
    'is_valid_tableau',
    'gf2_rank',
    'random_clifford_circuit',
    'sample_measurements',

    # Backend
    'set_backend',
    'backend_info',

    # Utils
    'ConfigManager',
    'Logger',
    'setup_logging',
    'get_logger',

    # Package info
    '__version__',
    '__author__'
]
