"""
import backend
backend.set_backend('numpy'/'cupy')
backend.backend_info()
"""

import importlib
import logging
from typing import Literal

LOGGER = logging.getLogger(__name__)

# --- Global Dtype Definitions ---
BIT_DTYPE = None
# ---------------------------------

# by default we start with NumPy
xp = importlib.import_module("numpy")

try:
    import cupy as _cp
except ImportError:
    _cp = None


def set_backend(name: Literal["numpy", "cupy"]) -> None:
    """
    Switch all downstream tableau storage to either NumPy or CuPy.

    Tableaux created before the switch keep the array type they were built with.
    """
    global xp, BIT_DTYPE

    if name == "numpy":
        xp = importlib.import_module("numpy")
    elif name == "cupy":
        if _cp is None:
            raise ImportError("CuPy is not installed. Cannot set backend to 'cupy'.")
        xp = _cp
    else:
        raise ValueError("backend must be 'numpy' or 'cupy'")

    BIT_DTYPE = xp.uint8
    LOGGER.debug("Array backend set to %s", xp.__name__)


def on_numpy() -> bool:
    return xp.__name__ == "numpy"


def backend_info() -> dict:
    """Return which array module is active and, for CuPy, which device."""
    info = {"backend": xp.__name__, "bit_dtype": xp.dtype(BIT_DTYPE).name}
    if _cp is not None and xp is _cp:
        info["device"] = str(_cp.cuda.Device())
    return info


# Initialize backend with default settings on import
set_backend("numpy")
