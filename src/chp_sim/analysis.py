import numpy as np
from typing import Optional, Sequence

from .circuit import GATE_ARITY, Circuit, canonical_name
from .rng import coerce_rng
from .tableau import Tableau


def _host(arr) -> np.ndarray:
    """Bring an xp array (numpy/cupy) to a host numpy array."""
    if not isinstance(arr, np.ndarray) and hasattr(arr, "get"):
        return arr.get()
    return np.asarray(arr)


# ================================================================================
# Commutation & independence =====================================================
# ================================================================================

def symplectic_product(row_a, row_b) -> int:
    """
    Symplectic inner product of two encoded Pauli rows over GF(2).

    Rows are [x1..xn, z1..zn] with an optional trailing sign bit (ignored).
    Returns 0 if the operators commute and 1 if they anticommute.
    """
    a = _host(row_a).astype(np.int64)
    b = _host(row_b).astype(np.int64)
    if a.shape != b.shape:
        raise ValueError(f"Row shapes differ: {a.shape} vs {b.shape}")
    n = a.shape[0] // 2
    return int((a[:n] @ b[n : 2 * n] + a[n : 2 * n] @ b[:n]) % 2)


def commutes(tab: Tableau, i: int, j: int) -> bool:
    """Whether generator rows i and j (1-based) commute."""
    return symplectic_product(tab.get_row(i), tab.get_row(j)) == 0


def _commutation_matrix(tab: Tableau) -> np.ndarray:
    """(2n, 2n) matrix of pairwise symplectic products of the generator rows."""
    X = _host(tab.x).astype(np.int64)
    Z = _host(tab.z).astype(np.int64)
    return (X @ Z.T + Z @ X.T) % 2


def stabilizers_commute(tab: Tableau) -> bool:
    """True if the stabilizer rows n+1..2n pairwise commute."""
    n = tab.n
    return not _commutation_matrix(tab)[n:, n:].any()


def gf2_rank(matrix) -> int:
    """
    Rank of a binary matrix over GF(2) by row reduction.
    """
    A = _host(matrix).astype(np.uint8) % 2
    n_rows, n_cols = A.shape
    pivot_row = 0
    for j in range(n_cols):
        if pivot_row >= n_rows:
            break

        # Find a pivot in the current column
        hits = np.nonzero(A[pivot_row:, j])[0]
        if len(hits) == 0:
            continue
        i = pivot_row + int(hits[0])
        A[[pivot_row, i]] = A[[i, pivot_row]]

        # Eliminate other entries in the column
        others = np.nonzero(A[:, j])[0]
        for k in others:
            if k != pivot_row:
                A[k] ^= A[pivot_row]

        pivot_row += 1

    return pivot_row


def is_valid_tableau(tab: Tableau) -> bool:
    """
    Check the full destabilizer/stabilizer structure:

    - stabilizers pairwise commute,
    - destabilizers pairwise commute,
    - destabilizer i anticommutes with stabilizer i and commutes with every other stabilizer,
    - the 2n generator rows are independent over GF(2).
    """
    n = tab.n
    eye = np.eye(n, dtype=np.int64)
    zero = np.zeros((n, n), dtype=np.int64)
    expected = np.block([[zero, eye], [eye, zero]])
    if not np.array_equal(_commutation_matrix(tab), expected):
        return False
    gens = _host(tab.bits)[: 2 * n, : 2 * n]
    return gf2_rank(gens) == 2 * n


# ================================================================================
# Random circuits & sampling =====================================================
# ================================================================================

def random_clifford_circuit(
    num_qubits: int,
    num_gates: int,
    *,
    gate_set: Sequence[str] = ("H", "S", "CNOT"),
    rng=None,
    seed: Optional[int] = None,
) -> Circuit:
    """
    Build a random Circuit of exactly ``num_gates`` Clifford gates.

    Gates are drawn uniformly from ``gate_set`` (two-qubit gates are dropped
    when ``num_qubits == 1``); operands are distinct uniformly random qubits.

    Args:
        num_qubits: Number of qubits (wires).
        num_gates: Number of gates to insert.
        gate_set: Gate names, any of the names ``Circuit.append`` accepts except "M".
        rng: Random source exposing ``integers`` and ``choice`` (numpy Generator).
        seed: RNG seed for reproducibility when ``rng`` is not given.

    Returns:
        Circuit: the random circuit, named "random_clifford".
    """
    if num_gates < 0:
        raise ValueError(f"num_gates must be >= 0, got {num_gates}")
    rng = coerce_rng(rng, seed)
    if not callable(getattr(rng, "choice", None)):
        raise TypeError(
            f"rng must be a numpy Generator (integers and choice), got {type(rng).__name__}"
        )

    names =[canonical_name(g) for g in gate_set]
    if "M" in names:
        raise ValueError("gate_set may not contain measurements.")
    names = [g for g in names if GATE_ARITY[g] <= num_qubits]
    if not names:
        raise ValueError(f"No gate in {list(gate_set)} fits on {num_qubits} qubit(s).")

    qc = Circuit(num_qubits, name="random_clifford")
    for _ in range(num_gates):
        name = names[int(rng.integers(0, len(names)))]
        qubits = rng.choice(num_qubits, size=GATE_ARITY[name], replace=False) + 1
        qc.append(name, tuple(int(q) for q in qubits))
    return qc


def sample_measurements(
    circuit: Circuit,
    shots: int,
    *,
    rng=None,
    seed: Optional[int] = None,
    engine: str = "python",
) -> np.ndarray:
    """
    Run ``circuit`` from |0...0> once per shot and collect its measurement outcomes.

    Uses a single random stream (seeded if provided) across all shots.

    Returns:
        np.ndarray: bool array of shape (shots, circuit.num_measurements).
    """
    if isinstance(shots, bool) or not isinstance(shots, int) or shots < 1:
        raise ValueError("Number of shots must be a positive integer.")
    rng = coerce_rng(rng, seed)

    samples = np.zeros((shots, circuit.num_measurements), dtype=bool)
    for shot in range(shots):
        tab = Tableau(circuit.n, rng=rng, engine=engine)
        samples[shot] = tab.apply_circuit(circuit)
    return samples
