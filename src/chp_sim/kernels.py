from __future__ import annotations

import numpy as np
from numba import njit

from .circuit import decompose


GATE_H = 0
GATE_S = 1
GATE_CNOT = 2

NAME_TO_ID = {
    "H": GATE_H,
    "S": GATE_S,
    "CNOT": GATE_CNOT,
}

ID_TO_NAME = {v: k for k, v in NAME_TO_ID.items()}


def pack_ops(ops) -> np.ndarray:
    """
    Pack (name, qubits) operations into an int64 array G of shape (L, 3):
    G[k] = [gate_id, q1, q2] with 0-based qubit indices (q2 = -1 for 1-qubit gates).
    Derived Clifford gates are expanded into H/S/CNOT first.
    Measurements cannot be packed.
    """
    packed_ops = []
    for name, qubits in ops:
        for prim, prim_qubits in decompose(name, qubits):
            q1 = int(prim_qubits[0]) - 1
            q2 = int(prim_qubits[1]) - 1 if len(prim_qubits) > 1 else -1
            packed_ops.append([NAME_TO_ID[prim], q1, q2])

    if not packed_ops:
        return np.empty((0, 3), dtype=np.int64)

    return np.array(packed_ops, dtype=np.int64)


@njit(cache=True)
def nb_rowsum(bits, h, i, n):
    """
    Row h <- row i * row h, in place. Rows and columns are 0-based.
    """
    g = 0
    for j in range(n):
        x1 = int(bits[i, j])
        z1 = int(bits[i, j + n])
        x2 = int(bits[h, j])
        z2 = int(bits[h, j + n])
        if x1 == 1 and z1 == 1:
            g += z2 - x2
        elif x1 == 1:
            g += z2 * (2 * x2 - 1)
        elif z1 == 1:
            g += x2 * (1 - 2 * z2)

    total = 2 * int(bits[h, 2 * n]) + 2 * int(bits[i, 2 * n]) + g
    if total % 4 == 0:
        bits[h, 2 * n] = 0
    else:
        bits[h, 2 * n] = 1

    for j in range(2 * n):
        bits[h, j] ^= bits[i, j]


@njit(cache=True)
def nb_hadamard(bits, a, n):
    for i in range(2 * n):
        x = bits[i, a]
        z = bits[i, a + n]
        bits[i, 2 * n] ^= x & z
        bits[i, a] = z
        bits[i, a + n] = x


@njit(cache=True)
def nb_phase(bits, a, n):
    for i in range(2 * n):
        x = bits[i, a]
        bits[i, 2 * n] ^= x & bits[i, a + n]
        bits[i, a + n] ^= x


@njit(cache=True)
def nb_cnot(bits, a, b, n):
    for i in range(2 * n):
        temp = bits[i, b] ^ bits[i, a + n] ^ np.uint8(1)
        bits[i, 2 * n] ^= bits[i, a] & bits[i, b + n] & temp
        bits[i, b] ^= bits[i, a]
        bits[i, a + n] ^= bits[i, b + n]


@njit(cache=True)
def nb_find_pivot(bits, a, n):
    """First stabilizer row with an X component on qubit a, or -1."""
    for p in range(n, 2 * n):
        if bits[p, a] != 0:
            return p
    return -1


@njit(cache=True)
def nb_collapse_random(bits, a, n, p, coin):
    for i in range(2 * n):
        if i != p and bits[i, a] != 0:
            nb_rowsum(bits, i, p, n)
    for j in range(2 * n + 1):
        bits[p - n, j] = bits[p, j]
        bits[p, j] = 0
    bits[p, 2 * n] = coin
    bits[p, a + n] = 1


@njit(cache=True)
def nb_measure_deterministic(bits, a, n):
    scratch = 2 * n
    for j in range(2 * n + 1):
        bits[scratch, j] = 0
    for i in range(n):
        if bits[i, a] != 0:
            nb_rowsum(bits, scratch, i + n, n)
    return bits[scratch, 2 * n]


@njit(cache=True)
def nb_apply_circuit(bits, G, n):
    """
    Fast path: apply all packed gates in G.
    """
    L = G.shape[0]
    for k in range(L):
        gid = G[k, 0]
        if gid == GATE_H:
            nb_hadamard(bits, G[k, 1], n)
        elif gid == GATE_S:
            nb_phase(bits, G[k, 1], n)
        elif gid == GATE_CNOT:
            nb_cnot(bits, G[k, 1], G[k, 2], n)
