from __future__ import annotations

import copy
from typing import Iterator, Tuple

import numpy as np

from .errors import InvalidQubitIndexError


# Number of qubit operands per operation name. "M" is a Z-basis measurement.
GATE_ARITY: dict[str, int] = {
    "H": 1,
    "S": 1,
    "S_DAG": 1,
    "X": 1,
    "Y": 1,
    "Z": 1,
    "CNOT": 2,
    "CZ": 2,
    "SWAP": 2,
    "M": 1,
}

_ALIASES = {
    "CX": "CNOT",
    "SDG": "S_DAG",
    "MEASURE": "M",
}

PRIMITIVE_GATES = ("H", "S", "CNOT")


def canonical_name(name: str) -> str:
    """Normalize a gate name (case-insensitive, aliases resolved)."""
    if not isinstance(name, str):
        raise TypeError(f"Gate name must be str, got {type(name).__name__}")
    upper = name.upper()
    upper = _ALIASES.get(upper, upper)
    if upper not in GATE_ARITY:
        raise ValueError(f"Unknown gate {name!r}; supported: {sorted(GATE_ARITY)}")
    return upper


def decompose(name: str, qubits: Tuple[int, ...]) -> list[tuple[str, tuple[int, ...]]]:
    """
    Express a Clifford gate as a sequence of H, S and CNOT applications.

    Conjugation rules only fix the Pauli frame up to a global phase, so the
    decompositions below are exact for the tableau:

        Z      = S S
        S_DAG  = S S S
        X      = H Z H
        Y      = Z then X
        CZ     = H_b CNOT(a, b) H_b
        SWAP   = CNOT(a, b) CNOT(b, a) CNOT(a, b)
    """
    name = canonical_name(name)
    qubits = tuple(qubits)
    if name in PRIMITIVE_GATES:
        return [(name, qubits)]
    if name == "M":
        raise ValueError("Measurements have no unitary decomposition.")

    a = qubits[0]
    if name == "Z":
        return [("S", (a,)), ("S", (a,))]
    if name == "S_DAG":
        return [("S", (a,))] * 3
    if name == "X":
        return [("H", (a,)), ("S", (a,)), ("S", (a,)), ("H", (a,))]
    if name == "Y":
        return decompose("Z", (a,)) + decompose("X", (a,))

    b = qubits[1]
    if name == "CZ":
        return [("H", (b,)), ("CNOT", (a, b)), ("H", (b,))]
    # SWAP
    return [("CNOT", (a, b)), ("CNOT", (b, a)), ("CNOT", (a, b))]


def check_qubits(qubits: Tuple[int, ...], num_qubits: int) -> None:
    """Raise unless every entry is an integer in [1, num_qubits]."""
    for q in qubits:
        if isinstance(q, bool) or not hasattr(q, "__index__"):
            raise TypeError(f"Qubit index must be int, got {type(q).__name__}")
        if not 1 <= int(q) <= num_qubits:
            raise InvalidQubitIndexError(int(q), num_qubits)


# -----------------------------------------------------------------------------
# Circuit container -----------------------------------------------------------
class Circuit:
    """
    Ordered list of Clifford gates and Z-basis measurements on 1-based qubits.

    Each operation is stored as ``(name, qubits)`` with a canonical gate name.
    """

    def __init__(self, num_qubits: int, name: str | None = None):
        if isinstance(num_qubits, bool) or not isinstance(num_qubits, (int, np.integer)):
            raise TypeError(f"num_qubits must be int, got {type(num_qubits).__name__}")
        num_qubits = int(num_qubits)
        if num_qubits < 1:
            raise ValueError(f"num_qubits must be >= 1, got {num_qubits}")
        self.n = num_qubits
        self.name = name
        self._ops: list[tuple[str, tuple[int, ...]]] = []

    def __repr__(self):
        return (
            f"Circuit(num_qubits={self.n}, name={self.name!r}, "
            f"size={self.size}, depth={self.depth})"
        )

    def __getitem__(self, idx: int) -> Tuple[str, Tuple[int, ...]]:
        return self._ops[idx]

    def __iter__(self) -> Iterator[Tuple[str, Tuple[int, ...]]]:
        yield from self._ops

    def __len__(self):
        return len(self._ops)

    def __copy__(self) -> Circuit:
        new = Circuit(self.n, name=self.name)
        new._ops = list(self._ops)
        return new

    def copy(self) -> Circuit:
        """Return a shallow copy of this circuit."""
        return copy.copy(self)

    @property
    def ops(self) -> list[tuple[str, tuple[int, ...]]]:
        return self._ops

    @property
    def size(self) -> int:
        """Total number of gates in the circuit, excluding measurements."""
        return sum(1 for name, _ in self._ops if name != "M")

    @property
    def num_measurements(self) -> int:
        return sum(1 for name, _ in self._ops if name == "M")

    @property
    def depth(self) -> int:
        """
        Number of parallel layers in the ASAP schedule of the unitary gates.
        Measurements are not counted.
        """
        next_free = {q: 0 for q in range(1, self.n + 1)}
        depth = 0
        for name, qubits in self._ops:
            if name == "M":
                continue
            col = max(next_free[q] for q in qubits)
            for q in qubits:
                next_free[q] = col + 1
            depth = max(depth, col + 1)
        return depth

    # -- Building ---------------------------------------------------------------
    def append(self, name: str, qubits) -> Circuit:
        """Validate and append one operation. Returns self for chaining."""
        name = canonical_name(name)
        if isinstance(qubits, int):
            qubits = (qubits,)
        qubits = tuple(qubits)
        if len(qubits) != GATE_ARITY[name]:
            raise ValueError(
                f"Gate {name} acts on {GATE_ARITY[name]} qubit(s), got {len(qubits)}: {qubits}"
            )
        check_qubits(qubits, self.n)
        if len(set(qubits)) != len(qubits):
            raise ValueError(f"Gate {name} needs distinct qubits, got {qubits}")
        self._ops.append((name, tuple(int(q) for q in qubits)))
        return self

    def h(self, q: int) -> Circuit:
        return self.append("H", (q,))

    def s(self, q: int) -> Circuit:
        return self.append("S", (q,))

    def sdg(self, q: int) -> Circuit:
        return self.append("S_DAG", (q,))

    def x(self, q: int) -> Circuit:
        return self.append("X", (q,))

    def y(self, q: int) -> Circuit:
        return self.append("Y", (q,))

    def z(self, q: int) -> Circuit:
        return self.append("Z", (q,))

    def cx(self, control: int, target: int) -> Circuit:
        return self.append("CNOT", (control, target))

    cnot = cx

    def cz(self, a: int, b: int) -> Circuit:
        return self.append("CZ", (a, b))

    def swap(self, a: int, b: int) -> Circuit:
        return self.append("SWAP", (a, b))

    def measure(self, q: int) -> Circuit:
        return self.append("M", (q,))

    def measure_all(self) -> Circuit:
        for q in range(1, self.n + 1):
            self.measure(q)
        return self

    def segments(self):
        """
        Split the circuit into alternating runs.

        Yields ``("gates", [ops...])`` for maximal runs of unitary gates and
        ``("M", qubit)`` for each measurement, preserving order.
        """
        run: list[tuple[str, tuple[int, ...]]] = []
        for name, qubits in self._ops:
            if name == "M":
                if run:
                    yield "gates", run
                    run = []
                yield "M", qubits[0]
            else:
                run.append((name, qubits))
        if run:
            yield "gates", run
