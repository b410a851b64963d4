from __future__ import annotations

import logging
import typing
from typing import Optional, Tuple

import numpy as np

from . import backend
from .circuit import GATE_ARITY, Circuit, canonical_name, check_qubits, decompose
from .kernels import (
    nb_apply_circuit,
    nb_cnot,
    nb_collapse_random,
    nb_find_pivot,
    nb_hadamard,
    nb_measure_deterministic,
    nb_phase,
    nb_rowsum,
    pack_ops,
)
from .rng import coerce_rng, draw_bit

LOGGER = logging.getLogger(__name__)

ENGINES = ("python", "numba")

_PAULI_CHARS = {(0, 0): "I", (1, 0): "X", (0, 1): "Z", (1, 1): "Y"}


def _scalar_to_int(x):
    """Convert a scalar from xp (numpy/cupy) to Python int safely."""
    try:
        return int(x.item())
    except AttributeError:
        return int(x)


class Tableau:
    """
    Stabilizer tableau for n qubits in the Aaronson-Gottesman (CHP) layout.

    The whole state is one (2n+1) x (2n+1) bit matrix:

        rows     1 .. n      destabilizers
        rows   n+1 .. 2n     stabilizers
        row       2n+1       scratch row (deterministic measurement only)
        columns  1 .. n      x bits
        columns n+1 .. 2n    z bits
        column    2n+1       sign bit r   (0 -> "+", 1 -> "-")

    Every qubit and row index accepted by a public method is 1-based.
    Each public operation validates its arguments before touching the matrix.
    """

    def __init__(
        self,
        n: int,
        *,
        rng=None,
        seed: Optional[int] = None,
        engine: str = "python",
    ):
        if isinstance(n, bool) or not isinstance(n, (int, np.integer)):
            raise TypeError(f"Number of qubits must be int, got {type(n).__name__}")
        n = int(n)
        if n < 1:
            raise ValueError(f"Number of qubits must be >= 1, got {n}")
        if engine not in ENGINES:
            raise ValueError(f"engine must be one of {ENGINES}, got {engine!r}")

        self._n = n
        self._engine = engine
        self._rng = coerce_rng(rng, seed)
        self._xp = backend.xp

        if engine == "numba" and not backend.on_numpy():
            raise RuntimeError("Numba engine requested but unavailable (needs NumPy backend).")

        size = 2 * n + 1
        self._bits = self._xp.zeros((size, size), dtype=backend.BIT_DTYPE)
        # |0...0>: destabilizer i = X_i, stabilizer i = Z_i
        diag = self._xp.arange(2 * n)
        self._bits[diag, diag] = 1

    # --- Properties for read-only access ---
    @property
    def n(self) -> int:
        return self._n

    num_qubits = n

    @property
    def engine(self) -> str:
        return self._engine

    @property
    def rng(self):
        return self._rng

    @property
    def bits(self):
        """The live (2n+1) x (2n+1) bit matrix. Writing to it skips all validation."""
        return self._bits

    @property
    def x(self):
        """x bits of the 2n generator rows, shape (2n, n)."""
        return self._bits[: 2 * self._n, : self._n]

    @property
    def z(self):
        """z bits of the 2n generator rows, shape (2n, n)."""
        return self._bits[: 2 * self._n, self._n : 2 * self._n]

    @property
    def r(self):
        """Sign bits of the 2n generator rows, shape (2n,)."""
        return self._bits[: 2 * self._n, 2 * self._n]

    # --- Column / row addressing (0-based, internal) ---
    def _x_col(self, q0: int) -> int:
        return q0

    def _z_col(self, q0: int) -> int:
        return self._n + q0

    @property
    def _sign_col(self) -> int:
        return 2 * self._n

    @property
    def _scratch_row(self) -> int:
        return 2 * self._n

    @property
    def _use_numba(self) -> bool:
        return self._engine == "numba"

    # --- Construction helpers ---
    @classmethod
    def from_bits(cls, bits, *, rng=None, seed: Optional[int] = None, engine: str = "python") -> Tableau:
        """
        Wrap an existing (2n+1) x (2n+1) bit matrix. Entries are reduced mod 2.
        No stabilizer-group invariants are checked; see ``chp_sim.analysis``.
        """
        arr = np.asarray(bits)
        if arr.ndim != 2 or arr.shape[0] != arr.shape[1]:
            raise ValueError(f"Tableau bits must be a square matrix, got shape {arr.shape}")
        size = arr.shape[0]
        if size < 3 or size % 2 == 0:
            raise ValueError(f"Tableau bits must have odd size 2n+1 >= 3, got {size}")
        tab = cls((size - 1) // 2, rng=rng, seed=seed, engine=engine)
        tab._bits[...] = tab._xp.asarray(arr.astype(np.int64) % 2, dtype=backend.BIT_DTYPE)
        return tab

    @classmethod
    def from_config(cls, n: int, config: typing.Mapping, *, rng=None) -> Tableau:
        """
        Build a tableau from a simulator config mapping.

        ``engine`` and ``seed`` configure the tableau itself. ``backend`` switches the
        process-wide array module (``ImportError`` if CuPy is requested but missing)
        and ``log_level`` sets the level of the ``chp_sim`` logger.
        """
        from .utils.config import ConfigManager

        config = dict(config)
        if not ConfigManager().validate_config(config, "simulator"):
            raise ValueError(f"Invalid simulator configuration: {config}")
        if "backend" in config:
            backend.set_backend(config["backend"])
        if "log_level" in config:
            logging.getLogger("chp_sim").setLevel(config["log_level"])
        return cls(n, rng=rng, seed=config.get("seed"), engine=config["engine"])

    def copy(self) -> Tableau:
        """Return an independent copy of the bits. The random source is shared."""
        t = type(self)(self._n, rng=self._rng, engine=self._engine)
        t._bits = self._bits.copy()
        return t

    # --- Validation ---
    def _check_qubit(self, *qubits) -> None:
        check_qubits(qubits, self._n)

    def _check_row(self, idx: int, *, allow_scratch: bool) -> int:
        if isinstance(idx, bool) or not isinstance(idx, (int, np.integer)):
            raise TypeError(f"Row index must be int, got {type(idx).__name__}")
        n_rows = 2 * self._n + (1 if allow_scratch else 0)
        if not 1 <= idx <= n_rows:
            raise IndexError(f"Row index {idx} out of range 1..{n_rows}")
        return int(idx) - 1

    def get_row(self, idx: int) -> np.ndarray:
        """
        Return a copy of row ``idx`` (1-based, scratch row included) as
        [x1, ..., xn, z1, ..., zn, r].
        """
        return self._bits[self._check_row(idx, allow_scratch=True)].copy()

    # ===============================================================================================================
    # Row combination
    # ===============================================================================================================
    def rowsum(self, h: int, i: int) -> None:
        """
        Replace row ``h`` with the Pauli product of row ``i`` and row ``h``.

        Row ``i`` is left untouched. ``h`` may be any row including the scratch
        row (2n+1); ``i`` must be a generator row (1..2n).

        Phase rule
        ----------
        For each qubit j, with (x1, z1) from row i and (x2, z2) from row h:

            (0,0)  ->  0
            (1,1)  ->  z2 - x2
            (1,0)  ->  z2 (2 x2 - 1)
            (0,1)  ->  x2 (1 - 2 z2)

        r_h  <-  0 if (2 r_h + 2 r_i + sum_j g_j) mod 4 == 0 else 1,
        then x_h ^= x_i and z_h ^= z_i.
        """
        h0 = self._check_row(h, allow_scratch=True)
        i0 = self._check_row(i, allow_scratch=False)
        self._rowsum(h0, i0)

    def _rowsum(self, h: int, i: int) -> None:
        if self._use_numba:
            nb_rowsum(self._bits, h, i, self._n)
            return

        n = self._n
        bits = self._bits
        sc = self._sign_col
        xp = self._xp

        x1 = bits[i, :n].astype(xp.int64)
        z1 = bits[i, n : 2 * n].astype(xp.int64)
        x2 = bits[h, :n].astype(xp.int64)
        z2 = bits[h, n : 2 * n].astype(xp.int64)

        # the three cases are mutually exclusive; (0,0) contributes nothing
        g = (
            x1 * z1 * (z2 - x2)
            + x1 * (1 - z1) * z2 * (2 * x2 - 1)
            + (1 - x1) * z1 * x2 * (1 - 2 * z2)
        )
        total = 2 * _scalar_to_int(bits[h, sc]) + 2 * _scalar_to_int(bits[i, sc]) + _scalar_to_int(g.sum())
        bits[h, sc] = 0 if total % 4 == 0 else 1
        bits[h, : 2 * n] ^= bits[i, : 2 * n]

    # -- Update Rules --
    def hadamard(self, a: int) -> None:
        """
        Hadamard on qubit *a*.

        Update rules (every generator row)
        ------------
            r    <-  r ^ (x_a & z_a)
            x_a  <-> z_a
        """
        self._check_qubit(a)
        self._hadamard(int(a) - 1)

    def _hadamard(self, q0: int) -> None:
        if self._use_numba:
            nb_hadamard(self._bits, q0, self._n)
            return
        gen = self._bits[: 2 * self._n]
        xc, zc = self._x_col(q0), self._z_col(q0)
        x_old = gen[:, xc].copy()
        z_old = gen[:, zc].copy()
        gen[:, self._sign_col] ^= x_old & z_old
        gen[:, xc] = z_old
        gen[:, zc] = x_old

    def phase(self, a: int) -> None:
        """
        Phase gate **S** on qubit *a*.

        Update rules (every generator row)
        ------------
            r    <-  r ^ (x_a & z_a)
            z_a  <-  z_a ^ x_a

        x bits are unchanged.
        """
        self._check_qubit(a)
        self._phase(int(a) - 1)

    def _phase(self, q0: int) -> None:
        if self._use_numba:
            nb_phase(self._bits, q0, self._n)
            return
        gen = self._bits[: 2 * self._n]
        xc, zc = self._x_col(q0), self._z_col(q0)
        xa = gen[:, xc]
        gen[:, self._sign_col] ^= xa & gen[:, zc]
        gen[:, zc] ^= xa

    def cnot(self, a: int, b: int) -> None:
        """
        CNOT with control *a* and target *b*.

        Update rules (every generator row, in this order)
        ------------
            r    <-  r ^ (x_a & z_b & (x_b ^ z_a ^ 1))
            x_b  <-  x_b ^ x_a
            z_a  <-  z_a ^ z_b

        Equal control and target is rejected with ``ValueError``.
        """
        self._check_qubit(a, b)
        if int(a) == int(b):
            raise ValueError(f"CNOT control and target must differ, got a=b={a}")
        self._cnot(int(a) - 1, int(b) - 1)

    def _cnot(self, a0: int, b0: int) -> None:
        if self._use_numba:
            nb_cnot(self._bits, a0, b0, self._n)
            return
        gen = self._bits[: 2 * self._n]
        xa = gen[:, self._x_col(a0)]
        xb = gen[:, self._x_col(b0)]
        za = gen[:, self._z_col(a0)]
        zb = gen[:, self._z_col(b0)]
        gen[:, self._sign_col] ^= xa & zb & (xb ^ za ^ 1)
        gen[:, self._x_col(b0)] ^= xa
        gen[:, self._z_col(a0)] ^= zb

    # Aliases matching common gate names
    h = hadamard
    s = phase
    cx = cnot

    def _apply_primitive(self, name: str, qubits: Tuple[int, ...]) -> None:
        if name == "H":
            self._hadamard(qubits[0] - 1)
        elif name == "S":
            self._phase(qubits[0] - 1)
        else:
            self._cnot(qubits[0] - 1, qubits[1] - 1)

    def apply_gate(self, name: str, *qubits: int) -> None:
        """
        Apply a Clifford gate by name.

        H, S and CNOT (alias CX) are applied directly; X, Y, Z, S_DAG, CZ and
        SWAP are expanded into H/S/CNOT (see ``chp_sim.circuit.decompose``).
        All qubits are validated before the first update.
        """
        name = canonical_name(name)
        if name == "M":
            raise ValueError("Use measure() for measurements.")
        if len(qubits) != GATE_ARITY[name]:
            raise ValueError(f"Gate {name} acts on {GATE_ARITY[name]} qubit(s), got {len(qubits)}")
        self._check_qubit(*qubits)
        qubits = tuple(int(q) for q in qubits)
        if len(set(qubits)) != len(qubits):
            raise ValueError(f"Gate {name} needs distinct qubits, got {qubits}")
        for prim, prim_qubits in decompose(name, qubits):
            self._apply_primitive(prim, prim_qubits)

    def apply_circuit(self, circuit: Circuit, rng=None) -> list[bool]:
        """
        Run every operation of ``circuit`` on this tableau in order.

        Returns the measurement outcomes in the order the measurements appear.
        With the numba engine each run of gates between measurements is
        executed by one compiled kernel call.
        """
        if not isinstance(circuit, Circuit):
            raise TypeError(f"Expected a Circuit, got {type(circuit).__name__}")
        if circuit.n != self._n:
            raise ValueError(f"Circuit acts on {circuit.n} qubits but the tableau has {self._n}")

        rng = self._rng if rng is None else coerce_rng(rng)
        outcomes: list[bool] = []
        for kind, payload in circuit.segments():
            if kind == "M":
                outcomes.append(self.measure(payload, rng=rng))
            elif self._use_numba:
                nb_apply_circuit(self._bits, pack_ops(payload), self._n)
            else:
                for name, qubits in payload:
                    for prim, prim_qubits in decompose(name, qubits):
                        self._apply_primitive(prim, prim_qubits)

        LOGGER.debug(
            "Applied circuit %r on %d qubits: %d gates, %d measurements.",
            circuit.name, self._n, circuit.size, len(outcomes),
        )
        return outcomes

    # ===============================================================================================================
    # Measurement
    # ===============================================================================================================
    def _find_pivot(self, q0: int) -> int:
        if self._use_numba:
            return int(nb_find_pivot(self._bits, q0, self._n))
        n = self._n
        hits = self._xp.nonzero(self._bits[n : 2 * n, self._x_col(q0)])[0]
        return _scalar_to_int(hits[0]) + n if len(hits) > 0 else -1

    def measurement_kind(self, a: int) -> str:
        """
        Classify a Z-basis measurement of qubit *a* without performing it:
        "rand" if some stabilizer has an X or Y factor on *a*, else "det".
        """
        self._check_qubit(a)
        return "rand" if self._find_pivot(int(a) - 1) >= 0 else "det"

    def measure(self, a: int, *, rng=None) -> bool:
        """
        Measure qubit *a* in the computational basis, collapsing the tableau.

        Parameters
        ----------
        a : int
            Qubit index in 1..n.
        rng : optional
            Random source for this call only (anything with ``integers(low, high)``).
            Defaults to the tableau's own source. Only the random branch draws
            from it, exactly one bit per call.

        Returns
        -------
        bool
            False for the +1 eigenvalue (|0>), True for -1 (|1>).
        """
        self._check_qubit(a)
        rng = self._rng if rng is None else coerce_rng(rng)
        q0 = int(a) - 1

        p = self._find_pivot(q0)
        if p >= 0:
            coin = draw_bit(rng)
            self._collapse_random(q0, p, coin)
            LOGGER.debug("Measured qubit %d: random outcome %d (pivot row %d).", a, coin, p + 1)
            return bool(coin)

        outcome = self._measure_deterministic(q0)
        LOGGER.debug("Measured qubit %d: deterministic outcome %d.", a, int(outcome))
        return outcome

    def _collapse_random(self, q0: int, p: int, coin: int) -> None:
        n = self._n
        if self._use_numba:
            nb_collapse_random(self._bits, q0, n, p, coin)
            return

        bits = self._bits
        xc = self._x_col(q0)
        for i in range(2 * n):
            if i != p and bits[i, xc]:
                self._rowsum(i, p)
        # old stabilizer becomes the destabilizer paired with row p
        bits[p - n] = bits[p]
        bits[p] = 0
        bits[p, self._sign_col] = coin
        bits[p, self._z_col(q0)] = 1

    def _measure_deterministic(self, q0: int) -> bool:
        n = self._n
        if self._use_numba:
            return bool(nb_measure_deterministic(self._bits, q0, n))

        bits = self._bits
        scratch = self._scratch_row
        bits[scratch] = 0
        xc = self._x_col(q0)
        for i in range(n):
            if bits[i, xc]:
                self._rowsum(scratch, i + n)
        return bool(bits[scratch, self._sign_col])

    def measure_all(self, rng=None) -> np.ndarray:
        """Measure qubits 1..n in ascending order; returns a bool array of outcomes."""
        rng = self._rng if rng is None else coerce_rng(rng)
        return np.array([self.measure(q, rng=rng) for q in range(1, self._n + 1)], dtype=bool)

    # ===============================================================================================================
    # Rendering
    # ===============================================================================================================
    def _pauli_string(self, row: int) -> str:
        n = self._n
        bits = self._bits
        sign = "-" if _scalar_to_int(bits[row, self._sign_col]) else "+"
        chars = [
            _PAULI_CHARS[(_scalar_to_int(bits[row, self._x_col(q)]), _scalar_to_int(bits[row, self._z_col(q)]))]
            for q in range(n)
        ]
        return sign + "".join(chars)

    def stabilizers(self) -> list[str]:
        """Stabilizer generators as signed Pauli strings, e.g. ``["+XX", "+ZZ"]``."""
        return [self._pauli_string(row) for row in range(self._n, 2 * self._n)]

    def destabilizers(self) -> list[str]:
        return [self._pauli_string(row) for row in range(self._n)]

    def __str__(self):
        n = self._n
        labels = [f"d{i}" for i in range(1, n + 1)] + [f"s{i}" for i in range(1, n + 1)]
        row_w = max(len(s) for s in labels)
        x_headers = [f"x{j}" for j in range(1, n + 1)]
        z_headers = [f"z{j}" for j in range(1, n + 1)]
        widths = [len(h) for h in x_headers + z_headers]

        header = (
            f"{'#'.ljust(row_w)} | "
            + " ".join(h.rjust(w) for h, w in zip(x_headers, widths[:n]))
            + " | "
            + " ".join(h.rjust(w) for h, w in zip(z_headers, widths[n:]))
            + " | r"
        )
        lines = [header, "─" * len(header)]
        for i in range(2 * n):
            row = [str(_scalar_to_int(v)) for v in self._bits[i]]
            x_block = " ".join(v.rjust(w) for v, w in zip(row[:n], widths[:n]))
            z_block = " ".join(v.rjust(w) for v, w in zip(row[n : 2 * n], widths[n:]))
            lines.append(f"{labels[i].ljust(row_w)} | {x_block} | {z_block} | {row[2 * n]}")
            if i == n - 1:
                lines.append("-" * len(header))
        return "\n".join(lines)

    def __repr__(self):
        return f"Tableau(n={self._n}, engine={self._engine!r})"

    def __eq__(self, other: object) -> bool:
        """Equal when qubit count and all 2n generator rows match; the scratch row is ignored."""
        if not isinstance(other, Tableau):
            return NotImplemented
        if self._n != other._n:
            return False
        rows = 2 * self._n
        return bool(self._xp.array_equal(self._bits[:rows], other._bits[:rows]))

    __hash__ = None
