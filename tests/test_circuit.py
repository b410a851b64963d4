"""Tests for the Circuit container and named-gate application."""

import numpy as np
import pytest

from chp_sim import Circuit, FixedBits, InvalidQubitIndexError, Tableau, decompose


def test_builder_records_canonical_ops():
    qc = Circuit(3, name="demo")
    qc.h(1).s(2).sdg(3).cx(1, 2).append("cz", (2, 3)).swap(1, 3).measure(2)
    assert qc.ops == [
        ("H", (1,)),
        ("S", (2,)),
        ("S_DAG", (3,)),
        ("CNOT", (1, 2)),
        ("CZ", (2, 3)),
        ("SWAP", (1, 3)),
        ("M", (2,)),
    ]
    assert len(qc) == 7
    assert qc.size == 6
    assert qc.num_measurements == 1
    assert qc[3] == ("CNOT", (1, 2))


def test_depth_uses_asap_layers():
    qc = Circuit(3)
    qc.h(1).h(2).h(3)
    assert qc.depth == 1
    qc.cx(1, 2)
    assert qc.depth == 2
    qc.s(3)
    assert qc.depth == 2
    qc.measure(1)
    assert qc.depth == 2
    qc.cx(2, 3)
    assert qc.depth == 3


@pytest.mark.parametrize(
    "name, qubits, exc",
    [
        ("T", (1,), ValueError),
        ("H", (1, 2), ValueError),
        ("CNOT", (1,), ValueError),
        ("CNOT", (2, 2), ValueError),
        ("H", (0,), InvalidQubitIndexError),
        ("CZ", (1, 3), InvalidQubitIndexError),
        ("H", (1.0,), TypeError),
    ],
)
def test_append_validates(name, qubits, exc):
    qc = Circuit(2)
    with pytest.raises(exc):
        qc.append(name, qubits)
    assert len(qc) == 0


def test_circuit_requires_positive_width():
    with pytest.raises(ValueError):
        Circuit(0)


def test_circuit_width_accepts_numpy_integers():
    qc = Circuit(np.int64(2)).h(2)
    assert qc.n == 2
    with pytest.raises(TypeError):
        Circuit(True)
    with pytest.raises(TypeError):
        Circuit(2.0)


def test_copy_is_shallow_but_independent():
    qc = Circuit(2).h(1)
    other = qc.copy()
    other.cx(1, 2)
    assert len(qc) == 1
    assert len(other) == 2


def test_segments_split_on_measurements():
    qc = Circuit(2).h(1).cx(1, 2).measure(1).measure(2).x(1)
    assert list(qc.segments()) == [
        ("gates", [("H", (1,)), ("CNOT", (1, 2))]),
        ("M", 1),
        ("M", 2),
        ("gates", [("X", (1,))]),
    ]


def test_decompose_primitives_and_derived():
    assert decompose("cx", (1, 2)) == [("CNOT", (1, 2))]
    assert decompose("Z", (1,)) == [("S", (1,)), ("S", (1,))]
    assert decompose("SWAP", (1, 2)) == [("CNOT", (1, 2)), ("CNOT", (2, 1)), ("CNOT", (1, 2))]
    with pytest.raises(ValueError):
        decompose("M", (1,))


@pytest.mark.parametrize(
    "prep, gate, expected",
    [
        ([], ("X", 1), ["-Z"]),
        ([], ("Y", 1), ["-Z"]),
        ([], ("Z", 1), ["+Z"]),
        (["H"], ("Z", 1), ["-X"]),
        (["H"], ("S_DAG", 1), ["-Y"]),
        (["H"], ("X", 1), ["+X"]),
    ],
)
def test_single_qubit_named_gates(prep, gate, expected, engine):
    tab = Tableau(1, engine=engine)
    for name in prep:
        tab.apply_gate(name, 1)
    tab.apply_gate(*gate)
    assert tab.stabilizers() == expected


def test_two_qubit_named_gates(engine):
    tab = Tableau(2, engine=engine)
    tab.apply_gate("H", 1)
    tab.apply_gate("SWAP", 1, 2)
    assert tab.stabilizers() == ["+IX", "+ZI"]

    tab = Tableau(2, engine=engine)
    tab.apply_gate("H", 1)
    tab.apply_gate("H", 2)
    tab.apply_gate("CZ", 1, 2)
    assert tab.stabilizers() == ["+XZ", "+ZX"]


def test_apply_gate_rejects_bad_calls():
    tab = Tableau(2)
    with pytest.raises(ValueError):
        tab.apply_gate("M", 1)
    with pytest.raises(ValueError):
        tab.apply_gate("H", 1, 2)
    with pytest.raises(ValueError):
        tab.apply_gate("SWAP", 2, 2)
    with pytest.raises(ValueError):
        tab.apply_gate("TOFFOLI", 1)


def test_apply_circuit_returns_outcomes_in_order(bell_circuit, engine):
    tab = Tableau(2, rng=FixedBits([1]), engine=engine)
    assert tab.apply_circuit(bell_circuit) == [True, True]


def test_apply_circuit_checks_width(bell_circuit):
    with pytest.raises(ValueError):
        Tableau(3).apply_circuit(bell_circuit)
    with pytest.raises(TypeError):
        Tableau(2).apply_circuit([("H", (1,))])
