"""Exception types raised by the tableau simulator."""


class ChpSimError(Exception):
    """Base class for all chp_sim errors."""


class InvalidQubitIndexError(ChpSimError, IndexError):
    """A qubit index fell outside ``[1, n]`` for the tableau it was used on."""

    def __init__(self, qubit: int, num_qubits: int, name: str = "qubit"):
        self.qubit = qubit
        self.num_qubits = num_qubits
        super().__init__(
            f"{name}={qubit} is out of range; valid qubit indices are 1..{num_qubits}."
        )
