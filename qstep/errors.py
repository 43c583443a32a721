"""Exception types raised by the simulator core.

Callers (the HTTP layer and the command line) catch these and turn them into
user facing messages.  Nothing here is fatal to the process.
"""


class QStepError(Exception):
    """Base class for every error raised by :mod:`qstep`."""


class CircuitParseError(QStepError):
    """Raised when circuit source text could not be processed at all.

    Malformed lines are skipped by the parser and never raise; this error only
    wraps unexpected failures.
    """

    def __init__(self, message: str = "failed to parse circuit"):
        super().__init__(message)


class CircuitError(QStepError):
    """Raised when a circuit cannot be executed."""


class ExecutionCancelled(QStepError):
    """Raised when a run is cancelled between two gate applications."""

    def __init__(self, step: int):
        super().__init__(f"execution cancelled before step {step}")
        self.step = step


class QubitIndexError(QStepError, ValueError):
    """Raised when a gate refers to a qubit outside the register."""

    def __init__(self, qubit: int, n_qubits: int):
        super().__init__(f"qubit index {qubit} out of range for {n_qubits} qubit register")
        self.qubit = qubit
        self.n_qubits = n_qubits


class StateSizeError(QStepError, ValueError):
    """Raised when a state vector length does not match ``2**n_qubits``."""
