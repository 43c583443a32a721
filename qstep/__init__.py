r"""Step-through simulator for small quantum circuits.

    >>> from qstep import parse_circuit, run_circuit, format_state
    >>> circuit = parse_circuit("qubits 2\nH(0)\nCNOT(0, 1)")
    >>> print(format_state(run_circuit(circuit).final_state))
    |00⟩: 0.707 (50.0%)
    |11⟩: 0.707 (50.0%)
"""

from .circuit import (
    Circuit,
    SingleQubitGate,
    TwoQubitGate,
    SAMPLE_SOURCES,
    parse_circuit,
    sample_circuit,
)
from .engine import (
    CancellationToken,
    ExecutionTrace,
    QuantumExecutionResult,
    QuantumState,
    run_circuit,
    run_circuit_async,
)
from .errors import (
    CircuitError,
    CircuitParseError,
    ExecutionCancelled,
    QStepError,
    QubitIndexError,
    StateSizeError,
)
from .formatting import format_state

__all__ = [
    "Circuit",
    "SingleQubitGate",
    "TwoQubitGate",
    "SAMPLE_SOURCES",
    "parse_circuit",
    "sample_circuit",
    "CancellationToken",
    "ExecutionTrace",
    "QuantumExecutionResult",
    "QuantumState",
    "run_circuit",
    "run_circuit_async",
    "CircuitError",
    "CircuitParseError",
    "ExecutionCancelled",
    "QStepError",
    "QubitIndexError",
    "StateSizeError",
    "format_state",
]
