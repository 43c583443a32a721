"""Step by step execution of circuits.

The driver starts from ``|0...0>`` and applies the circuit's gates in order,
keeping every intermediate state so that a caller can walk back and forth
through the run afterwards::

    >>> from qstep.circuit import sample_circuit
    >>> from qstep.engine import run_circuit
    >>> result = run_circuit(sample_circuit("bell"))
    >>> len(result.intermediate_states)
    2

:func:`run_circuit_async` does the same work but awaits a short pause between
gates so that an interactive front end can redraw after each step.  Both
drivers check an optional :class:`CancellationToken` before every gate.
"""

import asyncio
import time
from typing import Callable, Iterator, List, NamedTuple, Optional, Sequence, Tuple, Union

from .circuit import Circuit, SingleQubitGate, TwoQubitGate
from .config import get_settings
from .errors import CircuitError, ExecutionCancelled
from .kernels import apply_gate
from .log import get_logger

logger = get_logger(__name__)


class QuantumState(NamedTuple):
    """Immutable snapshot of the register."""

    statevector: Tuple[complex, ...]
    qubit_count: int

    @classmethod
    def zero(cls, qubit_count: int) -> "QuantumState":
        """Return ``|0...0>`` on ``qubit_count`` qubits."""
        amplitudes = [0j] * (1 << qubit_count)
        amplitudes[0] = 1 + 0j
        return cls(tuple(amplitudes), qubit_count)

    def probabilities(self) -> List[float]:
        return [abs(a) ** 2 for a in self.statevector]

    def amplitude(self, bits: str) -> complex:
        """Return the amplitude of the basis state written as ``bits``.

        ``bits`` is read most significant qubit first, as in ``|q2 q1 q0>``.
        """
        if len(bits) != self.qubit_count or any(c not in "01" for c in bits):
            raise ValueError(f"bits must be a {self.qubit_count}-bit string, got {bits!r}")
        return self.statevector[int(bits, 2)]


class QuantumExecutionResult(NamedTuple):
    initial_state: QuantumState
    final_state: QuantumState
    # one entry per gate, in gate order
    intermediate_states: Tuple[QuantumState, ...]
    # wall clock milliseconds
    execution_time: float


StepCallback = Callable[[QuantumState, int], None]


class CancellationToken:
    """Flag shared between a running driver and whoever may stop it."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


def _initial_state(circuit: Optional[Circuit]) -> QuantumState:
    if circuit is None:
        raise CircuitError("no valid circuit to execute")
    settings = get_settings()
    if circuit.qubits > settings.max_qubits:
        raise CircuitError(f"circuit uses {circuit.qubits} qubits, the limit is {settings.max_qubits}")
    stored = (len(circuit.gates) + 1) << circuit.qubits
    if stored > settings.max_stored_amplitudes:
        raise CircuitError(
            f"run would keep {stored} amplitudes, the limit is {settings.max_stored_amplitudes}"
        )
    return QuantumState.zero(circuit.qubits)


def iter_states(
    circuit: Circuit,
    initial: QuantumState,
    cancel: Optional[CancellationToken] = None,
) -> Iterator[Tuple[int, QuantumState]]:
    """Yield ``(step, state)`` after each gate of ``circuit``, in order."""
    state = initial
    for step, gate in enumerate(circuit.gates):
        if cancel is not None and cancel.cancelled:
            logger.info("run of %r cancelled before step %d", circuit.name, step)
            raise ExecutionCancelled(step)
        amplitudes = apply_gate(state.statevector, state.qubit_count, gate)
        state = QuantumState(tuple(amplitudes), state.qubit_count)
        logger.debug("step %d: applied %s", step, gate.to_source())
        yield step, state


def _finish(
    circuit: Circuit, initial: QuantumState, intermediate: List[QuantumState], started: float
) -> QuantumExecutionResult:
    elapsed = (time.perf_counter() - started) * 1000.0
    logger.info("ran %r: %d gates in %.3f ms", circuit.name, len(intermediate), elapsed)
    return QuantumExecutionResult(
        initial_state=initial,
        final_state=intermediate[-1] if intermediate else initial,
        intermediate_states=tuple(intermediate),
        execution_time=elapsed,
    )


def run_circuit(
    circuit: Circuit,
    on_step: Optional[StepCallback] = None,
    cancel: Optional[CancellationToken] = None,
) -> QuantumExecutionResult:
    """Run ``circuit`` from ``|0...0>`` and collect every intermediate state.

    Parameters
    ----------
    circuit:
        The circuit to execute.  ``None`` raises
        :class:`~qstep.errors.CircuitError`.
    on_step:
        Optional ``on_step(state, step)`` called right after gate ``step``
        (0-based) has been applied.
    cancel:
        Optional token checked before every gate; once cancelled the run
        raises :class:`~qstep.errors.ExecutionCancelled`.
    """
    started = time.perf_counter()
    initial = _initial_state(circuit)
    intermediate: List[QuantumState] = []
    for step, state in iter_states(circuit, initial, cancel):
        intermediate.append(state)
        if on_step is not None:
            on_step(state, step)
    return _finish(circuit, initial, intermediate, started)


async def run_circuit_async(
    circuit: Circuit,
    on_step: Optional[StepCallback] = None,
    delay: Optional[float] = None,
    cancel: Optional[CancellationToken] = None,
) -> QuantumExecutionResult:
    """Like :func:`run_circuit` but sleeps ``delay`` seconds between gates.

    ``delay`` defaults to the ``step_delay`` setting.  The pause only gives
    other tasks a chance to run; results are identical to the batch driver.
    """
    if delay is None:
        delay = get_settings().step_delay
    started = time.perf_counter()
    initial = _initial_state(circuit)
    intermediate: List[QuantumState] = []
    last_step = len(circuit.gates) - 1
    for step, state in iter_states(circuit, initial, cancel):
        intermediate.append(state)
        if on_step is not None:
            on_step(state, step)
        if step < last_step:
            await asyncio.sleep(delay)
    return _finish(circuit, initial, intermediate, started)


class ExecutionTrace:
    """Cursor over the states of a finished run.

    Step ``0`` is the initial state and step ``k`` the state after the first
    ``k`` gates, so a circuit with ``g`` gates has steps ``0..g``.
    """

    def __init__(self, circuit: Circuit, states: Sequence[QuantumState]):
        if len(states) != len(circuit.gates) + 1:
            raise ValueError(
                f"expected {len(circuit.gates) + 1} states for {len(circuit.gates)} gates, got {len(states)}"
            )
        self.circuit = circuit
        self.states = tuple(states)
        self.current_step = 0

    @classmethod
    def from_result(cls, circuit: Circuit, result: QuantumExecutionResult) -> "ExecutionTrace":
        return cls(circuit, (result.initial_state,) + tuple(result.intermediate_states))

    @property
    def last_step(self) -> int:
        return len(self.states) - 1

    @property
    def at_start(self) -> bool:
        return self.current_step == 0

    @property
    def at_end(self) -> bool:
        return self.current_step == self.last_step

    @property
    def current_state(self) -> QuantumState:
        return self.states[self.current_step]

    @property
    def current_gate(self) -> Optional[Union[SingleQubitGate, TwoQubitGate]]:
        """The gate that produced :attr:`current_state`, ``None`` at step 0."""
        if self.current_step == 0:
            return None
        return self.circuit.gates[self.current_step - 1]

    def seek(self, step: int) -> QuantumState:
        if not 0 <= step <= self.last_step:
            raise IndexError(f"step {step} outside 0..{self.last_step}")
        self.current_step = step
        return self.current_state

    def step_forward(self) -> bool:
        """Advance one gate; return ``False`` if already at the end."""
        if self.at_end:
            return False
        self.current_step += 1
        return True

    def step_back(self) -> bool:
        """Undo one gate; return ``False`` if already at the start."""
        if self.at_start:
            return False
        self.current_step -= 1
        return True

    def reset(self) -> None:
        self.current_step = 0
