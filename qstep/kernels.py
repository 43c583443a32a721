"""Gate kernels acting on dense state vectors.

A state of ``n`` qubits is a sequence of ``2**n`` complex amplitudes.  Qubit
``q`` of basis index ``i`` is the bit ``(i >> q) & 1``, so qubit ``0`` is the
least significant bit.  Flipping qubit ``q`` of ``i`` gives its pair index
``i ^ (1 << q)``.

Every kernel returns a new list and leaves its input untouched.  Both
amplitudes of a pair are read before either output slot is written, so no
kernel ever sees a partially updated vector.  Qubit indices are checked up
front and a bad index raises :class:`~qstep.errors.QubitIndexError`.
"""

import math
from typing import Callable, Dict, Iterator, List, Sequence, Tuple, Union

from .circuit import SingleQubitGate, TwoQubitGate
from .errors import QubitIndexError, StateSizeError
from .log import get_logger

logger = get_logger(__name__)

_SQRT1_2 = 1 / math.sqrt(2)


def _check_operands(state: Sequence[complex], n_qubits: int, *qubits: int) -> None:
    if len(state) != 1 << n_qubits:
        raise StateSizeError(
            f"state has {len(state)} amplitudes, expected {1 << n_qubits} for {n_qubits} qubits"
        )
    for q in qubits:
        if not 0 <= q < n_qubits:
            raise QubitIndexError(q, n_qubits)


def _pairs(size: int, qubit: int) -> Iterator[Tuple[int, int]]:
    """Yield every ``(idx0, idx1)`` pair differing only in ``qubit``, once."""
    step = 1 << qubit
    for i in range(0, size, 2 * step):
        for j in range(step):
            idx0 = i + j
            yield idx0, idx0 + step


def apply_hadamard(state: Sequence[complex], n_qubits: int, qubit: int) -> List[complex]:
    """Apply ``H`` to ``qubit``.

    ``|0>`` maps to ``(|0> + |1>)/sqrt(2)`` and ``|1>`` to
    ``(|0> - |1>)/sqrt(2)``.
    """
    _check_operands(state, n_qubits, qubit)
    new_state = [0j] * len(state)
    for idx0, idx1 in _pairs(len(state), qubit):
        a0 = state[idx0]
        a1 = state[idx1]
        new_state[idx0] = (a0 + a1) * _SQRT1_2
        new_state[idx1] = (a0 - a1) * _SQRT1_2
    return new_state


def apply_pauli_x(state: Sequence[complex], n_qubits: int, qubit: int) -> List[complex]:
    """Apply ``X`` (NOT) to ``qubit`` by swapping each amplitude pair."""
    _check_operands(state, n_qubits, qubit)
    new_state = list(state)
    for idx0, idx1 in _pairs(len(state), qubit):
        new_state[idx0] = state[idx1]
        new_state[idx1] = state[idx0]
    return new_state


def apply_pauli_y(state: Sequence[complex], n_qubits: int, qubit: int) -> List[complex]:
    """Apply ``Y = [[0, -i], [i, 0]]`` to ``qubit``."""
    _check_operands(state, n_qubits, qubit)
    new_state = [0j] * len(state)
    for idx0, idx1 in _pairs(len(state), qubit):
        a0 = state[idx0]
        a1 = state[idx1]
        new_state[idx0] = -1j * a1
        new_state[idx1] = 1j * a0
    return new_state


def apply_pauli_z(state: Sequence[complex], n_qubits: int, qubit: int) -> List[complex]:
    """Apply ``Z`` to ``qubit``: negate every amplitude where it is ``1``."""
    _check_operands(state, n_qubits, qubit)
    mask = 1 << qubit
    new_state = list(state)
    for i in range(len(state)):
        if i & mask:
            new_state[i] = -state[i]
    return new_state


def apply_cnot(state: Sequence[complex], n_qubits: int, control: int, target: int) -> List[complex]:
    """Flip ``target`` on every basis state where ``control`` is ``1``."""
    _check_operands(state, n_qubits, control, target)
    control_mask = 1 << control
    target_mask = 1 << target
    new_state = list(state)
    for i in range(len(state)):
        # visit each pair from its target=0 side only
        if i & control_mask and not i & target_mask:
            j = i | target_mask
            new_state[i] = state[j]
            new_state[j] = state[i]
    return new_state


def apply_swap(state: Sequence[complex], n_qubits: int, qubit1: int, qubit2: int) -> List[complex]:
    """Exchange the values of ``qubit1`` and ``qubit2``."""
    _check_operands(state, n_qubits, qubit1, qubit2)
    mask1 = 1 << qubit1
    mask2 = 1 << qubit2
    new_state = list(state)
    for i in range(len(state)):
        if i & mask1 and not i & mask2:
            j = i ^ mask1 ^ mask2
            new_state[i] = state[j]
            new_state[j] = state[i]
    return new_state


GATE_KERNELS: Dict[str, Callable[..., List[complex]]] = {
    "H": apply_hadamard,
    "X": apply_pauli_x,
    "Y": apply_pauli_y,
    "Z": apply_pauli_z,
    "CNOT": apply_cnot,
    "SWAP": apply_swap,
}


def apply_gate(
    state: Sequence[complex], n_qubits: int, gate: Union[SingleQubitGate, TwoQubitGate]
) -> List[complex]:
    """Apply ``gate`` to ``state`` and return the new amplitudes.

    A two-qubit gate without a ``target`` leaves the state unchanged.
    """
    kernel = GATE_KERNELS[gate.kind]
    if isinstance(gate, TwoQubitGate):
        if gate.target is None:
            logger.debug("%s at position %d has no target, skipping", gate.kind, gate.position)
            return list(state)
        return kernel(state, n_qubits, gate.control, gate.target)
    return kernel(state, n_qubits, gate.qubit)


# Utilities

def norm(state: Sequence[complex]) -> float:
    """Return the sum of squared amplitude magnitudes of ``state``."""
    return sum(abs(a) ** 2 for a in state)


def operator_matrix(gate: Union[SingleQubitGate, TwoQubitGate], n_qubits: int) -> List[List[complex]]:
    """Return the full ``2**n x 2**n`` matrix implemented by ``gate``.

    Column ``b`` is the kernel applied to basis state ``b``.
    """
    size = 1 << n_qubits
    full = [[0j for _ in range(size)] for _ in range(size)]
    for basis in range(size):
        state = [0j] * size
        state[basis] = 1 + 0j
        out = apply_gate(state, n_qubits, gate)
        for j, amp in enumerate(out):
            full[j][basis] = amp
    return full


def is_unitary(matrix: Sequence[Sequence[complex]], tol: float = 1e-10) -> bool:
    """Return ``True`` if ``matrix`` satisfies ``U^dagger U = I`` within ``tol``."""
    size = len(matrix)
    for i in range(size):
        for j in range(size):
            val = sum(matrix[k][i].conjugate() * matrix[k][j] for k in range(size))
            expected = 1 if i == j else 0
            if abs(val - expected) > tol:
                return False
    return True
