"""Text rendering of quantum states.

:func:`format_state` lists every basis state whose probability exceeds
:data:`PROBABILITY_THRESHOLD` in ket notation, for example the Bell state::

    |00⟩: 0.707 (50.0%)
    |11⟩: 0.707 (50.0%)
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import List, Tuple

from .engine import QuantumState

PROBABILITY_THRESHOLD = 0.001
# amplitude components closer than this to zero print as zero
ZERO_TOLERANCE = 0.001
NO_SIGNIFICANT_AMPLITUDES = "No significant amplitudes"


def to_fixed(value: float, places: int) -> str:
    """Render ``value`` with ``places`` decimals, rounding exact ties away from zero.

    ``Decimal(value)`` keeps the exact binary value, so ``0.0625`` becomes
    ``0.063`` rather than the half-to-even ``0.062``.
    """
    exponent = Decimal(1).scaleb(-places)
    return str(Decimal(value).quantize(exponent, rounding=ROUND_HALF_UP))


def basis_label(index: int, qubit_count: int) -> str:
    """Return ``index`` in binary, zero padded to ``qubit_count`` digits."""
    return format(index, "b").zfill(qubit_count)


def is_significant(probability: float) -> bool:
    return probability > PROBABILITY_THRESHOLD


def format_complex(value: complex) -> str:
    real = value.real
    imag = value.imag
    if abs(real) < ZERO_TOLERANCE and abs(imag) < ZERO_TOLERANCE:
        return "0"
    if abs(imag) < ZERO_TOLERANCE:
        return to_fixed(real, 3)
    if abs(real) < ZERO_TOLERANCE:
        return f"{to_fixed(imag, 3)}i"
    sign = "+" if imag >= 0 else ""
    return f"{to_fixed(real, 3)}{sign}{to_fixed(imag, 3)}i"


def probability_table(state: QuantumState) -> List[Tuple[str, complex, float]]:
    """Return ``(label, amplitude, probability)`` for each significant basis state.

    Rows are in ascending basis index order.
    """
    rows = []
    for index, amplitude in enumerate(state.statevector):
        probability = amplitude.real * amplitude.real + amplitude.imag * amplitude.imag
        if is_significant(probability):
            rows.append((basis_label(index, state.qubit_count), amplitude, probability))
    return rows


def format_state(state: QuantumState) -> str:
    """Render ``state`` one significant basis state per line.

    Returns :data:`NO_SIGNIFICANT_AMPLITUDES` when nothing clears the
    threshold.  Never raises for a well formed state.
    """
    lines = [
        f"|{label}⟩: {format_complex(amplitude)} ({to_fixed(probability * 100, 1)}%)"
        for label, amplitude, probability in probability_table(state)
    ]
    if not lines:
        return NO_SIGNIFICANT_AMPLITUDES
    return "\n".join(lines)
