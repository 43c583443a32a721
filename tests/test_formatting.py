import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
import math

import pytest

from qstep.circuit import parse_circuit, sample_circuit
from qstep.engine import QuantumState, run_circuit
from qstep.formatting import (
    NO_SIGNIFICANT_AMPLITUDES,
    basis_label,
    format_complex,
    format_state,
    is_significant,
    probability_table,
    to_fixed,
)


def test_bell_state_rendering():
    final = run_circuit(parse_circuit("qubits 2\nH(0)\nCNOT(0,1)")).final_state
    text = format_state(final)
    assert text == "|00⟩: 0.707 (50.0%)\n|11⟩: 0.707 (50.0%)"
    assert len(text.splitlines()) == 2


def test_teleportation_rendering():
    final = run_circuit(sample_circuit("teleportation")).final_state
    assert format_state(final).splitlines() == [
        "|010⟩: 0.500 (25.0%)",
        "|011⟩: -0.500 (25.0%)",
        "|100⟩: 0.500 (25.0%)",
        "|101⟩: -0.500 (25.0%)",
    ]


@pytest.mark.parametrize(
    "value,expected",
    [
        (0j, "0"),
        (complex(0.0004, -0.0009), "0"),
        (0.5 + 0j, "0.500"),
        (-0.5 + 0.0002j, "-0.500"),
        (0.25j, "0.250i"),
        (complex(0.0001, -1.0), "-1.000i"),
        (0.5 + 0.25j, "0.500+0.250i"),
        (0.5 - 0.25j, "0.500-0.250i"),
        (complex(-0.1, 0.0), "-0.100"),
    ],
)
def test_format_complex(value, expected):
    assert format_complex(value) == expected


def test_imaginary_amplitude_line():
    state = QuantumState((0j, 1j), 1)
    assert format_state(state) == "|1⟩: 1.000i (100.0%)"


def test_lines_follow_ascending_basis_order():
    half = 1 / math.sqrt(2)
    state = QuantumState((0j, half + 0j, 0j, -half + 0j), 2)
    assert [row[0] for row in probability_table(state)] == ["01", "11"]
    assert format_state(state).splitlines()[1] == "|11⟩: -0.707 (50.0%)"


def test_placeholder_for_empty_state():
    assert format_state(QuantumState((0j, 0j), 1)) == NO_SIGNIFICANT_AMPLITUDES
    assert format_state(QuantumState((0.01 + 0j, 0.02j), 1)) == "No significant amplitudes"


def test_threshold_is_strict():
    assert not is_significant(0.001)
    assert is_significant(0.0010001)


def test_basis_label_padding():
    assert basis_label(5, 4) == "0101"
    assert basis_label(0, 1) == "0"
    assert basis_label(3, 2) == "11"


@pytest.mark.parametrize(
    "value,places,expected",
    [(0.0625, 3, "0.063"), (-0.0625, 3, "-0.063"), (6.25, 1, "6.3"), (0.390625, 1, "0.4"), (0.1234, 3, "0.123")],
)
def test_to_fixed_rounds_ties_away_from_zero(value, places, expected):
    assert to_fixed(value, places) == expected


def test_exact_ties_in_rendered_lines():
    # 0.25 ** 2 * 100 == 6.25 exactly
    state = QuantumState((0.25 + 0j,) + (0j,) * 15, 4)
    assert format_state(state) == "|0000⟩: 0.250 (6.3%)"
    state = QuantumState((0.0625 + 0j, 0j, -0.0625j, 0j), 2)
    assert format_state(state).splitlines() == [
        "|00⟩: 0.063 (0.4%)",
        "|10⟩: -0.063i (0.4%)",
    ]


def test_probability_exactly_at_threshold_is_not_rendered():
    # real * real + imag * imag == 0.001 exactly in double precision
    at_threshold = complex(0.027492896809903463, 0.015625)
    p = at_threshold.real * at_threshold.real + at_threshold.imag * at_threshold.imag
    assert p == 0.001
    assert format_state(QuantumState((at_threshold, 0j), 1)) == NO_SIGNIFICANT_AMPLITUDES
    assert format_state(QuantumState((0j, at_threshold, 1 + 0j, 0j), 2)) == "|10⟩: 1.000 (100.0%)"
