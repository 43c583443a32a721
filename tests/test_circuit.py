import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
import pytest
from pydantic import ValidationError

from qstep.circuit import (
    DEFAULT_DESCRIPTION,
    DEFAULT_NAME,
    SAMPLE_SOURCES,
    Circuit,
    GateCall,
    NameDirective,
    QubitsDirective,
    SingleQubitGate,
    TwoQubitGate,
    Unrecognized,
    parse_circuit,
    parse_line,
    sample_circuit,
)
from qstep.errors import CircuitParseError


def test_gate_positions_are_one_based():
    circuit = parse_circuit("H(0)\nCNOT(0,1)")
    assert [g.position for g in circuit.gates] == [1, 2]
    assert circuit.gates[0] == SingleQubitGate(kind="H", qubit=0, position=1)
    assert circuit.gates[1] == TwoQubitGate(kind="CNOT", control=0, target=1, position=2)


def test_qubit_count_inferred_from_highest_index():
    circuit = parse_circuit("H(2)")
    assert circuit.qubits == 3


def test_qubit_count_inferred_from_two_qubit_gates():
    circuit = parse_circuit("H(0)\nSWAP(4, 1)")
    assert circuit.qubits == 5


def test_empty_source_defaults_to_one_qubit():
    circuit = parse_circuit("")
    assert circuit.qubits == 1
    assert circuit.gates == ()


def test_qubits_zero_counts_as_undeclared():
    circuit = parse_circuit("qubits 0\nX(1)")
    assert circuit.qubits == 2


def test_default_name_and_description():
    circuit = parse_circuit("qubits 2\nH(0)")
    assert circuit.name == DEFAULT_NAME == "Custom Circuit"
    assert circuit.description == DEFAULT_DESCRIPTION == "Circuit created from code"


def test_directives_are_case_insensitive():
    circuit = parse_circuit('QUBITS 4\nName "Mine"\nDESCRIPTION "does things"\nH(0)')
    assert circuit.qubits == 4
    assert circuit.name == "Mine"
    assert circuit.description == "does things"


def test_comments_blank_and_garbage_lines_are_skipped():
    source = """
    // a comment
    qubits 2

    print("hello")
    H(0)
    CNOT(0)
    h(1)
    CNOT(0, 1)
    """
    circuit = parse_circuit(source)
    assert [g.to_source() for g in circuit.gates] == ["H(0)", "CNOT(0, 1)"]
    assert [g.position for g in circuit.gates] == [1, 2]


def test_declared_qubits_too_small_is_a_parse_error():
    with pytest.raises(CircuitParseError) as info:
        parse_circuit("qubits 1\nH(3)")
    assert str(info.value) == "failed to parse circuit"
    assert isinstance(info.value.__cause__, ValueError)


def test_two_qubit_gate_on_same_qubit_is_a_parse_error():
    with pytest.raises(CircuitParseError):
        parse_circuit("CNOT(1, 1)")


def test_parse_line_variants():
    assert parse_line("  qubits 3 ") == QubitsDirective(3)
    assert parse_line('name "Bell State"') == NameDirective("Bell State")
    assert parse_line("Y(4)") == GateCall("Y", (4,))
    assert parse_line("SWAP(0,  2)") == GateCall("SWAP", (0, 2))
    assert isinstance(parse_line("// H(0)"), Unrecognized)
    assert isinstance(parse_line(""), Unrecognized)
    assert isinstance(parse_line("T(0)"), Unrecognized)
    assert isinstance(parse_line('name ""'), Unrecognized)


@pytest.mark.parametrize(
    "key,qubits,gates",
    [("bell", 2, 2), ("teleportation", 3, 6), ("grover", 3, 15)],
)
def test_sample_circuits(key, qubits, gates):
    circuit = sample_circuit(key)
    assert circuit.qubits == qubits
    assert len(circuit.gates) == gates
    assert parse_circuit(circuit.to_source()) == circuit


def test_sample_names():
    assert sample_circuit("bell").name == "Bell State"
    assert sample_circuit("teleportation").name == "Quantum Teleportation"
    assert sample_circuit("grover").name == "Grover's Algorithm"
    assert set(SAMPLE_SOURCES) == {"bell", "teleportation", "grover"}


def test_unknown_sample():
    with pytest.raises(KeyError):
        sample_circuit("shor")


def test_circuit_rejects_out_of_range_gate():
    with pytest.raises(ValidationError):
        Circuit(qubits=1, gates=(SingleQubitGate(kind="H", qubit=1),))


def test_circuit_is_frozen():
    circuit = parse_circuit("H(0)")
    with pytest.raises(ValidationError):
        circuit.qubits = 4


def test_circuit_from_json():
    circuit = Circuit.model_validate(
        {
            "qubits": 2,
            "gates": [
                {"kind": "H", "qubit": 0},
                {"kind": "CNOT", "control": 0, "target": 1, "position": 2},
            ],
        }
    )
    assert isinstance(circuit.gates[1], TwoQubitGate)
    assert circuit.highest_qubit() == 1
    assert circuit.name == "Custom Circuit"


def test_custom_labels_survive_source_round_trip():
    circuit = Circuit(
        qubits=2,
        gates=(SingleQubitGate(kind="X", qubit=1, position=1),),
        name="It's mine",
        description="flips q1 // not a comment",
    )
    source = circuit.to_source()
    assert source.splitlines()[:3] == ["qubits 2", "name \"It's mine\"", 'description "flips q1 // not a comment"']
    assert parse_circuit(source) == circuit


@pytest.mark.parametrize(
    "field,value",
    [("name", 'a "b"'), ("name", ""), ("description", "two\nlines"), ("description", "")],
)
def test_labels_that_cannot_be_written_are_rejected(field, value):
    with pytest.raises(ValidationError):
        Circuit(qubits=1, **{field: value})
