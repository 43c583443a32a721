"""Circuit data model and the line oriented circuit language.

A circuit is written one directive or gate call per line::

    // Bell State Circuit
    qubits 2
    name "Bell State"
    description "Creates a maximally entangled state"

    H(0)
    CNOT(0, 1)

The ``qubits``, ``name`` and ``description`` directives are optional and their
keywords are case-insensitive.  Gate calls use the upper case gate names
``H``, ``X``, ``Y``, ``Z`` (one qubit) and ``CNOT``, ``SWAP`` (control and
target).  Blank lines, ``//`` comments and anything else the parser does not
recognise are skipped.  When ``qubits`` is missing the register size is
inferred from the highest qubit index used.

Qubit ``0`` is the least significant bit of a basis index, as in the rest of
the package.
"""

import re
from typing import Annotated, Dict, List, Literal, NamedTuple, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .errors import CircuitParseError
from .log import get_logger

logger = get_logger(__name__)

DEFAULT_NAME = "Custom Circuit"
DEFAULT_DESCRIPTION = "Circuit created from code"
# name and description are written inside double quotes on a single line
_LABEL_PATTERN = "^[^\"\r\n\x0b\x0c\x1c\x1d\x1e\x85\u2028\u2029]+$"

SINGLE_QUBIT_GATES = ("H", "X", "Y", "Z")
TWO_QUBIT_GATES = ("CNOT", "SWAP")


# Data model

class SingleQubitGate(BaseModel):
    """``H``, ``X``, ``Y`` or ``Z`` acting on ``qubit``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["H", "X", "Y", "Z"]
    qubit: int = Field(ge=0)
    # 1-based, display ordering only
    position: int = Field(default=1, ge=1)

    @property
    def operands(self) -> Tuple[int, ...]:
        return (self.qubit,)

    def to_source(self) -> str:
        return f"{self.kind}({self.qubit})"


class TwoQubitGate(BaseModel):
    """``CNOT`` or ``SWAP`` acting on ``control`` and ``target``.

    For ``SWAP`` the two fields are simply the two exchanged qubits.  A gate
    without a ``target`` is accepted but leaves the state untouched when run.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["CNOT", "SWAP"]
    control: int = Field(ge=0)
    target: Optional[int] = Field(default=None, ge=0)
    position: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def _distinct_qubits(self) -> "TwoQubitGate":
        if self.target is not None and self.target == self.control:
            raise ValueError(f"{self.kind} needs two distinct qubits, got {self.control} twice")
        return self

    @property
    def operands(self) -> Tuple[int, ...]:
        if self.target is None:
            return (self.control,)
        return (self.control, self.target)

    def to_source(self) -> str:
        return f"{self.kind}({', '.join(str(q) for q in self.operands)})"


Gate = Annotated[Union[SingleQubitGate, TwoQubitGate], Field(discriminator="kind")]


class Circuit(BaseModel):
    """An immutable, ordered list of gates over ``qubits`` qubits."""

    model_config = ConfigDict(frozen=True)

    qubits: int = Field(ge=1)
    gates: Tuple[Gate, ...] = ()
    name: str = Field(default=DEFAULT_NAME, pattern=_LABEL_PATTERN)
    description: str = Field(default=DEFAULT_DESCRIPTION, pattern=_LABEL_PATTERN)

    @model_validator(mode="after")
    def _gates_fit_register(self) -> "Circuit":
        for gate in self.gates:
            for q in gate.operands:
                if q >= self.qubits:
                    raise ValueError(
                        f"gate {gate.to_source()} at position {gate.position} uses qubit {q} "
                        f"but the circuit has {self.qubits} qubits"
                    )
        return self

    def highest_qubit(self) -> int:
        """Return the highest qubit index used by any gate, ``-1`` if none."""
        return max((q for gate in self.gates for q in gate.operands), default=-1)

    def to_source(self) -> str:
        """Return circuit source text that parses back to this circuit."""
        lines = [
            f"qubits {self.qubits}",
            f'name "{self.name}"',
            f'description "{self.description}"',
            "",
        ]
        lines.extend(gate.to_source() for gate in self.gates)
        return "\n".join(lines)


def make_gate(kind: str, operands: Tuple[int, ...], position: int) -> Union[SingleQubitGate, TwoQubitGate]:
    """Build the gate record for ``kind`` applied to ``operands``."""
    if kind in SINGLE_QUBIT_GATES:
        (qubit,) = operands
        return SingleQubitGate(kind=kind, qubit=qubit, position=position)
    if kind in TWO_QUBIT_GATES:
        control, target = operands
        return TwoQubitGate(kind=kind, control=control, target=target, position=position)
    raise ValueError(f"Unknown gate {kind}")


# Parsing

class QubitsDirective(NamedTuple):
    count: int


class NameDirective(NamedTuple):
    text: str


class DescriptionDirective(NamedTuple):
    text: str


class GateCall(NamedTuple):
    kind: str
    operands: Tuple[int, ...]


class Unrecognized(NamedTuple):
    line: str


ParsedLine = Union[QubitsDirective, NameDirective, DescriptionDirective, GateCall, Unrecognized]

_QUBITS_RE = re.compile(r"^qubits\s+(\d+)$", re.IGNORECASE | re.ASCII)
_NAME_RE = re.compile(r'^name\s+"([^"]+)"$', re.IGNORECASE)
_DESCRIPTION_RE = re.compile(r'^description\s+"([^"]+)"$', re.IGNORECASE)
_SINGLE_GATE_RE = re.compile(r"^(H|X|Y|Z)\(\s*(\d+)\s*\)$", re.ASCII)
_TWO_GATE_RE = re.compile(r"^(CNOT|SWAP)\(\s*(\d+)\s*,\s*(\d+)\s*\)$", re.ASCII)


def is_comment(line: str) -> bool:
    stripped = line.strip()
    return not stripped or stripped.startswith("//")


def parse_line(line: str) -> ParsedLine:
    """Classify a single source line.

    Blank lines, comments and malformed lines all come back as
    :class:`Unrecognized`; this function never raises.
    """
    stripped = line.strip()
    if is_comment(stripped):
        return Unrecognized(line)

    match = _QUBITS_RE.match(stripped)
    if match:
        return QubitsDirective(int(match.group(1)))
    match = _NAME_RE.match(stripped)
    if match:
        return NameDirective(match.group(1))
    match = _DESCRIPTION_RE.match(stripped)
    if match:
        return DescriptionDirective(match.group(1))
    match = _SINGLE_GATE_RE.match(stripped)
    if match:
        return GateCall(match.group(1), (int(match.group(2)),))
    match = _TWO_GATE_RE.match(stripped)
    if match:
        return GateCall(match.group(1), (int(match.group(2)), int(match.group(3))))
    return Unrecognized(line)


def _build_circuit(source: str) -> Circuit:
    declared = 0
    name: Optional[str] = None
    description: Optional[str] = None
    gates: List[Union[SingleQubitGate, TwoQubitGate]] = []
    highest = -1

    for lineno, line in enumerate(source.strip().splitlines(), start=1):
        item = parse_line(line)
        if isinstance(item, Unrecognized):
            if not is_comment(item.line):
                logger.debug("skipping unrecognised line %d: %r", lineno, item.line)
            continue
        if isinstance(item, QubitsDirective):
            declared = item.count
        elif isinstance(item, NameDirective):
            name = item.text
        elif isinstance(item, DescriptionDirective):
            description = item.text
        else:
            gates.append(make_gate(item.kind, item.operands, position=len(gates) + 1))
            highest = max(highest, *item.operands)

    # "qubits 0" counts as not declared
    qubits = declared if declared else highest + 1
    return Circuit(
        qubits=max(1, qubits),
        gates=tuple(gates),
        name=name if name is not None else DEFAULT_NAME,
        description=description if description is not None else DEFAULT_DESCRIPTION,
    )


def parse_circuit(source: str) -> Circuit:
    """Parse circuit ``source`` text into a :class:`Circuit`.

    Lines the parser does not understand are ignored.  Any failure while
    building the circuit, for example a ``qubits`` declaration too small for
    the gates that follow, is raised as :class:`~qstep.errors.CircuitParseError`
    with the original exception chained.
    """
    try:
        circuit = _build_circuit(source)
    except Exception as exc:
        logger.debug("failed to parse circuit: %s", exc)
        raise CircuitParseError() from exc
    logger.debug("parsed %r: %d qubits, %d gates", circuit.name, circuit.qubits, len(circuit.gates))
    return circuit


# Sample circuits

SAMPLE_SOURCES: Dict[str, str] = {
    "bell": """// Bell State Circuit
qubits 2
name "Bell State"
description "Creates a maximally entangled state |00⟩ + |11⟩"

H(0)
CNOT(0, 1)""",
    "teleportation": """// Quantum Teleportation Circuit
qubits 3
name "Quantum Teleportation"
description "Protocol to transfer quantum state using entanglement"

H(1)
CNOT(1, 2)
CNOT(0, 1)
H(0)
X(1)
Z(0)""",
    # illustrative gate sequence, not a textbook Grover iteration
    "grover": """// Grover's Algorithm (simplified)
qubits 3
name "Grover's Algorithm"
description "Quantum search algorithm for unstructured databases"

H(0)
H(1)
H(2)
X(0)
X(1)
X(2)
H(2)
CNOT(0, 2)
H(2)
X(0)
X(1)
X(2)
H(0)
H(1)
H(2)""",
}


def sample_circuit(key: str) -> Circuit:
    """Return the parsed sample circuit registered under ``key``."""
    if key not in SAMPLE_SOURCES:
        raise KeyError(f"Unknown sample circuit {key!r}")
    return parse_circuit(SAMPLE_SOURCES[key])
