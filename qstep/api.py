"""HTTP interface to the circuit simulator.

The endpoints mirror what an interactive front end needs: list the sample
circuits, parse circuit source text, and run a circuit returning every
intermediate state together with its text rendering.  Amplitudes are sent as
``[real, imag]`` pairs since JSON has no complex numbers.
"""

from typing import Any, Dict, List, Optional

from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel

from .circuit import SAMPLE_SOURCES, Circuit, parse_circuit, sample_circuit
from .engine import QuantumState, run_circuit
from .errors import CircuitError, CircuitParseError
from .formatting import format_state
from .log import get_logger

logger = get_logger(__name__)

app = FastAPI(
    title="Quantum Step API",
    version="1.0",
    description="Parse small quantum circuits and run them gate by gate.",
)


class ParseRequest(BaseModel):
    source: str


class RunRequest(BaseModel):
    source: Optional[str] = None
    circuit: Optional[Circuit] = None
    sample: Optional[str] = None


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def state_payload(state: QuantumState) -> Dict[str, Any]:
    return {
        "qubit_count": state.qubit_count,
        "amplitudes": [[a.real, a.imag] for a in state.statevector],
        "formatted": format_state(state),
    }


def circuit_summary(key: str, circuit: Circuit) -> Dict[str, Any]:
    return {
        "key": key,
        "name": circuit.name,
        "description": circuit.description,
        "qubits": circuit.qubits,
        "gates": len(circuit.gates),
    }


@app.get("/", response_class=HTMLResponse)
def root():
    return """
    <html>
      <head><title>Quantum Step API</title></head>
      <body style="font-family: sans-serif;">
        <h1>Quantum Step API</h1>
        <p>Try <a href="/docs">/docs</a>, <a href="/samples">/samples</a> or POST circuit source to <code>/run</code>.</p>
      </body>
    </html>
    """


@app.get("/samples")
def list_samples() -> List[Dict[str, Any]]:
    return [circuit_summary(key, sample_circuit(key)) for key in SAMPLE_SOURCES]


@app.get("/samples/{key}")
def get_sample(key: str):
    if key not in SAMPLE_SOURCES:
        return _error(404, f"unknown sample circuit {key!r}")
    return {"source": SAMPLE_SOURCES[key], "circuit": sample_circuit(key).model_dump()}


@app.post("/parse")
def parse(req: ParseRequest):
    try:
        circuit = parse_circuit(req.source)
    except CircuitParseError as exc:
        logger.info("parse request rejected: %s", exc.__cause__)
        return _error(422, str(exc))
    return {"circuit": circuit.model_dump(), "source": circuit.to_source()}


def _resolve_circuit(req: RunRequest) -> Circuit:
    given = [x for x in (req.source, req.circuit, req.sample) if x is not None]
    if len(given) != 1:
        raise CircuitError("provide exactly one of 'source', 'circuit' or 'sample'")
    if req.circuit is not None:
        return req.circuit
    if req.sample is not None:
        if req.sample not in SAMPLE_SOURCES:
            raise CircuitError(f"unknown sample circuit {req.sample!r}")
        return sample_circuit(req.sample)
    return parse_circuit(req.source)


@app.post("/run")
async def run(req: RunRequest):
    try:
        circuit = _resolve_circuit(req)
        # HTTP runs never pause between gates; the work stays off the event loop
        result = await run_in_threadpool(run_circuit, circuit)
    except (CircuitParseError, CircuitError) as exc:
        logger.info("run request rejected: %s", exc)
        return _error(422, str(exc))
    steps = [
        {
            "step": step,
            "gate": gate.to_source(),
            "position": gate.position,
            "state": state_payload(state),
        }
        for step, (gate, state) in enumerate(zip(circuit.gates, result.intermediate_states))
    ]
    return {
        "circuit": circuit.model_dump(),
        "initial_state": state_payload(result.initial_state),
        "steps": steps,
        "final_state": state_payload(result.final_state),
        "execution_time": result.execution_time,
    }
