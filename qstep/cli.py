import argparse
import asyncio
import sys

from .circuit import SAMPLE_SOURCES, parse_circuit, sample_circuit
from .config import get_settings
from .engine import QuantumState, run_circuit_async
from .errors import QStepError
from .formatting import format_state
from .log import set_log_level


def _read_source(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as fh:
        return fh.read()


def _print_step(circuit):
    def on_step(state: QuantumState, step: int):
        gate = circuit.gates[step]
        print(f"step {step + 1}: {gate.to_source()}")
        print(format_state(state))
        print()

    return on_step


def cmd_samples(args) -> int:
    for key in SAMPLE_SOURCES:
        circuit = sample_circuit(key)
        print(f"{key:<14} {circuit.name} ({circuit.qubits} qubits, {len(circuit.gates)} gates)")
    return 0


def cmd_show(args) -> int:
    print(SAMPLE_SOURCES[args.key])
    return 0


def cmd_run(args) -> int:
    if args.sample:
        circuit = sample_circuit(args.sample)
    elif args.file:
        circuit = parse_circuit(_read_source(args.file))
    else:
        print("error: give a circuit file or --sample", file=sys.stderr)
        return 2

    print(f"{circuit.name}: {circuit.description}")
    print(f"{circuit.qubits} qubits, {len(circuit.gates)} gates")
    print()
    on_step = _print_step(circuit) if args.steps else None
    delay = args.delay if args.delay is not None else get_settings().step_delay
    result = asyncio.run(run_circuit_async(circuit, on_step=on_step, delay=delay))
    print("final state:")
    print(format_state(result.final_state))
    print(f"({result.execution_time:.3f} ms)")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Run small quantum circuits step by step"
    )
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("samples", help="List sample circuits")

    show = sub.add_parser("show", help="Print the source of a sample circuit")
    show.add_argument("key", choices=sorted(SAMPLE_SOURCES))

    run = sub.add_parser("run", help="Run a circuit file ('-' for stdin) or a sample")
    source = run.add_mutually_exclusive_group()
    source.add_argument("file", nargs="?")
    source.add_argument("--sample", choices=sorted(SAMPLE_SOURCES))
    run.add_argument("--steps", action="store_true", help="Print the state after every gate")
    run.add_argument(
        "--delay", type=float, default=None, help="Seconds to pause between gates (default: QSTEP_STEP_DELAY)"
    )

    args = parser.parse_args(argv)
    set_log_level(args.log_level or get_settings().log_level)

    commands = {"samples": cmd_samples, "show": cmd_show, "run": cmd_run}
    if args.command not in commands:
        parser.print_help()
        return 2
    try:
        return commands[args.command](args)
    except (QStepError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
