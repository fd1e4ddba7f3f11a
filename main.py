"""Qubit Lab - command-line entry point.

Usage:
    python main.py --seed 42 deutsch balanced-identity
    python main.py --json grover 3 --iterations 1
    python main.py --output bell.json bell psi- --shots 500
    python main.py add 1 1
    python main.py list
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from qubit_lab.core.config import SimConfig
from qubit_lab.engine.algorithms import (
    BELL_TYPES, DEUTSCH_ORACLES, GROVER_SEARCH_SPACE, AlgorithmResult,
    create_bell_state, deutsch_algorithm, grover_algorithm, list_algorithms,
    quantum_addition, recommended_presets,
)
from qubit_lab.engine.errors import QuantumError
from qubit_lab.engine.measurement import MeasurementEngine
from qubit_lab.engine.random_source import default_rng

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Step-by-step quantum algorithm runner")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for measurement randomness (default: config seed)")
    parser.add_argument("--json", action="store_true", help="Print the result record as JSON")
    parser.add_argument("--output", type=str, default=None, help="Write the JSON record to a file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("deutsch", help="Deutsch's algorithm")
    p.add_argument("function_type", choices=list(DEUTSCH_ORACLES), nargs="?",
                   default="constant-0")

    p = sub.add_parser("grover", help="Grover search over 4 elements")
    p.add_argument("target", type=int, choices=range(GROVER_SEARCH_SPACE), nargs="?", default=0)
    p.add_argument("--iterations", type=int, default=None)

    p = sub.add_parser("bell", help="Bell state preparation")
    p.add_argument("bell_type", choices=list(BELL_TYPES), nargs="?", default="phi+")
    p.add_argument("--shots", type=int, default=None,
                   help="Shots to sample from the prepared state (default: config)")

    p = sub.add_parser("add", help="One-bit quantum addition")
    p.add_argument("a", type=int, choices=(0, 1))
    p.add_argument("b", type=int, choices=(0, 1))

    sub.add_parser("list", help="List algorithms and presets")
    return parser


def run_command(args, config: SimConfig, rng) -> AlgorithmResult:
    if args.command == "deutsch":
        return deutsch_algorithm(args.function_type, rng=rng)
    if args.command == "grover":
        iterations = args.iterations if args.iterations is not None else config.grover_iterations
        return grover_algorithm(args.target, iterations=iterations, rng=rng)
    if args.command == "bell":
        return create_bell_state(args.bell_type)
    if args.command == "add":
        return quantum_addition(args.a, args.b, rng=rng)
    raise ValueError(f"Unknown command: {args.command}")


def print_trace(result: AlgorithmResult, precision: int = 3, counts: dict | None = None):
    print(f"== {result.algorithm} ==")
    for step in result.steps:
        print(f"[{step.step}] {step.operation}")
        print(f"    {step.state}")
        print(f"    {step.description}")
    print(f"Final state: {result.register.to_display_string(precision)}")
    for key, value in result.to_dict().items():
        if key not in ("algorithm", "steps", "final_state"):
            print(f"  {key}: {value}")
    if counts:
        total = sum(counts.values())
        print(f"Measurement counts ({total} shots):")
        for label, count in sorted(counts.items()):
            print(f"  |{label}⟩: {count}")


def print_catalog():
    print("Algorithms:")
    for info in list_algorithms():
        print(f"  {info.name:<10} {info.display_name} ({info.qubits} qubits) - {info.description}")
    print("Presets:")
    for preset in recommended_presets():
        print(f"  {preset.name:<18} {preset.display_name}")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s")

    if args.command == "list":
        print_catalog()
        return 0

    config = SimConfig.load()
    rng = default_rng(args.seed if args.seed is not None else config.seed)
    try:
        result = run_command(args, config, rng)
    except QuantumError as exc:
        logger.error("%s", exc)
        return 1

    # Bell states are left unmeasured; sample them instead
    counts = None
    if args.command == "bell":
        shots = args.shots if args.shots is not None else config.default_shots
        counts = MeasurementEngine.sample(result.register, shots, rng)

    config.add_recent_algorithm(args.command)
    try:
        config.save()
    except OSError as exc:
        logger.warning("Could not save config: %s", exc)

    record = result.to_dict()
    if counts is not None:
        record["counts"] = counts
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            json.dump(record, f, indent=2, ensure_ascii=False)
        print(f"Results saved to {args.output}")
    elif args.json:
        print(json.dumps(record, indent=2, ensure_ascii=False))
    else:
        print_trace(result, config.display_precision, counts)
    return 0


if __name__ == '__main__':
    sys.exit(main())
