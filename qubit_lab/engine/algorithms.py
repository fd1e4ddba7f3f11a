"""Textbook quantum algorithms run step by step on a QuantumRegister.

Each algorithm builds its own register, applies a fixed gate sequence,
measures, and returns a result record with a step log for display.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, Callable

import numpy as np

from . import gates
from .errors import InvalidAlgorithmParameter
from .gates import QuantumMatrix
from .random_source import RandomSource
from .register import QuantumRegister

logger = logging.getLogger(__name__)


# =========================================================================
# Result records
# =========================================================================

@dataclass
class AlgorithmStep:
    """One entry of an algorithm's step log."""
    step: int
    operation: str
    state: str
    description: str
    probabilities: list[float] | None = None

    def to_dict(self) -> dict:
        d = {
            "step": self.step,
            "operation": self.operation,
            "state": self.state,
            "description": self.description,
        }
        if self.probabilities is not None:
            d["probabilities"] = self.probabilities
        return d


@dataclass
class AlgorithmResult:
    """Fields shared by every algorithm result.

    ``register`` is the final (measured) register; it is left out of
    ``to_dict``.
    """
    algorithm: str
    steps: list[AlgorithmStep]
    final_state: str
    register: QuantumRegister = field(repr=False)

    def to_dict(self) -> dict:
        d: dict[str, Any] = {}
        for f in fields(self):
            if f.name == "register":
                continue
            value = getattr(self, f.name)
            if f.name == "steps":
                value = [s.to_dict() for s in value]
            d[f.name] = value
        return d


@dataclass
class DeutschResult(AlgorithmResult):
    function_type: str = ""
    measurement_result: int = 0
    interpretation: str = ""
    is_correct: bool = False
    quantum_advantage: str = ""


@dataclass
class GroverResult(AlgorithmResult):
    target: int = 0
    iterations: int = 0
    measurement_result: int = 0
    found_correct: bool = False
    target_probability: float = 0.0
    quantum_advantage: str = ""

    @property
    def success(self) -> bool:
        return self.found_correct


@dataclass
class BellResult(AlgorithmResult):
    bell_type: str = ""
    entanglement: float = 0.0
    probabilities: list[float] = field(default_factory=list)
    is_maximally_entangled: bool = False


@dataclass
class AdditionResult(AlgorithmResult):
    a: int = 0
    b: int = 0
    measurement_result: int = 0
    sum_bit: int = 0
    carry_bit: int = 0
    decimal: int = 0
    is_correct: bool = False


def _record(steps: list[AlgorithmStep], register: QuantumRegister, operation: str,
            description: str, with_probabilities: bool = False):
    probs = [float(p) for p in register.probabilities()] if with_probabilities else None
    step = AlgorithmStep(len(steps) + 1, operation, register.to_display_string(),
                         description, probs)
    steps.append(step)
    logger.debug("step %d: %s -> %s", step.step, operation, step.state)


def _require_bit(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value not in (0, 1):
        raise InvalidAlgorithmParameter(f"{name} must be 0 or 1, got {value!r}")
    return int(value)


# =========================================================================
# Deutsch
# =========================================================================

# Qubit 0 holds the input x, qubit 1 the ancilla y. Oracles act on the
# sub-index 2*x + y, mapping |x, y> -> |x, y XOR f(x)>.
DEUTSCH_INPUT = 0
DEUTSCH_ANCILLA = 1


def _oracle_constant_0() -> QuantumMatrix:
    return gates.tensor(gates.identity(), gates.identity())


def _oracle_constant_1() -> QuantumMatrix:
    return gates.tensor(gates.identity(), gates.pauli_x())


def _oracle_balanced_identity() -> QuantumMatrix:
    return gates.cnot()


def _oracle_balanced_not() -> QuantumMatrix:
    # CNOT, then X on the ancilla
    return gates.tensor(gates.identity(), gates.pauli_x()) @ gates.cnot()


DEUTSCH_ORACLES: MappingProxyType = MappingProxyType({
    "constant-0": (_oracle_constant_0, True, "f(x) = 0 for all x (constant)"),
    "constant-1": (_oracle_constant_1, True, "f(x) = 1 for all x (constant)"),
    "balanced-identity": (_oracle_balanced_identity, False,
                          "f(0) = 0, f(1) = 1 (balanced, identity)"),
    "balanced-not": (_oracle_balanced_not, False,
                     "f(0) = 1, f(1) = 0 (balanced, negation)"),
})


def deutsch_oracle(function_type: str) -> QuantumMatrix:
    """4x4 oracle U_f for one of the four one-bit functions."""
    if function_type not in DEUTSCH_ORACLES:
        raise InvalidAlgorithmParameter(
            f"Unknown function type {function_type!r}; "
            f"expected one of {', '.join(DEUTSCH_ORACLES)}")
    builder, _constant, _description = DEUTSCH_ORACLES[function_type]
    return builder()


def deutsch_algorithm(function_type: str, rng: RandomSource | None = None) -> DeutschResult:
    """Classify f: {0,1} -> {0,1} as constant or balanced with one oracle call."""
    oracle = deutsch_oracle(function_type)
    _builder, expected_constant, oracle_description = DEUTSCH_ORACLES[function_type]
    logger.debug("Running Deutsch algorithm for %s", function_type)

    steps: list[AlgorithmStep] = []
    register = QuantumRegister.from_basis_state(1 << DEUTSCH_ANCILLA, 2, rng=rng)
    _record(steps, register, "Initialize |01⟩",
            "Input qubit x in |0⟩, ancilla y in |1⟩")

    register.apply_gate("H", DEUTSCH_INPUT)
    register.apply_gate("H", DEUTSCH_ANCILLA)
    _record(steps, register, "H ⊗ H",
            "Superposition |+⟩|-⟩ = (|0⟩+|1⟩)(|0⟩-|1⟩)/2")

    register.apply_two_qubit_gate(oracle, DEUTSCH_INPUT, DEUTSCH_ANCILLA)
    _record(steps, register, f"Oracle U_f ({function_type})",
            f"Apply the oracle for {oracle_description}; "
            f"f(x) is kicked back as the phase (-1)^f(x)")

    register.apply_gate("H", DEUTSCH_INPUT)
    _record(steps, register, "H on input qubit",
            "Interfere the two branches so x = f(0) XOR f(1)")

    outcome = register.measure_qubit(DEUTSCH_INPUT)
    _record(steps, register, "Measure input qubit", f"Measurement result: {outcome}")

    interpretation = "constant" if outcome == 0 else "balanced"
    is_correct = (interpretation == "constant") == expected_constant
    if not is_correct:
        logger.warning("Deutsch classified %s as %s", function_type, interpretation)

    return DeutschResult(
        algorithm="Deutsch",
        steps=steps,
        final_state=register.to_display_string(),
        register=register,
        function_type=function_type,
        measurement_result=outcome,
        interpretation=interpretation,
        is_correct=is_correct,
        quantum_advantage="Classically 2 function calls are needed, quantum needs 1",
    )


# =========================================================================
# Grover (N = 4)
# =========================================================================

GROVER_QUBITS = 2
GROVER_SEARCH_SPACE = 2 ** GROVER_QUBITS


def optimal_grover_iterations(search_space: int = GROVER_SEARCH_SPACE) -> int:
    return int(math.floor(math.pi / 4 * math.sqrt(search_space)))


def apply_grover_oracle(register: QuantumRegister, target: int):
    """Flip the phase of basis state ``target``."""
    register.apply_operator(gates.phase_oracle(register.dimension, target))


def apply_grover_diffuser(register: QuantumRegister):
    """Inversion about the mean: H^n, negate |0...0>, H^n."""
    for q in range(register.num_qubits):
        register.apply_gate("H", q)
    register.apply_operator(gates.phase_oracle(register.dimension, 0))
    for q in range(register.num_qubits):
        register.apply_gate("H", q)


def grover_algorithm(target: int, iterations: int | None = None,
                     rng: RandomSource | None = None) -> GroverResult:
    """Search the 4-element space for ``target`` (0-3)."""
    if (isinstance(target, bool) or not isinstance(target, (int, np.integer))
            or not 0 <= target < GROVER_SEARCH_SPACE):
        raise InvalidAlgorithmParameter(
            f"Target must be an integer in [0, {GROVER_SEARCH_SPACE - 1}], got {target!r}")
    if iterations is None:
        iterations = optimal_grover_iterations()
    if isinstance(iterations, bool) or not isinstance(iterations, (int, np.integer)) or iterations < 0:
        raise InvalidAlgorithmParameter(
            f"Iterations must be a non-negative integer, got {iterations!r}")
    target, iterations = int(target), int(iterations)
    logger.debug("Running Grover search for %d with %d iteration(s)", target, iterations)

    steps: list[AlgorithmStep] = []
    register = QuantumRegister(GROVER_QUBITS, rng=rng)
    label = register.basis_label(target)

    for q in range(GROVER_QUBITS):
        register.apply_gate("H", q)
    _record(steps, register, "H ⊗ H",
            "Uniform superposition (|00⟩+|01⟩+|10⟩+|11⟩)/2", with_probabilities=True)

    for iteration in range(1, iterations + 1):
        apply_grover_oracle(register, target)
        _record(steps, register, f"Iteration {iteration}: oracle",
                f"Mark |{label}⟩ by inverting its phase", with_probabilities=True)

        apply_grover_diffuser(register)
        _record(steps, register, f"Iteration {iteration}: diffuser",
                "Amplify the marked amplitude by inversion about the mean",
                with_probabilities=True)

    target_probability = register.probability(target)
    outcome = register.measure_all()
    _record(steps, register, "Measure", f"Measurement result: {register.basis_label(outcome)}",
            with_probabilities=True)

    return GroverResult(
        algorithm="Grover",
        steps=steps,
        final_state=register.to_display_string(),
        register=register,
        target=target,
        iterations=iterations,
        measurement_result=outcome,
        found_correct=outcome == target,
        target_probability=float(target_probability),
        quantum_advantage=(f"Classically O(N) = {GROVER_SEARCH_SPACE} checks, "
                           f"quantum O(√N) = {iterations} iteration(s)"),
    )


# =========================================================================
# Bell states
# =========================================================================

BELL_TYPES = ("phi+", "phi-", "psi+", "psi-")


def create_bell_state(bell_type: str = "phi+") -> BellResult:
    """Prepare one of the four Bell states from |00⟩."""
    if not isinstance(bell_type, str) or bell_type.lower() not in BELL_TYPES:
        raise InvalidAlgorithmParameter(
            f"Unknown Bell state {bell_type!r}; expected one of {', '.join(BELL_TYPES)}")
    bell_type = bell_type.lower()

    steps: list[AlgorithmStep] = []
    register = QuantumRegister(2)
    _record(steps, register, "Initialize", "Initial state |00⟩")

    register.apply_gate("H", 0)
    _record(steps, register, "H on qubit 0", "Superposition of qubit 0: (|00⟩+|01⟩)/√2")

    register.apply_gate("CNOT", 0, 1)
    _record(steps, register, "CNOT(0→1)", "Entangle: Φ+ = (|00⟩+|11⟩)/√2")

    if bell_type == "phi-":
        register.apply_gate("Z", 0)
        _record(steps, register, "Z on qubit 0", "Φ- = (|00⟩-|11⟩)/√2")
    elif bell_type == "psi+":
        register.apply_gate("X", 1)
        _record(steps, register, "X on qubit 1", "Ψ+ = (|01⟩+|10⟩)/√2")
    elif bell_type == "psi-":
        register.apply_gate("Z", 0)
        register.apply_gate("X", 1)
        _record(steps, register, "Z on qubit 0, X on qubit 1",
                "Ψ- = (|01⟩-|10⟩)/√2 up to a global phase")

    entanglement = register.entanglement_measure()
    return BellResult(
        algorithm="Bell",
        steps=steps,
        final_state=register.to_display_string(),
        register=register,
        bell_type=bell_type,
        entanglement=entanglement,
        probabilities=[float(p) for p in register.probabilities()],
        is_maximally_entangled=entanglement > 0.95,
    )


# =========================================================================
# One-bit quantum addition (half adder)
# =========================================================================

def toffoli_operator(num_qubits: int, control_a: int, control_b: int,
                     target: int) -> QuantumMatrix:
    """Permutation flipping ``target`` when both controls are 1."""
    dim = 2 ** num_qubits
    matrix = np.zeros((dim, dim), dtype=np.complex128)
    controls = (1 << control_a) | (1 << control_b)
    for i in range(dim):
        j = i ^ (1 << target) if (i & controls) == controls else i
        matrix[j, i] = 1.0
    return QuantumMatrix(matrix)


def quantum_addition(a: int, b: int, rng: RandomSource | None = None) -> AdditionResult:
    """Half adder on qubits (a, b, carry): carry = a AND b, sum = a XOR b."""
    a = _require_bit("a", a)
    b = _require_bit("b", b)

    steps: list[AlgorithmStep] = []
    register = QuantumRegister(3, rng=rng)
    if a:
        register.apply_gate("X", 0)
    if b:
        register.apply_gate("X", 1)
    _record(steps, register, "Initialize", f"Set a={a} (qubit 0), b={b} (qubit 1), carry=0")

    register.apply_operator(toffoli_operator(3, 0, 1, 2))
    _record(steps, register, "Toffoli(0,1→2)", "carry = a AND b")

    register.apply_gate("CNOT", 0, 1)
    _record(steps, register, "CNOT(0→1)", "qubit 1 = a XOR b (sum bit)")

    outcome = register.measure_all()
    sum_bit = (outcome >> 1) & 1
    carry_bit = (outcome >> 2) & 1
    decimal = carry_bit * 2 + sum_bit
    _record(steps, register, "Measure",
            f"Result: {a} + {b} = {carry_bit}{sum_bit} (binary)")

    return AdditionResult(
        algorithm="QuantumAddition",
        steps=steps,
        final_state=register.to_display_string(),
        register=register,
        a=a,
        b=b,
        measurement_result=outcome,
        sum_bit=sum_bit,
        carry_bit=carry_bit,
        decimal=decimal,
        is_correct=decimal == a + b,
    )


# =========================================================================
# Algorithm catalog
# =========================================================================

@dataclass(frozen=True)
class AlgorithmInfo:
    name: str
    display_name: str
    description: str
    qubits: int
    complexity: str
    variants: tuple


@dataclass(frozen=True)
class AlgorithmPreset:
    name: str
    display_name: str
    algorithm: str
    parameter: Any
    description: str


ALGORITHMS: MappingProxyType = MappingProxyType({
    "deutsch": AlgorithmInfo(
        "deutsch", "Deutsch's algorithm",
        "Decides whether a one-bit function is constant or balanced with one query",
        2, "O(1) vs O(2) classically", tuple(DEUTSCH_ORACLES)),
    "grover": AlgorithmInfo(
        "grover", "Grover search",
        "Quadratic speed-up for unstructured search",
        2, "O(√N) vs O(N) classically", tuple(range(GROVER_SEARCH_SPACE))),
    "bell": AlgorithmInfo(
        "bell", "Bell states",
        "Prepares the maximally entangled two-qubit states",
        2, "Entanglement demonstration", BELL_TYPES),
    "addition": AlgorithmInfo(
        "addition", "Quantum addition",
        "Adds two bits with reversible gates",
        3, "Reversible arithmetic demonstration", ((0, 0), (0, 1), (1, 0), (1, 1))),
})

PRESETS: tuple[AlgorithmPreset, ...] = (
    AlgorithmPreset("deutsch-constant", "Deutsch: constant function", "deutsch",
                    "constant-0", "Identifies the constant function f(x) = 0"),
    AlgorithmPreset("deutsch-balanced", "Deutsch: balanced function", "deutsch",
                    "balanced-identity", "Identifies the balanced function f(x) = x"),
    AlgorithmPreset("grover-search", "Grover: find an element", "grover",
                    2, "Finds |10⟩ among 4 elements"),
    AlgorithmPreset("bell-phiplus", "Bell: Φ+ state", "bell",
                    "phi+", "Maximally entangled state (|00⟩+|11⟩)/√2"),
    AlgorithmPreset("quantum-addition", "Quantum addition: 1+1", "addition",
                    (1, 1), "Shows 1 + 1 = 10 in binary"),
)


def list_algorithms() -> list[AlgorithmInfo]:
    return list(ALGORITHMS.values())


def recommended_presets() -> list[AlgorithmPreset]:
    return list(PRESETS)


def _run_addition(parameter, rng):
    if parameter is None:
        parameter = (0, 1)
    try:
        a, b = parameter
    except (TypeError, ValueError):
        raise InvalidAlgorithmParameter(
            f"Addition expects a pair of bits, got {parameter!r}") from None
    return quantum_addition(a, b, rng=rng)


_RUNNERS: MappingProxyType = MappingProxyType({
    "deutsch": lambda p, rng: deutsch_algorithm("constant-0" if p is None else p, rng=rng),
    "grover": lambda p, rng: grover_algorithm(0 if p is None else p, rng=rng),
    "bell": lambda p, rng: create_bell_state("phi+" if p is None else p),
    "addition": _run_addition,
})


def run_algorithm(name: str, parameter=None,
                  rng: RandomSource | None = None) -> AlgorithmResult:
    """Run an algorithm from ALGORITHMS by name with its default parameter."""
    runner: Callable | None = _RUNNERS.get(name.lower()) if isinstance(name, str) else None
    if runner is None:
        raise InvalidAlgorithmParameter(f"Unknown algorithm: {name!r}")
    return runner(parameter, rng)
