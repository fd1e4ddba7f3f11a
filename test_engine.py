"""Engine test harness -- complex numbers, qubit states, gates, registers.

Covers the engine's contracts beyond the physics identities in
test_validation.py: error taxonomy, catalog lookups, bit ordering,
partial measurement, single-qubit views and shot sampling.

Run: python test_engine.py   (or: pytest test_engine.py)
"""

from __future__ import annotations

import sys
import os
import math
import operator
import traceback

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import numpy as np
import pytest

from qubit_lab.engine.complex_math import (
    Complex, inner_product, is_normalized, normalize, tensor_product,
)
from qubit_lab.engine.errors import (
    DimensionMismatch, DivisionByZero, InvalidQubitCount, InvalidQubitPair,
    QuantumError, QubitIndexOutOfRange, UnknownGate, ZeroVector,
)
from qubit_lab.engine.gate_registry import GATE_CATALOG, UNKNOWN_GATE
from qubit_lab.engine.gates import (
    GATE_GENERATORS, GateKind, GateType, QuantumMatrix, cnot, hadamard,
    identity, matrix_for, pauli_x, rx, tensor,
)
from qubit_lab.engine.analysis import StateAnalysis
from qubit_lab.engine.measurement import MeasurementEngine
from qubit_lab.engine.qubit_state import QubitState
from qubit_lab.engine.random_source import ScriptedRandom, default_rng
from qubit_lab.engine.register import QuantumRegister


TOLERANCE = 1e-10
PASS_COUNT = 0
FAIL_COUNT = 0


def _check(name: str, passed: bool, details: str = ""):
    global PASS_COUNT, FAIL_COUNT
    status = "PASS" if passed else "FAIL"
    if passed:
        PASS_COUNT += 1
    else:
        FAIL_COUNT += 1
    print(f"  [{status}] {name}")
    if details and not passed:
        print(f"         {details}")
    assert passed, f"{name}: {details}"


def _raises(exc_type, fn, *args, **kwargs) -> bool:
    try:
        fn(*args, **kwargs)
    except exc_type:
        return True
    return False


# =========================================================================
# Complex numbers and vectors
# =========================================================================

def test_complex_numbers():
    print("\nComplex Numbers")
    print("-" * 40)

    a = Complex(3, 4)
    _check("abs(3+4i) == 5", a.abs() == 5.0)
    _check("conj", a.conj() == Complex(3, -4))
    _check("operators delegate", (a + 1) - Complex.I == Complex(4, 3))
    _check("i * i == -1", (Complex.I * Complex.I).equals(-Complex.ONE))
    _check("arg(-1) == pi", abs(Complex(-1, 0).arg() - math.pi) < TOLERANCE)
    _check("i^2 via pow", Complex.I.pow(2).equals(Complex(-1, 0)))
    _check("exp(pi/2) == i", Complex.exp(math.pi / 2).equals(Complex.I))
    _check("from_polar(2, pi) == -2", Complex.from_polar(2, math.pi).equals(Complex.real(-2)))
    _check("is_real / is_imaginary",
           Complex.real(2).is_real() and Complex.imaginary(2).is_imaginary())
    _check("to_string", Complex(0.5, -0.25).to_string(2) == "0.50-0.25i",
           Complex(0.5, -0.25).to_string(2))
    _check("complex interop", complex(Complex.from_complex(1 - 2j)) == 1 - 2j)
    _check("division by ~0 raises DivisionByZero",
           _raises(DivisionByZero, Complex.ONE.div, Complex(1e-9, 0)))
    _check("DivisionByZero is a ZeroDivisionError",
           issubclass(DivisionByZero, ZeroDivisionError))


def test_vector_utilities():
    print("\nVector Utilities")
    print("-" * 40)

    v = normalize([Complex(1, 0), Complex(0, 1)])
    _check("normalize gives unit vector", is_normalized(v))
    _check("normalize zero vector raises", _raises(ZeroVector, normalize, [0, 0]))
    ip = inner_product([1j, 0], [1, 0])
    _check("inner product conjugates first argument", ip.equals(Complex(0, -1)))
    _check("inner product length mismatch",
           _raises(DimensionMismatch, inner_product, [1, 0], [1, 0, 0]))
    prod = tensor_product([0, 1], [1, 0])
    _check("|1> (x) |0> == [0, 0, 1, 0]", np.array_equal(prod, [0, 0, 1, 0]))


# =========================================================================
# Single-qubit state
# =========================================================================

def test_qubit_state():
    print("\nSingle-Qubit State")
    print("-" * 40)

    s = QubitState(3, 4j)
    _check("constructor normalizes", abs(s.probability0() - 0.36) < TOLERANCE)
    _check("degenerate input becomes |0>", QubitState(0, 0).equals(QubitState.zero()))
    _check("state_type", QubitState.one().state_type() == "basis-1"
           and QubitState.plus().state_type() == "superposition")

    theta, phi = QubitState.plus_i().bloch_angles()
    _check("|+i> Bloch angles", abs(theta - math.pi / 2) < TOLERANCE
           and abs(phi - math.pi / 2) < TOLERANCE, f"({theta}, {phi})")
    theta, phi = QubitState.one().bloch_angles()
    _check("|1> Bloch angles", abs(theta - math.pi) < TOLERANCE and phi == 0.0)
    _check("|-> phi == pi", abs(QubitState.minus().bloch_angles()[1] - math.pi) < TOLERANCE)

    rebuilt = QubitState.from_bloch_angles(*QubitState(0.6, 0.8j).bloch_angles())
    _check("Bloch angles round-trip", rebuilt.equals(QubitState(0.6, 0.8j)))

    _check("<X> of |+> == 1", abs(QubitState.plus().expectation_value("X") - 1) < TOLERANCE)
    _check("<Z> of |1> == -1", abs(QubitState.one().expectation_value("z") + 1) < TOLERANCE)
    _check("unknown Pauli raises ValueError",
           _raises(ValueError, QubitState.zero().expectation_value, "Q"))
    _check("entropy of |+> == 1 bit", abs(QubitState.plus().entropy() - 1) < TOLERANCE)
    _check("purity == 1", QubitState.minus().purity() == 1.0)
    rho = QubitState.plus().density_matrix()
    _check("density matrix of |+>", np.allclose(rho, 0.5 * np.ones((2, 2))))
    _check("non-2x2 gate raises", _raises(DimensionMismatch, s.apply_gate, np.eye(4)))


def test_qubit_gates_return_new_state():
    print("\nSingle-Qubit Value Semantics")
    print("-" * 40)

    s = QubitState.zero()
    h = s.hadamard()
    _check("original untouched", s.equals(QubitState.zero()))
    _check("H|0> == |+>", h.equals(QubitState.plus()))
    _check("S T T == Z on |1>", QubitState.one().t_gate().t_gate().s_gate()
           .equals(QubitState.one().pauli_z()))
    _check("Y|0> == i|1>", QubitState.zero().pauli_y().beta.equals(Complex.I))


def test_qubit_measure():
    print("\nSingle-Qubit Measurement")
    print("-" * 40)

    s = QubitState(0.6, 0.8)  # P0 = 0.36
    outcome = s.copy().measure(ScriptedRandom([0.35]))
    _check("draw below P0 -> 0", outcome == 0)
    collapsed = s.copy()
    outcome = collapsed.measure(ScriptedRandom([0.37]))
    _check("draw above P0 -> 1", outcome == 1)
    _check("collapsed to |1>", collapsed.equals(QubitState.one()))

    d = QubitState(0.6, 0.8j).to_dict()
    _check("to_dict layout", set(d) == {"alpha", "beta"}
           and d["alpha"] == pytest.approx([0.6, 0.0]) and d["beta"] == pytest.approx([0.0, 0.8]),
           str(d))
    _check("from_dict round-trip", QubitState.from_dict(d).equals(QubitState(0.6, 0.8j)))


# =========================================================================
# Gates and catalog
# =========================================================================

def test_gate_matrices():
    print("\nGate Matrices")
    print("-" * 40)

    for kind in GateKind:
        params = (0.7,) if kind in (GateKind.RX, GateKind.RY, GateKind.RZ) else ()
        m = matrix_for(kind, *params)
        _check(f"{kind.value} is unitary", m.is_unitary())
    _check("every kind has a generator", set(GATE_GENERATORS) == set(GateKind))
    _check("Rx(pi) == -iX", rx(math.pi) == QuantumMatrix(-1j * np.asarray(pauli_x())))
    _check("H dagger == H", hadamard().dagger() == hadamard())
    _check("apply size mismatch", _raises(DimensionMismatch, hadamard().apply, [1, 0, 0]))
    _check("I (x) X flips the low bit",
           np.array_equal(tensor(identity(), pauli_x()).apply([1, 0, 0, 0]), [0, 1, 0, 0]))
    _check("CNOT maps |10> (control set) to |11>",
           np.array_equal(cnot().apply([0, 0, 1, 0]), [0, 0, 0, 1]))


def test_gate_catalog():
    print("\nGate Catalog")
    print("-" * 40)

    _check("14 gates", len(GATE_CATALOG) == 14)
    _check("lookup is case-insensitive", GATE_CATALOG.lookup("Rx") is GATE_CATALOG.lookup("RX"))
    unknown = GATE_CATALOG.lookup("FOO")
    _check("unknown name -> sentinel", unknown is UNKNOWN_GATE)
    _check("sentinel symbol '?'", unknown.symbol == "?" and unknown.gate_type is GateType.UNKNOWN)
    _check("strict get raises UnknownGate", _raises(UnknownGate, GATE_CATALOG.get, "FOO"))
    _check("UnknownGate is a KeyError", _raises(KeyError, GATE_CATALOG.__getitem__, "FOO"))
    _check("'cnot' in catalog", "cnot" in GATE_CATALOG)
    _check("CNOT symbol", GATE_CATALOG["CNOT"].symbol == "⊕")
    _check("two-qubit listing", {g.name for g in GATE_CATALOG.two_qubit_gates()}
           == {"CNOT", "CZ", "SWAP", "CH"})
    _check("parameterized listing", {g.name for g in GATE_CATALOG.parameterized_gates()}
           == {"RX", "RY", "RZ"})
    _check("rotation without angle raises", _raises(ValueError, GATE_CATALOG.matrix, "RY"))
    _check("catalog is read-only", _raises(TypeError, operator.setitem, GATE_CATALOG, "Q", None))


# =========================================================================
# Register
# =========================================================================

def test_register_construction():
    print("\nRegister Construction")
    print("-" * 40)

    for bad in (0, 21, -1, 2.5, True):
        _check(f"QuantumRegister({bad!r}) rejected",
               _raises(InvalidQubitCount, QuantumRegister, bad))
    reg = QuantumRegister(3)
    _check("starts in |000>", reg.probability(0) == 1.0 and reg.dimension == 8)
    _check("amplitudes is a copy", reg.amplitudes is not reg.amplitudes)
    _check("errors share a base class", issubclass(InvalidQubitCount, QuantumError))


def test_register_bit_order():
    """Qubit 0 is the least significant bit of the basis index."""
    print("\nRegister Bit Order")
    print("-" * 40)

    reg = QuantumRegister(3)
    reg.apply_gate("X", 0)
    _check("X on qubit 0 -> index 1", reg.probability(1) == 1.0)
    _check("label prints qubit 2 first", reg.to_display_string() == "|001⟩",
           reg.to_display_string())
    reg.apply_gate("CNOT", 0, 2)
    _check("CNOT(0->2) -> index 5", reg.probability(5) == 1.0)
    reg.apply_gate(GateKind.SWAP, 0, 1)
    _check("SWAP(0,1) -> index 6", reg.probability(6) == 1.0)
    _check("qubit_probabilities(2) == (0, 1)", reg.qubit_probabilities(2) == (0.0, 1.0))
    _check("label_to_index", QuantumRegister.label_to_index("110") == 6)


def test_register_validation():
    print("\nRegister Validation")
    print("-" * 40)

    reg = QuantumRegister(2)
    reg.apply_gate("H", 0)
    before = reg.amplitudes
    _check("qubit out of range", _raises(QubitIndexOutOfRange, reg.apply_gate, "X", 2))
    _check("control == target", _raises(InvalidQubitPair, reg.apply_gate, "CNOT", 1, 1))
    _check("wrong arity", _raises(DimensionMismatch, reg.apply_gate, "CNOT", 0))
    _check("float qubit index", _raises(QubitIndexOutOfRange, reg.apply_gate, "X", 0.5))
    _check("bool qubit index", _raises(QubitIndexOutOfRange, reg.apply_gate, "X", True))
    _check("bool control index", _raises(QubitIndexOutOfRange, reg.apply_gate, "CNOT", False, 1))
    _check("unknown gate", _raises(UnknownGate, reg.apply_gate, "FOO", 0))
    _check("wrong matrix size",
           _raises(DimensionMismatch, reg.apply_single_qubit_gate, np.eye(4), 0))
    _check("wrong operator size", _raises(DimensionMismatch, reg.apply_operator, np.eye(2)))
    _check("failed calls leave the state unchanged", np.array_equal(reg.amplitudes, before))


def test_measure_qubit_preserves_phases():
    print("\nPartial Measurement")
    print("-" * 40)

    # (|000> + i|011> - |101> + |110>) / 2
    reg = QuantumRegister(3)
    reg.set_state([1, 0, 0, 1j, 0, -1, 1, 0])
    outcome = reg.measure_qubit(0, ScriptedRandom([0.9]))
    _check("P0 = 0.5, draw 0.9 -> 1", outcome == 1)
    amps = reg.amplitudes
    expected = np.zeros(8, dtype=complex)
    expected[3], expected[5] = 1j / math.sqrt(2), -1 / math.sqrt(2)
    _check("survivors renormalized with phases kept", np.allclose(amps, expected),
           f"got {amps}")

    reg = QuantumRegister.bell_phi_plus()
    reg.measure_qubit(1, ScriptedRandom([0.1]))
    _check("measuring one Bell qubit fixes the other", reg.probability(0) == pytest.approx(1.0))


def test_set_state_and_presets():
    print("\nState Replacement and Presets")
    print("-" * 40)

    reg = QuantumRegister(2)
    reg.set_state([1, 1, 1, 1])
    _check("set_state normalizes", reg.is_normalized()
           and np.allclose(reg.probabilities(), 0.25))
    reg.set_state([0, 0, 0, 0])
    _check("zero vector resets to |00>", reg.probability(0) == 1.0)
    _check("length mismatch raises", _raises(DimensionMismatch, reg.set_state, [1, 0]))

    ghz = QuantumRegister.ghz(4)
    _check("GHZ(4) on |0000> and |1111>",
           np.allclose(ghz.probabilities()[[0, 15]], 0.5) and ghz.is_normalized())
    _check("GHZ needs 2 qubits", _raises(InvalidQubitCount, QuantumRegister.ghz, 1))
    _check("W state needs at least 1 qubit", _raises(InvalidQubitCount, QuantumRegister.w_state, 0))
    w = QuantumRegister.w_state(3)
    _check("W(3) on indices 1, 2, 4",
           set(np.flatnonzero(w.probabilities() > 1e-12)) == {1, 2, 4})
    _check("from_basis_state", QuantumRegister.from_basis_state(2, 2).probability(2) == 1.0)

    original = QuantumRegister.bell_phi_plus()
    clone = original.copy()
    clone.apply_gate("X", 0)
    _check("copy does not alias", original.probability(0) == pytest.approx(0.5))


def test_entanglement_and_views():
    print("\nEntanglement and Views")
    print("-" * 40)

    _check("single qubit has no entanglement", QuantumRegister(1).entanglement_measure() == 0.0)

    product = QuantumRegister(2)
    product.apply_gate("H", 0)
    product.apply_gate("H", 1)
    _check("|++> is not entangled", product.entanglement_measure() < 1e-9)
    _check("|++> basis entropy is still 2 bits", abs(product.entropy() - 2.0) < TOLERANCE)

    ghz = QuantumRegister.ghz(3)
    _check("GHZ(3) witness == 1/7", abs(ghz.entanglement_measure() - 1 / 7) < TOLERANCE)
    _check("GHZ(3) entropy == 1", abs(ghz.entropy() - 1.0) < TOLERANCE)

    bell = QuantumRegister.bell_phi_plus()
    _check("Bell qubit sits at the centre of the Bloch ball",
           np.allclose(bell.bloch_coordinates(0), (0, 0, 0), atol=1e-12))
    _check("Bell concurrence == 1", abs(StateAnalysis.concurrence(bell, 0, 1) - 1) < 1e-6)
    _check("Bell mutual information == 2",
           abs(StateAnalysis.mutual_information(bell, 0, 1) - 2) < 1e-9)

    reg = QuantumRegister(2)
    reg.apply_gate("H", 1)
    reg.apply_gate("S", 1)
    view = reg.qubit_view(1)
    _check("qubit_view of unentangled qubit", view.equals(QubitState.plus_i()), repr(view))
    _check("<X> on qubit 1 of |+i>|0> == 0",
           abs(StateAnalysis.pauli_expectation(reg, "X", 1)) < TOLERANCE)


def test_measurement_engine():
    print("\nMeasurement Engine")
    print("-" * 40)

    bell = QuantumRegister.bell_phi_plus()
    index, collapsed = MeasurementEngine.measure_all(bell, ScriptedRandom([0.2]))
    _check("non-destructive measure_all", index == 0 and bell.probability(3) > 0.49
           and collapsed.probability(0) == 1.0)

    counts = MeasurementEngine.sample(bell, 1000, default_rng(5))
    _check("sample only sees 00 and 11", set(counts) <= {"00", "11"} and sum(counts.values()) == 1000)
    _check("sample is roughly balanced", 400 < counts.get("00", 0) < 600, str(counts))
    _check("negative shots raise", _raises(ValueError, MeasurementEngine.sample, bell, -1))

    seq = MeasurementEngine.sample_sequential(bell, 4, ScriptedRandom([0.1, 0.9], cycle=True))
    _check("sequential sampling with scripted draws", seq == {"00": 2, "11": 2}, str(seq))


# =========================================================================
# Main
# =========================================================================

def main():
    global PASS_COUNT, FAIL_COUNT
    print("=" * 50)
    print("Qubit Lab Engine Test Harness")
    print("=" * 50)

    tests = [
        test_complex_numbers,
        test_vector_utilities,
        test_qubit_state,
        test_qubit_gates_return_new_state,
        test_qubit_measure,
        test_gate_matrices,
        test_gate_catalog,
        test_register_construction,
        test_register_bit_order,
        test_register_validation,
        test_measure_qubit_preserves_phases,
        test_set_state_and_presets,
        test_entanglement_and_views,
        test_measurement_engine,
    ]

    for test_fn in tests:
        try:
            test_fn()
        except AssertionError:
            pass  # already reported by _check
        except Exception:
            print(f"\n  [ERROR] {test_fn.__name__} raised an exception:")
            traceback.print_exc()
            FAIL_COUNT += 1

    print("\n" + "=" * 50)
    total = PASS_COUNT + FAIL_COUNT
    print(f"Results: {PASS_COUNT}/{total} passed, {FAIL_COUNT} failed")
    print("ALL TESTS PASSED" if FAIL_COUNT == 0 else "SOME TESTS FAILED")
    print("=" * 50)

    return 0 if FAIL_COUNT == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
