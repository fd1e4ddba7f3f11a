"""Read-only gate catalog mapping gate names to GateDefinition objects."""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterator, Mapping

from .errors import UnknownGate
from .gates import (
    GateDefinition, GateKind, GateType, GATE_GENERATORS, QuantumMatrix,
)


UNKNOWN_GATE = GateDefinition(
    name="?", display_name="Unknown gate", gate_type=GateType.UNKNOWN,
    num_qubits=0, num_params=0, matrix_func=None, symbol="?",
    description="Unknown gate")


def _builtin_definitions() -> list[GateDefinition]:
    def single(kind, display, symbol, description):
        return GateDefinition(
            name=kind.value, display_name=display, gate_type=GateType.SINGLE,
            num_qubits=1, num_params=0, matrix_func=GATE_GENERATORS[kind],
            symbol=symbol, description=description, kind=kind)

    def rotation(kind, display, symbol, description):
        return GateDefinition(
            name=kind.value, display_name=display, gate_type=GateType.PARAMETRIC,
            num_qubits=1, num_params=1, matrix_func=GATE_GENERATORS[kind],
            symbol=symbol, description=description, kind=kind)

    def two_qubit(kind, display, symbol, description):
        return GateDefinition(
            name=kind.value, display_name=display, gate_type=GateType.TWO_QUBIT,
            num_qubits=2, num_params=0, matrix_func=GATE_GENERATORS[kind],
            symbol=symbol, description=description, kind=kind)

    return [
        single(GateKind.I, "Identity", "I", "Identity matrix"),
        single(GateKind.X, "Pauli-X", "X", "Quantum NOT (pi rotation about X)"),
        single(GateKind.Y, "Pauli-Y", "Y", "pi rotation about Y"),
        single(GateKind.Z, "Pauli-Z", "Z", "Phase flip (pi rotation about Z)"),
        single(GateKind.H, "Hadamard", "H", "Creates an equal superposition"),
        single(GateKind.S, "S Gate", "S", "Phase shift by pi/2"),
        single(GateKind.T, "T Gate", "T", "Phase shift by pi/4"),
        rotation(GateKind.RX, "Rotation-X", "Rx", "Rotation about the X axis"),
        rotation(GateKind.RY, "Rotation-Y", "Ry", "Rotation about the Y axis"),
        rotation(GateKind.RZ, "Rotation-Z", "Rz", "Rotation about the Z axis"),
        two_qubit(GateKind.CNOT, "Controlled-NOT", "⊕",
                  "Controlled NOT, creates entanglement"),
        two_qubit(GateKind.CZ, "Controlled-Z", "CZ", "Conditional phase flip"),
        two_qubit(GateKind.SWAP, "SWAP", "⇄", "Exchanges two qubits"),
        two_qubit(GateKind.CH, "Controlled-Hadamard", "CH", "Controlled Hadamard"),
    ]


class GateCatalog(Mapping[str, GateDefinition]):
    """Immutable mapping of gate name -> GateDefinition.

    Names are matched case-insensitively, so ``"Rx"`` and ``"RX"`` resolve to
    the same definition.
    """

    def __init__(self, definitions: list[GateDefinition]):
        self._gates = MappingProxyType({d.name: d for d in definitions})

    def __getitem__(self, name: str) -> GateDefinition:
        return self.get(name)

    def __iter__(self) -> Iterator[str]:
        return iter(self._gates)

    def __len__(self) -> int:
        return len(self._gates)

    def __contains__(self, name) -> bool:
        return isinstance(name, str) and name.upper() in self._gates

    def lookup(self, name: str) -> GateDefinition:
        """Definition for ``name``, or UNKNOWN_GATE when the name is not known."""
        if not isinstance(name, str):
            return UNKNOWN_GATE
        return self._gates.get(name.upper(), UNKNOWN_GATE)

    def get(self, name: str, default=None) -> GateDefinition:
        """Strict lookup; raises UnknownGate unless a default is given."""
        definition = self.lookup(name)
        if definition is UNKNOWN_GATE:
            if default is not None:
                return default
            raise UnknownGate(name)
        return definition

    def by_kind(self, kind: GateKind) -> GateDefinition:
        return self._gates[kind.value]

    def matrix(self, name: str, angle: float | None = None) -> QuantumMatrix:
        definition = self.get(name)
        if definition.num_params:
            if angle is None:
                raise ValueError(f"Gate '{definition.name}' requires an angle")
            return definition.matrix_func(angle)
        return definition.matrix_func()

    def gate_names(self) -> list[str]:
        return list(self._gates.keys())

    def single_qubit_gates(self) -> list[GateDefinition]:
        return [g for g in self._gates.values() if g.num_qubits == 1]

    def two_qubit_gates(self) -> list[GateDefinition]:
        return [g for g in self._gates.values() if g.num_qubits == 2]

    def parameterized_gates(self) -> list[GateDefinition]:
        return [g for g in self._gates.values() if g.num_params > 0]


GATE_CATALOG = GateCatalog(_builtin_definitions())
