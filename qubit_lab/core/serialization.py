"""JSON snapshots of registers and single-qubit states."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, asdict
from pathlib import Path

from qubit_lab.engine.errors import DimensionMismatch
from qubit_lab.engine.qubit_state import QubitState
from qubit_lab.engine.register import QuantumRegister

KIND_REGISTER = "register"
KIND_QUBIT = "qubit"


@dataclass
class StateSnapshot:
    """A pure state as plain JSON-compatible data.

    Attributes:
        kind: 'register' or 'qubit'.
        num_qubits: Number of qubits (1 for a qubit snapshot).
        amplitudes: [re, im] pairs in basis-index order.
    """
    kind: str = KIND_REGISTER
    num_qubits: int = 1
    amplitudes: list[list[float]] = field(default_factory=list)

    def to_json(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)

    @classmethod
    def from_json(cls, raw: str) -> StateSnapshot:
        return cls.from_dict(json.loads(raw))

    @classmethod
    def from_dict(cls, d: dict) -> StateSnapshot:
        kind = d.get("kind", KIND_REGISTER)
        if kind not in (KIND_REGISTER, KIND_QUBIT):
            raise ValueError(f"Unknown snapshot kind: {kind!r}")
        amplitudes = [[float(re), float(im)] for re, im in d.get("amplitudes", [])]
        num_qubits = int(d.get("num_qubits", 1))
        if len(amplitudes) != 2 ** num_qubits:
            raise DimensionMismatch(
                f"Snapshot has {len(amplitudes)} amplitudes for {num_qubits} qubit(s)")
        return cls(kind=kind, num_qubits=num_qubits, amplitudes=amplitudes)

    # ---- Conversions ------------------------------------------------------

    @classmethod
    def from_register(cls, register: QuantumRegister) -> StateSnapshot:
        d = register.to_dict()
        return cls(kind=KIND_REGISTER, num_qubits=d["num_qubits"],
                   amplitudes=d["amplitudes"])

    @classmethod
    def from_qubit(cls, state: QubitState) -> StateSnapshot:
        d = state.to_dict()
        return cls(kind=KIND_QUBIT, num_qubits=1, amplitudes=[d["alpha"], d["beta"]])

    def to_register(self, rng=None) -> QuantumRegister:
        return QuantumRegister.from_dict(
            {"num_qubits": self.num_qubits, "amplitudes": self.amplitudes}, rng=rng)

    def to_qubit(self) -> QubitState:
        if self.num_qubits != 1:
            raise DimensionMismatch(
                f"Cannot build a single qubit from a {self.num_qubits}-qubit snapshot")
        alpha, beta = self.amplitudes
        return QubitState.from_dict({"alpha": alpha, "beta": beta})

    def restore(self):
        """The state object this snapshot was taken from."""
        if self.kind == KIND_QUBIT:
            return self.to_qubit()
        return self.to_register()


class StateSerializer:
    """JSON save/load for state snapshots."""

    FILE_EXTENSION = ".qstate"

    @staticmethod
    def snapshot(state: QuantumRegister | QubitState) -> StateSnapshot:
        if isinstance(state, QubitState):
            return StateSnapshot.from_qubit(state)
        return StateSnapshot.from_register(state)

    @staticmethod
    def save(state: QuantumRegister | QubitState | StateSnapshot, filepath: Path | str):
        filepath = Path(filepath)
        if not isinstance(state, StateSnapshot):
            state = StateSerializer.snapshot(state)
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(asdict(state), f, indent=2, ensure_ascii=False)

    @staticmethod
    def load(filepath: Path | str) -> QuantumRegister | QubitState:
        return StateSerializer.load_snapshot(filepath).restore()

    @staticmethod
    def load_snapshot(filepath: Path | str) -> StateSnapshot:
        filepath = Path(filepath)
        with open(filepath, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return StateSnapshot.from_dict(data)
