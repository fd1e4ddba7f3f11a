"""Quantum gate matrix definitions, QuantumMatrix and the GateKind enumeration."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

import numpy as np

from .errors import DimensionMismatch


class QuantumMatrix:
    """Dense k x k complex operator.

    Two-qubit matrices are indexed by the sub-index 2*control_bit + target_bit.
    """

    def __init__(self, elements):
        data = np.array(elements, dtype=np.complex128)
        if data.ndim != 2:
            raise DimensionMismatch(f"Expected a 2-D matrix, got shape {data.shape}")
        self._data = data

    @property
    def data(self) -> np.ndarray:
        return self._data

    @property
    def rows(self) -> int:
        return self._data.shape[0]

    @property
    def cols(self) -> int:
        return self._data.shape[1]

    @property
    def shape(self) -> tuple[int, int]:
        return self._data.shape

    def element(self, row: int, col: int) -> complex:
        return complex(self._data[row, col])

    def apply(self, vector) -> np.ndarray:
        """Matrix-vector product. Raises DimensionMismatch on size mismatch."""
        vec = np.asarray(vector, dtype=np.complex128).reshape(-1)
        if vec.size != self.cols:
            raise DimensionMismatch(
                f"Matrix has {self.cols} columns but vector has length {vec.size}")
        return self._data @ vec

    def tensor(self, other: QuantumMatrix | np.ndarray) -> QuantumMatrix:
        """Kronecker product self (x) other."""
        return QuantumMatrix(np.kron(self._data, np.asarray(other, dtype=np.complex128)))

    def dagger(self) -> QuantumMatrix:
        return QuantumMatrix(self._data.conj().T)

    def is_unitary(self, tol: float = 1e-10) -> bool:
        if self.rows != self.cols:
            return False
        product = self._data.conj().T @ self._data
        return bool(np.allclose(product, np.eye(self.rows), atol=tol))

    def __matmul__(self, other):
        if isinstance(other, QuantumMatrix):
            return QuantumMatrix(self._data @ other.data)
        return self.apply(other)

    def __array__(self, dtype=None, copy=None):
        if dtype is None:
            return self._data.copy()
        return self._data.astype(dtype)

    def __eq__(self, other) -> bool:
        if not isinstance(other, QuantumMatrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.allclose(self._data, other.data))

    __hash__ = None

    def __repr__(self) -> str:
        return f"QuantumMatrix({self.rows}x{self.cols})"


class GateType(Enum):
    SINGLE = "single"
    PARAMETRIC = "parametric"
    TWO_QUBIT = "two-qubit"
    UNKNOWN = "unknown"


class GateKind(Enum):
    """Closed set of gates the catalog knows how to build."""
    I = "I"
    X = "X"
    Y = "Y"
    Z = "Z"
    H = "H"
    S = "S"
    T = "T"
    RX = "RX"
    RY = "RY"
    RZ = "RZ"
    CNOT = "CNOT"
    CZ = "CZ"
    SWAP = "SWAP"
    CH = "CH"


@dataclass(frozen=True)
class GateDefinition:
    """Immutable description of a catalog gate."""
    name: str
    display_name: str
    gate_type: GateType
    num_qubits: int
    num_params: int
    matrix_func: Callable[..., QuantumMatrix] | None
    symbol: str
    description: str
    kind: GateKind | None = None

    @property
    def is_known(self) -> bool:
        return self.kind is not None


# --- Fixed single-qubit gate matrices ---

_INV_SQRT2 = 1.0 / np.sqrt(2.0)

I_MATRIX = np.eye(2, dtype=np.complex128)

X_MATRIX = np.array([[0, 1],
                     [1, 0]], dtype=np.complex128)

Y_MATRIX = np.array([[0, -1j],
                     [1j, 0]], dtype=np.complex128)

Z_MATRIX = np.array([[1, 0],
                     [0, -1]], dtype=np.complex128)

H_MATRIX = np.array([[_INV_SQRT2, _INV_SQRT2],
                     [_INV_SQRT2, -_INV_SQRT2]], dtype=np.complex128)

S_MATRIX = np.array([[1, 0],
                     [0, 1j]], dtype=np.complex128)

T_MATRIX = np.array([[1, 0],
                     [0, np.exp(1j * np.pi / 4)]], dtype=np.complex128)


# --- Fixed two-qubit gate matrices (sub-index = 2*control + target) ---

CNOT_MATRIX = np.array([
    [1, 0, 0, 0],
    [0, 1, 0, 0],
    [0, 0, 0, 1],
    [0, 0, 1, 0]], dtype=np.complex128)

CZ_MATRIX = np.diag([1, 1, 1, -1]).astype(np.complex128)

SWAP_MATRIX = np.array([
    [1, 0, 0, 0],
    [0, 0, 1, 0],
    [0, 1, 0, 0],
    [0, 0, 0, 1]], dtype=np.complex128)

CH_MATRIX = np.array([
    [1, 0, 0, 0],
    [0, 1, 0, 0],
    [0, 0, _INV_SQRT2, _INV_SQRT2],
    [0, 0, _INV_SQRT2, -_INV_SQRT2]], dtype=np.complex128)


# --- Generators (a fresh QuantumMatrix per call) ---

def identity() -> QuantumMatrix:
    return QuantumMatrix(I_MATRIX)


def pauli_x() -> QuantumMatrix:
    return QuantumMatrix(X_MATRIX)


def pauli_y() -> QuantumMatrix:
    return QuantumMatrix(Y_MATRIX)


def pauli_z() -> QuantumMatrix:
    return QuantumMatrix(Z_MATRIX)


def hadamard() -> QuantumMatrix:
    return QuantumMatrix(H_MATRIX)


def s_gate() -> QuantumMatrix:
    return QuantumMatrix(S_MATRIX)


def t_gate() -> QuantumMatrix:
    return QuantumMatrix(T_MATRIX)


def rx(theta: float) -> QuantumMatrix:
    c, s = np.cos(theta / 2), np.sin(theta / 2)
    return QuantumMatrix([[c, -1j * s],
                          [-1j * s, c]])


def ry(theta: float) -> QuantumMatrix:
    c, s = np.cos(theta / 2), np.sin(theta / 2)
    return QuantumMatrix([[c, -s],
                          [s, c]])


def rz(theta: float) -> QuantumMatrix:
    return QuantumMatrix([[np.exp(-1j * theta / 2), 0],
                          [0, np.exp(1j * theta / 2)]])


def cnot() -> QuantumMatrix:
    return QuantumMatrix(CNOT_MATRIX)


def cz() -> QuantumMatrix:
    return QuantumMatrix(CZ_MATRIX)


def swap() -> QuantumMatrix:
    return QuantumMatrix(SWAP_MATRIX)


def controlled_hadamard() -> QuantumMatrix:
    return QuantumMatrix(CH_MATRIX)


def tensor(*matrices) -> QuantumMatrix:
    """Kronecker product of the given matrices, left to right."""
    result = np.eye(1, dtype=np.complex128)
    for m in matrices:
        result = np.kron(result, np.asarray(m, dtype=np.complex128))
    return QuantumMatrix(result)


def phase_oracle(dimension: int, marked: int) -> QuantumMatrix:
    """Diagonal operator negating the amplitude of basis state ``marked``."""
    diag = np.ones(dimension, dtype=np.complex128)
    diag[marked] = -1.0
    return QuantumMatrix(np.diag(diag))


GATE_GENERATORS: dict[GateKind, Callable[..., QuantumMatrix]] = {
    GateKind.I: identity,
    GateKind.X: pauli_x,
    GateKind.Y: pauli_y,
    GateKind.Z: pauli_z,
    GateKind.H: hadamard,
    GateKind.S: s_gate,
    GateKind.T: t_gate,
    GateKind.RX: rx,
    GateKind.RY: ry,
    GateKind.RZ: rz,
    GateKind.CNOT: cnot,
    GateKind.CZ: cz,
    GateKind.SWAP: swap,
    GateKind.CH: controlled_hadamard,
}

_missing = set(GateKind) - set(GATE_GENERATORS)
if _missing:
    raise RuntimeError(f"No matrix generator for gate kinds: {sorted(k.value for k in _missing)}")


def matrix_for(kind: GateKind, *params: float) -> QuantumMatrix:
    """Build the matrix for ``kind``; rotations take the angle as parameter."""
    return GATE_GENERATORS[kind](*params)
