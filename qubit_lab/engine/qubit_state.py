"""Single-qubit pure state alpha|0> + beta|1>."""

from __future__ import annotations

import logging
import math

import numpy as np

from .complex_math import Complex, ComplexLike, ZERO_THRESHOLD, DEFAULT_EPS, as_complex
from .errors import DimensionMismatch
from .gates import H_MATRIX, X_MATRIX, Y_MATRIX, Z_MATRIX, S_MATRIX, T_MATRIX
from .random_source import RandomSource, resolve_rng

logger = logging.getLogger(__name__)

_INV_SQRT2 = 1.0 / math.sqrt(2.0)
_TWO_PI = 2.0 * math.pi


class QubitState:
    """One qubit as a normalized amplitude pair.

    Gate application returns a new state; only ``measure`` mutates in place.
    A degenerate input (norm below 1e-15) becomes |0>.
    """

    def __init__(self, alpha: ComplexLike = 1.0, beta: ComplexLike = 0.0):
        self._data = np.array([complex(as_complex(alpha)), complex(as_complex(beta))],
                              dtype=np.complex128)
        self._normalize()

    def _normalize(self):
        norm = math.sqrt(float(np.sum(np.abs(self._data) ** 2)))
        if norm < ZERO_THRESHOLD or not math.isfinite(norm):
            logger.debug("Degenerate qubit amplitudes, resetting to |0>")
            self._data = np.array([1.0, 0.0], dtype=np.complex128)
        else:
            self._data = self._data / norm

    # ---- Amplitudes -------------------------------------------------------

    @property
    def alpha(self) -> Complex:
        return Complex.from_complex(self._data[0])

    @property
    def beta(self) -> Complex:
        return Complex.from_complex(self._data[1])

    @property
    def data(self) -> np.ndarray:
        return self._data.copy()

    def probability0(self) -> float:
        return float(abs(self._data[0]) ** 2)

    def probability1(self) -> float:
        return float(abs(self._data[1]) ** 2)

    def state_type(self) -> str:
        """'basis-0', 'basis-1' or 'superposition'."""
        if self.probability0() > 0.99:
            return "basis-0"
        if self.probability1() > 0.99:
            return "basis-1"
        return "superposition"

    # ---- Gates ------------------------------------------------------------

    def apply_gate(self, matrix) -> QubitState:
        """Return U|psi> for a 2x2 matrix; self is left untouched."""
        m = np.asarray(matrix, dtype=np.complex128)
        if m.shape != (2, 2):
            raise DimensionMismatch(f"Single-qubit gate must be 2x2, got {m.shape}")
        result = m @ self._data
        return QubitState(complex(result[0]), complex(result[1]))

    def hadamard(self) -> QubitState:
        return self.apply_gate(H_MATRIX)

    def pauli_x(self) -> QubitState:
        return self.apply_gate(X_MATRIX)

    def pauli_y(self) -> QubitState:
        return self.apply_gate(Y_MATRIX)

    def pauli_z(self) -> QubitState:
        return self.apply_gate(Z_MATRIX)

    def s_gate(self) -> QubitState:
        return self.apply_gate(S_MATRIX)

    def t_gate(self) -> QubitState:
        return self.apply_gate(T_MATRIX)

    # ---- Measurement ------------------------------------------------------

    def measure(self, rng: RandomSource | None = None) -> int:
        """Collapse to |0> with probability |alpha|^2, else |1>. Returns the bit."""
        rng = resolve_rng(rng)
        outcome = 0 if rng.random() < self.probability0() else 1
        self._data = np.zeros(2, dtype=np.complex128)
        self._data[outcome] = 1.0
        logger.debug("Qubit measured: %d", outcome)
        return outcome

    # ---- Bloch sphere -----------------------------------------------------

    def bloch_angles(self) -> tuple[float, float]:
        """(theta, phi) with theta in [0, pi] and phi in [0, 2pi)."""
        alpha_abs = min(1.0, max(0.0, float(abs(self._data[0]))))
        theta = 2.0 * math.acos(alpha_abs)
        phi = 0.0
        if abs(self._data[1]) > DEFAULT_EPS:
            phi = float(np.angle(self._data[1]) - np.angle(self._data[0]))
            phi = phi % _TWO_PI
            if phi >= _TWO_PI:
                phi = 0.0
        return theta, phi

    def bloch_coordinates(self) -> tuple[float, float, float]:
        theta, phi = self.bloch_angles()
        return (math.sin(theta) * math.cos(phi),
                math.sin(theta) * math.sin(phi),
                math.cos(theta))

    # ---- Derived quantities -----------------------------------------------

    def entropy(self) -> float:
        """Shannon entropy (bits) of the computational-basis distribution."""
        entropy = 0.0
        for p in (self.probability0(), self.probability1()):
            if p > ZERO_THRESHOLD:
                entropy -= p * math.log2(p)
        return entropy

    def purity(self) -> float:
        return 1.0

    def density_matrix(self) -> np.ndarray:
        return np.outer(self._data, np.conj(self._data))

    def expectation_value(self, pauli: str) -> float:
        x, y, z = self.bloch_coordinates()
        values = {"X": x, "Y": y, "Z": z}
        key = pauli.upper() if isinstance(pauli, str) else pauli
        if key not in values:
            raise ValueError(f"Unknown Pauli: {pauli}. Use 'X', 'Y', or 'Z'.")
        return values[key]

    def equals(self, other: QubitState, eps: float = DEFAULT_EPS) -> bool:
        return self.alpha.equals(other.alpha, eps) and self.beta.equals(other.beta, eps)

    def copy(self) -> QubitState:
        state = QubitState.__new__(QubitState)
        state._data = self._data.copy()
        return state

    def to_display_string(self, precision: int = 3) -> str:
        threshold = 10.0 ** (-precision)
        alpha, beta = self.alpha, self.beta
        alpha_str, beta_str = alpha.to_string(precision), beta.to_string(precision)
        if beta.abs() < threshold:
            return "|0⟩" if alpha.equals(Complex.ONE, threshold) else f"{alpha_str}|0⟩"
        if alpha.abs() < threshold:
            return "|1⟩" if beta.equals(Complex.ONE, threshold) else f"{beta_str}|1⟩"
        sign = "" if beta_str.startswith("-") else "+"
        return f"{alpha_str}|0⟩ {sign}{beta_str}|1⟩"

    def to_dict(self) -> dict:
        return {
            "alpha": [float(self._data[0].real), float(self._data[0].imag)],
            "beta": [float(self._data[1].real), float(self._data[1].imag)],
        }

    @classmethod
    def from_dict(cls, data: dict) -> QubitState:
        a_re, a_im = data["alpha"]
        b_re, b_im = data["beta"]
        return cls(complex(a_re, a_im), complex(b_re, b_im))

    def __str__(self) -> str:
        return self.to_display_string()

    def __repr__(self) -> str:
        return f"QubitState(alpha={self.alpha.to_string(6)}, beta={self.beta.to_string(6)})"

    # ---- Named states -----------------------------------------------------

    @classmethod
    def zero(cls) -> QubitState:
        return cls(1.0, 0.0)

    @classmethod
    def one(cls) -> QubitState:
        return cls(0.0, 1.0)

    @classmethod
    def plus(cls) -> QubitState:
        return cls._exact(_INV_SQRT2, _INV_SQRT2)

    @classmethod
    def minus(cls) -> QubitState:
        return cls._exact(_INV_SQRT2, -_INV_SQRT2)

    @classmethod
    def plus_i(cls) -> QubitState:
        return cls._exact(_INV_SQRT2, 1j * _INV_SQRT2)

    @classmethod
    def minus_i(cls) -> QubitState:
        return cls._exact(_INV_SQRT2, -1j * _INV_SQRT2)

    @classmethod
    def from_bloch_angles(cls, theta: float, phi: float) -> QubitState:
        return cls(math.cos(theta / 2), complex(Complex.exp(phi).scale(math.sin(theta / 2))))

    @classmethod
    def random(cls, rng: RandomSource | None = None) -> QubitState:
        """Uniformly distributed point on the Bloch sphere."""
        rng = resolve_rng(rng)
        theta = math.acos(1.0 - 2.0 * rng.random())
        phi = _TWO_PI * rng.random()
        return cls.from_bloch_angles(theta, phi)

    @classmethod
    def _exact(cls, alpha: complex, beta: complex) -> QubitState:
        # Canonical amplitudes are stored as given, skipping renormalization.
        state = cls.__new__(cls)
        state._data = np.array([alpha, beta], dtype=np.complex128)
        return state
