"""Multi-qubit register backed by a dense state vector.

Basis index encoding: bit i of the index is qubit i, so qubit 0 is the
least significant bit. Labels print the index in binary, qubit n-1 first.
"""

from __future__ import annotations

import logging
import math

import numpy as np

from .analysis import StateAnalysis
from .complex_math import Complex, ZERO_THRESHOLD, DEFAULT_EPS, normalize, to_array
from .errors import (
    DimensionMismatch, InvalidQubitCount, InvalidQubitPair,
    QubitIndexOutOfRange, ZeroVector,
)
from .gate_registry import GATE_CATALOG
from .gates import GateKind
from .qubit_state import QubitState
from .random_source import RandomSource, resolve_rng

logger = logging.getLogger(__name__)

MIN_QUBITS = 1
MAX_QUBITS = 20

# Marginal probabilities this close to 0 or 1 are treated as exact.
_SNAP_EPS = 1e-12
_SIGNIFICANT_PROB = 1e-10


class QuantumRegister:
    """n-qubit pure state as a complex128 numpy array of length 2^n.

    Gate application and measurement mutate the register in place. Every
    operation validates its arguments before touching the amplitudes, so a
    failed call leaves the state unchanged.
    """

    def __init__(self, num_qubits: int, rng: RandomSource | None = None):
        if not isinstance(num_qubits, (int, np.integer)) or isinstance(num_qubits, bool):
            raise InvalidQubitCount(f"num_qubits must be an integer, got {num_qubits!r}")
        if num_qubits < MIN_QUBITS or num_qubits > MAX_QUBITS:
            raise InvalidQubitCount(
                f"num_qubits must be {MIN_QUBITS}-{MAX_QUBITS}, got {num_qubits}")
        self._num_qubits = int(num_qubits)
        self._dimension = 2 ** self._num_qubits
        self._rng = rng
        self._data = np.zeros(self._dimension, dtype=np.complex128)
        self._data[0] = 1.0 + 0.0j  # |00...0>

    # ---- Basic properties -------------------------------------------------

    @property
    def num_qubits(self) -> int:
        return self._num_qubits

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def amplitudes(self) -> np.ndarray:
        """Copy of the amplitude vector."""
        return self._data.copy()

    @property
    def rng(self) -> RandomSource | None:
        return self._rng

    @rng.setter
    def rng(self, value: RandomSource | None):
        self._rng = value

    def amplitude(self, index: int) -> Complex:
        self._check_index(index)
        return Complex.from_complex(self._data[index])

    def probability(self, index: int) -> float:
        self._check_index(index)
        return float(abs(self._data[index]) ** 2)

    def probabilities(self) -> np.ndarray:
        """|amplitude|^2 for each basis state, in index order."""
        return np.abs(self._data) ** 2

    def qubit_probabilities(self, qubit: int) -> tuple[float, float]:
        """Marginal (P(qubit=0), P(qubit=1))."""
        self._check_qubit(qubit)
        bit_set = self._bit_mask(qubit)
        probs = self.probabilities()
        p1 = float(np.sum(probs[bit_set]))
        p0 = float(np.sum(probs[~bit_set]))
        return p0, p1

    def is_normalized(self, eps: float = DEFAULT_EPS) -> bool:
        return abs(float(np.sum(self.probabilities())) - 1.0) < eps

    # ---- State replacement ------------------------------------------------

    def reset(self):
        """Return to |00...0>."""
        self._data = np.zeros(self._dimension, dtype=np.complex128)
        self._data[0] = 1.0 + 0.0j

    def set_state(self, vector):
        """Replace the amplitudes with ``vector`` after normalizing it.

        A zero vector resets the register to |00...0>.
        """
        arr = to_array(vector)
        if arr.size != self._dimension:
            raise DimensionMismatch(
                f"Expected {self._dimension} amplitudes, got {arr.size}")
        try:
            self._data = normalize(arr)
        except ZeroVector:
            logger.warning("Zero amplitude vector supplied, resetting register to |0...0>")
            self.reset()

    # ---- Gate application -------------------------------------------------

    def apply_single_qubit_gate(self, matrix, qubit: int):
        """Apply a 2x2 matrix to ``qubit`` (I x ... x M x ... x I)."""
        m = np.asarray(matrix, dtype=np.complex128)
        if m.shape != (2, 2):
            raise DimensionMismatch(f"Single-qubit gate must be 2x2, got {m.shape}")
        self._check_qubit(qubit)
        self._data = self._contract(m, [qubit])

    def apply_two_qubit_gate(self, matrix, control: int, target: int):
        """Apply a 4x4 matrix indexed by 2*control_bit + target_bit.

        All other qubits keep their bits, so they are untouched.
        """
        m = np.asarray(matrix, dtype=np.complex128)
        if m.shape != (4, 4):
            raise DimensionMismatch(f"Two-qubit gate must be 4x4, got {m.shape}")
        self._check_qubit(control)
        self._check_qubit(target)
        if control == target:
            raise InvalidQubitPair(f"Control and target must differ, both are {control}")
        self._data = self._contract(m, [control, target])

    def apply_operator(self, matrix):
        """Apply a full 2^n x 2^n operator to the whole state vector."""
        m = np.asarray(matrix, dtype=np.complex128)
        if m.shape != (self._dimension, self._dimension):
            raise DimensionMismatch(
                f"Operator must be {self._dimension}x{self._dimension}, got {m.shape}")
        self._data = m @ self._data

    def apply_gate(self, name: str | GateKind, *targets: int, angle: float | None = None):
        """Apply a catalog gate by name, e.g. ``apply_gate("CNOT", 0, 1)``.

        Two-qubit gates take (control, target); rotations need ``angle``.
        """
        if isinstance(name, GateKind):
            definition = GATE_CATALOG.by_kind(name)
        else:
            definition = GATE_CATALOG.get(name)
        if len(targets) != definition.num_qubits:
            raise DimensionMismatch(
                f"Gate '{definition.name}' expects {definition.num_qubits} "
                f"target qubit(s), got {len(targets)}")
        matrix = GATE_CATALOG.matrix(definition.name, angle)
        if definition.num_qubits == 1:
            self.apply_single_qubit_gate(matrix, targets[0])
        else:
            self.apply_two_qubit_gate(matrix, targets[0], targets[1])

    def _contract(self, matrix: np.ndarray, qubits: list[int]) -> np.ndarray:
        """Contract a 2^k x 2^k gate with the targeted tensor axes.

        ``qubits[0]`` is the most significant bit of the gate's sub-index.
        Returns a freshly allocated amplitude vector.
        """
        n = self._num_qubits
        k = len(qubits)

        # Qubit q lives on axis n-1-q of the (2, 2, ..., 2) tensor
        state_tensor = self._data.reshape([2] * n)
        gate_tensor = matrix.reshape([2] * (2 * k))
        axes = [n - 1 - q for q in qubits]

        result = np.tensordot(gate_tensor, state_tensor,
                              axes=(list(range(k, 2 * k)), axes))
        result = np.moveaxis(result, list(range(k)), axes)
        return np.ascontiguousarray(result).reshape(self._dimension)

    # ---- Measurement ------------------------------------------------------

    def measure_all(self, rng: RandomSource | None = None) -> int:
        """Measure every qubit. Collapses to the sampled basis state and returns its index."""
        rng = resolve_rng(rng, self._rng)
        probs = self.probabilities()
        cumulative = np.cumsum(probs)
        draw = rng.random()
        index = int(np.searchsorted(cumulative, draw, side="right"))
        if index >= self._dimension:
            # Accumulated total fell short of the draw
            significant = np.flatnonzero(probs > _SIGNIFICANT_PROB)
            index = int(significant[-1]) if significant.size else int(np.argmax(probs))

        self._data = np.zeros(self._dimension, dtype=np.complex128)
        self._data[index] = 1.0 + 0.0j
        logger.debug("measure_all -> %s", self.basis_label(index))
        return index

    def measure_qubit(self, qubit: int, rng: RandomSource | None = None) -> int:
        """Projectively measure one qubit. Returns 0 or 1.

        Amplitudes inconsistent with the outcome are zeroed and the survivors
        are divided by sqrt(P(outcome)), preserving their relative phases.
        """
        self._check_qubit(qubit)
        rng = resolve_rng(rng, self._rng)
        bit_set = self._bit_mask(qubit)
        p0 = float(np.sum(self.probabilities()[~bit_set]))
        if p0 < _SNAP_EPS:
            p0 = 0.0
        elif p0 > 1.0 - _SNAP_EPS:
            p0 = 1.0

        outcome = 0 if rng.random() < p0 else 1

        keep = bit_set if outcome else ~bit_set
        collapsed = np.where(keep, self._data, 0.0 + 0.0j)
        conditional = float(np.sum(np.abs(collapsed) ** 2))
        if conditional == 0.0:
            logger.warning("Measured qubit %d with zero-probability outcome %d, "
                           "resetting register to |0...0>", qubit, outcome)
            self.reset()
            return outcome

        self._data = collapsed / math.sqrt(conditional)
        logger.debug("measure_qubit(%d) -> %d", qubit, outcome)
        return outcome

    # ---- Entropy / entanglement -------------------------------------------

    def entropy(self) -> float:
        """Shannon entropy (bits) of the basis-state distribution."""
        probs = self.probabilities()
        probs = probs[probs > ZERO_THRESHOLD]
        return float(-np.sum(probs * np.log2(probs)))

    def entanglement_measure(self) -> float:
        """Entanglement indicator in [0, 1].

        n = 2: Von Neumann entropy of qubit 0's reduced state (exact for pure
        states). This departs from the Shannon entropy of the full basis
        distribution, which scores product states such as |++> as 1; here
        they score 0. n > 2: fraction of basis states with non-negligible
        probability, a rough witness only; product states such as |+>^n also
        score 1.
        """
        if self._num_qubits == 1:
            return 0.0
        if self._num_qubits == 2:
            entropy = StateAnalysis.entanglement_entropy(self, [0])
            return float(min(max(entropy, 0.0), 1.0))
        significant = int(np.count_nonzero(self.probabilities() > _SIGNIFICANT_PROB))
        return float(min((significant - 1) / (self._dimension - 1), 1.0))

    def is_maximally_entangled(self, threshold: float = 0.95) -> bool:
        return self.entanglement_measure() > threshold

    # ---- Single-qubit views -----------------------------------------------

    def reduced_density_matrix(self, qubit: int) -> np.ndarray:
        """2x2 reduced density matrix of ``qubit`` (partial trace over the rest)."""
        self._check_qubit(qubit)
        high = 2 ** (self._num_qubits - 1 - qubit)
        low = 2 ** qubit
        psi = self._data.reshape(high, 2, low)
        return np.einsum('aib,ajb->ij', psi, np.conj(psi))

    def bloch_coordinates(self, qubit: int) -> tuple[float, float, float]:
        """(x, y, z) of ``qubit``; inside the unit ball when it is entangled."""
        rho = self.reduced_density_matrix(qubit)
        x = 2.0 * np.real(rho[0, 1])
        y = 2.0 * np.imag(rho[1, 0])
        z = np.real(rho[0, 0] - rho[1, 1])
        return (float(x), float(y), float(z))

    def qubit_view(self, qubit: int) -> QubitState:
        """Pure single-qubit approximation of ``qubit`` for display.

        Magnitudes come from the marginal probabilities and the relative phase
        from the reduced state's coherence. Exact only when the qubit is not
        entangled with the rest of the register.
        """
        rho = self.reduced_density_matrix(qubit)
        p0 = max(float(np.real(rho[0, 0])), 0.0)
        p1 = max(float(np.real(rho[1, 1])), 0.0)
        phase = float(np.angle(rho[1, 0])) if abs(rho[1, 0]) > DEFAULT_EPS else 0.0
        return QubitState(math.sqrt(p0), complex(Complex.from_polar(math.sqrt(p1), phase)))

    # ---- Display ----------------------------------------------------------

    def basis_label(self, index: int) -> str:
        return format(index, f'0{self._num_qubits}b')

    @staticmethod
    def label_to_index(label: str) -> int:
        return int(label, 2)

    def to_display_string(self, precision: int = 3, only_significant: bool = True) -> str:
        """Dirac notation, e.g. ``0.707|00⟩ + 0.707|11⟩``."""
        threshold = 10.0 ** (-precision)
        terms = []
        for i in range(self._dimension):
            amp = Complex.from_complex(self._data[i])
            if only_significant and amp.abs() <= threshold:
                continue
            label = self.basis_label(i)
            if amp.equals(Complex.ONE, threshold):
                terms.append(f"|{label}⟩")
            elif amp.equals(Complex(-1.0, 0.0), threshold):
                terms.append(f"-|{label}⟩")
            else:
                terms.append(f"{amp.to_string(precision)}|{label}⟩")
        if not terms:
            return f"|{self.basis_label(0)}⟩"
        return " + ".join(terms).replace("+ -", "- ")

    def __str__(self) -> str:
        return self.to_display_string()

    def __repr__(self) -> str:
        return f"QuantumRegister(num_qubits={self._num_qubits})"

    # ---- Copy / serialization ---------------------------------------------

    def copy(self) -> QuantumRegister:
        """Deep copy of the amplitudes; the random source is shared."""
        reg = QuantumRegister.__new__(QuantumRegister)
        reg._num_qubits = self._num_qubits
        reg._dimension = self._dimension
        reg._rng = self._rng
        reg._data = self._data.copy()
        return reg

    clone = copy

    def to_dict(self) -> dict:
        return {
            "num_qubits": self._num_qubits,
            "amplitudes": [[float(a.real), float(a.imag)] for a in self._data],
        }

    @classmethod
    def from_dict(cls, data: dict, rng: RandomSource | None = None) -> QuantumRegister:
        reg = cls(data["num_qubits"], rng=rng)
        reg.set_state([complex(re, im) for re, im in data["amplitudes"]])
        return reg

    # ---- Presets (exact closed-form amplitudes) ---------------------------

    @classmethod
    def from_basis_state(cls, index: int, num_qubits: int,
                         rng: RandomSource | None = None) -> QuantumRegister:
        reg = cls(num_qubits, rng=rng)
        reg._check_index(index)
        reg._data[0] = 0.0
        reg._data[index] = 1.0
        return reg

    @classmethod
    def bell_phi_plus(cls) -> QuantumRegister:
        """(|00> + |11>) / sqrt(2)."""
        amp = 1.0 / math.sqrt(2.0)
        return cls._exact(2, {0: amp, 3: amp})

    @classmethod
    def ghz(cls, num_qubits: int = 3) -> QuantumRegister:
        """(|00...0> + |11...1>) / sqrt(2)."""
        if num_qubits < 2:
            raise InvalidQubitCount(f"GHZ state needs at least 2 qubits, got {num_qubits}")
        amp = 1.0 / math.sqrt(2.0)
        return cls._exact(num_qubits, {0: amp, 2 ** num_qubits - 1: amp})

    @classmethod
    def uniform_superposition(cls, num_qubits: int) -> QuantumRegister:
        reg = cls(num_qubits)
        reg._data = np.full(reg._dimension, 1.0 / math.sqrt(reg._dimension),
                            dtype=np.complex128)
        return reg

    @classmethod
    def w_state(cls, num_qubits: int) -> QuantumRegister:
        """Equal superposition of the n basis states with exactly one qubit set."""
        reg = cls(num_qubits)
        amp = 1.0 / math.sqrt(reg.num_qubits)
        return cls._exact(reg.num_qubits, {1 << q: amp for q in range(reg.num_qubits)})

    @classmethod
    def _exact(cls, num_qubits: int, amplitudes: dict[int, complex]) -> QuantumRegister:
        reg = cls(num_qubits)
        reg._data = np.zeros(reg._dimension, dtype=np.complex128)
        for index, amp in amplitudes.items():
            reg._data[index] = amp
        return reg

    # ---- Validation helpers -----------------------------------------------

    def _check_qubit(self, qubit: int):
        if not isinstance(qubit, (int, np.integer)) or isinstance(qubit, bool):
            raise QubitIndexOutOfRange(f"Qubit index must be an integer, got {qubit!r}")
        if not 0 <= qubit < self._num_qubits:
            raise QubitIndexOutOfRange(
                f"Qubit index {qubit} out of range [0, {self._num_qubits - 1}]")

    def _check_index(self, index: int):
        if not 0 <= index < self._dimension:
            raise QubitIndexOutOfRange(
                f"Basis index {index} out of range [0, {self._dimension - 1}]")

    def _bit_mask(self, qubit: int) -> np.ndarray:
        """Boolean array, True where bit ``qubit`` of the index is set."""
        indices = np.arange(self._dimension)
        return ((indices >> qubit) & 1).astype(bool)
