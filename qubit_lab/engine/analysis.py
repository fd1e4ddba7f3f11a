"""Quantitative analysis tools for quantum registers.

All functions operate on NumPy arrays and QuantumRegister objects.

Provides:
- StateAnalysis: fidelity, partial trace, entropy, expectation values, pairwise
  entanglement measures
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from .gates import X_MATRIX, Y_MATRIX, Z_MATRIX

if TYPE_CHECKING:
    from .register import QuantumRegister

_PAULI = {"X": X_MATRIX, "Y": Y_MATRIX, "Z": Z_MATRIX}


class StateAnalysis:
    """Static methods for quantitative analysis of pure states."""

    # ---- Fidelity ---------------------------------------------------------

    @staticmethod
    def state_fidelity(psi: np.ndarray, phi: np.ndarray) -> float:
        """Fidelity between two pure state vectors: |<psi|phi>|^2."""
        return float(np.abs(np.vdot(psi, phi)) ** 2)

    # ---- Entropy ----------------------------------------------------------

    @staticmethod
    def von_neumann_entropy_dm(rho: np.ndarray) -> float:
        """Von Neumann entropy S(rho) = -Tr(rho log2 rho) in bits."""
        eigvals = np.linalg.eigvalsh(rho)
        eigvals = eigvals[eigvals > 1e-15]  # filter near-zero
        return float(max(0.0, -np.sum(eigvals * np.log2(eigvals))))

    @staticmethod
    def entanglement_entropy(
        state: QuantumRegister, subsystem_qubits: list[int]
    ) -> float:
        """Entanglement entropy of a subsystem (in bits).

        Von Neumann entropy of the reduced density matrix obtained by tracing
        out all qubits NOT in subsystem_qubits.
        """
        rho_sub = StateAnalysis.partial_trace(state, subsystem_qubits)
        return StateAnalysis.von_neumann_entropy_dm(rho_sub)

    # ---- Partial trace ----------------------------------------------------

    @staticmethod
    def partial_trace(
        state: QuantumRegister, keep_qubits: list[int]
    ) -> np.ndarray:
        """Trace out all qubits not in keep_qubits.

        The reduced matrix uses the register's bit order: among the kept
        qubits, the highest-numbered one is the most significant bit.
        """
        n = state.num_qubits
        keep = sorted(set(keep_qubits))
        for q in keep:
            if not 0 <= q < n:
                raise ValueError(f"Qubit {q} out of range")
        trace_out = [q for q in range(n) if q not in keep]
        k = len(keep)

        psi = state.amplitudes
        rho_tensor = np.outer(psi, np.conj(psi)).reshape([2] * (2 * n))

        # Qubit q lives on axis n-1-q (bra) and 2n-1-q (ket)
        input_labels = list(range(2 * n))
        for q in trace_out:
            input_labels[2 * n - 1 - q] = input_labels[n - 1 - q]

        ordered = sorted(keep, reverse=True)
        output_labels = [input_labels[n - 1 - q] for q in ordered]
        output_labels += [input_labels[2 * n - 1 - q] for q in ordered]

        rho_reduced = np.einsum(rho_tensor, input_labels, output_labels)
        dim_sub = 2 ** k
        return rho_reduced.reshape(dim_sub, dim_sub)

    # ---- Entanglement measures --------------------------------------------

    @staticmethod
    def mutual_information(
        state: QuantumRegister, qubit_a: int, qubit_b: int
    ) -> float:
        """Quantum mutual information I(A:B) = S(A) + S(B) - S(AB) in bits."""
        sa = StateAnalysis.entanglement_entropy(state, [qubit_a])
        sb = StateAnalysis.entanglement_entropy(state, [qubit_b])
        sab = StateAnalysis.entanglement_entropy(state, [qubit_a, qubit_b])
        return float(max(0.0, sa + sb - sab))

    @staticmethod
    def concurrence(
        state: QuantumRegister, qubit_a: int, qubit_b: int
    ) -> float:
        """Wootters concurrence for a 2-qubit subsystem.

        C = max(0, lambda_1 - lambda_2 - lambda_3 - lambda_4)
        where lambda_i are the square roots of eigenvalues of rho * rho_tilde
        in decreasing order, and rho_tilde = (Y x Y) rho* (Y x Y).
        """
        rho = StateAnalysis.partial_trace(state, [qubit_a, qubit_b])
        yy = np.kron(Y_MATRIX, Y_MATRIX)

        rho_tilde = yy @ np.conj(rho) @ yy
        eigvals = np.real(np.linalg.eigvals(rho @ rho_tilde))
        eigvals = np.maximum(eigvals, 0.0)
        lambdas = np.sort(np.sqrt(eigvals))[::-1]

        c = lambdas[0] - np.sum(lambdas[1:])
        return float(max(0.0, c))

    # ---- Expectation values -----------------------------------------------

    @staticmethod
    def pauli_expectation(
        state: QuantumRegister, pauli: str, qubit: int
    ) -> float:
        """Compute <psi|P|psi> for P in {X, Y, Z} on a single qubit."""
        if pauli.upper() not in _PAULI:
            raise ValueError(f"Unknown Pauli: {pauli}. Use 'X', 'Y', or 'Z'.")
        temp = state.copy()
        temp.apply_single_qubit_gate(_PAULI[pauli.upper()], qubit)
        return float(np.real(np.vdot(state.amplitudes, temp.amplitudes)))
