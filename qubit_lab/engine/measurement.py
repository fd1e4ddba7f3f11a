"""Measurement helpers: non-destructive collapse and shot sampling."""

from __future__ import annotations

import numpy as np

from .random_source import RandomSource, resolve_rng
from .register import QuantumRegister


class MeasurementEngine:
    """Runs measurements on copies so the caller's register is preserved."""

    @staticmethod
    def measure_qubit(state: QuantumRegister, qubit: int,
                      rng: RandomSource | None = None) -> tuple[int, QuantumRegister]:
        """Measure a single qubit. Returns (outcome, collapsed_copy)."""
        collapsed = state.copy()
        outcome = collapsed.measure_qubit(qubit, rng)
        return outcome, collapsed

    @staticmethod
    def measure_all(state: QuantumRegister,
                    rng: RandomSource | None = None) -> tuple[int, QuantumRegister]:
        """Measure all qubits. Returns (basis_index, collapsed_copy)."""
        collapsed = state.copy()
        index = collapsed.measure_all(rng)
        return index, collapsed

    @staticmethod
    def sample(state: QuantumRegister, shots: int,
               rng: np.random.Generator | None = None) -> dict[str, int]:
        """Sample 'shots' measurement outcomes without collapse.

        Uses numpy multinomial for efficiency, so ``rng`` must be a numpy
        Generator (or None).
        """
        if shots < 0:
            raise ValueError(f"shots must be non-negative, got {shots}")
        rng = rng or np.random.default_rng()
        probs = state.probabilities()
        total = probs.sum()
        if total > 1e-15:
            probs = probs / total
        else:
            probs = np.ones_like(probs) / len(probs)

        counts_array = rng.multinomial(shots, probs)
        return {state.basis_label(i): int(c)
                for i, c in enumerate(counts_array) if c > 0}

    @staticmethod
    def sample_sequential(state: QuantumRegister, shots: int,
                          rng: RandomSource | None = None) -> dict[str, int]:
        """Shot histogram drawn one measure_all per shot on fresh copies.

        Works with any RandomSource, at the cost of one draw per shot.
        """
        rng = resolve_rng(rng, state.rng)
        counts: dict[str, int] = {}
        for _ in range(shots):
            index, _collapsed = MeasurementEngine.measure_all(state, rng)
            label = state.basis_label(index)
            counts[label] = counts.get(label, 0) + 1
        return counts
