"""Exception hierarchy for the simulation engine.

Conditions the engine historically reported as ``ValueError`` keep that
base class, so callers catching ``ValueError`` continue to work.
"""

from __future__ import annotations


class QuantumError(Exception):
    """Base class for all engine errors."""


class DimensionMismatch(QuantumError, ValueError):
    """Matrix and vector (or two vectors) have incompatible sizes."""


class DivisionByZero(QuantumError, ZeroDivisionError):
    """Complex division by a value of (numerically) zero magnitude."""


class ZeroVector(QuantumError, ValueError):
    """Normalization requested for a vector with zero norm."""


class InvalidQubitCount(QuantumError, ValueError):
    """Register size outside the supported range."""


class QubitIndexOutOfRange(QuantumError, ValueError):
    """Qubit index does not address a qubit of the register."""


class InvalidQubitPair(QuantumError, ValueError):
    """Control and target of a two-qubit gate are the same qubit."""


class UnknownGate(QuantumError, KeyError):
    """Gate name is not present in the catalog."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Gate '{self.name}' not found in catalog"


class InvalidAlgorithmParameter(QuantumError, ValueError):
    """Algorithm called with a parameter outside its domain."""
